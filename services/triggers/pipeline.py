from __future__ import annotations

from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from core.context import DEFAULT_WELCOME_MESSAGE
from services.relay.webhook import WebhookRelay
from services.triggers.commands import CommandTable, format_uptime, render_response
from services.triggers.moderation import ModerationFilter
from services.youtube.models.message import YouTubeChatMessage
from services.youtube.models.stream import StreamSession
from shared.logging.logger import get_logger
from shared.storage.participants import ParticipantStore

log = get_logger("triggers.pipeline")


ChatSender = Callable[[str], Awaitable[None]]


class ChatMessagePipeline:
    """
    Per-message decision pipeline.

    Steps run in a fixed order for every message:
    1. relay the message to the webhook
    2. welcome first-time authors (does not stop processing)
    3. moderation (a hit stops processing)
    4. command dispatch

    All collaborators are passed in so the pipeline can run against fakes.
    Sends are best-effort: a failed reply is logged and processing moves on.
    """

    def __init__(
        self,
        *,
        session: StreamSession,
        send: ChatSender,
        commands: CommandTable,
        moderation: ModerationFilter,
        participants: ParticipantStore,
        relay: WebhookRelay,
        welcome_template: str = DEFAULT_WELCOME_MESSAGE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.session = session
        self._send = send
        self.commands = commands
        self.moderation = moderation
        self.participants = participants
        self.relay = relay
        self.welcome_template = welcome_template
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # ------------------------------------------------------------------ #

    async def handle(self, message: YouTubeChatMessage) -> None:
        user = message.author_name
        text = message.text

        log.info(f"{user}: {text}")

        await self._relay(user, message.avatar_url, text)

        if message.author_id not in self.participants:
            self.participants.add(message.author_id)
            await self._reply(self.welcome_template.replace("{user}", user))

        word = self.moderation.find_banned_word(text)
        if word is not None:
            log.info(f"[moderation] {user} used banned word '{word}'")
            await self._reply(self.moderation.warning_for(user))
            await self._relay(
                ModerationFilter.NOTICE_USERNAME,
                None,
                self.moderation.relay_notice(user, text),
            )
            return

        match = self.commands.lookup(text)
        if match is None:
            return

        reply = render_response(
            match.command.response,
            user=user,
            uptime=self.uptime(),
            args=match.args,
        )
        log.debug(f"[command] '{match.key}' from {user}")
        await self._reply(reply)

    def uptime(self) -> str:
        elapsed = self.session.uptime(self._clock())
        return format_uptime(int(elapsed.total_seconds() * 1000))

    # ------------------------------------------------------------------ #

    async def _relay(self, user: str, avatar_url: Optional[str], text: str) -> None:
        try:
            await self.relay.forward(user, avatar_url, text)
        except Exception as e:
            log.error(f"Relay error ignored: {e}")

    async def _reply(self, text: str) -> None:
        try:
            await self._send(text)
        except Exception as e:
            log.error(f"Failed to send chat reply: {e}")
