from typing import Optional

import httpx

from core.errors import NoLiveBroadcast, StartupFatal
from services.youtube.api.livestream import YouTubeLivestreamAPI
from services.youtube.models.stream import StreamSession
from shared.logging.logger import get_logger

log = get_logger("youtube.livestream_worker")


class YouTubeLivestreamWorker:
    """
    Startup-time resolution of the live chat to attach to.

    Responsibilities:
    - List the authorized channel's broadcasts
    - Select the one whose lifecycle status is exactly "live"
    - Surface a StreamSession, or fail startup with NoLiveBroadcast
    """

    def __init__(self, *, api: YouTubeLivestreamAPI):
        self._api = api
        self.session: Optional[StreamSession] = None

    # ------------------------------------------------------------------ #

    async def run(self) -> StreamSession:
        log.info("Looking up active YouTube broadcast")

        try:
            broadcasts = await self._api.list_broadcasts()
        except httpx.HTTPError as e:
            raise StartupFatal(f"Broadcast lookup failed: {e}") from e

        if not broadcasts:
            raise NoLiveBroadcast(
                "No active live stream found! Please start a YouTube live "
                "broadcast and try again."
            )

        active = next((b for b in broadcasts if b.is_live()), None)
        if active is None:
            raise NoLiveBroadcast(
                "No currently active broadcast! Please make sure your stream is live."
            )

        if not active.live_chat_id:
            raise NoLiveBroadcast(
                f"Broadcast {active.broadcast_id} is live but has no liveChatId"
            )

        self.session = StreamSession(
            live_chat_id=active.live_chat_id,
            broadcast_id=active.broadcast_id,
            title=active.title,
        )
        log.info(
            f"Live Chat ID: {active.live_chat_id} "
            f"(broadcast={active.broadcast_id}, title={active.title!r})"
        )
        return self.session
