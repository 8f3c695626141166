import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional

from services.triggers.pipeline import ChatMessagePipeline
from services.youtube.api.chat import YouTubeChatClient
from services.youtube.api.errors import PollErrorKind, classify_error
from shared.logging.logger import get_logger

log = get_logger("youtube.chat_worker")


class PollerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    PROCESSING = "processing"
    BACKOFF = "backoff"
    SCHEDULED = "scheduled"


DEFAULT_POLL_INTERVAL_MS = 5000
MIN_POLL_INTERVAL_MS = 1000

BACKOFF_MS = {
    PollErrorKind.RATE_LIMITED: 60000,
    PollErrorKind.TRANSIENT: 10000,
    PollErrorKind.FATAL: 10000,
}


class YouTubeChatWorker:
    """
    Scheduler-owned YouTube chat poller.

    Responsibilities:
    - Own the page-token cursor and the first-run flag
    - Discard the backlog returned by the very first poll
    - Feed every later message, in order and one at a time, to the pipeline
    - Pick the next delay from the server hint or from the error backoff
    - Never let a poll failure escape the loop
    """

    def __init__(
        self,
        *,
        client: YouTubeChatClient,
        pipeline: ChatMessagePipeline,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if not client.live_chat_id:
            raise RuntimeError("YouTube live_chat_id is required")

        self._client = client
        self._pipeline = pipeline
        self._sleep = sleep

        self.live_chat_id = client.live_chat_id
        self.page_token: Optional[str] = None
        self.first_run = True
        self.state = PollerState.IDLE

    # ------------------------------------------------------------------ #

    async def run(self) -> None:
        log.info(f"[YouTube][{self.live_chat_id}] Chat worker starting")
        try:
            while True:
                delay_ms = await self.poll_once()
                await self._sleep(delay_ms / 1000.0)
        except asyncio.CancelledError:
            log.info(f"[YouTube][{self.live_chat_id}] Chat worker stopped")
            raise

    async def poll_once(self) -> int:
        """
        Run one poll cycle and return the delay before the next one, in ms.
        """
        self.state = PollerState.POLLING
        try:
            page = await self._client.list_messages(self.page_token)

            if self.first_run:
                log.info(
                    f"[YouTube][{self.live_chat_id}] Skipping {len(page.items)} "
                    "backlog message(s) from first poll"
                )
            else:
                self.state = PollerState.PROCESSING
                for message in page.items:
                    await self._pipeline.handle(message)

            self.first_run = False
            self.page_token = page.next_page_token
            delay_ms = self.next_interval(page.polling_interval_ms)

        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.state = PollerState.BACKOFF
            kind = classify_error(e)
            delay_ms = BACKOFF_MS[kind]

            if kind is PollErrorKind.FATAL:
                log.error(
                    f"[YouTube][{self.live_chat_id}] Polling error ({kind.value}): {e}"
                )
            else:
                log.warning(
                    f"[YouTube][{self.live_chat_id}] Polling error ({kind.value}), "
                    f"retrying in {delay_ms}ms: {e}"
                )

        self.state = PollerState.SCHEDULED
        log.debug(f"[YouTube][{self.live_chat_id}] Next poll in {delay_ms}ms")
        return delay_ms

    @staticmethod
    def next_interval(suggested_ms: Optional[int]) -> int:
        if not suggested_ms:
            return DEFAULT_POLL_INTERVAL_MS
        return max(int(suggested_ms), MIN_POLL_INTERVAL_MS)
