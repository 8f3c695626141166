import asyncio
from typing import List, Optional

from services.announcements.timed import TimedAnnouncer
from services.youtube.workers.chat_worker import YouTubeChatWorker
from shared.logging.logger import get_logger

log = get_logger("core.scheduler")


class Scheduler:
    """
    Owns the long-running tasks of one bot session.

    Two independent schedules run side by side: the chat worker's
    self-rescheduling poll loop and the timed announcer's interval tasks.
    """

    def __init__(self):
        self._tasks: List[asyncio.Task] = []
        self._announcer: Optional[TimedAnnouncer] = None

    # ------------------------------------------------------------

    def start(
        self,
        *,
        chat_worker: YouTubeChatWorker,
        announcer: Optional[TimedAnnouncer] = None,
    ) -> None:
        if self._tasks:
            log.warning("Scheduler already started — skipping")
            return

        log.debug("Scheduling chat worker task")
        self._tasks.append(
            asyncio.create_task(chat_worker.run(), name="youtube-chat-worker")
        )

        if announcer and announcer.messages:
            self._announcer = announcer
            self._tasks.extend(announcer.start())
        else:
            log.info("No timed messages configured")

    @property
    def tasks(self) -> List[asyncio.Task]:
        return list(self._tasks)

    # ------------------------------------------------------------

    async def shutdown(self) -> None:
        log.info("Scheduler shutdown initiated")

        if self._announcer:
            await self._announcer.stop()
            self._announcer = None

        for task in self._tasks:
            if not task.done():
                task.cancel()

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        self._tasks.clear()
        log.info("Scheduler shutdown complete")
