"""
Timed chat announcements.

Each configured message gets its own task that sleeps for its interval and
posts the literal text, forever. Announcements share the chat send
primitive with the poller but no other state.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Iterable, List

from core.context import TimedMessage
from shared.logging.logger import get_logger

log = get_logger("announcements.timed")


class TimedAnnouncer:
    def __init__(
        self,
        messages: Iterable[TimedMessage],
        send: Callable[[str], Awaitable[None]],
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.messages = tuple(messages)
        self._send = send
        self._sleep = sleep
        self._tasks: List[asyncio.Task] = []

    # --------------------------------------------------
    # Control
    # --------------------------------------------------

    def start(self) -> List[asyncio.Task]:
        """Create one task per timed message. Must run inside an event loop."""
        if self._tasks:
            log.warning("Timed announcer already started — skipping")
            return list(self._tasks)

        for index, timed in enumerate(self.messages):
            task = asyncio.create_task(
                self.run_timer(timed), name=f"timed-message-{index}"
            )
            self._tasks.append(task)

        log.info(f"Started {len(self._tasks)} timed message(s)")
        return list(self._tasks)

    async def stop(self) -> None:
        for task in self._tasks:
            if not task.done():
                task.cancel()

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        self._tasks.clear()

    # --------------------------------------------------

    async def run_timer(self, timed: TimedMessage) -> None:
        while True:
            await self._sleep(timed.interval_ms / 1000.0)
            await self.announce(timed)

    async def announce(self, timed: TimedMessage) -> bool:
        try:
            await self._send(timed.message)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            log.error(f"Timed message failed (every {timed.interval_ms}ms): {e}")
            return False

        log.debug(f"Timed message sent: {timed.message}")
        return True
