from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional


@dataclass
class YouTubeBroadcast:
    """
    Lightweight metadata carrier for one `liveBroadcasts.list` item.
    """

    broadcast_id: str
    live_chat_id: Optional[str] = None
    lifecycle_status: Optional[str] = None  # e.g., "live", "testing", "complete"
    title: Optional[str] = None
    actual_start: Optional[datetime] = None

    def is_live(self) -> bool:
        return self.lifecycle_status == "live"


@dataclass(frozen=True)
class StreamSession:
    """
    The broadcast the bot is attached to, fixed for the process lifetime.

    `started_at` is when the bot attached, not when the broadcast began; it
    only feeds the `{uptime}` placeholder.
    """

    live_chat_id: str
    started_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    broadcast_id: Optional[str] = None
    title: Optional[str] = None

    def uptime(self, now: Optional[datetime] = None) -> timedelta:
        now = now or datetime.now(timezone.utc)
        return now - self.started_at
