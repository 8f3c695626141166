from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class YouTubeChatMessage:
    """
    Normalized YouTube live chat message.

    The YouTube Data API exposes live chat via `liveChatMessages.list` with a
    poll-driven model. Only the fields the decision pipeline consumes are
    lifted out of the payload; everything else stays available on `raw`.
    """

    raw: Dict[str, Any]
    live_chat_id: str
    message_id: Optional[str]
    author_id: str
    author_name: str
    text: str

    avatar_url: Optional[str] = None
    published_at: Optional[datetime] = None
    received_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    is_owner: bool = False
    is_moderator: bool = False
    is_member: bool = False


@dataclass
class ChatPage:
    """
    One `liveChatMessages.list` response.

    `next_page_token` is the cursor for the following poll and
    `polling_interval_ms` is the server's suggested wait, when it sent one.
    """

    items: List[YouTubeChatMessage] = field(default_factory=list)
    next_page_token: Optional[str] = None
    polling_interval_ms: Optional[int] = None
