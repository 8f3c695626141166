from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from services.youtube.api.errors import ChatApiError, PollErrorKind
from services.youtube.auth import YouTubeAuthSession
from services.youtube.models.message import ChatPage, YouTubeChatMessage
from shared.logging.logger import get_logger

log = get_logger("youtube.chat")


class YouTubeChatClient:
    """
    Transport for YouTube Live Chat via the Data API v3.

    Responsibilities:
    - List one page of liveChat/messages for a given page token
    - Insert text messages into the live chat
    - Normalize payloads into YouTubeChatMessage
    - Convert HTTP and network failures into typed ChatApiError

    Polling cadence and cursor ownership live in the chat worker; this class
    is stateless between calls.
    """

    MESSAGES_URL = "https://www.googleapis.com/youtube/v3/liveChat/messages"

    def __init__(
        self,
        *,
        auth: YouTubeAuthSession,
        live_chat_id: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not live_chat_id:
            raise RuntimeError("YouTube live_chat_id is required")

        self.auth = auth
        self.live_chat_id = live_chat_id
        self._timeout = timeout
        self._transport = transport

    # ------------------------------------------------------------------ #
    # API calls
    # ------------------------------------------------------------------ #

    async def list_messages(self, page_token: Optional[str] = None) -> ChatPage:
        params = {
            "part": "snippet,authorDetails",
            "liveChatId": self.live_chat_id,
        }
        if page_token:
            params["pageToken"] = page_token

        data = await self._request("GET", params=params)

        items: List[YouTubeChatMessage] = []
        for item in data.get("items", []):
            message = self._normalize_message(item)
            if message is not None:
                items.append(message)

        interval_ms = data.get("pollingIntervalMillis")
        return ChatPage(
            items=items,
            next_page_token=data.get("nextPageToken"),
            polling_interval_ms=(
                int(interval_ms) if isinstance(interval_ms, (int, float)) else None
            ),
        )

    async def send_message(self, text: str) -> None:
        body = {
            "snippet": {
                "liveChatId": self.live_chat_id,
                "type": "textMessageEvent",
                "textMessageDetails": {"messageText": text},
            }
        }
        await self._request("POST", params={"part": "snippet"}, json=body)
        log.debug(f"[YouTube][{self.live_chat_id}] Sent: {text}")

    # ------------------------------------------------------------------ #

    async def _request(
        self,
        method: str,
        *,
        params: Dict[str, str],
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        headers = await self.auth.auth_headers()

        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            try:
                response = await client.request(
                    method,
                    self.MESSAGES_URL,
                    params=params,
                    json=json,
                    headers=headers,
                )
            except httpx.HTTPError as e:
                raise ChatApiError(
                    f"{type(e).__name__}: {e}", kind=PollErrorKind.TRANSIENT
                ) from e

        if response.is_error:
            raise ChatApiError.from_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise ChatApiError(
                f"Invalid JSON from liveChat/messages: {e}",
                kind=PollErrorKind.TRANSIENT,
                status_code=response.status_code,
            ) from e

    # ------------------------------------------------------------------ #
    # Normalization helpers
    # ------------------------------------------------------------------ #

    def _normalize_message(self, payload: Dict) -> Optional[YouTubeChatMessage]:
        """
        Convert a YouTube liveChatMessage resource into a normalized shape.

        Events without display text (deletions, bans, mode changes) are
        dropped.
        """
        snippet = payload.get("snippet", {})
        author_details = payload.get("authorDetails", {})

        text = snippet.get("displayMessage")
        if not text:
            log.debug(
                f"[YouTube][{self.live_chat_id}] Skipping event without text "
                f"(type={snippet.get('type')})"
            )
            return None

        author_name = author_details.get("displayName") or "unknown"

        return YouTubeChatMessage(
            raw=payload,
            live_chat_id=snippet.get("liveChatId", self.live_chat_id),
            message_id=payload.get("id"),
            author_id=author_details.get("channelId") or author_name,
            author_name=author_name,
            text=text,
            avatar_url=author_details.get("profileImageUrl"),
            published_at=self._parse_published_at(snippet.get("publishedAt")),
            is_owner=bool(author_details.get("isChatOwner")),
            is_moderator=bool(author_details.get("isChatModerator")),
            is_member=bool(author_details.get("isChatSponsor")),
        )

    @staticmethod
    def _parse_published_at(raw: Optional[str]) -> Optional[datetime]:
        if not raw:
            return None
        try:
            ts = datetime.fromisoformat(raw.replace("Z", "+00:00"))
            return ts.astimezone(timezone.utc)
        except ValueError:
            return None
