from datetime import datetime, timezone
from typing import Dict, List, Optional

import httpx

from services.youtube.auth import YouTubeAuthSession
from services.youtube.models.stream import YouTubeBroadcast
from shared.logging.logger import get_logger

log = get_logger("youtube.livestream")


class YouTubeLivestreamAPI:
    """
    YouTube broadcast discovery API (Data API v3).

    Lists the authorized channel's broadcasts so the caller can pick the
    one that is currently live. Read-only and safe to call repeatedly.
    """

    BROADCASTS_URL = "https://www.googleapis.com/youtube/v3/liveBroadcasts"

    def __init__(
        self,
        *,
        auth: YouTubeAuthSession,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.auth = auth
        self._transport = transport

    # ------------------------------------------------------------

    async def list_broadcasts(self) -> List[YouTubeBroadcast]:
        """
        Return the authorized channel's broadcasts, normalized.

        HTTP failures propagate as httpx errors; the caller decides whether
        they are fatal.
        """
        params = {
            "part": "snippet,contentDetails,status",
            "mine": "true",
        }
        headers = await self.auth.auth_headers()

        async with httpx.AsyncClient(timeout=15.0, transport=self._transport) as client:
            r = await client.get(self.BROADCASTS_URL, params=params, headers=headers)
            r.raise_for_status()
            data = r.json()

        broadcasts = [self._normalize(item) for item in data.get("items", [])]
        log.debug(f"[YouTube] {len(broadcasts)} broadcast(s) listed")
        return broadcasts

    # ------------------------------------------------------------

    def _normalize(self, item: Dict) -> YouTubeBroadcast:
        snippet = item.get("snippet", {})
        status = item.get("status", {})

        return YouTubeBroadcast(
            broadcast_id=item.get("id", ""),
            live_chat_id=snippet.get("liveChatId"),
            lifecycle_status=status.get("lifeCycleStatus"),
            title=snippet.get("title"),
            actual_start=self._parse_ts(snippet.get("actualStartTime")),
        )

    @staticmethod
    def _parse_ts(raw: Optional[str]) -> Optional[datetime]:
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).astimezone(
                timezone.utc
            )
        except ValueError:
            return None
