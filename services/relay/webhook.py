from __future__ import annotations

from typing import Optional

import httpx

from core.context import WebhookConfig
from shared.logging.logger import get_logger

log = get_logger("relay.webhook")


class WebhookRelay:
    """
    One-way forwarder of chat activity to a Discord-compatible webhook.

    Delivery is best-effort: failures are logged and reported through the
    return value, never raised.
    """

    # Discord rejects message content above this length
    MAX_CONTENT_LENGTH = 2000

    def __init__(
        self,
        config: Optional[WebhookConfig],
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = config
        self._timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._config and self._config.active)

    async def forward(
        self,
        display_name: str,
        avatar_url: Optional[str],
        text: str,
    ) -> bool:
        if not self.enabled:
            return True

        content = text
        if len(content) > self.MAX_CONTENT_LENGTH:
            content = content[: self.MAX_CONTENT_LENGTH - 1] + "…"

        payload = {
            "username": display_name,
            "avatar_url": avatar_url,
            "content": content,
        }

        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            try:
                resp = await client.post(self._config.url, json=payload)
                resp.raise_for_status()
            except httpx.HTTPError as e:
                log.error(f"Failed to relay message from {display_name}: {e}")
                return False

        log.debug(f"Relayed message from {display_name}")
        return True
