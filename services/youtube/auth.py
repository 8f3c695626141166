"""
OAuth2 session for the YouTube Data API (installed-app flow).

Credentials come from a Google Cloud Console `client_secret.json`. The first
run prints a consent URL and asks for the returned code; the resulting token
(including the refresh token) is cached in `token.json` and refreshed
transparently afterwards.
"""

from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

import httpx

from core.errors import AuthorizationError
from shared.logging.logger import get_logger

log = get_logger("youtube.auth")


SCOPES = ["https://www.googleapis.com/auth/youtube.force-ssl"]


class YouTubeAuthSession:
    AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"

    # Refresh this many seconds before the token actually expires
    EXPIRY_SKEW_SECONDS = 60

    def __init__(
        self,
        *,
        client_secret_path: Path | str,
        token_path: Path | str,
        prompt: Callable[[str], str] = input,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_secret_path = Path(client_secret_path)
        self.token_path = Path(token_path)
        self._prompt = prompt
        self._transport = transport

        self._client: Dict[str, Any] = {}
        self._token: Dict[str, Any] = {}

    # ------------------------------------------------------------------ #
    # Startup
    # ------------------------------------------------------------------ #

    async def authorize(self) -> None:
        """
        Load client credentials and a usable token, prompting if needed.

        Raises AuthorizationError on any failure.
        """
        self._client = self._load_client_secret()

        if self.token_path.exists():
            try:
                self._token = json.loads(self.token_path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                raise AuthorizationError(f"Failed to load {self.token_path}: {e}") from e
            log.info(f"Loaded OAuth token from {self.token_path}")
            return

        log.info(f"Authorize this app by visiting: {self.consent_url()}")
        code = await asyncio.to_thread(
            self._prompt, "Enter the code from that page: "
        )
        code = code.strip()
        if not code:
            raise AuthorizationError("No authorization code entered")

        try:
            token = await self._request_token(
                {
                    "code": code,
                    "grant_type": "authorization_code",
                    "redirect_uri": self._redirect_uri(),
                }
            )
        except httpx.HTTPError as e:
            raise AuthorizationError(f"Failed to get OAuth2 token: {e}") from e

        self._store_token(token)
        log.info("OAuth2 token saved successfully.")

    def consent_url(self) -> str:
        return self.AUTH_URL + "?" + urlencode(
            {
                "client_id": self._client.get("client_id", ""),
                "redirect_uri": self._redirect_uri(),
                "response_type": "code",
                "scope": " ".join(SCOPES),
                "access_type": "offline",
            }
        )

    # ------------------------------------------------------------------ #
    # Token access
    # ------------------------------------------------------------------ #

    async def get_access_token(self) -> str:
        if not self._token:
            raise AuthorizationError("OAuth session is not authorized")

        if self._is_expired():
            await self._refresh()

        return self._token["access_token"]

    async def auth_headers(self) -> Dict[str, str]:
        token = await self.get_access_token()
        return {"Authorization": f"Bearer {token}"}

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _load_client_secret(self) -> Dict[str, Any]:
        try:
            data = json.loads(self.client_secret_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise AuthorizationError(
                f"Failed to load {self.client_secret_path}: {e}"
            ) from e

        installed = data.get("installed") if isinstance(data, dict) else None
        if not installed or not installed.get("client_id"):
            raise AuthorizationError(
                f"Missing or invalid {self.client_secret_path}. Download it from "
                "Google Cloud Console (OAuth client of type 'Desktop app')."
            )
        return installed

    def _redirect_uri(self) -> str:
        uris = self._client.get("redirect_uris") or []
        return uris[0] if uris else "urn:ietf:wg:oauth:2.0:oob"

    def _is_expired(self) -> bool:
        if not self._token.get("access_token"):
            return True
        expiry_ms = self._token.get("expiry_date")
        if not expiry_ms:
            return False
        return time.time() + self.EXPIRY_SKEW_SECONDS >= expiry_ms / 1000.0

    async def _refresh(self) -> None:
        refresh_token = self._token.get("refresh_token")
        if not refresh_token:
            raise AuthorizationError("OAuth token expired and no refresh_token is stored")

        try:
            token = await self._request_token(
                {"refresh_token": refresh_token, "grant_type": "refresh_token"}
            )
        except httpx.HTTPError as e:
            raise AuthorizationError(f"Failed to refresh OAuth2 token: {e}") from e

        token.setdefault("refresh_token", refresh_token)
        self._store_token(token)
        log.debug("OAuth2 access token refreshed")

    async def _request_token(self, data: Dict[str, str]) -> Dict[str, Any]:
        form = {
            "client_id": self._client["client_id"],
            "client_secret": self._client.get("client_secret", ""),
            **data,
        }
        async with httpx.AsyncClient(timeout=15.0, transport=self._transport) as client:
            r = await client.post(self.TOKEN_URL, data=form)
            r.raise_for_status()
            return r.json()

    def _store_token(self, token: Dict[str, Any]) -> None:
        expires_in = token.pop("expires_in", None)
        if expires_in:
            token["expiry_date"] = int((time.time() + float(expires_in)) * 1000)

        self._token = {**self._token, **token}

        try:
            self.token_path.write_text(json.dumps(self._token), encoding="utf-8")
        except OSError as e:
            log.error(f"Failed to persist OAuth token: {e}")
