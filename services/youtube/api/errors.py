from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

import httpx


class PollErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    FATAL = "fatal"


# YouTube Data API error reasons that mean "slow down"
QUOTA_REASONS = {
    "quotaExceeded",
    "rateLimitExceeded",
    "dailyLimitExceeded",
    "userRateLimitExceeded",
}

FATAL_STATUS_CODES = {401, 403, 404}


class ChatApiError(RuntimeError):
    """
    Typed error raised by the YouTube transport layer.

    `kind` is decided from the HTTP status and the API error reason so the
    chat worker never has to guess from free-form text.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: PollErrorKind,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.reason = reason

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ChatApiError":
        status = response.status_code
        reason, message = _extract_error_details(response)

        if status == 429 or (reason in QUOTA_REASONS) or "quota" in message.lower():
            kind = PollErrorKind.RATE_LIMITED
        elif status in FATAL_STATUS_CODES:
            kind = PollErrorKind.FATAL
        else:
            kind = PollErrorKind.TRANSIENT

        return cls(
            f"HTTP {status} ({reason or 'no reason'}): {message}",
            kind=kind,
            status_code=status,
            reason=reason,
        )


def _extract_error_details(response: httpx.Response) -> tuple[Optional[str], str]:
    try:
        payload: Dict[str, Any] = response.json()
    except ValueError:
        return None, response.text or response.reason_phrase

    error = payload.get("error") if isinstance(payload, dict) else None
    if not isinstance(error, dict):
        return None, response.text or response.reason_phrase

    message = str(error.get("message") or response.reason_phrase)
    reason = None
    details = error.get("errors")
    if isinstance(details, list) and details and isinstance(details[0], dict):
        reason = details[0].get("reason")

    return reason, message


def classify_error(exc: BaseException) -> PollErrorKind:
    """
    Map any exception raised during a poll onto a backoff category.

    Typed transport errors carry their own kind. For anything else the
    error text is inspected for "quota", which keeps untyped failures on
    the same long backoff as a real quota response.
    """
    if isinstance(exc, ChatApiError):
        return exc.kind

    if "quota" in str(exc).lower():
        return PollErrorKind.RATE_LIMITED

    return PollErrorKind.TRANSIENT


__all__ = [
    "ChatApiError",
    "PollErrorKind",
    "QUOTA_REASONS",
    "classify_error",
]
