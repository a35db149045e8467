"""Errors raised by the Webfry client.

Every failure surfaces as a single `WebfryError` subclass raised at the
failing call:

- WebfryConfigurationError: an authenticated endpoint was called without an
  API key (raised before any network activity)
- WebfryTimeoutError: no response arrived before the deadline
- WebfryTransportError: the request never reached the server (DNS, refused
  connection, TLS, ...)
- WebfryApiError: the server answered with a non-2xx status

`status` is 0 for everything except API errors.
"""

from __future__ import annotations

from typing import Any, Optional


DEFAULT_ERROR_MESSAGE = "Request failed"


def _format_seconds(value: float) -> str:
    text = str(value)
    # 15.0 -> "15"; other values keep full precision
    return text[:-2] if text.endswith(".0") else text


class WebfryError(RuntimeError):
    """Base class for all Webfry client errors."""

    kind = "error"

    def __init__(self, message: str, status: int = 0, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload


class WebfryConfigurationError(WebfryError):
    """The client is missing something it needs, usually the API key."""

    kind = "configuration"


class WebfryTimeoutError(WebfryError):
    """The request deadline expired before a response arrived."""

    kind = "timeout"

    def __init__(self, timeout_s: float):
        super().__init__(f"Request timeout after {_format_seconds(timeout_s)}s")
        self.timeout_s = timeout_s


class WebfryTransportError(WebfryError):
    """Network-level failure; the server never produced a response."""

    kind = "transport"


class WebfryApiError(WebfryError):
    """The API answered with a non-success status.

    `payload` holds the decoded JSON body when there was one, otherwise
    None (or the raw text for text endpoints).
    """

    kind = "api"

    def __init__(self, message: str, status: int, payload: Any = None):
        super().__init__(message, status=status, payload=payload)

    def __repr__(self) -> str:
        return f"WebfryApiError(status={self.status}, message={self.message!r})"


def error_message_from_payload(payload: Any, fallback: Optional[str]) -> str:
    """Pick the most useful message for a failed response.

    Order: payload["error"], payload["message"], the HTTP status text, then a
    generic message. Only non-empty strings count.
    """
    if isinstance(payload, dict):
        for field in ("error", "message"):
            value = payload.get(field)
            if isinstance(value, str) and value:
                return value

    return fallback or DEFAULT_ERROR_MESSAGE


def api_error_from_response(
    payload: Any, status: int, reason: Optional[str]
) -> WebfryApiError:
    return WebfryApiError(
        error_message_from_payload(payload, reason),
        status=status,
        payload=payload,
    )


__all__ = [
    "DEFAULT_ERROR_MESSAGE",
    "WebfryApiError",
    "WebfryConfigurationError",
    "WebfryError",
    "WebfryTimeoutError",
    "WebfryTransportError",
    "api_error_from_response",
    "error_message_from_payload",
]
