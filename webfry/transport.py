"""HTTP transport for the Webfry client.

A transport performs exactly one HTTP exchange and hands back a buffered
`RawResponse`. `invoke()` wraps every call with the client's deadline: the
transport call runs as its own task and races the timeout; whichever finishes
first wins and the request task is cancelled if it lost.

The default `HttpxTransport` is built on `httpx.AsyncClient`. Cancelling its
task closes the in-flight connection, so a request that lost the race does
not keep running in the background.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from webfry.errors import WebfryError, WebfryTimeoutError, WebfryTransportError


logger = logging.getLogger("webfry")


@dataclass(frozen=True)
class RawResponse:
    """A fully buffered HTTP response."""

    status_code: int
    reason: str = ""
    content: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


class Transport(Protocol):
    """Anything able to send one request and return a `RawResponse`.

    Implementations must give up promptly when their task is cancelled and
    release whatever connection they hold.
    """

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Dict[str, str],
        body: Optional[bytes],
        timeout_s: float,
    ) -> RawResponse:
        ...


class HttpxTransport:
    """Transport backed by an `httpx.AsyncClient`."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client or httpx.AsyncClient(follow_redirects=True)

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Dict[str, str],
        body: Optional[bytes],
        timeout_s: float,
    ) -> RawResponse:
        try:
            response = await self.client.request(
                method,
                url,
                headers=headers,
                content=body,
                timeout=timeout_s,
            )
        except httpx.TimeoutException as e:
            raise WebfryTimeoutError(timeout_s) from e
        except httpx.HTTPError as e:
            raise WebfryTransportError(str(e) or type(e).__name__) from e

        return RawResponse(
            status_code=response.status_code,
            reason=response.reason_phrase or "",
            content=response.content or b"",
        )

    async def aclose(self) -> None:
        await self.client.aclose()


async def invoke(
    transport: Transport,
    method: str,
    url: str,
    *,
    headers: Dict[str, str],
    body: Optional[bytes] = None,
    timeout_s: float,
) -> RawResponse:
    """Send one request through `transport`, bounded by `timeout_s` seconds.

    Raises:
        WebfryTimeoutError: the deadline passed first; the request task has
            been cancelled and has finished unwinding.
        WebfryTransportError: the transport failed with an OSError.
        asyncio.CancelledError: the caller was cancelled; the request task is
            cancelled too and has finished unwinding.
        WebfryError: anything the transport raised itself.
    """
    logger.debug("%s %s", method, url)

    task = asyncio.ensure_future(
        transport.send(
            method, url, headers=headers, body=body, timeout_s=timeout_s
        )
    )
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout_s)
    except asyncio.CancelledError:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise

    if task not in done:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        logger.warning(
            "Request timed out after %ss (%s %s)", timeout_s, method, url
        )
        raise WebfryTimeoutError(timeout_s)

    try:
        return task.result()
    except WebfryError as e:
        logger.error("Request failed (%s %s): %s", method, url, e)
        raise
    except OSError as e:
        logger.error("Request failed (%s %s): %s", method, url, e)
        raise WebfryTransportError(str(e) or type(e).__name__) from e


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def decode_payload(text: str) -> Any:
    """Parse a response body, returning None for empty or non-JSON bodies.

    Never raises: bare NaN/Infinity and bodies nested too deeply for the
    parser are treated as non-JSON too.
    """
    if not text:
        return None
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        logger.debug("Response body is not JSON (%d chars)", len(text))
        return None


__all__ = [
    "HttpxTransport",
    "RawResponse",
    "Transport",
    "decode_payload",
    "invoke",
]
