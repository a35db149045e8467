"""Webfry API client.

This module maps each Webfry endpoint to an async method and funnels every
call through one request path (`_request`):

- builds headers (`Content-Type: application/json`, plus `X-API-Key` for
  authenticated endpoints)
- refuses to touch the network when an authenticated endpoint is called
  without an API key
- sends the request through the transport, bounded by `timeout_s`
- decodes the body and turns non-2xx responses into `WebfryApiError`

Important:
- The base URL may be given with or without the trailing `/api`; it is
  normalized either way.
- There are no retries. Every call is sent once; retrying is up to the caller.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from webfry.endpoints import ENDPOINTS
from webfry.errors import (
    WebfryApiError,
    WebfryConfigurationError,
    api_error_from_response,
)
from webfry.models import (
    ApiKeyResponse,
    Base64Response,
    CryptoResponse,
    EntropyResponse,
    GenerateRandomKeyResponse,
    HashGeneratorResponse,
    HashIdentifierResponse,
    HashLookupOutput,
    JsonResponse,
    JwtResponse,
    PasswordResponse,
    StrengthResult,
    UserInfoResponse,
)
from webfry.transport import (
    HttpxTransport,
    RawResponse,
    Transport,
    decode_payload,
    invoke,
)


logger = logging.getLogger("webfry")

DEFAULT_BASE_URL = "https://webfry.dev"
DEFAULT_TIMEOUT_S = 15.0
API_PATH = "/api"
API_KEY_HEADER = "X-API-Key"

BASE64_OPTIONS = ("encode", "decode")


def normalize_base_url(base_url: str) -> str:
    """Return `base_url` without trailing slashes and ending in `/api`."""
    normalized = base_url.rstrip("/")
    if normalized.endswith(API_PATH):
        return normalized
    return f"{normalized}{API_PATH}"


class WebfryClient:
    """Async client for the Webfry API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[Transport] = None,
    ):
        """Initialize the Webfry client.

        Args:
            api_key: API key for authenticated endpoints
            base_url: Webfry host, with or without `/api`
                (default: env WEBFRY_BASE_URL or https://webfry.dev)
            timeout_s: Per-request deadline in seconds
                (default: env WEBFRY_TIMEOUT_S or 15)
            transport: Custom transport; defaults to an httpx-backed one
                owned (and closed) by this client
        """
        self._base_url = normalize_base_url(
            base_url or os.getenv("WEBFRY_BASE_URL") or DEFAULT_BASE_URL
        )

        if timeout_s is None:
            timeout_s = float(
                os.getenv("WEBFRY_TIMEOUT_S") or DEFAULT_TIMEOUT_S
            )
        if timeout_s <= 0:
            raise ValueError(f"timeout_s must be positive, got {timeout_s}")
        self._timeout_s = float(timeout_s)

        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport()
        self._api_key = api_key

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key

    def set_api_key(self, api_key: str) -> None:
        """Use `api_key` for subsequent authenticated calls.

        The key is plain instance state with no locking. Changing it while
        other calls on the same client are in flight (from other threads or
        event loops) may let those calls see either key.
        """
        self._api_key = api_key

    def clear_api_key(self) -> None:
        self._api_key = None

    async def close(self) -> None:
        """Release the default transport's connection pool.

        Transports passed in by the caller are left alone.
        """
        if self._owns_transport and isinstance(
            self._transport, HttpxTransport
        ):
            await self._transport.aclose()

    async def __aenter__(self) -> "WebfryClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _headers(self, requires_auth: bool) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if requires_auth:
            if not self._api_key:
                raise WebfryConfigurationError(
                    "API key is required for this endpoint. "
                    "Use set_api_key() first."
                )
            headers[API_KEY_HEADER] = self._api_key
        return headers

    async def _request(
        self, operation: str, payload: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Internal request helper shared by every endpoint method.

        Returns the decoded JSON body, or the response text for raw-text
        endpoints. Raises a `WebfryError` subclass on any failure.
        """
        endpoint = ENDPOINTS[operation]
        headers = self._headers(endpoint.requires_auth)
        body = None
        if payload is not None:
            body = json.dumps(payload).encode("utf-8")
        url = f"{self._base_url}{endpoint.path}"

        response = await invoke(
            self._transport,
            endpoint.method,
            url,
            headers=headers,
            body=body,
            timeout_s=self._timeout_s,
        )
        text = response.text

        if endpoint.raw_text:
            if not response.ok:
                decoded = decode_payload(text)
                raise self._api_error(
                    decoded if decoded is not None else text, response
                )
            return text

        data = decode_payload(text)
        if not response.ok:
            raise self._api_error(data, response)
        return data

    def _api_error(
        self, payload: Any, response: RawResponse
    ) -> WebfryApiError:
        error = api_error_from_response(
            payload, response.status_code, response.reason
        )
        logger.warning(
            "Webfry API error %s: %s", response.status_code, error.message
        )
        return error

    async def get_api_key(self, email: str, password: str) -> ApiKeyResponse:
        """Exchange account credentials for an API key (no key required)."""
        return await self._request(
            "get_api_key", {"email": email, "password": password}
        )

    async def rotate_api_key(self) -> ApiKeyResponse:
        """Issue a new API key, invalidating the current one.

        The client keeps using the old key until `set_api_key()` is called.
        """
        return await self._request("rotate_api_key")

    async def user_info(self) -> UserInfoResponse:
        """Get the account's plan and usage."""
        return await self._request("user_info")

    async def password_check(self, password: str) -> StrengthResult:
        return await self._request("password_check", {"password": password})

    async def hash_lookup(self, hashes: str) -> HashLookupOutput:
        """Look up known plaintexts for the hashes in `hashes`."""
        return await self._request("hash_lookup", {"hashes": hashes})

    async def hash_lookup_site(self, hashes: str) -> HashLookupOutput:
        """Same as `hash_lookup`, via the public (unauthenticated) endpoint."""
        return await self._request("hash_lookup_site", {"hashes": hashes})

    async def hash_generator(
        self, algorithm: str, plaintext: str
    ) -> HashGeneratorResponse:
        return await self._request(
            "hash_generator", {"algorithm": algorithm, "plaintext": plaintext}
        )

    async def base64(self, text: str, option: str = "encode") -> Base64Response:
        """Base64-encode or decode `text`. `option` is "encode" or "decode"."""
        if option not in BASE64_OPTIONS:
            raise ValueError(
                f"option must be one of {BASE64_OPTIONS}, got {option!r}"
            )
        return await self._request("base64", {"text": text, "option": option})

    async def entropy(self, password: str) -> EntropyResponse:
        return await self._request("entropy", {"password": password})

    async def hash_identifier(self, hash_value: str) -> HashIdentifierResponse:
        """Guess the algorithm that produced `hash_value`."""
        return await self._request("hash_identifier", {"hash": hash_value})

    async def generate_random_key(self) -> GenerateRandomKeyResponse:
        return await self._request("generate_random_key")

    async def jwt_decoder(self, token: str) -> JwtResponse:
        return await self._request("jwt_decoder", {"token": token})

    async def secure_encrypt(self, text: str, password: str) -> CryptoResponse:
        return await self._request(
            "secure_encrypt", {"text": text, "password": password}
        )

    async def secure_decrypt(self, text: str, password: str) -> CryptoResponse:
        return await self._request(
            "secure_decrypt", {"text": text, "password": password}
        )

    async def json_format(self, text: str) -> JsonResponse:
        return await self._request("json_format", {"text": text})

    async def json_minify(self, text: str) -> JsonResponse:
        return await self._request("json_minify", {"text": text})

    async def common_password(self, password: str) -> PasswordResponse:
        """Check whether `password` appears in common-password lists."""
        return await self._request("common_password", {"password": password})

    async def suggestion(self, message: str, email: Optional[str] = None) -> str:
        """Send feedback to the Webfry team. Returns the server's reply text."""
        payload: Dict[str, Any] = {"message": message}
        if email is not None:
            payload["email"] = email
        return await self._request("suggestion", payload)

    async def ip_info(self, ip_string: str) -> Any:
        """Look up an IP address.

        Note: the endpoint is still under construction upstream and its
        response shape is not fixed yet.
        """
        return await self._request("ip_info", {"ip_string": ip_string})

    async def data_breach(self, ip_string: str) -> Any:
        """Check breach data.

        Note: the endpoint is still under construction upstream and its
        response shape is not fixed yet.
        """
        return await self._request("data_breach", {"ip_string": ip_string})


__all__ = ["WebfryClient", "normalize_base_url"]
