"""Python client for the Webfry security-tools API.

Typical use:

    async with WebfryClient(api_key="...") as client:
        info = await client.user_info()

Standalone scripts built on the client live under `actions/`:
- python -m actions.get_api_key
- python -m actions.account_overview
"""

from webfry.errors import (
    WebfryApiError,
    WebfryConfigurationError,
    WebfryError,
    WebfryTimeoutError,
    WebfryTransportError,
)
from webfry.transport import HttpxTransport, RawResponse, Transport
from webfry.webfry_client import WebfryClient, normalize_base_url

__all__ = [
    "HttpxTransport",
    "RawResponse",
    "Transport",
    "WebfryApiError",
    "WebfryClient",
    "WebfryConfigurationError",
    "WebfryError",
    "WebfryTimeoutError",
    "WebfryTransportError",
    "normalize_base_url",
]
