"""Shared fixtures for the webfry test suite."""

from __future__ import annotations

import pytest

from fakes import FakeTransport
from webfry import WebfryClient


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's WEBFRY_* settings out of the tests."""
    for name in ("WEBFRY_BASE_URL", "WEBFRY_TIMEOUT_S", "WEBFRY_API_KEY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport):
    return WebfryClient(
        api_key="test-key",
        base_url="https://webfry.test",
        transport=transport,
    )


@pytest.fixture
def anonymous_client(transport):
    return WebfryClient(base_url="https://webfry.test", transport=transport)
