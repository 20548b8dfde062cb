"""Pytest configuration for httpdispatch tests."""

import httpx
import pytest

from httpdispatch.http.client import HttpClient
from httpdispatch.http.cookies import MemoryCookieStore


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture(autouse=True)
def isolated_cookie_file(tmp_path, monkeypatch):
    """Keep the persistent cookie file out of the user's home directory."""
    cookie_file = tmp_path / "cookies.txt"
    monkeypatch.setenv("HTTPDISPATCH_COOKIE_FILE", str(cookie_file))
    return cookie_file


@pytest.fixture
def cookie_store():
    return MemoryCookieStore()


@pytest.fixture
def make_client(cookie_store):
    """Build an HttpClient whose requests are answered by ``handler``."""

    def factory(handler, **kwargs):
        return HttpClient(cookie_store, transport=httpx.MockTransport(handler), **kwargs)

    return factory
