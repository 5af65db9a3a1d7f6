"""
Shared fixtures for cache service tests.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from shared.config import BaseConfig
from service_cache.app.context import RequestContext


class FakeKeyDeriver:
    """Readable, deterministic keys for assertions."""

    async def product_sku_key(self, org, site, store_code, store_view_code, sku):
        return f"sku-{sku}-{store_code}-{store_view_code}"

    async def product_url_key_key(self, org, site, store_code, store_view_code, url_key):
        return f"urlkey-{url_key}-{store_code}-{store_view_code}"

    async def authored_content_key(self, content_bus_id, path):
        return f"content-{path}"


def _make_response(status_code: int = 200, content: str = "", headers=None, url: str = "https://cdn.test/purge"):
    """Build an httpx response as returned by the mocked client."""
    return httpx.Response(
        status_code=status_code,
        content=content,
        headers=headers,
        request=httpx.Request("POST", url),
    )


@pytest.fixture
def make_response():
    """Factory for httpx responses returned by the mocked client."""
    return _make_response


@pytest.fixture
def settings():
    """Service settings with every credential configured."""
    return BaseConfig(
        cache_api_key="secret-key",
        config_service_token="config-token",
        managed_purge_token="purge-token",
    )


@pytest.fixture
def logger():
    """Logger mock whose bound loggers record into the same mock."""
    log = MagicMock()
    log.bind.return_value = log
    return log


@pytest.fixture
def ctx(settings, logger):
    """Request context for myorg/mysite, store view us/en."""
    return RequestContext(
        org="myorg",
        site="mysite",
        store_code="us",
        store_view_code="en",
        settings=settings,
        key_deriver=FakeKeyDeriver(),
        logger=logger,
    )


@pytest.fixture
def http_client():
    """Patch httpx.AsyncClient; yields the client used inside ``async with``."""
    with patch("httpx.AsyncClient") as mock_client:
        client = mock_client.return_value.__aenter__.return_value
        client.post = AsyncMock(return_value=_make_response(200, "{}"))
        client.get = AsyncMock(return_value=_make_response(200, "{}"))
        client.factory = mock_client
        yield client
