"""
Unit tests for site configuration lookup.
"""

import json
import pytest
import httpx
from unittest.mock import AsyncMock

from service_cache.app.site_config import fetch_helix_config
from shared.errors import ConfigFetchError


class TestFetchHelixConfig:
    """Test cases for fetch_helix_config."""

    @pytest.mark.asyncio
    async def test_returns_cached_config(self, ctx, http_client):
        ctx.attributes["helix_config"] = {"cdn": {}}

        assert await fetch_helix_config(ctx) == {"cdn": {}}
        http_client.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetches_and_caches_config(self, ctx, http_client, make_response):
        config = {"cdn": {"prod": {"type": "fastly"}}}
        http_client.get = AsyncMock(return_value=make_response(200, json.dumps(config)))

        assert await fetch_helix_config(ctx) == config
        assert await fetch_helix_config(ctx) == config

        http_client.get.assert_called_once()
        args, kwargs = http_client.get.call_args
        assert args[0] == "https://config.aem.page/main--mysite--myorg/config.json"
        assert kwargs["params"] == {"scope": "raw"}
        assert kwargs["headers"] == {
            "x-access-token": "config-token",
            "cache-control": "no-cache",
            "x-backend-type": "aws",
        }
        assert ctx.helix_config == config

    @pytest.mark.asyncio
    async def test_explicit_org_and_site(self, ctx, http_client):
        await fetch_helix_config(ctx, "otherorg", "othersite")

        assert http_client.get.call_args.args[0].endswith("/main--othersite--otherorg/config.json")

    @pytest.mark.asyncio
    async def test_legacy_config_is_ignored(self, ctx, http_client, make_response):
        http_client.get = AsyncMock(return_value=make_response(200, json.dumps({"legacy": True})))

        assert await fetch_helix_config(ctx) is None
        assert "helix_config" not in ctx.attributes

    @pytest.mark.asyncio
    async def test_missing_config_returns_none_quietly(self, ctx, http_client, make_response):
        http_client.get = AsyncMock(return_value=make_response(404))

        assert await fetch_helix_config(ctx) is None
        ctx.logger.warning.assert_not_called()

    @pytest.mark.asyncio
    async def test_error_status_warns_and_returns_none(self, ctx, http_client, make_response):
        http_client.get = AsyncMock(return_value=make_response(500, "oops"))

        assert await fetch_helix_config(ctx) is None
        message = ctx.logger.warning.call_args.args[0]
        assert message.startswith("error loading config from https://config.aem.page/")
        assert message.endswith(": 500")

    @pytest.mark.asyncio
    async def test_non_json_body_warns_and_returns_none(self, ctx, http_client, make_response):
        http_client.get = AsyncMock(return_value=make_response(200, "<html>maintenance</html>"))

        assert await fetch_helix_config(ctx) is None
        assert "helix_config" not in ctx.attributes
        message = ctx.logger.warning.call_args.args[0]
        assert message.endswith(": invalid JSON")

    @pytest.mark.asyncio
    async def test_network_error_raises(self, ctx, http_client):
        http_client.get = AsyncMock(side_effect=httpx.ConnectError("unreachable"))

        with pytest.raises(ConfigFetchError) as exc_info:
            await fetch_helix_config(ctx)

        assert exc_info.value.status_code == 502
        assert "Fetching config for myorg/mysite failed" in str(exc_info.value)
