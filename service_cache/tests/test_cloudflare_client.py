"""
Unit tests for the Cloudflare purge client.
"""

import json
import pytest
import httpx
from unittest.mock import AsyncMock

from service_cache.app.purge.clients.cloudflare import CloudflarePurgeClient
from shared.errors import PurgeConfigError, PurgeError


SUCCESS_BODY = json.dumps({"success": True, "errors": [], "messages": [], "result": {"id": "zone"}})


class TestCloudflarePurgeClient:
    """Test cases for CloudflarePurgeClient."""

    @pytest.fixture
    def purge_config(self):
        return {"type": "cloudflare", "host": "www.example.com", "zoneId": "zone123", "apiToken": "cf-token"}

    @pytest.fixture
    def cf_client(self, http_client, make_response):
        http_client.post = AsyncMock(return_value=make_response(200, SUCCESS_BODY))
        return http_client

    def test_validate_passes_with_all_properties(self, purge_config):
        CloudflarePurgeClient.validate(purge_config)

    @pytest.mark.parametrize("missing", ["host", "zoneId", "apiToken"])
    def test_validate_names_missing_property(self, purge_config, missing):
        purge_config.pop(missing)

        with pytest.raises(PurgeConfigError, match=f'"{missing}" is required'):
            CloudflarePurgeClient.validate(purge_config)

    def test_supports_purge_by_key(self):
        assert CloudflarePurgeClient.supports_purge_by_key() is True

    @pytest.mark.asyncio
    async def test_purge_sends_tags_with_bearer_token(self, ctx, purge_config, cf_client):
        await CloudflarePurgeClient.purge(ctx, purge_config, ["tag1", "tag2"])

        args, kwargs = cf_client.post.call_args
        assert args[0] == "https://api.cloudflare.com/client/v4/zones/zone123/purge_cache"
        assert kwargs["headers"] == {"Authorization": "Bearer cf-token"}
        assert kwargs["json"] == {"tags": ["tag1", "tag2"]}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tag_count,expected_requests", [(1, 1), (30, 1), (31, 2), (40, 2), (95, 4)])
    async def test_purge_batches_30_tags_per_request(self, ctx, purge_config, cf_client, tag_count, expected_requests):
        tags = [f"tag-{i}" for i in range(tag_count)]

        await CloudflarePurgeClient.purge(ctx, purge_config, tags)

        assert cf_client.post.call_count == expected_requests
        sent = sorted(t for call in cf_client.post.call_args_list for t in call.kwargs["json"]["tags"])
        assert sent == sorted(tags)
        assert all(len(call.kwargs["json"]["tags"]) <= 30 for call in cf_client.post.call_args_list)

    @pytest.mark.asyncio
    async def test_purge_requires_success_flag(self, ctx, purge_config, http_client, make_response):
        body = json.dumps({"success": False, "errors": [{"code": 1134, "message": "quota"}]})
        http_client.post = AsyncMock(return_value=make_response(200, body))

        with pytest.raises(PurgeError) as exc_info:
            await CloudflarePurgeClient.purge(ctx, purge_config, ["tag1"])

        assert "[cloudflare]" in str(exc_info.value)
        assert "quota" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_purge_error_includes_status_and_cf_ray(self, ctx, purge_config, http_client, make_response):
        http_client.post = AsyncMock(
            return_value=make_response(403, '{"success": false}', headers={"cf-ray": "8a1b2c3d"})
        )

        with pytest.raises(PurgeError) as exc_info:
            await CloudflarePurgeClient.purge(ctx, purge_config, ["tag1"])

        message = str(exc_info.value)
        assert "myorg/mysite/us/en [1] [cloudflare] www.example.com" in message
        assert "403" in message
        assert "cf-ray: 8a1b2c3d" in message
        assert exc_info.value.details["status_code"] == 403

    @pytest.mark.asyncio
    async def test_purge_rejects_non_json_body(self, ctx, purge_config, http_client, make_response):
        http_client.post = AsyncMock(return_value=make_response(200, "<html>ok</html>"))

        with pytest.raises(PurgeError):
            await CloudflarePurgeClient.purge(ctx, purge_config, ["tag1"])

    @pytest.mark.asyncio
    async def test_failed_batch_does_not_cancel_other_batches(self, ctx, purge_config, http_client, make_response):
        http_client.post = AsyncMock(side_effect=[
            make_response(500, "boom"),
            make_response(200, SUCCESS_BODY),
            make_response(200, SUCCESS_BODY),
        ])

        with pytest.raises(PurgeError):
            await CloudflarePurgeClient.purge(ctx, purge_config, [f"tag-{i}" for i in range(90)])

        assert http_client.post.call_count == 3

    @pytest.mark.asyncio
    async def test_stop_on_error_skips_pending_batches(self, ctx, purge_config, http_client, make_response):
        ctx.settings.cloudflare_concurrency = 1
        ctx.settings.cloudflare_stop_on_error = True
        http_client.post = AsyncMock(return_value=make_response(500, "boom"))

        with pytest.raises(PurgeError):
            await CloudflarePurgeClient.purge(ctx, purge_config, [f"tag-{i}" for i in range(90)])

        assert http_client.post.call_count == 1

    @pytest.mark.asyncio
    async def test_purge_wraps_network_errors(self, ctx, purge_config, http_client):
        http_client.post = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(PurgeError, match="timed out"):
            await CloudflarePurgeClient.purge(ctx, purge_config, ["tag1"])

    @pytest.mark.asyncio
    async def test_each_batch_gets_its_own_request_id(self, ctx, purge_config, cf_client):
        await CloudflarePurgeClient.purge(ctx, purge_config, [f"tag-{i}" for i in range(61)])

        bound_ids = sorted(call.kwargs["request_id"] for call in ctx.logger.bind.call_args_list)
        assert bound_ids == [1, 2, 3]
