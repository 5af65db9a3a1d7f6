"""
Cloudflare purge client (cache tags).
"""

import json
from typing import Any, Dict, List, Mapping, Sequence

import httpx

from shared.concurrency import process_queue

from ...context import RequestContext, next_request_id
from .base import INVALID_CONFIG_MESSAGE, assert_required_properties, batched, purge_failure, record_request

CLOUDFLARE_API_URL = "https://api.cloudflare.com/client/v4"


def _reported_success(body: str) -> bool:
    try:
        return json.loads(body).get("success") is True
    except (ValueError, AttributeError):
        return False


class CloudflarePurgeClient:
    """Purges Cloudflare cache tags, dispatching batches concurrently."""

    name = "cloudflare"
    # the purge_cache endpoint accepts at most 30 tags per request
    batch_size = 30

    @staticmethod
    def validate(config: Mapping[str, Any]) -> None:
        assert_required_properties(config, INVALID_CONFIG_MESSAGE, "host", "zoneId", "apiToken")

    @staticmethod
    def supports_purge_by_key() -> bool:
        return True

    @classmethod
    async def purge(cls, ctx: RequestContext, purge_config: Mapping[str, Any], keys: Sequence[str]) -> None:
        if not keys:
            return

        host = purge_config["host"]
        url = f"{CLOUDFLARE_API_URL}/zones/{purge_config['zoneId']}/purge_cache"
        headers = {"Authorization": f"Bearer {purge_config['apiToken']}"}
        payloads: List[Dict[str, List[str]]] = [{"tags": batch} for batch in batched(keys, cls.batch_size)]

        async with httpx.AsyncClient() as client:

            async def _purge_tags(body: Dict[str, List[str]]) -> None:
                request_id = next_request_id(ctx)
                tag_count = len(body["tags"])
                log = ctx.logger.bind(site_id=ctx.site_id, request_id=request_id, provider=cls.name, host=host)
                log.info("Purging cache tags", body=body)

                try:
                    response = await client.post(url, headers=headers, json=body)
                except httpx.HTTPError as exc:
                    raise purge_failure(
                        ctx, request_id, cls.name, host,
                        f"purge failed: {exc}",
                        key_count=tag_count,
                    ) from exc

                if response.is_success and _reported_success(response.text):
                    log.info("Purging cache tags succeeded", response=response.text)
                    record_request(ctx, cls.name, "ok", tag_count)
                    return

                log.error("Rejected purge body", body=body)
                raise purge_failure(
                    ctx, request_id, cls.name, host,
                    f"purge failed: {response.status_code} - {response.text}"
                    f" - cf-ray: {response.headers.get('cf-ray')}",
                    key_count=tag_count,
                    status_code=response.status_code,
                    body=response.text,
                )

            await process_queue(
                payloads,
                _purge_tags,
                ctx.settings.cloudflare_concurrency,
                stop_on_error=ctx.settings.cloudflare_stop_on_error,
            )
