"""
Fastly purge client (surrogate keys).
"""

from typing import Any, Mapping, Sequence

import httpx

from ...context import RequestContext, next_request_id
from .base import INVALID_CONFIG_MESSAGE, assert_required_properties, batched, purge_failure, record_request

FASTLY_API_URL = "https://api.fastly.com"


class FastlyPurgeClient:
    """Purges Fastly surrogate keys, one batch at a time."""

    name = "fastly"
    # https://developer.fastly.com/reference/api/purging/#bulk-purge-tag
    batch_size = 256

    @staticmethod
    def validate(config: Mapping[str, Any]) -> None:
        assert_required_properties(config, INVALID_CONFIG_MESSAGE, "host", "serviceId", "authToken")

    @staticmethod
    def supports_purge_by_key() -> bool:
        return True

    @classmethod
    async def purge(cls, ctx: RequestContext, purge_config: Mapping[str, Any], keys: Sequence[str]) -> None:
        if not keys:
            return

        host = purge_config["host"]
        url = f"{FASTLY_API_URL}/service/{purge_config['serviceId']}/purge"
        headers = {
            "content-type": "application/json",
            "accept": "application/json",
            "fastly-key": purge_config["authToken"],
        }

        async with httpx.AsyncClient() as client:
            for batch in batched(keys, cls.batch_size):
                request_id = next_request_id(ctx)
                log = ctx.logger.bind(site_id=ctx.site_id, request_id=request_id, provider=cls.name, host=host)
                log.info("Purging surrogate keys", keys=batch)

                try:
                    response = await client.post(url, headers=headers, json={"surrogate_keys": batch})
                except httpx.HTTPError as exc:
                    raise purge_failure(
                        ctx, request_id, cls.name, host,
                        f"purging {len(batch)} surrogate key(s) failed: {exc}",
                        key_count=len(batch),
                    ) from exc

                if not response.is_success:
                    raise purge_failure(
                        ctx, request_id, cls.name, host,
                        f"purging {len(batch)} surrogate key(s) failed: {response.status_code} - {response.text}",
                        key_count=len(batch),
                        status_code=response.status_code,
                        body=response.text,
                    )

                log.info(
                    "Purging surrogate keys succeeded",
                    key_count=len(batch),
                    status_code=response.status_code,
                    response=response.text,
                )
                record_request(ctx, cls.name, "ok", len(batch))
