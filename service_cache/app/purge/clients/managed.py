"""
Purge client for the managed (Fastly-backed) CDN, via the purge proxy.
"""

from typing import Any, Mapping, Sequence

import httpx

from ...context import RequestContext, next_request_id
from .base import INVALID_CONFIG_MESSAGE, assert_required_properties, batched, purge_failure, record_request

PURGE_PROXY_URL = "https://purgeproxy.adobeaemcloud.com/purge"


class ManagedPurgeClient:
    """Purges surrogate keys on the managed CDN through the purge proxy."""

    name = "managed"
    batch_size = 256

    @staticmethod
    def validate(config: Mapping[str, Any]) -> None:
        assert_required_properties(config, INVALID_CONFIG_MESSAGE, "host")

    @staticmethod
    def supports_purge_by_key() -> bool:
        return True

    @classmethod
    async def purge(cls, ctx: RequestContext, purge_config: Mapping[str, Any], keys: Sequence[str]) -> None:
        if not keys:
            return

        # envId takes precedence over host in the purge proxy url
        target = purge_config.get("envId") or purge_config["host"]
        url = f"{PURGE_PROXY_URL}/{target}"
        auth_token = ctx.settings.managed_purge_token or ""

        async with httpx.AsyncClient() as client:
            for batch in batched(keys, cls.batch_size):
                request_id = next_request_id(ctx)
                log = ctx.logger.bind(site_id=ctx.site_id, request_id=request_id, provider=cls.name, host=target)
                log.info("Purging surrogate keys", keys=batch)

                # never share a headers dict between requests
                headers = {
                    "accept": "application/json",
                    "x-aem-purge-key": auth_token,
                    "Surrogate-Key": " ".join(batch),
                }
                try:
                    response = await client.post(url, headers=headers)
                except httpx.HTTPError as exc:
                    raise purge_failure(
                        ctx, request_id, cls.name, target,
                        f"purging {len(batch)} surrogate key(s) failed: {exc}",
                        key_count=len(batch),
                    ) from exc

                if not response.is_success:
                    raise purge_failure(
                        ctx, request_id, cls.name, target,
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
