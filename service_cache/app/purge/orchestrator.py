"""
Purge orchestration: resolve the production CDN, collect keys, dispatch.

A missing or partial CDN configuration is a soft skip (logged, never raised)
so that it cannot fail an otherwise successful catalog write. An unsupported
CDN type and any transport or provider failure are raised to the caller.
"""

import asyncio
from contextlib import nullcontext
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple, Union

from shared.errors import PurgeConfigError

from ..context import RequestContext
from ..site_config import fetch_helix_config
from .keys import ProductRef, collect_product_keys, dedupe_keys
from .registry import get_purge_client


class PurgeStatus(str, Enum):
    """Outcome of a purge invocation."""
    SKIPPED = "skipped"
    PURGED = "purged"
    FAILED = "failed"


@dataclass(frozen=True)
class PurgeResult:
    """What a purge invocation did, without inspecting its logs."""

    status: PurgeStatus
    provider: Optional[str] = None
    keys: Tuple[str, ...] = ()
    reason: Optional[str] = None
    error: Optional[Exception] = None

    @classmethod
    def skipped(cls, reason: str, provider: Optional[str] = None) -> "PurgeResult":
        return cls(PurgeStatus.SKIPPED, provider=provider, reason=reason)

    @classmethod
    def purged(cls, provider: str, keys: Sequence[str]) -> "PurgeResult":
        return cls(PurgeStatus.PURGED, provider=provider, keys=tuple(keys))

    @classmethod
    def failed(cls, error: Exception, provider: Optional[str] = None) -> "PurgeResult":
        return cls(PurgeStatus.FAILED, provider=provider, reason=str(error), error=error)

    @property
    def ok(self) -> bool:
        return self.status is not PurgeStatus.FAILED


ProductLike = Union[ProductRef, Mapping[str, Any]]


def _skip(ctx: RequestContext, skip_reason: str, message: str, **fields) -> PurgeResult:
    ctx.logger.warning(message, **fields)
    if ctx.metrics is not None:
        ctx.metrics.record_purge_skipped(skip_reason)
    return PurgeResult.skipped(message, provider=fields.get("provider"))


def _production_cdn_config(helix_config: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    return ((helix_config or {}).get("cdn") or {}).get("prod")


async def purge_production_cdn(
    ctx: RequestContext,
    cdn_config: Mapping[str, Any],
    keys: Sequence[str],
) -> PurgeResult:
    """
    Purge ``keys`` from the CDN described by ``cdn_config``.

    Raises ``UnsupportedCDNError`` for an unknown ``type``; a config missing a
    required credential is skipped with a warning.
    """
    if not keys:
        return PurgeResult.skipped("no keys")

    cdn_type = cdn_config.get("type")
    client = get_purge_client(cdn_type)

    try:
        client.validate(cdn_config)
    except PurgeConfigError as exc:
        # customers may deliberately configure their CDN only partially
        return _skip(
            ctx,
            "invalid_config",
            f'ignoring production cdn purge config for type "{cdn_type}": {exc}',
            provider=cdn_type,
            error=str(exc),
        )

    timer = (
        ctx.metrics.time_operation("cdn_purge_duration_seconds", provider=client.name)
        if ctx.metrics is not None else nullcontext()
    )
    with timer:
        await client.purge(ctx, cdn_config, list(keys))
    return PurgeResult.purged(client.name, keys)


async def _purge_product(ctx: RequestContext, product: ProductRef) -> PurgeResult:
    helix_config = await fetch_helix_config(ctx)
    cdn_config = _production_cdn_config(helix_config)
    if not cdn_config:
        return _skip(ctx, "no_cdn_config", "No production CDN configuration found, skipping purge")

    keys = await collect_product_keys(ctx.key_deriver, ctx.org, ctx.site, product, helix_config)
    if not keys:
        return _skip(ctx, "no_keys", "No keys to purge, skipping purge")

    return await purge_production_cdn(ctx, cdn_config, keys)


async def purge(ctx: RequestContext, sku: Optional[str] = None, url_key: Optional[str] = None) -> PurgeResult:
    """Purge the cached representations of one product of the context's store view."""
    return await _purge_product(ctx, ProductRef(
        sku=sku,
        url_key=url_key,
        store_code=ctx.store_code,
        store_view_code=ctx.store_view_code,
    ))


async def purge_path(ctx: RequestContext, path: str) -> PurgeResult:
    """Purge the authored content cached for ``path``."""
    return await _purge_product(ctx, ProductRef(
        path=path,
        store_code=ctx.store_code,
        store_view_code=ctx.store_view_code,
    ))


async def purge_batch(
    ctx: RequestContext,
    config: Optional[Mapping[str, Any]],
    products: Iterable[ProductLike],
) -> PurgeResult:
    """
    Purge many products with a single CDN invocation.

    Keys for all products are computed concurrently, then flattened and
    deduplicated, so a bulk update costs one batched purge instead of one
    purge per product.
    """
    org = (config or {}).get("org") or ctx.org
    site = (config or {}).get("site") or ctx.site
    refs = [p if isinstance(p, ProductRef) else ProductRef.from_dict(p) for p in products]

    helix_config = await fetch_helix_config(ctx, org, site)
    cdn_config = _production_cdn_config(helix_config)
    if not cdn_config:
        return _skip(ctx, "no_cdn_config", "No production CDN configuration found, skipping purge")

    key_lists = await asyncio.gather(*(
        collect_product_keys(ctx.key_deriver, org, site, ref, helix_config)
        for ref in refs
    ))
    keys = dedupe_keys(key_lists)
    if not keys:
        return _skip(ctx, "no_keys", "No keys to purge, skipping purge")

    ctx.logger.info(
        f"Purging {len(keys)} unique cache keys for {len(refs)} products",
        key_count=len(keys),
        product_count=len(refs),
    )
    return await purge_production_cdn(ctx, cdn_config, keys)
