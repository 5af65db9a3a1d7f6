#!/usr/bin/env python3
"""
Purge product pages from a site's production CDN.

This helper mirrors the bulk purge endpoint but can be executed manually
from a developer workstation or CI job. It resolves the site configuration,
computes the surrogate keys for the given products and purges them in one
batched CDN invocation.
"""

import argparse
import asyncio
import json
from pathlib import Path
from typing import List
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.config import BaseConfig  # noqa: E402
from shared.logging import configure_logging  # noqa: E402
from service_cache.app.context import RequestContext  # noqa: E402
from service_cache.app.purge.keys import ProductRef, collect_product_keys, dedupe_keys  # noqa: E402
from service_cache.app.purge.orchestrator import purge_batch  # noqa: E402
from service_cache.app.site_config import fetch_helix_config  # noqa: E402


async def run_purge(
    *,
    org: str,
    site: str,
    products: List[ProductRef],
    settings: BaseConfig,
    dry_run: bool,
) -> dict:
    """Execute the purge (or only resolve its keys) and return a summary."""
    ctx = RequestContext(org=org, site=site, settings=settings)
    summary = {"org": org, "site": site, "products": len(products)}

    if dry_run:
        helix_config = await fetch_helix_config(ctx, org, site)
        key_lists = await asyncio.gather(*(
            collect_product_keys(ctx.key_deriver, org, site, product, helix_config)
            for product in products
        ))
        cdn_config = ((helix_config or {}).get("cdn") or {}).get("prod") or {}
        summary.update(status="dry_run", provider=cdn_config.get("type"), keys=dedupe_keys(key_lists))
        return summary

    result = await purge_batch(ctx, {"org": org, "site": site}, products)
    summary.update(
        status=result.status.value,
        provider=result.provider,
        keys=list(result.keys),
        reason=result.reason,
    )
    return summary


def _load_products(args: argparse.Namespace) -> List[ProductRef]:
    products = []
    if args.products_file:
        payload = json.loads(args.products_file.read_text())
        entries = payload.get("products", payload) if isinstance(payload, dict) else payload
        products.extend(ProductRef.from_dict(entry) for entry in entries)
    for sku in args.sku or []:
        products.append(ProductRef(
            sku=sku,
            store_code=args.store_code,
            store_view_code=args.store_view_code,
        ))
    for path in args.path or []:
        products.append(ProductRef(path=path))
    return products


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Purge product pages from the production CDN.")
    parser.add_argument("--org", required=True, help="Organization")
    parser.add_argument("--site", required=True, help="Site")
    parser.add_argument("--sku", action="append", help="Product SKU to purge (repeatable)")
    parser.add_argument("--path", action="append", help="Authored page path to purge (repeatable)")
    parser.add_argument("--store-code", default=None, help="Store code for --sku products")
    parser.add_argument("--store-view-code", default=None, help="Store view code for --sku products")
    parser.add_argument("--products-file", type=Path, default=None, help="JSON file with a products array")
    parser.add_argument("--dry-run", action="store_true", help="Compute keys but do not contact the CDN")
    parser.add_argument("--log-level", default=os.getenv("CACHE_LOG_LEVEL", "info"), help="Log level")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    configure_logging("cache-purge", args.log_level)

    products = _load_products(args)
    if not products:
        print("[cdn-purge] no products given", file=sys.stderr)
        return 2

    try:
        summary = asyncio.run(
            run_purge(
                org=args.org,
                site=args.site,
                products=products,
                settings=BaseConfig(),
                dry_run=args.dry_run,
            )
        )
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - CLI surface
        print(f"[cdn-purge] failed: {exc}", file=sys.stderr)
        return 1

    if args.dry_run:
        print("[cdn-purge] DRY RUN - no purge requests sent")

    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
