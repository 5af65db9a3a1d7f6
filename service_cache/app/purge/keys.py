"""
Surrogate key collection for product purges.
"""

import asyncio
import base64
import hashlib
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from .paths import resolve_product_path


class KeyDeriver(Protocol):
    """Derives the opaque surrogate keys a CDN uses to tag product responses."""

    async def product_sku_key(
        self, org: str, site: str, store_code: Optional[str], store_view_code: Optional[str], sku: str
    ) -> str:
        ...

    async def product_url_key_key(
        self, org: str, site: str, store_code: Optional[str], store_view_code: Optional[str], url_key: str
    ) -> str:
        ...

    async def authored_content_key(self, content_bus_id: str, path: str) -> str:
        ...


def _digest_key(value: str) -> str:
    digest = hashlib.sha256(value.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")[:16]


class HashingKeyDeriver:
    """Default key deriver: truncated URL-safe SHA-256 of a canonical string."""

    async def product_sku_key(self, org, site, store_code, store_view_code, sku):
        return _digest_key(f"{org}--{site}/{store_code}/{store_view_code}/{sku}")

    async def product_url_key_key(self, org, site, store_code, store_view_code, url_key):
        return _digest_key(f"urlkey:{org}--{site}/{store_code}/{store_view_code}/{url_key}")

    async def authored_content_key(self, content_bus_id, path):
        return _digest_key(f"{content_bus_id}{path}")


@dataclass(frozen=True)
class ProductRef:
    """A product (or a bare path) whose cached representations must be purged."""

    sku: Optional[str] = None
    url_key: Optional[str] = None
    store_code: Optional[str] = None
    store_view_code: Optional[str] = None
    path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProductRef":
        """Build from a request payload, accepting camelCase or snake_case keys."""
        return cls(
            sku=data.get("sku"),
            url_key=data.get("urlKey", data.get("url_key")),
            store_code=data.get("storeCode", data.get("store_code")),
            store_view_code=data.get("storeViewCode", data.get("store_view_code")),
            path=data.get("path"),
        )


async def collect_product_keys(
    key_deriver: KeyDeriver,
    org: str,
    site: str,
    product: ProductRef,
    helix_config: Optional[Mapping[str, Any]],
) -> List[str]:
    """
    Compute up to three keys for one product: SKU key, URL-key key and
    authored-content key.

    The authored-content key needs a ``content.contentBusId`` in the site
    config and a path, either given explicitly or resolved from the site's
    ``public.patterns``; otherwise it is omitted.
    """
    pending = []
    if product.sku:
        pending.append(key_deriver.product_sku_key(
            org, site, product.store_code, product.store_view_code, product.sku
        ))
    if product.url_key:
        pending.append(key_deriver.product_url_key_key(
            org, site, product.store_code, product.store_view_code, product.url_key
        ))

    content_bus_id = ((helix_config or {}).get("content") or {}).get("contentBusId")
    if content_bus_id:
        path = product.path or resolve_product_path(
            (helix_config or {}).get("public"),
            sku=product.sku,
            url_key=product.url_key,
            store_code=product.store_code,
            store_view_code=product.store_view_code,
        )
        if path:
            pending.append(key_deriver.authored_content_key(content_bus_id, path))

    if not pending:
        return []
    return list(await asyncio.gather(*pending))


def dedupe_keys(key_lists: Iterable[Iterable[str]]) -> List[str]:
    """Flatten key lists, keeping the first occurrence of each key."""
    unique: Dict[str, None] = {}
    for keys in key_lists:
        for key in keys:
            unique.setdefault(key, None)
    return list(unique)
