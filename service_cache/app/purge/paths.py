"""
Product path resolution against a site's public URL patterns.
"""

import re
from typing import Any, Dict, Mapping, Optional

PLACEHOLDER_RE = re.compile(r"\{\{([^}]+)\}\}")
BASE_PATTERN = "base"
PRODUCT_PAGE_TYPE = "product"


def resolve_product_path(
    public_config: Optional[Mapping[str, Any]],
    *,
    sku: Optional[str] = None,
    url_key: Optional[str] = None,
    store_code: Optional[str] = None,
    store_view_code: Optional[str] = None,
) -> Optional[str]:
    """
    Resolve the canonical path of a product page.

    Patterns whose ``pageType`` is ``product`` are tried in table order. The
    first one for which every ``{{placeholder}}`` has a non-empty value wins.
    ``storeCode`` and ``storeViewCode`` fall back to the ``base`` entry.
    Returns ``None`` when no pattern can be filled.
    """
    patterns = (public_config or {}).get("patterns") or {}
    base = patterns.get(BASE_PATTERN) or {}

    values: Dict[str, Optional[str]] = {
        "sku": sku,
        "urlKey": url_key,
        "storeCode": store_code or base.get("storeCode"),
        "storeViewCode": store_view_code or base.get("storeViewCode"),
    }

    for pattern, page_config in patterns.items():
        if pattern == BASE_PATTERN or not isinstance(page_config, Mapping):
            continue
        if page_config.get("pageType") != PRODUCT_PAGE_TYPE:
            continue

        names = PLACEHOLDER_RE.findall(pattern)
        if not all(values.get(name.strip()) for name in names):
            continue
        return PLACEHOLDER_RE.sub(lambda m: str(values[m.group(1).strip()]), pattern)

    return None
