"""
Site configuration lookup for cache operations.
"""

from typing import Any, Dict, Optional

import httpx

from shared.errors import ConfigFetchError

from .context import HELIX_CONFIG_ATTRIBUTE, RequestContext


async def fetch_helix_config(
    ctx: RequestContext,
    org: Optional[str] = None,
    site: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Return the site configuration for ``org``/``site``.

    The result is cached on the request context, so repeated purges within one
    request fetch it once. Missing (404), erroring and legacy configurations
    yield ``None``; transport failures raise ``ConfigFetchError``.
    """
    cached = ctx.attributes.get(HELIX_CONFIG_ATTRIBUTE)
    if cached is not None:
        return cached

    org = org or ctx.org
    site = site or ctx.site
    settings = ctx.settings
    url = f"{settings.config_service_url.rstrip('/')}/main--{site}--{org}/config.json"
    headers = {
        "x-access-token": settings.config_service_token or "",
        "cache-control": "no-cache",
        "x-backend-type": "aws",
    }

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(url, params={"scope": "raw"}, headers=headers)
    except httpx.HTTPError as exc:
        raise ConfigFetchError(
            f"Fetching config for {org}/{site} failed: {exc}",
            {"url": url},
        ) from exc

    if response.status_code == 404:
        return None

    if not response.is_success:
        ctx.logger.warning(
            f"error loading config from {url}: {response.status_code}",
            status_code=response.status_code,
        )
        return None

    try:
        config = response.json()
    except ValueError as exc:
        ctx.logger.warning(f"error loading config from {url}: invalid JSON", error=str(exc))
        return None

    if not isinstance(config, dict) or config.get("legacy"):
        ctx.logger.info("Ignoring legacy site config", url=url)
        return None

    ctx.logger.info(f"loaded config from {url}")
    ctx.attributes[HELIX_CONFIG_ATTRIBUTE] = config
    return config
