"""
Cache service for the catalog API.

Exposes the bulk purge endpoint used by admins and integrations to
invalidate cached product pages after out-of-band catalog changes.
"""

import json
import secrets
from typing import Dict, Optional

from fastapi import Header, Request, Response

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import AuthenticationError, NotFoundError, PurgeError
from shared.logging import set_site_context

from .context import RequestContext
from .purge.orchestrator import PurgeResult, purge_batch
from .site_config import fetch_helix_config
from .validation import parse_bulk_purge_request

SERVICE_NAME = "cache"
SERVICE_PORT = 8020


class CacheService(BaseService):
    """Cache service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None):
        super().__init__(SERVICE_NAME, SERVICE_PORT, config)
        self._setup_cache_routes()

    def create_context(self, org: str, site: str, **kwargs) -> RequestContext:
        """Build the per-request context for ``org``/``site``."""
        return RequestContext(
            org=org,
            site=site,
            settings=self.config,
            metrics=self.metrics,
            logger=self.logger.bind(org=org, site=site),
            **kwargs,
        )

    async def _check_dependencies(self) -> Dict[str, str]:
        """Report which outbound credentials are configured."""
        return {
            "config_service": "configured" if self.config.config_service_token else "unconfigured",
            "cache_api_key": "configured" if self.config.cache_api_key else "unconfigured",
            "managed_purge_proxy": "configured" if self.config.managed_purge_token else "unconfigured",
        }

    def _authorize(self, header_value: Optional[str]) -> None:
        """Check the ``x-cache-api-key`` header (``Bearer <key>`` or ``<key>``)."""
        expected = self.config.cache_api_key
        if not expected:
            self.logger.warning("CACHE_API_KEY not configured")
            raise AuthenticationError()

        if not header_value:
            raise AuthenticationError()

        token = header_value[len("Bearer "):] if header_value.startswith("Bearer ") else header_value
        if not secrets.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
            self.logger.warning("Invalid or missing cache API key")
            raise AuthenticationError()

    def _setup_cache_routes(self):
        """Set up cache-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "Catalog API - Cache Service",
                "version": "1.0.0",
                "capabilities": ["bulk_purge", "fastly", "cloudflare", "akamai", "managed"]
            }

        @self.app.post("/{org}/{site}/cache")
        async def bulk_purge(
            org: str,
            site: str,
            request: Request,
            x_cache_api_key: Optional[str] = Header(None),
        ):
            """Purge cached pages for a batch of products of one site."""
            set_site_context(org, site)
            self._authorize(x_cache_api_key)

            try:
                data = await request.json()
            except (json.JSONDecodeError, UnicodeDecodeError):
                data = None
            products = parse_bulk_purge_request(data)

            ctx = self.create_context(org, site)
            helix_config = await fetch_helix_config(ctx, org, site)
            if not helix_config:
                ctx.logger.warning(f"No helix config found for {org}/{site}")
                raise NotFoundError("site configuration not found")

            try:
                result = await purge_batch(ctx, {"org": org, "site": site}, products)
            except Exception as exc:
                # every batch failure, an unknown CDN type included, is reported as a purge failure
                cdn_type = ((helix_config.get("cdn") or {}).get("prod") or {}).get("type")
                provider = getattr(exc, "provider", None) or cdn_type
                result = PurgeResult.failed(exc, provider=provider)
                ctx.logger.error(
                    "Failed to purge cache for batch",
                    status=result.status.value,
                    provider=result.provider,
                    error=result.reason,
                )
                message = getattr(exc, "message", None) or str(exc)
                raise PurgeError(provider, f"cache purge failed: {message}", getattr(exc, "details", None)) from exc

            ctx.logger.info(
                f"Cache purge completed: {len(products)} products purged successfully",
                status=result.status.value,
                provider=result.provider,
                key_count=len(result.keys),
            )
            return Response(content="", status_code=200)


def create_app(config: Optional[ServiceConfig] = None):
    """Create cache service application."""
    service = CacheService(config)
    return service.app


if __name__ == "__main__":
    service = CacheService()
    service.run()
