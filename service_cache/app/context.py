"""
Per-request context for cache operations.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TYPE_CHECKING

import structlog

from shared.config import BaseConfig
from shared.logging import get_logger

from .purge.keys import HashingKeyDeriver, KeyDeriver

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


HELIX_CONFIG_ATTRIBUTE = "helix_config"
SUB_REQUEST_ID_ATTRIBUTE = "sub_request_id"


@dataclass
class RequestContext:
    """State shared by every operation serving one incoming request."""

    org: str
    site: str
    store_code: Optional[str] = None
    store_view_code: Optional[str] = None
    settings: BaseConfig = field(default_factory=BaseConfig)
    attributes: Dict[str, Any] = field(default_factory=dict)
    key_deriver: KeyDeriver = field(default_factory=HashingKeyDeriver)
    metrics: Optional["MetricsCollector"] = None
    logger: Optional[structlog.BoundLogger] = None

    def __post_init__(self):
        if self.logger is None:
            self.logger = get_logger("cache.request").bind(org=self.org, site=self.site)

    @property
    def site_key(self) -> str:
        return f"{self.org}--{self.site}"

    @property
    def site_id(self) -> str:
        """Site identity used in purge logs and errors."""
        parts = (self.org, self.site, self.store_code, self.store_view_code)
        return "/".join(part for part in parts if part)

    @property
    def helix_config(self) -> Optional[Dict[str, Any]]:
        return self.attributes.get(HELIX_CONFIG_ATTRIBUTE)


def next_request_id(ctx: RequestContext) -> int:
    """
    Return the next sub-request id for ``ctx``, starting at 1.

    Only used to correlate log lines of concurrent requests to the same CDN.
    """
    ctx.attributes[SUB_REQUEST_ID_ATTRIBUTE] = ctx.attributes.get(SUB_REQUEST_ID_ATTRIBUTE, 0) + 1
    return ctx.attributes[SUB_REQUEST_ID_ATTRIBUTE]
