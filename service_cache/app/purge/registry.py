"""
Lookup of purge clients by CDN type.
"""

from typing import Any, Dict

from shared.errors import UnsupportedCDNError

from .clients import AkamaiPurgeClient, CloudflarePurgeClient, FastlyPurgeClient, ManagedPurgeClient
from .clients.base import PurgeClient

PURGE_CLIENTS: Dict[str, PurgeClient] = {
    "fastly": FastlyPurgeClient,
    "akamai": AkamaiPurgeClient,
    "cloudflare": CloudflarePurgeClient,
    "managed": ManagedPurgeClient,
}


def get_purge_client(cdn_type: Any) -> PurgeClient:
    """Return the purge client for ``cdn_type`` or raise ``UnsupportedCDNError``."""
    client = PURGE_CLIENTS.get(cdn_type) if isinstance(cdn_type, str) else None
    if client is None:
        raise UnsupportedCDNError(cdn_type)
    return client
