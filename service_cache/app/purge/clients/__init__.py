"""
CDN purge clients, one per supported ``cdn.prod.type``.
"""

from .akamai import AkamaiPurgeClient
from .cloudflare import CloudflarePurgeClient
from .fastly import FastlyPurgeClient
from .managed import ManagedPurgeClient

__all__ = [
    "AkamaiPurgeClient",
    "CloudflarePurgeClient",
    "FastlyPurgeClient",
    "ManagedPurgeClient",
]
