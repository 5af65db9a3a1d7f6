"""
CDN purge package.

Computes surrogate keys for products, selects the purge client matching the
site's ``cdn.prod.type`` and dispatches batched purge requests.

- purge.keys: Surrogate key derivation and batch-wide deduplication.
- purge.paths: Product path resolution against the site's URL patterns.
- purge.clients: One purge client per supported CDN.
- purge.registry: CDN type to purge client lookup.
- purge.orchestrator: Entry points used by catalog writes and bulk purges.
"""
