"""
Cache Service package for the catalog API.

This package invalidates cached product representations on the production
CDN after catalog writes. It provides:

- app.main: API surface for bulk purges and health.
- app.context: Per-request context and sub-request correlation.
- app.site_config: Site configuration lookup, cached per request.
- app.purge: Key collection, provider clients and purge orchestration.

Guidelines:
- A missing or partial CDN configuration never fails a catalog write.
- Purges are attempted once; callers decide whether to retry.
"""
