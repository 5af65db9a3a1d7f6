"""
Common pieces shared by the CDN purge clients.
"""

from typing import Any, Iterator, List, Mapping, Optional, Protocol, Sequence

from shared.errors import PurgeConfigError, PurgeError

from ...context import RequestContext

INVALID_CONFIG_MESSAGE = "invalid purge config"


class PurgeClient(Protocol):
    """Capability contract every CDN purge client satisfies."""

    name: str
    batch_size: Optional[int]

    @staticmethod
    def validate(config: Mapping[str, Any]) -> None:
        ...

    @staticmethod
    def supports_purge_by_key() -> bool:
        ...

    @classmethod
    async def purge(cls, ctx: RequestContext, purge_config: Mapping[str, Any], keys: Sequence[str]) -> None:
        ...


def assert_required_properties(obj: Mapping[str, Any], msg: str, *names: str) -> None:
    """
    Raise ``PurgeConfigError`` naming the first property of ``names`` that is
    missing or falsy in ``obj``. ``0``, ``""`` and ``False`` count as missing.
    """
    for name in names:
        if not obj.get(name):
            raise PurgeConfigError(f'{msg}: "{name}" is required', {"property": name})


def batched(keys: Sequence[str], size: Optional[int]) -> Iterator[List[str]]:
    """Split ``keys`` into ordered slices of at most ``size`` (one slice if unbounded)."""
    if not size:
        if keys:
            yield list(keys)
        return
    for start in range(0, len(keys), size):
        yield list(keys[start:start + size])


def record_request(ctx: RequestContext, provider: str, status: str, key_count: int) -> None:
    if ctx.metrics is not None:
        ctx.metrics.record_purge_request(provider, status, key_count)


def purge_failure(
    ctx: RequestContext,
    request_id: int,
    provider: str,
    host: str,
    detail: str,
    *,
    key_count: int,
    status_code: Optional[int] = None,
    body: Optional[str] = None,
) -> PurgeError:
    """Log a failed purge request and build the error to raise for it."""
    message = f"{ctx.site_id} [{request_id}] [{provider}] {host} {detail}"
    ctx.logger.error(
        "CDN purge failed",
        site_id=ctx.site_id,
        request_id=request_id,
        provider=provider,
        host=host,
        status_code=status_code,
        error=message,
    )
    record_request(ctx, provider, "error", key_count)
    return PurgeError(
        provider,
        message,
        {
            "site_id": ctx.site_id,
            "request_id": request_id,
            "host": host,
            "status_code": status_code,
            "body": body,
        },
    )
