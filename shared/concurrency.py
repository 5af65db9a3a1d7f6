"""
Bounded-concurrency helpers for fan-out over outbound calls.
"""

import asyncio
from typing import Any, Awaitable, Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")

DEFAULT_MAX_CONCURRENT = 8


async def process_queue(
    items: Iterable[T],
    handler: Callable[[T], Awaitable[Any]],
    max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    *,
    stop_on_error: bool = False,
) -> List[Any]:
    """
    Run ``handler`` for every item with at most ``max_concurrent`` in flight.

    All started handlers are allowed to settle before this returns. If any
    handler raised, the first error (by completion order) is re-raised once
    everything has settled. With ``stop_on_error`` set, items that have not
    started yet when the first error is recorded are skipped; handlers that
    are already running are never cancelled.

    Returns the handler results in item order (``None`` for skipped items).
    """
    semaphore = asyncio.Semaphore(max(1, max_concurrent))
    first_error: Optional[BaseException] = None

    async def _run(item: T) -> Any:
        nonlocal first_error
        async with semaphore:
            if stop_on_error and first_error is not None:
                return None
            try:
                return await handler(item)
            except Exception as exc:
                if first_error is None:
                    first_error = exc
                return None

    results = await asyncio.gather(*(_run(item) for item in items))

    if first_error is not None:
        raise first_error
    return list(results)
