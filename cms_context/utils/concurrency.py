"""Shared concurrency primitives for fanning out independent store round-trips.

1. **throttled_gather** -- A drop-in replacement for ``asyncio.gather`` that
   wraps each awaitable in a semaphore acquire/release.  The catalog builder
   uses it to sample every document kind concurrently without opening an
   unbounded number of connections against the document store.

2. **raise_first_error** -- Turns a ``return_exceptions=True`` result list
   back into all-or-nothing semantics once every sibling has settled.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Sequence, TypeVar

_T = TypeVar("_T")

# Concurrent store requests allowed per fan-out.
DEFAULT_CONCURRENCY = 5


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore | None = None,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently with semaphore throttling.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Optional semaphore for concurrency control.  A fresh semaphore of
        ``DEFAULT_CONCURRENCY`` slots is created per call when omitted, so
        concurrent callers never share a limiter.
    return_exceptions:
        If ``True`` (the default), exceptions are returned in the results
        list and every awaitable runs to completion.  Mirrors
        ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input coroutines.
    """
    if semaphore is None:
        semaphore = asyncio.Semaphore(DEFAULT_CONCURRENCY)

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)


def raise_first_error(results: Sequence[_T | BaseException]) -> list[_T]:
    """Return *results* unchanged, or raise the first exception among them.

    Call on the output of a ``return_exceptions=True`` gather so that a
    failure surfaces only after no sibling is still in flight.
    """
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)  # type: ignore[arg-type]
