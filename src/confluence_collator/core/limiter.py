"""
Concurrency Limiter

Bounded-parallelism admission control for coroutine work. At most `limit`
calls run at once; further calls wait in FIFO order until a slot frees.

The limiter knows nothing about HTTP or documents, so the concurrency policy
can be exercised in isolation from the collator.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


class ConcurrencyLimiter:
    """
    Fixed-size slot pool guarding coroutine execution.
    """

    def __init__(self, limit: int) -> None:
        """
        Parameters
        ----------
        limit : int
            Maximum number of calls allowed in flight simultaneously.

        Raises
        ------
        ValueError
            If limit is lower than 1.
        """
        if limit < 1:
            raise ValueError(f"Concurrency limit must be at least 1; got {limit}")

        self._limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self._active = 0
        self._pending = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def active_count(self) -> int:
        """Number of calls currently holding a slot."""
        return self._active

    @property
    def pending_count(self) -> int:
        """Number of calls waiting for a slot."""
        return self._pending

    async def run(
        self,
        fn: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """
        Wait for a free slot, then await `fn(*args, **kwargs)`.

        The slot is released whether the call returns or raises; exceptions
        propagate to the caller unchanged.
        """
        self._pending += 1
        try:
            await self._semaphore.acquire()
        finally:
            self._pending -= 1

        self._active += 1
        try:
            return await fn(*args, **kwargs)
        finally:
            self._active -= 1
            self._semaphore.release()
