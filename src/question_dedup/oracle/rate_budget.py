"""Shared request budget for the semantic judge."""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from question_dedup.observability.logger import get_logger

logger = get_logger("rate_budget")


class RateBudget:
    """Token bucket refilled to full capacity once per fixed window, plus a
    ceiling on calls in flight.

    The window is wall-clock based and independent of batches. Callers that
    find the bucket empty sleep until the next refill; concurrency slots are
    handed out in FIFO order so a waiting caller is eventually served.
    """

    def __init__(
        self,
        capacity: int,
        window_seconds: float,
        max_concurrency: int = 2,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1 or max_concurrency < 1 or window_seconds <= 0:
            raise ValueError("capacity, max_concurrency and window_seconds must be positive")
        self._capacity = capacity
        self._window = window_seconds
        self._clock = clock
        self._tokens = capacity
        self._window_start = clock()
        self._lock = asyncio.Lock()
        self._slots = asyncio.Semaphore(max_concurrency)

    @property
    def available(self) -> int:
        self._refill()
        return self._tokens

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold one concurrency slot and one budget token for the block."""
        await self._slots.acquire()
        try:
            await self._take_token()
            yield
        finally:
            self._slots.release()

    async def _take_token(self) -> None:
        while True:
            async with self._lock:
                self._refill()
                if self._tokens > 0:
                    self._tokens -= 1
                    return
                wait = self._window_start + self._window - self._clock()
            logger.debug("rate_budget_exhausted", wait_seconds=round(max(wait, 0.0), 3))
            await asyncio.sleep(max(wait, 0.0))

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._window_start
        if elapsed >= self._window:
            windows = int(elapsed // self._window)
            self._window_start += windows * self._window
            self._tokens = self._capacity
