"""Minimum-interval gate for upstream APIs.

Nominatim's usage policy allows at most one request per second, and the
planner spaces out Groq calls the same way. A gate remembers when its
last guarded request finished and makes the next caller sleep until the
interval has passed.

``throttle()`` holds a lock from the wait until the request is marked, so
concurrent callers on one event loop go through one at a time, each at
least ``min_interval`` after the previous one finished. ``acquire()`` and
``mark()`` on their own take no lock.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

logger = logging.getLogger(__name__)


class RateGate:
    """Enforces ``min_interval`` seconds between consecutive requests."""

    def __init__(
        self,
        name: str,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.name = name
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request_time: float | None = None
        self._lock = asyncio.Lock()

    @property
    def last_request_time(self) -> float | None:
        return self._last_request_time

    def remaining_delay(self) -> float:
        """Seconds a caller would have to wait right now."""
        if self._last_request_time is None:
            return 0.0
        elapsed = self._clock() - self._last_request_time
        return max(0.0, self.min_interval - elapsed)

    async def acquire(self) -> None:
        delay = self.remaining_delay()
        if delay > 0:
            logger.info(f"[RATE] {self.name}: waiting {delay * 1000:.0f}ms")
            await self._sleep(delay)

    def mark(self) -> None:
        """Record that a guarded request just completed."""
        self._last_request_time = self._clock()

    @asynccontextmanager
    async def throttle(self) -> AsyncIterator[None]:
        """Wait for the gate, run the block, then mark it even on failure."""
        async with self._lock:
            await self.acquire()
            try:
                yield
            finally:
                self.mark()
