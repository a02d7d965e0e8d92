# File: hr_briefing/utils/rate_limiter.py
"""Concurrency limiting for outbound fetches"""
import asyncio
from typing import Awaitable, Callable, TypeVar

from hr_briefing.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


class ConcurrencyLimiter:
    """Caps the number of coroutines in flight at once.

    One instance is shared by every scraper so that all content fetches draw
    from the same budget.
    """

    def __init__(self, max_concurrent: int = 4):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self.in_flight = 0
        self.peak_in_flight = 0

    async def run(self, func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        """Run func once a slot is free"""
        async with self._semaphore:
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
            try:
                return await func(*args, **kwargs)
            finally:
                self.in_flight -= 1

    async def map(self, func: Callable[..., Awaitable[T]], items) -> list:
        """Run func over items concurrently within the limit, keeping input order"""
        items = list(items)
        logger.debug(f"Queueing {len(items)} tasks (limit {self.max_concurrent})")
        return await asyncio.gather(*(self.run(func, item) for item in items))
