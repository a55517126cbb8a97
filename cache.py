"""Single-slot in-memory cache with a time-to-live."""

import time
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from logging_setup import get_logger

T = TypeVar("T")

logger = get_logger()


def monotonic_ms() -> float:
    """Current monotonic time in milliseconds."""
    return time.monotonic() * 1000


class TTLCache(Generic[T]):
    """Holds the most recent successfully built value for ttl_ms milliseconds.

    A failed rebuild leaves the previous value (and its timestamp) in place.
    Concurrent misses are not de-duplicated; each caller rebuilds.
    """

    def __init__(
        self,
        ttl_ms: int,
        clock: Callable[[], float] = monotonic_ms,
        name: str = "cache",
    ):
        self.ttl_ms = ttl_ms
        self.name = name
        self._clock = clock
        self._value: T | None = None
        self._populated_at: float | None = None

    @property
    def value(self) -> T | None:
        return self._value

    def is_fresh(self) -> bool:
        if self._value is None or self._populated_at is None:
            return False
        return self._clock() - self._populated_at < self.ttl_ms

    async def get_or_build(self, builder: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value if fresh, otherwise build and store a new one."""
        if self.is_fresh():
            logger.debug("%s cache hit", self.name)
            return self._value

        logger.debug("%s cache stale, rebuilding", self.name)
        value = await builder()
        self._value, self._populated_at = value, self._clock()
        return value
