"""Thread-safe in-memory cache with per-class TTL."""

import time
from collections.abc import Callable
from threading import Lock
from typing import Any

from .base import CacheStrategy
from .key import CacheKey, CacheKind


class TimedMemoryCache(CacheStrategy):
    """Key -> (value, inserted_at) map with expiry-on-read.

    Entries are never swept in the background; a stale entry is dropped the
    next time it is read. Entries are replaced wholesale, never mutated.
    """

    def __init__(
        self,
        quote_ttl: float = 30.0,
        bar_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttls = {CacheKind.QUOTE: quote_ttl, CacheKind.BARS: bar_ttl}
        self._clock = clock
        self._cache: dict[str, tuple[Any, float]] = {}
        self._lock = Lock()

    def ttl(self, key: str | CacheKey) -> float:
        """TTL in seconds of the class ``key`` belongs to."""
        return self._ttls[CacheKey.kind_of(str(key))]

    async def get(self, key: str | CacheKey) -> Any | None:
        key = str(key)
        ttl = self.ttl(key)
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            value, inserted_at = entry
            if self._clock() - inserted_at >= ttl:
                del self._cache[key]
                return None
            return value

    async def set(self, key: str | CacheKey, value: Any) -> None:
        key = str(key)
        inserted_at = self._clock()
        with self._lock:
            self._cache[key] = (value, inserted_at)

    async def delete(self, key: str | CacheKey) -> bool:
        with self._lock:
            return self._cache.pop(str(key), None) is not None

    async def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def stats(self) -> dict[str, Any]:
        """Entry count and TTL configuration."""
        return {
            "total_entries": len(self),
            "quote_ttl_seconds": self._ttls[CacheKind.QUOTE],
            "bar_ttl_seconds": self._ttls[CacheKind.BARS],
        }
