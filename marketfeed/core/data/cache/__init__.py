"""Cache implementations."""

from marketfeed.core.data.cache.base import CacheStrategy
from marketfeed.core.data.cache.key import CacheKey, CacheKind
from marketfeed.core.data.cache.memory import TimedMemoryCache

__all__ = [
    "CacheStrategy",
    "CacheKey",
    "CacheKind",
    "TimedMemoryCache",
]
