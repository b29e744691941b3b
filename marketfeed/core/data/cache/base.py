"""Cache strategy interface."""

from abc import ABC, abstractmethod
from typing import Any


class CacheStrategy(ABC):
    """Abstract cache strategy."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store a value, replacing any previous entry wholesale."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Drop a single entry."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Drop every entry."""
        pass
