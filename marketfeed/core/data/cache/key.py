"""Cache key generation."""

from enum import Enum

from marketfeed.core.models.market import Market, TimeRange


class CacheKind(str, Enum):
    """TTL class of a cache entry."""

    QUOTE = "quote"
    BARS = "bars"


class CacheKey:
    """Key for a quote or bar-series entry."""

    def __init__(self, kind: CacheKind, symbol: str, market: Market, time_range: TimeRange | None = None):
        if kind is CacheKind.BARS and time_range is None:
            raise ValueError("bar cache keys require a time range")
        self.kind = kind
        self.symbol = symbol
        self.market = market
        self.time_range = time_range
        self.key = self._generate_key()

    @classmethod
    def quote(cls, symbol: str, market: Market) -> "CacheKey":
        return cls(CacheKind.QUOTE, symbol, market)

    @classmethod
    def bars(cls, symbol: str, market: Market, time_range: TimeRange) -> "CacheKey":
        return cls(CacheKind.BARS, symbol, market, time_range)

    @staticmethod
    def kind_of(key: str) -> CacheKind:
        """Recover the TTL class from a rendered key."""
        return CacheKind(key.split(":", 1)[0])

    def _generate_key(self) -> str:
        parts = [self.kind.value, self.market.value, self.symbol]
        if self.time_range is not None:
            parts.append(self.time_range.value)
        return ":".join(parts)

    def __str__(self) -> str:
        return self.key

    def __repr__(self) -> str:
        return f"CacheKey(key={self.key})"
