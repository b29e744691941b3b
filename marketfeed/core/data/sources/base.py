"""Data source abstract base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from marketfeed.core.exceptions import SourceMissingField
from marketfeed.core.models import BarSeries, Interval, Market, Quote, RangeSpec

if TYPE_CHECKING:
    from marketfeed.core.data.sources.relays import RelayHttp


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SourceCapability:
    """What a data source can serve."""

    supported_markets: set[Market]
    supported_intervals: set[Interval] = field(default_factory=lambda: set(Interval))
    supports_quotes: bool = True
    supports_bars: bool = True


class DataSource(ABC):
    """One upstream JSON endpoint reached through relays.

    A source performs a single attempt per call; retries, relay rotation and
    hard timeouts belong to the source chain.
    """

    def __init__(
        self,
        name: str,
        max_attempts: int,
        quote_timeout: float,
        bars_timeout: float,
        now: Callable[[], datetime] = utc_now,
    ):
        """Initialise the source.

        Args:
            name: provider name stamped on results and attempts
            max_attempts: attempts the chain may spend on this source
            quote_timeout: hard timeout of one quote attempt in seconds
            bars_timeout: hard timeout of one bar attempt in seconds
            now: clock used for request windows and quote timestamps
        """
        self.name = name
        self.max_attempts = max_attempts
        self.quote_timeout = quote_timeout
        self.bars_timeout = bars_timeout
        self._now = now
        self._capability: SourceCapability | None = None

    @property
    def capability(self) -> SourceCapability:
        if self._capability is None:
            self._capability = self._discover_capability()
        return self._capability

    @abstractmethod
    def _discover_capability(self) -> SourceCapability:
        pass

    def can_serve_quote(self, market: Market) -> bool:
        cap = self.capability
        return cap.supports_quotes and market in cap.supported_markets

    def can_serve_bars(self, market: Market, spec: RangeSpec) -> bool:
        cap = self.capability
        return cap.supports_bars and market in cap.supported_markets and spec.interval in cap.supported_intervals

    @abstractmethod
    async def fetch_quote(self, http: RelayHttp, symbol: str, market: Market) -> Quote:
        """Fetch the current quote in one attempt.

        Raises:
            SourceError: the attempt failed
        """
        pass

    @abstractmethod
    async def fetch_bars(self, http: RelayHttp, symbol: str, market: Market, spec: RangeSpec) -> BarSeries:
        """Fetch the bar series of ``spec`` in one attempt.

        Raises:
            SourceError: the attempt failed
        """
        pass

    def require(self, payload: Mapping[str, Any], *names: str) -> Any:
        """First present, non-null and non-zero field among ``names``.

        Raises:
            SourceMissingField: none of the fields carries a value
        """
        for name in names:
            value = payload.get(name)
            if value:
                return value
        raise SourceMissingField(names[0], self.name)

    def pick(self, payload: Mapping[str, Any], *names: str, default: Any = None) -> Any:
        """Like :meth:`require`, degrading to ``default`` when every field is missing."""
        try:
            return self.require(payload, *names)
        except SourceMissingField:
            return default

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, max_attempts={self.max_attempts})"
