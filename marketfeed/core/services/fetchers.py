"""Cache, then source chain, then synthesizer resolution of quotes and bars."""

from __future__ import annotations

from marketfeed.core.data.cache import CacheKey, CacheKind, CacheStrategy
from marketfeed.core.data.sources import SourceChain
from marketfeed.core.exceptions import AllSourcesExhausted
from marketfeed.core.logging import get_logger, log_context
from marketfeed.core.models import BarSeries, Market, Quote, SourceTag, TimeRange, resolve_range
from marketfeed.core.monitoring import MetricsCollector, get_metrics_collector
from marketfeed.core.services.profiles import normalize_symbol
from marketfeed.core.services.synthesizer import Synthesizer

logger = get_logger(__name__)


class _TieredFetcher:
    def __init__(
        self,
        cache: CacheStrategy,
        chain: SourceChain,
        synthesizer: Synthesizer,
        metrics: MetricsCollector | None = None,
    ):
        self.cache = cache
        self.chain = chain
        self.synthesizer = synthesizer
        self._metrics = metrics

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics or get_metrics_collector()

    async def _lookup(self, key: CacheKey):
        cached = await self.cache.get(key)
        self.metrics.record_cache_lookup(key.kind.value, hit=cached is not None)
        return cached


class QuoteFetcher(_TieredFetcher):
    """Resolves quotes; never raises for source failures."""

    async def get_quote(self, symbol: str, market: Market | str = Market.IDX) -> Quote:
        symbol = normalize_symbol(symbol)
        market = Market.parse(market)
        key = CacheKey.quote(symbol, market)

        cached = await self._lookup(key)
        if cached is not None:
            return cached.model_copy(update={"source": SourceTag.CACHE})

        with log_context(symbol=symbol):
            try:
                quote = await self.chain.fetch_quote(symbol, market)
            except AllSourcesExhausted as exc:
                logger.warning("No live quote for {} {} after {} attempts, synthesizing", market.value, symbol, len(exc.attempts))
                self.metrics.record_synthetic_fallback(CacheKind.QUOTE.value)
                quote = self.synthesizer.synthesize_quote(symbol, market)

        await self.cache.set(key, quote)
        return quote


class BarFetcher(_TieredFetcher):
    """Resolves bar series; returned series are copies safe to mutate."""

    async def get_bars(
        self,
        symbol: str,
        market: Market | str = Market.IDX,
        time_range: TimeRange | str = TimeRange.MONTH_1,
    ) -> BarSeries:
        symbol = normalize_symbol(symbol)
        market = Market.parse(market)
        spec = resolve_range(time_range)
        key = CacheKey.bars(symbol, market, spec.range)

        cached = await self._lookup(key)
        if cached is not None:
            return cached.detached(source=SourceTag.CACHE)

        with log_context(symbol=symbol):
            try:
                series = await self.chain.fetch_bars(symbol, market, spec)
            except AllSourcesExhausted as exc:
                logger.warning(
                    "No live {} bars for {} {} after {} attempts, synthesizing",
                    spec.range.value,
                    market.value,
                    symbol,
                    len(exc.attempts),
                )
                self.metrics.record_synthetic_fallback(CacheKind.BARS.value)
                series = self.synthesizer.synthesize_bars(symbol, market, spec.range)

        await self.cache.set(key, series)
        return series.detached()


__all__ = ["BarFetcher", "QuoteFetcher"]
