"""marketfeed main client."""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

import httpx

from marketfeed.core.config import ConfigManager, MarketFeedConfig, load_config_from_env
from marketfeed.core.data.cache import CacheStrategy, TimedMemoryCache
from marketfeed.core.data.sources import SourceChain
from marketfeed.core.models import BarSeries, Market, Quote, Ticker, TimeRange
from marketfeed.core.monitoring import MetricsCollector
from marketfeed.core.services import (
    BarFetcher,
    CalendarProvider,
    LiveCandleSimulator,
    ProfileRegistry,
    QuoteFetcher,
    Subscription,
    SubscriptionManager,
    SymbolDirectory,
    Synthesizer,
    builtin_calendars,
)
from marketfeed.core.services.live import TickCallback
from marketfeed.core.services.subscriptions import UpdateCallback


class MarketFeedClient:
    """Quotes and bar series with caching, source failover and synthetic fallback.

    The client owns its cache and HTTP client; close it with :meth:`aclose`
    or use it as an async context manager.
    """

    def __init__(
        self,
        config: MarketFeedConfig | dict[str, Any] | None = None,
        *,
        cache: CacheStrategy | None = None,
        chain: SourceChain | None = None,
        synthesizer: Synthesizer | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """Initialise the client.

        Args:
            config: a complete configuration, or a dictionary of overrides
                applied on top of the config file and ``MARKETFEED_*``
                environment variables
            cache: cache instance; defaults to an in-memory cache with the
                configured TTLs
            chain: source chain; defaults to Yahoo then Sectors
            synthesizer: fallback generator
            transport: httpx transport for the default chain
            sleep: coroutine used for backoff and polling pauses
            metrics: metrics collector; defaults to the process-wide one
        """
        if isinstance(config, MarketFeedConfig):
            self.config = config
        else:
            config_manager = ConfigManager()
            env_config = load_config_from_env()
            if env_config:
                config_manager.update_config(**env_config)
            if config:
                config_manager.update_config(**config)
            self.config = config_manager.get_config()

        self.calendars = CalendarProvider(builtin_calendars(self.config.synthesis.lunch_window))
        self.profiles = ProfileRegistry()
        self.symbols = SymbolDirectory()
        self.cache = cache or TimedMemoryCache(
            quote_ttl=self.config.cache.quote_ttl, bar_ttl=self.config.cache.bar_ttl
        )
        self.chain = chain or SourceChain.from_config(
            self.config.sources, transport=transport, sleep=sleep, metrics=metrics
        )
        self.synthesizer = synthesizer or Synthesizer(self.profiles, self.calendars, self.config.synthesis)

        self.quotes = QuoteFetcher(self.cache, self.chain, self.synthesizer, metrics)
        self.bars = BarFetcher(self.cache, self.chain, self.synthesizer, metrics)
        self.subscriptions = SubscriptionManager(
            self.quotes, self.cache, interval=self.config.subscriptions.interval, sleep=sleep
        )

    async def __aenter__(self) -> "MarketFeedClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Cancel subscriptions and release the HTTP client."""
        await self.subscriptions.close()
        await self.chain.aclose()

    async def get_quote(self, symbol: str, market: Market | str = Market.IDX) -> Quote:
        """Freshest available quote; falls back to synthetic data instead of raising."""
        return await self.quotes.get_quote(symbol, market)

    async def get_bars(
        self,
        symbol: str,
        market: Market | str = Market.IDX,
        time_range: TimeRange | str = TimeRange.MONTH_1,
    ) -> BarSeries:
        """Bar series for a logical range; the returned series is a private copy."""
        return await self.bars.get_bars(symbol, market, time_range)

    def subscribe(
        self,
        symbol: str,
        on_update: UpdateCallback,
        market: Market | str = Market.IDX,
        interval: float | None = None,
    ) -> Subscription:
        """Poll ``symbol`` and deliver each fresh quote to ``on_update``."""
        return self.subscriptions.subscribe(symbol, on_update, market, interval)

    async def clear_cache(self) -> None:
        await self.cache.clear()

    def cache_stats(self) -> dict[str, Any]:
        stats = getattr(self.cache, "stats", None)
        return stats() if callable(stats) else {}

    async def get_watchlist(self, symbols: list[str], market: Market | str = Market.IDX) -> list[Ticker]:
        """Resolve quotes for ``symbols`` concurrently, enriched with names and sectors."""
        quotes = await asyncio.gather(*(self.get_quote(symbol, market) for symbol in symbols))
        tickers = []
        for quote in quotes:
            info = self.symbols.lookup(quote.symbol)
            tickers.append(Ticker.from_quote(quote, name=info.name, sector=info.sector))
        return tickers

    async def search(self, query: str, market: Market | str = Market.IDX) -> list[Ticker]:
        """Watchlist rows for directory entries matching ``query`` by symbol or name."""
        matches = self.symbols.search(query)
        return await self.get_watchlist([info.symbol for info in matches], market)

    def trending(self) -> list[str]:
        return self.symbols.trending()

    def is_market_open(self, market: Market | str = Market.IDX, at: datetime | None = None) -> bool:
        return self.calendars.is_market_open(market, at)

    def live_simulator(self, series: BarSeries, on_tick: TickCallback | None = None) -> LiveCandleSimulator:
        """Live candle simulator for an intraday series, using the configured cadence."""
        return LiveCandleSimulator(
            series,
            interval=self.config.subscriptions.live_interval,
            volatility=self.config.subscriptions.live_volatility,
            on_tick=on_tick,
        )
