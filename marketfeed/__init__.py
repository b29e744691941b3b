"""marketfeed - market quote acquisition layer.

Quotes and OHLCV bar series for IDX, US and crypto symbols with
time-bounded caching, failover across upstream sources and a synthetic
fallback that keeps dashboards populated when every source is down.
"""

from typing import Any

from marketfeed.core.client.client import MarketFeedClient
from marketfeed.core.models import BarSeries, Market, Quote, SourceTag, Ticker, TimeRange

_client: MarketFeedClient | None = None


def get_client() -> MarketFeedClient:
    """Return the lazily created process-wide client."""
    global _client
    if _client is None:
        _client = MarketFeedClient()
    return _client


def configure(**config: Any) -> None:
    """Replace the process-wide client with one built from ``config`` overrides.

    Subscriptions and connections of the previous client are not closed;
    call :func:`aclose` first if it was in use.
    """
    global _client
    _client = MarketFeedClient(config)


async def get_quote(symbol: str, market: Market | str = Market.IDX) -> Quote:
    """Fetch a quote with the default client.

    Examples:
        >>> import asyncio
        >>> import marketfeed
        >>> quote = asyncio.run(marketfeed.get_quote("BBCA"))
        >>> quote.source in {"cache", "live", "synthetic"}
        True
    """
    return await get_client().get_quote(symbol, market)


async def get_bars(
    symbol: str,
    market: Market | str = Market.IDX,
    time_range: TimeRange | str = TimeRange.MONTH_1,
) -> BarSeries:
    """Fetch a bar series with the default client."""
    return await get_client().get_bars(symbol, market, time_range)


async def get_watchlist(symbols: list[str], market: Market | str = Market.IDX) -> list[Ticker]:
    return await get_client().get_watchlist(symbols, market)


async def clear_cache() -> None:
    await get_client().clear_cache()


async def aclose() -> None:
    """Close the default client, if one was created."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


__version__ = "0.1.0"

__all__ = [
    "MarketFeedClient",
    "BarSeries",
    "Market",
    "Quote",
    "SourceTag",
    "Ticker",
    "TimeRange",
    "aclose",
    "clear_cache",
    "configure",
    "get_bars",
    "get_client",
    "get_quote",
    "get_watchlist",
    "__version__",
]
