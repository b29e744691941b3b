"""Quote, bar and watchlist commands for the marketfeed CLI."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Mapping, TypeVar

import typer

from marketfeed.core.client import MarketFeedClient
from marketfeed.core.exceptions import ConfigurationError, MarketFeedError
from marketfeed.core.models import BarSeries, Quote, Ticker

from .constants import INTERRUPTED_EXIT_CODE, SYSTEM_EXIT_CODE, VALIDATION_EXIT_CODE
from .utils import emit_error, parse_market, parse_range, prepare_output

T = TypeVar("T")

QUOTE_COLUMNS = [
    "symbol",
    "market",
    "price",
    "change",
    "change_percent",
    "open",
    "high",
    "low",
    "volume",
    "source",
    "provider",
    "last_update",
]
BAR_COLUMNS = ["label", "timestamp", "open", "high", "low", "close", "volume"]
TICKER_COLUMNS = ["symbol", "name", "sector", "price", "change", "change_percent", "volume", "source"]


def register(app: typer.Typer) -> None:
    """Register market data commands on the root CLI application."""

    app.command("quote")(quote_command)
    app.command("bars")(bars_command)
    app.command("watch")(watch_command)
    app.command("watchlist")(watchlist_command)
    app.command("search")(search_command)


def get_client() -> MarketFeedClient:
    """Factory hook returning a :class:`MarketFeedClient` instance."""

    return MarketFeedClient()


def quote_command(
    ctx: typer.Context,
    symbols: list[str] = typer.Argument(..., help="Symbols to quote."),
    market: str = typer.Option("IDX", "--market", "-m", help="Market: IDX, US or CRYPTO."),
) -> None:
    """Show the latest quote for one or more symbols."""

    market_value = parse_market(market)
    formatter, stream, stack, _ = prepare_output(ctx)

    async def _work(client: MarketFeedClient) -> list[Quote]:
        return list(await asyncio.gather(*(client.get_quote(symbol, market_value) for symbol in symbols)))

    try:
        quotes = _execute(_work)
        formatter.render([_quote_to_row(quote) for quote in quotes], stream=stream, columns=QUOTE_COLUMNS)
    finally:
        stack.close()


def bars_command(
    ctx: typer.Context,
    symbol: str = typer.Argument(..., help="Symbol to chart."),
    market: str = typer.Option("IDX", "--market", "-m", help="Market: IDX, US or CRYPTO."),
    time_range: str = typer.Option("1M", "--range", "-r", help="Range: 1D, 5D, 1M, 3M, 6M, YTD, 1Y or 5Y."),
) -> None:
    """Show OHLCV bars for a symbol over a logical range."""

    market_value = parse_market(market)
    range_value = parse_range(time_range)
    formatter, stream, stack, _ = prepare_output(ctx)

    async def _work(client: MarketFeedClient) -> BarSeries:
        return await client.get_bars(symbol, market_value, range_value)

    try:
        series = _execute(_work)
        title = f"{series.symbol} {series.range.value} ({series.interval.value}, {series.source.value})"
        formatter.render(_series_to_rows(series), stream=stream, columns=BAR_COLUMNS, title=title)
    finally:
        stack.close()


def watch_command(
    ctx: typer.Context,
    symbol: str = typer.Argument(..., help="Symbol to follow."),
    market: str = typer.Option("IDX", "--market", "-m", help="Market: IDX, US or CRYPTO."),
    count: int = typer.Option(3, "--count", "-n", min=1, help="Number of updates to print before exiting."),
    interval: float | None = typer.Option(None, "--interval", min=0.01, help="Seconds between polls."),
) -> None:
    """Poll a symbol and print every fresh quote."""

    market_value = parse_market(market)
    formatter, stream, stack, _ = prepare_output(ctx)

    async def _work(client: MarketFeedClient) -> None:
        updates: asyncio.Queue[Quote] = asyncio.Queue()
        subscription = client.subscribe(symbol, updates.put_nowait, market_value, interval)
        try:
            for _ in range(count):
                quote = await updates.get()
                formatter.render([_quote_to_row(quote)], stream=stream, columns=QUOTE_COLUMNS)
        finally:
            subscription()

    try:
        _execute(_work)
    except KeyboardInterrupt as exc:
        raise typer.Exit(code=INTERRUPTED_EXIT_CODE) from exc
    finally:
        stack.close()


def watchlist_command(
    ctx: typer.Context,
    symbols: list[str] | None = typer.Argument(None, help="Symbols to list; defaults to trending IDX names."),
    market: str = typer.Option("IDX", "--market", "-m", help="Market: IDX, US or CRYPTO."),
) -> None:
    """Show a watchlist with company names and sectors."""

    market_value = parse_market(market)
    formatter, stream, stack, _ = prepare_output(ctx)

    async def _work(client: MarketFeedClient) -> list[Ticker]:
        return await client.get_watchlist(symbols or client.trending(), market_value)

    try:
        tickers = _execute(_work)
        formatter.render([_ticker_to_row(ticker) for ticker in tickers], stream=stream, columns=TICKER_COLUMNS)
    finally:
        stack.close()


def search_command(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Part of a symbol or company name."),
) -> None:
    """Search the symbol directory and quote the matches."""

    formatter, stream, stack, _ = prepare_output(ctx)

    async def _work(client: MarketFeedClient) -> list[Ticker]:
        return await client.search(query)

    try:
        tickers = _execute(_work)
        formatter.render([_ticker_to_row(ticker) for ticker in tickers], stream=stream, columns=TICKER_COLUMNS)
    finally:
        stack.close()


def _execute(work: Callable[[MarketFeedClient], Awaitable[T]]) -> T:
    try:
        client = get_client()
    except ConfigurationError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from error

    async def _main() -> T:
        async with client:
            return await work(client)

    try:
        return asyncio.run(_main())
    except MarketFeedError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=SYSTEM_EXIT_CODE) from error


def _quote_to_row(quote: Quote) -> Mapping[str, object]:
    return quote.model_dump(mode="json")


def _series_to_rows(series: BarSeries) -> list[Mapping[str, object]]:
    return [bar.model_dump(mode="json") for bar in series.bars]


def _ticker_to_row(ticker: Ticker) -> Mapping[str, object]:
    return ticker.model_dump(mode="json")


__all__ = [
    "register",
    "get_client",
    "quote_command",
    "bars_command",
    "watch_command",
    "watchlist_command",
    "search_command",
]
