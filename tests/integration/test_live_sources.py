"""Live upstream checks; run with --marketfeed-run-integration."""

import pytest

from marketfeed.core.client import MarketFeedClient
from marketfeed.core.config import MarketFeedConfig
from marketfeed.core.models import Market, TimeRange


@pytest.mark.integration
@pytest.mark.asyncio
async def test_live_quote_and_bars_resolve() -> None:
    async with MarketFeedClient(MarketFeedConfig()) as client:
        quote = await client.get_quote("BBCA", Market.IDX)
        series = await client.get_bars("AAPL", Market.US, TimeRange.MONTH_1)

    assert quote.symbol == "BBCA"
    assert quote.price > 0
    assert len(series) > 0
    stamps = [bar.timestamp for bar in series.bars]
    assert stamps == sorted(stamps)
