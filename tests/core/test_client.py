"""Tests for the MarketFeedClient facade and module-level helpers."""

from datetime import datetime, timezone

import pytest

import marketfeed
from marketfeed import MarketFeedClient
from marketfeed.core.data.sources import SourceChain
from marketfeed.core.models import Market, SourceTag, TimeRange


@pytest.fixture
def client(config, stub_chain, synthesizer, metrics) -> MarketFeedClient:
    return MarketFeedClient(config, chain=stub_chain, synthesizer=synthesizer, metrics=metrics)


class TestMarketFeedClient:
    @pytest.mark.asyncio
    async def test_quote_then_cache(self, client, stub_chain):
        first = await client.get_quote("BBCA")
        second = await client.get_quote("BBCA")

        assert first.source is SourceTag.LIVE
        assert second.source is SourceTag.CACHE
        assert stub_chain.quote_calls == 1
        assert client.cache_stats()["total_entries"] == 1

    @pytest.mark.asyncio
    async def test_clear_cache(self, client, stub_chain):
        await client.get_quote("BBCA")
        await client.clear_cache()
        await client.get_quote("BBCA")

        assert stub_chain.quote_calls == 2

    @pytest.mark.asyncio
    async def test_bars_default_to_one_month(self, client):
        series = await client.get_bars("BBCA")

        assert series.range is TimeRange.MONTH_1

    @pytest.mark.asyncio
    async def test_watchlist_enriches_quotes(self, client):
        tickers = await client.get_watchlist(["BBCA", "zzzz"], Market.IDX)

        assert [ticker.symbol for ticker in tickers] == ["BBCA", "ZZZZ"]
        assert tickers[0].name == "Bank Central Asia"
        assert tickers[0].sector == "Finance"
        assert tickers[1].name == "ZZZZ"
        assert tickers[1].sector == "Other"

    @pytest.mark.asyncio
    async def test_search_quotes_matches(self, client, stub_chain):
        tickers = await client.search("bank")

        assert len(tickers) == 6
        assert all("Bank" in ticker.name for ticker in tickers)
        assert stub_chain.quote_calls == 6

    def test_trending(self, client):
        assert client.trending()[:2] == ["BBCA", "BBRI"]

    def test_is_market_open(self, client):
        assert client.is_market_open(Market.IDX, datetime(2024, 3, 13, 3, 0, tzinfo=timezone.utc))
        assert not client.is_market_open("idx", datetime(2024, 3, 13, 5, 0, tzinfo=timezone.utc))

    @pytest.mark.asyncio
    async def test_live_simulator_uses_configured_cadence(self, client):
        series = await client.get_bars("BBCA", Market.IDX, "1D")

        simulator = client.live_simulator(series)

        assert simulator.interval == 2.0
        assert simulator.volatility == 0.0005

    @pytest.mark.asyncio
    async def test_context_manager_closes_chain_and_subscriptions(self, config, stub_chain, synthesizer, metrics):
        async with MarketFeedClient(config, chain=stub_chain, synthesizer=synthesizer, metrics=metrics) as client:
            subscription = client.subscribe("BBCA", lambda quote: None)

        assert stub_chain.closed
        assert not subscription.active
        assert subscription.task.done()

    def test_default_chain_is_built_from_config(self, config):
        client = MarketFeedClient(config)

        assert isinstance(client.chain, SourceChain)
        assert [source.name for source in client.chain.sources] == ["yahoo", "sectors"]
        assert client.config.synthesis.seed == 7

    def test_dict_overrides_apply_on_top_of_defaults(self, monkeypatch, tmp_path, stub_chain):
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.delenv("MARKETFEED_QUOTE_TTL", raising=False)

        client = MarketFeedClient({"cache": {"quote_ttl": 5}}, chain=stub_chain)

        assert client.config.cache.quote_ttl == 5
        assert client.cache_stats()["quote_ttl_seconds"] == 5
        assert client.config.cache.bar_ttl == 300.0


class TestModuleHelpers:
    @pytest.mark.asyncio
    async def test_default_client_is_shared_and_closable(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        await marketfeed.aclose()

        first = marketfeed.get_client()
        assert marketfeed.get_client() is first

        marketfeed.configure(cache={"quote_ttl": 3})
        configured = marketfeed.get_client()
        assert configured is not first
        assert configured.config.cache.quote_ttl == 3

        await first.aclose()
        await marketfeed.aclose()
        assert marketfeed.get_client() is not configured
        await marketfeed.aclose()
