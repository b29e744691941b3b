"""Tests for the TTL memory cache."""

import pytest

from marketfeed.core.data.cache import CacheKey, CacheKind, TimedMemoryCache
from marketfeed.core.models import Market, TimeRange


class TestCacheKey:
    def test_quote_key(self):
        key = CacheKey.quote("BBCA", Market.IDX)

        assert str(key) == "quote:IDX:BBCA"
        assert key.kind is CacheKind.QUOTE

    def test_bar_key_includes_range(self):
        key = CacheKey.bars("AAPL", Market.US, TimeRange.MONTH_1)

        assert str(key) == "bars:US:AAPL:1M"
        assert CacheKey.kind_of(str(key)) is CacheKind.BARS

    def test_bar_key_requires_range(self):
        with pytest.raises(ValueError):
            CacheKey(CacheKind.BARS, "AAPL", Market.US)

    def test_keys_differ_per_market_and_range(self):
        keys = {
            str(CacheKey.quote("BBCA", Market.IDX)),
            str(CacheKey.quote("BBCA", Market.US)),
            str(CacheKey.bars("BBCA", Market.IDX, TimeRange.DAY_1)),
            str(CacheKey.bars("BBCA", Market.IDX, TimeRange.DAY_5)),
        }

        assert len(keys) == 4


class TestTimedMemoryCache:
    @pytest.mark.asyncio
    async def test_miss_returns_none(self, cache):
        assert await cache.get(CacheKey.quote("BBCA", Market.IDX)) is None

    @pytest.mark.asyncio
    async def test_hit_within_ttl(self, cache, clock):
        key = CacheKey.quote("BBCA", Market.IDX)
        await cache.set(key, "payload")

        clock.advance(29.9)

        assert await cache.get(key) == "payload"

    @pytest.mark.asyncio
    async def test_quote_entry_expires_at_ttl(self, cache, clock):
        key = CacheKey.quote("BBCA", Market.IDX)
        await cache.set(key, "payload")

        clock.advance(30.0)

        assert await cache.get(key) is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_bar_entries_use_their_own_ttl(self, cache, clock):
        quote_key = CacheKey.quote("BBCA", Market.IDX)
        bars_key = CacheKey.bars("BBCA", Market.IDX, TimeRange.MONTH_1)
        await cache.set(quote_key, "quote")
        await cache.set(bars_key, "bars")

        clock.advance(120)

        assert await cache.get(quote_key) is None
        assert await cache.get(bars_key) == "bars"

        clock.advance(180)
        assert await cache.get(bars_key) is None

    @pytest.mark.asyncio
    async def test_set_replaces_entry_and_restarts_ttl(self, cache, clock):
        key = CacheKey.quote("BBCA", Market.IDX)
        await cache.set(key, "old")
        clock.advance(20)
        await cache.set(key, "new")
        clock.advance(20)

        assert await cache.get(key) == "new"

    @pytest.mark.asyncio
    async def test_delete_and_clear(self, cache):
        first = CacheKey.quote("BBCA", Market.IDX)
        second = CacheKey.quote("TLKM", Market.IDX)
        await cache.set(first, 1)
        await cache.set(second, 2)

        assert await cache.delete(first) is True
        assert await cache.delete(first) is False
        assert await cache.get(second) == 2

        await cache.clear()
        assert await cache.get(second) is None

    def test_stats(self, clock):
        cache = TimedMemoryCache(quote_ttl=5, bar_ttl=60, clock=clock)

        assert cache.stats() == {"total_entries": 0, "quote_ttl_seconds": 5, "bar_ttl_seconds": 60}
        assert cache.ttl(CacheKey.bars("X", Market.US, TimeRange.YEAR_1)) == 60
