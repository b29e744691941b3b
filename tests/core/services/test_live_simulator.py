"""Tests for the live candle simulator."""

import asyncio
import random

import pytest

from marketfeed.core.data.cache import CacheKey
from marketfeed.core.models import Market, TimeRange
from marketfeed.core.services import LiveCandleSimulator


@pytest.fixture
def intraday(synthesizer):
    return synthesizer.synthesize_bars("BBCA", Market.IDX, TimeRange.DAY_1)


def test_rejects_daily_ranges(synthesizer):
    series = synthesizer.synthesize_bars("BBCA", Market.IDX, TimeRange.MONTH_1)

    with pytest.raises(ValueError, match="1D, 5D"):
        LiveCandleSimulator(series)


def test_accepts_five_day_range(synthesizer):
    series = synthesizer.synthesize_bars("BBCA", Market.IDX, TimeRange.DAY_5)

    assert LiveCandleSimulator(series).series is series


def test_tick_only_touches_the_last_bar(intraday):
    before = list(intraday.bars)
    simulator = LiveCandleSimulator(intraday, rng=random.Random(1), volatility=0.01)

    for _ in range(20):
        bar = simulator.tick()
        assert bar is intraday.bars[-1]
        assert bar.low <= bar.close <= bar.high
        assert bar.close == int(bar.close)

    assert intraday.bars[:-1] == before[:-1]
    last, original = intraday.bars[-1], before[-1]
    assert last.timestamp == original.timestamp
    assert last.open == original.open
    assert last.high >= original.high
    assert last.low <= original.low
    assert original.volume <= last.volume <= original.volume + 20 * 500


def test_tick_on_empty_series_is_a_no_op(intraday):
    empty = intraday.detached(bars=[])

    assert LiveCandleSimulator(empty).tick() is None


@pytest.mark.asyncio
async def test_ticks_never_reach_the_cache(bar_fetcher, cache):
    series = await bar_fetcher.get_bars("BBCA", Market.IDX, TimeRange.DAY_1)
    cached_last = (await cache.get(CacheKey.bars("BBCA", Market.IDX, TimeRange.DAY_1))).bars[-1]
    simulator = LiveCandleSimulator(series, rng=random.Random(3), volatility=0.5)

    for _ in range(5):
        simulator.tick()

    again = await bar_fetcher.get_bars("BBCA", Market.IDX, TimeRange.DAY_1)
    assert again.bars[-1] == cached_last
    assert series.bars[-1] != cached_last


@pytest.mark.asyncio
async def test_start_ticks_until_stopped(intraday, recording_sleep):
    ticks = []
    simulator = LiveCandleSimulator(intraday, interval=2.0, sleep=recording_sleep, on_tick=ticks.append)

    simulator.start()
    while len(ticks) < 3:
        await asyncio.sleep(0)
    simulator.stop()
    await asyncio.sleep(0)

    assert not simulator.running
    assert recording_sleep.delays[:3] == [2.0, 2.0, 2.0]
    assert ticks[-1] is intraday.bars[-1]


@pytest.mark.asyncio
async def test_failing_tick_callback_keeps_ticking(intraday, recording_sleep):
    calls = 0

    async def on_tick(bar):
        nonlocal calls
        calls += 1
        raise RuntimeError("chart widget gone")

    simulator = LiveCandleSimulator(intraday, sleep=recording_sleep, on_tick=on_tick)
    simulator.start()
    while calls < 2:
        await asyncio.sleep(0)
    simulator.stop()

    assert calls >= 2
