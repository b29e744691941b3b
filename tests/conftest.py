"""Pytest configuration for the marketfeed test suite."""

from __future__ import annotations

import asyncio
import random
from datetime import datetime, timezone

import pytest
from prometheus_client import CollectorRegistry

from marketfeed.core.config import MarketFeedConfig
from marketfeed.core.data.cache import TimedMemoryCache
from marketfeed.core.data.sources import RelayRotator
from marketfeed.core.exceptions import AllSourcesExhausted
from marketfeed.core.models import Bar, BarSeries, Market, Quote, RangeSpec, SourceTag
from marketfeed.core.monitoring import MetricsCollector, configure_metrics_collector
from marketfeed.core.services import QuoteFetcher, BarFetcher, Synthesizer

# Wednesday 14:00 in Jakarta, inside the afternoon IDX session.
FIXED_NOW = datetime(2024, 3, 13, 7, 0, tzinfo=timezone.utc)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--marketfeed-run-integration",
        action="store_true",
        default=False,
        help="Run marketfeed integration tests that reach the real upstream APIs.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the integration marker for marketfeed tests."""

    config.addinivalue_line(
        "markers",
        "integration: marks marketfeed tests requiring network access",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--marketfeed-run-integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="integration tests require --marketfeed-run-integration",
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that records delays and only yields once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


class StubChain:
    """Source chain double counting calls; fails every call when ``fail`` is set."""

    def __init__(self, *, fail: bool = False, delay: float = 0.0) -> None:
        self.fail = fail
        self.delay = delay
        self.quote_calls = 0
        self.bar_calls = 0
        self.closed = False
        self.rotator = RelayRotator(["https://relay.test/?url="])

    async def fetch_quote(self, symbol: str, market: Market) -> Quote:
        self.quote_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise AllSourcesExhausted(f"Every source failed for {symbol}", [])
        price = 100.0 + self.quote_calls
        return Quote(
            symbol=symbol,
            market=market,
            price=price,
            change=1.0,
            change_percent=1.0,
            open=price - 1,
            high=price + 1,
            low=price - 2,
            volume=1_000 * self.quote_calls,
            previous_close=price - 1,
            last_update=FIXED_NOW,
            source=SourceTag.LIVE,
            provider="stub",
        )

    async def fetch_bars(self, symbol: str, market: Market, spec: RangeSpec) -> BarSeries:
        self.bar_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise AllSourcesExhausted(f"Every source failed for {symbol}", [])
        bars = [
            Bar(
                timestamp=datetime(2024, 3, day, 2, 0, tzinfo=timezone.utc),
                label=f"2024-03-{day:02d}",
                open=100.0 + day,
                high=102.0 + day,
                low=99.0 + day,
                close=101.0 + day,
                volume=5_000,
            )
            for day in (11, 12, 13)
        ]
        return BarSeries(
            symbol=symbol,
            market=market,
            range=spec.range,
            interval=spec.interval,
            bars=bars,
            source=SourceTag.LIVE,
            provider="stub",
        )

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def metrics():
    """Fresh collector installed as the process-wide one for the test."""

    collector = MetricsCollector(registry=CollectorRegistry())
    configure_metrics_collector(collector)
    yield collector
    configure_metrics_collector(None)


@pytest.fixture
def stub_chain() -> StubChain:
    return StubChain()


@pytest.fixture
def failing_chain() -> StubChain:
    return StubChain(fail=True)


@pytest.fixture
def synthesizer() -> Synthesizer:
    return Synthesizer(rng=random.Random(7), now=lambda: FIXED_NOW)


@pytest.fixture
def cache(clock: FakeClock) -> TimedMemoryCache:
    return TimedMemoryCache(quote_ttl=30.0, bar_ttl=300.0, clock=clock)


@pytest.fixture
def quote_fetcher(cache, stub_chain, synthesizer, metrics) -> QuoteFetcher:
    return QuoteFetcher(cache, stub_chain, synthesizer, metrics)


@pytest.fixture
def bar_fetcher(cache, stub_chain, synthesizer, metrics) -> BarFetcher:
    return BarFetcher(cache, stub_chain, synthesizer, metrics)


@pytest.fixture
def config() -> MarketFeedConfig:
    return MarketFeedConfig.from_dict({"synthesis": {"seed": 7}})
