"""Ordered failover across data sources with relay rotation and bounded retries."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

from marketfeed.core.config import SourceConfig
from marketfeed.core.data.sources.base import DataSource
from marketfeed.core.data.sources.relays import RelayHttp, RelayRotator
from marketfeed.core.data.sources.sectors import SectorsDailySource
from marketfeed.core.data.sources.yahoo import YahooChartSource
from marketfeed.core.exceptions import AllSourcesExhausted, SourceBadResponse, SourceError, SourceTimeout
from marketfeed.core.logging import get_logger, log_context
from marketfeed.core.models import BarSeries, Market, Quote, RangeSpec
from marketfeed.core.monitoring import MetricsCollector, get_metrics_collector
from marketfeed.core.patterns import LinearBackoffRetry, RetryConfig

logger = get_logger(__name__)

T = TypeVar("T")
SourceCall = Callable[[DataSource, RelayHttp], Awaitable[T]]


@dataclass(frozen=True)
class SourceAttempt:
    """Bookkeeping for one attempt against one source through one relay."""

    source: str
    relay: str
    outcome: str
    latency: float
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome == "ok"

    def __str__(self) -> str:
        text = f"{self.source} via {self.relay}: {self.outcome} in {self.latency:.3f}s"
        return f"{text} ({self.error})" if self.error else text


def _outcome_of(error: SourceError) -> str:
    if isinstance(error, SourceTimeout):
        return "timeout"
    if isinstance(error, SourceBadResponse):
        return "bad_response"
    return "error"


class SourceChain:
    """Tries each eligible source in priority order until one succeeds.

    Every attempt takes the next relay from a shared rotator, runs under a
    hard timeout and is retried with linear backoff up to the source's
    attempt budget. Failures are logged and recorded as
    :class:`SourceAttempt` entries, never surfaced individually.
    """

    def __init__(
        self,
        sources: Sequence[DataSource],
        relays: RelayRotator | Sequence[str],
        *,
        backoff: float = 0.5,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        user_agent: str = "marketfeed",
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        metrics: MetricsCollector | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.sources = list(sources)
        self.rotator = relays if isinstance(relays, RelayRotator) else RelayRotator(relays)
        self.backoff = backoff
        self._client = client
        self._owns_client = client is None
        self._transport = transport
        self._user_agent = user_agent
        self._sleep = sleep
        self._metrics = metrics
        self._clock = clock

    @classmethod
    def from_config(cls, config: SourceConfig, **kwargs: Any) -> SourceChain:
        """Yahoo first, then Sectors, as configured."""
        sources = [
            YahooChartSource(
                max_attempts=config.primary_attempts,
                quote_timeout=config.quote_timeout,
                bars_timeout=config.bars_timeout,
            ),
            SectorsDailySource(max_attempts=config.secondary_attempts, timeout=config.secondary_timeout),
        ]
        kwargs.setdefault("user_agent", config.user_agent)
        return cls(sources, config.relays, backoff=config.backoff, **kwargs)

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics or get_metrics_collector()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                headers={"User-Agent": self._user_agent},
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this chain created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch_quote(self, symbol: str, market: Market) -> Quote:
        """Resolve a live quote.

        Raises:
            AllSourcesExhausted: no eligible source produced a quote
        """
        eligible = [source for source in self.sources if source.can_serve_quote(market)]
        return await self._run(
            eligible,
            symbol,
            lambda source, http: source.fetch_quote(http, symbol, market),
            lambda source: source.quote_timeout,
        )

    async def fetch_bars(self, symbol: str, market: Market, spec: RangeSpec) -> BarSeries:
        """Resolve a live bar series.

        Raises:
            AllSourcesExhausted: no eligible source produced a series
        """
        eligible = [source for source in self.sources if source.can_serve_bars(market, spec)]
        return await self._run(
            eligible,
            symbol,
            lambda source, http: source.fetch_bars(http, symbol, market, spec),
            lambda source: source.bars_timeout,
        )

    async def _run(
        self,
        sources: list[DataSource],
        symbol: str,
        call: SourceCall[T],
        timeout_of: Callable[[DataSource], float],
    ) -> T:
        attempts: list[SourceAttempt] = []
        for source in sources:
            retry = LinearBackoffRetry(
                RetryConfig(max_attempts=source.max_attempts, base_delay=self.backoff),
                sleep=self._sleep,
                on_failure=lambda number, exc, name=source.name: logger.info(
                    "Attempt {} against {} failed: {}", number, name, exc
                ),
            )
            with log_context(symbol=symbol, source=source.name):
                try:
                    return await retry.execute(self._attempt, source, call, timeout_of(source), attempts)
                except SourceError as exc:
                    logger.warning("Source {} exhausted after {} attempts: {}", source.name, retry.attempt_count, exc)

        raise AllSourcesExhausted(f"Every source failed for {symbol}", attempts)

    async def _attempt(
        self,
        source: DataSource,
        call: SourceCall[T],
        timeout: float,
        attempts: list[SourceAttempt],
    ) -> T:
        relay = self.rotator.next()
        http = RelayHttp(self._ensure_client(), relay)
        started = self._clock()
        try:
            try:
                result = await asyncio.wait_for(call(source, http), timeout)
            except asyncio.TimeoutError as exc:
                raise SourceTimeout(f"no response within {timeout}s", source.name, timeout=timeout) from exc
            except SourceError:
                raise
            except Exception as exc:
                raise SourceBadResponse(
                    f"unparsable payload: {type(exc).__name__}: {exc}", source.name
                ) from exc
        except SourceError as exc:
            self._record(attempts, SourceAttempt(source.name, relay, _outcome_of(exc), self._clock() - started, str(exc)))
            raise

        self._record(attempts, SourceAttempt(source.name, relay, "ok", self._clock() - started))
        return result

    def _record(self, attempts: list[SourceAttempt], attempt: SourceAttempt) -> None:
        attempts.append(attempt)
        self.metrics.observe_attempt(attempt.source, attempt.outcome, attempt.latency)
        logger.debug("{}", attempt)
