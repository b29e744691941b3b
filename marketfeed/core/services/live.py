"""Live candle simulation on top of an already-fetched intraday series."""

from __future__ import annotations

import asyncio
import inspect
import random
from collections.abc import Awaitable, Callable
from typing import Any

from marketfeed.core.logging import get_logger
from marketfeed.core.models import LIVE_RANGES, Bar, BarSeries
from marketfeed.core.services.synthesizer import price_precision

logger = get_logger(__name__)

TickCallback = Callable[[Bar], Any]


class LiveCandleSimulator:
    """Jiggles the last bar of ``series`` in place to mimic a forming candle.

    Only the 1D and 5D ranges are accepted. The series is modified in place,
    so pass a copy that is not shared with the cache (fetchers already
    return such copies). Nothing here touches the cache or the sources.
    """

    def __init__(
        self,
        series: BarSeries,
        *,
        interval: float = 2.0,
        volatility: float = 0.0005,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        on_tick: TickCallback | None = None,
    ):
        if series.range not in LIVE_RANGES:
            allowed = ", ".join(sorted(item.value for item in LIVE_RANGES))
            raise ValueError(f"Live simulation supports {allowed} ranges only, got {series.range.value}")
        self.series = series
        self.interval = interval
        self.volatility = volatility
        self.on_tick = on_tick
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> Bar | None:
        """Replace the last bar with a perturbed copy and return it."""
        last = self.series.last
        if last is None:
            return None

        close = last.close * (1 + (self._rng.random() - 0.5) * self.volatility)
        close = round(close, price_precision(self.series.market, close))
        updated = last.model_copy(
            update={
                "close": close,
                "high": max(last.high, close),
                "low": min(last.low, close),
                "volume": last.volume + self._rng.randint(0, 500),
            }
        )
        self.series.bars[-1] = updated
        return updated

    def start(self) -> asyncio.Task[None]:
        """Tick every ``interval`` seconds until :meth:`stop` is called."""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self) -> None:
        while True:
            await self._sleep(self.interval)
            bar = self.tick()
            if bar is None or self.on_tick is None:
                continue
            try:
                result = self.on_tick(bar)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Live tick callback for {} raised", self.series.symbol)


__all__ = ["LiveCandleSimulator", "TickCallback"]
