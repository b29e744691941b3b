"""Seeded random-walk generator for quotes and OHLCV bars.

Used as the last resolution tier once every real source has failed, so
nothing in here may raise for a well-formed symbol, market and range.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone

from marketfeed.core.config import SynthesisConfig
from marketfeed.core.logging import get_logger
from marketfeed.core.models import (
    SYNTHETIC_PROVIDER,
    Bar,
    BarSeries,
    Market,
    Quote,
    RangeSpec,
    SourceTag,
    TimeRange,
    resolve_range,
)
from marketfeed.core.services.calendars import CalendarProvider, ExchangeCalendar, builtin_calendars
from marketfeed.core.services.profiles import InstrumentProfile, ProfileRegistry, normalize_symbol

logger = get_logger(__name__)

HISTORY_SPREAD = 0.2
INTRADAY_TREND_SPREAD = 0.05
QUOTE_PRICE_JITTER = 0.01


def price_precision(market: Market, price: float) -> int:
    """Decimal places prices of ``market`` are quoted with."""
    if market is Market.IDX:
        return 0
    return 4 if abs(price) < 1.0 else 2


def base_volume(profile: InstrumentProfile) -> int:
    return 50_000 if profile.base_price > 5000 else 100_000


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Synthesizer:
    """Fabricates plausible market data from instrument profiles.

    Args:
        profiles: instrument profiles; defaults to the built-in registry
        calendars: exchange calendars; defaults to the built-in calendars with
            the lunch window taken from ``config``
        config: heuristic constants (volatility scales, wick ratio, seed)
        rng: random source; defaults to ``random.Random(config.seed)``
        now: clock returning a timezone-aware datetime
    """

    def __init__(
        self,
        profiles: ProfileRegistry | None = None,
        calendars: CalendarProvider | None = None,
        config: SynthesisConfig | None = None,
        rng: random.Random | None = None,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self.config = config or SynthesisConfig()
        self.profiles = profiles or ProfileRegistry()
        self.calendars = calendars or CalendarProvider(builtin_calendars(self.config.lunch_window))
        self._rng = rng or random.Random(self.config.seed)
        self._now = now

    def synthesize_quote(self, symbol: str, market: Market | str = Market.IDX) -> Quote:
        """Fabricate a single quote around the instrument's base price."""
        symbol = normalize_symbol(symbol)
        market = Market.parse(market)
        profile = self.profiles.resolve(symbol)
        rng = self._rng

        raw_price = profile.base_price * (1 + (rng.random() - 0.5) * 2 * QUOTE_PRICE_JITTER)
        drawn_percent = profile.reference_change_percent + (rng.random() - 0.5) * profile.volatility * 100
        digits = price_precision(market, raw_price)

        price = round(raw_price, digits)
        previous_close = round(raw_price / (1 + drawn_percent / 100), digits)
        change = round(price - previous_close, digits + 2)
        change_percent = round(change / previous_close * 100, 2) if previous_close else 0.0
        volume = int(base_volume(profile) * 50 * (0.5 + rng.random()))

        return Quote(
            symbol=symbol,
            market=market,
            price=price,
            change=change,
            change_percent=change_percent,
            open=previous_close,
            high=round(max(raw_price * 1.02, previous_close), digits),
            low=round(min(raw_price * 0.98, previous_close), digits),
            volume=volume,
            previous_close=previous_close,
            last_update=self._now(),
            source=SourceTag.SYNTHETIC,
            provider=SYNTHETIC_PROVIDER,
        )

    def synthesize_bars(
        self,
        symbol: str,
        market: Market | str = Market.IDX,
        time_range: TimeRange | str = TimeRange.DAY_1,
    ) -> BarSeries:
        """Fabricate a bar series covering ``time_range`` up to now."""
        symbol = normalize_symbol(symbol)
        market = Market.parse(market)
        spec = resolve_range(time_range)
        profile = self.profiles.resolve(symbol)
        calendar = self.calendars.get_calendar(market)
        rng = self._rng

        timeline = self._timeline(spec, calendar, calendar.localize(self._now()))
        step_volatility = profile.volatility * self.config.volatility_scales.get(spec.interval.value, 1.0)

        if spec.lookback_days == 0:
            price = profile.base_price
            trend_bias = (rng.random() - 0.5) * INTRADAY_TREND_SPREAD
        else:
            price = profile.base_price * (1 - HISTORY_SPREAD + rng.random() * 2 * HISTORY_SPREAD)
            trend_bias = self._solve_trend_bias(price, profile.base_price, len(timeline), step_volatility)

        digits = price_precision(market, profile.base_price)
        bars: list[Bar] = []
        for slot in timeline:
            change = (rng.random() - 0.5 + trend_bias) * step_volatility
            open_ = price
            close = open_ * (1 + change)
            wick = abs(close - open_) * self.config.wick_ratio
            high = max(open_, close) + rng.random() * wick
            low = min(open_, close) - rng.random() * wick

            volume = base_volume(profile) * (0.5 + rng.random())
            if spec.is_intraday:
                volume *= self._volume_multiplier(calendar, slot)

            bars.append(
                Bar(
                    timestamp=slot,
                    label=slot.strftime("%H:%M") if spec.is_intraday else slot.date().isoformat(),
                    open=round(open_, digits),
                    high=round(high, digits),
                    low=round(max(low, 0.0), digits),
                    close=round(close, digits),
                    volume=int(volume),
                )
            )
            price = close

        logger.bind(symbol=symbol, source=SYNTHETIC_PROVIDER).debug(
            "Synthesized {} {} bars for {} {}", len(bars), spec.interval.value, market.value, spec.range.value
        )
        return BarSeries(
            symbol=symbol,
            market=market,
            range=spec.range,
            interval=spec.interval,
            bars=bars,
            source=SourceTag.SYNTHETIC,
            provider=SYNTHETIC_PROVIDER,
        )

    def _solve_trend_bias(self, start: float, target: float, steps: int, step_volatility: float) -> float:
        """Bias whose expected drift carries ``start`` back to ``target`` over ``steps``."""
        if steps == 0 or step_volatility <= 0 or start <= 0:
            return 0.0
        bias = math.log(target / start) / (steps * step_volatility)
        limit = self.config.max_trend_bias
        return max(-limit, min(limit, bias))

    def _timeline(self, spec: RangeSpec, calendar: ExchangeCalendar, now: datetime) -> list[datetime]:
        today = now.date()

        if spec.lookback_days == 0:
            session_day = today
            if not calendar.is_trading_day(today) or now < calendar.session_open(today):
                session_day = calendar.latest_trading_day(today - timedelta(days=1))
            return [slot for slot in calendar.session_slots(session_day, spec.interval.minutes) if slot <= now]

        start = date(today.year, 1, 1) if spec.lookback_days is None else today - timedelta(days=spec.lookback_days)

        if spec.is_intraday:
            slots: list[datetime] = []
            for day in calendar.trading_days(start, today):
                slots.extend(slot for slot in calendar.session_slots(day, spec.interval.minutes) if slot <= now)
            return slots

        if spec.is_multi_year:
            days = self._weekly_days(calendar, start, today)
        else:
            days = calendar.trading_days(start, today)
        return [opened for opened in map(calendar.session_open, days) if opened <= now]

    @staticmethod
    def _weekly_days(calendar: ExchangeCalendar, start: date, end: date) -> list[date]:
        """First trading day of every week between ``start`` and ``end``."""
        days: list[date] = []
        week_start = start - timedelta(days=start.weekday())
        while week_start <= end:
            week = calendar.trading_days(max(week_start, start), min(week_start + timedelta(days=6), end))
            if week:
                days.append(week[0])
            week_start += timedelta(days=7)
        return days

    @staticmethod
    def _volume_multiplier(calendar: ExchangeCalendar, slot: datetime) -> float:
        """Heavier volume around the open and into the close."""
        if calendar.close_time is None:
            return 1.0
        since_open = slot - calendar.session_open(slot.date())
        until_close = calendar.session_close(slot.date()) - slot
        if since_open < timedelta(hours=1):
            return 3.0
        if until_close <= timedelta(hours=1):
            return 2.5
        if until_close <= timedelta(hours=2):
            return 1.5
        return 1.0


__all__ = ["Synthesizer", "base_volume", "price_precision", "utc_now"]
