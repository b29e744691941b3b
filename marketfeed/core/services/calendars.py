"""Exchange trading calendars: trading days, session hours and lunch breaks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from functools import cached_property
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from marketfeed.core.models.market import Market

if TYPE_CHECKING:
    from collections.abc import Mapping

default_weekend = frozenset({5, 6})
IDX_LUNCH_BREAK = (time(11, 30), time(13, 30))


@dataclass(frozen=True)
class ExchangeCalendar:
    """Trading rules of one exchange.

    ``close_time`` of None means the session runs to midnight. The lunch
    break is the half-open window ``[start, end)``.
    """

    market: Market
    timezone: str
    open_time: time = time(0, 0)
    close_time: time | None = None
    lunch_break: tuple[time, time] | None = None
    weekend_days: frozenset[int] = default_weekend
    holidays: frozenset[date] = frozenset()
    aliases: frozenset[str] = frozenset()

    @cached_property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def localize(self, moment: datetime) -> datetime:
        """Convert ``moment`` to exchange-local time (naive values are taken as UTC)."""
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(self.tz)

    def is_trading_day(self, day: date) -> bool:
        return day.weekday() not in self.weekend_days and day not in self.holidays

    def trading_days(self, start: date, end: date) -> list[date]:
        """Return trading days between the provided bounds inclusive."""

        if end < start:
            raise ValueError("end must be on or after start")

        current = start
        days: list[date] = []
        while current <= end:
            if self.is_trading_day(current):
                days.append(current)
            current += timedelta(days=1)
        return days

    def latest_trading_day(self, day: date) -> date:
        """Most recent trading day on or before ``day``."""
        current = day
        for _ in range(366):
            if self.is_trading_day(current):
                return current
            current -= timedelta(days=1)
        raise ValueError(f"no trading day within a year before {day}")

    def session_open(self, day: date) -> datetime:
        return datetime.combine(day, self.open_time, tzinfo=self.tz)

    def session_close(self, day: date) -> datetime:
        if self.close_time is None:
            return datetime.combine(day + timedelta(days=1), time(0, 0), tzinfo=self.tz)
        return datetime.combine(day, self.close_time, tzinfo=self.tz)

    def in_lunch_break(self, clock: time) -> bool:
        if self.lunch_break is None:
            return False
        start, end = self.lunch_break
        return start <= clock < end

    def is_in_session(self, moment: datetime) -> bool:
        """True when ``moment`` falls inside trading hours of a trading day."""
        local = self.localize(moment)
        if not self.is_trading_day(local.date()):
            return False
        if not self.session_open(local.date()) <= local < self.session_close(local.date()):
            return False
        return not self.in_lunch_break(local.time())

    def is_market_open(self, at: datetime | None = None) -> bool:
        return self.is_in_session(at or datetime.now(timezone.utc))

    def session_slots(self, day: date, step_minutes: int, until: datetime | None = None) -> list[datetime]:
        """Bar start times of ``day`` at ``step_minutes`` spacing.

        Slots start at the opening time, stop before the close (and before
        ``until`` when given) and skip the lunch break. Non-trading days
        yield no slots.
        """
        if not self.is_trading_day(day):
            return []
        step = timedelta(minutes=step_minutes)
        end = self.session_close(day)
        if until is not None:
            end = min(end, self.localize(until))
        slots: list[datetime] = []
        current = self.session_open(day)
        while current < end:
            if not self.in_lunch_break(current.time()):
                slots.append(current)
            current += step
        return slots


def builtin_calendars(lunch_break: tuple[time, time] | None = IDX_LUNCH_BREAK) -> Mapping[Market, ExchangeCalendar]:
    """Construct built-in exchange calendars."""

    idx_calendar = ExchangeCalendar(
        market=Market.IDX,
        timezone=Market.IDX.timezone,
        open_time=time(9, 0),
        close_time=time(16, 0),
        lunch_break=lunch_break,
        aliases=frozenset({"idx", "bei", "jk", "jkt"}),
    )
    us_calendar = ExchangeCalendar(
        market=Market.US,
        timezone=Market.US.timezone,
        open_time=time(9, 30),
        close_time=time(16, 0),
        aliases=frozenset({"us", "nyse", "nasdaq"}),
    )
    crypto_calendar = ExchangeCalendar(
        market=Market.CRYPTO,
        timezone=Market.CRYPTO.timezone,
        weekend_days=frozenset(),
        aliases=frozenset({"crypto", "cc"}),
    )
    return {
        idx_calendar.market: idx_calendar,
        us_calendar.market: us_calendar,
        crypto_calendar.market: crypto_calendar,
    }


class CalendarProvider:
    """Provides exchange calendars keyed by market or alias."""

    def __init__(self, calendars: Mapping[Market, ExchangeCalendar] | None = None) -> None:
        self._calendars: dict[Market, ExchangeCalendar] = dict(calendars or builtin_calendars())
        self._alias_map: dict[str, ExchangeCalendar] = {}
        for calendar in self._calendars.values():
            for alias in calendar.aliases:
                self._alias_map[alias.lower()] = calendar

    def get_calendar(self, market: Market | str) -> ExchangeCalendar:
        """Return the calendar for a market or alias, falling back to IDX."""

        if isinstance(market, Market):
            return self._calendars[market]
        key = market.strip().lower()
        if key in self._alias_map:
            return self._alias_map[key]
        try:
            return self._calendars[Market.parse(key)]
        except (ValueError, KeyError):
            return self._calendars[Market.IDX]

    def is_market_open(self, market: Market | str, at: datetime | None = None) -> bool:
        return self.get_calendar(market).is_market_open(at)


__all__ = [
    "CalendarProvider",
    "ExchangeCalendar",
    "IDX_LUNCH_BREAK",
    "builtin_calendars",
    "default_weekend",
]
