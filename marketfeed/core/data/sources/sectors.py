"""Sectors daily API, a secondary source for IDX listings."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import date, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from marketfeed.core.data.sources.base import DataSource, SourceCapability, utc_now
from marketfeed.core.data.sources.relays import RelayHttp
from marketfeed.core.exceptions import SourceBadResponse
from marketfeed.core.models import Bar, BarSeries, Interval, Market, Quote, RangeSpec, SourceTag

DAILY_URL = "https://api.sectors.app/v1/daily/{symbol}/"
QUOTE_WINDOW_DAYS = 5
SESSION_OPEN = time(9, 0)


class SectorsDailySource(DataSource):
    """Daily OHLCV rows for IDX symbols; serves quotes and daily bars."""

    def __init__(
        self,
        max_attempts: int = 3,
        timeout: float = 5.0,
        now: Callable[[], datetime] = utc_now,
    ):
        super().__init__("sectors", max_attempts, timeout, timeout, now)

    def _discover_capability(self) -> SourceCapability:
        return SourceCapability(supported_markets={Market.IDX}, supported_intervals={Interval.DAY_1})

    def daily_url(self, symbol: str, start: date, end: date) -> str:
        return f"{DAILY_URL.format(symbol=symbol)}?start={start.isoformat()}&end={end.isoformat()}"

    def _window_start(self, spec: RangeSpec | None, today: date) -> date:
        if spec is None:
            return today - timedelta(days=QUOTE_WINDOW_DAYS)
        if spec.lookback_days is None:
            return date(today.year, 1, 1)
        return today - timedelta(days=spec.lookback_days)

    async def _rows(self, http: RelayHttp, symbol: str, spec: RangeSpec | None = None) -> list[Mapping[str, Any]]:
        today = self._now().date()
        payload = await http.get_json(self.daily_url(symbol, self._window_start(spec, today), today), self.name)
        if not isinstance(payload, list):
            raise SourceBadResponse("daily payload is not a list", self.name)
        return [row for row in payload if isinstance(row, Mapping)]

    async def fetch_quote(self, http: RelayHttp, symbol: str, market: Market) -> Quote:
        rows = await self._rows(http, symbol)
        return self.parse_quote(rows, symbol, market)

    async def fetch_bars(self, http: RelayHttp, symbol: str, market: Market, spec: RangeSpec) -> BarSeries:
        rows = await self._rows(http, symbol, spec)
        return self.parse_bars(rows, symbol, market, spec)

    def parse_quote(self, rows: list[Mapping[str, Any]], symbol: str, market: Market) -> Quote:
        """Latest row is today's session; the one before supplies the previous close."""
        if not rows:
            raise SourceBadResponse("no daily rows returned", self.name)
        latest = rows[-1]
        previous = rows[-2] if len(rows) > 1 else latest

        price = self.pick(latest, "close", "last")
        if not price:
            raise SourceBadResponse("no price in daily row", self.name)
        price = float(price)
        previous_close = float(self.pick(previous, "close", "last", default=price))
        change = price - previous_close

        return Quote(
            symbol=symbol,
            market=market,
            price=price,
            change=change,
            change_percent=round(change / previous_close * 100, 2) if previous_close else 0.0,
            open=float(self.pick(latest, "open", default=price)),
            high=float(self.pick(latest, "high", default=price)),
            low=float(self.pick(latest, "low", default=price)),
            volume=int(self.pick(latest, "volume", default=0)),
            previous_close=previous_close,
            last_update=self._now(),
            source=SourceTag.LIVE,
            provider=self.name,
        )

    def parse_bars(self, rows: list[Mapping[str, Any]], symbol: str, market: Market, spec: RangeSpec) -> BarSeries:
        bars: list[Bar] = []
        for row in rows:
            day = row.get("date")
            open_ = row.get("open")
            close = self.pick(row, "close", "last")
            if not day or open_ is None or close is None:
                continue
            session_day = date.fromisoformat(str(day)[:10])
            moment = datetime.combine(session_day, SESSION_OPEN, tzinfo=ZoneInfo(market.timezone))
            bars.append(
                Bar(
                    timestamp=moment,
                    label=session_day.isoformat(),
                    open=float(open_),
                    high=float(self.pick(row, "high", default=max(open_, close))),
                    low=float(self.pick(row, "low", default=min(open_, close))),
                    close=float(close),
                    volume=int(self.pick(row, "volume", default=0)),
                )
            )
        bars.sort(key=lambda bar: bar.timestamp)

        return BarSeries(
            symbol=symbol,
            market=market,
            range=spec.range,
            interval=spec.interval,
            bars=bars,
            source=SourceTag.LIVE,
            provider=self.name,
        )
