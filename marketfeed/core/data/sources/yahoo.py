"""Yahoo Finance chart API source."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from marketfeed.core.data.sources.base import DataSource, SourceCapability, utc_now
from marketfeed.core.data.sources.relays import RelayHttp
from marketfeed.core.exceptions import SourceBadResponse, SourceMissingField
from marketfeed.core.models import Bar, BarSeries, Market, Quote, RangeSpec, SourceTag

CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart/{ticker}"


def yahoo_ticker(symbol: str, market: Market) -> str:
    """Yahoo ticker for a symbol: IDX listings trade under the ``.JK`` suffix."""
    if market is Market.IDX and not symbol.endswith(".JK"):
        return f"{symbol}.JK"
    return symbol


class YahooChartSource(DataSource):
    """Primary source serving quotes and bars for every market."""

    def __init__(
        self,
        max_attempts: int = 4,
        quote_timeout: float = 8.0,
        bars_timeout: float = 10.0,
        now: Callable[[], datetime] = utc_now,
    ):
        super().__init__("yahoo", max_attempts, quote_timeout, bars_timeout, now)

    def _discover_capability(self) -> SourceCapability:
        return SourceCapability(supported_markets=set(Market))

    def quote_url(self, symbol: str, market: Market) -> str:
        return f"{CHART_URL.format(ticker=yahoo_ticker(symbol, market))}?interval=1d&range=5d"

    def bars_url(self, symbol: str, market: Market, spec: RangeSpec) -> str:
        ticker = yahoo_ticker(symbol, market)
        return f"{CHART_URL.format(ticker=ticker)}?interval={spec.interval.value}&range={spec.upstream_range}"

    async def fetch_quote(self, http: RelayHttp, symbol: str, market: Market) -> Quote:
        payload = await http.get_json(self.quote_url(symbol, market), self.name)
        return self.parse_quote(payload, symbol, market)

    async def fetch_bars(self, http: RelayHttp, symbol: str, market: Market, spec: RangeSpec) -> BarSeries:
        payload = await http.get_json(self.bars_url(symbol, market, spec), self.name)
        return self.parse_bars(payload, symbol, market, spec)

    def _chart_result(self, payload: Any) -> Mapping[str, Any]:
        if not isinstance(payload, Mapping):
            raise SourceBadResponse("chart payload is not an object", self.name)
        chart = payload.get("chart") or {}
        results = chart.get("result") if isinstance(chart, Mapping) else None
        if not results or not isinstance(results[0], Mapping):
            error = chart.get("error") if isinstance(chart, Mapping) else None
            raise SourceBadResponse(f"no chart result returned: {error}", self.name)
        return results[0]

    @staticmethod
    def _indicators(result: Mapping[str, Any]) -> Mapping[str, Any]:
        quotes = (result.get("indicators") or {}).get("quote") or [{}]
        return quotes[0] or {}

    def parse_quote(self, payload: Any, symbol: str, market: Market) -> Quote:
        """Build a quote from a chart payload, degrading on missing fields."""
        result = self._chart_result(payload)
        meta = result.get("meta") or {}
        indicators = self._indicators(result)

        previous_close = self.pick(meta, "chartPreviousClose", "previousClose")
        try:
            price = self.require(meta, "regularMarketPrice")
        except SourceMissingField:
            closes = [close for close in indicators.get("close") or [] if close is not None]
            price = closes[-1] if closes else previous_close
        if not price:
            raise SourceBadResponse("no price in chart payload", self.name)

        price = float(price)
        previous_close = float(previous_close) if previous_close else None
        change = price - previous_close if previous_close else 0.0
        change_percent = round(change / previous_close * 100, 2) if previous_close else 0.0

        market_time = meta.get("regularMarketTime")
        last_update = datetime.fromtimestamp(market_time, tz=timezone.utc) if market_time else self._now()

        return Quote(
            symbol=symbol,
            market=market,
            price=price,
            change=change,
            change_percent=change_percent,
            open=float(self.pick(meta, "regularMarketOpen", "open", default=previous_close or price)),
            high=float(self.pick(meta, "regularMarketDayHigh", "dayHigh", default=price * 1.01)),
            low=float(self.pick(meta, "regularMarketDayLow", "dayLow", default=price * 0.99)),
            volume=int(self.pick(meta, "regularMarketVolume", default=0)),
            previous_close=previous_close,
            last_update=last_update,
            source=SourceTag.LIVE,
            provider=self.name,
        )

    def parse_bars(self, payload: Any, symbol: str, market: Market, spec: RangeSpec) -> BarSeries:
        """Build a bar series, skipping points whose open or close is null."""
        result = self._chart_result(payload)
        timestamps = result.get("timestamp")
        if timestamps is None:
            raise SourceBadResponse("chart result carries no timestamps", self.name)

        meta = result.get("meta") or {}
        tz = self._exchange_tz(meta, market)
        indicators = self._indicators(result)
        opens = indicators.get("open") or []
        highs = indicators.get("high") or []
        lows = indicators.get("low") or []
        closes = indicators.get("close") or []
        volumes = indicators.get("volume") or []

        def _at(values: list[Any], index: int) -> Any:
            return values[index] if index < len(values) else None

        bars: list[Bar] = []
        for index, epoch in enumerate(timestamps):
            open_, close = _at(opens, index), _at(closes, index)
            if open_ is None or close is None:
                continue
            high = _at(highs, index)
            low = _at(lows, index)
            moment = datetime.fromtimestamp(epoch, tz=tz)
            bars.append(
                Bar(
                    timestamp=moment,
                    label=moment.strftime("%H:%M") if spec.is_intraday else moment.date().isoformat(),
                    open=float(open_),
                    high=float(high if high is not None else max(open_, close)),
                    low=float(low if low is not None else min(open_, close)),
                    close=float(close),
                    volume=int(_at(volumes, index) or 0),
                )
            )

        return BarSeries(
            symbol=symbol,
            market=market,
            range=spec.range,
            interval=spec.interval,
            bars=bars,
            source=SourceTag.LIVE,
            provider=self.name,
        )

    @staticmethod
    def _exchange_tz(meta: Mapping[str, Any], market: Market) -> ZoneInfo:
        name = meta.get("exchangeTimezoneName") or market.timezone
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            return ZoneInfo(market.timezone)
