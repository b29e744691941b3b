"""Market-related enums and types."""

from enum import Enum

_MARKET_TIMEZONES = {"IDX": "Asia/Jakarta", "US": "America/New_York", "CRYPTO": "UTC"}


class Market(str, Enum):
    """Exchange or venue a symbol trades on."""

    IDX = "IDX"  # Indonesia Stock Exchange
    US = "US"
    CRYPTO = "CRYPTO"

    @property
    def timezone(self) -> str:
        """IANA timezone exchange-local timestamps are expressed in."""
        return _MARKET_TIMEZONES[self.value]

    @classmethod
    def parse(cls, value: "str | Market") -> "Market":
        """Parse a market identifier case-insensitively."""
        if isinstance(value, Market):
            return value
        try:
            return cls(value.strip().upper())
        except ValueError as exc:
            allowed = ", ".join(market.value for market in cls)
            raise ValueError(f"Unsupported market '{value}'. Allowed values: {allowed}") from exc


class TimeRange(str, Enum):
    """Logical chart range requested by the dashboard."""

    DAY_1 = "1D"
    DAY_5 = "5D"
    MONTH_1 = "1M"
    MONTH_3 = "3M"
    MONTH_6 = "6M"
    YEAR_TO_DATE = "YTD"
    YEAR_1 = "1Y"
    YEAR_5 = "5Y"

    @classmethod
    def parse(cls, value: "str | TimeRange") -> "TimeRange":
        """Parse a logical range such as ``1m`` or ``ytd``."""
        if isinstance(value, TimeRange):
            return value
        try:
            return cls(value.strip().upper())
        except ValueError as exc:
            allowed = ", ".join(item.value for item in cls)
            raise ValueError(f"Unsupported range '{value}'. Allowed values: {allowed}") from exc


class Interval(str, Enum):
    """Bar granularity used to satisfy a logical range."""

    MINUTE_5 = "5m"
    MINUTE_15 = "15m"
    DAY_1 = "1d"
    WEEK_1 = "1wk"

    @property
    def is_intraday(self) -> bool:
        return self in (Interval.MINUTE_5, Interval.MINUTE_15)

    @property
    def minutes(self) -> int:
        """Length of one bar in minutes."""
        return {
            Interval.MINUTE_5: 5,
            Interval.MINUTE_15: 15,
            Interval.DAY_1: 24 * 60,
            Interval.WEEK_1: 7 * 24 * 60,
        }[self]


class SourceTag(str, Enum):
    """Which resolution tier produced a result."""

    CACHE = "cache"
    LIVE = "live"
    SYNTHETIC = "synthetic"
