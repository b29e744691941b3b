"""Data models module."""

from marketfeed.core.models.market import Interval, Market, SourceTag, TimeRange
from marketfeed.core.models.quote import SYNTHETIC_PROVIDER, Bar, BarSeries, Quote, Ticker
from marketfeed.core.models.ranges import LIVE_RANGES, RANGE_SPECS, RangeSpec, resolve_range

__all__ = [
    "Bar",
    "BarSeries",
    "Interval",
    "LIVE_RANGES",
    "Market",
    "Quote",
    "RANGE_SPECS",
    "RangeSpec",
    "SYNTHETIC_PROVIDER",
    "SourceTag",
    "Ticker",
    "TimeRange",
    "resolve_range",
]
