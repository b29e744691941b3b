"""Mapping of logical ranges to upstream and synthetic granularity."""

from __future__ import annotations

from dataclasses import dataclass

from marketfeed.core.models.market import Interval, TimeRange


@dataclass(frozen=True)
class RangeSpec:
    """How a logical range is fetched upstream and walked synthetically.

    Attributes:
        range: the logical range this spec satisfies
        upstream_range: value of the chart API ``range`` parameter
        interval: bar granularity, shared by live and synthetic series
        lookback_days: calendar days covered by the synthetic walk;
            ``None`` means year-to-date, ``0`` means the latest session only
    """

    range: TimeRange
    upstream_range: str
    interval: Interval
    lookback_days: int | None

    @property
    def is_intraday(self) -> bool:
        return self.interval.is_intraday

    @property
    def is_multi_year(self) -> bool:
        return self.interval is Interval.WEEK_1


RANGE_SPECS: dict[TimeRange, RangeSpec] = {
    TimeRange.DAY_1: RangeSpec(TimeRange.DAY_1, "1d", Interval.MINUTE_5, 0),
    TimeRange.DAY_5: RangeSpec(TimeRange.DAY_5, "5d", Interval.MINUTE_15, 5),
    TimeRange.MONTH_1: RangeSpec(TimeRange.MONTH_1, "1mo", Interval.DAY_1, 30),
    TimeRange.MONTH_3: RangeSpec(TimeRange.MONTH_3, "3mo", Interval.DAY_1, 90),
    TimeRange.MONTH_6: RangeSpec(TimeRange.MONTH_6, "6mo", Interval.DAY_1, 182),
    TimeRange.YEAR_TO_DATE: RangeSpec(TimeRange.YEAR_TO_DATE, "ytd", Interval.DAY_1, None),
    TimeRange.YEAR_1: RangeSpec(TimeRange.YEAR_1, "1y", Interval.DAY_1, 365),
    TimeRange.YEAR_5: RangeSpec(TimeRange.YEAR_5, "5y", Interval.WEEK_1, 5 * 365),
}

# Ranges fine enough for the live candle simulator.
LIVE_RANGES = frozenset({TimeRange.DAY_1, TimeRange.DAY_5})


def resolve_range(time_range: TimeRange | str) -> RangeSpec:
    """Return the :class:`RangeSpec` for a logical range."""
    return RANGE_SPECS[TimeRange.parse(time_range)]
