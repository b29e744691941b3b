"""Quote and bar data models."""

from datetime import datetime

from pydantic import BaseModel, Field, field_serializer
from pydantic import ConfigDict as PydanticConfigDict

from .market import Interval, Market, SourceTag, TimeRange

SYNTHETIC_PROVIDER = "synthetic"


class Quote(BaseModel):
    """Current price snapshot for a single symbol."""

    symbol: str
    market: Market
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    open: float
    high: float
    low: float
    volume: int = 0
    previous_close: float | None = None
    last_update: datetime
    source: SourceTag = SourceTag.LIVE
    provider: str | None = None

    model_config = PydanticConfigDict(frozen=True)

    @property
    def is_synthetic(self) -> bool:
        """True when the payload was fabricated by the synthesizer."""
        return self.provider == SYNTHETIC_PROVIDER

    @field_serializer("last_update", when_used="json")
    def serialize_datetime(self, value: datetime) -> str:
        """Serialize datetime to isoformat string."""
        return value.isoformat()


class Bar(BaseModel):
    """One OHLCV candle."""

    timestamp: datetime
    label: str
    open: float
    high: float
    low: float
    close: float
    volume: int = 0

    model_config = PydanticConfigDict(frozen=True)

    @field_serializer("timestamp", when_used="json")
    def serialize_datetime(self, value: datetime) -> str:
        """Serialize datetime to isoformat string."""
        return value.isoformat()


class BarSeries(BaseModel):
    """Chronological bars for one symbol and logical range."""

    symbol: str
    market: Market
    range: TimeRange
    interval: Interval
    bars: list[Bar] = Field(default_factory=list)
    source: SourceTag = SourceTag.LIVE
    provider: str | None = None

    @property
    def is_synthetic(self) -> bool:
        return self.provider == SYNTHETIC_PROVIDER

    @property
    def last(self) -> Bar | None:
        return self.bars[-1] if self.bars else None

    def __len__(self) -> int:
        return len(self.bars)

    def detached(self, **update: object) -> "BarSeries":
        """Return a copy whose bar list can be mutated independently."""
        return self.model_copy(update={"bars": list(self.bars), **update})


class Ticker(BaseModel):
    """Watchlist row: a quote enriched with directory metadata."""

    symbol: str
    name: str
    sector: str
    market: Market
    price: float
    change: float
    change_percent: float
    high: float | None = None
    low: float | None = None
    volume: int | None = None
    last_update: datetime | None = None
    source: SourceTag = SourceTag.LIVE

    @classmethod
    def from_quote(cls, quote: Quote, *, name: str, sector: str) -> "Ticker":
        return cls(
            symbol=quote.symbol,
            name=name,
            sector=sector,
            market=quote.market,
            price=quote.price,
            change=quote.change,
            change_percent=quote.change_percent,
            high=quote.high,
            low=quote.low,
            volume=quote.volume,
            last_update=quote.last_update,
            source=quote.source,
        )
