"""Upstream data sources and the failover chain."""

from marketfeed.core.data.sources.base import DataSource, SourceCapability
from marketfeed.core.data.sources.chain import SourceAttempt, SourceChain
from marketfeed.core.data.sources.relays import RelayHttp, RelayRotator, relay_url
from marketfeed.core.data.sources.sectors import SectorsDailySource
from marketfeed.core.data.sources.yahoo import YahooChartSource, yahoo_ticker

__all__ = [
    "DataSource",
    "RelayHttp",
    "RelayRotator",
    "SectorsDailySource",
    "SourceAttempt",
    "SourceCapability",
    "SourceChain",
    "YahooChartSource",
    "relay_url",
    "yahoo_ticker",
]
