"""marketfeed core modules."""

from marketfeed.core.client.client import MarketFeedClient
from marketfeed.core.config.settings import ConfigManager, MarketFeedConfig
from marketfeed.core.models.market import Interval, Market, SourceTag, TimeRange

__all__ = [
    "MarketFeedClient",
    "ConfigManager",
    "MarketFeedConfig",
    "Interval",
    "Market",
    "SourceTag",
    "TimeRange",
]
