"""Client module - main client interface."""

from marketfeed.core.client.client import MarketFeedClient

__all__ = [
    "MarketFeedClient",
]
