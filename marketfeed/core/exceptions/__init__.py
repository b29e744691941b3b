"""Exception handling module."""

from marketfeed.core.exceptions.base import (
    AllSourcesExhausted,
    ConfigurationError,
    MarketFeedError,
    SourceBadResponse,
    SourceError,
    SourceMissingField,
    SourceTimeout,
)

__all__ = [
    "MarketFeedError",
    "ConfigurationError",
    "SourceError",
    "SourceTimeout",
    "SourceBadResponse",
    "SourceMissingField",
    "AllSourcesExhausted",
]
