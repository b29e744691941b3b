"""Configuration management module."""

from marketfeed.core.config.settings import (
    DEFAULT_RELAYS,
    CacheConfig,
    ConfigManager,
    LoggingConfig,
    MarketFeedConfig,
    SourceConfig,
    SubscriptionConfig,
    SynthesisConfig,
    load_config_from_env,
)

__all__ = [
    "ConfigManager",
    "MarketFeedConfig",
    "load_config_from_env",
    "CacheConfig",
    "SourceConfig",
    "SynthesisConfig",
    "SubscriptionConfig",
    "LoggingConfig",
    "DEFAULT_RELAYS",
]
