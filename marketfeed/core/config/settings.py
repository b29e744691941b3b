"""Configuration management for the marketfeed client."""

import os
import tomllib
from dataclasses import asdict, dataclass, field
from datetime import time
from pathlib import Path
from typing import Any

from marketfeed.core.exceptions import ConfigurationError
from marketfeed.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_RELAYS = [
    "https://api.allorigins.win/raw?url=",
    "https://corsproxy.io/?",
    "https://api.codetabs.com/v1/proxy?quest=",
]


@dataclass
class CacheConfig:
    """Cache TTLs in seconds."""

    quote_ttl: float = 30.0
    bar_ttl: float = 300.0

    def __post_init__(self) -> None:
        if self.quote_ttl <= 0 or self.bar_ttl <= 0:
            raise ConfigurationError("cache TTLs must be positive", field="cache")


@dataclass
class SourceConfig:
    """Source chain behaviour."""

    relays: list[str] = field(default_factory=lambda: list(DEFAULT_RELAYS))
    quote_timeout: float = 8.0
    bars_timeout: float = 10.0
    secondary_timeout: float = 5.0
    primary_attempts: int = 4
    secondary_attempts: int = 3
    backoff: float = 0.5
    user_agent: str = "marketfeed/0.1.0"

    def __post_init__(self) -> None:
        if not self.relays:
            raise ConfigurationError("at least one relay is required", field="sources.relays")
        if min(self.quote_timeout, self.bars_timeout, self.secondary_timeout) <= 0:
            raise ConfigurationError("timeouts must be positive", field="sources")
        if self.primary_attempts < 1 or self.secondary_attempts < 1:
            raise ConfigurationError("attempt counts must be at least 1", field="sources")
        if self.backoff < 0:
            raise ConfigurationError("backoff must be non-negative", field="sources.backoff")


@dataclass
class SynthesisConfig:
    """Heuristic constants of the synthetic bar generator."""

    seed: int | None = None
    volatility_scales: dict[str, float] = field(
        default_factory=lambda: {"5m": 0.1, "15m": 0.2, "1d": 1.0, "1wk": 1.0}
    )
    wick_ratio: float = 0.5
    max_trend_bias: float = 0.25
    lunch_start: str = "11:30"
    lunch_end: str = "13:30"

    def __post_init__(self) -> None:
        if self.wick_ratio < 0:
            raise ConfigurationError("wick_ratio must be non-negative", field="synthesis.wick_ratio")
        if any(scale <= 0 for scale in self.volatility_scales.values()):
            raise ConfigurationError("volatility scales must be positive", field="synthesis.volatility_scales")
        if self.lunch_window[0] >= self.lunch_window[1]:
            raise ConfigurationError("lunch_start must precede lunch_end", field="synthesis.lunch_start")

    @property
    def lunch_window(self) -> tuple[time, time]:
        try:
            return time.fromisoformat(self.lunch_start), time.fromisoformat(self.lunch_end)
        except ValueError as exc:
            raise ConfigurationError(f"invalid lunch window: {exc}", field="synthesis") from exc


@dataclass
class SubscriptionConfig:
    """Polling and live-simulation cadence."""

    interval: float = 15.0
    live_interval: float = 2.0
    live_volatility: float = 0.0005

    def __post_init__(self) -> None:
        if self.interval <= 0 or self.live_interval <= 0:
            raise ConfigurationError("intervals must be positive", field="subscriptions")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    file: str | None = None


@dataclass
class MarketFeedConfig:
    """marketfeed main configuration."""

    cache: CacheConfig = field(default_factory=CacheConfig)
    sources: SourceConfig = field(default_factory=SourceConfig)
    synthesis: SynthesisConfig = field(default_factory=SynthesisConfig)
    subscriptions: SubscriptionConfig = field(default_factory=SubscriptionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "MarketFeedConfig":
        """Build a configuration from a nested dictionary."""
        try:
            return cls(
                cache=CacheConfig(**config_dict.get("cache", {})),
                sources=SourceConfig(**config_dict.get("sources", {})),
                synthesis=SynthesisConfig(**config_dict.get("synthesis", {})),
                subscriptions=SubscriptionConfig(**config_dict.get("subscriptions", {})),
                logging=LoggingConfig(**config_dict.get("logging", {})),
            )
        except TypeError as exc:
            raise ConfigurationError(f"unknown configuration key: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        return {
            "cache": asdict(self.cache),
            "sources": asdict(self.sources),
            "synthesis": asdict(self.synthesis),
            "subscriptions": asdict(self.subscriptions),
            "logging": asdict(self.logging),
        }


def _deep_update(target: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            target[key] = _deep_update(dict(target[key]), value)
        else:
            target[key] = value
    return target


class ConfigManager:
    """Loads and updates the client configuration."""

    def __init__(self, config_path: Path | None = None):
        """Initialise the manager.

        Args:
            config_path: TOML file to read; defaults to ``~/.marketfeed/config.toml``
        """
        self.config_path = config_path or Path.home() / ".marketfeed" / "config.toml"
        self.config = self._load_config()

    def _load_config(self) -> MarketFeedConfig:
        if not self.config_path.exists():
            return MarketFeedConfig()

        try:
            with open(self.config_path, "rb") as f:
                config_dict = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            logger.warning("Failed to load config from {}: {}", self.config_path, exc)
            return MarketFeedConfig()
        return MarketFeedConfig.from_dict(config_dict)

    def get_config(self) -> MarketFeedConfig:
        return self.config

    def update_config(self, **updates: Any) -> None:
        """Deep-merge ``updates`` into the current configuration."""
        config_dict = _deep_update(self.config.to_dict(), updates)
        self.config = MarketFeedConfig.from_dict(config_dict)


def load_config_from_env() -> dict[str, Any]:
    """Read ``MARKETFEED_*`` environment variables into a nested dictionary."""
    config: dict[str, Any] = {}

    def _put(section: str, key: str, value: Any) -> None:
        config.setdefault(section, {})[key] = value

    try:
        if (value := os.getenv("MARKETFEED_QUOTE_TTL")) is not None:
            _put("cache", "quote_ttl", float(value))
        if (value := os.getenv("MARKETFEED_BAR_TTL")) is not None:
            _put("cache", "bar_ttl", float(value))
        if (value := os.getenv("MARKETFEED_RELAYS")) is not None:
            _put("sources", "relays", [relay.strip() for relay in value.split(",") if relay.strip()])
        if (value := os.getenv("MARKETFEED_QUOTE_TIMEOUT")) is not None:
            _put("sources", "quote_timeout", float(value))
        if (value := os.getenv("MARKETFEED_PRIMARY_ATTEMPTS")) is not None:
            _put("sources", "primary_attempts", int(value))
        if (value := os.getenv("MARKETFEED_SYNTHESIS_SEED")) is not None:
            _put("synthesis", "seed", int(value))
        if (value := os.getenv("MARKETFEED_POLL_INTERVAL")) is not None:
            _put("subscriptions", "interval", float(value))
    except ValueError as exc:
        raise ConfigurationError(f"invalid environment value: {exc}") from exc

    if (value := os.getenv("MARKETFEED_LOGGING_LEVEL")) is not None:
        _put("logging", "level", value)
    if (value := os.getenv("MARKETFEED_LOGGING_FILE")) is not None:
        _put("logging", "file", value)

    return config
