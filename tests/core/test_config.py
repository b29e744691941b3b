"""Tests for configuration loading and validation."""

from datetime import time

import pytest

from marketfeed.core.config import (
    DEFAULT_RELAYS,
    ConfigManager,
    MarketFeedConfig,
    SynthesisConfig,
    load_config_from_env,
)
from marketfeed.core.exceptions import ConfigurationError

ENV_KEYS = (
    "MARKETFEED_QUOTE_TTL",
    "MARKETFEED_BAR_TTL",
    "MARKETFEED_RELAYS",
    "MARKETFEED_QUOTE_TIMEOUT",
    "MARKETFEED_PRIMARY_ATTEMPTS",
    "MARKETFEED_SYNTHESIS_SEED",
    "MARKETFEED_POLL_INTERVAL",
    "MARKETFEED_LOGGING_LEVEL",
    "MARKETFEED_LOGGING_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestMarketFeedConfig:
    def test_defaults(self):
        config = MarketFeedConfig()

        assert config.cache.quote_ttl == 30.0
        assert config.cache.bar_ttl == 300.0
        assert config.sources.relays == DEFAULT_RELAYS
        assert config.sources.quote_timeout == 8.0
        assert config.sources.bars_timeout == 10.0
        assert config.sources.secondary_timeout == 5.0
        assert config.sources.primary_attempts == 4
        assert config.sources.secondary_attempts == 3
        assert config.sources.backoff == 0.5
        assert config.subscriptions.interval == 15.0
        assert config.subscriptions.live_interval == 2.0

    def test_relay_list_is_not_shared(self):
        config = MarketFeedConfig()
        config.sources.relays.append("https://extra.test/?")

        assert MarketFeedConfig().sources.relays == DEFAULT_RELAYS

    def test_from_dict_round_trips_sections(self):
        config = MarketFeedConfig.from_dict({"cache": {"quote_ttl": 10}, "synthesis": {"seed": 3}})

        assert config.cache.quote_ttl == 10
        assert config.cache.bar_ttl == 300.0
        assert config.synthesis.seed == 3
        assert config.to_dict()["cache"] == {"quote_ttl": 10, "bar_ttl": 300.0}

    def test_unknown_key_raises(self):
        with pytest.raises(ConfigurationError, match="unknown configuration key"):
            MarketFeedConfig.from_dict({"cache": {"ttl": 5}})

    @pytest.mark.parametrize(
        "overrides",
        [
            {"cache": {"quote_ttl": 0}},
            {"sources": {"relays": []}},
            {"sources": {"primary_attempts": 0}},
            {"sources": {"quote_timeout": -1}},
            {"sources": {"backoff": -0.5}},
            {"subscriptions": {"interval": 0}},
            {"synthesis": {"wick_ratio": -1}},
            {"synthesis": {"lunch_start": "14:00", "lunch_end": "13:00"}},
        ],
    )
    def test_invalid_values_raise(self, overrides):
        with pytest.raises(ConfigurationError):
            MarketFeedConfig.from_dict(overrides)

    def test_lunch_window(self):
        assert SynthesisConfig().lunch_window == (time(11, 30), time(13, 30))
        assert SynthesisConfig(lunch_start="12:00", lunch_end="13:00").lunch_window == (time(12), time(13))

    def test_malformed_lunch_window(self):
        with pytest.raises(ConfigurationError, match="invalid lunch window"):
            SynthesisConfig(lunch_start="noon")


class TestConfigManager:
    def test_missing_file_gives_defaults(self, tmp_path):
        manager = ConfigManager(tmp_path / "absent.toml")

        assert manager.get_config() == MarketFeedConfig()

    def test_reads_toml_file(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            '[cache]\nquote_ttl = 12.0\n\n[sources]\nrelays = ["https://relay.test/?url="]\nprimary_attempts = 2\n',
            encoding="utf-8",
        )

        config = ConfigManager(path).get_config()

        assert config.cache.quote_ttl == 12.0
        assert config.sources.relays == ["https://relay.test/?url="]
        assert config.sources.primary_attempts == 2

    def test_unreadable_toml_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[cache\nquote_ttl = ", encoding="utf-8")

        assert ConfigManager(path).get_config() == MarketFeedConfig()

    def test_update_config_deep_merges(self, tmp_path):
        manager = ConfigManager(tmp_path / "absent.toml")

        manager.update_config(sources={"primary_attempts": 1})

        config = manager.get_config()
        assert config.sources.primary_attempts == 1
        assert config.sources.relays == DEFAULT_RELAYS


class TestEnvironment:
    def test_empty_environment(self):
        assert load_config_from_env() == {}

    def test_reads_marketfeed_variables(self, monkeypatch):
        monkeypatch.setenv("MARKETFEED_QUOTE_TTL", "5")
        monkeypatch.setenv("MARKETFEED_RELAYS", "https://a.test/?, https://b.test/?")
        monkeypatch.setenv("MARKETFEED_PRIMARY_ATTEMPTS", "2")
        monkeypatch.setenv("MARKETFEED_LOGGING_LEVEL", "DEBUG")

        config = load_config_from_env()

        assert config == {
            "cache": {"quote_ttl": 5.0},
            "sources": {"relays": ["https://a.test/?", "https://b.test/?"], "primary_attempts": 2},
            "logging": {"level": "DEBUG"},
        }

    def test_invalid_number_raises(self, monkeypatch):
        monkeypatch.setenv("MARKETFEED_BAR_TTL", "soon")

        with pytest.raises(ConfigurationError, match="invalid environment value"):
            load_config_from_env()
