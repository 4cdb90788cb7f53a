"""Tests for configuration validation"""
import pytest

from swm_rewards import config
from swm_rewards.exceptions import ConfigurationError


class TestConfigValidation:
    """Test validate_config against module settings"""

    def test_defaults_are_valid(self, monkeypatch):
        monkeypatch.setattr(config, "ENABLE_SENTRY", False)

        config.validate_config()

    def test_point_rule_defaults(self):
        assert config.POINTS_EMAIL_VERIFIED == 20
        assert config.POINTS_PER_KG_RECYCLED == 10

    def test_unknown_log_level(self, monkeypatch):
        monkeypatch.setattr(config, "LOG_LEVEL", "VERBOSE")

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()

        assert exc_info.value.config_key == "LOG_LEVEL"

    def test_negative_retries(self, monkeypatch):
        monkeypatch.setattr(config, "MAX_CONFLICT_RETRIES", -1)

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()

        assert exc_info.value.config_key == "MAX_CONFLICT_RETRIES"

    def test_boost_below_one(self, monkeypatch):
        monkeypatch.setattr(config, "BOOST_MULTIPLIER", 0.5)

        with pytest.raises(ConfigurationError):
            config.validate_config()

    def test_sentry_requires_dsn(self, monkeypatch):
        monkeypatch.setattr(config, "ENABLE_SENTRY", True)
        monkeypatch.setattr(config, "SENTRY_DSN", "")

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()

        assert exc_info.value.config_key == "SENTRY_DSN"
