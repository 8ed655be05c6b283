"""Tests for environment-driven configuration"""
import importlib
import logging
import pytest

from habit_analytics import config
from habit_analytics.exceptions import ConfigurationError


@pytest.fixture
def reload_config(monkeypatch):
    """Reload the config module against the current environment"""
    def _reload(**env):
        for key in ("LOG_LEVEL", "LOG_FORMAT", "ANALYTICS_LOG_FINDINGS"):
            monkeypatch.delenv(key, raising=False)
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        # Keep a developer's .env file out of the picture
        monkeypatch.setattr("dotenv.load_dotenv", lambda *args, **kwargs: False)
        return importlib.reload(config)

    yield _reload
    monkeypatch.undo()
    importlib.reload(config)


class TestConfig:
    """Test configuration loading and validation"""

    def test_defaults(self, reload_config):
        cfg = reload_config()

        assert cfg.LOG_LEVEL == "INFO"
        assert cfg.ANALYTICS_LOG_FINDINGS is False
        cfg.validate_config()

    def test_log_level_is_normalized(self, reload_config):
        cfg = reload_config(LOG_LEVEL="debug")
        assert cfg.LOG_LEVEL == "DEBUG"

    def test_finding_logs_flag(self, reload_config):
        cfg = reload_config(ANALYTICS_LOG_FINDINGS="True")
        assert cfg.ANALYTICS_LOG_FINDINGS is True

    def test_invalid_log_level(self, reload_config):
        cfg = reload_config(LOG_LEVEL="LOUD")

        with pytest.raises(ConfigurationError) as exc_info:
            cfg.validate_config()

        assert exc_info.value.config_key == "LOG_LEVEL"

    def test_setup_logging(self, reload_config, monkeypatch):
        cfg = reload_config(LOG_LEVEL="WARNING")
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

        cfg.setup_logging()

        assert calls[0]["level"] == logging.WARNING
        assert calls[0]["format"] == cfg.LOG_FORMAT
