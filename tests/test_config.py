"""
Tests for settings and logging configuration
"""

import logging
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from pixelflow.config import (
    LOG_FORMAT,
    Settings,
    SystemSettings,
    configure_logging,
    get_settings,
    load_settings,
)


class TestSettings:
    """Test settings models and environment loading"""

    def test_defaults(self):
        """Empty environment gives the documented defaults"""
        settings = load_settings({})
        assert settings.parallel.min_work_size == 10000
        assert settings.parallel.worker_count is None
        assert settings.system.log_level == "INFO"
        assert settings.system.debug is False

    def test_from_environment(self):
        """PIXELFLOW_* variables override defaults"""
        settings = load_settings(
            {
                "PIXELFLOW_MIN_WORK_SIZE": "256",
                "PIXELFLOW_WORKER_COUNT": "2",
                "PIXELFLOW_LOG_LEVEL": "warning",
                "PIXELFLOW_DEBUG": "true",
            }
        )
        assert settings.parallel.min_work_size == 256
        assert settings.parallel.worker_count == 2
        assert settings.system.log_level == "WARNING"
        assert settings.system.debug is True

    @pytest.mark.parametrize(
        "environ",
        [
            {"PIXELFLOW_MIN_WORK_SIZE": "0"},
            {"PIXELFLOW_WORKER_COUNT": "-1"},
            {"PIXELFLOW_LOG_LEVEL": "chatty"},
        ],
    )
    def test_invalid_values(self, environ):
        """Invalid values fail validation"""
        with pytest.raises(ValidationError):
            load_settings(environ)

    def test_cached(self, monkeypatch):
        """get_settings is cached until cleared"""
        monkeypatch.setenv("PIXELFLOW_WORKER_COUNT", "5")
        first = get_settings()
        monkeypatch.setenv("PIXELFLOW_WORKER_COUNT", "6")
        assert get_settings() is first
        get_settings.cache_clear()
        assert get_settings().parallel.worker_count == 6

    def test_to_dict(self):
        """to_dict exposes nested sections"""
        data = Settings().to_dict()
        assert data["parallel"]["min_work_size"] == 10000
        assert data["system"]["log_format"] == LOG_FORMAT


class TestConfigureLogging:
    """Test logging setup"""

    def test_level_from_settings(self):
        """basicConfig receives the configured level and format"""
        settings = Settings(system=SystemSettings(log_level="error"))
        with patch("pixelflow.config.logging.basicConfig") as basic_config:
            logger = configure_logging(settings)
        basic_config.assert_called_once_with(level=logging.ERROR, format=LOG_FORMAT)
        assert logger.name == "pixelflow"

    def test_debug_overrides_level(self):
        """debug forces DEBUG regardless of log_level"""
        settings = Settings(system=SystemSettings(log_level="ERROR", debug=True))
        with patch("pixelflow.config.logging.basicConfig") as basic_config:
            configure_logging(settings)
        assert basic_config.call_args.kwargs["level"] == logging.DEBUG
