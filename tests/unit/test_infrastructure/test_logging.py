"""
Unit tests for the logging infrastructure.
"""

import logging

import pytest

from signaling_relay.infrastructure import (
    Environment,
    LoggingContext,
    LoggingManager,
    get_logger,
)


class TestLoggingManager:
    """Test cases for LoggingManager class."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("prod", Environment.PRODUCTION),
            ("production", Environment.PRODUCTION),
            ("stage", Environment.STAGING),
            ("development", Environment.DEVELOPMENT),
            ("anything-else", Environment.DEVELOPMENT),
        ],
    )
    def test_environment_detection(self, monkeypatch, value, expected):
        monkeypatch.setenv("ENVIRONMENT", value)

        manager = LoggingManager()

        assert manager.get_environment() is expected
        assert manager.is_production() is (expected is Environment.PRODUCTION)

    @pytest.mark.unit
    def test_packaged_yaml_config(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "development")
        manager = LoggingManager()

        logger = manager.setup_logging("signaling_relay", log_level="INFO")

        assert manager.config_path.name == "logging.yaml"
        assert manager.config_path.exists()
        assert logger.level == logging.INFO
        assert logging.getLogger("websockets").level == logging.WARNING

    @pytest.mark.unit
    def test_basic_fallback_with_log_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ENVIRONMENT", "development")
        manager = LoggingManager(config_path=tmp_path / "missing.yaml")
        log_file = tmp_path / "logs" / "relay.log"

        logger = manager.setup_logging(
            "signaling_relay.test_fallback", log_level="DEBUG", log_file=str(log_file)
        )
        logger.debug("hello")
        for handler in logger.handlers:
            handler.flush()

        assert log_file.exists()
        assert "hello" in log_file.read_text(encoding="utf-8")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    @pytest.mark.unit
    def test_production_level_default(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ENVIRONMENT", "production")
        manager = LoggingManager(config_path=tmp_path / "missing.yaml")

        logger = manager.setup_logging("signaling_relay.test_production")

        assert logger.level == logging.WARNING
        assert manager.get_effective_log_level("signaling_relay.test_production") == "WARNING"


class TestLoggingContext:
    """Test cases for LoggingContext."""

    @pytest.mark.unit
    def test_level_restored_on_exit(self):
        logger = get_logger("signaling_relay.test_context")
        logger.setLevel(logging.INFO)

        with LoggingContext(logger, logging.DEBUG):
            assert logger.level == logging.DEBUG

        assert logger.level == logging.INFO
