"""Tests for centralized logging configuration."""

import json
import logging

import pytest

from phabstractic.system import LoggerFactory, LoggingConfig, SystemConfig
from phabstractic.system import config as system_config
from phabstractic.system.log_system import DEFAULT_LOG_FILE


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before and after each test."""
    LoggerFactory.reset()
    yield
    LoggerFactory.reset()


def test_default_configuration():
    """Defaults: INFO to console, no file output."""
    config = LoggingConfig()

    assert config.level == "INFO"
    assert config.format == "console"
    assert config.enable_file is False
    assert config.file_level == "WARNING"


def test_explicit_configuration():
    """Test configuring logger factory explicitly."""
    LoggerFactory.configure(LoggingConfig(level="DEBUG", format="json"))

    assert LoggerFactory.is_configured()
    assert LoggerFactory.get_config().level == "DEBUG"
    assert LoggerFactory.get_config().format == "json"


def test_get_logger_leaves_host_logging_alone(caplog):
    """Getting a logger never replaces the host application's handlers."""
    host_handler = logging.NullHandler()
    logging.getLogger().addHandler(host_handler)

    logger = LoggerFactory.get_logger("phabstractic.events.conduit")
    with caplog.at_level(logging.WARNING):
        logger.warning("conduit.route_failed", event_id="GenericEvent1")

    assert not LoggerFactory.is_configured()
    assert host_handler in logging.getLogger().handlers
    assert "conduit.route_failed" in caplog.text


def test_configure_defaults_to_system_config(monkeypatch):
    """configure() without arguments applies the logging section of the system config."""
    monkeypatch.setattr(system_config, "_system_config", SystemConfig(logging=LoggingConfig(level="ERROR")))

    LoggerFactory.configure()

    assert LoggerFactory.get_config().level == "ERROR"
    assert logging.getLogger().level == logging.ERROR


def test_file_logging_writes_json_lines(tmp_path):
    """File output is one JSON object per line."""
    log_file = tmp_path / "events.log"
    LoggerFactory.configure(
        LoggingConfig(enable_file=True, file_path=log_file, file_level="DEBUG")
    )
    logger = LoggerFactory.get_logger()

    logger.info("conduit.routed", event_id="GenericEvent1", matched=2)

    record = json.loads(log_file.read_text().strip())
    assert record["event"] == "conduit.routed"
    assert record["event_id"] == "GenericEvent1"
    assert record["matched"] == 2
    assert "log_timestamp" in record


def test_file_logging_uses_default_path():
    """Enabling file output without a path falls back to logs/phabstractic.log."""
    LoggerFactory.configure(LoggingConfig(enable_file=True, file_path=None))

    assert LoggerFactory.get_config().file_path == DEFAULT_LOG_FILE


def test_file_logging_creates_directory(tmp_path):
    """File logging creates missing parent directories."""
    log_file = tmp_path / "logs" / "nested" / "events.log"

    LoggerFactory.configure(LoggingConfig(enable_file=True, file_path=log_file))
    LoggerFactory.get_logger().warning("handler_queue.handler_error", error="boom")

    assert log_file.exists()


def test_file_level_independent_from_console_level(tmp_path):
    """File level filters independently of the console level."""
    log_file = tmp_path / "warnings.log"
    LoggerFactory.configure(
        LoggingConfig(level="DEBUG", enable_file=True, file_path=log_file, file_level="WARNING")
    )
    logger = LoggerFactory.get_logger()

    logger.debug("handler_queue.propagated")
    logger.error("handler_queue.handler_error")

    events = [json.loads(line)["event"] for line in log_file.read_text().splitlines() if line.strip()]
    assert events == ["handler_queue.handler_error"]


def test_reset_clears_configuration():
    """Reset returns the factory to its unconfigured state."""
    LoggerFactory.configure(LoggingConfig(level="DEBUG"))

    LoggerFactory.reset()

    assert not LoggerFactory.is_configured()
    assert LoggerFactory.get_config().level == "INFO"


def test_invalid_level_rejected():
    """Unknown levels fail validation."""
    with pytest.raises(ValueError):
        LoggingConfig(level="VERBOSE")
