"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys

import pytest

from pocketledger.config import BaseConfig
from pocketledger.logging_config import JSONFormatter, get_logger, setup_logging


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.setenv("POCKETLEDGER_DATA_DIR", str(tmp_path))
    yield BaseConfig()
    root = logging.getLogger("pocketledger")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


def _record(**overrides) -> logging.LogRecord:
    fields = dict(
        name="test.logger",
        level=logging.INFO,
        pathname="test.py",
        lineno=42,
        msg="Test message",
        args=(),
        exc_info=None,
    )
    fields.update(overrides)
    return logging.LogRecord(**fields)


def test_json_formatter():
    """JSONFormatter emits the core fields plus any extras."""
    record = _record()
    record.funcName = "test_function"
    record.account_id = "account-1"

    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.logger"
    assert log_data["message"] == "Test message"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert log_data["extra"] == {"account_id": "account-1"}
    assert "timestamp" in log_data


def test_json_formatter_with_exception():
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(
        JSONFormatter().format(_record(level=logging.ERROR, msg="Error occurred", exc_info=exc_info))
    )

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"]


def test_setup_logging(config, tmp_path):
    """Logging setup creates a rotating JSON log file."""
    logger = setup_logging(config)

    assert logger.name == "pocketledger"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2

    log_file = tmp_path / "logs" / "pocketledger.log"
    get_logger("tests").warning("Ledger event", extra={"account_id": "account-9"})
    for handler in logger.handlers:
        handler.flush()

    entries = [json.loads(line) for line in log_file.read_text().splitlines() if line.strip()]
    assert entries[0]["message"] == "Logging initialized"
    assert entries[-1]["extra"]["account_id"] == "account-9"


def test_setup_logging_replaces_handlers(config):
    setup_logging(config)
    logger = setup_logging(config)

    assert len(logger.handlers) == 2


def test_get_logger_namespacing():
    assert get_logger("module1").name == "pocketledger.module1"
    assert get_logger("pocketledger.services.ledger").name == "pocketledger.services.ledger"
    assert get_logger("pocketledger").name == "pocketledger"


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(config, dev_mode):
    """Console logging level adjusts based on dev mode."""
    config.DEV_MODE = dev_mode

    logger = setup_logging(config)

    console_handler = next(
        handler
        for handler in logger.handlers
        if not isinstance(handler, logging.handlers.RotatingFileHandler)
    )
    assert console_handler.level == (logging.INFO if dev_mode else logging.WARNING)
