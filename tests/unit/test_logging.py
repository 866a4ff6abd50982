"""Unit tests for logging setup."""

import json
import logging
import sys

import pytest

from iclock_api.utils.logging import JSONFormatter, TextFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg="hello", level=logging.INFO, **extra):
    record = logging.LogRecord("iclock_api.test", level, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test structured log output."""

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "iclock_api.test"
        assert data["message"] == "hello"
        assert "timestamp" in data

    def test_extra_fields(self):
        data = json.loads(JSONFormatter().format(_record(sn="A1", command_id=3)))
        assert data["sn"] == "A1"
        assert data["command_id"] == 3
        assert "args" not in data

    def test_exception(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord(
                "iclock_api.test", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )
        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad" in data["exception"]


class TestTextFormatter:
    """Test human readable output."""

    def test_plain_without_tty(self):
        formatter = TextFormatter(use_colors=False)
        output = formatter.format(_record(level=logging.WARNING))
        assert "[WARNING] iclock_api.test: hello" in output


class TestSetupLogging:
    """Test root logger configuration."""

    def test_json(self, restore_root_logger):
        setup_logging(level="debug", format_type="json")
        assert restore_root_logger.level == logging.DEBUG
        [handler] = restore_root_logger.handlers
        assert isinstance(handler.formatter, JSONFormatter)

    def test_text(self, restore_root_logger):
        setup_logging(level="WARNING", format_type="text")
        assert restore_root_logger.level == logging.WARNING
        assert isinstance(restore_root_logger.handlers[0].formatter, TextFormatter)
