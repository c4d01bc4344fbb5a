"""
Tests for structured logging and session correlation
"""

import json
import logging

import pytest

from noodleseed_mcp.logging import (
    ConsoleFormatter,
    CorrelationFilter,
    StructuredFormatter,
    clear_correlation_id,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
    with_session_id
)


def make_record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("noodleseed_mcp.test", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    CorrelationFilter().filter(record)
    return record


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestCorrelation:
    """Test correlation id scoping"""

    def test_with_session_id_restores_previous(self):
        clear_correlation_id()

        with with_session_id("session-a"):
            assert get_correlation_id() == "session-a"
            with with_session_id("session-b"):
                assert get_correlation_id() == "session-b"
            assert get_correlation_id() == "session-a"

        assert get_correlation_id() is None

    def test_set_correlation_id_generates(self):
        generated = set_correlation_id()
        try:
            assert get_correlation_id() == generated
            assert len(generated) == 36
        finally:
            clear_correlation_id()

    def test_filter_stamps_records(self):
        with with_session_id("abc123"):
            record = make_record()

        assert record.correlation_id == "abc123"
        assert make_record().correlation_id == "none"


class TestFormatters:
    """Test structured and console output"""

    def test_structured_formatter_emits_json(self):
        with with_session_id("abc123"):
            record = make_record("Session opened", state="active")

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["message"] == "Session opened"
        assert entry["level"] == "INFO"
        assert entry["correlation_id"] == "abc123"
        assert entry["state"] == "active"

    def test_console_formatter_shows_short_session(self):
        with with_session_id("0123456789abcdef"):
            record = make_record("Tool invoked: search")

        line = ConsoleFormatter().format(record)

        assert "[01234567]" in line
        assert "Tool invoked: search" in line


class TestConfigureLogging:
    """Test root logger configuration"""

    def test_log_file_receives_structured_lines(self, test_config, tmp_path, restore_root_logging):
        log_file = tmp_path / "logs" / "server.log"
        test_config.server.log_file = str(log_file)

        configure_logging(test_config)
        with with_session_id("file-session"):
            logging.getLogger("noodleseed_mcp.test").info("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = [json.loads(line) for line in log_file.read_text().splitlines()]
        entry = next(line for line in lines if line["message"] == "written to file")
        assert entry["correlation_id"] == "file-session"

    def test_third_party_loggers_suppressed(self, test_config, restore_root_logging):
        configure_logging(test_config)

        assert logging.getLogger("aiohttp.access").level == logging.WARNING
