"""Unit tests for logging utilities."""

import json
import logging
import sys
from unittest.mock import Mock

import pytest

from imagehost.log_utils import (
    JsonFormatter,
    LocalDevFormatter,
    format_duration,
    format_size,
    log_batch_stored,
    log_file_deleted,
    log_file_stored,
    log_request_rejected,
    log_server_starting,
    parse_log_level,
)


class TestFormatSize:
    def test_formats_bytes(self):
        """Format bytes as human-readable string."""
        assert format_size(500) == "500b"
        assert format_size(0) == "0b"

    def test_formats_kilobytes(self):
        assert format_size(1024) == "1.0kb"
        assert format_size(512000) == "500.0kb"

    def test_formats_megabytes(self):
        assert format_size(10 * 1024 * 1024) == "10.0mb"


class TestFormatDuration:
    def test_formats_milliseconds(self):
        assert format_duration(250) == "250ms"

    def test_formats_seconds(self):
        assert format_duration(1500) == "1.5s"


class TestParseLogLevel:
    def test_known_levels(self):
        assert parse_log_level("debug") == logging.DEBUG
        assert parse_log_level("WARNING") == logging.WARNING

    def test_unknown_defaults_to_info(self):
        assert parse_log_level("chatty") == logging.INFO


def _record(message: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("imagehost.test", level, __file__, 1, message, None, None)


class TestFormatters:
    def test_json_formatter(self):
        """JSON output carries severity, message and logger name."""
        entry = json.loads(JsonFormatter().format(_record("[file.stored] a.png", logging.WARNING)))

        assert entry["severity"] == "WARNING"
        assert entry["message"] == "[file.stored] a.png"
        assert entry["logger"] == "imagehost.test"
        assert "timestamp" in entry

    def test_json_formatter_includes_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record("failed", logging.ERROR)
            record.exc_info = sys.exc_info()

        entry = json.loads(JsonFormatter().format(record))

        assert "RuntimeError: boom" in entry["exception"]

    def test_local_dev_formatter(self):
        output = LocalDevFormatter().format(_record("hello"))

        assert "INFO" in output
        assert output.endswith("hello")


class TestLoggingFunctions:
    """Test logging functions produce the expected event lines."""

    @pytest.fixture
    def mock_logger(self):
        """Create mock logger."""
        return Mock(spec=logging.Logger)

    def test_log_file_stored(self, mock_logger):
        log_file_stored(mock_logger, "cat-1-2.png", "cat.png", 2048)

        message = mock_logger.info.call_args[0][0]
        assert "[file.stored]" in message
        assert "cat-1-2.png" in message
        assert "2.0kb" in message

    def test_log_file_deleted(self, mock_logger):
        log_file_deleted(mock_logger, "cat-1-2.png")

        assert "[file.deleted] cat-1-2.png" == mock_logger.info.call_args[0][0]

    def test_log_request_rejected(self, mock_logger):
        log_request_rejected(mock_logger, "/upload", 401, "Unauthorized")

        message = mock_logger.warning.call_args[0][0]
        assert "[request.rejected]" in message
        assert "401" in message

    def test_log_batch_stored(self, mock_logger):
        log_batch_stored(mock_logger, 3, 3 * 1024 * 1024, 1200)

        message = mock_logger.info.call_args[0][0]
        assert "files=3" in message
        assert "3.0mb" in message
        assert "1.2s" in message

    def test_log_server_starting(self, mock_logger):
        log_server_starting(mock_logger, 3001, "/srv/public", "production", 42)

        messages = [call[0][0] for call in mock_logger.info.call_args_list]
        assert any("Server running on port 3001" in m for m in messages)
        assert any("/srv/public" in m for m in messages)
        assert any("pid=42" in m for m in messages)
