"""Logging utilities for imagehost.

Provides consistent, readable logging with bracket notation.
Format: [event.name] context | human message
"""

import json
import logging
import sys


class JsonFormatter(logging.Formatter):
    """Format logs as one JSON object per line for log collectors."""

    LEVEL_TO_SEVERITY = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARNING",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "severity": self.LEVEL_TO_SEVERITY.get(record.levelno, "INFO"),
            "message": record.getMessage(),
            "logger": record.name,
            "timestamp": self.formatTime(record, self.datefmt),
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


class LocalDevFormatter(logging.Formatter):
    """Human-readable format for local development."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        level = record.levelname[:4]
        timestamp = self.formatTime(record, "%H:%M:%S")
        message = record.getMessage()

        formatted = f"{color}{timestamp} {level}{self.RESET} {message}"

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


def parse_log_level(level_str: str) -> int:
    """Convert string log level to logging constant.

    Args:
        level_str: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        logging level constant (defaults to INFO for invalid input)
    """
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(level_str.upper(), logging.INFO)


def configure_logging(level: str | int = logging.INFO, fmt: str = "text") -> None:
    """
    Configure root logging for the service.

    - ``fmt="text"``: human-readable colored output
    - ``fmt="json"``: one JSON object per line

    Args:
        level: Logging level as string ("DEBUG", "INFO", etc.) or int constant
        fmt: Output format, "text" or "json"
    """
    if isinstance(level, str):
        level = parse_log_level(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if fmt == "json" else LocalDevFormatter())

    logging.basicConfig(level=level, handlers=[handler], force=True)

    for noisy_logger in ["multipart", "python_multipart", "httpx", "httpcore"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)


def format_size(size_bytes: int) -> str:
    """Format byte size as human-readable string.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.2mb", "500kb", "50b")
    """
    if size_bytes >= 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f}mb"
    elif size_bytes >= 1024:
        return f"{size_bytes / 1024:.1f}kb"
    else:
        return f"{size_bytes}b"


def format_duration(duration_ms: int) -> str:
    """Format duration as human-readable string (e.g., "15.2s", "250ms")."""
    if duration_ms >= 1000:
        return f"{duration_ms / 1000:.1f}s"
    else:
        return f"{duration_ms}ms"


def log_server_starting(
    logger: logging.Logger,
    port: int,
    serve_dir: str,
    environment: str,
    pid: int,
) -> None:
    """Log server startup details."""
    logger.info(f"[server.starting] port={port} | Server running on port {port}")
    logger.info(f"[server.starting] dir={serve_dir} | Serving files from: {serve_dir}")
    logger.info(f"[server.starting] env={environment} pid={pid}")


def log_file_stored(
    logger: logging.Logger,
    filename: str,
    original_name: str,
    size_bytes: int,
) -> None:
    """Log a file committed into the storage directory."""
    logger.info(f"[file.stored] {filename} | {original_name} ({format_size(size_bytes)})")


def log_file_deleted(logger: logging.Logger, filename: str) -> None:
    """Log a file removed from the storage directory."""
    logger.info(f"[file.deleted] {filename}")


def log_request_rejected(logger: logging.Logger, path: str, status_code: int, reason: str) -> None:
    """Log a request rejected at the request boundary."""
    logger.warning(f"[request.rejected] {path} {status_code} | {reason}")


def log_batch_stored(logger: logging.Logger, count: int, total_bytes: int, duration_ms: int) -> None:
    """Log a committed multi-file upload."""
    logger.info(
        f"[batch.stored] files={count} | {format_size(total_bytes)} in {format_duration(duration_ms)}"
    )
