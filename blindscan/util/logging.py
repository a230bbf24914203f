"""Structured logging configuration for blindscan.

Provides a centralized logging setup with:
- Console handler (stderr) with configurable level
- Optional file handler (JSON lines for machine parsing)
- Environment-based configuration

Standard output carries the scan result lines only, so every handler
configured here writes somewhere else.

Usage:
    from blindscan.util.logging import get_logger, configure_logging

    configure_logging(level="DEBUG", json_file="/tmp/blindscan.log")
    logger = get_logger(__name__)
    logger.info("Scan started", extra={"frontend_id": 0})
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# Module-level state
_configured = False
_root_logger_name = "blindscan"

# Extra fields copied from extra={} into JSON records
_EXTRA_KEYS = ("frontend_id", "slot", "index", "error_type", "duration_ms")


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON for machine parsing."""

    def format(self, record: logging.LogRecord) -> str:
        output: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Include extra fields passed via extra={}
        for key in _EXTRA_KEYS:
            if hasattr(record, key):
                output[key] = getattr(record, key)
        # Include exception info if present
        if record.exc_info:
            output["traceback"] = "".join(traceback.format_exception(*record.exc_info))
        return json.dumps(output, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console format with optional color."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname
        if self.use_color:
            color = self.LEVEL_COLORS.get(level, "")
            level_str = f"{color}{level:8}{self.RESET}"
        else:
            level_str = f"{level:8}"
        name = record.name.replace("blindscan.", "")
        base = f"[{ts}] {level_str} [{name}] {record.getMessage()}"
        if record.exc_info:
            base += "\n" + "".join(traceback.format_exception(*record.exc_info))
        return base


def _level_from_env() -> str:
    if os.environ.get("BLINDSCAN_DEBUG", "").strip() in ("1", "true", "yes"):
        return "DEBUG"
    return os.environ.get("BLINDSCAN_LOG_LEVEL", "INFO").upper()


def configure_logging(
    *,
    level: Optional[str] = None,
    json_file: Optional[str] = None,
    use_color: bool = True,
) -> None:
    """Configure the blindscan logging subsystem.

    Args:
        level: Log level name. Defaults to BLINDSCAN_LOG_LEVEL, or DEBUG if
               BLINDSCAN_DEBUG=1 is set, otherwise INFO.
        json_file: Optional path to write JSON-formatted logs.
        use_color: Whether to colorize console output (auto-disabled if not a TTY).

    Calling it again replaces the previously installed handlers.
    """
    global _configured

    # Determine log level
    if level is None:
        level = _level_from_env()
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    # Get or create the root blindscan logger
    logger = logging.getLogger(_root_logger_name)
    logger.setLevel(numeric_level)

    # Remove existing handlers to allow reconfiguration
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    # Console handler (stderr; stdout is reserved for result lines)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(ConsoleFormatter(use_color=use_color))
    logger.addHandler(console_handler)

    # Optional JSON file handler
    if json_file:
        try:
            file_handler = logging.FileHandler(json_file, mode="a", encoding="utf-8")
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)
        except OSError as exc:
            logger.warning("Failed to open JSON log file %s: %s", json_file, exc)

    # Prevent propagation to root logger
    logger.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the blindscan namespace.

    A default configuration is applied the first time this is called if
    configure_logging() has not run yet.
    """
    if not _configured:
        configure_logging()

    # Ensure the name is under the blindscan namespace
    if not name.startswith(_root_logger_name):
        if name == "__main__":
            name = f"{_root_logger_name}.main"
        else:
            name = f"{_root_logger_name}.{name}"
    return logging.getLogger(name)


def log_exception(
    logger: logging.Logger,
    message: str,
    *,
    error_type: Optional[str] = None,
    **extra: Any,
) -> None:
    """Log the exception being handled with structured context.

    Call this inside an except block.
    """
    extra_dict = dict(extra)
    if error_type:
        extra_dict["error_type"] = error_type
    logger.exception(message, extra=extra_dict)
