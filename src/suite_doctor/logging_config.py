"""
Logging configuration for suite-doctor.

- Interactive use: human-readable colored format
- CI / log collection: JSON format, one object per line
- Level and format: SUITE_DOCTOR_LOG_LEVEL / SUITE_DOCTOR_LOG_FORMAT, or arguments
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

LOGGER_NAME = "suite_doctor"
LEVEL_ENV_VAR = "SUITE_DOCTOR_LOG_LEVEL"
FORMAT_ENV_VAR = "SUITE_DOCTOR_LOG_FORMAT"
LOG_FORMATS = ("readable", "json")

# Extra record attributes copied into JSON entries when present.
EXTRA_FIELDS = ("file_path", "stage", "standard_id", "duration_ms")


class JSONFormatter(logging.Formatter):
    """JSON log formatter for CI runs and log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val
        return json.dumps(log_entry, ensure_ascii=False)


class ReadableFormatter(logging.Formatter):
    """Human-readable colored formatter for terminals."""

    COLORS = {
        "DEBUG": "\033[36m",      # cyan
        "INFO": "\033[32m",       # green
        "WARNING": "\033[33m",    # yellow
        "ERROR": "\033[31m",      # red
        "CRITICAL": "\033[35m",   # magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "") if self.use_color else ""
        reset = self.RESET if color else ""
        ts = datetime.now().strftime("%H:%M:%S")
        duration = getattr(record, "duration_ms", None)
        dur_str = f" [{duration:.0f}ms]" if duration is not None else ""
        msg = record.getMessage()
        base = f"{color}{ts} {record.levelname:<8}{reset} {record.name}: {msg}{dur_str}"
        if record.exc_info and record.exc_info[0] is not None:
            base += "\n" + self.formatException(record.exc_info)
        return base


def configure_logging(level: str | None = None, log_format: str | None = None) -> logging.Logger:
    """Install a single stderr handler on the ``suite_doctor`` logger.

    Args:
        level: Level name; defaults to SUITE_DOCTOR_LOG_LEVEL, then WARNING.
        log_format: ``readable`` or ``json``; defaults to
            SUITE_DOCTOR_LOG_FORMAT, then ``readable``.

    Returns:
        The configured package logger.

    Raises:
        ValueError: If ``log_format`` is not a known format.
    """
    level_name = (level or os.getenv(LEVEL_ENV_VAR) or "WARNING").upper()
    resolved_level = getattr(logging, level_name, None)
    if not isinstance(resolved_level, int):
        resolved_level = logging.WARNING

    format_name = (log_format or os.getenv(FORMAT_ENV_VAR) or "readable").lower()
    if format_name not in LOG_FORMATS:
        raise ValueError(f"Unknown log format: {format_name!r} (expected one of {LOG_FORMATS})")

    if format_name == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = ReadableFormatter(use_color=sys.stderr.isatty())

    logger = logging.getLogger(LOGGER_NAME)
    # Replace handlers so repeated calls do not duplicate output
    logger.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.setLevel(resolved_level)
    logger.addHandler(handler)
    logger.setLevel(resolved_level)
    logger.propagate = False

    logger.debug("Logging configured: level=%s format=%s", level_name, format_name)
    return logger
