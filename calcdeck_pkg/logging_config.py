"""Logging setup for the calcdeck engine.

Every module logs through ``get_logger(<module>)`` so all records land
under the ``calcdeck`` hierarchy. Nothing is configured on import: library
callers keep their own handlers, and only the CLI (or an embedding host)
calls ``setup_logging``.
"""

import json
import logging
import sys
from datetime import datetime
from typing import Optional

ROOT_LOGGER = "calcdeck"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_FIELDS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> dict:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_FIELDS}


class StructuredFormatter(logging.Formatter):
    """One line per record: timestamp, level, logger, message, then ``key=value`` extras."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        short_name = record.name.removeprefix(f"{ROOT_LOGGER}.")
        line = f"{timestamp} [{record.levelname}] {short_name}: {record.getMessage()}"
        extras = _extra_fields(record)
        if extras:
            line += " " + " ".join(f"{k}={v!r}" for k, v in sorted(extras.items()))
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class JsonLineFormatter(logging.Formatter):
    """Machine-readable variant used with ``--format json``."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_extra_fields(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[str] = None,
    json_lines: bool = False,
) -> logging.Logger:
    """Configure the ``calcdeck`` logger.

    Calling it again replaces the handlers from the previous call, so the
    CLI can be invoked repeatedly in one process (as the tests do).

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (case-insensitive)
        log_file: also append records to this file
        json_lines: emit one JSON object per record instead of text

    Returns:
        The configured ``calcdeck`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = JsonLineFormatter() if json_lines else StructuredFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Return the ``calcdeck.<name>`` logger (or the root one for the default)."""
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
