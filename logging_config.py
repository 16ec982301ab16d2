"""
logging_config.py - Centralized logging configuration.

Every module logs through a named logger from get_logger(). The CLI and the
HTTP layer call setup_logging() once at startup.
"""

from __future__ import annotations

import logging
import sys

LEVEL_NAMES: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: int = logging.INFO, json_format: bool = False) -> None:
    """Configure root logger with consistent formatting.

    Args:
        level: Logging level.
        json_format: If True, emit JSON-like log lines.
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    if json_format:
        formatter = logging.Formatter(
            '{"timestamp":"%(asctime)s","level":"%(levelname)s",'
            '"module":"%(name)s","message":"%(message)s"}',
            datefmt="%H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(name)-20s] %(levelname)-7s %(message)s",
            datefmt="%H:%M:%S",
        )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root.addHandler(handler)


def level_from_name(name: str | None, default: int = logging.INFO) -> int:
    """Map a level name like 'debug' to its logging constant."""
    if not name:
        return default
    return LEVEL_NAMES.get(str(name).strip().upper(), default)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger."""
    return logging.getLogger(name)
