"""
Logger Module

Provides a centralized console logger for the timekeeping services.
"""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_level = logging.INFO


def configure(level: str | int) -> None:
    """Set the level applied to loggers created (or already created) here."""
    global _level
    _level = logging.getLevelName(level.upper()) if isinstance(level, str) else int(level)
    if not isinstance(_level, int):
        _level = logging.INFO
    for name in list(logging.root.manager.loggerDict):
        if name.startswith("timekeeping."):
            logging.getLogger(name).setLevel(_level)


def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger with a console handler.

    Args:
        name: Short component name (e.g. "TimekeepingService")

    Returns:
        Configured logger instance, namespaced under ``timekeeping``
    """
    logger = logging.getLogger(f"timekeeping.{name}")

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)

    return logger
