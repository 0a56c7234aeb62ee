"""
Unified logging module
======================

Single place to configure and obtain loggers for the sheetimport package.

Usage:
    from sheetimport.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Parsing file: %s", filename)
    logger.warning("Country %r resolved by prefix fallback", raw)
"""

import logging
import sys
from typing import Optional

# Default log format with timestamp, level, and module name
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LEVEL = logging.INFO

ROOT_LOGGER_NAME = "sheetimport"

# Global flag to track if the package logger has been configured
_root_configured = False


def _resolve_level() -> int:
    from sheetimport.config import get_settings

    name = get_settings().LOG_LEVEL.upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else DEFAULT_LEVEL


def _configure_root_logger() -> None:
    """
    Attach a stdout handler to the package logger.

    Runs once; guarded by the module-level ``_root_configured`` flag.
    """
    global _root_configured
    if _root_configured:
        return

    level = _resolve_level()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT))

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)
    root_logger.propagate = False

    _root_configured = True


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Return the logger called *name*, configuring the package logger first.

    Args:
        name: logger name, normally the caller's ``__name__``
        level: optional level override for this logger only
    """
    _configure_root_logger()

    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def set_level(level: int, logger_name: Optional[str] = None) -> None:
    """
    Set the level of *logger_name*, or of the package logger when omitted.

    Example:
        set_level(logging.DEBUG)                         # whole package
        set_level(logging.DEBUG, "sheetimport.pipeline")  # pipeline only
    """
    logger = logging.getLogger(logger_name or ROOT_LOGGER_NAME)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
