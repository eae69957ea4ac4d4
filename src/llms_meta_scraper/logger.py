"""
Centralized logging configuration for llms-meta-scraper
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "llms_meta_scraper"

# Package root logger, configured on first use
_logger: Optional[logging.Logger] = None


def _root_logger() -> logging.Logger:
    global _logger

    if _logger is None:
        _logger = logging.getLogger(ROOT_LOGGER_NAME)
        _logger.setLevel(logging.INFO)

        # Avoid adding handlers multiple times
        if not _logger.handlers:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(logging.INFO)

            # Format: [LEVEL] message
            formatter = logging.Formatter(
                "[%(levelname)s] %(message)s",
                datefmt="%H:%M:%S"
            )
            console_handler.setFormatter(formatter)

            _logger.addHandler(console_handler)

    return _logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger that writes through the package handler.

    Args:
        name: Module name (usually ``__name__``). Names outside the package
              are nested under it so they share one handler.

    Returns:
        Configured logger instance
    """
    root = _root_logger()
    if name == ROOT_LOGGER_NAME:
        return root
    if not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_log_level(level: int | str) -> None:
    """
    Set the package log level.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
               or integer level
    """
    logger = _root_logger()
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
