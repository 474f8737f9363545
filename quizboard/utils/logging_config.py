"""Logging configuration helpers for the quiz application."""

from __future__ import annotations

import logging
from logging import Logger

from quizboard.constants.network_constants import DEFAULT_LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str | int = DEFAULT_LOG_LEVEL) -> Logger:
    """Configure basic logging for the application and return the package logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger = logging.getLogger("quizboard")
    logger.setLevel(level)
    return logger
