"""Logging setup.

The package logs through loguru and is disabled on import; applications
opt in with ``setup_logging``.
"""

from __future__ import annotations

import sys

from loguru import logger

LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logging(level: str = "WARNING") -> None:
    """Enable cnvrt logging with a single stderr sink at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOGGER_FORMAT)
    logger.enable("cnvrt")
