"""Loguru configuration."""

import sys
from typing import Optional

from loguru import logger

from .config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Replace loguru's default sink with the application's sinks."""
    level = (level or settings.log_level).upper()
    log_file = log_file or settings.log_file

    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level)
    if log_file:
        logger.add(
            log_file,
            rotation="10 MB",
            retention="7 days",
            level=level,
        )
