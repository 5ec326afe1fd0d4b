from __future__ import annotations

import sys

from loguru import logger

from src.infrastructure.config import Settings


def configure_logging(settings: Settings) -> None:
    """Route loguru output to stderr and, when configured, a rotating file."""
    logger.remove()
    if sys.stderr is not None:
        logger.add(
            sys.stderr,
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "<cyan>{name}</cyan> | <level>{message}</level>",
            level=settings.log_level,
            colorize=True,
        )
    if settings.log_file:
        logger.add(
            settings.log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name} | {message}",
            level="DEBUG",
            rotation="1 day",
            retention="7 days",
            encoding="utf-8",
        )
