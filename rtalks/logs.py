"""Logging setup (loguru)."""
import sys

from loguru import logger

from .settings import Settings


LOG_FORMAT = " | ".join((
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>",
    "<level>{level:<8}</level>",
    "<cyan>{name}:{function}:{line}</cyan>",
    "{message}",
))


def configure_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=settings.log_level)

    if settings.log_dir:
        # daily rotation, compressed, written from a background thread
        logger.add(
            f"{settings.log_dir}/{{time:YYYY-MM-DD}}.log",
            format=LOG_FORMAT,
            level=settings.log_level,
            rotation="1 day",
            retention="30 days",
            compression="zip",
            enqueue=True,
        )
