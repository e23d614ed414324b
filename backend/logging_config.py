"""Centralized logging configuration."""

import logging

from config import settings

# Loggers that drown out sync output at INFO
_NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "httpx",
    "httpcore",
)


def setup_logging(level: str | None = None) -> None:
    """Configure logging for the application.

    Sets the root logger level from ``level`` (or settings.LOG_LEVEL) and
    suppresses noisy third-party loggers to WARNING.

    Args:
        level: Optional level name overriding settings.LOG_LEVEL, used by
            the command-line scripts' ``--verbose`` flag.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
        datefmt="%H:%M:%S",
        level=getattr(logging, level_name),
        force=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
