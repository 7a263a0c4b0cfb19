"""Logging setup.

All modules log through the loguru ``logger``. The CLI calls
``configure_logging`` once to pick the sink level.
"""

import sys

from loguru import logger

# CLI --log-level choices mapped to loguru level names
LEVELS = {
    "debug": "DEBUG",
    "info": "INFO",
    "warning": "WARNING",
    "error": "ERROR",
}

LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)


def resolve_level(name: str) -> str:
    """Loguru level for a CLI level name; unknown names give WARNING."""
    return LEVELS.get(name.strip().lower(), "WARNING")


def configure_logging(level: str = "warning") -> int:
    """Replace loguru's default sink with a stderr sink at ``level``.

    Returns:
        The loguru handler id of the new sink
    """
    logger.remove()
    return logger.add(sys.stderr, level=resolve_level(level), format=LOG_FORMAT)


__all__ = ["LEVELS", "configure_logging", "logger", "resolve_level"]
