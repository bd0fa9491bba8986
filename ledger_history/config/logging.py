"""
Logging configuration.

Configures the loguru logger for scripts and hosting processes.
"""

import sys

from loguru import logger


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """
    Configure logger sinks.

    Args:
        level: Minimum level for every sink
        log_file: Optional path of a rotating file sink
    """
    logger.remove()
    logger.add(sys.stderr, level=level)

    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            level=level,
            encoding="utf-8",
        )

    logger.debug(f"Logging configured at {level}")
