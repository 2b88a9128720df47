"""Log sink configuration for the diagcache CLI.

The library logs through loguru but stays silent until a caller enables it.
"""

import sys

from loguru import logger

LOG_FORMAT = "<level>{level: <8}</level> | {name}:{line} - {message}"


def configure_logging(level: str = "WARNING") -> None:
    """Enable diagcache logging with a single stderr sink at level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
    logger.enable("diagcache")
