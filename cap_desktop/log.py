"""Logging setup for the bootstrap process."""

import logging
import os
import sys

LOG_LEVEL_ENV = "CAP_DESKTOP_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def configure_logging(debug: bool = False) -> None:
    """Configure root logging for the process.

    Args:
        debug: Log at DEBUG instead of INFO (CAP_DESKTOP_LOG_LEVEL overrides both)
    """
    level_name = os.environ.get(LOG_LEVEL_ENV)
    level = logging.DEBUG if debug else logging.INFO
    if level_name:
        level = logging.getLevelName(level_name.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
