"""
CityReport - Logging
Console logging for the command line. Library code only calls
`logging.getLogger(__name__)` and never configures handlers itself.
"""

import logging
import sys
from typing import Optional
from functools import lru_cache

from cityreport.core.config import settings

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"


def setup_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Send log records to stdout and return the package logger.

    Args:
        level: Level name, defaults to settings.log_level
        format_string: Record format, defaults to DEFAULT_FORMAT

    Returns:
        The "cityreport" logger
    """
    log_level = getattr(logging, (level or settings.log_level).upper())

    logging.basicConfig(
        level=log_level,
        format=format_string or DEFAULT_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logger = logging.getLogger("cityreport")
    logger.setLevel(log_level)

    # HTTP stack at WARNING, requests are logged by the clients
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return logger


@lru_cache()
def get_logger(name: str = "cityreport") -> logging.Logger:
    """Logger for a cityreport module, e.g. get_logger("cityreport.geocoding")."""
    return logging.getLogger(name)
