"""Package-wide logger. Import as ``from .logger import logger``."""

import logging
import sys

from .config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_level(name: str) -> int:
    """Map a level name to its number; unknown names fall back to INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


logger = logging.getLogger("bookstore_queries")

if not logger.handlers:
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)

# own handler above; do not repeat lines through the root logger
logger.propagate = False
logger.setLevel(resolve_level(LOG_LEVEL))
