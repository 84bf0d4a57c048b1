"""Process logging: one stream, one line format, gating decisions included."""

import logging

from .config import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Loggers that follow LOG_LEVEL instead of their library defaults
ALIGNED_LOGGERS = ("ops_events", "uvicorn", "uvicorn.error", "uvicorn.access")


def resolve_level(name: str) -> int:
    """Level number for a LOG_LEVEL value; unknown names fall back to INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(settings: Settings) -> int:
    """Configure the root handler and align gating and server loggers. Returns the level used."""
    level = resolve_level(settings.log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for name in ALIGNED_LOGGERS:
        logging.getLogger(name).setLevel(level)
    return level
