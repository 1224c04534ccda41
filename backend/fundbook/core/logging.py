"""
Logging configuration for the API server and celery workers.
"""

import logging
import sys
from typing import Optional

from fundbook.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_QUIET_LOGGERS = {
    "uvicorn": logging.INFO,
    "celery": logging.INFO,
    "sqlalchemy": logging.WARNING,
    "asyncpg": logging.WARNING,
    "aiosqlite": logging.WARNING,
}


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger. level overrides settings.LOG_LEVEL."""
    level_name = (level or settings.LOG_LEVEL).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    for name, third_party_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(third_party_level)

    # SQL statement logging follows DB_ECHO rather than LOG_LEVEL
    if settings.DB_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)
