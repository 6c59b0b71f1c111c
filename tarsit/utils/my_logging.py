# tarsit/utils/my_logging.py
"""Logging setup shared by the API process and the Celery worker"""
import logging
import sys
from tarsit.config.settings import get_settings

# Libraries that flood the log at INFO (SQL echo, broker heartbeats, access lines)
QUIET_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic",
    "celery",
    "kombu",
    "uvicorn.access",
)


def setup_logging(verbose=True):
    """
    Configure root logging once per process.

    verbose=True uses LOG_LEVEL from settings; verbose=False keeps only
    warnings from tarsit and errors from QUIET_LOGGERS.
    """
    settings = get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO) if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    if not verbose:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.ERROR)
