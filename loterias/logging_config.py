"""Logging configuration."""

from __future__ import annotations

import logging
from flask import Flask

QUIET_LOGGERS = ("sqlalchemy.engine", "urllib3", "apscheduler", "pymongo")


def configure_logging(app: Flask) -> None:
    """Configure plain key-ish log lines for the app and background jobs."""

    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s",
    )

    # Reconciliation runs off the request thread; keep library chatter down.
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
