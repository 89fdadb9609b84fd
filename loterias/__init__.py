"""Flask application package for the lottery results service."""

from __future__ import annotations

import atexit
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from flask import Flask

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from loterias.config import BaseConfig
    from loterias.scheduler import ReconciliationScheduler


def create_app(config: type[BaseConfig] | None = None) -> Flask:
    """Application factory.

    Args:
        config: configuration class; resolved from APP_ENV when omitted.

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from loterias.cli import register_cli
    from loterias.config import get_config
    from loterias.db import init_db
    from loterias.error_handlers import register_error_handlers
    from loterias.logging_config import configure_logging
    from loterias.routes.admin import admin_bp
    from loterias.routes.health import health_bp
    from loterias.routes.resultados import resultados_bp

    app = Flask(__name__)
    app.config.from_object(config or get_config())

    configure_logging(app)
    init_db(app)
    init_ingestion(app)
    register_error_handlers(app)
    register_cli(app)

    app.register_blueprint(health_bp)
    app.register_blueprint(resultados_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/admin")

    return app


def init_ingestion(app: Flask) -> None:
    """Wire fetcher, rendering fallback and updater into ``app.extensions``."""

    from loterias.services.fetcher import ResultFetcher
    from loterias.services.reconciliation import LotteryUpdater
    from loterias.services.rendering import RenderingFallback, RenderingSession

    fallback = None
    if app.config.get("RENDERING_ENABLED"):
        fallback = RenderingFallback(RenderingSession())
        atexit.register(fallback.close)

    fetcher = ResultFetcher(fallback=fallback)
    updater = LotteryUpdater(fetcher, app.extensions["result_repository"])
    executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="update")

    app.extensions["result_fetcher"] = fetcher
    app.extensions["lottery_updater"] = updater
    app.extensions["update_executor"] = executor


def start_scheduler(app: Flask) -> ReconciliationScheduler | None:
    """Start periodic reconciliation for a serving process.

    Called from the server entrypoints only, never from ``create_app``: CLI
    commands build the app too and must not start background updates.
    """

    if not app.config.get("SCHEDULER_ENABLED"):
        return None
    if os.environ.get("FLASK_RUN_FROM_CLI") == "true":
        # `flask ...` discovers wsgi.py too; commands run their own updates.
        logger.info("Flask CLI process, scheduler not started")
        return None

    from loterias.scheduler import ReconciliationScheduler

    scheduler = ReconciliationScheduler(
        app.extensions["lottery_updater"],
        custom_schedule=app.config.get("CRON_SCHEDULE"),
    )
    scheduler.start()
    atexit.register(scheduler.stop)
    app.extensions["scheduler"] = scheduler
    return scheduler
