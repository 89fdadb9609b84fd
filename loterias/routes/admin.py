"""Administrative routes: trigger reconciliation and manage the block state.

Triggers are fire-and-forget: they answer 202 right away and the work runs
on the app's background executor.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from flask import Blueprint, current_app

from loterias.games import Game
from loterias.services.fetcher import ResultFetcher
from loterias.services.reconciliation import LotteryUpdater
from loterias.utils.responses import accepted, ok

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__)


def _updater() -> LotteryUpdater:
    return current_app.extensions["lottery_updater"]


def _fetcher() -> ResultFetcher:
    return current_app.extensions["result_fetcher"]


def _submit(fn, *args) -> None:  # type: ignore[no-untyped-def]
    executor: ThreadPoolExecutor = current_app.extensions["update_executor"]
    future = executor.submit(fn, *args)
    future.add_done_callback(_log_failure)


def _log_failure(future) -> None:  # type: ignore[no-untyped-def]
    exc = future.exception()
    if exc is not None:
        logger.error("Background update failed: %s", exc, exc_info=exc)


@admin_bp.post("/update")
def update_all():
    _submit(_updater().update_all)
    return accepted("Update of all lotteries started")


@admin_bp.post("/update/<game>")
def update_one(game: str):
    parsed = Game.parse(game)
    _submit(_updater().update_one, parsed)
    return accepted(f"Update of {parsed.value} started", lottery=parsed.value)


@admin_bp.get("/block-status")
def block_status():
    return ok(_fetcher().block_state.snapshot())


@admin_bp.delete("/block")
def clear_block():
    state = _fetcher().block_state
    state.reset()
    logger.info("Block state reset by admin request")
    return ok(state.snapshot())


@admin_bp.post("/browser/close")
def close_browser():
    fallback = _fetcher().fallback
    if fallback is not None:
        fallback.close()
    return ok({"browser_open": False})
