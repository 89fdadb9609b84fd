"""Periodic reconciliation trigger.

Results are published in the evening (Mon-Sat) and prize data is finalized
over the following hours, hence several runs per day.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from loterias.services.reconciliation import LotteryUpdater

logger = logging.getLogger(__name__)

DEFAULT_SCHEDULES = (
    "0 12 * * mon-sat",
    "0 21 * * mon-sat",
    "15 21 * * mon-sat",
    "0 22 * * mon-sat",
    "10 23 * * mon-sat",
    "20 0 * * mon-sat",
    "0 1 * * mon-sat",
)


def resolve_schedules(custom: str | None) -> tuple[str, ...]:
    """A non-empty custom crontab expression replaces the default list."""

    if custom and custom.strip():
        return (custom.strip(),)
    return DEFAULT_SCHEDULES


class ReconciliationScheduler:
    def __init__(
        self,
        updater: LotteryUpdater,
        custom_schedule: str | None = None,
        scheduler: BackgroundScheduler | None = None,
    ) -> None:
        self._updater = updater
        self._schedules = resolve_schedules(custom_schedule)
        self._scheduler = scheduler or BackgroundScheduler(daemon=True)

    def _run(self) -> None:
        logger.info("Running scheduled lottery update...")
        self._updater.update_all()
        logger.info("Scheduled lottery update completed")

    def start(self, run_now: bool = True) -> list[str]:
        """Register cron jobs and start; returns the expressions that were accepted."""

        accepted: list[str] = []
        for i, expr in enumerate(self._schedules):
            try:
                trigger = CronTrigger.from_crontab(expr)
            except ValueError as exc:
                logger.error("Error scheduling task %r: %s", expr, exc)
                continue
            self._scheduler.add_job(
                self._run,
                trigger,
                id=f"update-all-{i}",
                max_instances=1,
                coalesce=True,
                replace_existing=True,
            )
            accepted.append(expr)
            logger.info("Scheduled: %s", expr)

        if run_now:
            # No trigger: runs once, immediately, in the scheduler's pool.
            self._scheduler.add_job(self._run, id="update-all-initial", replace_existing=True)

        self._scheduler.start()
        logger.info("Scheduler started with %s update times", len(accepted))
        return accepted

    def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
