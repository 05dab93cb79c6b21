"""Background scheduler for periodic maintenance jobs."""
from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from sims.services.sessions import SessionManager

logger = logging.getLogger(__name__)

SESSION_SWEEP_JOB_ID = "sweep-expired-sessions"


def create_scheduler() -> AsyncIOScheduler:
    return AsyncIOScheduler()


def start_scheduler(scheduler: AsyncIOScheduler) -> None:
    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started")


def stop_scheduler(scheduler: AsyncIOScheduler) -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


def schedule_session_sweep(scheduler: AsyncIOScheduler, manager: SessionManager, interval_seconds: int) -> None:
    trigger = IntervalTrigger(seconds=interval_seconds)
    scheduler.add_job(
        run_session_sweep,
        trigger=trigger,
        id=SESSION_SWEEP_JOB_ID,
        args=[manager],
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    logger.info("Scheduled session sweep every %s seconds", trigger.interval.total_seconds())


async def run_session_sweep(manager: SessionManager) -> int:
    try:
        count = await manager.sweep()
    except Exception:  # noqa: BLE001
        logger.exception("Session sweep failed")
        return 0
    logger.debug("Session sweep finished, %d session(s) expired", count)
    return count
