from datetime import datetime, timedelta, timezone

from sims.services.scheduler import SESSION_SWEEP_JOB_ID, create_scheduler, run_session_sweep, schedule_session_sweep
from sims.services.sessions import MemorySessionStore, SessionManager


def test_sweep_job_registered():
    scheduler = create_scheduler()
    manager = SessionManager(MemorySessionStore(), ttl=timedelta(hours=24))

    schedule_session_sweep(scheduler, manager, 900)

    job = scheduler.get_job(SESSION_SWEEP_JOB_ID)
    assert job is not None
    assert job.trigger.interval == timedelta(seconds=900)
    assert job.args == (manager,)


async def test_sweep_job_reports_count():
    moments = iter(
        [
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2024, 1, 3, tzinfo=timezone.utc),
        ]
    )
    manager = SessionManager(MemorySessionStore(), ttl=timedelta(hours=24), clock=lambda: next(moments))
    await manager.create(1)
    assert await run_session_sweep(manager) == 1
