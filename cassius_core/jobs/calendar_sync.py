# cassius_core/jobs/calendar_sync.py
from __future__ import annotations

from cassius_core.calendars.services import CalendarSyncService
from cassius_core.jobs.db import run_in_worker
from cassius_core.jobs.scheduler import JobConfig

GOOGLE_SYNC_INTERVAL_MS = 5 * 60_000


def sync_external_calendars() -> None:
    CalendarSyncService.sync_all()


google_sync_job = JobConfig(
    name="google_sync",
    interval_ms=GOOGLE_SYNC_INTERVAL_MS,
    handler=run_in_worker(sync_external_calendars),
)
