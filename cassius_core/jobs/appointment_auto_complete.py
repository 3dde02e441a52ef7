# cassius_core/jobs/appointment_auto_complete.py
from __future__ import annotations

from cassius_core.appointments.services import AppointmentService
from cassius_core.jobs.db import run_in_worker
from cassius_core.jobs.scheduler import JobConfig

AUTO_COMPLETE_INTERVAL_MS = 60_000


def auto_complete_appointments() -> None:
    AppointmentService.auto_complete_past_due()


appointment_auto_complete_job = JobConfig(
    name="appointment_auto_complete",
    interval_ms=AUTO_COMPLETE_INTERVAL_MS,
    handler=run_in_worker(auto_complete_appointments),
)
