# cassius_core/jobs/registry.py
from __future__ import annotations

from cassius_core.jobs.appointment_auto_complete import appointment_auto_complete_job
from cassius_core.jobs.calendar_sync import google_sync_job
from cassius_core.jobs.scheduler import JobConfig, SchedulerState


def default_jobs() -> list[JobConfig]:
    return [appointment_auto_complete_job, google_sync_job]


def get_job(name: str) -> JobConfig | None:
    for job in default_jobs():
        if job.name == name:
            return job
    return None


def register_default_jobs(state: SchedulerState) -> None:
    for job in default_jobs():
        state.register(job)
