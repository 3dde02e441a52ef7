# cassius_core/jobs/management/commands/run_jobs.py
from __future__ import annotations

import asyncio
import signal

from django.core.management.base import BaseCommand, CommandError

from cassius_core.jobs.registry import default_jobs, get_job, register_default_jobs
from cassius_core.jobs.scheduler import SchedulerState


class Command(BaseCommand):
    help = "Run the background job scheduler until SIGINT/SIGTERM, or run one job once."

    def add_arguments(self, parser):
        parser.add_argument("--once", type=str, default=None, metavar="NAME", help="Run a single job immediately and exit.")
        parser.add_argument("--list", action="store_true", help="List registered job names and intervals.")

    def handle(self, *args, **opts):
        if opts["list"]:
            for job in default_jobs():
                self.stdout.write(f"{job.name}\t{job.interval_ms}ms")
            return

        if opts["once"]:
            job = get_job(opts["once"])
            if job is None:
                raise CommandError(f"Unknown job: {opts['once']}")
            try:
                asyncio.run(SchedulerState().run_once(job))
            except Exception as exc:
                raise CommandError(f"Job {job.name} failed: {exc}") from exc
            self.stdout.write(self.style.SUCCESS(f"Job {job.name} completed."))
            return

        asyncio.run(self._serve())
        self.stdout.write(self.style.SUCCESS("Scheduler stopped."))

    async def _serve(self) -> None:
        state = SchedulerState()
        shutdown = asyncio.Event()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, shutdown.set)

        register_default_jobs(state)
        self.stdout.write(f"Scheduler running: {', '.join(state.job_names)}")

        await shutdown.wait()

        state.stop_all()
        await state.drain()
