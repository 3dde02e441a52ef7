# cassius_core/jobs/scheduler.py
"""
In-process periodic job scheduler (asyncio).

Rules:
- One timer task per job name; a duplicate register() is a logged no-op.
- A job never overlaps itself: the next sleep starts once the tick settles.
- Tick failures are logged and the job stays armed.
- stop()/stop_all() cancel future firings only; an in-flight tick runs to completion.
- run_once() re-raises whatever the handler raised.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

JobHandler = Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class JobConfig:
    name: str
    interval_ms: int
    handler: JobHandler


class SchedulerState:
    """
    Owns the timers of one scheduler. Instances are independent of each other.
    """

    def __init__(self) -> None:
        self._timers: dict[str, asyncio.Task] = {}
        self._stopped: set[asyncio.Task] = set()
        self._ticks: set[asyncio.Task] = set()

    @property
    def job_names(self) -> tuple[str, ...]:
        return tuple(self._timers)

    def is_registered(self, name: str) -> bool:
        return name in self._timers

    def register(self, config: JobConfig) -> None:
        if not config.name:
            raise ValueError("Job name must be a non-empty string.")

        # first registration wins, whatever the second one carries
        if config.name in self._timers:
            logger.warning("Job %s already registered, skipping", config.name)
            return

        if isinstance(config.interval_ms, bool) or not isinstance(config.interval_ms, int) or config.interval_ms <= 0:
            raise ValueError(f"Job {config.name}: interval_ms must be a positive integer.")

        # RuntimeError when called outside a running loop
        loop = asyncio.get_running_loop()

        self._timers[config.name] = loop.create_task(self._run(config), name=f"job:{config.name}")
        logger.info("Job %s registered (interval_ms=%d)", config.name, config.interval_ms)

    def stop(self, name: str) -> None:
        task = self._timers.pop(name, None)
        if task is None:
            return
        task.cancel()
        self._stopped.add(task)
        task.add_done_callback(self._stopped.discard)
        logger.info("Job %s stopped", name)

    def stop_all(self) -> None:
        for name in list(self._timers):
            self.stop(name)

    async def run_once(self, config: JobConfig) -> None:
        logger.info("Running job %s once", config.name)
        try:
            await config.handler()
        except Exception as exc:
            logger.error("Job %s failed: %s", config.name, exc)
            raise
        logger.info("Job %s completed", config.name)

    async def drain(self) -> None:
        """Wait for stopped timers and in-flight ticks to settle."""
        pending = [*self._stopped, *self._ticks]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _run(self, config: JobConfig) -> None:
        delay = config.interval_ms / 1000
        while True:
            await asyncio.sleep(delay)
            tick = asyncio.ensure_future(self._tick(config))
            self._ticks.add(tick)
            tick.add_done_callback(self._ticks.discard)
            # cancelling the timer must not reach the handler
            await asyncio.shield(tick)

    @staticmethod
    async def _tick(config: JobConfig) -> None:
        try:
            await config.handler()
        except Exception as exc:
            logger.error("Job %s failed: %s", config.name, exc, exc_info=True)
