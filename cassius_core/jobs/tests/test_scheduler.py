import asyncio
import logging

import pytest

from cassius_core.jobs.scheduler import JobConfig, SchedulerState


class Counter:
    def __init__(self, fail_with=None):
        self.calls = 0
        self.fail_with = fail_with

    async def __call__(self):
        self.calls += 1
        if self.fail_with is not None:
            raise self.fail_with


def test_register_requires_running_loop():
    state = SchedulerState()

    with pytest.raises(RuntimeError):
        state.register(JobConfig(name="orphan", interval_ms=10, handler=Counter()))

    assert state.job_names == ()


@pytest.mark.parametrize("name, interval_ms", [("", 10), ("job", 0), ("job", -5)])
def test_register_rejects_bad_config(name, interval_ms):
    async def scenario():
        state = SchedulerState()
        with pytest.raises(ValueError):
            state.register(JobConfig(name=name, interval_ms=interval_ms, handler=Counter()))
        assert state.job_names == ()

    asyncio.run(scenario())


def test_duplicate_register_keeps_first(caplog):
    first, second = Counter(), Counter()

    async def scenario():
        state = SchedulerState()
        state.register(JobConfig(name="dup", interval_ms=10, handler=first))
        state.register(JobConfig(name="dup", interval_ms=10, handler=second))

        assert state.job_names == ("dup",)
        await asyncio.sleep(0.06)
        state.stop_all()
        await state.drain()

    with caplog.at_level(logging.WARNING, logger="cassius_core.jobs.scheduler"):
        asyncio.run(scenario())

    assert first.calls >= 1
    assert second.calls == 0
    assert "Job dup already registered, skipping" in caplog.text


def test_stop_prevents_further_ticks():
    handler = Counter()

    async def scenario():
        state = SchedulerState()
        state.register(JobConfig(name="tick", interval_ms=10, handler=handler))
        await asyncio.sleep(0.05)

        state.stop("tick")
        await state.drain()
        seen = handler.calls

        await asyncio.sleep(0.05)
        assert handler.calls == seen
        assert not state.is_registered("tick")

    asyncio.run(scenario())
    assert handler.calls >= 1


def test_stop_unknown_is_a_no_op():
    SchedulerState().stop("never-registered")


def test_run_once_runs_exactly_once():
    handler = Counter()

    asyncio.run(SchedulerState().run_once(JobConfig(name="manual", interval_ms=60_000, handler=handler)))

    assert handler.calls == 1


def test_run_once_propagates_handler_error_unmodified():
    err = RuntimeError("datastore down")
    handler = Counter(fail_with=err)

    with pytest.raises(RuntimeError) as excinfo:
        asyncio.run(SchedulerState().run_once(JobConfig(name="manual", interval_ms=60_000, handler=handler)))

    assert excinfo.value is err
    assert handler.calls == 1


def test_failing_tick_is_logged_and_jobs_keep_running(caplog):
    flaky = Counter(fail_with=ValueError("boom"))
    healthy = Counter()

    async def scenario():
        state = SchedulerState()
        state.register(JobConfig(name="flaky", interval_ms=10, handler=flaky))
        state.register(JobConfig(name="healthy", interval_ms=10, handler=healthy))
        await asyncio.sleep(0.08)
        assert state.is_registered("flaky")
        state.stop_all()
        await state.drain()

    with caplog.at_level(logging.ERROR, logger="cassius_core.jobs.scheduler"):
        asyncio.run(scenario())

    assert flaky.calls >= 2
    assert healthy.calls >= 2
    assert "Job flaky failed: boom" in caplog.text


def test_stop_does_not_interrupt_in_flight_tick():
    finished = []

    async def scenario():
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow():
            started.set()
            await release.wait()
            finished.append(True)

        state = SchedulerState()
        state.register(JobConfig(name="slow", interval_ms=5, handler=slow))
        await started.wait()

        state.stop("slow")
        release.set()
        await state.drain()

    asyncio.run(scenario())
    assert finished == [True]


def test_ticks_of_one_job_never_overlap():
    running = {"now": 0, "max": 0}

    async def slow():
        running["now"] += 1
        running["max"] = max(running["max"], running["now"])
        await asyncio.sleep(0.03)
        running["now"] -= 1

    async def scenario():
        state = SchedulerState()
        state.register(JobConfig(name="slow", interval_ms=5, handler=slow))
        await asyncio.sleep(0.12)
        state.stop_all()
        await state.drain()

    asyncio.run(scenario())
    assert running["max"] == 1


def test_instances_are_independent():
    a_handler, b_handler = Counter(), Counter()

    async def scenario():
        a, b = SchedulerState(), SchedulerState()
        a.register(JobConfig(name="shared", interval_ms=10, handler=a_handler))
        b.register(JobConfig(name="shared", interval_ms=10, handler=b_handler))

        a.stop_all()
        await asyncio.sleep(0.05)
        assert b.is_registered("shared")
        assert not a.is_registered("shared")

        b.stop_all()
        await asyncio.gather(a.drain(), b.drain())

    asyncio.run(scenario())
    assert a_handler.calls == 0
    assert b_handler.calls >= 1


def test_duplicate_register_with_bad_interval_is_still_a_no_op(caplog):
    handler = Counter()

    async def scenario():
        state = SchedulerState()
        state.register(JobConfig(name="dup", interval_ms=10, handler=handler))
        state.register(JobConfig(name="dup", interval_ms=0, handler=Counter()))

        assert state.job_names == ("dup",)
        state.stop_all()
        await state.drain()

    with caplog.at_level(logging.WARNING, logger="cassius_core.jobs.scheduler"):
        asyncio.run(scenario())

    assert "Job dup already registered, skipping" in caplog.text
