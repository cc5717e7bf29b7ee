"""Tests for the delay schedulers and BackoffSchedule."""

from __future__ import annotations

import asyncio

import pytest

from order_relay.adapters.memory import ManualDelayScheduler
from order_relay.ports.scheduling import IDelayScheduler
from order_relay.scheduling import AsyncioDelayScheduler, BackoffSchedule


def test_default_backoff_delays() -> None:
    assert BackoffSchedule().delays(3) == [7.0, 12.0, 22.0]


def test_backoff_custom_values() -> None:
    backoff = BackoffSchedule(initial_delay=1.0, multiplier=3.0, buffer=0.5)
    assert backoff.delay(1) == 1.5
    assert backoff.delay(3) == 9.5


def test_backoff_rejects_attempt_zero() -> None:
    with pytest.raises(ValueError, match="attempt"):
        BackoffSchedule().delay(0)


@pytest.mark.parametrize(
    "kwargs",
    [{"initial_delay": -1.0}, {"buffer": -0.1}, {"multiplier": 0.0}],
)
def test_backoff_validates(kwargs: dict[str, float]) -> None:
    with pytest.raises(ValueError):
        BackoffSchedule(**kwargs)


def test_schedulers_satisfy_port() -> None:
    assert isinstance(ManualDelayScheduler(), IDelayScheduler)
    assert isinstance(AsyncioDelayScheduler(), IDelayScheduler)


@pytest.mark.asyncio
async def test_manual_scheduler_runs_due_tasks_in_order(
    clock: ManualDelayScheduler,
) -> None:
    ran: list[str] = []

    def make(name: str):  # noqa: ANN202
        async def task() -> None:
            ran.append(name)

        return task

    clock.schedule_after(10, make("late"))
    clock.schedule_after(2, make("early"))
    clock.schedule_after(2, make("early-2"))
    assert await clock.advance(1.5) == 0
    assert await clock.advance(0.5) == 2
    assert ran == ["early", "early-2"]
    assert clock.pending_count == 1
    await clock.advance(100)
    assert ran == ["early", "early-2", "late"]
    assert clock.now == pytest.approx(102.0)


def test_manual_scheduler_rejects_negative_delay(clock: ManualDelayScheduler) -> None:
    async def task() -> None:
        return None

    with pytest.raises(ValueError):
        clock.schedule_after(-1, task)


def test_asyncio_scheduler_requires_concurrency_two() -> None:
    with pytest.raises(ValueError, match="concurrency"):
        AsyncioDelayScheduler(concurrency=1)


@pytest.mark.asyncio
async def test_asyncio_scheduler_runs_after_delay() -> None:
    scheduler = AsyncioDelayScheduler()
    done = asyncio.Event()

    async def task() -> None:
        done.set()

    scheduler.schedule_after(0.01, task)
    assert scheduler.pending_count == 1
    await asyncio.wait_for(done.wait(), timeout=1.0)
    await asyncio.sleep(0)
    assert scheduler.pending_count == 0


@pytest.mark.asyncio
async def test_asyncio_scheduler_bounds_concurrency() -> None:
    scheduler = AsyncioDelayScheduler(concurrency=2)
    running = 0
    peak = 0
    release = asyncio.Event()
    finished = 0

    async def task() -> None:
        nonlocal running, peak, finished
        running += 1
        peak = max(peak, running)
        await release.wait()
        running -= 1
        finished += 1

    for _ in range(5):
        scheduler.schedule_after(0, task)
    await asyncio.sleep(0.05)
    assert peak == 2
    release.set()
    for _ in range(50):
        if finished == 5:
            break
        await asyncio.sleep(0.01)
    assert finished == 5
    assert peak == 2


@pytest.mark.asyncio
async def test_asyncio_scheduler_logs_task_errors(
    caplog: pytest.LogCaptureFixture,
) -> None:
    scheduler = AsyncioDelayScheduler()
    done = asyncio.Event()

    async def task() -> None:
        done.set()
        raise RuntimeError("boom")

    scheduler.schedule_after(0, task)
    await asyncio.wait_for(done.wait(), timeout=1.0)
    await asyncio.sleep(0.01)
    assert "Scheduled task failed" in caplog.text


@pytest.mark.asyncio
async def test_asyncio_scheduler_aclose_cancels_pending() -> None:
    scheduler = AsyncioDelayScheduler()
    ran = False

    async def task() -> None:
        nonlocal ran
        ran = True

    scheduler.schedule_after(60, task)
    await scheduler.aclose()
    assert scheduler.pending_count == 0
    assert ran is False
