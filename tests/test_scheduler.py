import asyncio

import pytest
from memory_game.scheduler import AsyncioScheduler, ManualClock, TimerQueue

def test_fires_only_when_due(clock, timers):
    fired = []
    timers.call_later(1.0, lambda: fired.append("a"))

    assert timers.run_due() == 0
    clock.advance(0.5)
    assert timers.run_due() == 0
    clock.advance(0.5)
    assert timers.run_due() == 1
    assert fired == ["a"]
    assert timers.pending == 0

def test_due_order_then_schedule_order(clock, timers):
    fired = []
    timers.call_later(1.0, lambda: fired.append("late"))
    timers.call_later(0.2, lambda: fired.append("early"))
    timers.call_later(0.2, lambda: fired.append("early-2"))

    clock.advance(2)
    timers.run_due()
    assert fired == ["early", "early-2", "late"]

def test_cancelled_task_never_runs(clock, timers):
    fired = []
    task = timers.call_later(0.1, lambda: fired.append(1))
    task.cancel()

    assert timers.pending == 0
    clock.advance(1)
    assert timers.run_due() == 0
    assert fired == []

def test_callback_may_schedule_more_work(clock, timers):
    fired = []

    def first():
        fired.append("first")
        timers.call_later(0, lambda: fired.append("chained"))

    timers.call_later(0.1, first)
    clock.advance(0.1)
    timers.run_due()
    assert fired == ["first", "chained"]

def test_negative_delay_rejected(timers):
    with pytest.raises(ValueError):
        timers.call_later(-1, lambda: None)

def test_manual_clock_only_moves_forward():
    c = ManualClock(5)
    assert c() == 5
    with pytest.raises(ValueError):
        c.advance(-0.1)

def test_cancel_all(clock, timers):
    tasks = [timers.call_later(0.1, lambda: None) for _ in range(3)]
    timers.cancel_all()
    assert all(t.cancelled for t in tasks)
    clock.advance(1)
    assert timers.run_due() == 0

def test_asyncio_scheduler_runs_on_loop():
    async def scenario():
        fired = []
        sched = AsyncioScheduler()
        sched.call_later(0.01, lambda: fired.append("kept"))
        dropped = sched.call_later(0.01, lambda: fired.append("dropped"))
        dropped.cancel()
        await asyncio.sleep(0.05)
        return fired

    assert asyncio.run(scenario()) == ["kept"]

def test_asyncio_cancel_reaches_the_loop_handle():
    async def scenario():
        task = AsyncioScheduler().call_later(10, lambda: None)
        assert task.handle is not None
        task.cancel()
        return task.handle.cancelled()

    assert asyncio.run(scenario()) is True
