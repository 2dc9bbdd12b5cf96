# memory_game/scheduler.py
from __future__ import annotations

import asyncio
import heapq
import itertools
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

Callback = Callable[[], None]


@dataclass(order=True)
class ScheduledTask:
    due: float
    seq: int
    callback: Callback = field(compare=False)
    cancelled: bool = field(default=False, compare=False)
    done: bool = field(default=False, compare=False)
    handle: Optional[asyncio.TimerHandle] = field(default=None, compare=False, repr=False)

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.done)

    def cancel(self) -> None:
        self.cancelled = True
        if self.handle is not None:
            self.handle.cancel()

    def fire(self) -> None:
        if not self.active:
            return
        self.done = True
        self.callback()


class Scheduler:
    """Runs a callback once, `delay` seconds from now, on the owner's thread."""

    def call_later(self, delay: float, callback: Callback) -> ScheduledTask:
        raise NotImplementedError


def _check_delay(delay: float) -> float:
    delay = float(delay)
    if delay < 0:
        raise ValueError("delay must be >= 0")
    return delay


class ManualClock:
    def __init__(self, start: float = 0.0):
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError("cannot move the clock backwards")
        self.now += seconds
        return self.now


class TimerQueue(Scheduler):
    """
    Timers that fire only when the owner calls run_due().

    Tasks fire in due-time order; ties keep scheduling order. Nothing runs on
    another thread, so callbacks see the same state the caller does.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._heap: List[ScheduledTask] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callback) -> ScheduledTask:
        delay = _check_delay(delay)
        task = ScheduledTask(due=self._clock() + delay, seq=next(self._seq), callback=callback)
        heapq.heappush(self._heap, task)
        return task

    @property
    def pending(self) -> int:
        return sum(1 for t in self._heap if t.active)

    def run_due(self) -> int:
        """Fire every task whose time has come. Returns how many ran."""
        ran = 0
        while self._heap and self._heap[0].due <= self._clock():
            task = heapq.heappop(self._heap)
            if not task.active:
                continue
            task.fire()
            ran += 1
        return ran

    def cancel_all(self) -> None:
        for t in self._heap:
            t.cancel()
        self._heap.clear()


class AsyncioScheduler(Scheduler):
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._seq = itertools.count()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callback) -> ScheduledTask:
        delay = _check_delay(delay)
        loop = self.loop
        task = ScheduledTask(due=loop.time() + delay, seq=next(self._seq), callback=callback)
        task.handle = loop.call_later(delay, task.fire)
        return task
