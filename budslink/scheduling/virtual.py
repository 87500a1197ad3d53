"""
Virtual clock scheduler for testing.

Timers only fire when the test advances the clock, so retry and timeout
paths can be exercised deterministically and instantly.

Example:
    >>> scheduler = VirtualScheduler()
    >>> fired = []
    >>> _ = scheduler.call_later(1.0, lambda: fired.append("a"))
    >>> scheduler.advance(0.5)
    >>> fired
    []
    >>> scheduler.advance(0.5)
    >>> fired
    ['a']
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable

from budslink.scheduling.abc import Scheduler, TimerHandle


class VirtualTimerHandle(TimerHandle):
    """Handle for a callback scheduled on a VirtualScheduler."""

    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self._cancelled = False
        self.fired = False

    def cancel(self) -> None:
        if not self.fired:
            self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class VirtualScheduler(Scheduler):
    """
    Scheduler with a manually advanced clock.

    Callbacks scheduled for the same instant run in scheduling order.
    Callbacks scheduled by a firing callback run within the same
    advance() call if their deadline falls inside the advanced window.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._counter = itertools.count()
        self._queue: list[tuple[float, int, VirtualTimerHandle]] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        if delay < 0:
            delay = 0.0
        handle = VirtualTimerHandle(self._now + delay, callback)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        return handle

    def time(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks that are neither fired nor cancelled."""
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def advance(self, seconds: float) -> None:
        """
        Move the clock forward, running every callback that comes due.

        Args:
            seconds: Amount of time to advance (>= 0).
        """
        target = self._now + max(seconds, 0.0)
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = when
            handle.fired = True
            handle.callback()
        self._now = target

    def run_all(self, limit: int = 1000) -> None:
        """
        Run scheduled callbacks until none remain.

        Args:
            limit: Safety bound on the number of callbacks executed.
        """
        executed = 0
        while self._queue and executed < limit:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = max(self._now, when)
            handle.fired = True
            handle.callback()
            executed += 1
