"""
Event-loop backed scheduler.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from budslink.scheduling.abc import Scheduler, TimerHandle


class _AsyncioTimerHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """
    Scheduler using the running asyncio event loop.

    Args:
        loop: Event loop to schedule on. Defaults to the running loop at
            the time of each call.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return _AsyncioTimerHandle(self._get_loop().call_later(delay, callback))

    def time(self) -> float:
        return self._get_loop().time()
