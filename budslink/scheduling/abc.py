"""
Logical timer abstraction.

Sessions never touch the event loop directly for timeouts. They ask a
Scheduler for a cancellable handle instead, which lets the retry and
settle-delay logic run against a virtual clock in tests.

Implementations:
- AsyncioScheduler: backed by loop.call_later
- VirtualScheduler: manually advanced clock for tests
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable


class TimerHandle(ABC):
    """
    Handle for a scheduled callback.
    """

    @abstractmethod
    def cancel(self) -> None:
        """
        Cancel the callback if it has not run yet.

        Safe to call multiple times and after the callback has fired.
        """
        ...

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        """Whether cancel() was called before the callback ran."""
        ...


class Scheduler(ABC):
    """
    Abstract base class for timer sources.
    """

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """
        Schedule a callback after a delay.

        Args:
            delay: Delay in seconds (>= 0).
            callback: Zero-argument callable to invoke.

        Returns:
            A handle that can cancel the callback.
        """
        ...

    @abstractmethod
    def time(self) -> float:
        """Current time of this scheduler's clock, in seconds."""
        ...
