"""
Timer sources for retry, response-wait and settle-delay timers.
"""

from budslink.scheduling.abc import Scheduler, TimerHandle
from budslink.scheduling.loop import AsyncioScheduler
from budslink.scheduling.virtual import VirtualScheduler

__all__ = [
    "Scheduler",
    "TimerHandle",
    "AsyncioScheduler",
    "VirtualScheduler",
]
