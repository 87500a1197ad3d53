"""Tests for the timer sources."""

import asyncio

import pytest

from budslink.scheduling import AsyncioScheduler, VirtualScheduler


class TestVirtualScheduler:
    """Tests for VirtualScheduler."""

    @pytest.fixture
    def scheduler(self):
        """Create a scheduler at time zero."""
        return VirtualScheduler()

    def test_fires_at_deadline(self, scheduler):
        """Test that a callback runs once its deadline is reached."""
        fired = []
        scheduler.call_later(1.0, lambda: fired.append(scheduler.time()))
        scheduler.advance(0.5)
        assert fired == []
        scheduler.advance(0.5)
        assert fired == [1.0]

    def test_same_instant_runs_in_order(self, scheduler):
        """Test that callbacks due together run in scheduling order."""
        fired = []
        scheduler.call_later(1.0, lambda: fired.append("a"))
        scheduler.call_later(1.0, lambda: fired.append("b"))
        scheduler.call_later(0.5, lambda: fired.append("c"))
        scheduler.advance(1.0)
        assert fired == ["c", "a", "b"]

    def test_nested_scheduling_within_window(self, scheduler):
        """Test that a callback scheduled by a callback runs if it falls inside the window."""
        fired = []

        def first():
            fired.append("first")
            scheduler.call_later(1.0, lambda: fired.append("second"))

        scheduler.call_later(1.0, first)
        scheduler.advance(2.0)
        assert fired == ["first", "second"]

    def test_nested_scheduling_outside_window(self, scheduler):
        """Test that a nested callback past the window waits."""
        fired = []
        scheduler.call_later(1.0, lambda: scheduler.call_later(5.0, lambda: fired.append(1)))
        scheduler.advance(2.0)
        assert fired == []
        assert scheduler.pending == 1

    def test_cancel(self, scheduler):
        """Test that a cancelled callback never runs."""
        fired = []
        handle = scheduler.call_later(1.0, lambda: fired.append(1))
        handle.cancel()
        scheduler.advance(2.0)
        assert fired == []
        assert handle.cancelled
        assert scheduler.pending == 0

    def test_cancel_after_fire(self, scheduler):
        """Test that cancelling a fired handle is a no-op."""
        handle = scheduler.call_later(0.0, lambda: None)
        scheduler.advance(0.0)
        handle.cancel()
        assert not handle.cancelled

    def test_negative_delay(self, scheduler):
        """Test that a negative delay is treated as zero."""
        fired = []
        scheduler.call_later(-1.0, lambda: fired.append(1))
        scheduler.advance(0.0)
        assert fired == [1]

    def test_clock_moves_to_target(self, scheduler):
        """Test that the clock ends at the advanced time."""
        scheduler.advance(3.0)
        assert scheduler.time() == 3.0

    def test_run_all(self, scheduler):
        """Test running every scheduled callback regardless of time."""
        fired = []
        scheduler.call_later(100.0, lambda: fired.append("late"))
        scheduler.call_later(1.0, lambda: fired.append("early"))
        scheduler.run_all()
        assert fired == ["early", "late"]
        assert scheduler.time() == 100.0


class TestAsyncioScheduler:
    """Tests for AsyncioScheduler."""

    @pytest.mark.asyncio
    async def test_call_later(self):
        """Test that a callback runs on the event loop."""
        scheduler = AsyncioScheduler()
        fired = asyncio.Event()
        scheduler.call_later(0.01, fired.set)
        await asyncio.wait_for(fired.wait(), timeout=1.0)

    @pytest.mark.asyncio
    async def test_cancel(self):
        """Test that a cancelled callback does not run."""
        scheduler = AsyncioScheduler()
        fired = []
        handle = scheduler.call_later(0.01, lambda: fired.append(1))
        handle.cancel()
        await asyncio.sleep(0.05)
        assert fired == []
        assert handle.cancelled

    @pytest.mark.asyncio
    async def test_time_follows_loop(self):
        """Test that time() is the loop clock."""
        loop = asyncio.get_running_loop()
        scheduler = AsyncioScheduler(loop)
        assert abs(scheduler.time() - loop.time()) < 1.0
