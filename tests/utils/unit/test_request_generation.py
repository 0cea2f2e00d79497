"""
Request Generation Tracker Unit Tests

Tests utils/request_generation.py:
- generations increase per key
- a newer request cancels and supersedes the previous one
- stale failures are discarded, current failures propagate

Run with:
    pytest tests/utils/unit/test_request_generation.py -v
"""

import asyncio
import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../..')))

from utils.request_generation import RequestGenerationTracker


class TestGenerations:

    def test_generations_are_per_key(self):
        tracker = RequestGenerationTracker()

        assert tracker.next_generation("a") == 1
        assert tracker.next_generation("a") == 2
        assert tracker.next_generation("b") == 1
        assert tracker.current_generation("a") == 2
        assert tracker.is_current("a", 2)
        assert not tracker.is_current("a", 1)

    def test_cancel_invalidates_generation(self):
        tracker = RequestGenerationTracker()
        generation = tracker.next_generation("a")

        tracker.cancel("a")

        assert not tracker.is_current("a", generation)


class TestRun:

    @pytest.mark.asyncio
    async def test_current_result(self):
        tracker = RequestGenerationTracker()

        async def request():
            return 42

        assert await tracker.run("a", request) == (True, 42)

    @pytest.mark.asyncio
    async def test_newer_request_supersedes(self):
        tracker = RequestGenerationTracker()
        started = asyncio.Event()

        async def slow():
            started.set()
            await asyncio.sleep(10)
            return "old"

        async def fast():
            return "new"

        first = asyncio.ensure_future(tracker.run("a", slow))
        await started.wait()
        second = await tracker.run("a", fast)

        assert second == (True, "new")
        assert await first == (False, None)

    @pytest.mark.asyncio
    async def test_stale_failure_is_discarded(self):
        tracker = RequestGenerationTracker()
        started = asyncio.Event()
        release = asyncio.Event()

        async def failing():
            started.set()
            try:
                await release.wait()
            except asyncio.CancelledError:
                raise RuntimeError("backend gone")

        async def ok():
            return "ok"

        first = asyncio.ensure_future(tracker.run("a", failing))
        await started.wait()
        await tracker.run("a", ok)

        assert await first == (False, None)

    @pytest.mark.asyncio
    async def test_current_failure_propagates(self):
        tracker = RequestGenerationTracker()

        async def failing():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await tracker.run("a", failing)
