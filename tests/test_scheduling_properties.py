"""
Property-based tests for the debouncer.

These tests verify that bursts of scheduled searches collapse into one call
and that a callback which already started is never cancelled.
"""

import asyncio
from unittest.mock import AsyncMock

from hypothesis import given, settings, strategies as st

from estate_search.scheduling import Debouncer


@given(burst=st.integers(min_value=1, max_value=20))
@settings(max_examples=20, deadline=None)
def test_burst_collapses_into_one_call(burst):
    """
    **Feature: property-search, Property: Debounced dispatch**

    For any burst of schedule() calls within the quiet period, the callback
    runs exactly once.
    """
    async def scenario():
        debouncer = Debouncer(delay_ms=10)
        callback = AsyncMock()
        for _ in range(burst):
            debouncer.schedule(callback)
        await debouncer.wait_idle()
        return callback

    callback = asyncio.run(scenario())
    assert callback.await_count == 1


def test_last_scheduled_callback_wins():
    async def scenario():
        debouncer = Debouncer(delay_ms=10)
        first, second = AsyncMock(), AsyncMock()
        debouncer.schedule(first)
        debouncer.schedule(second)
        await debouncer.wait_idle()
        return first, second

    first, second = asyncio.run(scenario())
    first.assert_not_awaited()
    second.assert_awaited_once()


def test_cancel_prevents_call():
    async def scenario():
        debouncer = Debouncer(delay_ms=10)
        callback = AsyncMock()
        debouncer.schedule(callback)
        assert debouncer.pending
        cancelled = debouncer.cancel()
        await debouncer.wait_idle()
        return callback, cancelled, debouncer.pending

    callback, cancelled, pending = asyncio.run(scenario())
    assert cancelled
    assert not pending
    callback.assert_not_awaited()


def test_started_callback_is_not_cancelled():
    async def scenario():
        debouncer = Debouncer(delay_ms=1)
        release = asyncio.Event()
        calls = []

        async def slow_search():
            calls.append("started")
            await release.wait()
            calls.append("finished")

        debouncer.schedule(slow_search)
        await asyncio.sleep(0.05)
        assert calls == ["started"]
        assert not debouncer.pending

        # A new schedule does not cancel the running callback
        debouncer.schedule(slow_search)
        release.set()
        await debouncer.wait_idle()
        return calls

    calls = asyncio.run(scenario())
    assert calls.count("started") == 2
    assert calls.count("finished") == 2


def test_negative_delay_is_zero():
    assert Debouncer(delay_ms=-50).delay_seconds == 0
