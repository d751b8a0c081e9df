# tests/unit/engine/test_stream.py
"""
Tests for the append-only state stream.
"""

import asyncio
from dataclasses import replace

import pytest

from engine.state import RunPhase
from engine.stream import StateStream
from engine.transition import initial_state


def snapshot(day: int):
    state = initial_state(["A"], starting_silver=10, total_days=5)
    return replace(state, day=day, phase=RunPhase.RUNNING)


async def collect(stream: StateStream) -> list[int]:
    return [state.day async for state in stream]


@pytest.mark.asyncio
async def test_late_subscriber_replays_everything():
    stream = StateStream()
    for day in (1, 2, 3):
        await stream.publish(snapshot(day))
    await stream.close()

    assert await collect(stream) == [1, 2, 3]
    assert await collect(stream) == [1, 2, 3]


@pytest.mark.asyncio
async def test_live_subscriber_follows_publications():
    stream = StateStream()
    await stream.publish(snapshot(1))
    consumer = asyncio.create_task(collect(stream))
    await asyncio.sleep(0)

    await stream.publish(snapshot(2))
    await asyncio.sleep(0)
    await stream.publish(snapshot(3))
    await stream.close()

    assert await asyncio.wait_for(consumer, timeout=1) == [1, 2, 3]


@pytest.mark.asyncio
async def test_publish_after_close_rejected():
    stream = StateStream()
    await stream.close()
    with pytest.raises(RuntimeError):
        await stream.publish(snapshot(1))


@pytest.mark.asyncio
async def test_close_is_idempotent():
    stream = StateStream()
    await stream.publish(snapshot(1))
    await stream.close()
    await stream.close()
    assert stream.closed
    assert len(stream) == 1


@pytest.mark.asyncio
async def test_listeners_and_latest():
    stream = StateStream()
    seen = []
    stream.add_listener(lambda state: seen.append(state.day))
    assert stream.latest is None

    await stream.publish(snapshot(1))
    await stream.publish(snapshot(2))

    assert seen == [1, 2]
    assert stream.latest.day == 2
    assert [s.day for s in stream.snapshots] == [1, 2]


@pytest.mark.asyncio
async def test_wait_closed():
    stream = StateStream()
    waiter = asyncio.create_task(stream.wait_closed())
    await asyncio.sleep(0)
    assert not waiter.done()
    await stream.close()
    await asyncio.wait_for(waiter, timeout=1)
