"""
Tests for the ChangeBus and the /events frame generator.
"""
import asyncio
import threading

import pytest
from sse_starlette.sse import ServerSentEvent

from raindrops.events import ChangeBus, ChangeSignal, _Subscriber
from raindrops.server.routers.realtime import UPDATE_FRAME, change_frames


async def _wait_for_subscribers(bus: ChangeBus, count: int):
    for _ in range(100):
        if bus.subscriber_count >= count:
            return
        await asyncio.sleep(0.01)
    raise AssertionError(f"expected {count} subscriber(s), have {bus.subscriber_count}")


@pytest.mark.asyncio
async def test_signal_without_subscribers_is_a_no_op():
    bus = ChangeBus()
    assert bus.signal() == 0


@pytest.mark.asyncio
async def test_every_subscriber_gets_one_signal():
    bus = ChangeBus()
    first = bus.subscribe()
    second = bus.subscribe()

    pending = [asyncio.ensure_future(first.__anext__()), asyncio.ensure_future(second.__anext__())]
    await _wait_for_subscribers(bus, 2)

    assert bus.signal() == 2
    signals = await asyncio.wait_for(asyncio.gather(*pending), timeout=1)

    assert all(isinstance(s, ChangeSignal) for s in signals)
    assert signals[0].subscriber_id != signals[1].subscriber_id

    await first.aclose()
    await second.aclose()
    assert bus.subscriber_count == 0


@pytest.mark.asyncio
async def test_signal_from_another_thread_is_delivered():
    bus = ChangeBus()
    subscription = bus.subscribe()
    pending = asyncio.ensure_future(subscription.__anext__())
    await _wait_for_subscribers(bus, 1)

    worker = threading.Thread(target=bus.signal)
    worker.start()
    worker.join()

    signal = await asyncio.wait_for(pending, timeout=1)
    assert isinstance(signal, ChangeSignal)
    await subscription.aclose()


@pytest.mark.asyncio
async def test_subscriber_on_closed_loop_is_dropped():
    bus = ChangeBus()
    dead_loop = asyncio.new_event_loop()
    dead_loop.close()
    bus._subscribers["dead"] = _Subscriber(queue=asyncio.Queue(), loop=dead_loop)

    assert bus.signal() == 0
    assert bus.subscriber_count == 0


@pytest.mark.asyncio
async def test_change_frames_yields_update_frame_and_unsubscribes():
    bus = ChangeBus()
    frames = change_frames(bus)
    pending = asyncio.ensure_future(frames.__anext__())
    await _wait_for_subscribers(bus, 1)

    bus.signal()
    frame = await asyncio.wait_for(pending, timeout=1)
    assert frame == UPDATE_FRAME

    await frames.aclose()
    assert bus.subscriber_count == 0


@pytest.mark.asyncio
async def test_cancelled_frame_stream_unsubscribes():
    bus = ChangeBus()
    frames = change_frames(bus)
    pending = asyncio.ensure_future(frames.__anext__())
    await _wait_for_subscribers(bus, 1)

    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending

    assert bus.subscriber_count == 0
    assert bus.signal() == 0


def test_update_frame_wire_format():
    assert ServerSentEvent(**UPDATE_FRAME, sep="\n").encode() == b"data: update\n\n"
