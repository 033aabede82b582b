"""
Tests for notification streams: non-blocking publish, close, drain.
"""

from __future__ import annotations

import asyncio

import pytest

from insight_client.core.exceptions import StreamClosed
from insight_client.push.notifications import NotificationStream


def test_publish_then_get_in_order():
    async def _go():
        stream: NotificationStream[int] = NotificationStream("block")
        for i in range(3):
            assert stream.publish(i)
        return [await stream.get() for _ in range(3)]

    assert asyncio.run(_go()) == [0, 1, 2]


def test_publish_is_unbounded():
    async def _go():
        stream: NotificationStream[int] = NotificationStream("transaction")
        for i in range(10_000):
            stream.publish(i)
        return stream.qsize()

    assert asyncio.run(_go()) == 10_000


def test_close_drains_then_raises():
    async def _go():
        stream: NotificationStream[str] = NotificationStream("block")
        stream.publish("a")
        stream.close()
        assert stream.publish("b") is False
        assert stream.qsize() == 1
        first = await stream.get()
        with pytest.raises(StreamClosed):
            await stream.get()
        return first

    assert asyncio.run(_go()) == "a"


def test_async_iteration_ends_on_close():
    async def _go():
        stream: NotificationStream[int] = NotificationStream("block")
        received: list[int] = []

        async def _reader():
            async for item in stream:
                received.append(item)

        reader = asyncio.create_task(_reader())
        stream.publish(1)
        stream.publish(2)
        await asyncio.sleep(0)
        stream.close()
        await asyncio.wait_for(reader, timeout=1.0)
        return received

    assert asyncio.run(_go()) == [1, 2]


def test_close_wakes_every_waiting_reader():
    async def _go():
        stream: NotificationStream[int] = NotificationStream("transaction")
        readers = [asyncio.create_task(stream.get()) for _ in range(3)]
        await asyncio.sleep(0)
        stream.close()
        return await asyncio.gather(*readers, return_exceptions=True)

    results = asyncio.run(_go())
    assert all(isinstance(r, StreamClosed) for r in results)


def test_get_nowait():
    async def _go():
        stream: NotificationStream[int] = NotificationStream("block")
        with pytest.raises(asyncio.QueueEmpty):
            stream.get_nowait()
        stream.publish(5)
        value = stream.get_nowait()
        stream.close()
        with pytest.raises(StreamClosed):
            stream.get_nowait()
        return value

    assert asyncio.run(_go()) == 5
