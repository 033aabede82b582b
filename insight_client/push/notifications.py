"""
Notification fan-out streams.

Two live for the whole life of a client: one for blocks, one for
transactions. Publishing never blocks (unbounded queue), so a push handler
can never stall the receive loop; a slow reader costs memory instead.
After close() publishing is refused, readers drain what is queued and then
get StreamClosed (async iteration simply ends).
"""

from __future__ import annotations

import asyncio
from typing import Generic, TypeVar

import structlog

from insight_client.client_logging import get_logger
from insight_client.core.exceptions import StreamClosed

T = TypeVar("T")

_CLOSED = object()


class NotificationStream(Generic[T]):
    """Unbounded many-producer queue with an explicit close."""

    def __init__(self, name: str, *, logger: structlog.BoundLogger | None = None) -> None:
        self.name = name
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False
        self._log = logger or get_logger(__name__)

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        n = self._queue.qsize()
        return n - 1 if self._closed else n

    def publish(self, item: T) -> bool:
        """Queue item for readers. Returns False (and drops it) when closed."""
        if self._closed:
            self._log.debug("notification_dropped_closed", stream=self.name)
            return False
        self._queue.put_nowait(item)
        return True

    def close(self) -> None:
        """Refuse further publishes; readers see StreamClosed once drained."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def get(self) -> T:
        """
        Wait for the next notification.

        Raises:
            StreamClosed: the stream is closed and fully drained.
        """
        item = await self._queue.get()
        if item is _CLOSED:
            # Leave the marker in place so every other reader stops too.
            self._queue.put_nowait(_CLOSED)
            raise StreamClosed(f"{self.name} stream closed")
        return item  # type: ignore[return-value]

    def get_nowait(self) -> T:
        """Return a queued notification or raise asyncio.QueueEmpty / StreamClosed."""
        item = self._queue.get_nowait()
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            raise StreamClosed(f"{self.name} stream closed")
        return item  # type: ignore[return-value]

    def __aiter__(self) -> "NotificationStream[T]":
        return self

    async def __anext__(self) -> T:
        try:
            return await self.get()
        except StreamClosed:
            raise StopAsyncIteration from None
