"""
Push subscriber: the long-lived Socket.IO connection to the explorer.

States: connecting -> connected -> closed. connect() performs the handshake
under a bounded timeout; afterwards a background task owns the receive loop,
keeps the Engine.IO ping going, and reconnects with exponential backoff when
the socket drops, replaying every subscription sent so far.

Each topic event is handed to its handler as a separate task, so handlers may
perform slow I/O without stalling the receive loop. Several handler tasks can
run at once; they must not assume exclusive access to shared state.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any, Awaitable, Callable

import structlog
import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from insight_client.client_logging import get_logger
from insight_client.core.exceptions import ConnectTimeout, ConstructionError
from insight_client.push.protocol import (
    PING_FRAME,
    PONG_FRAME,
    ProtocolError,
    decode_frame,
    encode_event,
)

STATE_CONNECTING = "connecting"
STATE_CONNECTED = "connected"
STATE_CLOSED = "closed"

DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_PING_INTERVAL = 25.0
DEFAULT_RECONNECT_MIN_SEC = 1.0
DEFAULT_RECONNECT_MAX_SEC = 60.0
_WS_CLOSE_TIMEOUT = 5.0

TopicHandler = Callable[[tuple[Any, ...]], Awaitable[None]]
WebSocketConnect = Callable[..., Awaitable[Any]]


class PushSubscriber:
    """Socket.IO client for the explorer's bitcoind/* topics."""

    def __init__(
        self,
        url: str,
        *,
        connect_timeout_sec: float = DEFAULT_CONNECT_TIMEOUT,
        ping_interval_sec: float = DEFAULT_PING_INTERVAL,
        proxy_url: str | None = None,
        reconnect_min_sec: float = DEFAULT_RECONNECT_MIN_SEC,
        reconnect_max_sec: float = DEFAULT_RECONNECT_MAX_SEC,
        ws_connect: WebSocketConnect | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        """
        Args:
            url: Push endpoint (ws:// or wss://, see protocol.push_url).
            connect_timeout_sec: Bound on each handshake, initial or reconnect.
            ping_interval_sec: Keepalive interval when the server announces none.
            proxy_url: Optional proxy for the websocket connection.
            reconnect_min_sec: First delay before reconnecting after a drop.
            reconnect_max_sec: Cap for the reconnect backoff.
            ws_connect: Replacement for websockets.connect (tests).
            logger: Bound logger of the owning client.
        """
        self.url = url
        self.state = STATE_CONNECTING
        self._connect_timeout = connect_timeout_sec
        self._default_ping_interval = ping_interval_sec
        self._ping_interval = ping_interval_sec
        self._proxy_url = proxy_url
        self._reconnect_min = reconnect_min_sec
        self._reconnect_max = reconnect_max_sec
        self._ws_connect = ws_connect or websockets.connect
        self._log = logger or get_logger(__name__)
        self._handlers: dict[str, TopicHandler] = {}
        self._subscriptions: list[tuple[Any, ...]] = []
        self._tasks: set[asyncio.Task[None]] = set()
        self._ws: Any = None
        self._runner: asyncio.Task[None] | None = None
        self._closing = False

    def on(self, topic: str, handler: TopicHandler) -> None:
        """Register the coroutine handling events of topic (replaces any previous one)."""
        self._handlers[topic] = handler

    async def connect(self) -> None:
        """
        Open the socket and wait for the namespace connect packet.

        Raises:
            ConnectTimeout: no connect packet within connect_timeout_sec.
            ConstructionError: the socket could not be opened or was refused.
        """
        self._ws = await self._handshake()
        self.state = STATE_CONNECTED
        self._log.info("push_connected", url=self.url, ping_interval_sec=self._ping_interval)
        self._runner = asyncio.create_task(self._run())

    async def subscribe(self, topic: str, *args: Any) -> None:
        """
        Send a subscribe command for topic.

        The subscription is remembered and replayed after a reconnect; while
        reconnecting it is only recorded.
        """
        entry = (topic, *args)
        self._subscriptions.append(entry)
        if self.state == STATE_CONNECTED:
            await self._emit("subscribe", *entry)
        self._log.info("push_subscribed", topic=topic, args=list(args))

    async def close(self) -> None:
        """Stop the receive loop, cancel in-flight handlers, close the socket."""
        if self.state == STATE_CLOSED:
            return
        self._closing = True
        self.state = STATE_CLOSED
        if self._runner is not None:
            self._runner.cancel()
            try:
                await self._runner
            except asyncio.CancelledError:
                pass
            except Exception as e:
                self._log.exception("push_runner_failed", url=self.url, error=str(e))
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if self._ws is not None:
            with contextlib.suppress(WebSocketException, OSError):
                await self._ws.close()
            self._ws = None
        self._log.info("push_closed", url=self.url)

    async def _handshake(self) -> Any:
        opened: list[Any] = []

        async def _open() -> Any:
            kwargs: dict[str, Any] = {
                "ping_interval": None,
                "open_timeout": None,
                "close_timeout": _WS_CLOSE_TIMEOUT,
            }
            if self._proxy_url:
                kwargs["proxy"] = self._proxy_url
            ws = await self._ws_connect(self.url, **kwargs)
            opened.append(ws)
            while True:
                frame = decode_frame(await ws.recv())
                if frame.kind == "open":
                    interval_ms = frame.data.get("pingInterval")
                    if isinstance(interval_ms, (int, float)) and interval_ms > 0:
                        self._ping_interval = interval_ms / 1000.0
                elif frame.kind == "connect":
                    return ws
                elif frame.kind == "error":
                    raise ConstructionError(f"push server refused connection: {frame.args}")
                elif frame.kind in ("close", "disconnect"):
                    raise ConstructionError("push server closed the connection during handshake")

        try:
            return await asyncio.wait_for(_open(), timeout=self._connect_timeout)
        except asyncio.TimeoutError:
            await self._discard(opened)
            raise ConnectTimeout(self.url, self._connect_timeout) from None
        except ConstructionError:
            await self._discard(opened)
            raise
        except (OSError, WebSocketException, ProtocolError) as e:
            await self._discard(opened)
            raise ConstructionError(f"push connection to {self.url} failed: {e}") from e

    async def _discard(self, opened: list[Any]) -> None:
        for ws in opened:
            with contextlib.suppress(WebSocketException, OSError):
                await ws.close()

    async def _emit(self, name: str, *args: Any) -> None:
        await self._ws.send(encode_event(name, *args))

    async def _run(self) -> None:
        while not self._closing:
            ws = self._ws
            pinger = asyncio.create_task(self._ping_loop(ws))
            try:
                await self._receive_loop(ws)
                self._log.warning("push_disconnected", url=self.url)
            except ConnectionClosed as e:
                self._log.warning(
                    "push_disconnected",
                    url=self.url,
                    code=e.rcvd.code if e.rcvd else None,
                )
            except Exception as e:
                self._log.exception("push_receive_error", url=self.url, error=str(e))
            finally:
                pinger.cancel()
            if self._closing:
                return
            with contextlib.suppress(WebSocketException, OSError):
                await ws.close()
            await self._reconnect()

    async def _reconnect(self) -> None:
        self.state = STATE_CONNECTING
        backoff = self._reconnect_min
        attempt = 0
        while not self._closing:
            attempt += 1
            self._log.info("push_reconnect", attempt=attempt, backoff_sec=round(backoff, 1))
            await asyncio.sleep(backoff)
            try:
                ws = await self._handshake()
            except ConstructionError as e:
                self._log.warning("push_reconnect_failed", attempt=attempt, error=str(e))
                backoff = min(backoff * 2, self._reconnect_max)
                continue
            self._ws = ws
            try:
                await self._replay()
            except (WebSocketException, OSError) as e:
                self._log.warning("push_reconnect_failed", attempt=attempt, error=str(e))
                await self._discard([ws])
                backoff = min(backoff * 2, self._reconnect_max)
                continue
            self.state = STATE_CONNECTED
            self._log.info(
                "push_reconnected",
                attempt=attempt,
                subscriptions=len(self._subscriptions),
            )
            return

    async def _replay(self) -> None:
        # subscribe() only records while connecting; entries added mid-replay are sent here
        i = 0
        while i < len(self._subscriptions):
            await self._emit("subscribe", *self._subscriptions[i])
            i += 1

    async def _ping_loop(self, ws: Any) -> None:
        while True:
            await asyncio.sleep(self._ping_interval)
            try:
                await ws.send(PING_FRAME)
            except (WebSocketException, OSError):
                return

    async def _receive_loop(self, ws: Any) -> None:
        async for raw in ws:
            try:
                frame = decode_frame(raw)
            except ProtocolError as e:
                self._log.warning("push_frame_dropped", error=str(e))
                continue
            if frame.kind == "event":
                self._dispatch(frame.name, frame.args)
            elif frame.kind == "ping":
                await ws.send(PONG_FRAME)
            elif frame.kind in ("close", "disconnect"):
                return
            elif frame.kind == "error":
                self._log.warning("push_server_error", detail=list(frame.args))

    def _dispatch(self, topic: str, args: tuple[Any, ...]) -> None:
        handler = self._handlers.get(topic)
        if handler is None:
            self._log.debug("push_event_unhandled", topic=topic)
            return
        task = asyncio.create_task(self._run_handler(topic, handler, args))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_handler(self, topic: str, handler: TopicHandler, args: tuple[Any, ...]) -> None:
        try:
            await handler(args)
        except Exception as e:
            self._log.exception("push_handler_failed", topic=topic, error=str(e))
