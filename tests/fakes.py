"""
Test doubles for the push channel and sample explorer payloads.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

API_URL = "https://explorer.test/api"
PUSH_URL = "wss://explorer.test:443/socket.io/?EIO=3&transport=websocket"

ADDR = "1BoatSLRHtKNngkdXEeobR76b53LETtpyT"
ADDR_2 = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"
TXID = "4a5e1e4baab89f3a32518a88c31bc87f618f76673e2cc77ab2127b7afdeda33b"
PREV_TXID = "0e3e2357e806b6cdb1f70b54c3a3a17b6714ee1f0e68bebb44a74b1efd512098"
BLOCK_A = "00000000000000000002a7c4c1e48d76c5a37902165a270156b7a8d72728a054"
BLOCK_B = "0000000000000000000c8e0d7a4b9f2aa9a8e6a5b3b0e07db1e37ba5d8f3fa8e"

OPEN_FRAME = '0{"sid":"s1","upgrades":[],"pingInterval":25000,"pingTimeout":60000}'
CONNECT_FRAME = "40"


def tx_json(txid: str = TXID, in_value: Any = 0.5, out_value: Any = "0.4999") -> dict[str, Any]:
    return {
        "txid": txid,
        "version": 1,
        "locktime": 0,
        "vin": [
            {
                "txid": PREV_TXID,
                "vout": 1,
                "sequence": 4294967295,
                "n": 0,
                "scriptSig": {"hex": "4830", "asm": "3045"},
                "addr": ADDR,
                "valueSat": 50000000,
                "value": in_value,
                "doubleSpentTxID": None,
            }
        ],
        "vout": [
            {
                "value": out_value,
                "n": 0,
                "scriptPubKey": {
                    "hex": "76a914",
                    "asm": "OP_DUP OP_HASH160",
                    "addresses": [ADDR_2],
                    "type": "pubkeyhash",
                },
                "spentTxId": None,
                "spentIndex": None,
                "spentHeight": None,
            }
        ],
        "blockhash": BLOCK_A,
        "blockheight": 500000,
        "confirmations": 3,
        "time": 1513622125,
        "blocktime": 1513622125,
    }


def blocks_json(*hashes: str) -> dict[str, Any]:
    blocks = [
        {"hash": h, "height": 500001 - i, "time": 1513622125 - 600 * i, "txlength": 10, "size": 1000}
        for i, h in enumerate(hashes)
    ]
    return {"blocks": blocks, "length": len(blocks)}


def event_frame(name: str, *args: Any) -> str:
    return "42" + json.dumps([name, *args])


class FakeWebSocket:
    """Scripted websocket: frames queued with feed(), None ends the connection."""

    def __init__(self, frames: tuple[Any, ...] = ()) -> None:
        self.incoming: asyncio.Queue[Any] = asyncio.Queue()
        for frame in frames:
            self.incoming.put_nowait(frame)
        self.sent: list[str] = []
        self.closed = False
        self.send_error: BaseException | None = None
        self.send_gate: asyncio.Event | None = None
        self.waiting_sends = 0

    def feed(self, frame: Any) -> None:
        self.incoming.put_nowait(frame)

    def drop(self) -> None:
        self.incoming.put_nowait(None)

    async def send(self, data: str) -> None:
        if self.send_error is not None:
            raise self.send_error
        if self.send_gate is not None:
            self.waiting_sends += 1
            await self.send_gate.wait()
            self.waiting_sends -= 1
        self.sent.append(data)

    async def recv(self) -> Any:
        item = await self.incoming.get()
        if item is None:
            raise ConnectionResetError("connection dropped")
        return item

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        while True:
            item = await self.incoming.get()
            if item is None:
                return
            yield item

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.incoming.put_nowait(None)


def handshake_socket() -> FakeWebSocket:
    return FakeWebSocket((OPEN_FRAME, CONNECT_FRAME))


class FakeConnector:
    """Stands in for websockets.connect; hands out sockets in order."""

    def __init__(self, *sockets: FakeWebSocket) -> None:
        self.sockets = list(sockets)
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def __call__(self, url: str, **kwargs: Any) -> FakeWebSocket:
        self.calls.append((url, kwargs))
        if not self.sockets:
            raise ConnectionRefusedError("no more sockets")
        return self.sockets.pop(0)


async def eventually(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Poll predicate until true; fail after timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)
