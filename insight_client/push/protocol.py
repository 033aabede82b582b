"""
Socket.IO text framing for the explorer push channel (Engine.IO v3).

Insight servers speak Socket.IO 2.x: every websocket text frame starts with an
Engine.IO packet type digit; MESSAGE packets carry a Socket.IO packet whose
own type digit follows. Only the subset the client needs is handled:

    0{...}        open, JSON handshake (sid, pingInterval, pingTimeout)
    2 / 3         ping / pong
    40            namespace connected
    42[...]       event: ["name", arg, ...]
    41 / 44...    namespace disconnect / error
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

ENGINE_OPEN = "0"
ENGINE_CLOSE = "1"
ENGINE_PING = "2"
ENGINE_PONG = "3"
ENGINE_MESSAGE = "4"
ENGINE_UPGRADE = "5"
ENGINE_NOOP = "6"

SOCKET_CONNECT = "0"
SOCKET_DISCONNECT = "1"
SOCKET_EVENT = "2"
SOCKET_ACK = "3"
SOCKET_ERROR = "4"

PING_FRAME = ENGINE_PING
PONG_FRAME = ENGINE_PONG


class ProtocolError(ValueError):
    """A frame could not be parsed."""


@dataclass(frozen=True)
class Frame:
    """
    One decoded frame.

    kind is one of: open, close, ping, pong, connect, disconnect, event,
    error, noop.
    """

    kind: str
    name: str = ""
    args: tuple[Any, ...] = ()
    data: dict[str, Any] = field(default_factory=dict)


def push_url(api_url: str) -> str:
    """
    Build the push endpoint from the API base URL.

    Scheme decides security and the default port: https -> wss on 443,
    http -> ws on 80. An explicit port in the URL is kept.

    Raises:
        ValueError: scheme is neither http nor https, or the URL has no host.
    """
    parts = urlsplit(api_url)
    if parts.scheme == "https":
        ws_scheme, default_port = "wss", 443
    elif parts.scheme == "http":
        ws_scheme, default_port = "ws", 80
    else:
        raise ValueError(f"unknown url scheme: {parts.scheme!r}")
    if not parts.hostname:
        raise ValueError(f"url has no host: {api_url!r}")
    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    port = parts.port or default_port
    return f"{ws_scheme}://{host}:{port}/socket.io/?EIO=3&transport=websocket"


def encode_event(name: str, *args: Any) -> str:
    """Encode an event frame: 42["name", args...]."""
    return ENGINE_MESSAGE + SOCKET_EVENT + json.dumps([name, *args], separators=(",", ":"))


def decode_frame(raw: str | bytes) -> Frame:
    """
    Decode one websocket text frame.

    Raises:
        ProtocolError: empty frame, unknown packet type, or bad JSON payload.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError("frame is not utf-8") from e
    if not raw:
        raise ProtocolError("empty frame")
    engine_type, rest = raw[0], raw[1:]
    if engine_type == ENGINE_OPEN:
        return Frame("open", data=_load_object(rest))
    if engine_type == ENGINE_CLOSE:
        return Frame("close")
    if engine_type == ENGINE_PING:
        return Frame("ping")
    if engine_type == ENGINE_PONG:
        return Frame("pong")
    if engine_type in (ENGINE_NOOP, ENGINE_UPGRADE):
        return Frame("noop")
    if engine_type != ENGINE_MESSAGE:
        raise ProtocolError(f"unknown engine packet type {engine_type!r}")
    return _decode_socket_packet(rest)


def _decode_socket_packet(packet: str) -> Frame:
    if not packet:
        raise ProtocolError("empty socket packet")
    socket_type, rest = packet[0], packet[1:]
    if socket_type == SOCKET_CONNECT:
        return Frame("connect")
    if socket_type == SOCKET_DISCONNECT:
        return Frame("disconnect")
    if socket_type == SOCKET_ERROR:
        return Frame("error", args=(rest,))
    if socket_type not in (SOCKET_EVENT, SOCKET_ACK):
        raise ProtocolError(f"unknown socket packet type {socket_type!r}")
    # Optional namespace ("/nsp,") and ack id digits precede the JSON array.
    if rest.startswith("/"):
        comma = rest.find(",")
        rest = rest[comma + 1:] if comma >= 0 else ""
    i = 0
    while i < len(rest) and rest[i].isdigit():
        i += 1
    try:
        payload = json.loads(rest[i:])
    except json.JSONDecodeError as e:
        raise ProtocolError(f"bad event payload: {e}") from e
    if socket_type == SOCKET_ACK:
        return Frame("noop")
    if not isinstance(payload, list) or not payload or not isinstance(payload[0], str):
        raise ProtocolError("event payload is not [name, ...]")
    return Frame("event", name=payload[0], args=tuple(payload[1:]))


def _load_object(text: str) -> dict[str, Any]:
    if not text:
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"bad open payload: {e}") from e
    if not isinstance(data, dict):
        raise ProtocolError("open payload is not an object")
    return data
