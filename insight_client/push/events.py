"""
Topic payload classification.

Push payloads are untrusted JSON. Before any field access they are classified
against the known topic shapes into one of three variants; handlers switch on
the variant and never inspect raw payloads themselves.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Union

TOPIC_HASHBLOCK = "bitcoind/hashblock"
TOPIC_ADDRESSTXID = "bitcoind/addresstxid"

_HASH_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def is_hash(value: str) -> bool:
    """True when value has the shape of a 256-bit hash (64 hex characters)."""
    return bool(_HASH_RE.match(value))


@dataclass(frozen=True)
class BlockAnnouncement:
    """New block on the explorer; the payload itself carries no meaning."""


@dataclass(frozen=True)
class AddressActivity:
    """
    A subscribed address was touched.

    txids holds the hash-shaped values of the payload mapping in payload
    order; other values (the address string itself) are skipped.
    """

    txids: tuple[str, ...]


@dataclass(frozen=True)
class MalformedPayload:
    topic: str
    reason: str


PushEvent = Union[BlockAnnouncement, AddressActivity, MalformedPayload]


def classify(topic: str, args: tuple[Any, ...]) -> PushEvent:
    """Classify the arguments of one topic event."""
    if topic == TOPIC_HASHBLOCK:
        return BlockAnnouncement()
    if topic != TOPIC_ADDRESSTXID:
        return MalformedPayload(topic, "unknown topic")
    if len(args) != 1:
        return MalformedPayload(topic, f"expected 1 argument, got {len(args)}")
    payload = args[0]
    if not isinstance(payload, dict):
        return MalformedPayload(topic, f"payload is {type(payload).__name__}, not an object")
    txids: list[str] = []
    for key, value in payload.items():
        if not isinstance(value, str):
            return MalformedPayload(
                topic, f"value for {key!r} is {type(value).__name__}, not a string"
            )
        if is_hash(value):
            txids.append(value)
    if not txids:
        return MalformedPayload(topic, "no transaction id in payload")
    return AddressActivity(tuple(txids))
