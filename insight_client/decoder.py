"""
Response decoder: explorer JSON bodies to typed records.

Each decode_* function parses one body and builds the matching record; the
record constructors run every amount through the normalizer. Any failure
(bad JSON, missing key, wrong container type, unparseable amount) becomes a
DecodeError chained to the underlying exception.
"""

from __future__ import annotations

import json
from typing import Any, Callable, TypeVar

from insight_client.core.exceptions import DecodeError, NormalizationError
from insight_client.models import BlockSummary, Transaction, TransactionList, Utxo

T = TypeVar("T")

_DECODE_FAILURES = (
    json.JSONDecodeError,
    UnicodeDecodeError,
    KeyError,
    TypeError,
    ValueError,
    OverflowError,
    AttributeError,
    NormalizationError,
)


def _decode(body: bytes | str, what: str, build: Callable[[Any], T]) -> T:
    try:
        return build(json.loads(body))
    except _DECODE_FAILURES as e:
        raise DecodeError(f"error decoding {what}: {e}") from e


def _expect_dict(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"expected JSON object, got {type(data).__name__}")
    return data


def _expect_list(data: Any) -> list[Any]:
    if not isinstance(data, list):
        raise TypeError(f"expected JSON array, got {type(data).__name__}")
    return data


def decode_transaction(body: bytes | str) -> Transaction:
    return _decode(body, "transaction", lambda d: Transaction.from_api(_expect_dict(d)))


def decode_transaction_list(body: bytes | str) -> TransactionList:
    return _decode(
        body, "transaction list", lambda d: TransactionList.from_api(_expect_dict(d))
    )


def decode_utxos(body: bytes | str) -> list[Utxo]:
    return _decode(
        body,
        "utxo list",
        lambda d: [Utxo.from_api(_expect_dict(u)) for u in _expect_list(d)],
    )


def decode_block_summaries(body: bytes | str) -> list[BlockSummary]:
    """Decode a blocks listing ({"blocks": [...], "length": n, ...})."""
    return _decode(
        body,
        "block list",
        lambda d: [
            BlockSummary.from_api(_expect_dict(b))
            for b in _expect_list(_expect_dict(d).get("blocks"))
        ],
    )


def decode_txid(body: bytes | str) -> str:
    """Decode the broadcast response ({"txid": "..."})."""

    def _txid(data: Any) -> str:
        txid = _expect_dict(data).get("txid")
        if not isinstance(txid, str) or not txid:
            raise ValueError("response carries no txid")
        return txid

    return _decode(body, "txid", _txid)
