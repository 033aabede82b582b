"""
Data models for explorer responses and push notifications.

All records are frozen dataclasses built once by the decoder via from_api().
Monetary fields keep the raw wire form (raw_value / raw_amount) next to the
resolved float (value / amount); only the float is meant for consumers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from insight_client.normalizer import RawAmount, classify


def _opt_int(item: dict[str, Any], key: str) -> int | None:
    value = item.get(key)
    if value is None:
        return None
    return int(value)


@dataclass(frozen=True)
class ScriptSig:
    hex: str
    asm: str

    @classmethod
    def from_api(cls, item: dict[str, Any] | None) -> "ScriptSig":
        item = item or {}
        return cls(hex=item.get("hex") or "", asm=item.get("asm") or "")


@dataclass(frozen=True)
class ScriptPubKey:
    hex: str
    asm: str
    addresses: tuple[str, ...]
    type: str

    @classmethod
    def from_api(cls, item: dict[str, Any] | None) -> "ScriptPubKey":
        item = item or {}
        return cls(
            hex=item.get("hex") or "",
            asm=item.get("asm") or "",
            addresses=tuple(item.get("addresses") or ()),
            type=item.get("type") or "",
        )


@dataclass(frozen=True)
class Input:
    """One transaction input (vin entry)."""

    txid: str
    vout: int | None
    sequence: int | None
    n: int
    script_sig: ScriptSig
    addr: str
    satoshis: int | None  # valueSat
    raw_value: RawAmount
    value: float
    double_spent_txid: str | None
    coinbase: str | None = None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "Input":
        coinbase = item.get("coinbase")
        # Coinbase inputs spend nothing and carry no value field.
        raw = classify(item.get("value", 0 if coinbase else None))
        return cls(
            txid=item.get("txid") or "",
            vout=_opt_int(item, "vout"),
            sequence=_opt_int(item, "sequence"),
            n=int(item.get("n") or 0),
            script_sig=ScriptSig.from_api(item.get("scriptSig")),
            addr=item.get("addr") or "",
            satoshis=_opt_int(item, "valueSat"),
            raw_value=raw,
            value=raw.resolve(),
            double_spent_txid=item.get("doubleSpentTxID"),
            coinbase=coinbase,
        )


@dataclass(frozen=True)
class Output:
    """One transaction output (vout entry)."""

    raw_value: RawAmount
    value: float
    n: int
    script_pubkey: ScriptPubKey
    spent_txid: str | None
    spent_index: int | None
    spent_height: int | None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "Output":
        raw = classify(item.get("value"))
        return cls(
            raw_value=raw,
            value=raw.resolve(),
            n=int(item.get("n") or 0),
            script_pubkey=ScriptPubKey.from_api(item.get("scriptPubKey")),
            spent_txid=item.get("spentTxId"),
            spent_index=_opt_int(item, "spentIndex"),
            spent_height=_opt_int(item, "spentHeight"),
        )


@dataclass(frozen=True)
class Transaction:
    """
    A transaction as reported by the explorer.

    Block and confirmation metadata are passed through as received; they are
    not interpreted by the client.
    """

    txid: str
    version: int | None
    locktime: int | None
    inputs: tuple[Input, ...]
    outputs: tuple[Output, ...]
    block_hash: str | None
    block_height: int | None
    confirmations: int | None
    time: int | None
    block_time: int | None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "Transaction":
        return cls(
            txid=item["txid"],
            version=_opt_int(item, "version"),
            locktime=_opt_int(item, "locktime"),
            inputs=tuple(Input.from_api(i) for i in item.get("vin") or ()),
            outputs=tuple(Output.from_api(o) for o in item.get("vout") or ()),
            block_hash=item.get("blockhash"),
            block_height=_opt_int(item, "blockheight"),
            confirmations=_opt_int(item, "confirmations"),
            time=_opt_int(item, "time"),
            block_time=_opt_int(item, "blocktime"),
        )


@dataclass(frozen=True)
class TransactionList:
    """One page of an address transaction listing."""

    total_items: int
    from_: int | None
    to: int | None
    items: tuple[Transaction, ...]

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "TransactionList":
        return cls(
            total_items=int(item["totalItems"]),
            from_=_opt_int(item, "from"),
            to=_opt_int(item, "to"),
            items=tuple(Transaction.from_api(t) for t in item.get("items") or ()),
        )


@dataclass(frozen=True)
class Utxo:
    """An unspent output owned by one of the queried addresses."""

    address: str
    txid: str
    vout: int
    script_pubkey: str
    raw_amount: RawAmount
    amount: float
    satoshis: int | None
    confirmations: int | None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "Utxo":
        raw = classify(item.get("amount"))
        return cls(
            address=item.get("address") or "",
            txid=item["txid"],
            vout=int(item["vout"]),
            script_pubkey=item.get("scriptPubKey") or "",
            raw_amount=raw,
            amount=raw.resolve(),
            satoshis=_opt_int(item, "satoshis"),
            confirmations=_opt_int(item, "confirmations"),
        )


@dataclass(frozen=True)
class BlockSummary:
    """
    An entry of the blocks listing.

    The listing carries no parent hash; parent stays empty unless the client
    fills it from the next-older summary.
    """

    hash: str
    height: int
    time: int | None
    tx_length: int | None
    size: int | None
    parent: str = ""

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "BlockSummary":
        return cls(
            hash=item["hash"],
            height=int(item["height"]),
            time=_opt_int(item, "time"),
            tx_length=_opt_int(item, "txlength"),
            size=_opt_int(item, "size"),
        )


@dataclass(frozen=True)
class Block:
    """Chain tip notification: the newest block and its predecessor's hash."""

    hash: str
    parent: str
    height: int
    time: int | None

    @classmethod
    def from_summaries(cls, newest: BlockSummary, previous: BlockSummary) -> "Block":
        return cls(
            hash=newest.hash,
            parent=previous.hash,
            height=newest.height,
            time=newest.time,
        )
