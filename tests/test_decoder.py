"""
Tests for response decoding: typed records, amount normalization, and
DecodeError chaining.
"""

from __future__ import annotations

import dataclasses
import json

import pytest

from fakes import ADDR, ADDR_2, BLOCK_A, BLOCK_B, PREV_TXID, TXID, blocks_json, tx_json
from insight_client.core.exceptions import DecodeError, MalformedAmount, TypeMismatch
from insight_client.decoder import (
    decode_block_summaries,
    decode_transaction,
    decode_transaction_list,
    decode_txid,
    decode_utxos,
)


def _body(data) -> bytes:
    return json.dumps(data).encode()


def test_decode_transaction_fields():
    tx = decode_transaction(_body(tx_json()))
    assert tx.txid == TXID
    assert tx.block_hash == BLOCK_A
    assert tx.block_height == 500000
    assert tx.confirmations == 3
    assert len(tx.inputs) == 1 and len(tx.outputs) == 1
    vin = tx.inputs[0]
    assert vin.txid == PREV_TXID
    assert vin.vout == 1
    assert vin.addr == ADDR
    assert vin.satoshis == 50000000
    assert vin.value == 0.5
    vout = tx.outputs[0]
    assert vout.value == 0.4999
    assert vout.script_pubkey.addresses == (ADDR_2,)
    assert vout.spent_txid is None


def test_string_and_number_amounts_decode_identically():
    as_numbers = decode_transaction(_body(tx_json(in_value=0.5, out_value=0.4999)))
    as_strings = decode_transaction(_body(tx_json(in_value="0.5", out_value="0.4999")))
    assert [i.value for i in as_numbers.inputs] == [i.value for i in as_strings.inputs]
    assert [o.value for o in as_numbers.outputs] == [o.value for o in as_strings.outputs]


def test_decoded_records_are_frozen():
    tx = decode_transaction(_body(tx_json()))
    with pytest.raises(dataclasses.FrozenInstanceError):
        tx.txid = "other"


def test_invalid_json_is_decode_error():
    with pytest.raises(DecodeError) as exc_info:
        decode_transaction(b"{not json")
    assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)


def test_missing_amount_is_decode_error_wrapping_type_mismatch():
    payload = tx_json()
    del payload["vout"][0]["value"]
    with pytest.raises(DecodeError) as exc_info:
        decode_transaction(_body(payload))
    assert isinstance(exc_info.value.__cause__, TypeMismatch)


def test_unparseable_amount_is_decode_error():
    with pytest.raises(DecodeError) as exc_info:
        decode_transaction(_body(tx_json(out_value="lots")))
    assert isinstance(exc_info.value.__cause__, MalformedAmount)


def test_missing_txid_is_decode_error():
    payload = tx_json()
    del payload["txid"]
    with pytest.raises(DecodeError):
        decode_transaction(_body(payload))


def test_decode_transaction_list():
    page = decode_transaction_list(
        _body({"totalItems": 2, "from": 0, "to": 2, "items": [tx_json(), tx_json(PREV_TXID)]})
    )
    assert page.total_items == 2
    assert [t.txid for t in page.items] == [TXID, PREV_TXID]


def test_transaction_list_without_total_is_decode_error():
    with pytest.raises(DecodeError):
        decode_transaction_list(_body({"items": []}))


def test_decode_utxos_normalizes_amounts():
    utxos = decode_utxos(
        _body(
            [
                {"address": ADDR, "txid": TXID, "vout": 0, "scriptPubKey": "76a914", "amount": "0.001", "satoshis": 100000, "confirmations": 6},
                {"address": ADDR, "txid": PREV_TXID, "vout": 2, "scriptPubKey": "76a914", "amount": 0.002},
            ]
        )
    )
    assert [u.amount for u in utxos] == [0.001, 0.002]
    assert utxos[0].satoshis == 100000
    assert utxos[1].confirmations is None


def test_utxos_not_a_list_is_decode_error():
    with pytest.raises(DecodeError):
        decode_utxos(_body({"address": ADDR}))


def test_decode_block_summaries_keeps_order():
    summaries = decode_block_summaries(_body(blocks_json(BLOCK_A, BLOCK_B)))
    assert [s.hash for s in summaries] == [BLOCK_A, BLOCK_B]
    assert summaries[0].height == 500001
    assert summaries[0].parent == ""


def test_decode_txid():
    assert decode_txid(_body({"txid": TXID})) == TXID


@pytest.mark.parametrize("payload", [{}, {"txid": ""}, {"txid": 5}, [TXID]])
def test_decode_txid_without_id_is_decode_error(payload):
    with pytest.raises(DecodeError):
        decode_txid(_body(payload))


def test_coinbase_input_without_value_resolves_to_zero():
    payload = tx_json()
    payload["vin"] = [{"coinbase": "03a0bb0d", "sequence": 4294967295, "n": 0}]
    tx = decode_transaction(_body(payload))
    assert tx.inputs[0].coinbase == "03a0bb0d"
    assert tx.inputs[0].value == 0.0


def test_amount_too_large_for_float_is_decode_error():
    with pytest.raises(DecodeError) as exc_info:
        decode_transaction(_body(tx_json(in_value=10**400)))
    assert isinstance(exc_info.value.__cause__, MalformedAmount)


def test_infinite_metadata_field_is_decode_error():
    body = json.dumps(tx_json()).replace('"time": 1513622125', '"time": Infinity')
    assert "Infinity" in body
    with pytest.raises(DecodeError) as exc_info:
        decode_transaction(body)
    assert isinstance(exc_info.value.__cause__, OverflowError)
