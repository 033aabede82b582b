"""
Tests for amount normalization: numbers and decimal strings resolve to the
same float; anything else is rejected.
"""

from __future__ import annotations

import pytest

from insight_client.core.exceptions import MalformedAmount, NormalizationError, TypeMismatch
from insight_client.normalizer import DecimalString, Number, classify, to_float


@pytest.mark.parametrize(
    "value",
    [0.5, "0.5", 3, "3", "0.00000001", 1e-08, "21000000.0", "-2.25", "1e-8", ".5"],
)
def test_to_float_matches_parsing_string_form(value):
    assert to_float(value) == float(str(value))


def test_classify_tags_wire_form():
    assert classify(0.25) == Number(0.25)
    assert classify(7) == Number(7.0)
    assert classify("0.25") == DecimalString("0.25")


def test_string_and_number_of_same_magnitude_agree():
    assert to_float("12.3456789") == to_float(12.3456789)


@pytest.mark.parametrize("value", [None, True, False, [], {}, [1.0], {"value": 1}])
def test_non_number_non_string_is_type_mismatch(value):
    with pytest.raises(TypeMismatch):
        to_float(value)


@pytest.mark.parametrize("value", ["", "abc", " 1.0", "1_000", "nan", "inf", "0x10", "1.0.0", "1e400"])
def test_non_decimal_string_is_rejected(value):
    with pytest.raises(MalformedAmount):
        to_float(value)


def test_normalization_errors_share_base():
    assert issubclass(TypeMismatch, NormalizationError)
    assert issubclass(MalformedAmount, NormalizationError)


@pytest.mark.parametrize("value", [10**400, float("inf"), float("-inf"), float("nan")])
def test_unrepresentable_number_is_rejected(value):
    with pytest.raises(MalformedAmount):
        classify(value)
