"""
Monetary value normalization.

The explorer's JSON encoder is not schema-stable for amounts: the same field
arrives as a number on one endpoint (or day) and as a decimal string on
another. Every amount is classified once at the decode boundary into a small
tagged union, then resolved to a float. Nothing downstream sees the raw form.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Union

from insight_client.core.exceptions import MalformedAmount, TypeMismatch

_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


@dataclass(frozen=True)
class Number:
    """Amount serialized as a JSON number."""

    value: float

    def resolve(self) -> float:
        return self.value


@dataclass(frozen=True)
class DecimalString:
    """Amount serialized as a JSON string holding a decimal number."""

    text: str

    def resolve(self) -> float:
        if not _DECIMAL_RE.match(self.text):
            raise MalformedAmount(self.text)
        value = float(self.text)
        if not math.isfinite(value):
            raise MalformedAmount(self.text)
        return value


RawAmount = Union[Number, DecimalString]


def classify(raw: Any) -> RawAmount:
    """
    Tag a decoded JSON value as Number or DecimalString.

    bool is rejected even though it is an int subclass; null and containers
    are rejected too.

    Raises:
        TypeMismatch: raw is neither a number nor a string.
        MalformedAmount: raw is a number too large for a float, or not finite.
    """
    if isinstance(raw, bool):
        raise TypeMismatch(raw)
    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            raise MalformedAmount(raw) from None
        if not math.isfinite(value):
            raise MalformedAmount(raw)
        return Number(value)
    if isinstance(raw, str):
        return DecimalString(raw)
    raise TypeMismatch(raw)


def to_float(raw: Any) -> float:
    """Normalize a number-or-decimal-string amount to a float."""
    return classify(raw).resolve()
