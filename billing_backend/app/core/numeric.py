"""
Numeric helpers shared by the analytics engine and the store.

Bill values arrive from JSON bodies and query strings, and clients
expect the loose conversions browsers apply: ``"  12 "`` is 12, an
empty string is 0 and anything unparsable becomes NaN rather than an
error.  Division never raises; a zero divisor yields an infinity or
NaN which then flows through the aggregates untouched.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, List, Optional

_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_PREFIXED_INT_RE = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_INFINITY_RE = re.compile(r"[+-]?Infinity")


def _int_to_float(value: int) -> float:
    # Integers beyond float range saturate to an infinity.
    try:
        return float(value)
    except OverflowError:
        return math.copysign(math.inf, value)


def to_number(value: Any) -> float:
    """Coerce ``value`` to a float the way ``Number(value)`` would.

    >>> to_number("42.5")
    42.5
    >>> to_number("")
    0.0
    >>> math.isnan(to_number("abc"))
    True
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        return _int_to_float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _DECIMAL_RE.fullmatch(text) or _INFINITY_RE.fullmatch(text):
            return float(text)
        if _PREFIXED_INT_RE.fullmatch(text):
            return _int_to_float(int(text, 0))
        return math.nan
    return math.nan


def is_present(value: Any, zero_is_missing: bool = True) -> bool:
    """Presence check for required input values.

    ``None``, ``False`` and ``""`` are always missing.  A numeric zero
    is missing unless ``zero_is_missing`` is false.  Containers count
    as present even when empty, and the string ``"0"`` is present.
    """
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if isinstance(value, float) and math.isnan(value):
            return False
        return value != 0 or not zero_is_missing
    return True


def cost_per_unit(amount: float, units: float) -> float:
    """Return ``amount / units`` without ever raising."""
    try:
        return amount / units
    except ZeroDivisionError:
        if amount == 0 or math.isnan(amount):
            return math.nan
        return math.copysign(math.inf, amount) * math.copysign(1.0, units)


def mean(values: Iterable[float]) -> Optional[float]:
    """Arithmetic mean, or ``None`` for no values.

    Mixed positive and negative infinities give NaN.
    """
    items = list(values)
    if not items:
        return None
    return sum(items) / len(items)


def _nan_first(value: float):
    # NaN sorts below every number, as in document-store ordering.
    return (not math.isnan(value), value)


def nan_aware_min(values: List[float]) -> float:
    return min(values, key=_nan_first)


def nan_aware_max(values: List[float]) -> float:
    return max(values, key=_nan_first)
