"""Parsing and display helpers for amounts the backend sends as strings."""

import math
import re
from typing import Any

# Longest leading decimal literal, the way a browser's parseFloat reads it
_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_amount(value: Any) -> float:
    """Parse a rate or price that may arrive as a string, number or null.

    Leading whitespace is skipped and the longest numeric prefix is read
    (``"0.14 VAT"`` is ``0.14``). Anything unparsable, ``None``, NaN and
    infinities become ``0.0``.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value).lstrip())
        if match is None:
            return 0.0
        number = float(match.group(0))
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def format_amount(amount: float) -> str:
    """Two-decimal display string. Values are never rounded in storage."""
    return f"{amount:.2f}"


def format_money(amount: float, currency: str) -> str:
    return f"{currency} {format_amount(amount)}"
