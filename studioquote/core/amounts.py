# studioquote/core/amounts.py
"""
Numeric coercion for operator-entered amounts.

Every money field in a quotation passes through here: missing, empty or
non-numeric input becomes 0 instead of an error.
"""

import math
from typing import Any


def to_amount(value: Any) -> float:
    """'25000' -> 25000.0, '' / None / 'abc' / nan -> 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return 0.0
    try:
        num = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(num):
        return 0.0
    return num


def to_price(value: Any) -> float:
    """Like to_amount, clamped at zero (event costs and add-on prices)."""
    return max(0.0, to_amount(value))


def to_optional_rate(value: Any):
    """Tax rate: None / '' stay None, anything else is coerced."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_amount(value)
