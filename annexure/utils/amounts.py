"""Lenient amount and text coercion shared by the normalizer and the ledger."""

import logging
import math
import re
from typing import Any

logger = logging.getLogger(__name__)

_CURRENCY_SYMBOLS = re.compile(r"[$€£¥₹]")

# Largest amount a single bill may carry; anything above is treated as a misread
MAX_BILL_AMOUNT = 1e12


def coerce_amount(value: Any) -> float:
    """
    Coerce a bill amount to a finite, non-negative float.

    Handles various formats:
    - 150.5 -> 150.5
    - '150.5' -> 150.5
    - '₹1,200.50' -> 1200.5
    - '$ 2,180' -> 2180.0

    Anything that cannot be parsed, and any NaN, infinite, negative or
    implausibly large (above MAX_BILL_AMOUNT) result, becomes 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        try:
            amount = float(value)
        except OverflowError:
            logger.warning(f"Amount {value!r} is too large to represent, defaulting to 0.0")
            return 0.0
    elif isinstance(value, str):
        cleaned = _CURRENCY_SYMBOLS.sub("", value)
        cleaned = cleaned.replace(",", "").strip()
        if not cleaned:
            return 0.0
        try:
            amount = float(cleaned)
        except ValueError:
            logger.warning(f"Could not parse amount value: {value!r}, defaulting to 0.0")
            return 0.0
    else:
        return 0.0

    if not math.isfinite(amount) or amount < 0:
        logger.warning(f"Amount {value!r} is not a finite non-negative number, defaulting to 0.0")
        return 0.0
    if amount > MAX_BILL_AMOUNT:
        logger.warning(f"Amount {value!r} exceeds {MAX_BILL_AMOUNT:,.0f}, defaulting to 0.0")
        return 0.0
    return amount


def coerce_text(value: Any) -> str:
    """Coerce a loosely-typed JSON scalar to a string; absent values become ''."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        # 12345.0 -> "12345" so numeric IDs read back the way they were printed
        return str(int(value)) if value.is_integer() else str(value)
    return ""
