"""
Display helpers for prices.
"""

from __future__ import annotations

import math

# Narrow no-break space, as used for Russian thousands grouping
THOUSANDS_SEPARATOR = "\u202f"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (-2.5 -> -2, 2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def format_price(value: float, currency: str = "₽", separator: str = THOUSANDS_SEPARATOR) -> str:
    """
    Format a price for display: rounded to whole units, grouped by thousands.

        format_price(4117.9)  -> "4 118 ₽"
    """
    if not math.isfinite(value):
        return f"— {currency}"
    rounded = round_half_up(value)
    grouped = f"{abs(rounded):,}".replace(",", separator)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{grouped} {currency}"
