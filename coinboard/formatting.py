"""Shared formatting helpers for prices and large numbers."""

from __future__ import annotations

import math
from typing import Optional

NOT_AVAILABLE = "N/A"

_LARGE_UNITS = (
    (1_000_000_000_000, "T"),
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
)


def _is_number(value: Optional[float]) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def format_currency(value: Optional[float]) -> str:
    """Format a price with precision scaled to its magnitude.

    Returns ``"N/A"`` for *None* or non-finite input. Values of at least one
    unit get two grouped decimals, sub-dollar values four, and anything below
    a cent eight so very small prices remain readable.
    """
    if not _is_number(value):
        return NOT_AVAILABLE
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    if magnitude >= 1:
        return f"{sign}${magnitude:,.2f}"
    elif magnitude >= 0.01:
        return f"{sign}${magnitude:.4f}"
    else:
        return f"{sign}${magnitude:.8f}"


def format_large_number(value: Optional[float]) -> str:
    """Format large numbers with K/M/B/T suffix."""
    if not _is_number(value) or not value:
        return NOT_AVAILABLE
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    for threshold, suffix in _LARGE_UNITS:
        if magnitude >= threshold:
            return f"{sign}${magnitude / threshold:.2f}{suffix}"
    return f"{sign}${magnitude:.2f}"


def format_change(value: Optional[float]) -> str:
    """Format a 24h percentage change with a direction arrow."""
    change = value if _is_number(value) else 0.0
    arrow = "↑" if change >= 0 else "↓"
    return f"{arrow} {abs(change):.2f}%"


def format_percent(value: Optional[float], decimals: int = 1) -> str:
    if not _is_number(value):
        return NOT_AVAILABLE
    return f"{value:.{decimals}f}%"


def format_count(value: Optional[float]) -> str:
    if not _is_number(value):
        return NOT_AVAILABLE
    return f"{math.floor(value):,}"
