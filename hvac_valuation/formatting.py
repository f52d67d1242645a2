"""Display formatting for currency, percentages and multiples."""

from __future__ import annotations

import math


def _is_blank(value) -> bool:
    if value is None:
        return True
    try:
        return math.isnan(float(value))
    except (TypeError, ValueError):
        return True


def format_money(value) -> str:
    """US dollars with no decimals; blanks and non-finite values render as $0."""
    if _is_blank(value) or math.isinf(float(value)):
        return "$0"
    x = float(value)
    if x < -0.5:
        return f"-${abs(x):,.0f}"
    return f"${abs(x):,.0f}"


def format_pct(value, decimals: int = 1) -> str:
    """Whole-number percentage (16 -> '16.0%')."""
    if _is_blank(value):
        return f"{0:.{decimals}f}%"
    return f"{float(value):.{decimals}f}%"


def format_ratio_pct(value, decimals: int = 1) -> str:
    """Fractional rate such as CAGR (0.1785 -> '17.9%')."""
    if _is_blank(value):
        return f"{0:.{decimals}%}"
    return f"{float(value):.{decimals}%}"


def format_multiple(value, decimals: int = 1) -> str:
    if _is_blank(value):
        return f"{0:.{decimals}f}x"
    return f"{float(value):.{decimals}f}x"
