# -*- coding: utf-8 -*-
"""Display formatting for API responses.

Numbers keep two decimals. Values that are not finite render as ``NaN``,
``Infinity`` or ``-Infinity`` so that legacy permissive inputs still
produce a readable string.
"""

import math
from typing import Optional


def _non_finite_text(value: float) -> Optional[str]:
    """Return the display text for a non-finite value, None for a finite one."""
    if not isinstance(value, (int, float)) or math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return None


def format_number(value: float, decimals: int = 2) -> str:
    text = _non_finite_text(value)
    if text is not None:
        return text
    return f"{value:.{decimals}f}"


def format_currency(value: float, symbol: str = "₹") -> str:
    """Format ``value`` as ``₹1,234.50``; negatives render as ``-₹1,234.50``."""
    sign = "-" if isinstance(value, (int, float)) and value < 0 else ""
    text = _non_finite_text(value)
    if text is not None:
        return f"{sign}{symbol}{text.lstrip('-')}"
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_percent(fraction: float) -> str:
    """Format a 0-1 fraction as a percentage with two decimals."""
    text = _non_finite_text(fraction)
    if text is not None:
        return f"{text}%"
    return f"{fraction * 100:.2f}%"


def format_tons(value: float) -> str:
    return f"{format_number(value)} tons"


def format_days(days: int) -> str:
    return f"{days} day" if days == 1 else f"{days} days"


def format_timeframe(years: float) -> str:
    """Render a timeframe as given: ``1`` rather than ``1.0``."""
    text = _non_finite_text(years)
    if text is not None:
        return text
    return f"{years:g}"


__all__ = [
    "format_number",
    "format_currency",
    "format_percent",
    "format_tons",
    "format_days",
    "format_timeframe",
]
