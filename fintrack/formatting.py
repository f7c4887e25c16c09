"""Formatting helpers for currency and date display."""

from __future__ import annotations

from datetime import datetime
from typing import Union

from fintrack.aggregates import round_half_up
from fintrack.config import CURRENCY_SYMBOL


def format_currency(amount: Union[float, int], include_sign: bool = True) -> str:
    """Format an amount with thousands separators and two decimals.

    Negative amounts keep the minus sign in front of the symbol.

    Example:
        >>> format_currency(-1234.5)
        '-$1,234.50'
    """
    formatted = f"{abs(amount):,.2f}"
    if include_sign:
        formatted = f"{CURRENCY_SYMBOL}{formatted}"
    return f"-{formatted}" if amount < 0 else formatted


def format_date(value: str) -> str:
    """Render ``YYYY-MM-DD`` as e.g. ``Jan 5, 2025``; other input is returned as-is."""
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except (TypeError, ValueError):
        return str(value)
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def format_percentage(value: float) -> str:
    return f"{round_half_up(value)}%"
