"""Utility helpers for calculator modules."""

from __future__ import annotations


def format_percentage(value: float) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = round(value * 100, 6)
    if float(int(percentage)) == percentage:
        return f"{int(percentage)}%"
    return f"{percentage:.2f}%"


def format_lkr(amount: float | None) -> str:
    """Format ``amount`` as Sri Lankan rupees, e.g. ``"Rs. 1,234.56"``."""

    value = 0.0 if amount is None else float(amount)
    if value < 0:
        return f"-Rs. {abs(value):,.2f}"
    return f"Rs. {value:,.2f}"


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    return round(value, 2)
