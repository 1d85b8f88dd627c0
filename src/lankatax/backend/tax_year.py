"""Helpers for the April to March fiscal year used as the time axis.

A tax year is identified by the calendar year in which it starts, written as a
fixed-width four digit string (``"2024"`` covers 1 April 2024 to 31 March
2025). Fixed width keeps string comparison consistent with numeric order, which
the valuation and ledger lookups rely on.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Final

TAX_YEAR_PATTERN: Final = re.compile(r"^\d{4}$")
FISCAL_START_MONTH: Final = 4


def normalise_tax_year(value: str | int) -> str:
    """Return ``value`` as a validated four digit tax year key."""

    if isinstance(value, bool):
        raise ValueError("Tax year must be a four digit year")
    if isinstance(value, int):
        if not 1000 <= value <= 9999:
            raise ValueError(f"Tax year {value} must be a four digit year")
        return str(value)
    if not isinstance(value, str):
        raise ValueError("Tax year must be a four digit year")

    text = value.strip()
    if not TAX_YEAR_PATTERN.match(text):
        raise ValueError(f"Tax year '{value}' must be a four digit year such as '2024'")
    return text


def previous_tax_year(tax_year: str) -> str:
    return f"{int(normalise_tax_year(tax_year)) - 1:04d}"


def next_tax_year(tax_year: str) -> str:
    return f"{int(normalise_tax_year(tax_year)) + 1:04d}"


def format_tax_year(tax_year: str) -> str:
    """Return the display form, e.g. ``"2024/2025"``."""

    start = int(normalise_tax_year(tax_year))
    return f"{start}/{start + 1}"


def tax_year_date_range(tax_year: str) -> tuple[date, date]:
    """Return the first and last day of ``tax_year``."""

    start = int(normalise_tax_year(tax_year))
    return date(start, FISCAL_START_MONTH, 1), date(start + 1, FISCAL_START_MONTH - 1, 31)


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def tax_year_for_date(value: date | datetime | str) -> str:
    """Return the tax year containing ``value``; January to March belong to the prior year."""

    day = _as_date(value)
    if day.month < FISCAL_START_MONTH:
        return f"{day.year - 1:04d}"
    return f"{day.year:04d}"


def is_date_in_tax_year(value: date | datetime | str, tax_year: str) -> bool:
    start, end = tax_year_date_range(tax_year)
    return start <= _as_date(value) <= end


def current_tax_year(today: date | None = None) -> str:
    return tax_year_for_date(today or date.today())


def recent_tax_years(count: int = 5, today: date | None = None) -> list[str]:
    """Return the ``count`` most recent tax years, newest first."""

    current = int(current_tax_year(today))
    return [f"{current - offset:04d}" for offset in range(max(count, 0))]


def tax_years_from(start_year: str, today: date | None = None) -> list[str]:
    """Return tax years from the current one back to ``start_year`` inclusive."""

    start = int(normalise_tax_year(start_year))
    current = int(current_tax_year(today))
    return [f"{year:04d}" for year in range(current, start - 1, -1)]


__all__ = [
    "FISCAL_START_MONTH",
    "TAX_YEAR_PATTERN",
    "current_tax_year",
    "format_tax_year",
    "is_date_in_tax_year",
    "next_tax_year",
    "normalise_tax_year",
    "previous_tax_year",
    "recent_tax_years",
    "tax_year_date_range",
    "tax_year_for_date",
    "tax_years_from",
]
