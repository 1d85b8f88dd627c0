"""Resolve the authoritative value of an asset as of a tax year.

Each cage category is valued from its own historical collection:

* ``A`` and ``Bi`` use market valuations, with property expenses carrying a
  revised market value as a secondary source for ``A``;
* ``Biii`` uses the year-end stock portfolio value;
* ``Bii``, ``Biv`` and ``Bv`` use a ledger of closing balances;
* everything else keeps its base ``financials.market_value``.

Entries recorded for a later tax year are never consulted, and a recorded
value of zero is treated exactly like a missing record.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Protocol, TypeVar

from lankatax.backend.app.models import Asset, LedgerRow

VALUATION_CATEGORIES = frozenset({"A", "Bi"})
PORTFOLIO_CATEGORIES = frozenset({"Biii"})
LEDGER_CATEGORIES = frozenset({"Bii", "Biv", "Bv"})


class _YearEntry(Protocol):
    tax_year: str


EntryT = TypeVar("EntryT", bound=_YearEntry)


def latest_entry_not_after(
    entries: Iterable[EntryT],
    tax_year: str,
    *,
    strictly_before: bool = False,
    include: Callable[[EntryT], bool] | None = None,
) -> EntryT | None:
    """Return the entry with the greatest ``tax_year`` not after ``tax_year``.

    Tax years are fixed-width strings so lexicographic comparison matches
    numeric order. When several entries share the winning year the one listed
    last wins. ``include`` filters out entries that do not carry the value
    being looked up.
    """

    selected: EntryT | None = None
    for entry in entries:
        if include is not None and not include(entry):
            continue
        if strictly_before:
            if entry.tax_year >= tax_year:
                continue
        elif entry.tax_year > tax_year:
            continue
        if selected is None or entry.tax_year >= selected.tax_year:
            selected = entry
    return selected


def base_value(asset: Asset) -> float:
    return asset.financials.market_value


def _opening_base(asset: Asset) -> float:
    if asset.financials.market_value:
        return asset.financials.market_value
    return asset.financials.cost


def _present(value: float | None) -> bool:
    return bool(value)


def _resolve_valued(asset: Asset, tax_year: str) -> float:
    valuation = latest_entry_not_after(asset.valuations, tax_year)
    if valuation is not None and _present(valuation.market_value):
        return valuation.market_value

    if asset.category == "A":
        expense = latest_entry_not_after(
            asset.property_expenses,
            tax_year,
            include=lambda entry: entry.market_value is not None,
        )
        if expense is not None and _present(expense.market_value):
            return float(expense.market_value)

    return base_value(asset)


def _resolve_portfolio(asset: Asset, tax_year: str) -> float:
    balance = latest_entry_not_after(asset.stock_balances, tax_year)
    if balance is not None and _present(balance.portfolio_value):
        return balance.portfolio_value
    return base_value(asset)


def _resolve_ledger(asset: Asset, tax_year: str) -> float:
    # An entry for the year itself is the latest entry not after it.
    balance = latest_entry_not_after(asset.balances, tax_year)
    if balance is not None and _present(balance.closing_balance):
        return balance.closing_balance
    return base_value(asset)


def resolve_value(asset: Asset, tax_year: str) -> float:
    """Return the value of ``asset`` as at the end of ``tax_year``."""

    if asset.category in VALUATION_CATEGORIES:
        return _resolve_valued(asset, tax_year)
    if asset.category in PORTFOLIO_CATEGORIES:
        return _resolve_portfolio(asset, tax_year)
    if asset.category in LEDGER_CATEGORIES:
        return _resolve_ledger(asset, tax_year)
    return base_value(asset)


def opening_balance(asset: Asset, tax_year: str) -> float:
    """Return the balance brought forward into ``tax_year``.

    This is the closing balance of the latest ledger entry before the year, or
    the asset's base value when no earlier entry exists.
    """

    if asset.category not in LEDGER_CATEGORIES:
        raise ValueError(
            f"Asset {asset.id} in category {asset.category} does not keep a balance ledger"
        )

    previous = latest_entry_not_after(asset.balances, tax_year, strictly_before=True)
    if previous is not None and _present(previous.closing_balance):
        return previous.closing_balance
    return _opening_base(asset)


def build_balance_ledger(asset: Asset) -> tuple[LedgerRow, ...]:
    """Return the asset's balances as a ledger where each opening is the prior closing."""

    if asset.category not in LEDGER_CATEGORIES:
        return ()

    latest_per_year = {}
    for entry in asset.balances:
        latest_per_year[entry.tax_year] = entry

    rows: list[LedgerRow] = []
    for tax_year in sorted(latest_per_year):
        entry = latest_per_year[tax_year]
        opening = opening_balance(asset, tax_year)
        rows.append(
            LedgerRow(
                tax_year=tax_year,
                opening_balance=opening,
                closing_balance=entry.closing_balance,
                movement=entry.closing_balance - opening,
                interest_earned=entry.interest_earned,
            )
        )
    return tuple(rows)


__all__ = [
    "LEDGER_CATEGORIES",
    "PORTFOLIO_CATEGORIES",
    "VALUATION_CATEGORIES",
    "base_value",
    "build_balance_ledger",
    "latest_entry_not_after",
    "opening_balance",
    "resolve_value",
]
