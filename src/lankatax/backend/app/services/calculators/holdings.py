"""Which assets are held in a tax year and how their purchase was funded."""

from __future__ import annotations

from collections.abc import Iterable

from lankatax.backend.app.models import Asset, Disposal, SourceOfFundsCheck
from lankatax.backend.tax_year import tax_year_date_range

from .utils import round_currency
from .valuation import resolve_value


def _end_date(asset: Asset):
    """Return ``(ended, date)`` for a disposal or closure, whichever is recorded."""

    if asset.disposed is not None:
        return True, asset.disposed.date
    if asset.closed is not None:
        return True, asset.closed.date
    return False, None


def filter_assets_for_tax_year(assets: Iterable[Asset], tax_year: str) -> list[Asset]:
    """Return the assets held at any point during ``tax_year``.

    An asset is kept when it was acquired on or before the last day of the
    year and was not disposed of or closed before the first day. A disposal
    or closure without a date is an incomplete record and excludes the asset.
    """

    start, end = tax_year_date_range(tax_year)
    held: list[Asset] = []
    for asset in assets:
        if asset.date_acquired > end:
            continue
        ended, ended_on = _end_date(asset)
        if ended and (ended_on is None or ended_on < start):
            continue
        held.append(asset)
    return held


def held_at_start_of_year(asset: Asset, tax_year: str) -> bool:
    """Return ``True`` when ``asset`` was already owned on 1 April of ``tax_year``."""

    start, _ = tax_year_date_range(tax_year)
    if asset.date_acquired >= start:
        return False
    ended, ended_on = _end_date(asset)
    if ended and (ended_on is None or ended_on < start):
        return False
    return True


def ended_during_year(asset: Asset, tax_year: str) -> bool:
    """Return ``True`` when the asset was disposed of or closed on or before year end."""

    _, end = tax_year_date_range(tax_year)
    ended, ended_on = _end_date(asset)
    return ended and (ended_on is None or ended_on <= end)


def year_end_value(asset: Asset, tax_year: str) -> float:
    """Return the value held on 31 March; assets disposed of or closed by then are worth nothing."""

    if ended_during_year(asset, tax_year):
        return 0.0
    return resolve_value(asset, tax_year)


def disposal_in_year(asset: Asset, tax_year: str) -> Disposal | None:
    """Return the asset's disposal when it is dated inside ``tax_year``."""

    disposal = asset.disposed
    if disposal is None or disposal.date is None:
        return None
    start, end = tax_year_date_range(tax_year)
    if start <= disposal.date <= end:
        return disposal
    return None


def property_expenses_for_year(asset: Asset, tax_year: str) -> float:
    return sum(
        expense.amount for expense in asset.property_expenses if expense.tax_year == tax_year
    )


def validate_source_of_funds(asset: Asset) -> SourceOfFundsCheck:
    """Compare the declared funding sources of ``asset`` against its cost."""

    sources = asset.financials.source_of_funds
    if sources is None:
        return SourceOfFundsCheck(
            is_valid=False, unexplained_amount=round_currency(asset.financials.cost)
        )

    funded = sum(source.amount for source in sources)
    unexplained = asset.financials.cost - funded
    return SourceOfFundsCheck(
        is_valid=unexplained <= 0,
        unexplained_amount=round_currency(max(0.0, unexplained)),
    )


__all__ = [
    "disposal_in_year",
    "ended_during_year",
    "filter_assets_for_tax_year",
    "held_at_start_of_year",
    "property_expenses_for_year",
    "validate_source_of_funds",
    "year_end_value",
]
