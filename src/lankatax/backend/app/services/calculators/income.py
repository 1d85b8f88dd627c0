"""Income aggregation across the four IRD income schedules."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from typing import Protocol, TypeVar

from lankatax.backend.app.models import (
    Asset,
    BusinessIncome,
    Certificate,
    EmploymentIncome,
    IncomeAggregate,
    IncomeRecord,
    InvestmentIncome,
    OtherIncome,
    Reliefs,
    TaxCredits,
)
from lankatax.backend.config.schema import ReliefConfig

from .holdings import filter_assets_for_tax_year

_LOGGER = logging.getLogger(__name__)

SCHEDULES: tuple[str, ...] = ("employment", "business", "investment", "other")


class _YearEntry(Protocol):
    tax_year: str


_EntryT = TypeVar("_EntryT", bound=_YearEntry)


def _assessable_amount(record: IncomeRecord, rent_relief_rate: float) -> float:
    if isinstance(record, EmploymentIncome):
        return (
            record.gross_remuneration
            + record.non_cash_benefits
            - record.exempt_income
        )
    if isinstance(record, BusinessIncome):
        return record.net_profit
    if isinstance(record, InvestmentIncome):
        if record.type == "rent":
            return record.gross_amount * (1 - rent_relief_rate)
        return record.gross_amount
    if isinstance(record, OtherIncome):
        return record.gross_amount - record.exempt_amount
    raise TypeError(f"Unsupported income record: {type(record).__name__}")


def _withheld_amount(record: IncomeRecord) -> float:
    if isinstance(record, EmploymentIncome):
        return record.apit_deducted
    if isinstance(record, (InvestmentIncome, OtherIncome)):
        return record.wht_deducted
    return 0.0


def _linked_certificate_totals(
    certificates: Sequence[Certificate], record_ids: set[str]
) -> tuple[dict[str, float], float]:
    """Split certificate credits into per-record totals and unlinked credit."""

    linked: dict[str, float] = defaultdict(float)
    unlinked = 0.0
    for certificate in certificates:
        target = certificate.related_income_id
        if target is None:
            unlinked += certificate.tax_deducted
            continue
        if target not in record_ids:
            _LOGGER.warning(
                "Certificate %s references unknown income record %s; "
                "crediting it as unlinked",
                certificate.id,
                target,
            )
            unlinked += certificate.tax_deducted
            continue
        linked[target] += certificate.tax_deducted
    return dict(linked), unlinked


def aggregate_income(
    records: Iterable[IncomeRecord],
    certificates: Iterable[Certificate] = (),
    *,
    rent_relief_rate: float = 0.25,
) -> IncomeAggregate:
    """Reduce income records for a single tax year into schedule totals and credits.

    Business losses reduce the total as they are. When a certificate is linked
    to a record, the certificate figure replaces the record's own withheld
    amount so the same withholding is never credited twice.
    """

    record_list = list(records)
    certificate_list = list(certificates)

    gross_by_schedule = {schedule: 0.0 for schedule in SCHEDULES}
    linked, unlinked_credit = _linked_certificate_totals(
        certificate_list, {record.id for record in record_list}
    )

    apit = 0.0
    wht = 0.0
    for record in record_list:
        gross_by_schedule[record.schedule] += _assessable_amount(record, rent_relief_rate)

        withheld = linked.get(record.id, _withheld_amount(record))
        if isinstance(record, EmploymentIncome):
            apit += withheld
        else:
            wht += withheld

    total_income = sum(gross_by_schedule.values())
    credits = TaxCredits(
        apit=apit,
        wht=wht,
        certificates=unlinked_credit,
        total=apit + wht + unlinked_credit,
    )
    return IncomeAggregate(
        gross_by_schedule=gross_by_schedule,
        total_income=total_income,
        tax_credits=credits,
    )


def _entry_for_year(entries: Iterable[_EntryT], tax_year: str) -> _EntryT | None:
    selected = None
    for entry in entries:
        if entry.tax_year == tax_year:
            selected = entry
    return selected


def derive_investment_income(
    assets: Iterable[Asset], tax_year: str
) -> tuple[InvestmentIncome, ...]:
    """Return investment income implied by the asset records for ``tax_year``.

    Interest credited to a bank or deposit account (``Bii``) and dividends
    received on a share portfolio (``Biii``) are recorded against the asset's
    year-end entry rather than as separate income records. Only assets held
    during the year contribute, and a zero amount yields no record.
    """

    derived: list[InvestmentIncome] = []
    for asset in filter_assets_for_tax_year(assets, tax_year):
        if asset.category == "Bii":
            kind = "interest"
            balance = _entry_for_year(asset.balances, tax_year)
            amount = balance.interest_earned if balance is not None else 0.0
        elif asset.category == "Biii":
            kind = "dividend"
            position = _entry_for_year(asset.stock_balances, tax_year)
            amount = position.dividends if position is not None else 0.0
        else:
            continue

        if amount <= 0:
            continue
        derived.append(
            InvestmentIncome(
                id=f"{asset.id}:{kind}",
                owner_id=asset.owner_id,
                tax_year=tax_year,
                schedule="investment",
                type=kind,
                source=asset.description or asset.category_label,
                gross_amount=amount,
            )
        )
    return tuple(derived)


def calculate_reliefs(
    total_income: float,
    relief_config: ReliefConfig,
    solar_investment: float = 0.0,
) -> Reliefs:
    """Return the reliefs deducted from ``total_income`` before the bracket scale.

    The personal relief applies once per taxpayer; the solar relief is the
    declared investment capped at the configured limit.
    """

    if solar_investment < 0:
        raise ValueError("Solar investment cannot be negative")

    personal = relief_config.personal
    solar = min(solar_investment, relief_config.solar_cap)
    return Reliefs(personal=personal, solar=solar, total=personal + solar)


def taxable_income_after_reliefs(total_income: float, reliefs: Reliefs) -> float:
    return max(0.0, total_income - reliefs.total)


__all__ = [
    "SCHEDULES",
    "aggregate_income",
    "calculate_reliefs",
    "derive_investment_income",
    "taxable_income_after_reliefs",
]
