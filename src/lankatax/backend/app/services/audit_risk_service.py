"""Year-over-year wealth reconciliation behind the audit risk meter.

Every rupee of asset growth, property spend and loan servicing during the
year has to be explained by declared income, new borrowing or gains realised
on disposals. Whatever remains, after the taxpayer's estimated living
expenses, is the risk score, which the year's configuration classifies as
``safe``, ``warning`` or ``danger``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from lankatax.backend.app.errors import DataIntegrityError
from lankatax.backend.app.models import (
    Asset,
    AssetGrowthEntry,
    AuditRiskAssessment,
    Entity,
    IncomeRecord,
    Liability,
)
from lankatax.backend.config.schema import YearConfiguration
from lankatax.backend.tax_year import normalise_tax_year, previous_tax_year

from .calculators import (
    aggregate_income,
    derive_investment_income,
    disposal_in_year,
    ensure_known_owners,
    filter_assets_for_tax_year,
    held_at_start_of_year,
    liability_movement,
    property_expenses_for_year,
    resolve_value,
    round_currency,
    select_for_owner,
    select_for_year,
    year_end_value,
)

_LOGGER = logging.getLogger(__name__)


def _asset_growth(asset: Asset, tax_year: str) -> AssetGrowthEntry:
    closing = year_end_value(asset, tax_year)
    if held_at_start_of_year(asset, tax_year):
        reference = resolve_value(asset, previous_tax_year(tax_year))
        growth = closing - reference
        acquired = False
    else:
        # The whole acquisition outlay needs explaining, or the funded
        # balance when an account opens at cost zero.
        reference = 0.0
        growth = max(asset.financials.cost, closing)
        acquired = True

    disposal = disposal_in_year(asset, tax_year)
    proceeds = disposal.sale_price if disposal is not None else 0.0
    # Proceeds beyond the value already dropped from growth explain new wealth.
    gain = proceeds - reference if disposal is not None else 0.0

    return AssetGrowthEntry(
        asset_id=asset.id,
        category=asset.category,
        acquired_in_year=acquired,
        reference_value=round_currency(reference),
        year_end_value=round_currency(closing),
        growth=round_currency(growth),
        sale_proceeds=round_currency(proceeds),
        realised_gain=round_currency(gain),
        property_expenses=round_currency(property_expenses_for_year(asset, tax_year)),
    )


def compute_risk(
    assets: Iterable[Asset],
    liabilities: Iterable[Liability],
    incomes: Iterable[IncomeRecord],
    tax_year: str,
    *,
    config: YearConfiguration,
    estimated_living_expenses: float | None = None,
    owner_id: str | None = None,
    entities: Iterable[Entity] | None = None,
) -> AuditRiskAssessment:
    """Return the audit risk assessment for ``tax_year``.

    Outflows are asset growth, property expenses, principal repaid, loan
    interest and living expenses. Inflows are declared income (including
    interest and dividends recorded on the assets), new borrowing and gains
    realised on disposals.
    """

    year = normalise_tax_year(tax_year)
    asset_list = list(assets)
    liability_list = list(liabilities)
    income_list = list(incomes)
    entity_list = list(entities) if entities is not None else None

    ensure_known_owners(entity_list, asset_list, liability_list, income_list)
    if entity_list is not None and owner_id is not None:
        if owner_id not in {entity.id for entity in entity_list}:
            raise DataIntegrityError(f"Unknown owner '{owner_id}'")

    if estimated_living_expenses is None:
        estimated_living_expenses = config.audit_risk.default_living_expenses
    if estimated_living_expenses < 0:
        raise ValueError("Estimated living expenses cannot be negative")

    owned_assets = select_for_owner(asset_list, owner_id)
    held_assets = filter_assets_for_tax_year(owned_assets, year)
    asset_breakdown = tuple(_asset_growth(asset, year) for asset in held_assets)
    asset_growth = sum(entry.growth for entry in asset_breakdown)
    asset_sales = sum(entry.sale_proceeds for entry in asset_breakdown)
    realised_gains = sum(entry.realised_gain for entry in asset_breakdown)
    property_expenses = sum(entry.property_expenses for entry in asset_breakdown)

    liability_breakdown = tuple(
        liability_movement(liability, year)
        for liability in select_for_owner(liability_list, owner_id)
    )
    loan_repayments = sum(max(0.0, entry.delta) for entry in liability_breakdown)
    new_borrowing = sum(max(0.0, -entry.delta) for entry in liability_breakdown)
    loan_interest = sum(entry.interest_paid for entry in liability_breakdown)

    derived = derive_investment_income(owned_assets, year)
    declared = aggregate_income(
        [*select_for_year(select_for_owner(income_list, owner_id), year), *derived],
        rent_relief_rate=config.investment.rent_relief_rate,
    ).total_income

    outflows = (
        asset_growth
        + property_expenses
        + loan_repayments
        + loan_interest
        + estimated_living_expenses
    )
    inflows = declared + new_borrowing + realised_gains
    risk_score = round_currency(outflows - inflows)
    band = config.audit_risk.band_for(risk_score)
    _LOGGER.debug("Audit risk for %s: score=%s band=%s", year, risk_score, band)

    return AuditRiskAssessment(
        tax_year=year,
        asset_growth=round_currency(asset_growth),
        asset_breakdown=asset_breakdown,
        asset_sales=round_currency(asset_sales),
        realised_gains=round_currency(realised_gains),
        property_expenses=round_currency(property_expenses),
        loan_repayments=round_currency(loan_repayments),
        loan_interest=round_currency(loan_interest),
        new_borrowing=round_currency(new_borrowing),
        loan_delta=round_currency(loan_repayments - new_borrowing),
        liability_breakdown=liability_breakdown,
        estimated_living_expenses=round_currency(estimated_living_expenses),
        declared_income=round_currency(declared),
        derived_income=round_currency(sum(record.gross_amount for record in derived)),
        risk_score=risk_score,
        band=band,
    )


__all__ = ["compute_risk"]
