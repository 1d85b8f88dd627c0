"""Orchestrate request validation, configuration lookup, and tax calculations.

The calculation service coordinates the snapshot models and year-based
configuration so that each calculator can focus on its own arithmetic.
``compute_tax`` is the pure library entry point for one tax year while
``calculate_tax`` validates an API payload, runs both the tax and audit risk
engines and returns a JSON-ready response. Profiling hooks live here to give
the rest of the application a simple entry point.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from lankatax.backend.app.errors import DataIntegrityError
from lankatax.backend.app.models import (
    Asset,
    CalculationRequest,
    CalculationResponse,
    Certificate,
    Entity,
    IncomeRecord,
    ResponseMeta,
    TaxComputation,
    format_validation_error,
)
from lankatax.backend.config.schema import YearConfiguration
from lankatax.backend.config.year_config import load_configuration_for_tax_year
from lankatax.backend.tax_year import format_tax_year, normalise_tax_year

from .audit_risk_service import compute_risk
from .calculators import (
    aggregate_income,
    calculate_progressive_tax,
    calculate_reliefs,
    derive_investment_income,
    ensure_known_owners,
    filter_assets_for_tax_year,
    round_currency,
    select_for_owner,
    select_for_year,
    taxable_income_after_reliefs,
    year_end_value,
)

_LOGGER = logging.getLogger(__name__)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("LANKATAX_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def compute_tax(
    incomes: Iterable[IncomeRecord],
    assets: Iterable[Asset],
    tax_year: str,
    balance_adjustment: float = 0.0,
    certificates: Iterable[Certificate] = (),
    *,
    config: YearConfiguration,
    solar_investment: float = 0.0,
    owner_id: str | None = None,
    entities: Iterable[Entity] | None = None,
) -> TaxComputation:
    """Compute the income tax position for ``tax_year``.

    Income records and certificates for other years are ignored, so callers
    can pass the whole snapshot. ``final_tax_payable`` is negative when the
    credits exceed the tax due, which denotes a refund.
    """

    year = normalise_tax_year(tax_year)
    income_list = list(incomes)
    asset_list = list(assets)
    certificate_list = list(certificates)
    entity_list = list(entities) if entities is not None else None

    ensure_known_owners(entity_list, income_list, asset_list, certificate_list)
    if entity_list is not None and owner_id is not None:
        if owner_id not in {entity.id for entity in entity_list}:
            raise DataIntegrityError(f"Unknown owner '{owner_id}'")

    year_incomes = select_for_year(select_for_owner(income_list, owner_id), year)
    year_certificates = select_for_year(
        select_for_owner(certificate_list, owner_id), year
    )

    owned_assets = select_for_owner(asset_list, owner_id)
    derived_incomes = derive_investment_income(owned_assets, year)

    aggregate = aggregate_income(
        [*year_incomes, *derived_incomes],
        year_certificates,
        rent_relief_rate=config.investment.rent_relief_rate,
    )
    reliefs = calculate_reliefs(aggregate.total_income, config.reliefs, solar_investment)
    taxable_income = taxable_income_after_reliefs(aggregate.total_income, reliefs)
    progressive = calculate_progressive_tax(taxable_income, config.brackets)

    credits = aggregate.tax_credits
    final_tax_payable = progressive.total_tax - credits.total + balance_adjustment

    held_assets = filter_assets_for_tax_year(owned_assets, year)
    assets_total = sum(year_end_value(asset, year) for asset in held_assets)

    return TaxComputation(
        tax_year=year,
        configuration_year=config.year,
        gross_by_schedule={
            schedule: round_currency(amount)
            for schedule, amount in aggregate.gross_by_schedule.items()
        },
        total_income=round_currency(aggregate.total_income),
        reliefs=reliefs,
        taxable_income=round_currency(taxable_income),
        tax_on_income=round_currency(progressive.total_tax),
        tax_breakdown=progressive.breakdown,
        tax_credits=credits,
        balance_adjustment=round_currency(balance_adjustment),
        final_tax_payable=round_currency(final_tax_payable),
        is_refund=final_tax_payable < 0,
        assets_total=round_currency(assets_total),
        derived_investment_income=round_currency(
            sum(record.gross_amount for record in derived_incomes)
        ),
    )


def _validate_request(payload: Mapping[str, Any] | CalculationRequest) -> CalculationRequest:
    if isinstance(payload, CalculationRequest):
        source: Any = payload.model_dump(mode="python")
    else:
        if not isinstance(payload, Mapping):
            raise ValueError("Payload must be a mapping")
        if "tax_year" not in payload:
            raise ValueError("Payload must include a tax year")
        source = payload

    try:
        return CalculationRequest.model_validate(source)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


def calculate_tax(
    payload: Mapping[str, Any] | CalculationRequest,
) -> dict[str, Any]:
    """Compute the tax and audit risk summary for the provided payload."""

    request_model = _validate_request(payload)

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    year = request_model.tax_year
    with _profile_section("configuration", timings):
        config = load_configuration_for_tax_year(year)

    entities = request_model.entities or None

    with _profile_section("tax", timings):
        tax = compute_tax(
            request_model.incomes,
            request_model.assets,
            year,
            request_model.balance_adjustment,
            request_model.certificates,
            config=config,
            solar_investment=request_model.solar_investment,
            owner_id=request_model.owner_id,
            entities=entities,
        )

    audit_risk = None
    if request_model.include_audit_risk:
        with _profile_section("audit_risk", timings):
            audit_risk = compute_risk(
                request_model.assets,
                request_model.liabilities,
                request_model.incomes,
                year,
                config=config,
                estimated_living_expenses=request_model.estimated_living_expenses,
                owner_id=request_model.owner_id,
                entities=entities,
            )

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_tax timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    warnings = [warning.message for warning in config.warnings]
    if config.year != int(year):
        _LOGGER.info(
            "Tax year %s has no dedicated configuration; using %s tables",
            year,
            config.year,
        )
        warnings.insert(
            0,
            f"No tax tables are published for {format_tax_year(year)}; "
            f"figures use the {format_tax_year(config.tax_year)} tables.",
        )

    meta = ResponseMeta(
        tax_year=year,
        display_year=format_tax_year(year),
        configuration_year=config.year,
        owner_id=request_model.owner_id,
        warnings=warnings,
    )

    response = CalculationResponse(tax=tax, audit_risk=audit_risk, meta=meta)
    return response.model_dump(mode="json")


__all__ = ["calculate_tax", "compute_tax"]
