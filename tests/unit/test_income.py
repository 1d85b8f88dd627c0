"""Unit tests for income aggregation and reliefs."""

from __future__ import annotations

import logging
from typing import Any

import pytest
from pydantic import TypeAdapter

from lankatax.backend.app.models import Asset, Certificate, IncomeRecord
from lankatax.backend.app.services.calculators import (
    aggregate_income,
    calculate_reliefs,
    derive_investment_income,
)
from lankatax.backend.config.schema import ReliefConfig

_INCOME = TypeAdapter(IncomeRecord)


def income(schedule: str, **fields: Any) -> Any:
    data = {"id": f"{schedule}-1", "owner_id": "owner-1", "tax_year": "2024"}
    data.update(fields)
    data["schedule"] = schedule
    return _INCOME.validate_python(data)


def certificate(**fields: Any) -> Certificate:
    data = {
        "id": "cert-1",
        "owner_id": "owner-1",
        "tax_year": "2024",
        "gross_amount": 1_000_000,
        "tax_deducted": 50_000,
    }
    data.update(fields)
    return Certificate.model_validate(data)


def test_employment_income_nets_exempt_amount_and_credits_apit() -> None:
    record = income(
        "employment",
        gross_remuneration=3_000_000,
        non_cash_benefits=250_000,
        exempt_income=100_000,
        apit_deducted=200_000,
    )

    result = aggregate_income([record])

    assert result.gross_by_schedule["employment"] == pytest.approx(3_150_000)
    assert result.total_income == pytest.approx(3_150_000)
    assert result.tax_credits.apit == pytest.approx(200_000)
    assert result.tax_credits.total == pytest.approx(200_000)


def test_rent_is_reduced_by_automatic_relief() -> None:
    record = income("investment", type="rent", gross_amount=1_000_000, wht_deducted=100_000)

    result = aggregate_income([record])

    assert result.gross_by_schedule["investment"] == pytest.approx(750_000)
    assert result.tax_credits.wht == pytest.approx(100_000)


def test_interest_and_dividends_are_fully_assessable() -> None:
    records = [
        income("investment", id="int", type="interest", gross_amount=400_000, wht_deducted=20_000),
        income("investment", id="div", type="dividend", gross_amount=100_000, wht_deducted=15_000),
    ]

    result = aggregate_income(records)

    assert result.gross_by_schedule["investment"] == pytest.approx(500_000)
    assert result.tax_credits.wht == pytest.approx(35_000)


def test_business_loss_reduces_total_income() -> None:
    records = [
        income("employment", gross_remuneration=2_000_000),
        income("business", gross_revenue=300_000, direct_expenses=800_000),
    ]

    result = aggregate_income(records)

    assert result.gross_by_schedule["business"] == pytest.approx(-500_000)
    assert result.total_income == pytest.approx(1_500_000)


def test_other_income_deducts_exempt_portion() -> None:
    record = income("other", gross_amount=600_000, exempt_amount=100_000, wht_deducted=5_000)

    result = aggregate_income([record])

    assert result.gross_by_schedule["other"] == pytest.approx(500_000)
    assert result.tax_credits.wht == pytest.approx(5_000)


def test_empty_input_gives_zero_totals() -> None:
    result = aggregate_income([])

    assert result.total_income == 0
    assert result.tax_credits.total == 0
    assert set(result.gross_by_schedule) == {"employment", "business", "investment", "other"}


def test_unlinked_certificate_adds_independent_credit() -> None:
    record = income("employment", gross_remuneration=1_000_000, apit_deducted=40_000)

    result = aggregate_income([record], [certificate(tax_deducted=25_000)])

    assert result.tax_credits.apit == pytest.approx(40_000)
    assert result.tax_credits.certificates == pytest.approx(25_000)
    assert result.tax_credits.total == pytest.approx(65_000)


def test_linked_certificate_replaces_record_withholding() -> None:
    record = income(
        "investment", id="fd-1", type="interest", gross_amount=500_000, wht_deducted=25_000
    )
    linked = certificate(related_income_id="fd-1", tax_deducted=25_000, gross_amount=500_000)

    result = aggregate_income([record], [linked])

    assert result.tax_credits.wht == pytest.approx(25_000)
    assert result.tax_credits.certificates == 0
    assert result.tax_credits.total == pytest.approx(25_000)


def test_certificates_linked_to_one_record_are_summed() -> None:
    record = income("employment", id="job", gross_remuneration=2_400_000, apit_deducted=0)
    certificates = [
        certificate(id="c1", related_income_id="job", tax_deducted=30_000),
        certificate(id="c2", related_income_id="job", tax_deducted=45_000),
    ]

    result = aggregate_income([record], certificates)

    assert result.tax_credits.apit == pytest.approx(75_000)
    assert result.tax_credits.total == pytest.approx(75_000)


def test_dangling_certificate_link_is_credited_and_logged(
    caplog: pytest.LogCaptureFixture,
) -> None:
    record = income("employment", id="job", gross_remuneration=1_000_000, apit_deducted=10_000)

    with caplog.at_level(logging.WARNING):
        result = aggregate_income(
            [record], [certificate(related_income_id="missing", tax_deducted=5_000)]
        )

    assert result.tax_credits.certificates == pytest.approx(5_000)
    assert result.tax_credits.total == pytest.approx(15_000)
    assert "missing" in caplog.text


def test_custom_rent_relief_rate() -> None:
    record = income("investment", type="rent", gross_amount=1_000_000)

    result = aggregate_income([record], rent_relief_rate=0.5)

    assert result.total_income == pytest.approx(500_000)


def test_reliefs_cap_solar_investment() -> None:
    config = ReliefConfig(personal_relief=1_200_000, solar_relief_cap=600_000)

    capped = calculate_reliefs(5_000_000, config, solar_investment=900_000)
    partial = calculate_reliefs(5_000_000, config, solar_investment=250_000)
    none = calculate_reliefs(5_000_000, config)

    assert capped.solar == pytest.approx(600_000)
    assert capped.total == pytest.approx(1_800_000)
    assert partial.solar == pytest.approx(250_000)
    assert none.solar == 0
    assert none.personal == pytest.approx(1_200_000)


def test_reliefs_reject_negative_solar_investment() -> None:
    config = ReliefConfig(personal_relief=1_200_000, solar_relief_cap=600_000)

    with pytest.raises(ValueError):
        calculate_reliefs(0, config, solar_investment=-1)


def deposit(**fields: Any) -> Asset:
    data: dict[str, Any] = {
        "id": "fd-1",
        "owner_id": "owner-1",
        "category": "Bii",
        "description": "Fixed deposit",
        "date_acquired": "2020-01-01",
        "financials": {"cost": 1_000, "market_value": 1_000},
    }
    data.update(fields)
    return Asset.model_validate(data)


def test_interest_is_derived_from_deposit_balances() -> None:
    asset = deposit(
        balances=[
            {"tax_year": "2023", "closing_balance": 900, "interest_earned": 70},
            {"tax_year": "2024", "closing_balance": 1_000, "interest_earned": 10_000},
        ]
    )

    (derived,) = derive_investment_income([asset], "2024")

    assert derived.type == "interest"
    assert derived.gross_amount == pytest.approx(10_000)
    assert derived.owner_id == "owner-1"
    assert aggregate_income([derived]).gross_by_schedule["investment"] == pytest.approx(10_000)


def test_dividends_are_derived_from_stock_balances() -> None:
    shares = deposit(
        id="cds-1",
        category="Biii",
        description="",
        stock_balances=[{"tax_year": "2024", "portfolio_value": 1_500_000, "dividends": 50_000}],
    )

    (derived,) = derive_investment_income([shares], "2024")

    assert derived.type == "dividend"
    assert derived.id == "cds-1:dividend"
    assert derived.source == "Shares / stocks / securities"
    assert derived.gross_amount == pytest.approx(50_000)


def test_derived_income_skips_other_years_and_unheld_assets() -> None:
    balances = [{"tax_year": "2024", "closing_balance": 1_000, "interest_earned": 100}]
    assets = [
        deposit(balances=balances, date_acquired="2025-05-01"),
        deposit(id="fd-2", balances=balances, closed={"date": "2023-12-01"}),
        deposit(id="fd-3", balances=[{"tax_year": "2024", "closing_balance": 1_000}]),
        deposit(id="cash", category="Biv", balances=balances),
    ]

    assert derive_investment_income(assets, "2024") == ()
    assert derive_investment_income([deposit(balances=balances)], "2023") == ()
