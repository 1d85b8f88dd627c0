"""Unit tests for tax year asset selection and source of funds checks."""

from __future__ import annotations

from typing import Any

import pytest

from lankatax.backend.app.models import Asset
from lankatax.backend.app.services.calculators import (
    disposal_in_year,
    filter_assets_for_tax_year,
    held_at_start_of_year,
    property_expenses_for_year,
    validate_source_of_funds,
    year_end_value,
)


def make_asset(**fields: Any) -> Asset:
    data: dict[str, Any] = {
        "id": "asset-1",
        "owner_id": "owner-1",
        "category": "Bvi",
        "date_acquired": "2023-01-01",
        "financials": {"cost": 1_000_000, "market_value": 1_000_000},
    }
    data.update(fields)
    return Asset.model_validate(data)


@pytest.mark.parametrize(
    ("fields", "included"),
    [
        ({}, True),
        ({"date_acquired": "2024-06-15"}, True),
        ({"date_acquired": "2025-04-01"}, False),
        ({"disposed": {"date": "2024-03-31", "sale_price": 1}}, False),
        ({"disposed": {"date": "2024-10-01", "sale_price": 1}}, True),
        ({"disposed": {"date": "2025-06-01", "sale_price": 1}}, True),
        ({"disposed": {"sale_price": 1}}, False),
        ({"closed": {"date": "2024-02-01"}}, False),
        ({"closed": {"date": "2025-03-31"}}, True),
        ({"closed": {"date": "2025-05-01"}}, True),
        ({"closed": {"final_balance": 10}}, False),
    ],
)
def test_filter_assets_for_tax_year(fields: dict[str, Any], included: bool) -> None:
    asset = make_asset(**fields)

    assert (filter_assets_for_tax_year([asset], "2024") == [asset]) is included


def test_held_at_start_of_year() -> None:
    assert held_at_start_of_year(make_asset(date_acquired="2024-03-31"), "2024")
    assert not held_at_start_of_year(make_asset(date_acquired="2024-04-01"), "2024")
    assert not held_at_start_of_year(
        make_asset(disposed={"date": "2024-01-01", "sale_price": 0}), "2024"
    )


def test_year_end_value_is_zero_after_disposal() -> None:
    sold = make_asset(disposed={"date": "2024-09-01", "sale_price": 1_200_000})
    sold_later = make_asset(disposed={"date": "2025-09-01", "sale_price": 1_200_000})

    assert year_end_value(sold, "2024") == 0
    assert year_end_value(sold_later, "2024") == 1_000_000


def test_source_of_funds_fully_explained() -> None:
    asset = make_asset(
        financials={
            "cost": 1_000_000,
            "market_value": 1_000_000,
            "source_of_funds": [
                {"type": "savings", "amount": 400_000},
                {"type": "loan", "amount": 600_000, "related_id": "loan-1"},
            ],
        }
    )

    check = validate_source_of_funds(asset)

    assert check.is_valid
    assert check.unexplained_amount == 0


def test_source_of_funds_partial() -> None:
    asset = make_asset(
        financials={
            "cost": 1_000_000,
            "market_value": 1_000_000,
            "source_of_funds": [{"type": "gift", "amount": 250_000}],
        }
    )

    check = validate_source_of_funds(asset)

    assert not check.is_valid
    assert check.unexplained_amount == pytest.approx(750_000)


def test_source_of_funds_missing() -> None:
    check = validate_source_of_funds(make_asset())

    assert not check.is_valid
    assert check.unexplained_amount == pytest.approx(1_000_000)


@pytest.mark.parametrize(
    ("disposed", "expected"),
    [
        ({"date": "2024-08-01", "sale_price": 2_000_000}, 2_000_000),
        ({"date": "2025-04-01", "sale_price": 2_000_000}, None),
        ({"date": "2024-03-31", "sale_price": 2_000_000}, None),
        ({"sale_price": 2_000_000}, None),
    ],
)
def test_disposal_in_year(disposed: dict[str, Any], expected: float | None) -> None:
    disposal = disposal_in_year(make_asset(disposed=disposed), "2024")

    if expected is None:
        assert disposal is None
    else:
        assert disposal is not None
        assert disposal.sale_price == expected


def test_property_expenses_for_year() -> None:
    asset = make_asset(
        category="A",
        property_expenses=[
            {"tax_year": "2024", "amount": 100_000, "description": "Roof repair"},
            {"tax_year": "2024", "amount": 25_000},
            {"tax_year": "2023", "amount": 400_000},
        ],
    )

    assert property_expenses_for_year(asset, "2024") == pytest.approx(125_000)
    assert property_expenses_for_year(asset, "2022") == 0
