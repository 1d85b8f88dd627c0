"""Domain-specific calculation helpers."""

from .brackets import calculate_progressive_tax
from .holdings import (
    disposal_in_year,
    ended_during_year,
    filter_assets_for_tax_year,
    held_at_start_of_year,
    property_expenses_for_year,
    validate_source_of_funds,
    year_end_value,
)
from .income import (
    SCHEDULES,
    aggregate_income,
    calculate_reliefs,
    derive_investment_income,
    taxable_income_after_reliefs,
)
from .integrity import ensure_known_owners, select_for_owner, select_for_year
from .liabilities import (
    liability_balance_at_year_end,
    liability_balance_at_year_start,
    liability_movement,
    payments_for_year,
)
from .utils import format_lkr, format_percentage, round_currency
from .valuation import (
    build_balance_ledger,
    latest_entry_not_after,
    opening_balance,
    resolve_value,
)

__all__ = [
    "SCHEDULES",
    "aggregate_income",
    "build_balance_ledger",
    "calculate_progressive_tax",
    "calculate_reliefs",
    "derive_investment_income",
    "disposal_in_year",
    "ended_during_year",
    "ensure_known_owners",
    "filter_assets_for_tax_year",
    "format_lkr",
    "format_percentage",
    "held_at_start_of_year",
    "latest_entry_not_after",
    "liability_balance_at_year_end",
    "liability_balance_at_year_start",
    "liability_movement",
    "opening_balance",
    "payments_for_year",
    "property_expenses_for_year",
    "resolve_value",
    "round_currency",
    "select_for_owner",
    "select_for_year",
    "taxable_income_after_reliefs",
    "validate_source_of_funds",
    "year_end_value",
]
