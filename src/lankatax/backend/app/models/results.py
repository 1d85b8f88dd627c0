"""Plain result objects returned by the calculators."""

from __future__ import annotations

from typing import Literal, Mapping

from pydantic import BaseModel, ConfigDict

RiskBand = Literal["safe", "warning", "danger"]


class ResultModel(BaseModel):
    """Frozen result payload with no behaviour beyond serialisation."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class BracketPortion(ResultModel):
    """Income taxed inside a single progressive band."""

    lower: float
    upper: float | None
    rate: float
    rate_label: str
    amount: float
    tax: float


class ProgressiveTaxResult(ResultModel):
    total_tax: float
    breakdown: tuple[BracketPortion, ...] = ()


class TaxCredits(ResultModel):
    """Tax already withheld at source, credited against the liability."""

    apit: float = 0.0
    wht: float = 0.0
    certificates: float = 0.0
    total: float = 0.0


class Reliefs(ResultModel):
    personal: float = 0.0
    solar: float = 0.0
    total: float = 0.0


class IncomeAggregate(ResultModel):
    """Assessable income per schedule and the credits found alongside it."""

    gross_by_schedule: Mapping[str, float]
    total_income: float
    tax_credits: TaxCredits


class TaxComputation(ResultModel):
    """Final tax figures for one tax year."""

    tax_year: str
    configuration_year: int
    gross_by_schedule: Mapping[str, float]
    total_income: float
    reliefs: Reliefs
    taxable_income: float
    tax_on_income: float
    tax_breakdown: tuple[BracketPortion, ...]
    tax_credits: TaxCredits
    balance_adjustment: float
    final_tax_payable: float
    is_refund: bool
    assets_total: float
    derived_investment_income: float = 0.0


class AssetGrowthEntry(ResultModel):
    asset_id: str
    category: str
    acquired_in_year: bool
    reference_value: float
    year_end_value: float
    growth: float
    sale_proceeds: float = 0.0
    realised_gain: float = 0.0
    property_expenses: float = 0.0


class LiabilityMovement(ResultModel):
    liability_id: str
    opening_balance: float
    closing_balance: float
    delta: float
    interest_paid: float = 0.0
    total_paid: float = 0.0


class AuditRiskAssessment(ResultModel):
    """Year-over-year wealth reconciliation and its risk classification."""

    tax_year: str
    asset_growth: float
    asset_breakdown: tuple[AssetGrowthEntry, ...]
    asset_sales: float
    realised_gains: float
    property_expenses: float
    loan_repayments: float
    loan_interest: float
    new_borrowing: float
    loan_delta: float
    liability_breakdown: tuple[LiabilityMovement, ...]
    estimated_living_expenses: float
    declared_income: float
    derived_income: float
    risk_score: float
    band: RiskBand


class LedgerRow(ResultModel):
    """One tax year in the balance ledger of a deposit, cash or receivable."""

    tax_year: str
    opening_balance: float
    closing_balance: float
    movement: float
    interest_earned: float = 0.0


class SourceOfFundsCheck(ResultModel):
    is_valid: bool
    unexplained_amount: float


__all__ = [
    "AssetGrowthEntry",
    "AuditRiskAssessment",
    "BracketPortion",
    "IncomeAggregate",
    "LedgerRow",
    "LiabilityMovement",
    "ProgressiveTaxResult",
    "Reliefs",
    "ResultModel",
    "RiskBand",
    "SourceOfFundsCheck",
    "TaxComputation",
    "TaxCredits",
]
