"""Typed records, results and API models shared across the calculation services.

Snapshot records are frozen Pydantic models validated once at the boundary so
that the calculators can treat them as immutable data. Result objects are
plain frozen models suitable for direct rendering or JSON serialisation.
"""

from __future__ import annotations

from .api import (
    CalculationRequest,
    CalculationResponse,
    ResponseMeta,
    format_validation_error,
)
from .records import (
    ASSET_CATEGORY_LABELS,
    Asset,
    AssetCategory,
    AssetFinancials,
    BalanceEntry,
    BusinessIncome,
    Certificate,
    Closure,
    Disposal,
    EmploymentIncome,
    Entity,
    FundingSource,
    IncomeRecord,
    InvestmentIncome,
    Liability,
    LiabilityPayment,
    OtherIncome,
    PropertyExpense,
    StockBalanceEntry,
    TaxYear,
    ValuationEntry,
)
from .results import (
    AssetGrowthEntry,
    AuditRiskAssessment,
    BracketPortion,
    IncomeAggregate,
    LedgerRow,
    LiabilityMovement,
    ProgressiveTaxResult,
    Reliefs,
    RiskBand,
    SourceOfFundsCheck,
    TaxComputation,
    TaxCredits,
)

__all__ = [
    "ASSET_CATEGORY_LABELS",
    "Asset",
    "AssetCategory",
    "AssetFinancials",
    "AssetGrowthEntry",
    "AuditRiskAssessment",
    "BalanceEntry",
    "BracketPortion",
    "BusinessIncome",
    "CalculationRequest",
    "CalculationResponse",
    "Certificate",
    "Closure",
    "Disposal",
    "EmploymentIncome",
    "Entity",
    "FundingSource",
    "IncomeAggregate",
    "IncomeRecord",
    "InvestmentIncome",
    "LedgerRow",
    "Liability",
    "LiabilityMovement",
    "LiabilityPayment",
    "OtherIncome",
    "ProgressiveTaxResult",
    "PropertyExpense",
    "Reliefs",
    "ResponseMeta",
    "RiskBand",
    "SourceOfFundsCheck",
    "StockBalanceEntry",
    "TaxComputation",
    "TaxCredits",
    "TaxYear",
    "ValuationEntry",
    "format_validation_error",
]
