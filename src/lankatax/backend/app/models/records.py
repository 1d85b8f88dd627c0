"""Immutable snapshot records consumed by the calculation core.

Records arrive from the persistence layer as plain mappings and are validated
into frozen models so that the calculators can treat them as read-only data.
Income schedules and asset categories are closed sets: income records form a
discriminated union on ``schedule`` and assets carry their cage category code.
"""

from __future__ import annotations

import datetime
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from lankatax.backend.tax_year import normalise_tax_year

TaxYear = Annotated[str, BeforeValidator(normalise_tax_year)]

AssetCategory = Literal["A", "Bi", "Bii", "Biii", "Biv", "Bv", "Bvi", "C"]

ASSET_CATEGORY_LABELS: dict[str, str] = {
    "A": "Immovable properties",
    "Bi": "Motor vehicles",
    "Bii": "Bank balances / term deposits",
    "Biii": "Shares / stocks / securities",
    "Biv": "Cash in hand",
    "Bv": "Loans given and amounts receivable",
    "Bvi": "Gold, silver, gems and jewellery",
    "C": "Properties held as part of a business",
}


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class SnapshotModel(BaseModel):
    """Base class for frozen snapshot records."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class Entity(SnapshotModel):
    """A taxpayer whose records are held in the snapshot."""

    id: str = Field(min_length=1)
    name: str
    tin: str | None = None
    type: Literal["individual", "company", "partnership", "trust"] = "individual"
    role: Literal["primary", "spouse"] | None = None


class _IncomeRecordBase(SnapshotModel):
    id: str = Field(min_length=1)
    owner_id: str = Field(min_length=1)
    tax_year: TaxYear


class EmploymentIncome(_IncomeRecordBase):
    """Schedule 1: employment income with APIT withheld by the employer."""

    schedule: Literal["employment"]
    employer_name: str = ""
    employer_tin: str = ""
    gross_remuneration: float = Field(default=0.0, ge=0)
    non_cash_benefits: float = Field(default=0.0, ge=0)
    apit_deducted: float = Field(default=0.0, ge=0)
    exempt_income: float = Field(default=0.0, ge=0)


class BusinessIncome(_IncomeRecordBase):
    """Schedule 2: business income; only the net profit (or loss) counts."""

    schedule: Literal["business"]
    business_name: str = ""
    gross_revenue: float = Field(default=0.0, ge=0)
    direct_expenses: float = Field(default=0.0, ge=0)

    @property
    def net_profit(self) -> float:
        return self.gross_revenue - self.direct_expenses


class InvestmentIncome(_IncomeRecordBase):
    """Schedule 3: interest, dividends and rent with WHT withheld at source."""

    schedule: Literal["investment"]
    type: Literal["interest", "dividend", "rent"]
    source: str = ""
    gross_amount: float = Field(default=0.0, ge=0)
    wht_deducted: float = Field(default=0.0, ge=0)


class OtherIncome(_IncomeRecordBase):
    """Any other income with an optional exempt portion."""

    schedule: Literal["other"]
    description: str = ""
    gross_amount: float = Field(default=0.0, ge=0)
    exempt_amount: float = Field(default=0.0, ge=0)
    wht_deducted: float = Field(default=0.0, ge=0)


IncomeRecord = Annotated[
    Union[EmploymentIncome, BusinessIncome, InvestmentIncome, OtherIncome],
    Field(discriminator="schedule"),
]


class Certificate(SnapshotModel):
    """An APIT/WHT/AIT certificate issued by a payer."""

    id: str = Field(min_length=1)
    owner_id: str = Field(min_length=1)
    tax_year: TaxYear
    certificate_no: str = ""
    issue_date: datetime.date | None = None
    type: Literal["employment", "interest", "dividend", "rent", "other"] = "other"
    payer_name: str = ""
    payer_tin: str = ""
    gross_amount: float = Field(ge=0)
    tax_deducted: float = Field(default=0.0, ge=0)
    net_amount: float | None = Field(default=None, ge=0)
    related_income_id: str | None = None

    @field_validator("related_income_id", "issue_date", mode="before")
    @classmethod
    def _blank_optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def _derive_net_amount(self) -> "Certificate":
        if self.tax_deducted > self.gross_amount:
            raise ValueError("Certificate tax deducted cannot exceed the gross amount")
        if self.net_amount is None:
            object.__setattr__(self, "net_amount", self.gross_amount - self.tax_deducted)
        return self


class FundingSource(SnapshotModel):
    """Declared source of the money used to acquire an asset."""

    type: Literal["current-income", "asset-sale", "loan", "gift", "savings"]
    amount: float = Field(ge=0)
    description: str | None = None
    related_id: str | None = None


class AssetFinancials(SnapshotModel):
    cost: float = Field(default=0.0, ge=0)
    market_value: float = Field(default=0.0, ge=0)
    source_of_funds: tuple[FundingSource, ...] | None = None


class ValuationEntry(SnapshotModel):
    """Market valuation of a property or vehicle as at the end of a tax year."""

    id: str | None = None
    tax_year: TaxYear
    market_value: float = Field(ge=0)
    date: datetime.date | None = None
    notes: str | None = None


class PropertyExpense(SnapshotModel):
    """Improvement or repair spend on a property, optionally with a revised value."""

    id: str | None = None
    tax_year: TaxYear
    amount: float = Field(default=0.0, ge=0)
    market_value: float | None = Field(default=None, ge=0)
    description: str = ""
    expense_type: str | None = None
    date: datetime.date | None = None


class BalanceEntry(SnapshotModel):
    """Closing balance of a deposit, cash or receivable as at 31 March."""

    id: str | None = None
    tax_year: TaxYear
    closing_balance: float = Field(ge=0)
    interest_earned: float = Field(default=0.0, ge=0)
    notes: str | None = None


class StockBalanceEntry(SnapshotModel):
    """Year-end position of a share portfolio held through a CDS account."""

    id: str | None = None
    tax_year: TaxYear
    portfolio_value: float = Field(ge=0)
    broker_cash_balance: float = Field(default=0.0, ge=0)
    purchases: float = Field(default=0.0, ge=0)
    dividends: float = Field(default=0.0, ge=0)
    sales: float = Field(default=0.0, ge=0)
    realized_gain: float = 0.0


class Disposal(SnapshotModel):
    date: datetime.date | None = None
    sale_price: float = Field(default=0.0, ge=0)


class Closure(SnapshotModel):
    date: datetime.date | None = None
    final_balance: float = Field(default=0.0, ge=0)


class Asset(SnapshotModel):
    """An asset declared in the statement of assets and liabilities."""

    id: str = Field(min_length=1)
    owner_id: str = Field(min_length=1)
    category: AssetCategory
    description: str = ""
    date_acquired: datetime.date
    financials: AssetFinancials = Field(default_factory=AssetFinancials)
    valuations: tuple[ValuationEntry, ...] = ()
    property_expenses: tuple[PropertyExpense, ...] = ()
    balances: tuple[BalanceEntry, ...] = ()
    stock_balances: tuple[StockBalanceEntry, ...] = ()
    disposed: Disposal | None = None
    closed: Closure | None = None
    meta: Mapping[str, Any] = Field(default_factory=dict)

    @field_validator(
        "valuations", "property_expenses", "balances", "stock_balances", mode="before"
    )
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @property
    def category_label(self) -> str:
        return ASSET_CATEGORY_LABELS[self.category]


class LiabilityPayment(SnapshotModel):
    """A repayment recorded against a liability."""

    id: str | None = None
    tax_year: TaxYear
    date: datetime.date | None = None
    principal_paid: float = Field(default=0.0, ge=0)
    interest_paid: float = Field(default=0.0, ge=0)
    balance_after_payment: float | None = Field(default=None, ge=0)
    notes: str | None = None

    @property
    def total_paid(self) -> float:
        return self.principal_paid + self.interest_paid


class Liability(SnapshotModel):
    """A loan or other amount owed by the taxpayer."""

    id: str = Field(min_length=1)
    owner_id: str = Field(min_length=1)
    description: str = ""
    lender_name: str = ""
    original_amount: float = Field(ge=0)
    current_balance: float | None = Field(default=None, ge=0)
    date_acquired: datetime.date
    interest_rate: float | None = Field(default=None, ge=0)
    security_given: str | None = None
    purpose: str | None = None
    payments: tuple[LiabilityPayment, ...] = ()

    @field_validator("payments", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return () if value is None else value


__all__ = [
    "ASSET_CATEGORY_LABELS",
    "Asset",
    "AssetCategory",
    "AssetFinancials",
    "BalanceEntry",
    "BusinessIncome",
    "Certificate",
    "Closure",
    "Disposal",
    "EmploymentIncome",
    "Entity",
    "FundingSource",
    "IncomeRecord",
    "InvestmentIncome",
    "Liability",
    "LiabilityPayment",
    "OtherIncome",
    "PropertyExpense",
    "SnapshotModel",
    "StockBalanceEntry",
    "TaxYear",
    "ValuationEntry",
]
