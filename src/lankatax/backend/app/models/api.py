"""Pydantic models describing the public API surface."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .records import (
    Asset,
    Certificate,
    Entity,
    IncomeRecord,
    Liability,
    TaxYear,
)
from .results import AuditRiskAssessment, TaxComputation

__all__ = [
    "CalculationRequest",
    "CalculationResponse",
    "ResponseMeta",
    "format_validation_error",
]


class CalculationRequest(BaseModel):
    """Complete snapshot accepted by the calculation endpoint."""

    model_config = ConfigDict(extra="forbid")

    tax_year: TaxYear
    owner_id: str | None = None
    entities: list[Entity] = Field(default_factory=list)
    incomes: list[IncomeRecord] = Field(default_factory=list)
    assets: list[Asset] = Field(default_factory=list)
    liabilities: list[Liability] = Field(default_factory=list)
    certificates: list[Certificate] = Field(default_factory=list)
    solar_investment: float = Field(default=0.0, ge=0)
    balance_adjustment: float = 0.0
    estimated_living_expenses: float | None = Field(default=None, ge=0)
    include_audit_risk: bool = True

    @field_validator("owner_id", mode="before")
    @classmethod
    def _normalise_owner(cls, value: Any) -> Any:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator(
        "entities", "incomes", "assets", "liabilities", "certificates", mode="before"
    )
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return value
        raise TypeError("Snapshot sections must be provided as arrays")


class ResponseMeta(BaseModel):
    """Metadata returned alongside the calculation output."""

    model_config = ConfigDict(extra="forbid")

    tax_year: str
    display_year: str
    configuration_year: int
    owner_id: str | None = None
    warnings: list[str] = Field(default_factory=list)


class CalculationResponse(BaseModel):
    """Full response payload produced by the calculation service."""

    model_config = ConfigDict(extra="forbid")

    tax: TaxComputation
    audit_risk: AuditRiskAssessment | None = None
    meta: ResponseMeta


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
