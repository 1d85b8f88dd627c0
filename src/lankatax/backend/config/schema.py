"""Pydantic models describing the tax year configuration schema."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _coerce_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value in {0, "0", "false", "False", None}:
        return False
    if value in {1, "1", "true", "True"}:
        return True
    raise ConfigurationError("Boolean flags must be explicit true/false values")


class TaxBracket(ImmutableModel):
    """A progressive band described by its width and marginal rate.

    ``width`` is ``None`` for the final, unbounded band.
    """

    width: float | None = None
    rate: float
    pending_confirmation: bool = False

    @field_validator("pending_confirmation", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return _coerce_boolean(value)

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBracket:
        if self.rate < 0 or self.rate > 1:
            raise ConfigurationError("Tax rates must be between 0 and 1")
        if self.width is not None and self.width <= 0:
            raise ConfigurationError("Band widths must be positive values")
        return self


class ReliefConfig(ImmutableModel):
    """Fixed and capped deductions applied before the progressive scale."""

    personal: float = Field(alias="personal_relief")
    solar_cap: float = Field(alias="solar_relief_cap")

    @model_validator(mode="after")
    def _validate_amounts(self) -> ReliefConfig:
        if self.personal < 0:
            raise ConfigurationError("Personal relief must be non-negative")
        if self.solar_cap < 0:
            raise ConfigurationError("Solar relief cap must be non-negative")
        return self


class InvestmentConfig(ImmutableModel):
    """Configuration for investment income (schedule 3)."""

    rent_relief_rate: float = 0.25

    @model_validator(mode="after")
    def _validate_rate(self) -> InvestmentConfig:
        if self.rent_relief_rate < 0 or self.rent_relief_rate > 1:
            raise ConfigurationError("Rent relief rate must be between 0 and 1")
        return self


class AuditRiskConfig(ImmutableModel):
    """Thresholds separating the safe, warning and danger risk bands."""

    safe_threshold: float = 100_000.0
    warning_threshold: float = 500_000.0
    default_living_expenses: float = 0.0

    @model_validator(mode="after")
    def _validate_thresholds(self) -> AuditRiskConfig:
        if self.warning_threshold < self.safe_threshold:
            raise ConfigurationError(
                "Audit risk 'warning_threshold' cannot be below 'safe_threshold'"
            )
        if self.default_living_expenses < 0:
            raise ConfigurationError("Default living expenses must be non-negative")
        return self

    def band_for(self, risk_score: float) -> str:
        if risk_score <= self.safe_threshold:
            return "safe"
        if risk_score <= self.warning_threshold:
            return "warning"
        return "danger"


class YearWarning(ImmutableModel):
    """Structured warning surfaced for a configured tax year."""

    id: str
    message: str
    severity: str = "info"
    documentation_url: str | None = None

    @model_validator(mode="after")
    def _validate_severity(self) -> Self:
        if self.severity not in {"info", "warning", "error"}:
            raise ConfigurationError("Warning 'severity' must be one of: info, warning, error")
        return self


class YearConfiguration(ImmutableModel):
    """Structured representation of a tax year configuration."""

    year: int
    meta: Mapping[str, Any] = Field(default_factory=dict)
    reliefs: ReliefConfig
    investment: InvestmentConfig = Field(default_factory=InvestmentConfig)
    brackets: Sequence[TaxBracket] = Field(alias="tax_brackets")
    audit_risk: AuditRiskConfig = Field(default_factory=AuditRiskConfig)
    warnings: Sequence[YearWarning] = Field(default_factory=tuple)

    @model_validator(mode="before")
    @classmethod
    def _prepare_sections(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration file must define a mapping at the top level")

        prepared = dict(data)
        meta = prepared.get("meta")
        if meta is None:
            prepared["meta"] = {}
        elif not isinstance(meta, Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")

        if not isinstance(prepared.get("reliefs"), Mapping):
            raise ConfigurationError("Configuration must include a 'reliefs' section")

        for section in ("investment", "audit_risk"):
            if prepared.get(section) is None:
                prepared.pop(section, None)

        if "warnings" not in prepared or prepared["warnings"] is None:
            prepared["warnings"] = []

        return prepared

    @field_validator("brackets", mode="before")
    @classmethod
    def _coerce_brackets(cls, value: Any) -> Sequence[Any]:
        if isinstance(value, Iterable) and not isinstance(value, (str, Mapping)):
            return tuple(value)
        raise ConfigurationError("'tax_brackets' must be a list of bands")

    @model_validator(mode="after")
    def _validate_year(self) -> YearConfiguration:
        self._validate_bracket_sequence(self.brackets)
        return self

    @staticmethod
    def _validate_bracket_sequence(brackets: Sequence[TaxBracket]) -> None:
        if not brackets:
            raise ConfigurationError("At least one tax bracket must be defined")
        for bracket in brackets[:-1]:
            if bracket.width is None:
                raise ConfigurationError("Only the final tax bracket may be unbounded")
        if brackets[-1].width is not None:
            raise ConfigurationError("Final tax bracket must have an open width")

    @property
    def tax_year(self) -> str:
        return f"{self.year:04d}"


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported tax year in the manifest."""

    year: int
    filename: str | None = None
    status: str = "active"
    notes_url: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available tax year configuration files."""

    years: Sequence[TaxYearManifestEntry]

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))


__all__ = [
    "AuditRiskConfig",
    "ConfigurationError",
    "ImmutableModel",
    "InvestmentConfig",
    "ReliefConfig",
    "TaxBracket",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "ValidationError",
    "YearConfiguration",
    "YearWarning",
]
