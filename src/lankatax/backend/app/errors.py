"""Exceptions raised by the calculation core."""

from __future__ import annotations


class CalculationError(ValueError):
    """Base class for errors raised while computing tax or audit risk."""


class PreconditionViolation(CalculationError):
    """Raised when a caller passes input that a calculator refuses to repair."""


class DataIntegrityError(CalculationError):
    """Raised when records reference owners or entities that do not exist."""


__all__ = ["CalculationError", "DataIntegrityError", "PreconditionViolation"]
