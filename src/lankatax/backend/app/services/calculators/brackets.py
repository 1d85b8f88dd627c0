"""Progressive band arithmetic shared by every tax year."""

from __future__ import annotations

from collections.abc import Sequence

from lankatax.backend.app.errors import PreconditionViolation
from lankatax.backend.app.models import BracketPortion, ProgressiveTaxResult
from lankatax.backend.config.schema import TaxBracket

from .utils import format_percentage


def calculate_progressive_tax(
    taxable_income: float, brackets: Sequence[TaxBracket]
) -> ProgressiveTaxResult:
    """Apply ``brackets`` to ``taxable_income`` band by band.

    Each band taxes only the slice of income that falls inside its width and
    the final band absorbs whatever remains. Only bands that receive income
    appear in the breakdown, so the portion taxes always add up to
    ``total_tax``.
    """

    if taxable_income < 0:
        raise PreconditionViolation(
            f"Taxable income cannot be negative (received {taxable_income})"
        )
    if not brackets:
        raise PreconditionViolation("At least one tax bracket is required")

    remaining = float(taxable_income)
    lower = 0.0
    portions: list[BracketPortion] = []

    for index, bracket in enumerate(brackets):
        if remaining <= 0:
            break

        is_last = index == len(brackets) - 1
        if bracket.width is None or is_last:
            amount = remaining
            upper = None
        else:
            amount = min(remaining, bracket.width)
            upper = lower + bracket.width

        portions.append(
            BracketPortion(
                lower=lower,
                upper=upper,
                rate=bracket.rate,
                rate_label=format_percentage(bracket.rate),
                amount=amount,
                tax=amount * bracket.rate,
            )
        )
        remaining -= amount
        if upper is not None:
            lower = upper

    total = sum(portion.tax for portion in portions)
    return ProgressiveTaxResult(total_tax=total, breakdown=tuple(portions))


__all__ = ["calculate_progressive_tax"]
