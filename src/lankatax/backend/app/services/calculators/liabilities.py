"""Outstanding liability balances derived from the repayment history."""

from __future__ import annotations

import datetime

from lankatax.backend.app.models import Liability, LiabilityMovement, LiabilityPayment
from lankatax.backend.tax_year import previous_tax_year, tax_year_date_range


def _payment_sort_key(payment: LiabilityPayment) -> tuple[str, datetime.date]:
    return payment.tax_year, payment.date or datetime.date.min


def liability_balance_at_year_end(liability: Liability, tax_year: str) -> float:
    """Return the amount owed on ``liability`` on the last day of ``tax_year``.

    The balance comes from the last payment recorded in or before the year.
    Loans without any repayment history fall back to ``current_balance`` and
    loans whose first recorded payment is later still owe the original amount.
    """

    _, end = tax_year_date_range(tax_year)
    if liability.date_acquired > end:
        return 0.0

    if not liability.payments:
        if liability.current_balance is not None:
            return liability.current_balance
        return liability.original_amount

    payments = sorted(
        (payment for payment in liability.payments if payment.tax_year <= tax_year),
        key=_payment_sort_key,
    )
    if not payments:
        return liability.original_amount

    last = payments[-1]
    if last.balance_after_payment is not None:
        return last.balance_after_payment

    repaid = sum(payment.principal_paid for payment in payments)
    return max(0.0, liability.original_amount - repaid)


def liability_balance_at_year_start(liability: Liability, tax_year: str) -> float:
    """Return the amount owed on 1 April of ``tax_year``."""

    return liability_balance_at_year_end(liability, previous_tax_year(tax_year))


def payments_for_year(liability: Liability, tax_year: str) -> tuple[LiabilityPayment, ...]:
    return tuple(payment for payment in liability.payments if payment.tax_year == tax_year)


def liability_movement(liability: Liability, tax_year: str) -> LiabilityMovement:
    """Describe how much of ``liability`` was repaid (positive) or drawn (negative).

    Interest paid during the year is reported alongside; it never changes the
    balance.
    """

    opening = liability_balance_at_year_start(liability, tax_year)
    closing = liability_balance_at_year_end(liability, tax_year)
    payments = payments_for_year(liability, tax_year)
    return LiabilityMovement(
        liability_id=liability.id,
        opening_balance=opening,
        closing_balance=closing,
        delta=opening - closing,
        interest_paid=sum(payment.interest_paid for payment in payments),
        total_paid=sum(payment.total_paid for payment in payments),
    )


__all__ = [
    "liability_balance_at_year_end",
    "liability_balance_at_year_start",
    "liability_movement",
    "payments_for_year",
]
