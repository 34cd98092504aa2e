"""Fee and due-date arithmetic for study hall enrollments.

All amounts are ``Decimal`` quantised to two places. Dates are plain
``datetime.date`` values; month arithmetic clamps the day to the end of the
target month (Jan 31 + 1 month -> Feb 28, or Feb 29 in a leap year).
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
# Largest value a Numeric(10, 2) column holds
MAX_AMOUNT = Decimal("99999999.99")

Number = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class BillingResult:
    pending_amount: Decimal
    next_payment_date: date
    credit_balance: Decimal = ZERO


def to_money(value: Optional[Number], default: Optional[Decimal] = None) -> Decimal:
    """Parse ``value`` into a non-negative two-place Decimal.

    ``None`` and blank strings return ``default`` when one is given.
    Raises ValueError for anything that isn't a finite, non-negative number
    or that is too large to store.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise ValueError("amount is required")
        return default.quantize(CENTS, rounding=ROUND_HALF_UP)
    try:
        if isinstance(value, Decimal):
            d = value
        elif isinstance(value, bool):
            raise InvalidOperation()
        elif isinstance(value, (int, float)):
            d = Decimal(str(value))
        elif isinstance(value, str):
            d = Decimal(value.strip())
        else:
            raise InvalidOperation()
    except InvalidOperation:
        raise ValueError(f"not a number: {value!r}")
    if not d.is_finite():
        raise ValueError(f"not a number: {value!r}")
    if d < 0:
        raise ValueError("must not be negative")
    try:
        if d > MAX_AMOUNT or d.quantize(CENTS, rounding=ROUND_HALF_UP) > MAX_AMOUNT:
            raise ValueError(f"must not exceed {MAX_AMOUNT}")
        return d.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"not a number: {value!r}")


def add_calendar_months(start: date, months: int) -> date:
    if months < 0:
        raise ValueError("months must not be negative")
    return start + relativedelta(months=months)


def resolve_anchor_date(allotted_date: Optional[date], joining_date: Optional[date], today: Optional[date] = None) -> date:
    if allotted_date is not None:
        return allotted_date
    if joining_date is not None:
        return joining_date
    return today or date.today()


def compute_billing(fees: Number, paid: Optional[Number], package_months: int, anchor_date: date) -> BillingResult:
    """Pending balance and next due date for a fresh or edited enrollment.

    Overpayment never produces a negative pending amount; the excess is
    reported as ``credit_balance`` instead.
    """
    fees = to_money(fees)
    paid = to_money(paid, default=ZERO)
    return BillingResult(
        pending_amount=max(fees - paid, ZERO),
        next_payment_date=add_calendar_months(anchor_date, package_months),
        credit_balance=max(paid - fees, ZERO),
    )


def mark_paid(previous_due: date, months_paid: int = 1) -> BillingResult:
    """Advance the due date after a full payment.

    The new date is anchored on the previous due date rather than today, so
    paying early or late doesn't shift the billing cycle.
    """
    if months_paid < 1:
        raise ValueError("months_paid must be at least 1")
    return BillingResult(
        pending_amount=ZERO,
        next_payment_date=add_calendar_months(previous_due, months_paid),
    )
