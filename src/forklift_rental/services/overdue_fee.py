"""Overdue fee accrual for contracts past their payment due date."""

from __future__ import annotations

import math
from decimal import Decimal

from forklift_rental.config import DAYS_PER_YEAR, OVERDUE_ANNUAL_RATE
from forklift_rental.domain.models import Contract
from forklift_rental.utils.dates import (
    DateLike,
    round_half_up,
    to_datetime,
    to_decimal,
)

SECONDS_PER_DAY = 24 * 60 * 60


def days_late(payment_due_date: DateLike, as_of: DateLike) -> int:
    """Return whole days elapsed since the start of the due date, or -1 if early.

    Partial days count as a full day.

    Midnight of the due date itself is 0 days late, not early, so the fee
    on the due date is the full rental fee. This follows the worked example
    (due 2024-01-01, fee 1,000,000 owed that day) over the looser rule that
    nothing is owed until the due date has passed. Keep the two consistent
    if either changes.
    """
    due = to_datetime(payment_due_date, "payment_due_date")
    as_of_dt = to_datetime(as_of, "as_of")
    if as_of_dt < due:
        return -1
    elapsed = (as_of_dt - due).total_seconds() / SECONDS_PER_DAY
    return math.ceil(elapsed)


def calculate_overdue_fee(
    contract: Contract,
    as_of: DateLike,
    *,
    annual_rate: Decimal = OVERDUE_ANNUAL_RATE,
) -> int:
    """Return the amount currently owed for an overdue contract.

    The nominal annual rate is scaled linearly per late day against the
    rental fee: ``round(rental_fee * (1 + rate / 365 * days_late))`` with
    half-up rounding. Before the due date nothing is owed. On the due date
    itself ``days_late`` is 0 and the full rental fee is returned.
    """
    late = days_late(contract.payment_due_date, as_of)
    if late < 0:
        return 0
    principal = to_decimal(contract.rental_fee, "rental_fee")
    daily_rate = annual_rate / DAYS_PER_YEAR
    fee = principal * (1 + daily_rate * late)
    return max(round_half_up(fee), 0)
