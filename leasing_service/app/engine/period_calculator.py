"""Billing period arithmetic.

A period is an inclusive ``[start_date, end_date]`` range. Calendar months and
years are added with ``relativedelta``, which clamps to the last valid day of
the target month. When that clamping happens the clamped day closes the
period, so a monthly lease starting Jan 31 runs through the end of February.
"""
from datetime import date, timedelta
from typing import List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from ..enum.leasing_enum import PaymentCycle
from .errors import InvalidCadenceForUnit, InvalidDateRange

ONE_DAY = timedelta(days=1)

RATE_FIELDS = {
    PaymentCycle.daily: "daily_rate",
    PaymentCycle.monthly: "monthly_rate",
    PaymentCycle.annual: "annual_rate",
}


def compute_end_date(start_date: date, cycle: PaymentCycle) -> date:
    cycle = PaymentCycle(cycle)

    if cycle == PaymentCycle.daily:
        return start_date + ONE_DAY

    step = relativedelta(months=1) if cycle == PaymentCycle.monthly \
        else relativedelta(years=1)
    rolled = start_date + step

    # day-of-month was clamped to the end of a shorter month
    if rolled.day != start_date.day:
        return rolled

    return rolled - ONE_DAY


def next_period(end_date: date, cycle: PaymentCycle) -> Tuple[date, date]:
    """Period that directly follows one ending on ``end_date``."""
    start = end_date + ONE_DAY
    return start, compute_end_date(start, cycle)


def compute_period_dates(start_date: date, cycle: PaymentCycle, periods: int = 1) -> List[Tuple[date, date]]:
    if periods < 1:
        raise ValueError("periods must be at least 1")

    result = [(start_date, compute_end_date(start_date, cycle))]
    while len(result) < periods:
        result.append(next_period(result[-1][1], cycle))
    return result


def rate_for(unit, cycle: PaymentCycle):
    return getattr(unit, RATE_FIELDS[PaymentCycle(cycle)], None)


def is_cadence_available(unit, cycle: PaymentCycle) -> bool:
    return rate_for(unit, cycle) is not None


def available_cadences(unit) -> List[PaymentCycle]:
    return [cycle for cycle in PaymentCycle if is_cadence_available(unit, cycle)]


def require_cadence(unit, cycle: PaymentCycle) -> None:
    if not is_cadence_available(unit, cycle):
        raise InvalidCadenceForUnit(getattr(unit, "id", None), PaymentCycle(cycle).value)


def validate_date_range(
    start_date: date,
    end_date: date,
    cycle: Optional[PaymentCycle] = None,
    strict: bool = False,
) -> None:
    if end_date < start_date:
        raise InvalidDateRange(start_date, end_date)

    if strict and cycle is not None:
        expected = compute_end_date(start_date, cycle)
        if end_date != expected:
            raise InvalidDateRange(
                start_date, end_date,
                f"End date {end_date.isoformat()} does not match the "
                f"{PaymentCycle(cycle).value} period ending {expected.isoformat()}"
            )
