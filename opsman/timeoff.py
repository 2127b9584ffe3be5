"""
Time-off calculations — pure date and hour arithmetic.

Pure date arithmetic for new-hire allocations. Nothing here reads or
writes storage; TimeOff (services/timeoff.py) persists the results.

Examples:
    - Hired in a previous year: full annual frontload
    - Hired Jan 1 this year: full annual frontload
    - Hired Dec 31 this year: statutory minimum (24h of sick leave)
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_CEILING, Decimal

from opsman.conf import opsman_settings
from opsman.models.enums import AccrualMethod, LeaveType
from opsman.records import ZERO, to_decimal

DAYS_PER_YEAR = Decimal('365.25')


@dataclass(frozen=True)
class BalanceCheck:
    """Outcome of checking a request against an allocation."""

    sufficient: bool
    available: Decimal
    requested: Decimal
    message: str | None = None

    @property
    def shortfall(self) -> Decimal:
        return max(self.requested - self.available, ZERO)


@dataclass(frozen=True)
class AllocationPlan:
    """LeaveAllocation fields computed for a new hire, not yet persisted."""

    leave_type: str
    total_hours: Decimal
    accrual_method: str
    accrual_rate: Decimal = ZERO
    waiting_period_start: date | None = None
    usable_after: date | None = None
    max_balance: Decimal | None = None


def days_in_year(year: int) -> int:
    return (date(year + 1, 1, 1) - date(year, 1, 1)).days


def prorated_frontload_hours(hire_date: date, annual_hours, minimum_hours=0,
                             today: date | None = None) -> int:
    """
    Hours to frontload for a hire, prorated by the part of the year left.

    Hired before this calendar year: full annual amount. Otherwise
    ceil(days_remaining / days_in_year * annual), where days_remaining
    counts the hire date itself. Never below minimum_hours, never above
    annual_hours.
    """
    today = today or date.today()
    annual = to_decimal(annual_hours, 'annual_hours')
    minimum = min(to_decimal(minimum_hours, 'minimum_hours'), annual)

    if hire_date.year < today.year:
        return int(annual)

    year = hire_date.year
    days_remaining = (date(year, 12, 31) - hire_date).days + 1
    hours = (Decimal(days_remaining) * annual / Decimal(days_in_year(year))).to_integral_value(
        rounding=ROUND_CEILING
    )
    return int(min(max(hours, minimum), annual))


def usable_after(hire_date: date, waiting_days: int | None = None) -> date:
    """First day hours become usable after the waiting period."""
    if waiting_days is None:
        waiting_days = opsman_settings.SICK_LEAVE_WAITING_DAYS
    return hire_date + timedelta(days=waiting_days)


def years_of_service(hire_date: date, today: date | None = None) -> int:
    """Completed years since hire: floor(days / 365.25), never negative."""
    today = today or date.today()
    days = (today - hire_date).days
    if days <= 0:
        return 0
    return int(Decimal(days) / DAYS_PER_YEAR)


def vacation_hours_for_tenure(years: int, tiers=None) -> int:
    """
    Annual vacation hours for a tenure. Highest threshold met wins.

    Args:
        years: Completed years of service
        tiers: Iterable of (min_years, hours); defaults to settings
    """
    tiers = tiers if tiers is not None else opsman_settings.VACATION_TENURE_TIERS
    hours = 0
    best = None
    for threshold, tier_hours in tiers:
        if years >= threshold and (best is None or threshold > best):
            best = threshold
            hours = tier_hours
    return hours


def check_balance(total_hours, used_hours, requested_hours) -> BalanceCheck:
    """
    Can ``requested_hours`` be taken from an allocation?

    Never mutates anything; the caller records usage after a passing check.
    """
    total = to_decimal(total_hours, 'total_hours')
    used = to_decimal(used_hours, 'used_hours')
    requested = to_decimal(requested_hours, 'requested_hours')
    available = max(total - used, ZERO)

    if requested <= available:
        return BalanceCheck(sufficient=True, available=available, requested=requested)

    return BalanceCheck(
        sufficient=False,
        available=available,
        requested=requested,
        message=(
            f"Insufficient balance: {available} hours available, "
            f"{requested} requested ({requested - available} short)"
        ),
    )


def accrue_hours(total_hours, rate, periods: int = 1, max_balance=None) -> Decimal:
    """
    New total after ``periods`` pay periods, capped at max_balance.

    A balance already above the cap is kept as is; accrual never lowers it.
    """
    current = to_decimal(total_hours, 'total_hours')
    total = current + to_decimal(rate, 'rate') * periods
    if max_balance is not None:
        total = min(total, max(to_decimal(max_balance, 'max_balance'), current))
    return total


def per_period_rate(annual_hours) -> Decimal:
    periods = opsman_settings.PAY_PERIODS_PER_YEAR
    return (to_decimal(annual_hours, 'annual_hours') / periods).quantize(Decimal('0.0001'))


def initial_allocations(hire_date: date, today: date | None = None) -> list[AllocationPlan]:
    """
    Allocations for a new hire in the current year.

    - vacation: tenure-banded hours, accrued per pay period
    - sick: frontloaded, prorated, statutory minimum, waiting period, cap
    - personal: flat hours, accrued per pay period
    """
    today = today or date.today()
    conf = opsman_settings

    vacation = vacation_hours_for_tenure(years_of_service(hire_date, today))
    sick = prorated_frontload_hours(
        hire_date,
        conf.SICK_LEAVE_ANNUAL_HOURS,
        conf.SICK_LEAVE_MINIMUM_HOURS,
        today=today,
    )
    sick_cap = conf.SICK_LEAVE_MAX_BALANCE
    personal = conf.PERSONAL_ANNUAL_HOURS

    return [
        AllocationPlan(
            leave_type=LeaveType.VACATION,
            total_hours=ZERO,
            accrual_method=AccrualMethod.PER_PERIOD,
            accrual_rate=per_period_rate(vacation),
            max_balance=Decimal(vacation),
        ),
        AllocationPlan(
            leave_type=LeaveType.SICK,
            total_hours=Decimal(sick),
            accrual_method=AccrualMethod.FRONTLOAD,
            waiting_period_start=hire_date,
            usable_after=usable_after(hire_date, conf.SICK_LEAVE_WAITING_DAYS),
            max_balance=Decimal(sick_cap) if sick_cap is not None else None,
        ),
        AllocationPlan(
            leave_type=LeaveType.PERSONAL,
            total_hours=ZERO,
            accrual_method=AccrualMethod.PER_PERIOD,
            accrual_rate=per_period_rate(personal),
            max_balance=Decimal(personal),
        ),
    ]
