"""
Time-off service — persist and consume LeaveAllocation rows.

Calculations live in opsman.timeoff; this module only stores their
results. State-changing methods use transaction.atomic() and lock the
allocation row before checking it.
"""

import logging
from datetime import date
from decimal import Decimal

from django.db import transaction

from opsman.exceptions import LeaveError
from opsman.models.enums import AccrualMethod
from opsman.models.leave import LeaveAllocation
from opsman.records import to_decimal
from opsman.timeoff import BalanceCheck, accrue_hours, check_balance, initial_allocations

logger = logging.getLogger('opsman')


class TimeOff:
    """Leave allocation lifecycle (grant, check, use, accrue)."""

    @classmethod
    def grant_initial(cls, employee, hire_date: date, today: date | None = None) -> list[LeaveAllocation]:
        """
        Create this year's vacation, sick and personal allocations for a hire.

        Raises:
            LeaveError('ALREADY_GRANTED'): employee already has allocations
                for the current year
        """
        today = today or date.today()
        plans = initial_allocations(hire_date, today=today)

        with transaction.atomic():
            if LeaveAllocation.objects.filter(employee=employee, year=today.year).exists():
                raise LeaveError('ALREADY_GRANTED', employee=employee.pk, year=today.year)

            allocations = LeaveAllocation.objects.bulk_create([
                LeaveAllocation(
                    employee=employee,
                    year=today.year,
                    leave_type=plan.leave_type,
                    total_hours=plan.total_hours,
                    accrual_method=plan.accrual_method,
                    accrual_rate=plan.accrual_rate,
                    waiting_period_start=plan.waiting_period_start,
                    usable_after=plan.usable_after,
                    max_balance=plan.max_balance,
                )
                for plan in plans
            ])

        logger.info(
            "timeoff.granted",
            extra={
                "employee": employee.pk,
                "year": today.year,
                "hours": {a.leave_type: str(a.total_hours) for a in allocations},
            },
        )
        return allocations

    @classmethod
    def check(cls, allocation: LeaveAllocation, hours, on_date: date | None = None) -> BalanceCheck:
        """Balance check that also honours the waiting period."""
        on_date = on_date or date.today()
        result = check_balance(allocation.total_hours, allocation.used_hours, hours)

        if result.sufficient and not allocation.is_usable_on(on_date):
            return BalanceCheck(
                sufficient=False,
                available=result.available,
                requested=result.requested,
                message=f"Hours become usable on {allocation.usable_after.isoformat()}",
            )
        return result

    @classmethod
    def use(cls, allocation: LeaveAllocation, hours, on_date: date | None = None) -> LeaveAllocation:
        """
        Record ``hours`` of usage against an allocation.

        Raises:
            LeaveError('INVALID_HOURS'): hours <= 0
            LeaveError('NOT_YET_USABLE'): still in waiting period
            LeaveError('INSUFFICIENT_BALANCE'): not enough hours left

        Concurrency:
            - Runs under transaction.atomic()
            - Uses select_for_update() on the allocation
        """
        hours = to_decimal(hours, 'hours')
        if hours <= 0:
            raise LeaveError('INVALID_HOURS', requested=hours)

        on_date = on_date or date.today()

        with transaction.atomic():
            locked = LeaveAllocation.objects.select_for_update().get(pk=allocation.pk)

            if not locked.is_usable_on(on_date):
                raise LeaveError('NOT_YET_USABLE', usable_after=locked.usable_after)

            result = check_balance(locked.total_hours, locked.used_hours, hours)
            if not result.sufficient:
                raise LeaveError(
                    'INSUFFICIENT_BALANCE',
                    result.message,
                    available=result.available,
                    requested=hours,
                )

            locked.used_hours += hours
            locked.save(update_fields=['used_hours', 'updated_at'])

        logger.info(
            "timeoff.used",
            extra={
                "allocation_id": locked.pk,
                "leave_type": locked.leave_type,
                "hours": str(hours),
                "remaining": str(locked.remaining_hours),
            },
        )
        return locked

    @classmethod
    def accrue(cls, allocation: LeaveAllocation, periods: int = 1) -> LeaveAllocation:
        """
        Add ``periods`` pay periods of accrual, capped at max_balance.

        Raises:
            LeaveError('FRONTLOADED'): allocation is frontloaded
        """
        if allocation.accrual_method == AccrualMethod.FRONTLOAD:
            raise LeaveError('FRONTLOADED', allocation_id=allocation.pk)

        with transaction.atomic():
            locked = LeaveAllocation.objects.select_for_update().get(pk=allocation.pk)
            new_total = accrue_hours(locked.total_hours, locked.accrual_rate, periods, locked.max_balance)
            if new_total != locked.total_hours:
                locked.total_hours = new_total.quantize(Decimal('0.01'))
                locked.save(update_fields=['total_hours', 'updated_at'])

        return locked
