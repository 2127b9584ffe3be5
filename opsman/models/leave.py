"""
LeaveAllocation model — yearly time-off entitlement per employee and type.
"""

from datetime import date
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from opsman.models.enums import AccrualMethod, LeaveType


class LeaveAllocation(models.Model):
    """
    Hours of one leave type granted to an employee for a calendar year.

    total_hours is computed once for frontloaded types and only grows via
    accrual for per-period types. used_hours is tracked separately and is
    only changed by TimeOff.use() after a passing balance check.
    """

    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='leave_allocations',
        verbose_name=_('Employee'),
    )
    leave_type = models.CharField(
        max_length=20,
        choices=LeaveType.choices,
        verbose_name=_('Leave type'),
    )
    year = models.PositiveIntegerField(verbose_name=_('Year'))

    total_hours = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Total hours'),
    )
    used_hours = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Used hours'),
    )

    accrual_method = models.CharField(
        max_length=20,
        choices=AccrualMethod.choices,
        default=AccrualMethod.PER_PERIOD,
        verbose_name=_('Accrual method'),
    )
    accrual_rate = models.DecimalField(
        max_digits=8,
        decimal_places=4,
        default=Decimal('0'),
        verbose_name=_('Hours per period'),
    )

    waiting_period_start = models.DateField(null=True, blank=True)
    usable_after = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Usable after'),
        help_text=_('Empty = usable immediately'),
    )
    max_balance = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name=_('Maximum balance'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Leave allocation')
        verbose_name_plural = _('Leave allocations')
        ordering = ['-year', 'leave_type']
        constraints = [
            models.UniqueConstraint(
                fields=['employee', 'leave_type', 'year'],
                name='unique_leave_allocation_per_year',
            ),
        ]

    @property
    def remaining_hours(self) -> Decimal:
        return self.total_hours - self.used_hours

    def is_usable_on(self, on_date: date) -> bool:
        return self.usable_after is None or on_date >= self.usable_after

    def __str__(self) -> str:
        return f"{self.employee} {self.leave_type} {self.year}: {self.remaining_hours}h"
