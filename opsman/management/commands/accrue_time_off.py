"""
Management command to accrue per-period time off.

Usage:
    python manage.py accrue_time_off
    python manage.py accrue_time_off --periods 2
    python manage.py accrue_time_off --dry-run
"""

from datetime import date

from django.core.management.base import BaseCommand

from opsman.models import AccrualMethod, LeaveAllocation
from opsman.services.timeoff import TimeOff


class Command(BaseCommand):
    """Accrue one (or more) pay periods on per-period allocations."""

    help = 'Accrues pay-period time off for the current year'

    def add_arguments(self, parser):
        parser.add_argument(
            '--periods',
            type=int,
            default=1,
            help='Number of pay periods to accrue'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Shows what would be accrued without saving'
        )

    def handle(self, *args, **options):
        allocations = LeaveAllocation.objects.filter(
            year=date.today().year,
            accrual_method=AccrualMethod.PER_PERIOD,
        )

        if options['dry_run']:
            self.stdout.write(f'{allocations.count()} allocation(s) would accrue')
            return

        updated = 0
        for allocation in allocations:
            before = allocation.total_hours
            if TimeOff.accrue(allocation, periods=options['periods']).total_hours != before:
                updated += 1

        self.stdout.write(
            self.style.SUCCESS(f'{updated} allocation(s) accrued')
        )
