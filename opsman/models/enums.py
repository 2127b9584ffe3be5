"""
Enums for Opsman models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class SelectionMethod(models.TextChoices):
    """
    Order in which batches are consumed.

    FIFO: oldest manufacturing date first.
    FEFO: soonest expiration first; undated batches go last, oldest first.
    LIFO: newest manufacturing date first.
    """
    FIFO = 'fifo', _('First in, first out')
    FEFO = 'fefo', _('First expired, first out')
    LIFO = 'lifo', _('Last in, first out')


class LeaveType(models.TextChoices):
    """Kinds of time off an employee can be granted."""
    VACATION = 'vacation', _('Vacation')
    SICK = 'sick', _('Sick')
    PERSONAL = 'personal', _('Personal')


class AccrualMethod(models.TextChoices):
    """How the hours of an allocation become available."""
    FRONTLOAD = 'frontload', _('Frontload')     # Full amount at creation
    PER_PERIOD = 'per_period', _('Per period')  # Accrues every pay period


class UploadStatus(models.TextChoices):
    """Upload batch lifecycle status."""
    PROCESSING = 'processing', _('Processing')
    COMPLETED = 'completed', _('Completed')
    FAILED = 'failed', _('Failed')
    CANCELLED = 'cancelled', _('Cancelled')
