"""
Opsman Admin with Unfold theme.

To use, add 'opsman.contrib.admin_unfold' to INSTALLED_APPS after 'opsman'
(and 'unfold' before 'django.contrib.admin').

The plain admins registered by opsman.admin are replaced by these Unfold
versions. Actions and permissions are inherited unchanged.
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _
from unfold.decorators import display

from opsman.admin import LeaveAllocationAdmin, ManufacturingBatchAdmin, UploadBatchAdmin
from opsman.contrib.admin_unfold.base import BaseModelAdmin, format_date, format_quantity
from opsman.models import LeaveAllocation, ManufacturingBatch, UploadBatch, UploadStatus

logger = logging.getLogger(__name__)

for _model in (ManufacturingBatch, LeaveAllocation, UploadBatch):
    if admin.site.is_registered(_model):
        admin.site.unregister(_model)


# =============================================================================
# MANUFACTURING BATCH ADMIN
# =============================================================================


@admin.register(ManufacturingBatch)
class ManufacturingBatchUnfoldAdmin(ManufacturingBatchAdmin, BaseModelAdmin):
    """Batch admin with remaining-stock and expiry badges."""

    list_display = ['batch_number', 'product_display', 'lot_code', 'manufacturing_date_display',
                    'expiration_date_display', 'remaining_display', 'consolidated_display']

    @display(description=_('Manufactured'))
    def manufacturing_date_display(self, obj):
        return format_date(obj.manufacturing_date)

    @display(description=_('Expires'))
    def expiration_date_display(self, obj):
        return format_date(obj.expiration_date)

    @display(description=_('Remaining'), label=True)
    def remaining_display(self, obj):
        return format_quantity(obj.quantity_remaining, 3)

    @display(
        description=_('Consolidated'),
        label={'MERGED': 'info', 'ACTIVE': 'success'},
    )
    def consolidated_display(self, obj):
        return 'MERGED' if obj.is_consolidated else 'ACTIVE'


# =============================================================================
# LEAVE ALLOCATION ADMIN
# =============================================================================


@admin.register(LeaveAllocation)
class LeaveAllocationUnfoldAdmin(LeaveAllocationAdmin, BaseModelAdmin):
    """Leave allocation admin with remaining-hours badge."""

    list_display = ['employee', 'leave_type', 'year', 'total_hours', 'remaining_display',
                    'accrual_method', 'usable_after_display']

    @display(description=_('Remaining'), label=True)
    def remaining_display(self, obj):
        return format_quantity(obj.remaining_hours)

    @display(description=_('Usable after'))
    def usable_after_display(self, obj):
        return format_date(obj.usable_after)


# =============================================================================
# UPLOAD BATCH ADMIN
# =============================================================================


@admin.register(UploadBatch)
class UploadBatchUnfoldAdmin(UploadBatchAdmin, BaseModelAdmin):
    """Upload batch admin with status badge (read-only)."""

    list_display = ['__str__', 'uploaded_by', 'status_display', 'progress_display',
                    'created_at', 'completed_at']

    @display(
        description=_('Status'),
        label={
            UploadStatus.PROCESSING: 'info',
            UploadStatus.COMPLETED: 'success',
            UploadStatus.FAILED: 'danger',
            UploadStatus.CANCELLED: 'warning',
        },
    )
    def status_display(self, obj):
        return obj.status

    @display(description=_('Progress'))
    def progress_display(self, obj):
        return f"{obj.processed_files}/{obj.total_files} ({obj.failed_files} failed)"
