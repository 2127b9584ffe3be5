"""
Opsman Admin.

Provides views for production debugging:
- ManufacturingBatch: quantities read-only, "consolidate" action
- LeaveAllocation: list + edit
- UploadBatch: read-only progress records
"""

import logging

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from opsman.exceptions import BatchError
from opsman.models import LeaveAllocation, ManufacturingBatch, UploadBatch

logger = logging.getLogger(__name__)


# =========================================================================
# MANUFACTURING BATCH ADMIN
# =========================================================================

@admin.register(ManufacturingBatch)
class ManufacturingBatchAdmin(admin.ModelAdmin):
    """Batch admin — quantities only change via the batch service."""

    list_display = ['batch_number', 'product_display', 'lot_code', 'manufacturing_date',
                    'expiration_date', 'quantity_remaining', 'total_quantity_manufactured',
                    'is_consolidated_display']
    list_filter = ['manufacturing_date', 'expiration_date', 'production_line']
    search_fields = ['batch_number', 'lot_code']
    readonly_fields = ['total_quantity_manufactured', 'quantity_remaining',
                       'quantity_labeled', 'quantity_distributed',
                       'consolidated_into', 'split_from', 'created_at', 'updated_at']
    date_hierarchy = 'manufacturing_date'
    actions = ['consolidate_batches']

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description=_('Product'))
    def product_display(self, obj):
        return str(obj.product) if obj.product else '?'

    @admin.display(description=_('Consolidated?'), boolean=True)
    def is_consolidated_display(self, obj):
        return obj.is_consolidated

    @admin.action(description=_('Consolidate selected batches'))
    def consolidate_batches(self, request, queryset):
        from opsman import batches

        try:
            merged = batches.consolidate(list(queryset.values_list('pk', flat=True)))
        except BatchError as exc:
            logger.warning("consolidate_batches: %s", exc)
            self.message_user(request, exc.message, level=messages.ERROR)
            return

        self.message_user(
            request,
            _('Consolidated into {number}.').format(number=merged.batch_number),
        )


# =========================================================================
# LEAVE ALLOCATION ADMIN
# =========================================================================

@admin.register(LeaveAllocation)
class LeaveAllocationAdmin(admin.ModelAdmin):
    """Leave allocation admin — editable."""

    list_display = ['employee', 'leave_type', 'year', 'total_hours', 'used_hours',
                    'accrual_method', 'usable_after']
    list_filter = ['leave_type', 'year', 'accrual_method']
    search_fields = ['employee__username', 'employee__email']
    readonly_fields = ['created_at', 'updated_at']


# =========================================================================
# UPLOAD BATCH ADMIN (read-only)
# =========================================================================

@admin.register(UploadBatch)
class UploadBatchAdmin(admin.ModelAdmin):
    """Upload batch admin — read-only."""

    list_display = ['__str__', 'uploaded_by', 'status', 'total_files',
                    'processed_files', 'failed_files', 'created_at', 'completed_at']
    list_filter = ['status', 'created_at']
    search_fields = ['name']
    readonly_fields = ['name', 'uploaded_by', 'total_files', 'processed_files',
                       'failed_files', 'status', 'created_at', 'completed_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
