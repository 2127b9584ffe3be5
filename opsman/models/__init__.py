"""
Opsman Models.

- ManufacturingBatch: production batches with consolidation/split audit trail
- LeaveAllocation: yearly time-off entitlement per employee and type
- UploadBatch: progress record for multi-file uploads
"""

from opsman.models.batch import ManufacturingBatch
from opsman.models.enums import AccrualMethod, LeaveType, SelectionMethod, UploadStatus
from opsman.models.leave import LeaveAllocation
from opsman.models.upload import UploadBatch

__all__ = [
    'SelectionMethod',
    'LeaveType',
    'AccrualMethod',
    'UploadStatus',
    'ManufacturingBatch',
    'LeaveAllocation',
    'UploadBatch',
]
