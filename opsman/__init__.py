"""
Django Opsman — business operations engine.

Batch selection, consolidation/split, chunked uploads and time-off
allocations.

Usage:
    from opsman import batches, BatchError

    batches.allocate(croissant, 120, method='fefo')
    batches.consolidate([b1.pk, b2.pk])
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'batches':
        from opsman.service import Batches
        return Batches
    elif name == 'TimeOff':
        from opsman.services.timeoff import TimeOff
        return TimeOff
    elif name == 'Uploads':
        from opsman.services.uploads import Uploads
        return Uploads
    elif name == 'BatchError':
        from opsman.exceptions import BatchError
        return BatchError
    elif name == 'LeaveError':
        from opsman.exceptions import LeaveError
        return LeaveError
    elif name == 'UploadError':
        from opsman.exceptions import UploadError
        return UploadError
    elif name == 'ManufacturingBatch':
        from opsman.models.batch import ManufacturingBatch
        return ManufacturingBatch
    elif name == 'LeaveAllocation':
        from opsman.models.leave import LeaveAllocation
        return LeaveAllocation
    elif name == 'UploadBatch':
        from opsman.models.upload import UploadBatch
        return UploadBatch
    elif name == 'SelectionMethod':
        from opsman.models.enums import SelectionMethod
        return SelectionMethod
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'batches',
    'TimeOff',
    'Uploads',
    'BatchError',
    'LeaveError',
    'UploadError',
    'ManufacturingBatch',
    'LeaveAllocation',
    'UploadBatch',
    'SelectionMethod',
]

__version__ = '0.1.0'
