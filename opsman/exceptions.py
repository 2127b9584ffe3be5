"""
Exceptions for Opsman.

All errors carry a structured code for programmatic handling.
"""

from decimal import Decimal
from typing import Any


class BaseError(Exception):
    """
    Structured exception: code + human-readable message + context data.

    Subclasses declare ``_default_messages`` keyed by code.
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class BatchError(BaseError):
    """
    Structured exception for manufacturing batch operations.

    Usage:
        try:
            batches.split(batch_id, [100, 200])
        except BatchError as e:
            if e.code == 'SPLIT_EXCEEDS_REMAINING':
                print(f"Only {e.available} left in batch")
    """

    _default_messages = {
        'INSUFFICIENT_BATCHES': 'Select at least 2 batches to consolidate',
        'BATCH_NOT_FOUND': 'Batch not found',
        'MIXED_PRODUCTS': 'Batches belong to different products',
        'ALREADY_CONSOLIDATED': 'Batch was already consolidated',
        'SPLIT_EXCEEDS_REMAINING': 'Split quantities exceed remaining quantity',
        'INVALID_QUANTITY': 'Invalid quantity (must be positive)',
        'INSUFFICIENT_STOCK': 'Not enough stock across available batches',
        'INVALID_METHOD': 'Unknown batch selection method',
    }

    @property
    def available(self) -> Decimal:
        """Shortcut for data['available']."""
        return self.data.get('available', Decimal('0'))

    @property
    def requested(self) -> Decimal:
        """Shortcut for data['requested']."""
        return self.data.get('requested', Decimal('0'))


class LeaveError(BaseError):
    """Structured exception for time-off allocations."""

    _default_messages = {
        'INSUFFICIENT_BALANCE': 'Not enough hours left in this allocation',
        'NOT_YET_USABLE': 'Allocation is still in its waiting period',
        'INVALID_HOURS': 'Invalid hours (must be positive)',
        'ALREADY_GRANTED': 'Allocations already exist for this year',
        'FRONTLOADED': 'Frontloaded allocations do not accrue per period',
    }


class UploadError(BaseError):
    """Structured exception for batch uploads."""

    _default_messages = {
        'INVALID_BATCH': 'Upload batch failed validation',
        'INVALID_OPTION': 'Invalid upload option',
    }

    @property
    def errors(self) -> list[str]:
        """Shortcut for data['errors']."""
        return self.data.get('errors', [])


class RecordError(BaseError):
    """Raised when a stored record does not match the expected shape."""

    _default_messages = {
        'INVALID_RECORD': 'Stored record is malformed',
    }
