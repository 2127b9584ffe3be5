"""
Domain records — validated, immutable views of stored batches.

Stores hand back plain mappings (ORM values, JSON rows, test fixtures).
StockBatch.from_record() is the single place where those are checked, so
selection and consolidation only ever see well-formed values. Anything
malformed raises RecordError('INVALID_RECORD') instead of being defaulted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from opsman.exceptions import RecordError

ZERO = Decimal('0')


def to_decimal(value: Any, field_name: str = 'quantity') -> Decimal:
    """Coerce int/str/Decimal to Decimal. Floats go through str()."""
    if isinstance(value, bool) or value is None:
        raise RecordError('INVALID_RECORD', field=field_name, value=value)
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise RecordError('INVALID_RECORD', field=field_name, value=value) from None


def _to_date(value: Any, field_name: str, required: bool = True) -> date | None:
    if value is None or value == '':
        if required:
            raise RecordError('INVALID_RECORD', field=field_name, value=value)
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    raise RecordError('INVALID_RECORD', field=field_name, value=value)


def product_key_for(product) -> str:
    """
    Stable string identifying a product instance.

    Accepts an existing key unchanged, so services can take either a model
    instance or the key itself.
    """
    if isinstance(product, str):
        return product
    return f"{product._meta.label_lower}:{product.pk}"


@dataclass(frozen=True)
class StockBatch:
    """A manufacturing batch as seen by selection and consolidation."""

    id: Any
    batch_number: str
    product_key: str
    quantity_remaining: Decimal
    total_quantity_manufactured: Decimal
    manufacturing_date: date
    expiration_date: date | None = None
    quantity_labeled: Decimal = ZERO
    quantity_distributed: Decimal = ZERO
    lot_code: str = ''
    manufacturing_shift: str = ''
    production_line: str = ''
    consolidated_into: Any = None
    split_from: Any = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> StockBatch:
        """
        Build a StockBatch from a stored row.

        Raises:
            RecordError('INVALID_RECORD'): missing id/number/date, bad numbers,
                negative remaining, or remaining above manufactured.
        """
        if record.get('id') is None:
            raise RecordError('INVALID_RECORD', field='id', value=None)
        batch_number = record.get('batch_number')
        if not batch_number:
            raise RecordError('INVALID_RECORD', field='batch_number', value=batch_number,
                              batch_id=record['id'])

        remaining = to_decimal(record.get('quantity_remaining'), 'quantity_remaining')
        manufactured = to_decimal(
            record.get('total_quantity_manufactured', remaining),
            'total_quantity_manufactured',
        )
        if remaining < 0 or remaining > manufactured:
            raise RecordError(
                'INVALID_RECORD',
                field='quantity_remaining',
                value=remaining,
                batch_id=record['id'],
            )

        return cls(
            id=record['id'],
            batch_number=str(batch_number),
            product_key=str(record.get('product_key') or ''),
            quantity_remaining=remaining,
            total_quantity_manufactured=manufactured,
            manufacturing_date=_to_date(record.get('manufacturing_date'), 'manufacturing_date'),
            expiration_date=_to_date(record.get('expiration_date'), 'expiration_date', required=False),
            quantity_labeled=to_decimal(record.get('quantity_labeled') or 0, 'quantity_labeled'),
            quantity_distributed=to_decimal(record.get('quantity_distributed') or 0, 'quantity_distributed'),
            lot_code=record.get('lot_code') or '',
            manufacturing_shift=record.get('manufacturing_shift') or '',
            production_line=record.get('production_line') or '',
            consolidated_into=record.get('consolidated_into'),
            split_from=record.get('split_from'),
        )


@dataclass(frozen=True)
class BatchAllocation:
    """Quantity to take from one batch."""

    batch: StockBatch
    quantity: Decimal

    @property
    def batch_id(self):
        return self.batch.id


@dataclass(frozen=True)
class BatchSelection:
    """Result of running a selection strategy."""

    allocations: tuple[BatchAllocation, ...]
    total_selected: Decimal
    required: Decimal

    @property
    def shortfall(self) -> Decimal:
        return max(self.required - self.total_selected, ZERO)


@dataclass(frozen=True)
class BatchRecommendation:
    """Selection plus presentation details for the caller."""

    method: str
    selection: BatchSelection
    is_complete: bool
    message: str | None = None

    @property
    def allocations(self) -> tuple[BatchAllocation, ...]:
        return self.selection.allocations

    @property
    def total_selected(self) -> Decimal:
        return self.selection.total_selected

    @property
    def shortfall(self) -> Decimal:
        return self.selection.shortfall
