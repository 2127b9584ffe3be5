"""
Batch consolidation and split.

Both operations issue several writes (create new rows, then update the
source rows). They run inside a single store.atomic() block, so a failure
in a later write leaves storage exactly as it was. Source rows are never
deleted: consolidated sources point at the new batch, split children
point at their origin.
"""

import logging
import uuid
from collections.abc import Iterable
from datetime import date
from typing import Any

from opsman.adapters import get_batch_store
from opsman.exceptions import BatchError
from opsman.records import ZERO, StockBatch, to_decimal

logger = logging.getLogger('opsman')


def consolidated_batch_number(count: int, today: date | None = None) -> str:
    """CONS-<YYYYMM>-<count>-<suffix>, e.g. CONS-202610-03-9F2A."""
    today = today or date.today()
    return f"CONS-{today:%Y%m}-{count:02d}-{uuid.uuid4().hex[:4].upper()}"


def split_batch_number(original: str, sequence: int) -> str:
    return f"{original}-S{sequence}"


def _consolidated_fields(batches: list[StockBatch], batch_number: str) -> dict[str, Any]:
    expirations = [b.expiration_date for b in batches if b.expiration_date is not None]
    lots = {b.lot_code for b in batches}

    return {
        'batch_number': batch_number,
        'product_key': batches[0].product_key,
        'lot_code': lots.pop() if len(lots) == 1 else '',
        'total_quantity_manufactured': sum((b.total_quantity_manufactured for b in batches), ZERO),
        'quantity_remaining': sum((b.quantity_remaining for b in batches), ZERO),
        'quantity_labeled': sum((b.quantity_labeled for b in batches), ZERO),
        'quantity_distributed': sum((b.quantity_distributed for b in batches), ZERO),
        'manufacturing_date': min(b.manufacturing_date for b in batches),
        'expiration_date': min(expirations) if expirations else None,
    }


class BatchConsolidation:
    """Merge several batches into one, or split one into several."""

    @classmethod
    def consolidate(cls, batch_ids: Iterable[Any], batch_number: str | None = None,
                    store=None) -> StockBatch:
        """
        Merge batches of the same product into one new batch.

        The new batch sums manufactured/labeled/distributed/remaining
        quantities and takes the earliest manufacturing date. Every source
        ends with quantity_remaining=0 and consolidated_into=<new id>.

        Args:
            batch_ids: At least 2 distinct batch ids
            batch_number: Number for the new batch (generated when omitted)

        Returns:
            The consolidated StockBatch

        Raises:
            BatchError('INSUFFICIENT_BATCHES'): fewer than 2 ids
            BatchError('BATCH_NOT_FOUND'): none of the ids exist
            BatchError('MIXED_PRODUCTS'): batches of different products
            BatchError('ALREADY_CONSOLIDATED'): a source was merged before
        """
        ids = list(dict.fromkeys(batch_ids))
        if len(ids) < 2:
            raise BatchError('INSUFFICIENT_BATCHES', count=len(ids))

        store = store or get_batch_store()

        with store.atomic():
            batches = store.fetch(ids, lock=True)
            if not batches:
                raise BatchError('BATCH_NOT_FOUND', batch_ids=ids)
            if len(batches) < 2:
                raise BatchError('INSUFFICIENT_BATCHES', count=len(batches))

            if len({b.product_key for b in batches}) > 1:
                raise BatchError('MIXED_PRODUCTS', batch_ids=ids)

            merged = [b.batch_number for b in batches if b.consolidated_into is not None]
            if merged:
                raise BatchError('ALREADY_CONSOLIDATED', batches=merged)

            number = batch_number or consolidated_batch_number(len(batches))
            consolidated = store.create(_consolidated_fields(batches, number))

            for batch in batches:
                store.update(
                    batch.id,
                    quantity_remaining=ZERO,
                    consolidated_into=consolidated.id,
                )

        logger.info(
            "batch.consolidated",
            extra={
                "batch": consolidated.batch_number,
                "sources": [b.batch_number for b in batches],
                "qty": str(consolidated.quantity_remaining),
            },
        )
        return consolidated

    @classmethod
    def split(cls, batch_id: Any, quantities: Iterable, store=None) -> list[StockBatch]:
        """
        Carve new batches out of one batch.

        Each new batch inherits product, lot, manufacturing date, shift, line
        and expiration date, and is numbered <original>-S<n>. The original
        keeps what was not split off.

        Args:
            batch_id: Batch to split
            quantities: One positive quantity per new batch

        Returns:
            The new batches, in the order of ``quantities``

        Raises:
            BatchError('INVALID_QUANTITY'): empty list or a quantity <= 0
            BatchError('BATCH_NOT_FOUND'): unknown batch
            BatchError('SPLIT_EXCEEDS_REMAINING'): sum > quantity_remaining
        """
        quantities = [to_decimal(q) for q in quantities]
        if not quantities or any(q <= 0 for q in quantities):
            raise BatchError('INVALID_QUANTITY', quantities=quantities)

        total = sum(quantities, ZERO)
        store = store or get_batch_store()

        with store.atomic():
            found = store.fetch([batch_id], lock=True)
            if not found:
                raise BatchError('BATCH_NOT_FOUND', batch_id=batch_id)
            original = found[0]

            if total > original.quantity_remaining:
                raise BatchError(
                    'SPLIT_EXCEEDS_REMAINING',
                    available=original.quantity_remaining,
                    requested=total,
                )

            offset = store.count_splits(original.id)
            children = [
                store.create({
                    'batch_number': split_batch_number(original.batch_number, offset + n),
                    'product_key': original.product_key,
                    'lot_code': original.lot_code,
                    'total_quantity_manufactured': quantity,
                    'quantity_remaining': quantity,
                    'manufacturing_date': original.manufacturing_date,
                    'expiration_date': original.expiration_date,
                    'manufacturing_shift': original.manufacturing_shift,
                    'production_line': original.production_line,
                    'split_from': original.id,
                })
                for n, quantity in enumerate(quantities, start=1)
            ]

            store.update(original.id, quantity_remaining=original.quantity_remaining - total)

        logger.info(
            "batch.split",
            extra={
                "batch": original.batch_number,
                "into": [c.batch_number for c in children],
                "qty": str(total),
            },
        )
        return children
