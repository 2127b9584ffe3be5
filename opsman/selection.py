"""
Batch selection (FIFO / FEFO / LIFO).

Decides which batches an outbound quantity should be taken from:

    FIFO  oldest manufacturing date first
    FEFO  soonest expiration first; batches without an expiration date
          come after every dated batch, oldest manufactured first
    LIFO  newest manufacturing date first

Selection never touches storage and never mutates the batches it is
given. Partial supply is not an error: the caller reads ``shortfall`` and
decides whether to block the outbound operation.

Examples:
    >>> sel = select_batches(batches, Decimal('12'), SelectionMethod.FIFO)
    >>> [(a.batch.batch_number, a.quantity) for a in sel.allocations]
    [('B-001', Decimal('10')), ('B-002', Decimal('2'))]
"""

from collections.abc import Iterable
from decimal import Decimal

from opsman.conf import opsman_settings
from opsman.exceptions import BatchError
from opsman.models.enums import SelectionMethod
from opsman.records import (
    ZERO,
    BatchAllocation,
    BatchRecommendation,
    BatchSelection,
    StockBatch,
    to_decimal,
)


def _fifo_key(batch: StockBatch):
    return batch.manufacturing_date


def _fefo_key(batch: StockBatch):
    # (0, expiry) sorts every dated batch before (1, ...) undated ones
    if batch.expiration_date is None:
        return (1, batch.manufacturing_date)
    return (0, batch.expiration_date)


def _method(method) -> SelectionMethod:
    try:
        return SelectionMethod(method)
    except ValueError:
        raise BatchError('INVALID_METHOD', method=method) from None


def order_batches(batches: Iterable[StockBatch], method=SelectionMethod.FEFO) -> list[StockBatch]:
    """
    Candidate batches (remaining > 0) in consumption order.

    Sorting is stable: batches with equal keys keep their input order.
    """
    method = _method(method)
    candidates = [b for b in batches if b.quantity_remaining > 0]

    if method == SelectionMethod.FIFO:
        return sorted(candidates, key=_fifo_key)
    if method == SelectionMethod.LIFO:
        return sorted(candidates, key=_fifo_key, reverse=True)
    return sorted(candidates, key=_fefo_key)


def take_greedily(ordered: Iterable[StockBatch], required: Decimal) -> BatchSelection:
    """Walk batches in order, taking min(remaining, still needed) from each."""
    required = to_decimal(required, 'required')
    needed = required
    allocations = []

    for batch in ordered:
        if needed <= 0:
            break
        take = min(batch.quantity_remaining, needed)
        if take <= 0:
            continue
        allocations.append(BatchAllocation(batch=batch, quantity=take))
        needed -= take

    total = sum((a.quantity for a in allocations), ZERO)
    return BatchSelection(allocations=tuple(allocations), total_selected=total, required=required)


def select_batches(batches: Iterable[StockBatch], required,
                   method=SelectionMethod.FEFO) -> BatchSelection:
    """
    Propose an allocation of ``required`` units across ``batches``.

    Args:
        batches: StockBatch records (any order)
        required: Quantity needed. Zero or negative yields an empty selection.
        method: fifo | fefo | lifo

    Returns:
        BatchSelection with allocations, total_selected and shortfall

    Raises:
        BatchError('INVALID_METHOD'): unknown method
    """
    return take_greedily(order_batches(batches, method), required)


def shortfall_message(selection: BatchSelection) -> str | None:
    """Human-readable note for an incomplete selection, None when complete."""
    if selection.shortfall <= 0:
        return None
    return (
        f"Insufficient stock: {selection.total_selected} of {selection.required} "
        f"units available ({selection.shortfall} short)"
    )


def recommend_batches(batches: Iterable[StockBatch], required,
                      method=None) -> BatchRecommendation:
    """
    Run the chosen method (default from settings, normally FEFO) and report
    whether the requirement is fully covered.
    """
    method = _method(method or opsman_settings.DEFAULT_SELECTION_METHOD)
    selection = select_batches(batches, required, method)
    return BatchRecommendation(
        method=method.value,
        selection=selection,
        is_complete=selection.total_selected >= selection.required,
        message=shortfall_message(selection),
    )
