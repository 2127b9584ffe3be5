"""
Batch allocations — pick batches for an outbound quantity and deduct them.

Read methods use no locking. allocate() runs under store.atomic() and
reselects with locked rows before writing.
"""

import logging
from decimal import Decimal

from opsman.adapters import get_batch_store
from opsman.exceptions import BatchError
from opsman.records import ZERO, BatchRecommendation, StockBatch, product_key_for, to_decimal
from opsman.selection import recommend_batches

logger = logging.getLogger('opsman')


class BatchAllocations:
    """Batch selection against stored batches."""

    @classmethod
    def available_batches(cls, product, store=None) -> list[StockBatch]:
        """Batches of ``product`` (model instance or product key) with stock left."""
        store = store or get_batch_store()
        return store.fetch_available(product_key_for(product))

    @classmethod
    def available_quantity(cls, product, store=None) -> Decimal:
        return sum(
            (b.quantity_remaining for b in cls.available_batches(product, store)),
            ZERO,
        )

    @classmethod
    def recommend(cls, product, quantity, method=None, store=None) -> BatchRecommendation:
        """
        Suggested batches for ``quantity`` without writing anything.

        Returns:
            BatchRecommendation (is_complete / shortfall / message)
        """
        return recommend_batches(cls.available_batches(product, store), quantity, method)

    @classmethod
    def allocate(cls, product, quantity, method=None, allow_partial=False,
                 store=None) -> BatchRecommendation:
        """
        Take ``quantity`` out of the product's batches.

        Each chosen batch loses the allocated amount from quantity_remaining
        and gains it in quantity_distributed.

        Raises:
            BatchError('INVALID_QUANTITY'): quantity <= 0
            BatchError('INSUFFICIENT_STOCK'): supply short and not allow_partial;
                nothing is written

        Concurrency:
            - Runs under store.atomic()
            - Batches are reselected with lock=True before deciding
        """
        quantity = to_decimal(quantity)
        if quantity <= 0:
            raise BatchError('INVALID_QUANTITY', requested=quantity)

        store = store or get_batch_store()
        key = product_key_for(product)

        with store.atomic():
            batches = store.fetch_available(key, lock=True)
            recommendation = recommend_batches(batches, quantity, method)

            if not recommendation.is_complete and not allow_partial:
                raise BatchError(
                    'INSUFFICIENT_STOCK',
                    available=recommendation.total_selected,
                    requested=quantity,
                    shortfall=recommendation.shortfall,
                )

            for allocation in recommendation.allocations:
                batch = allocation.batch
                store.update(
                    batch.id,
                    quantity_remaining=batch.quantity_remaining - allocation.quantity,
                    quantity_distributed=batch.quantity_distributed + allocation.quantity,
                )

        logger.info(
            "batch.allocated",
            extra={
                "product": key,
                "qty": str(quantity),
                "selected": str(recommendation.total_selected),
                "method": recommendation.method,
                "batches": [a.batch.batch_number for a in recommendation.allocations],
            },
        )
        return recommendation
