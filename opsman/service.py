"""
Batch Service — the single public interface for batch operations.

Usage:
    from opsman import batches, BatchError

    batches.recommend(croissant, 120)             # which batches, no writes
    batches.allocate(croissant, 120)              # deduct from chosen batches
    batches.consolidate([b1.pk, b2.pk, b3.pk])    # merge into one batch
    batches.split(b1.pk, [100, 200])              # carve two batches out

Every method accepts ``store=`` to run against a specific BatchStore
(defaults to settings OPSMAN['BATCH_STORE']).
"""

from opsman.services.allocation import BatchAllocations
from opsman.services.consolidation import BatchConsolidation


class Batches(BatchAllocations, BatchConsolidation):
    """
    Single interface for manufacturing batch operations.

    IMPORTANT: allocate(), consolidate() and split() perform several writes
    inside one store.atomic() block. See each method's docstring.
    """
