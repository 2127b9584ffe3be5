"""
Batch Store Protocol — interface for batch persistence.

Services receive a store explicitly (or load the configured one via
``opsman.adapters.get_batch_store``) instead of reaching for a global
client, so tests can swap in ``InMemoryBatchStore``.

Stores return validated ``StockBatch`` records; raw rows never leave the
adapter.
"""

from __future__ import annotations

from collections.abc import Iterable
from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

from opsman.records import StockBatch


@runtime_checkable
class BatchStore(Protocol):
    """
    Persistence operations used by allocation and consolidation.

    Multi-step writes are wrapped in ``atomic()``: either every write inside
    the block is kept or none is.
    """

    def atomic(self) -> AbstractContextManager:
        """
        Transaction boundary for a sequence of writes.

        Returns:
            Context manager; an exception inside rolls back all writes
        """
        ...

    def fetch(self, batch_ids: Iterable[Any], lock: bool = False) -> list[StockBatch]:
        """
        Load batches by id. Unknown ids are omitted.

        Args:
            batch_ids: Batch identifiers
            lock: Lock rows until the enclosing atomic() block ends
        """
        ...

    def fetch_available(self, product_key: str, lock: bool = False) -> list[StockBatch]:
        """Batches of a product with remaining stock, not consolidated."""
        ...

    def create(self, fields: dict[str, Any]) -> StockBatch:
        """
        Insert a batch.

        Args:
            fields: StockBatch field values (without id)

        Returns:
            The stored batch, with its new id
        """
        ...

    def update(self, batch_id: Any, **fields: Any) -> None:
        """Set fields on one batch."""
        ...

    def count_splits(self, batch_id: Any) -> int:
        """Number of batches already split off ``batch_id``."""
        ...
