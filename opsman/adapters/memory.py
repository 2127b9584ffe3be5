"""
In-memory Batch Store — fake adapter for development and testing.

Implements the BatchStore protocol over a dict of raw rows. Rows are
validated on the way out exactly like the ORM adapter does, so a
malformed seed row surfaces as RecordError.

Usage in settings.py:
    OPSMAN = {
        "BATCH_STORE": "opsman.adapters.memory.InMemoryBatchStore",
    }

WARNING: Data lives in the process only. Do NOT use in production.
"""

from __future__ import annotations

import copy
import itertools
from collections.abc import Iterable
from contextlib import contextmanager
from typing import Any

from django.db import IntegrityError

from opsman.records import StockBatch


class InMemoryBatchStore:
    """
    Dict-backed BatchStore.

    atomic() snapshots all rows on entry and restores them if the block
    raises, giving the same all-or-nothing behaviour as a transaction.
    """

    def __init__(self, rows: Iterable[dict[str, Any]] = ()):
        self.rows: dict[Any, dict[str, Any]] = {}
        self._ids = itertools.count(1)
        for row in rows:
            self.add(**row)

    def add(self, **row: Any) -> Any:
        """Store a raw row as-is (no validation). Returns its id."""
        if row.get('id') is None:
            row['id'] = next(self._ids)
        self.rows[row['id']] = row
        return row['id']

    @contextmanager
    def atomic(self):
        snapshot = copy.deepcopy(self.rows)
        try:
            yield
        except BaseException:
            self.rows = snapshot
            raise

    def fetch(self, batch_ids: Iterable[Any], lock: bool = False) -> list[StockBatch]:
        return [
            StockBatch.from_record(self.rows[batch_id])
            for batch_id in dict.fromkeys(batch_ids)
            if batch_id in self.rows
        ]

    def fetch_available(self, product_key: str, lock: bool = False) -> list[StockBatch]:
        batches = [StockBatch.from_record(row) for row in self.rows.values()
                   if row.get('product_key') == product_key]
        return [b for b in batches if b.quantity_remaining > 0 and b.consolidated_into is None]

    def create(self, fields: dict[str, Any]) -> StockBatch:
        number = fields.get('batch_number')
        if any(row.get('batch_number') == number for row in self.rows.values()):
            raise IntegrityError(f"duplicate batch_number {number!r}")
        row = dict(fields)
        row['id'] = None
        batch_id = self.add(**row)
        return StockBatch.from_record(self.rows[batch_id])

    def update(self, batch_id: Any, **fields: Any) -> None:
        if batch_id in self.rows:
            self.rows[batch_id].update(fields)

    def count_splits(self, batch_id: Any) -> int:
        return sum(1 for row in self.rows.values() if row.get('split_from') == batch_id)

    def get(self, batch_id: Any) -> StockBatch:
        """Validated view of one row (test convenience)."""
        return StockBatch.from_record(self.rows[batch_id])
