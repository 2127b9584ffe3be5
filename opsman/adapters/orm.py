"""
Django ORM Batch Store — default BatchStore backed by ManufacturingBatch.

Usage:
    from opsman.adapters import get_batch_store

    store = get_batch_store()
    with store.atomic():
        batches = store.fetch([1, 2, 3], lock=True)

Settings:
    OPSMAN = {
        "BATCH_STORE": "opsman.adapters.orm.DjangoBatchStore",
    }
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Any

from django.contrib.contenttypes.models import ContentType
from django.core.exceptions import ImproperlyConfigured
from django.db import transaction
from django.utils import timezone
from django.utils.module_loading import import_string

from opsman.conf import opsman_settings
from opsman.exceptions import RecordError
from opsman.models.batch import ManufacturingBatch
from opsman.protocols.store import BatchStore
from opsman.records import StockBatch

logger = logging.getLogger(__name__)

# Record field -> model attribute, where they differ
_FIELD_MAP = {
    'consolidated_into': 'consolidated_into_id',
    'split_from': 'split_from_id',
}


def _split_product_key(product_key: str) -> tuple[ContentType, int]:
    """'app_label.model:pk' -> (ContentType, pk)."""
    label, _, pk = str(product_key).partition(':')
    app_label, _, model = label.partition('.')
    try:
        ct = ContentType.objects.get_by_natural_key(app_label, model)
        return ct, int(pk)
    except (ContentType.DoesNotExist, ValueError):
        raise RecordError('INVALID_RECORD', field='product_key', value=product_key) from None


def _to_record(batch: ManufacturingBatch) -> dict[str, Any]:
    ct = ContentType.objects.get_for_id(batch.product_type_id)
    return {
        'id': batch.pk,
        'batch_number': batch.batch_number,
        'product_key': f"{ct.app_label}.{ct.model}:{batch.product_id}",
        'lot_code': batch.lot_code,
        'total_quantity_manufactured': batch.total_quantity_manufactured,
        'quantity_remaining': batch.quantity_remaining,
        'quantity_labeled': batch.quantity_labeled,
        'quantity_distributed': batch.quantity_distributed,
        'manufacturing_date': batch.manufacturing_date,
        'expiration_date': batch.expiration_date,
        'manufacturing_shift': batch.manufacturing_shift,
        'production_line': batch.production_line,
        'consolidated_into': batch.consolidated_into_id,
        'split_from': batch.split_from_id,
    }


def _to_model_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {_FIELD_MAP.get(k, k): v for k, v in fields.items()}


class DjangoBatchStore:
    """BatchStore over the Django ORM; atomic() is transaction.atomic()."""

    def atomic(self):
        return transaction.atomic()

    def fetch(self, batch_ids: Iterable[Any], lock: bool = False) -> list[StockBatch]:
        qs = ManufacturingBatch.objects.filter(pk__in=list(batch_ids))
        if lock:
            qs = qs.select_for_update()
        return [StockBatch.from_record(_to_record(b)) for b in qs]

    def fetch_available(self, product_key: str, lock: bool = False) -> list[StockBatch]:
        ct, product_id = _split_product_key(product_key)
        qs = ManufacturingBatch.objects.available().filter(
            product_type=ct,
            product_id=product_id,
        )
        if lock:
            qs = qs.select_for_update()
        return [StockBatch.from_record(_to_record(b)) for b in qs]

    def create(self, fields: dict[str, Any]) -> StockBatch:
        fields = dict(fields)
        fields.pop('id', None)
        ct, product_id = _split_product_key(fields.pop('product_key'))
        batch = ManufacturingBatch.objects.create(
            product_type=ct,
            product_id=product_id,
            **_to_model_fields(fields),
        )
        return StockBatch.from_record(_to_record(batch))

    def update(self, batch_id: Any, **fields: Any) -> None:
        ManufacturingBatch.objects.filter(pk=batch_id).update(
            updated_at=timezone.now(),
            **_to_model_fields(fields),
        )

    def count_splits(self, batch_id: Any) -> int:
        return ManufacturingBatch.objects.filter(split_from_id=batch_id).count()


# Cached store instance
_lock = threading.Lock()
_batch_store: BatchStore | None = None


def get_batch_store() -> BatchStore:
    """
    Return the configured batch store.

    Raises:
        ImproperlyConfigured: If BATCH_STORE is empty or import fails
    """
    global _batch_store

    if _batch_store is None:
        with _lock:
            if _batch_store is None:  # double-checked
                store_path = opsman_settings.BATCH_STORE

                if not store_path:
                    raise ImproperlyConfigured(
                        "OPSMAN['BATCH_STORE'] must be configured. "
                        "Example: 'opsman.adapters.orm.DjangoBatchStore'"
                    )

                try:
                    store_class = import_string(store_path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import batch store '{store_path}': {e}"
                    ) from e
                _batch_store = store_class()
                logger.debug("Loaded batch store: %s", store_path)

    return _batch_store


def reset_batch_store() -> None:
    """Reset the cached store. Useful for testing."""
    global _batch_store
    _batch_store = None
