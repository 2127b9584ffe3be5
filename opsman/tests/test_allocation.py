"""
Tests for batch allocation against stored batches.
"""

from datetime import date
from decimal import Decimal

import pytest

from opsman import batches
from opsman.exceptions import BatchError, RecordError
from opsman.models import ManufacturingBatch


PRODUCT = 'testapp.item:1'


class TestReads:
    """available_batches / available_quantity / recommend."""

    def test_available_excludes_other_products(self, seeded_store):
        found = batches.available_batches(PRODUCT, store=seeded_store)

        assert {b.id for b in found} == {'a', 'b', 'c'}

    def test_available_quantity(self, seeded_store):
        assert batches.available_quantity(PRODUCT, store=seeded_store) == Decimal('120')

    def test_consolidated_sources_not_available(self, seeded_store):
        batches.consolidate(['a', 'b'], batch_number='M-1', store=seeded_store)

        found = batches.available_batches(PRODUCT, store=seeded_store)

        assert sorted(b.batch_number for b in found) == ['C-001', 'M-1']

    def test_recommend_is_read_only(self, seeded_store):
        rec = batches.recommend(PRODUCT, 60, store=seeded_store)

        assert [(a.batch_id, a.quantity) for a in rec.allocations] == [
            ('b', Decimal('50')),
            ('a', Decimal('10')),
        ]
        assert seeded_store.get('b').quantity_remaining == Decimal('50')

    def test_recommend_fifo(self, seeded_store):
        rec = batches.recommend(PRODUCT, 60, method='fifo', store=seeded_store)

        assert [a.batch_id for a in rec.allocations] == ['a', 'b']


class TestAllocate:
    """allocate() on the in-memory store."""

    def test_deducts_remaining(self, seeded_store):
        rec = batches.allocate(PRODUCT, 60, store=seeded_store)

        assert rec.is_complete
        b, a = seeded_store.get('b'), seeded_store.get('a')
        assert b.quantity_remaining == Decimal('0')
        assert b.quantity_distributed == Decimal('50')
        assert a.quantity_remaining == Decimal('30')
        assert a.quantity_distributed == Decimal('70')

    def test_insufficient_writes_nothing(self, seeded_store):
        with pytest.raises(BatchError) as exc:
            batches.allocate(PRODUCT, 500, store=seeded_store)

        assert exc.value.code == 'INSUFFICIENT_STOCK'
        assert exc.value.available == Decimal('120')
        assert exc.value.data['shortfall'] == Decimal('380')
        assert batches.available_quantity(PRODUCT, store=seeded_store) == Decimal('120')

    def test_partial_allowed(self, seeded_store):
        rec = batches.allocate(PRODUCT, 500, allow_partial=True, store=seeded_store)

        assert rec.is_complete is False
        assert rec.shortfall == Decimal('380')
        assert batches.available_quantity(PRODUCT, store=seeded_store) == Decimal('0')

    @pytest.mark.parametrize('quantity', [0, -5])
    def test_invalid_quantity(self, seeded_store, quantity):
        with pytest.raises(BatchError) as exc:
            batches.allocate(PRODUCT, quantity, store=seeded_store)

        assert exc.value.code == 'INVALID_QUANTITY'

    def test_as_dict(self, seeded_store):
        with pytest.raises(BatchError) as exc:
            batches.allocate(PRODUCT, 500, store=seeded_store)

        payload = exc.value.as_dict()
        assert payload['code'] == 'INSUFFICIENT_STOCK'
        assert payload['data']['requested'] == '500'


@pytest.mark.django_db
class TestOrmAllocate:
    """allocate() through ManufacturingBatch rows."""

    def test_allocate_by_model_instance(self, orm_store, item, create_batch):
        old = create_batch('A-001', 10, date(2026, 1, 1))
        new = create_batch('A-002', 10, date(2026, 2, 1))

        rec = batches.allocate(item, 12, method='fifo', store=orm_store)

        assert [a.batch_id for a in rec.allocations] == [old.pk, new.pk]
        old.refresh_from_db()
        new.refresh_from_db()
        assert old.quantity_remaining == Decimal('0')
        assert new.quantity_remaining == Decimal('8')
        assert new.quantity_distributed == Decimal('2')

    def test_empty_batches_skipped(self, orm_store, item, create_batch):
        create_batch('A-001', 0, date(2026, 1, 1), manufactured=10)
        fresh = create_batch('A-002', 5, date(2026, 2, 1))

        found = batches.available_batches(item, store=orm_store)

        assert [b.id for b in found] == [fresh.pk]

    def test_insufficient_leaves_rows(self, orm_store, item, create_batch):
        create_batch('A-001', 3, date(2026, 1, 1))

        with pytest.raises(BatchError):
            batches.allocate(item, 5, store=orm_store)

        assert ManufacturingBatch.objects.get(batch_number='A-001').quantity_remaining == Decimal('3')

    @pytest.mark.parametrize('key', [
        'nope',
        'nosuchapp.widget:1',
        'opsman.manufacturingbatch:abc',
        'opsman.manufacturingbatch',
    ])
    def test_malformed_product_key(self, orm_store, key):
        with pytest.raises(RecordError) as exc:
            batches.available_batches(key, store=orm_store)

        assert exc.value.code == 'INVALID_RECORD'
        assert exc.value.data['value'] == key

    def test_queryset_helpers(self, item, create_batch):
        create_batch('A-001', 3, date(2026, 1, 1), expiry=date(2026, 2, 1))
        create_batch('A-002', 0, date(2026, 1, 1), manufactured=3)

        assert ManufacturingBatch.objects.available().count() == 1
        assert ManufacturingBatch.objects.expiring_before(date(2026, 3, 1)).count() == 1
        assert ManufacturingBatch.objects.for_product(item).count() == 2
