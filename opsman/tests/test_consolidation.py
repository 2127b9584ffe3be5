"""
Tests for batch consolidation and split.

Runs against the in-memory store for the rules and against the ORM store
for persistence and rollback.
"""

import re
from datetime import date
from decimal import Decimal

import pytest
from django.db import IntegrityError

from opsman import batches
from opsman.adapters import InMemoryBatchStore
from opsman.exceptions import BatchError
from opsman.models import ManufacturingBatch
from opsman.services.consolidation import consolidated_batch_number, split_batch_number


class FailingStore(InMemoryBatchStore):
    """Fails the n-th update call."""

    def __init__(self, rows=(), fail_on=1):
        super().__init__(rows)
        self.fail_on = fail_on
        self.updates = 0

    def update(self, batch_id, **fields):
        self.updates += 1
        if self.updates == self.fail_on:
            raise RuntimeError('disk full')
        super().update(batch_id, **fields)


class TestNumbering:

    def test_consolidated_number_format(self):
        number = consolidated_batch_number(3, today=date(2026, 10, 18))

        assert re.fullmatch(r'CONS-202610-03-[0-9A-F]{4}', number)

    def test_split_number(self):
        assert split_batch_number('A-001', 2) == 'A-001-S2'


class TestConsolidate:
    """Tests for batches.consolidate() on the in-memory store."""

    def test_sums_and_dates(self, seeded_store):
        merged = batches.consolidate(['a', 'b'], batch_number='M-1', store=seeded_store)

        assert merged.batch_number == 'M-1'
        assert merged.total_quantity_manufactured == Decimal('150')
        assert merged.quantity_remaining == Decimal('90')
        assert merged.quantity_labeled == Decimal('120')
        assert merged.quantity_distributed == Decimal('60')
        assert merged.manufacturing_date == date(2026, 1, 10)
        assert merged.expiration_date == date(2026, 8, 1)
        assert merged.lot_code == 'LOT-1'
        assert merged.product_key == 'testapp.item:1'

    def test_sources_zeroed_and_linked(self, seeded_store):
        merged = batches.consolidate(['a', 'b', 'c'], store=seeded_store)

        for source_id in ('a', 'b', 'c'):
            source = seeded_store.get(source_id)
            assert source.quantity_remaining == Decimal('0')
            assert source.consolidated_into == merged.id
        assert len(seeded_store.rows) == 5

    def test_generated_number(self, seeded_store):
        merged = batches.consolidate(['a', 'b'], store=seeded_store)

        assert merged.batch_number.startswith('CONS-')
        assert '-02-' in merged.batch_number

    def test_undated_sources_give_undated_batch(self, memory_store):
        for n in (1, 2):
            memory_store.add(id=n, batch_number=f'N-{n}', product_key='p:1',
                             total_quantity_manufactured=5, quantity_remaining=5,
                             manufacturing_date=date(2026, 1, n))

        merged = batches.consolidate([1, 2], store=memory_store)

        assert merged.expiration_date is None

    def test_different_lots_clear_lot_code(self, seeded_store):
        seeded_store.rows['b']['lot_code'] = 'LOT-2'

        merged = batches.consolidate(['a', 'b'], store=seeded_store)

        assert merged.lot_code == ''

    @pytest.mark.parametrize('ids', [[], ['a'], ['a', 'a']])
    def test_fewer_than_two(self, seeded_store, ids):
        with pytest.raises(BatchError) as exc:
            batches.consolidate(ids, store=seeded_store)

        assert exc.value.code == 'INSUFFICIENT_BATCHES'

    def test_none_found(self, seeded_store):
        with pytest.raises(BatchError) as exc:
            batches.consolidate(['nope', 'missing'], store=seeded_store)

        assert exc.value.code == 'BATCH_NOT_FOUND'

    def test_only_one_found(self, seeded_store):
        with pytest.raises(BatchError) as exc:
            batches.consolidate(['a', 'missing'], store=seeded_store)

        assert exc.value.code == 'INSUFFICIENT_BATCHES'

    def test_mixed_products(self, seeded_store):
        with pytest.raises(BatchError) as exc:
            batches.consolidate(['a', 'x'], store=seeded_store)

        assert exc.value.code == 'MIXED_PRODUCTS'
        assert seeded_store.get('a').quantity_remaining == Decimal('40')

    def test_already_consolidated(self, seeded_store):
        batches.consolidate(['a', 'b'], store=seeded_store)

        with pytest.raises(BatchError) as exc:
            batches.consolidate(['a', 'c'], store=seeded_store)

        assert exc.value.code == 'ALREADY_CONSOLIDATED'

    @pytest.mark.parametrize('fail_on', [1, 2])
    def test_failed_update_rolls_back(self, seeded_store, fail_on):
        """A write failing after the new batch exists leaves nothing behind."""
        store = FailingStore(seeded_store.rows.values(), fail_on=fail_on)
        before = {k: dict(v) for k, v in store.rows.items()}

        with pytest.raises(RuntimeError):
            batches.consolidate(['a', 'b'], store=store)

        assert store.rows == before

    def test_uses_configured_store(self, create_batch):
        """Without an explicit store the default ORM store is used."""
        b1 = create_batch('A-001', 10, date(2026, 1, 1))
        b2 = create_batch('A-002', 5, date(2026, 1, 2))

        merged = batches.consolidate([b1.pk, b2.pk], batch_number='M-1')

        assert ManufacturingBatch.objects.get(pk=merged.id).quantity_remaining == Decimal('15')


class TestSplit:
    """Tests for batches.split() on the in-memory store."""

    def test_children_inherit(self, seeded_store):
        children = batches.split('a', [10, 5], store=seeded_store)

        assert [c.batch_number for c in children] == ['A-001-S1', 'A-001-S2']
        assert [c.quantity_remaining for c in children] == [Decimal('10'), Decimal('5')]
        for child in children:
            assert child.split_from == 'a'
            assert child.lot_code == 'LOT-1'
            assert child.manufacturing_date == date(2026, 1, 10)
            assert child.expiration_date == date(2026, 9, 1)
            assert child.manufacturing_shift == 'morning'
            assert child.production_line == 'L1'
            assert child.total_quantity_manufactured == child.quantity_remaining

    def test_original_keeps_rest(self, seeded_store):
        batches.split('a', [10, 5], store=seeded_store)

        assert seeded_store.get('a').quantity_remaining == Decimal('25')

    def test_entire_remaining(self, seeded_store):
        batches.split('b', [50], store=seeded_store)

        assert seeded_store.get('b').quantity_remaining == Decimal('0')

    def test_second_split_continues_numbering(self, seeded_store):
        batches.split('a', [1], store=seeded_store)
        children = batches.split('a', [1, 1], store=seeded_store)

        assert [c.batch_number for c in children] == ['A-001-S2', 'A-001-S3']

    def test_exceeds_remaining(self, seeded_store):
        with pytest.raises(BatchError) as exc:
            batches.split('a', [30, 20], store=seeded_store)

        assert exc.value.code == 'SPLIT_EXCEEDS_REMAINING'
        assert exc.value.available == Decimal('40')
        assert exc.value.requested == Decimal('50')
        assert len(seeded_store.rows) == 4

    @pytest.mark.parametrize('quantities', [[], [5, 0], [-1]])
    def test_invalid_quantities(self, seeded_store, quantities):
        with pytest.raises(BatchError) as exc:
            batches.split('a', quantities, store=seeded_store)

        assert exc.value.code == 'INVALID_QUANTITY'

    def test_unknown_batch(self, seeded_store):
        with pytest.raises(BatchError) as exc:
            batches.split('nope', [1], store=seeded_store)

        assert exc.value.code == 'BATCH_NOT_FOUND'

    def test_failed_update_rolls_back(self, seeded_store):
        store = FailingStore(seeded_store.rows.values(), fail_on=1)
        before = {k: dict(v) for k, v in store.rows.items()}

        with pytest.raises(RuntimeError):
            batches.split('a', [10], store=store)

        assert store.rows == before


@pytest.mark.django_db
class TestOrmStore:
    """Same operations persisted through ManufacturingBatch."""

    def test_consolidate_persists(self, orm_store, item, create_batch):
        b1 = create_batch('A-001', 10, date(2026, 1, 5), expiry=date(2026, 4, 1), lot_code='L')
        b2 = create_batch('A-002', 20, date(2026, 1, 2), expiry=date(2026, 3, 1), lot_code='L')

        merged = batches.consolidate([b1.pk, b2.pk], batch_number='M-1', store=orm_store)

        row = ManufacturingBatch.objects.get(pk=merged.id)
        assert row.quantity_remaining == Decimal('30')
        assert row.manufacturing_date == date(2026, 1, 2)
        assert row.expiration_date == date(2026, 3, 1)
        assert row.product == item
        assert set(row.consolidated_from.values_list('pk', flat=True)) == {b1.pk, b2.pk}

        b1.refresh_from_db()
        assert b1.quantity_remaining == Decimal('0')
        assert b1.is_consolidated

    def test_consolidate_mixed_products(self, orm_store, other_item, create_batch):
        b1 = create_batch('A-001', 10, date(2026, 1, 5))
        b2 = create_batch('B-001', 10, date(2026, 1, 5), product=other_item)

        with pytest.raises(BatchError) as exc:
            batches.consolidate([b1.pk, b2.pk], store=orm_store)

        assert exc.value.code == 'MIXED_PRODUCTS'
        assert ManufacturingBatch.objects.count() == 2

    def test_duplicate_number_rolls_back(self, orm_store, create_batch):
        b1 = create_batch('A-001', 10, date(2026, 1, 5))
        b2 = create_batch('A-002', 10, date(2026, 1, 6))

        with pytest.raises(IntegrityError):
            batches.consolidate([b1.pk, b2.pk], batch_number='A-001', store=orm_store)

        b1.refresh_from_db()
        assert b1.quantity_remaining == Decimal('10')
        assert b1.consolidated_into is None

    def test_split_persists(self, orm_store, create_batch):
        original = create_batch('A-001', 30, date(2026, 1, 5), production_line='L2')

        children = batches.split(original.pk, [10, 5], store=orm_store)

        original.refresh_from_db()
        assert original.quantity_remaining == Decimal('15')
        assert original.splits.count() == 2
        rows = ManufacturingBatch.objects.filter(pk__in=[c.id for c in children]).order_by('batch_number')
        assert [r.batch_number for r in rows] == ['A-001-S1', 'A-001-S2']
        assert all(r.production_line == 'L2' for r in rows)
