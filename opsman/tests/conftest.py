"""
Pytest fixtures for Opsman tests.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.contrib.contenttypes.models import ContentType

from opsman.adapters import DjangoBatchStore, InMemoryBatchStore, reset_batch_store
from opsman.models import ManufacturingBatch
from opsman.records import StockBatch
from opsman.tests.testapp.models import Item


User = get_user_model()


@pytest.fixture(autouse=True)
def _reset_store():
    """Drop the cached store so settings overrides take effect."""
    reset_batch_store()
    yield
    reset_batch_store()


@pytest.fixture
def today():
    """Fixed 'today' so proration and tenure are deterministic."""
    return date(2026, 6, 15)


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='testuser',
        password='testpass123'
    )


@pytest.fixture
def item(db):
    """Create a test product."""
    return Item.objects.create(name='Croissant', sku='CRO-001')


@pytest.fixture
def other_item(db):
    return Item.objects.create(name='Baguette', sku='BAG-001')


@pytest.fixture
def make_batch():
    """Build an in-memory StockBatch (no storage)."""
    counter = {'n': 0}

    def _make(qty, mfg, expiry=None, **kwargs):
        counter['n'] += 1
        defaults = {
            'id': kwargs.pop('id', f"b{counter['n']}"),
            'batch_number': kwargs.pop('batch_number', f"B-{counter['n']:03d}"),
            'product_key': 'testapp.item:1',
            'quantity_remaining': Decimal(qty),
            'total_quantity_manufactured': Decimal(kwargs.pop('manufactured', qty)),
            'manufacturing_date': mfg,
            'expiration_date': expiry,
        }
        defaults.update(kwargs)
        return StockBatch(**defaults)

    return _make


@pytest.fixture
def memory_store():
    """Empty in-memory store."""
    return InMemoryBatchStore()


@pytest.fixture
def seeded_store():
    """In-memory store with three batches of one product and one of another."""
    store = InMemoryBatchStore()
    store.add(id='a', batch_number='A-001', product_key='testapp.item:1', lot_code='LOT-1',
              total_quantity_manufactured=100, quantity_remaining=40, quantity_labeled=100,
              quantity_distributed=60, manufacturing_date=date(2026, 1, 10),
              expiration_date=date(2026, 9, 1), manufacturing_shift='morning',
              production_line='L1')
    store.add(id='b', batch_number='B-001', product_key='testapp.item:1', lot_code='LOT-1',
              total_quantity_manufactured=50, quantity_remaining=50, quantity_labeled=20,
              quantity_distributed=0, manufacturing_date=date(2026, 2, 5),
              expiration_date=date(2026, 8, 1))
    store.add(id='c', batch_number='C-001', product_key='testapp.item:1', lot_code='LOT-1',
              total_quantity_manufactured=30, quantity_remaining=30,
              manufacturing_date=date(2026, 3, 1))
    store.add(id='x', batch_number='X-001', product_key='testapp.item:2',
              total_quantity_manufactured=10, quantity_remaining=10,
              manufacturing_date=date(2026, 1, 1))
    return store


@pytest.fixture
def orm_store():
    return DjangoBatchStore()


@pytest.fixture
def create_batch(db, item):
    """Create a ManufacturingBatch row for ``item`` (or another product)."""
    ct = ContentType.objects.get_for_model(Item)

    def _create(number, qty, mfg, expiry=None, product=None, **kwargs):
        product = product or item
        return ManufacturingBatch.objects.create(
            batch_number=number,
            product_type=ct,
            product_id=product.pk,
            total_quantity_manufactured=Decimal(kwargs.pop('manufactured', qty)),
            quantity_remaining=Decimal(qty),
            manufacturing_date=mfg,
            expiration_date=expiry,
            **kwargs,
        )

    return _create


@pytest.fixture
def hired_last_year(today):
    return today.replace(year=today.year - 1) - timedelta(days=30)
