"""
ManufacturingBatch model — production batches with lot traceability.

A batch is a discrete manufactured quantity. Its remaining quantity is
consumed by outbound allocations; labeled/distributed quantities are
tracked alongside for recalls.

Consolidation and split never delete rows:
- consolidated sources keep a pointer to the batch that absorbed them
- split children keep a pointer to the batch they came from

Usage:
    batch = ManufacturingBatch.objects.create(
        batch_number="B-2026-0142",
        product_type=ct, product_id=item.pk,
        total_quantity_manufactured=500,
        quantity_remaining=500,
        manufacturing_date=date.today(),
    )
"""

from decimal import Decimal

from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.db.models import F, Q
from django.utils.translation import gettext_lazy as _


class ManufacturingBatchQuerySet(models.QuerySet):
    """Custom QuerySet for ManufacturingBatch with convenience filters."""

    def available(self):
        """Batches with stock left that were not merged into another batch."""
        return self.filter(quantity_remaining__gt=0, consolidated_into__isnull=True)

    def expiring_before(self, date):
        """Batches expiring on or before the given date."""
        return self.filter(expiration_date__lte=date, expiration_date__isnull=False)

    def for_product(self, product):
        """Filter batches for a specific product."""
        ct = ContentType.objects.get_for_model(product)
        return self.filter(product_type=ct, product_id=product.pk)


class ManufacturingBatch(models.Model):
    """
    Manufactured quantity of a product, optionally grouped in a lot.

    Quantities:
    - total_quantity_manufactured: what came off the line
    - quantity_remaining: what is still on hand
    - quantity_labeled / quantity_distributed: recall tracking
    """

    batch_number = models.CharField(
        max_length=64,
        unique=True,
        verbose_name=_('Batch number'),
    )

    # Product reference (generic: any product model)
    product_type = models.ForeignKey(
        ContentType,
        on_delete=models.PROTECT,
        verbose_name=_('Product type'),
    )
    product_id = models.PositiveIntegerField(verbose_name=_('Product ID'))
    product = GenericForeignKey('product_type', 'product_id')

    lot_code = models.CharField(
        max_length=50,
        blank=True,
        default='',
        verbose_name=_('Lot'),
    )

    # Quantities
    total_quantity_manufactured = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_('Quantity manufactured'),
    )
    quantity_remaining = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_('Quantity remaining'),
    )
    quantity_labeled = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('Quantity labeled'),
    )
    quantity_distributed = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('Quantity distributed'),
    )

    # Production
    manufacturing_date = models.DateField(verbose_name=_('Manufacturing date'))
    expiration_date = models.DateField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_('Expiration date'),
    )
    manufacturing_shift = models.CharField(max_length=50, blank=True, default='')
    production_line = models.CharField(max_length=100, blank=True, default='')
    production_notes = models.TextField(blank=True, default='')

    # Audit trail
    consolidated_into = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='consolidated_from',
        verbose_name=_('Consolidated into'),
    )
    split_from = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='splits',
        verbose_name=_('Split from'),
    )

    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ManufacturingBatchQuerySet.as_manager()

    class Meta:
        verbose_name = _('Manufacturing batch')
        verbose_name_plural = _('Manufacturing batches')
        ordering = ['manufacturing_date', 'pk']
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_remaining__gte=0)
                & Q(quantity_remaining__lte=F('total_quantity_manufactured')),
                name='batch_remaining_within_manufactured',
            ),
        ]
        indexes = [
            models.Index(fields=['product_type', 'product_id'], name='opsman_batch_product_idx'),
            models.Index(fields=['manufacturing_date'], name='opsman_batch_mfg_date_idx'),
        ]

    @property
    def is_consolidated(self) -> bool:
        return self.consolidated_into_id is not None

    def __str__(self) -> str:
        expiry = f" (exp:{self.expiration_date})" if self.expiration_date else ""
        return f"Batch {self.batch_number}{expiry}: {self.quantity_remaining}"
