"""
Initial migration for Opsman models.
"""

from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Opsman models: ManufacturingBatch, LeaveAllocation, UploadBatch."""

    initial = True

    dependencies = [
        ('contenttypes', '0002_remove_content_type_name'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ManufacturingBatch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('batch_number', models.CharField(max_length=64, unique=True, verbose_name='Batch number')),
                ('product_id', models.PositiveIntegerField(verbose_name='Product ID')),
                ('lot_code', models.CharField(blank=True, default='', max_length=50, verbose_name='Lot')),
                ('total_quantity_manufactured', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='Quantity manufactured')),
                ('quantity_remaining', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='Quantity remaining')),
                ('quantity_labeled', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12, verbose_name='Quantity labeled')),
                ('quantity_distributed', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12, verbose_name='Quantity distributed')),
                ('manufacturing_date', models.DateField(verbose_name='Manufacturing date')),
                ('expiration_date', models.DateField(blank=True, db_index=True, null=True, verbose_name='Expiration date')),
                ('manufacturing_shift', models.CharField(blank=True, default='', max_length=50)),
                ('production_line', models.CharField(blank=True, default='', max_length=100)),
                ('production_notes', models.TextField(blank=True, default='')),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product_type', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to='contenttypes.contenttype', verbose_name='Product type')),
                ('consolidated_into', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='consolidated_from', to='opsman.manufacturingbatch', verbose_name='Consolidated into')),
                ('split_from', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='splits', to='opsman.manufacturingbatch', verbose_name='Split from')),
            ],
            options={
                'verbose_name': 'Manufacturing batch',
                'verbose_name_plural': 'Manufacturing batches',
                'ordering': ['manufacturing_date', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='LeaveAllocation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('leave_type', models.CharField(choices=[('vacation', 'Vacation'), ('sick', 'Sick'), ('personal', 'Personal')], max_length=20, verbose_name='Leave type')),
                ('year', models.PositiveIntegerField(verbose_name='Year')),
                ('total_hours', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=8, verbose_name='Total hours')),
                ('used_hours', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=8, verbose_name='Used hours')),
                ('accrual_method', models.CharField(choices=[('frontload', 'Frontload'), ('per_period', 'Per period')], default='per_period', max_length=20, verbose_name='Accrual method')),
                ('accrual_rate', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=8, verbose_name='Hours per period')),
                ('waiting_period_start', models.DateField(blank=True, null=True)),
                ('usable_after', models.DateField(blank=True, help_text='Empty = usable immediately', null=True, verbose_name='Usable after')),
                ('max_balance', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True, verbose_name='Maximum balance')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('employee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='leave_allocations', to=settings.AUTH_USER_MODEL, verbose_name='Employee')),
            ],
            options={
                'verbose_name': 'Leave allocation',
                'verbose_name_plural': 'Leave allocations',
                'ordering': ['-year', 'leave_type'],
            },
        ),
        migrations.CreateModel(
            name='UploadBatch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(blank=True, default='', max_length=200)),
                ('total_files', models.PositiveIntegerField(default=0)),
                ('processed_files', models.PositiveIntegerField(default=0)),
                ('failed_files', models.PositiveIntegerField(default=0)),
                ('status', models.CharField(choices=[('processing', 'Processing'), ('completed', 'Completed'), ('failed', 'Failed'), ('cancelled', 'Cancelled')], db_index=True, default='processing', max_length=20, verbose_name='Status')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('uploaded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='upload_batches', to=settings.AUTH_USER_MODEL, verbose_name='Uploaded by')),
            ],
            options={
                'verbose_name': 'Upload batch',
                'verbose_name_plural': 'Upload batches',
                'ordering': ['-created_at'],
            },
        ),
        # Indexes
        migrations.AddIndex(
            model_name='manufacturingbatch',
            index=models.Index(fields=['product_type', 'product_id'], name='opsman_batch_product_idx'),
        ),
        migrations.AddIndex(
            model_name='manufacturingbatch',
            index=models.Index(fields=['manufacturing_date'], name='opsman_batch_mfg_date_idx'),
        ),
        migrations.AddConstraint(
            model_name='manufacturingbatch',
            constraint=models.CheckConstraint(condition=models.Q(('quantity_remaining__gte', 0), ('quantity_remaining__lte', models.F('total_quantity_manufactured'))), name='batch_remaining_within_manufactured'),
        ),
        migrations.AddConstraint(
            model_name='leaveallocation',
            constraint=models.UniqueConstraint(fields=('employee', 'leave_type', 'year'), name='unique_leave_allocation_per_year'),
        ),
    ]
