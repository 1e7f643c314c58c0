"""
Initial migration for Handoverman models.
"""

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Handoverman models: Product, allocator state, Handover, StockMovement, EmployeeProfile."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='IdentifierSequence',
            fields=[
                ('name', models.SlugField(primary_key=True, serialize=False, verbose_name='Name')),
                ('value', models.PositiveIntegerField(default=0, verbose_name='Counter')),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Identifier sequence',
                'verbose_name_plural': 'Identifier sequences',
            },
        ),
        migrations.CreateModel(
            name='RecycledIdentifier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sequence', models.SlugField(verbose_name='Sequence')),
                ('value', models.PositiveIntegerField(verbose_name='Identifier')),
                ('released_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Released at')),
            ],
            options={
                'verbose_name': 'Recycled identifier',
                'verbose_name_plural': 'Recycled identifiers',
                'ordering': ['sequence', 'value', 'released_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('sequence', 'value'), name='unique_recycled_identifier'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sequential_id', models.PositiveIntegerField(blank=True, help_text='Sequential, human-facing identifier', null=True, unique=True, verbose_name='Product ID')),
                ('sequential_id_fallback', models.BooleanField(default=False, help_text='ID was generated while the allocator was unavailable', verbose_name='Fallback ID')),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('description', models.CharField(blank=True, default='', max_length=500, verbose_name='Description')),
                ('unit', models.CharField(choices=[('pcs', 'Pieces'), ('kg', 'Kilograms'), ('lbs', 'Pounds'), ('liters', 'Liters'), ('meters', 'Meters'), ('boxes', 'Boxes')], default='pcs', max_length=10, verbose_name='Unit')),
                ('location', models.CharField(blank=True, default='', max_length=100, verbose_name='Location')),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive'), ('discontinued', 'Discontinued')], db_index=True, default='active', max_length=20, verbose_name='Status')),
                ('stock_quantity', models.PositiveIntegerField(db_index=True, default=0, verbose_name='Stock quantity')),
                ('min_stock', models.PositiveIntegerField(default=0, help_text='Low stock alert threshold', verbose_name='Minimum stock')),
                ('last_restocked_at', models.DateTimeField(blank=True, null=True, verbose_name='Last restocked')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Created by')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Updated by')),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'ordering': ['sequential_id'],
                'indexes': [
                    models.Index(fields=['name', 'status'], name='hm_product_name_status_idx'),
                    models.Index(fields=['stock_quantity', 'status'], name='hm_product_stock_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Handover',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(verbose_name='Quantity')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('handed_over', 'Handed over'), ('returned', 'Returned'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=20, verbose_name='Status')),
                ('reason', models.CharField(blank=True, default='', max_length=500, verbose_name='Reason')),
                ('expected_return_date', models.DateField(blank=True, null=True, verbose_name='Expected return date')),
                ('requested_at', models.DateTimeField(blank=True, null=True, verbose_name='Requested at')),
                ('decision_at', models.DateTimeField(blank=True, null=True, verbose_name='Decided at')),
                ('handed_over_at', models.DateTimeField(blank=True, null=True, verbose_name='Handed over at')),
                ('returned_at', models.DateTimeField(blank=True, null=True, verbose_name='Returned at')),
                ('approval_notes', models.TextField(blank=True, default='', verbose_name='Approval notes')),
                ('rejection_reason', models.TextField(blank=True, default='', verbose_name='Rejection reason')),
                ('return_notes', models.TextField(blank=True, default='', verbose_name='Return notes')),
                ('returned_quantity', models.PositiveIntegerField(blank=True, null=True, verbose_name='Returned quantity')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='handovers', to='handoverman.product', verbose_name='Product')),
                ('employee', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='handovers', to=settings.AUTH_USER_MODEL, verbose_name='Employee')),
                ('requested_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Requested by')),
                ('decided_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Decided by')),
                ('handed_over_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Handed over by')),
                ('returned_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Return recorded by')),
            ],
            options={
                'verbose_name': 'Handover',
                'verbose_name_plural': 'Handovers',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'product'], name='hm_handover_status_prod_idx'),
                    models.Index(fields=['employee', 'status'], name='hm_handover_emp_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('delta', models.IntegerField(help_text='Positive = stock in, negative = stock out', verbose_name='Delta')),
                ('reason', models.CharField(help_text='Required. E.g. "Restock", "Handover #12"', max_length=255, verbose_name='Reason')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='movements', to='handoverman.product', verbose_name='Product')),
                ('handover', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='movements', to='handoverman.handover', verbose_name='Handover')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Stock movement',
                'verbose_name_plural': 'Stock movements',
                'ordering': ['timestamp'],
                'indexes': [
                    models.Index(fields=['product', 'timestamp'], name='hm_movement_product_ts_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='EmployeeProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(choices=[('admin', 'Admin'), ('manager', 'Manager'), ('employee', 'Employee')], db_index=True, default='employee', max_length=20, verbose_name='Role')),
                ('phone', models.CharField(blank=True, default='', max_length=30, verbose_name='Phone')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='inventory_profile', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Employee profile',
                'verbose_name_plural': 'Employee profiles',
            },
        ),
    ]
