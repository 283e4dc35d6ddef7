# Generated migration for Order and OrderItem models

import uuid
import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenants', '0001_initial'),
        ('products', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('order_number', models.CharField(help_text='Human-readable order number', max_length=50)),
                ('status', models.CharField(choices=[('open', 'Open'), ('sent', 'Sent to kitchen'), ('served', 'Served'), ('paid', 'Paid'), ('cancelled', 'Cancelled')], default='open', help_text='Current order status', max_length=20)),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Sum of non-void item subtotals', max_digits=12)),
                ('tax_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Sum of non-void item taxes', max_digits=12)),
                ('discount_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Total discount from applied promotions', max_digits=12)),
                ('discount_reason', models.CharField(blank=True, max_length=255, null=True)),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='orders', to='tenants.tenant')),
            ],
            options={
                'verbose_name': 'Order',
                'verbose_name_plural': 'Orders',
                'db_table': 'orders',
                'ordering': ('-created_at',),
                'indexes': [
                    models.Index(fields=['tenant', '-created_at'], name='order_tenant_created_idx'),
                    models.Index(fields=['tenant', 'status'], name='order_tenant_status_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('tenant', 'order_number'), name='order_number_unique_per_tenant'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('product_name', models.CharField(max_length=200)),
                ('line_number', models.PositiveIntegerField(default=0, help_text='Position within the order, assigned on first save')),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('unit_price', models.DecimalField(decimal_places=2, help_text='Unit price at order time', max_digits=12)),
                ('subtotal', models.DecimalField(decimal_places=2, help_text='Line subtotal as persisted by order management', max_digits=12)),
                ('tax_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('is_void', models.BooleanField(default=False, help_text='Voided items are ignored by totals and discounts')),
                ('discount_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('discount_reason', models.CharField(blank=True, max_length=255, null=True)),
                ('promotion_id', models.UUIDField(blank=True, db_index=True, help_text='Promotion currently discounting this item', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='orders.order')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='order_items', to='products.product')),
            ],
            options={
                'verbose_name': 'Order Item',
                'verbose_name_plural': 'Order Items',
                'db_table': 'order_items',
                'ordering': ('line_number', 'created_at'),
                'indexes': [
                    models.Index(fields=['order', 'is_void'], name='order_item_order_void_idx'),
                ],
            },
        ),
    ]
