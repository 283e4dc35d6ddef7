# Generated migration for Promotion and AppliedPromotion models

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenants', '0001_initial'),
        ('orders', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Promotion',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(help_text='Shown on the ticket next to discounted items', max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('promo_type', models.CharField(choices=[('percentage', 'Percentage'), ('fixed_amount', 'Fixed Amount'), ('buy_x_get_y', 'Buy X Get Y'), ('happy_hour', 'Happy Hour'), ('coupon', 'Coupon')], max_length=20)),
                ('discount_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('buy_quantity', models.PositiveIntegerField(blank=True, help_text='Units to buy (buy X get Y only)', null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ('get_quantity', models.PositiveIntegerField(blank=True, help_text='Units given free (buy X get Y only)', null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ('scope', models.CharField(choices=[('order', 'Whole order'), ('product', 'Specific products'), ('category', 'Specific categories')], default='order', max_length=20)),
                ('product_ids', models.JSONField(blank=True, default=list, help_text='Product ids for product scope')),
                ('category_ids', models.JSONField(blank=True, default=list, help_text='Category ids for category scope')),
                ('coupon_code', models.CharField(blank=True, help_text='Coupon code, unique per restaurant (stored upper-case)', max_length=50, null=True)),
                ('min_order_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Minimum order subtotal to qualify (0 = no minimum)', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('max_discount_amount', models.DecimalField(blank=True, decimal_places=2, help_text='Cap on the discount this promotion may give per order', max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('max_uses', models.PositiveIntegerField(blank=True, help_text='Maximum total redemptions', null=True)),
                ('max_uses_per_order', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('current_uses', models.PositiveIntegerField(default=0, help_text='Current total redemption count')),
                ('start_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('end_date', models.DateTimeField(blank=True, help_text='When the promotion ends (null = never)', null=True)),
                ('days_of_week', models.JSONField(blank=True, default=list, help_text='Days the promotion runs, 0 = Sunday (empty = every day)')),
                ('start_time', models.CharField(blank=True, help_text='HH:MM', max_length=5, null=True)),
                ('end_time', models.CharField(blank=True, help_text='HH:MM', max_length=5, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('is_automatic', models.BooleanField(default=True, help_text='Applied without user action')),
                ('priority', models.IntegerField(default=0, help_text='Higher priorities are evaluated first')),
                ('stackable', models.BooleanField(default=False, help_text='Can be combined with other promotions')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='promotions', to='tenants.tenant')),
            ],
            options={
                'verbose_name': 'Promotion',
                'verbose_name_plural': 'Promotions',
                'db_table': 'promotions',
                'ordering': ('-priority', '-created_at'),
                'indexes': [
                    models.Index(fields=['tenant', 'is_active', 'is_automatic'], name='idx_promotion_automatic'),
                    models.Index(fields=['tenant', 'promo_type'], name='idx_promotion_type'),
                    models.Index(fields=['start_date', 'end_date'], name='idx_promotion_dates'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('coupon_code__isnull', False)), fields=('tenant', 'coupon_code'), name='unique_coupon_code_per_tenant'),
                    models.CheckConstraint(condition=models.Q(('max_uses__isnull', True), ('current_uses__lte', models.F('max_uses')), _connector='OR'), name='promotion_uses_within_max'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AppliedPromotion',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('promo_name', models.CharField(max_length=200)),
                ('promo_type', models.CharField(max_length=20)),
                ('discount_amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='applied_promotions', to='orders.order')),
                ('order_item', models.ForeignKey(blank=True, help_text='Discounted item (null for order-level discounts)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='applied_promotions', to='orders.orderitem')),
                ('promotion', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='applied_promotions', to='promotions.promotion')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='applied_promotions', to='tenants.tenant')),
            ],
            options={
                'verbose_name': 'Applied Promotion',
                'verbose_name_plural': 'Applied Promotions',
                'db_table': 'promotion_applied',
                'ordering': ('created_at',),
                'indexes': [
                    models.Index(fields=['order', 'promotion'], name='idx_applied_order_promo'),
                    models.Index(fields=['tenant', '-created_at'], name='idx_applied_tenant_created'),
                ],
            },
        ),
    ]
