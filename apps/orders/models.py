"""
Order Management models for the Mesa POS promotions engine
Orders and line items as seen by the discount engine: persisted subtotals
and taxes are trusted, discount fields are owned by the promotions app.
"""

import uuid
from typing import Any, ClassVar

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.common.constants import MONEY_DECIMAL_PLACES, MONEY_MAX_DIGITS, ZERO_AMOUNT

# ===============================================================================
# ORDER MANAGEMENT MODELS
# ===============================================================================

class Order(models.Model):
    """
    Restaurant order (table, counter or delivery ticket).
    Invariant: total = max(0, subtotal + tax_amount - discount_amount).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(
        'tenants.Tenant',
        on_delete=models.CASCADE,
        related_name='orders'
    )

    order_number = models.CharField(
        max_length=50,
        help_text=_("Human-readable order number")
    )

    STATUS_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        ('open', _('Open')),               # Items can still be added
        ('sent', _('Sent to kitchen')),
        ('served', _('Served')),
        ('paid', _('Paid')),
        ('cancelled', _('Cancelled')),
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='open',
        help_text=_("Current order status")
    )

    # Financial totals (two decimal places)
    subtotal = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        default=ZERO_AMOUNT,
        help_text=_("Sum of non-void item subtotals")
    )
    tax_amount = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        default=ZERO_AMOUNT,
        help_text=_("Sum of non-void item taxes")
    )
    discount_amount = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        default=ZERO_AMOUNT,
        help_text=_("Total discount from applied promotions")
    )
    discount_reason = models.CharField(max_length=255, blank=True, null=True)
    total = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        default=ZERO_AMOUNT,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'orders'
        verbose_name = _('Order')
        verbose_name_plural = _('Orders')
        ordering: ClassVar[tuple[str, ...]] = ('-created_at',)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=['tenant', '-created_at'], name='order_tenant_created_idx'),
            models.Index(fields=['tenant', 'status'], name='order_tenant_status_idx'),
        )
        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.UniqueConstraint(fields=['tenant', 'order_number'], name='order_number_unique_per_tenant'),
        ]

    def __str__(self) -> str:
        return f"Order {self.order_number}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        """Auto-generate order number before saving"""
        if not self.order_number:
            self.generate_order_number()
        super().save(*args, **kwargs)

    def generate_order_number(self) -> None:
        """Generate an order number unique within the tenant for today"""
        # Format: ORD-YYYYMMDD-XXXXXX
        date_part = timezone.localtime().strftime('%Y%m%d')
        prefix = f"ORD-{date_part}-"
        today_orders = Order.objects.filter(
            tenant_id=self.tenant_id,
            order_number__startswith=prefix,
        ).count()
        self.order_number = f"{prefix}{str(today_orders + 1).zfill(6)}"


class OrderItem(models.Model):
    """
    Line item within an order.
    Discount fields carry at most one promotion's attribution at a time.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='items'
    )
    product = models.ForeignKey(
        'products.Product',
        on_delete=models.PROTECT,
        related_name='order_items'
    )
    # Snapshot of the menu name at order time
    product_name = models.CharField(max_length=200)
    line_number = models.PositiveIntegerField(
        default=0,
        help_text=_("Position within the order, assigned on first save")
    )

    quantity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)]
    )
    unit_price = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        help_text=_("Unit price at order time")
    )
    subtotal = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        help_text=_("Line subtotal as persisted by order management")
    )
    tax_amount = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        default=ZERO_AMOUNT,
    )
    is_void = models.BooleanField(default=False, help_text=_("Voided items are ignored by totals and discounts"))

    # Promotion attribution
    discount_amount = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        default=ZERO_AMOUNT,
    )
    discount_reason = models.CharField(max_length=255, blank=True, null=True)
    promotion_id = models.UUIDField(
        blank=True,
        null=True,
        db_index=True,
        help_text=_("Promotion currently discounting this item")
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'order_items'
        verbose_name = _('Order Item')
        verbose_name_plural = _('Order Items')
        ordering: ClassVar[tuple[str, ...]] = ('line_number', 'created_at')
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=['order', 'is_void'], name='order_item_order_void_idx'),
        )

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.line_number:
            last = (
                OrderItem.objects.filter(order_id=self.order_id)
                .aggregate(models.Max('line_number'))['line_number__max']
            )
            self.line_number = (last or 0) + 1
        super().save(*args, **kwargs)

    @property
    def category_id(self) -> uuid.UUID | None:
        return self.product.category_id
