"""
Order Management Services for the Mesa POS promotions engine
Read model for the discount engine and order totals recalculation.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal

from django.db import models
from django.db.models.functions import Coalesce

from apps.common.constants import ZERO_AMOUNT
from apps.common.types import NotFoundError
from apps.common.utils import clamp_non_negative, round_money

from .models import Order, OrderItem

logger = logging.getLogger(__name__)

# ===============================================================================
# ORDER QUERY SERVICE
# ===============================================================================

class OrderQueryService:
    """Tenant-scoped order loading for the promotions engine"""

    @staticmethod
    def get_order(tenant_id: uuid.UUID, order_id: uuid.UUID, *, for_update: bool = False) -> Order:
        """
        Load an order within the tenant.

        With for_update the row is locked until the surrounding transaction
        ends; callers must already be inside transaction.atomic().
        """
        queryset = Order.objects.filter(tenant_id=tenant_id)
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(id=order_id)
        except Order.DoesNotExist:
            raise NotFoundError('Order', order_id) from None

    @staticmethod
    def get_active_items(order: Order) -> list[OrderItem]:
        """Non-void items in line order, with product (and its category id) loaded"""
        return list(
            OrderItem.objects.filter(order=order, is_void=False)
            .select_related('product')
            .order_by('line_number', 'created_at')
        )

# ===============================================================================
# ORDER TOTALS SERVICE
# ===============================================================================

class OrderTotalsService:
    """Recompute order-level totals from current item state"""

    @staticmethod
    def recalculate(order: Order, discount_amount: Decimal) -> Order:
        """
        Sum non-void item subtotals and taxes, then apply the discount.

        total = max(0, subtotal + tax_amount - discount_amount). All four
        fields are written in one UPDATE inside the caller's transaction.
        """
        sums = OrderItem.objects.filter(order=order, is_void=False).aggregate(
            subtotal=Coalesce(models.Sum('subtotal'), models.Value(ZERO_AMOUNT), output_field=models.DecimalField()),
            tax_amount=Coalesce(models.Sum('tax_amount'), models.Value(ZERO_AMOUNT), output_field=models.DecimalField()),
        )

        order.subtotal = round_money(sums['subtotal'])
        order.tax_amount = round_money(sums['tax_amount'])
        order.discount_amount = round_money(discount_amount)
        order.total = round_money(clamp_non_negative(order.subtotal + order.tax_amount - order.discount_amount))
        order.save(update_fields=['subtotal', 'tax_amount', 'discount_amount', 'total', 'updated_at'])

        logger.debug(
            "Order %s totals: subtotal=%s tax=%s discount=%s total=%s",
            order.id, order.subtotal, order.tax_amount, order.discount_amount, order.total,
            extra={'order_id': str(order.id)},
        )
        return order
