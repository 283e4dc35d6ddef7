"""
Applied-promotion ledger and item discount attribution.

Rows are only ever created or deleted. The order-level discount is rebuilt
from the sum of the remaining rows after a removal.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from django.db.models import QuerySet, Sum

from apps.common.constants import ZERO_AMOUNT
from apps.common.utils import round_money
from apps.orders.models import OrderItem

from .models import AppliedPromotion

if TYPE_CHECKING:
    from apps.orders.models import Order

    from .calculators import DiscountResult
    from .models import Promotion


class PromotionLedger:
    """Write gateway for AppliedPromotion rows and item discount fields."""

    @staticmethod
    def entries(tenant_id: uuid.UUID, order_id: uuid.UUID) -> QuerySet[AppliedPromotion]:
        return (
            AppliedPromotion.objects.filter(tenant_id=tenant_id, order_id=order_id)
            .select_related("promotion")
            .order_by("created_at")
        )

    @staticmethod
    def total_for_promotion(order: Order, promotion_id: uuid.UUID) -> Decimal | None:
        """Sum of one promotion's rows on the order, or None when it has none."""
        total = AppliedPromotion.objects.filter(
            tenant_id=order.tenant_id, order=order, promotion_id=promotion_id
        ).aggregate(total=Sum("discount_amount"))["total"]
        return None if total is None else round_money(total)

    @staticmethod
    def is_applied(order: Order, promotion: Promotion) -> bool:
        return AppliedPromotion.objects.filter(order=order, promotion=promotion).exists()

    @staticmethod
    def total_for_order(order: Order) -> Decimal:
        total = AppliedPromotion.objects.filter(order=order).aggregate(total=Sum("discount_amount"))["total"]
        return round_money(total or ZERO_AMOUNT)

    @staticmethod
    def clear_order(order: Order) -> int:
        """Drop every ledger row and reset discount fields on non-void items."""
        deleted, _ = AppliedPromotion.objects.filter(order=order).delete()
        OrderItem.objects.filter(order=order, is_void=False).update(
            discount_amount=ZERO_AMOUNT, discount_reason=None, promotion_id=None
        )
        return deleted

    @staticmethod
    def clear_promotion(order: Order, promotion_id: uuid.UUID) -> int:
        """Drop one promotion's rows and its item attributions."""
        OrderItem.objects.filter(order=order, promotion_id=promotion_id).update(
            discount_amount=ZERO_AMOUNT, discount_reason=None, promotion_id=None
        )
        deleted, _ = AppliedPromotion.objects.filter(order=order, promotion_id=promotion_id).delete()
        return deleted

    @staticmethod
    def attribute_items(promotion: Promotion, result: DiscountResult) -> None:
        """Write the per-item breakdown onto the order items."""
        for item_discount in result.item_discounts:
            OrderItem.objects.filter(id=item_discount.item_id).update(
                discount_amount=item_discount.discount,
                discount_reason=promotion.name,
                promotion_id=promotion.id,
            )

    @staticmethod
    def record(
        order: Order,
        promotion: Promotion,
        amount: Decimal,
        order_item_id: uuid.UUID | None = None,
    ) -> AppliedPromotion:
        return AppliedPromotion.objects.create(
            tenant_id=order.tenant_id,
            order=order,
            order_item_id=order_item_id,
            promotion=promotion,
            promo_name=promotion.name,
            promo_type=promotion.promo_type,
            discount_amount=amount,
        )

    @classmethod
    def write_discount(cls, order: Order, promotion: Promotion, result: DiscountResult) -> list[AppliedPromotion]:
        """
        Persist one automatic promotion's discount.

        One row per discounted item, or a single order-level row when the
        result has no per-item breakdown.
        """
        if not result.has_breakdown:
            return [cls.record(order, promotion, result.total_discount)]

        cls.attribute_items(promotion, result)
        return [
            cls.record(order, promotion, item_discount.discount, order_item_id=item_discount.item_id)
            for item_discount in result.item_discounts
        ]
