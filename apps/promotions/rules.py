"""
Discount rules for the promotions engine.

A Promotion row is converted into one tagged rule variant carrying only the
fields its algorithm needs, plus an EligibilityScope describing which order
lines it may touch. The calculator dispatches on the variant type.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from apps.common.constants import PERCENT_DIVISOR

from .exceptions import PromotionValidationError

if TYPE_CHECKING:
    from apps.orders.models import OrderItem

    from .models import Promotion

# Buy X get Y defaults when quantities are missing: buy 2, get 1 free
DEFAULT_BUY_QUANTITY = 2
DEFAULT_GET_QUANTITY = 1


# ===============================================================================
# Order lines
# ===============================================================================


@dataclass(frozen=True)
class DiscountLine:
    """Snapshot of one non-void order item as seen by the calculator."""

    item_id: uuid.UUID
    product_id: uuid.UUID
    category_id: uuid.UUID | None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    @classmethod
    def from_item(cls, item: OrderItem) -> DiscountLine:
        return cls(
            item_id=item.id,
            product_id=item.product_id,
            category_id=item.category_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
        )


# ===============================================================================
# Rule variants
# ===============================================================================


@dataclass(frozen=True)
class PercentageDiscount:
    """Percent off every eligible line (percentage, happy hour, coupons <= 100)."""

    percent: Decimal


@dataclass(frozen=True)
class FixedAmountDiscount:
    """
    Fixed currency amount.
    per_item=False shares the amount across eligible lines (order scope);
    per_item=True gives the amount to each eligible line, capped at its subtotal.
    """

    amount: Decimal
    per_item: bool


@dataclass(frozen=True)
class BuyXGetYDiscount:
    buy_quantity: int
    get_quantity: int

    @property
    def group_size(self) -> int:
        return self.buy_quantity + self.get_quantity


@dataclass(frozen=True)
class FlatOrderDiscount:
    """Flat order-level amount with no per-item breakdown (coupons > 100)."""

    amount: Decimal


DiscountRule = PercentageDiscount | FixedAmountDiscount | BuyXGetYDiscount | FlatOrderDiscount


def build_discount_rule(promotion: Promotion) -> DiscountRule:
    value = promotion.discount_value
    match promotion.promo_type:
        case "percentage" | "happy_hour":
            return PercentageDiscount(percent=value)
        case "fixed_amount":
            return FixedAmountDiscount(amount=value, per_item=promotion.scope != "order")
        case "buy_x_get_y":
            return BuyXGetYDiscount(
                buy_quantity=promotion.buy_quantity or DEFAULT_BUY_QUANTITY,
                get_quantity=promotion.get_quantity or DEFAULT_GET_QUANTITY,
            )
        case "coupon":
            # Coupon values up to 100 are a percent, above that a currency amount
            if value <= PERCENT_DIVISOR:
                return PercentageDiscount(percent=value)
            return FlatOrderDiscount(amount=value)
        case _:
            raise PromotionValidationError(f"Unknown promotion type: {promotion.promo_type}")


# ===============================================================================
# Eligibility
# ===============================================================================


@dataclass(frozen=True)
class EligibilityScope:
    """
    Which lines a promotion may discount.

    A product or category scope with an empty id list does not restrict
    anything: every line is eligible, same as order scope.
    """

    scope: str
    product_ids: frozenset[str] = frozenset()
    category_ids: frozenset[str] = frozenset()

    @classmethod
    def for_promotion(cls, promotion: Promotion) -> EligibilityScope:
        return cls(
            scope=promotion.scope,
            product_ids=frozenset(str(pid) for pid in promotion.product_ids or ()),
            category_ids=frozenset(str(cid) for cid in promotion.category_ids or ()),
        )

    def allows(self, line: DiscountLine) -> bool:
        if self.scope == "product" and self.product_ids:
            return str(line.product_id) in self.product_ids
        if self.scope == "category" and self.category_ids:
            return line.category_id is not None and str(line.category_id) in self.category_ids
        return True

    def filter(self, lines: Iterable[DiscountLine]) -> list[DiscountLine]:
        return [line for line in lines if self.allows(line)]
