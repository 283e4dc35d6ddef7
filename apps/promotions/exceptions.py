"""
Business-rule rejections raised by the promotions engine.
All of them are raised inside the operation's atomic block, so any writes
made before the rejection are rolled back.
"""

from __future__ import annotations

from typing import Any, ClassVar

from apps.common.types import BusinessError


class PromotionError(BusinessError):
    """Base class for promotion rejections surfaced to the caller"""

    error_code: ClassVar[str] = "promotion_error"
    default_message: ClassVar[str] = "Promotion could not be applied"

    def __init__(self, message: str | None = None, **context: Any):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def as_dict(self) -> dict[str, Any]:
        return {"error": self.error_code, "message": self.message, **self.context}


class InvalidCouponError(PromotionError):
    error_code = "invalid_coupon"
    default_message = "Coupon is not valid"


class CouponExpiredError(PromotionError):
    error_code = "coupon_expired"
    default_message = "Coupon has expired"


class CouponExhaustedError(PromotionError):
    error_code = "coupon_exhausted"
    default_message = "Coupon usage limit reached"


class CouponAlreadyAppliedError(PromotionError):
    error_code = "coupon_already_applied"
    default_message = "Coupon is already applied to this order"


class BelowMinimumOrderAmountError(PromotionError):
    error_code = "below_minimum_order_amount"
    default_message = "Order subtotal is below the minimum amount"


class NoApplicableDiscountError(PromotionError):
    error_code = "no_applicable_discount"
    default_message = "Coupon does not apply to any item in this order"


class PromotionValidationError(PromotionError):
    """Invalid promotion configuration on create/update"""

    error_code = "invalid_promotion"
    default_message = "Promotion configuration is invalid"
