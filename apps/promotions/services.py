"""
Promotion services for the Mesa POS promotions engine.
Automatic promotion rebuild, additive coupon application, removal and the
promotion catalog.
"""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.paginator import EmptyPage, Paginator
from django.db import transaction
from django.db.models import F, ProtectedError
from django.utils import timezone

from apps.common.constants import ALL_DAYS_OF_WEEK, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ZERO_AMOUNT
from apps.common.types import CouponCode, NotFoundError, OrderId, PromotionId, TenantId
from apps.common.utils import round_money
from apps.orders.models import Order
from apps.orders.services import OrderQueryService, OrderTotalsService

from .calculators import DiscountCalculator, cap_discount
from .exceptions import (
    BelowMinimumOrderAmountError,
    CouponAlreadyAppliedError,
    CouponExhaustedError,
    CouponExpiredError,
    InvalidCouponError,
    NoApplicableDiscountError,
    PromotionValidationError,
)
from .ledger import PromotionLedger
from .matching import PromotionMatcher
from .models import AppliedPromotion, Promotion
from .rules import DiscountLine

logger = logging.getLogger(__name__)


# ===============================================================================
# Data Classes for Results
# ===============================================================================


@dataclass(frozen=True)
class AppliedDiscount:
    """One ledger entry produced by an automatic application."""

    promotion_id: PromotionId
    promo_name: str
    promo_type: str
    amount: Decimal
    item_id: uuid.UUID | None = None

    @classmethod
    def from_entry(cls, entry: AppliedPromotion) -> AppliedDiscount:
        return cls(
            promotion_id=entry.promotion_id,
            promo_name=entry.promo_name,
            promo_type=entry.promo_type,
            amount=entry.discount_amount,
            item_id=entry.order_item_id,
        )


@dataclass(frozen=True)
class AutomaticApplyResult:
    discounts: list[AppliedDiscount] = field(default_factory=list)
    total_discount: Decimal = ZERO_AMOUNT


@dataclass(frozen=True)
class CouponApplyResult:
    promo_name: str
    discount_amount: Decimal
    coupon_code: str


@dataclass(frozen=True)
class RemovalResult:
    removed_discount: Decimal


# ===============================================================================
# Stacking Resolver
# ===============================================================================


class StackingResolver:
    """
    At most one non-stackable promotion per order.
    Stackable promotions combine with each other and with that one.
    """

    def __init__(self) -> None:
        self.applied_non_stackable = False

    def allows(self, promotion: Promotion) -> bool:
        return promotion.stackable or not self.applied_non_stackable

    def mark_applied(self, promotion: Promotion) -> None:
        if not promotion.stackable:
            self.applied_non_stackable = True


# ===============================================================================
# Coupon Validator
# ===============================================================================


class CouponValidator:
    """Lookup and business checks for manually entered coupon codes."""

    @staticmethod
    def lookup(tenant_id: TenantId, coupon_code: str | None) -> Promotion:
        """Lock and return the active coupon promotion for a code."""
        normalized_code = Promotion.normalize_code(coupon_code)
        if normalized_code is None:
            raise InvalidCouponError(coupon_code=coupon_code)
        try:
            return Promotion.objects.select_for_update().get(
                tenant_id=tenant_id,
                coupon_code=normalized_code,
                is_active=True,
                promo_type="coupon",
            )
        except Promotion.DoesNotExist:
            logger.warning(
                "Coupon rejected: unknown code %s",
                normalized_code,
                extra={"coupon_code": normalized_code, "tenant_id": str(tenant_id)},
            )
            raise InvalidCouponError(coupon_code=normalized_code) from None

    @staticmethod
    def validate(promotion: Promotion, order: Order, now: datetime) -> None:
        """Raise the first failing rule: expiry, usage cap, one use per order, minimum amount."""
        error = None
        if promotion.is_expired(now):
            error = CouponExpiredError(coupon_code=promotion.coupon_code)
        elif promotion.is_exhausted:
            error = CouponExhaustedError(coupon_code=promotion.coupon_code)
        elif PromotionLedger.is_applied(order, promotion):
            error = CouponAlreadyAppliedError(coupon_code=promotion.coupon_code)
        elif promotion.min_order_amount > ZERO_AMOUNT and order.subtotal < promotion.min_order_amount:
            error = BelowMinimumOrderAmountError(
                f"Minimum order amount is {promotion.min_order_amount}",
                coupon_code=promotion.coupon_code,
                min_order_amount=str(promotion.min_order_amount),
            )

        if error is not None:
            logger.warning(
                "Coupon rejected: %s for order %s - %s",
                promotion.coupon_code,
                order.id,
                error.error_code,
                extra={"coupon_code": promotion.coupon_code, "order_id": str(order.id), "error": error.error_code},
            )
            raise error


# ===============================================================================
# Promotion Service
# ===============================================================================


class PromotionService:
    """
    Order-facing promotion operations.

    apply_automatic_promotions rebuilds every discount from scratch;
    apply_coupon adds on top of what is already applied. Each operation runs
    in one transaction holding a row lock on the order.
    """

    @classmethod
    @transaction.atomic
    def apply_automatic_promotions(
        cls,
        tenant_id: TenantId,
        order_id: OrderId,
        now: datetime | None = None,
    ) -> AutomaticApplyResult:
        now = now or timezone.now()
        order = OrderQueryService.get_order(tenant_id, order_id, for_update=True)

        PromotionLedger.clear_order(order)

        promotions = PromotionMatcher.get_applicable_promotions(tenant_id, order, now)
        if not promotions:
            OrderTotalsService.recalculate(order, ZERO_AMOUNT)
            return AutomaticApplyResult()

        lines = [DiscountLine.from_item(item) for item in OrderQueryService.get_active_items(order)]
        resolver = StackingResolver()
        discounts: list[AppliedDiscount] = []
        total_discount = ZERO_AMOUNT

        for promotion in promotions:
            if not resolver.allows(promotion):
                logger.debug(
                    "Skipping non-stackable promotion %s on order %s",
                    promotion.id,
                    order.id,
                    extra={"order_id": str(order.id), "promotion_id": str(promotion.id)},
                )
                continue

            result = DiscountCalculator.calculate(promotion, lines)
            if result.total_discount <= ZERO_AMOUNT:
                continue

            result = cap_discount(result, promotion.max_discount_amount)
            total_discount += result.total_discount
            if result.total_discount > ZERO_AMOUNT:
                entries = PromotionLedger.write_discount(order, promotion, result)
                discounts.extend(AppliedDiscount.from_entry(entry) for entry in entries)
            resolver.mark_applied(promotion)

        total_discount = round_money(total_discount)
        OrderTotalsService.recalculate(order, total_discount)

        logger.info(
            "Automatic promotions applied to order %s: %d discounts totalling %s",
            order.id,
            len(discounts),
            total_discount,
            extra={"order_id": str(order.id), "discount": str(total_discount)},
        )
        return AutomaticApplyResult(discounts=discounts, total_discount=total_discount)

    @classmethod
    @transaction.atomic
    def apply_coupon(
        cls,
        tenant_id: TenantId,
        order_id: OrderId,
        coupon_code: CouponCode,
        now: datetime | None = None,
    ) -> CouponApplyResult:
        now = now or timezone.now()
        order = OrderQueryService.get_order(tenant_id, order_id, for_update=True)
        promotion = CouponValidator.lookup(tenant_id, coupon_code)
        CouponValidator.validate(promotion, order, now)

        lines = [DiscountLine.from_item(item) for item in OrderQueryService.get_active_items(order)]
        result = cap_discount(DiscountCalculator.calculate(promotion, lines), promotion.max_discount_amount)
        if result.total_discount <= ZERO_AMOUNT:
            logger.warning(
                "Coupon rejected: %s gives no discount on order %s",
                promotion.coupon_code,
                order.id,
                extra={"coupon_code": promotion.coupon_code, "order_id": str(order.id)},
            )
            raise NoApplicableDiscountError(coupon_code=promotion.coupon_code)

        # Coupons keep a single order-level ledger row even with a breakdown
        PromotionLedger.attribute_items(promotion, result)
        entry = PromotionLedger.record(order, promotion, result.total_discount)
        Promotion.objects.filter(pk=promotion.pk).update(current_uses=F("current_uses") + 1)

        OrderTotalsService.recalculate(order, order.discount_amount + result.total_discount)

        logger.info(
            "Coupon applied: %s to order %s for %s",
            promotion.coupon_code,
            order.id,
            result.total_discount,
            extra={
                "coupon_code": promotion.coupon_code,
                "order_id": str(order.id),
                "promotion_id": str(promotion.id),
                "discount": str(result.total_discount),
                "ledger_id": str(entry.id),
            },
        )
        return CouponApplyResult(
            promo_name=promotion.name,
            discount_amount=result.total_discount,
            coupon_code=promotion.coupon_code or "",
        )

    @classmethod
    @transaction.atomic
    def remove_promotion(
        cls,
        tenant_id: TenantId,
        order_id: OrderId,
        promotion_id: PromotionId,
    ) -> RemovalResult:
        order = OrderQueryService.get_order(tenant_id, order_id, for_update=True)
        removed_discount = PromotionLedger.total_for_promotion(order, promotion_id)
        if removed_discount is None:
            raise NotFoundError("Applied promotion", promotion_id)

        PromotionLedger.clear_promotion(order, promotion_id)
        remaining_discount = PromotionLedger.total_for_order(order)
        OrderTotalsService.recalculate(order, remaining_discount)

        logger.info(
            "Promotion %s removed from order %s",
            promotion_id,
            order.id,
            extra={
                "order_id": str(order.id),
                "promotion_id": str(promotion_id),
                "discount": str(remaining_discount),
            },
        )
        return RemovalResult(removed_discount=removed_discount)

    @staticmethod
    def list_order_promotions(tenant_id: TenantId, order_id: OrderId) -> list[AppliedPromotion]:
        return list(PromotionLedger.entries(tenant_id, order_id))

    @staticmethod
    def get_applicable_promotions(
        tenant_id: TenantId,
        order_id: OrderId,
        now: datetime | None = None,
    ) -> list[Promotion]:
        """Preview the automatic promotions an order would get, without writing."""
        try:
            order = OrderQueryService.get_order(tenant_id, order_id)
        except NotFoundError:
            return []
        return PromotionMatcher.get_applicable_promotions(tenant_id, order, now)


# ===============================================================================
# Promotion Catalog Service
# ===============================================================================


class PromotionCatalogService:
    """Admin CRUD over a tenant's promotions."""

    EDITABLE_FIELDS: ClassVar[tuple[str, ...]] = (
        "name",
        "description",
        "promo_type",
        "discount_value",
        "buy_quantity",
        "get_quantity",
        "scope",
        "product_ids",
        "category_ids",
        "coupon_code",
        "min_order_amount",
        "max_discount_amount",
        "max_uses",
        "max_uses_per_order",
        "start_date",
        "end_date",
        "days_of_week",
        "start_time",
        "end_time",
        "is_active",
        "is_automatic",
        "priority",
        "stackable",
    )
    REQUIRED_FIELDS: ClassVar[frozenset[str]] = frozenset({
        "name",
        "promo_type",
        "discount_value",
        "scope",
        "product_ids",
        "category_ids",
        "min_order_amount",
        "max_uses_per_order",
        "start_date",
        "days_of_week",
        "is_active",
        "is_automatic",
        "priority",
        "stackable",
    })

    @staticmethod
    def list_promotions(
        tenant_id: TenantId,
        status: str | None = None,
        promo_type: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> dict[str, Any]:
        """Paginated listing, highest priority first then newest."""
        default_limit = getattr(settings, "PROMOTIONS_DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE)
        max_limit = getattr(settings, "PROMOTIONS_MAX_PAGE_SIZE", MAX_PAGE_SIZE)
        limit = min(max(limit or default_limit, 1), max_limit)
        page = max(page, 1)

        queryset = Promotion.objects.filter(tenant_id=tenant_id)
        if status == "active":
            queryset = queryset.filter(is_active=True)
        elif status == "inactive":
            queryset = queryset.filter(is_active=False)
        if promo_type:
            queryset = queryset.filter(promo_type=promo_type)
        queryset = queryset.order_by("-priority", "-created_at")

        paginator = Paginator(queryset, limit)
        try:
            data = list(paginator.page(page).object_list)
        except EmptyPage:
            data = []

        total = paginator.count
        return {
            "data": data,
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
        }

    @staticmethod
    def get_promotion(tenant_id: TenantId, promotion_id: PromotionId) -> Promotion:
        try:
            return Promotion.objects.get(tenant_id=tenant_id, id=promotion_id)
        except Promotion.DoesNotExist:
            raise NotFoundError("Promotion", promotion_id) from None

    @classmethod
    @transaction.atomic
    def create_promotion(cls, tenant_id: TenantId, data: dict[str, Any]) -> Promotion:
        values = {key: value for key, value in data.items() if key in cls.EDITABLE_FIELDS}
        values.setdefault("product_ids", [])
        values.setdefault("category_ids", [])
        if values.get("days_of_week") is None:
            values["days_of_week"] = list(ALL_DAYS_OF_WEEK)
        if values.get("start_date") is None:
            values["start_date"] = timezone.now()
        if not values.get("max_uses_per_order"):
            values["max_uses_per_order"] = 1
        if values.get("is_automatic") is None:
            values["is_automatic"] = True

        promotion = Promotion(tenant_id=tenant_id, **values)
        cls._ensure_unique_code(tenant_id, promotion)
        cls._validate(promotion)
        promotion.save()

        logger.info(
            "Promotion created: %s (%s)",
            promotion.name,
            promotion.promo_type,
            extra={"promotion_id": str(promotion.id), "tenant_id": str(tenant_id)},
        )
        return promotion

    @classmethod
    @transaction.atomic
    def update_promotion(cls, tenant_id: TenantId, promotion_id: PromotionId, data: dict[str, Any]) -> Promotion:
        """Apply the provided fields; omitted fields and nulls for required columns keep their value."""
        promotion = cls._get_locked(tenant_id, promotion_id)
        for key, value in data.items():
            if key in cls.EDITABLE_FIELDS and not (value is None and key in cls.REQUIRED_FIELDS):
                setattr(promotion, key, value)

        cls._ensure_unique_code(tenant_id, promotion)
        cls._validate(promotion)
        promotion.save()

        logger.info(
            "Promotion updated: %s",
            promotion.id,
            extra={"promotion_id": str(promotion.id), "tenant_id": str(tenant_id), "fields": sorted(data)},
        )
        return promotion

    @classmethod
    @transaction.atomic
    def toggle_active(cls, tenant_id: TenantId, promotion_id: PromotionId) -> Promotion:
        promotion = cls._get_locked(tenant_id, promotion_id)
        promotion.is_active = not promotion.is_active
        promotion.save(update_fields=["is_active", "updated_at"])
        logger.info(
            "Promotion %s %s",
            promotion.id,
            "activated" if promotion.is_active else "deactivated",
            extra={"promotion_id": str(promotion.id), "tenant_id": str(tenant_id)},
        )
        return promotion

    @classmethod
    @transaction.atomic
    def delete_promotion(cls, tenant_id: TenantId, promotion_id: PromotionId) -> None:
        promotion = cls._get_locked(tenant_id, promotion_id)
        try:
            promotion.delete()
        except ProtectedError:
            raise PromotionValidationError(
                "Promotion is applied to orders; remove it from them or deactivate it instead",
                promotion_id=str(promotion_id),
            ) from None
        logger.info(
            "Promotion deleted: %s",
            promotion_id,
            extra={"promotion_id": str(promotion_id), "tenant_id": str(tenant_id)},
        )

    @staticmethod
    def _get_locked(tenant_id: TenantId, promotion_id: PromotionId) -> Promotion:
        try:
            return Promotion.objects.select_for_update().get(tenant_id=tenant_id, id=promotion_id)
        except Promotion.DoesNotExist:
            raise NotFoundError("Promotion", promotion_id) from None

    @staticmethod
    def _ensure_unique_code(tenant_id: TenantId, promotion: Promotion) -> None:
        promotion.coupon_code = Promotion.normalize_code(promotion.coupon_code)
        if not promotion.coupon_code:
            return
        duplicates = Promotion.objects.filter(tenant_id=tenant_id, coupon_code=promotion.coupon_code)
        if not promotion._state.adding:
            duplicates = duplicates.exclude(pk=promotion.pk)
        if duplicates.exists():
            raise InvalidCouponError(
                f"A promotion with coupon code {promotion.coupon_code} already exists",
                coupon_code=promotion.coupon_code,
            )

    @staticmethod
    def _validate(promotion: Promotion) -> None:
        try:
            promotion.full_clean(exclude=["tenant"])
        except DjangoValidationError as exc:
            raise PromotionValidationError(errors=exc.message_dict) from None
