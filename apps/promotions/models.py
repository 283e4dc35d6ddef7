"""
Promotions models for the Mesa POS promotions engine.

Supports:
- Automatic promotions (percentage, fixed amount, buy X get Y, happy hour)
- Coupon codes entered manually at the till
- Scope restrictions (whole order, product list, category list)
- Schedule windows (date range, days of week, time of day)
- Usage caps, minimum order amounts and discount caps
- Stacking rules (at most one non-stackable promotion per order)
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import Any, ClassVar

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.common.constants import (
    ALL_DAYS_OF_WEEK,
    MONEY_DECIMAL_PLACES,
    MONEY_MAX_DIGITS,
    PERCENT_DIVISOR,
    ZERO_AMOUNT,
)

logger = logging.getLogger(__name__)

# "HH:MM", zero padded, 00:00-23:59
TIME_OF_DAY_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


# ===============================================================================
# PROMOTION MODEL
# ===============================================================================


class Promotion(models.Model):
    """
    Tenant-scoped discount rule.
    Automatic promotions are matched on every re-evaluation of an order;
    coupons only apply when their code is entered.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="promotions",
    )

    name = models.CharField(max_length=200, help_text=_("Shown on the ticket next to discounted items"))
    description = models.TextField(blank=True, default="")

    # Discount type and value
    PROMO_TYPES: ClassVar[tuple[tuple[str, Any], ...]] = (
        ("percentage", _("Percentage")),
        ("fixed_amount", _("Fixed Amount")),
        ("buy_x_get_y", _("Buy X Get Y")),
        ("happy_hour", _("Happy Hour")),
        ("coupon", _("Coupon")),
    )
    PERCENT_TYPES: ClassVar[tuple[str, ...]] = ("percentage", "happy_hour")
    promo_type = models.CharField(max_length=20, choices=PROMO_TYPES)

    # Percent for percentage/happy_hour, currency amount for fixed_amount,
    # either for coupons (<= 100 is a percent)
    discount_value = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        default=ZERO_AMOUNT,
        validators=[MinValueValidator(ZERO_AMOUNT)],
    )
    buy_quantity = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_("Units to buy (buy X get Y only)"),
    )
    get_quantity = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_("Units given free (buy X get Y only)"),
    )

    # Scope
    SCOPE_CHOICES: ClassVar[tuple[tuple[str, Any], ...]] = (
        ("order", _("Whole order")),
        ("product", _("Specific products")),
        ("category", _("Specific categories")),
    )
    scope = models.CharField(max_length=20, choices=SCOPE_CHOICES, default="order")
    product_ids = models.JSONField(default=list, blank=True, help_text=_("Product ids for product scope"))
    category_ids = models.JSONField(default=list, blank=True, help_text=_("Category ids for category scope"))

    coupon_code = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text=_("Coupon code, unique per restaurant (stored upper-case)"),
    )

    # Amount rules
    min_order_amount = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        default=ZERO_AMOUNT,
        validators=[MinValueValidator(ZERO_AMOUNT)],
        help_text=_("Minimum order subtotal to qualify (0 = no minimum)"),
    )
    max_discount_amount = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        null=True,
        blank=True,
        validators=[MinValueValidator(ZERO_AMOUNT)],
        help_text=_("Cap on the discount this promotion may give per order"),
    )

    # Usage limits
    max_uses = models.PositiveIntegerField(null=True, blank=True, help_text=_("Maximum total redemptions"))
    max_uses_per_order = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    current_uses = models.PositiveIntegerField(default=0, help_text=_("Current total redemption count"))

    # Schedule
    start_date = models.DateTimeField(default=timezone.now)
    end_date = models.DateTimeField(null=True, blank=True, help_text=_("When the promotion ends (null = never)"))
    days_of_week = models.JSONField(
        default=list,
        blank=True,
        help_text=_("Days the promotion runs, 0 = Sunday (empty = every day)"),
    )
    start_time = models.CharField(max_length=5, null=True, blank=True, help_text=_("HH:MM"))
    end_time = models.CharField(max_length=5, null=True, blank=True, help_text=_("HH:MM"))

    # Behaviour
    is_active = models.BooleanField(default=True)
    is_automatic = models.BooleanField(default=True, help_text=_("Applied without user action"))
    priority = models.IntegerField(default=0, help_text=_("Higher priorities are evaluated first"))
    stackable = models.BooleanField(default=False, help_text=_("Can be combined with other promotions"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "promotions"
        verbose_name = _("Promotion")
        verbose_name_plural = _("Promotions")
        ordering: ClassVar[tuple[str, ...]] = ("-priority", "-created_at")
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["tenant", "is_active", "is_automatic"], name="idx_promotion_automatic"),
            models.Index(fields=["tenant", "promo_type"], name="idx_promotion_type"),
            models.Index(fields=["start_date", "end_date"], name="idx_promotion_dates"),
        )
        constraints: ClassVar[tuple[models.BaseConstraint, ...]] = (
            models.UniqueConstraint(
                fields=["tenant", "coupon_code"],
                condition=Q(coupon_code__isnull=False),
                name="unique_coupon_code_per_tenant",
            ),
            models.CheckConstraint(
                condition=Q(max_uses__isnull=True) | Q(current_uses__lte=F("max_uses")),
                name="promotion_uses_within_max",
            ),
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.promo_type})"

    def save(self, *args: Any, **kwargs: Any) -> None:
        """Normalize coupon code to uppercase before saving."""
        self.coupon_code = self.normalize_code(self.coupon_code)
        super().save(*args, **kwargs)

    @staticmethod
    def normalize_code(code: str | None) -> str | None:
        if code is None:
            return None
        code = code.strip().upper()
        return code or None

    def clean(self) -> None:
        """Validate promotion configuration."""
        super().clean()
        self.coupon_code = self.normalize_code(self.coupon_code)
        self._validate_discount_value()
        self._validate_scope_ids()
        self._validate_schedule()

    def _validate_discount_value(self) -> None:
        if self.discount_value is None:
            raise ValidationError({"discount_value": "Discount value is required"})
        if self.promo_type in self.PERCENT_TYPES and not (ZERO_AMOUNT <= self.discount_value <= PERCENT_DIVISOR):
            raise ValidationError({"discount_value": "Percentage must be between 0 and 100"})
        if self.promo_type == "coupon" and not self.coupon_code:
            raise ValidationError({"coupon_code": "Coupon promotions require a coupon code"})

    def _validate_scope_ids(self) -> None:
        for field_name in ("product_ids", "category_ids"):
            value = getattr(self, field_name)
            if not isinstance(value, list):
                raise ValidationError({field_name: "Must be a list of ids"})
            for raw in value:
                try:
                    uuid.UUID(str(raw))
                except ValueError:
                    raise ValidationError({field_name: f"Invalid id: {raw}"}) from None

    def _validate_schedule(self) -> None:
        if self.end_date and self.start_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "end_date must be after start_date"})
        if not isinstance(self.days_of_week, list) or any(
            not isinstance(day, int) or isinstance(day, bool) or day not in ALL_DAYS_OF_WEEK
            for day in self.days_of_week
        ):
            raise ValidationError({"days_of_week": "Days must be integers between 0 (Sunday) and 6"})
        for field_name in ("start_time", "end_time"):
            value = getattr(self, field_name)
            if value and not TIME_OF_DAY_PATTERN.match(value):
                raise ValidationError({field_name: "Time must use the HH:MM format"})

    @property
    def is_exhausted(self) -> bool:
        return self.max_uses is not None and self.current_uses >= self.max_uses

    def is_expired(self, now: Any = None) -> bool:
        if self.end_date is None:
            return False
        return (now or timezone.now()) > self.end_date


# ===============================================================================
# APPLIED PROMOTION LEDGER
# ===============================================================================


class AppliedPromotion(models.Model):
    """
    Ledger row for a discount currently attributed to an order.
    Created per successful discount and deleted (never edited) on re-evaluation
    or removal. The order's discount_amount equals the sum of its rows.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="applied_promotions",
    )
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="applied_promotions",
    )
    order_item = models.ForeignKey(
        "orders.OrderItem",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="applied_promotions",
        help_text=_("Discounted item (null for order-level discounts)"),
    )
    promotion = models.ForeignKey(
        Promotion,
        on_delete=models.PROTECT,
        related_name="applied_promotions",
    )

    # Snapshot at application time
    promo_name = models.CharField(max_length=200)
    promo_type = models.CharField(max_length=20)
    discount_amount = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        validators=[MinValueValidator(ZERO_AMOUNT)],
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "promotion_applied"
        verbose_name = _("Applied Promotion")
        verbose_name_plural = _("Applied Promotions")
        ordering: ClassVar[tuple[str, ...]] = ("created_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["order", "promotion"], name="idx_applied_order_promo"),
            models.Index(fields=["tenant", "-created_at"], name="idx_applied_tenant_created"),
        )

    def __str__(self) -> str:
        return f"{self.promo_name}: -{self.discount_amount}"
