"""
Promotion API Serializers for Mesa POS
DRF serializers for the promotion catalog and order promotion endpoints.
"""

from typing import Any

from rest_framework import serializers

from apps.common.constants import ALL_DAYS_OF_WEEK, MONEY_DECIMAL_PLACES, MONEY_MAX_DIGITS

from .models import TIME_OF_DAY_PATTERN, AppliedPromotion, Promotion


class PromotionSerializer(serializers.ModelSerializer):
    """Full promotion representation for catalog responses"""

    promo_type_display = serializers.CharField(source="get_promo_type_display", read_only=True)

    class Meta:
        model = Promotion
        fields = [
            "id", "name", "description", "promo_type", "promo_type_display", "discount_value",
            "buy_quantity", "get_quantity", "scope", "product_ids", "category_ids", "coupon_code",
            "min_order_amount", "max_discount_amount", "max_uses", "max_uses_per_order", "current_uses",
            "start_date", "end_date", "days_of_week", "start_time", "end_time",
            "is_active", "is_automatic", "priority", "stackable", "created_at", "updated_at",
        ]
        read_only_fields = fields


class PromotionInputSerializer(serializers.Serializer):
    """
    Create/update payload. Every field is optional on update (partial=True);
    on create name, promo_type and discount_value are required.
    """

    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    promo_type = serializers.ChoiceField(choices=Promotion.PROMO_TYPES)
    discount_value = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES, min_value=0
    )
    buy_quantity = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    get_quantity = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    scope = serializers.ChoiceField(choices=Promotion.SCOPE_CHOICES, required=False)
    product_ids = serializers.ListField(child=serializers.UUIDField(), required=False)
    category_ids = serializers.ListField(child=serializers.UUIDField(), required=False)
    coupon_code = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)
    min_order_amount = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES, min_value=0, required=False
    )
    max_discount_amount = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES, min_value=0,
        required=False, allow_null=True,
    )
    max_uses = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    max_uses_per_order = serializers.IntegerField(required=False, min_value=1)
    start_date = serializers.DateTimeField(required=False, allow_null=True)
    end_date = serializers.DateTimeField(required=False, allow_null=True)
    days_of_week = serializers.ListField(
        child=serializers.ChoiceField(choices=ALL_DAYS_OF_WEEK), required=False, allow_null=True
    )
    start_time = serializers.CharField(max_length=5, required=False, allow_null=True)
    end_time = serializers.CharField(max_length=5, required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)
    is_automatic = serializers.BooleanField(required=False, allow_null=True)
    priority = serializers.IntegerField(required=False)
    stackable = serializers.BooleanField(required=False)

    def validate_product_ids(self, value: list) -> list[str]:
        # Stored as JSON strings
        return [str(pid) for pid in value]

    def validate_category_ids(self, value: list) -> list[str]:
        return [str(cid) for cid in value]

    def _validate_time(self, value: str | None) -> str | None:
        if value and not TIME_OF_DAY_PATTERN.match(value):
            raise serializers.ValidationError("Time must use the HH:MM format")
        return value or None

    def validate_start_time(self, value: str | None) -> str | None:
        return self._validate_time(value)

    def validate_end_time(self, value: str | None) -> str | None:
        return self._validate_time(value)


class CouponInputSerializer(serializers.Serializer):
    """Coupon code entered at the till"""

    coupon_code = serializers.CharField(max_length=50, trim_whitespace=True)


class AppliedPromotionSerializer(serializers.ModelSerializer):
    """Ledger row with a slim view of its promotion"""

    promotion = serializers.SerializerMethodField()

    class Meta:
        model = AppliedPromotion
        fields = [
            "id", "order", "order_item", "promo_name", "promo_type",
            "discount_amount", "created_at", "promotion",
        ]

    def get_promotion(self, obj: AppliedPromotion) -> dict[str, Any]:
        promotion = obj.promotion
        return {
            "id": str(promotion.id),
            "name": promotion.name,
            "promo_type": promotion.promo_type,
            "coupon_code": promotion.coupon_code,
            "stackable": promotion.stackable,
        }
