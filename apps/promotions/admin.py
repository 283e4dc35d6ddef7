"""
Django Admin configuration for the Promotions app.
"""

from typing import Any

from django.contrib import admin
from django.db.models import Count, Sum
from django.http import HttpRequest

from .models import AppliedPromotion, Promotion

# ===============================================================================
# Inline Admin Classes
# ===============================================================================


class AppliedPromotionInline(admin.TabularInline):
    """Inline for ledger rows within a promotion."""

    model = AppliedPromotion
    extra = 0
    readonly_fields = ("order", "order_item", "promo_name", "discount_amount", "created_at")
    fields = ("order", "order_item", "promo_name", "discount_amount", "created_at")
    can_delete = False
    max_num = 0


# ===============================================================================
# Model Admin Classes
# ===============================================================================


@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    """Admin for promotions and coupons."""

    list_display = (
        "name",
        "tenant",
        "promo_type",
        "discount_value",
        "scope",
        "coupon_code",
        "priority",
        "stackable",
        "is_automatic",
        "is_active",
        "usage_display",
        "applied_total",
    )
    list_filter = ("promo_type", "scope", "is_active", "is_automatic", "stackable", "tenant")
    search_fields = ("name", "coupon_code", "description")
    readonly_fields = ("id", "current_uses", "created_at", "updated_at")
    inlines = [AppliedPromotionInline]
    actions = ["activate_promotions", "deactivate_promotions"]

    fieldsets = (
        (None, {"fields": ("id", "tenant", "name", "description", "is_active")}),
        ("Discount", {"fields": ("promo_type", "discount_value", "buy_quantity", "get_quantity", "coupon_code")}),
        ("Scope", {"fields": ("scope", "product_ids", "category_ids")}),
        (
            "Limits",
            {"fields": ("min_order_amount", "max_discount_amount", "max_uses", "max_uses_per_order", "current_uses")},
        ),
        ("Schedule", {"fields": ("start_date", "end_date", "days_of_week", "start_time", "end_time")}),
        ("Behaviour", {"fields": ("is_automatic", "priority", "stackable")}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )

    def get_queryset(self, request: HttpRequest) -> Any:
        return (
            super()
            .get_queryset(request)
            .select_related("tenant")
            .annotate(applied_count=Count("applied_promotions"), applied_sum=Sum("applied_promotions__discount_amount"))
        )

    @admin.display(description="Usage")
    def usage_display(self, obj: Promotion) -> str:
        if obj.max_uses is not None:
            return f"{obj.current_uses}/{obj.max_uses}"
        return str(obj.current_uses)

    @admin.display(description="Discount given", ordering="applied_sum")
    def applied_total(self, obj: Promotion) -> str:
        return f"{obj.applied_sum or 0} ({obj.applied_count})"

    @admin.action(description="Activate selected promotions")
    def activate_promotions(self, request: HttpRequest, queryset: Any) -> None:
        updated = queryset.update(is_active=True)
        self.message_user(request, f"{updated} promotions activated.")

    @admin.action(description="Deactivate selected promotions")
    def deactivate_promotions(self, request: HttpRequest, queryset: Any) -> None:
        updated = queryset.update(is_active=False)
        self.message_user(request, f"{updated} promotions deactivated.")


@admin.register(AppliedPromotion)
class AppliedPromotionAdmin(admin.ModelAdmin):
    """Read-only view of the applied promotion ledger."""

    list_display = ("promo_name", "promo_type", "order", "order_item", "discount_amount", "created_at")
    list_filter = ("promo_type", "tenant", "created_at")
    search_fields = ("promo_name", "order__order_number")
    date_hierarchy = "created_at"

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_change_permission(self, request: HttpRequest, obj: Any = None) -> bool:
        return False

    def has_delete_permission(self, request: HttpRequest, obj: Any = None) -> bool:
        return False
