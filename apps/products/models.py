"""
Menu catalog models for the Mesa POS promotions engine
Categories and products referenced by order items and promotion scopes.
"""

from __future__ import annotations

import uuid
from typing import ClassVar

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.common.constants import MONEY_DECIMAL_PLACES, MONEY_MAX_DIGITS, ZERO_AMOUNT

# ===============================================================================
# MENU CATALOG MODELS
# ===============================================================================


class Category(models.Model):
    """Menu section (drinks, starters, mains) used by category-scoped promotions."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenants.Tenant',
        on_delete=models.CASCADE,
        related_name='categories',
    )
    name = models.CharField(max_length=120)
    sort_order = models.PositiveIntegerField(default=0, help_text=_("Display order (lower numbers first)"))
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "product_categories"
        verbose_name = _("Category")
        verbose_name_plural = _("Categories")
        ordering: ClassVar[tuple[str, ...]] = ("sort_order", "name")
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["tenant", "is_active"], name="category_tenant_active_idx"),
        )

    def __str__(self) -> str:
        return self.name


class Product(models.Model):
    """
    Menu item that can be ordered.
    The promotions engine only reads its id, category and price.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenants.Tenant',
        on_delete=models.CASCADE,
        related_name='products',
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
    )
    name = models.CharField(max_length=200, help_text=_("Display name on the menu"))
    price = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        validators=[MinValueValidator(ZERO_AMOUNT)],
        help_text=_("Current list price"),
    )
    is_active = models.BooleanField(default=True, help_text=_("Whether product is available for ordering"))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "products"
        verbose_name = _("Product")
        verbose_name_plural = _("Products")
        ordering: ClassVar[tuple[str, ...]] = ("name",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["tenant", "is_active"], name="product_tenant_active_idx"),
            models.Index(fields=["category"], name="product_category_idx"),
        )

    def __str__(self) -> str:
        return self.name
