"""
Django admin configuration for products app.
"""

from typing import ClassVar

from django.contrib import admin

from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display: ClassVar[list[str]] = ('name', 'tenant', 'sort_order', 'is_active')
    list_filter: ClassVar[list[str]] = ('is_active', 'tenant')
    search_fields: ClassVar[list[str]] = ('name',)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin interface for menu products."""

    list_display: ClassVar[list[str]] = ('name', 'tenant', 'category', 'price', 'is_active', 'created_at')
    list_filter: ClassVar[list[str]] = ('is_active', 'tenant', 'category')
    search_fields: ClassVar[list[str]] = ('name',)
    readonly_fields: ClassVar[list[str]] = ('created_at', 'updated_at')
