"""
Django admin configuration for orders app.
Totals and discount fields are read-only: they are owned by the promotions engine.
"""

from typing import ClassVar

from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    """Inline admin for order items."""
    model = OrderItem
    extra = 0
    readonly_fields: ClassVar[list[str]] = ('discount_amount', 'discount_reason', 'promotion_id', 'created_at')
    fields: ClassVar[list[str]] = (
        'line_number', 'product', 'product_name', 'quantity', 'unit_price',
        'subtotal', 'tax_amount', 'is_void', 'discount_amount', 'discount_reason',
        'promotion_id', 'created_at'
    )


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin interface for orders."""

    list_display: ClassVar[list[str]] = (
        'order_number', 'tenant', 'status', 'subtotal', 'discount_amount', 'total', 'created_at'
    )
    list_filter: ClassVar[list[str]] = ('status', 'tenant', 'created_at')
    search_fields: ClassVar[list[str]] = ('order_number',)
    readonly_fields: ClassVar[list[str]] = (
        'order_number', 'subtotal', 'tax_amount', 'discount_amount', 'discount_reason',
        'total', 'created_at', 'updated_at'
    )
    inlines: ClassVar[list[type[admin.TabularInline]]] = [OrderItemInline]

    fieldsets: ClassVar[tuple] = (
        ('Order Information', {
            'fields': ('tenant', 'order_number', 'status')
        }),
        ('Financial Details', {
            'fields': ('subtotal', 'tax_amount', 'discount_amount', 'discount_reason', 'total')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        })
    )
