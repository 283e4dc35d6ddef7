"""
Django admin configuration for tenants app.
"""

from typing import ClassVar

from django.contrib import admin

from .models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display: ClassVar[list[str]] = ('name', 'slug', 'is_active', 'created_at')
    list_filter: ClassVar[list[str]] = ('is_active',)
    search_fields: ClassVar[list[str]] = ('name', 'slug')
    prepopulated_fields: ClassVar[dict[str, tuple[str, ...]]] = {'slug': ('name',)}
