"""
Tenant models for the Mesa POS promotions engine
Every restaurant is a tenant; all catalog, order and promotion rows are scoped to one.
"""

import uuid
from typing import ClassVar

from django.db import models
from django.utils.translation import gettext_lazy as _


class Tenant(models.Model):
    """A restaurant operating its own catalog, orders and promotions."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, help_text=_("Restaurant display name"))
    slug = models.SlugField(max_length=100, unique=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'tenants'
        verbose_name = _('Restaurant')
        verbose_name_plural = _('Restaurants')
        ordering: ClassVar[tuple[str, ...]] = ('name',)

    def __str__(self) -> str:
        return self.name
