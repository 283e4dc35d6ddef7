"""
URL configuration for the Mesa POS promotions engine
"""

from django.contrib import admin
from django.urls import include, path

# ===============================================================================
# MAIN URL PATTERNS
# ===============================================================================

urlpatterns = [
    path("admin/", admin.site.urls),
    # Promotion catalog and order discount endpoints
    path("api/promotions/", include("apps.promotions.urls")),
]
