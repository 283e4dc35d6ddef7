"""
Promotion API URLs for Mesa POS
"""

from django.urls import path

from . import views

app_name = "promotions"

urlpatterns = [
    # Promotion catalog
    path("", views.promotion_list, name="promotion_list"),
    path("<uuid:promotion_id>/", views.promotion_detail, name="promotion_detail"),
    path("<uuid:promotion_id>/toggle/", views.promotion_toggle, name="promotion_toggle"),
    # Order promotions
    path("orders/<uuid:order_id>/", views.order_promotions, name="order_promotions"),
    path("orders/<uuid:order_id>/applicable/", views.order_applicable_promotions, name="order_applicable"),
    path("orders/<uuid:order_id>/apply/", views.apply_automatic, name="apply_automatic"),
    path("orders/<uuid:order_id>/coupon/", views.apply_coupon, name="apply_coupon"),
    path("orders/<uuid:order_id>/<uuid:promotion_id>/", views.remove_promotion, name="remove_promotion"),
]
