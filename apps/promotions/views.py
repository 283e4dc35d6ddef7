"""
Promotion API Views for Mesa POS
DRF views for the promotion catalog and for applying promotions to orders.
Every request is scoped to the restaurant named by the tenant header.
"""

import logging
import uuid
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from apps.common.logging import set_request_context
from apps.common.types import Err, NotFoundError, Result, parse_uuid
from apps.tenants.models import Tenant

from .exceptions import PromotionError
from .serializers import (
    AppliedPromotionSerializer,
    CouponInputSerializer,
    PromotionInputSerializer,
    PromotionSerializer,
)
from .services import PromotionCatalogService, PromotionService

logger = logging.getLogger(__name__)

DEFAULT_TENANT_HEADER = "X-Tenant-ID"


def _resolve_tenant(request: Request) -> Result[uuid.UUID, str]:
    header = getattr(settings, "PROMOTIONS_TENANT_HEADER", DEFAULT_TENANT_HEADER)
    result = parse_uuid(request.headers.get(header), field=header)
    if result.is_err():
        return result
    if not Tenant.objects.filter(id=result.unwrap(), is_active=True).exists():
        return Err(f"Unknown restaurant {result.unwrap()}")
    return result


def tenant_endpoint(view_func: Callable[..., Response]) -> Callable[..., Response]:
    """
    Resolve the tenant header and translate business errors.
    PromotionError maps to 400, NotFoundError to 404.
    """

    @wraps(view_func)
    def wrapper(request: Request, *args: Any, **kwargs: Any) -> Response:
        tenant_result = _resolve_tenant(request)
        if isinstance(tenant_result, Err):
            return Response({"error": tenant_result.error}, status=status.HTTP_400_BAD_REQUEST)
        set_request_context(tenant_id=str(tenant_result.unwrap()))

        try:
            return view_func(request, tenant_result.unwrap(), *args, **kwargs)
        except NotFoundError as exc:
            return Response({"error": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except PromotionError as exc:
            logger.info(
                "Promotion request rejected: %s",
                exc.error_code,
                extra={"error": exc.error_code, "path": request.path},
            )
            return Response(exc.as_dict(), status=status.HTTP_400_BAD_REQUEST)

    return wrapper


def _parse_int(value: str | None, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


# ===============================================================================
# Promotion catalog
# ===============================================================================


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
@tenant_endpoint
def promotion_list(request: Request, tenant_id: uuid.UUID) -> Response:
    """
    GET: paginated promotions, filterable by status (active/inactive) and promo_type.
    POST: create a promotion.
    """
    if request.method == "POST":
        serializer = PromotionInputSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"error": "Invalid input", "details": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
        promotion = PromotionCatalogService.create_promotion(tenant_id, serializer.validated_data)
        return Response(PromotionSerializer(promotion).data, status=status.HTTP_201_CREATED)

    page = PromotionCatalogService.list_promotions(
        tenant_id,
        status=request.query_params.get("status"),
        promo_type=request.query_params.get("promo_type"),
        page=_parse_int(request.query_params.get("page"), 1),
        limit=_parse_int(request.query_params.get("limit"), 0) or None,
    )
    return Response({
        "data": PromotionSerializer(page["data"], many=True).data,
        "total": page["total"],
        "page": page["page"],
        "limit": page["limit"],
        "total_pages": page["total_pages"],
    })


@api_view(["GET", "PUT", "DELETE"])
@permission_classes([IsAuthenticated])
@tenant_endpoint
def promotion_detail(request: Request, tenant_id: uuid.UUID, promotion_id: uuid.UUID) -> Response:
    if request.method == "PUT":
        serializer = PromotionInputSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response({"error": "Invalid input", "details": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
        promotion = PromotionCatalogService.update_promotion(tenant_id, promotion_id, serializer.validated_data)
        return Response(PromotionSerializer(promotion).data)

    if request.method == "DELETE":
        PromotionCatalogService.delete_promotion(tenant_id, promotion_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    promotion = PromotionCatalogService.get_promotion(tenant_id, promotion_id)
    return Response(PromotionSerializer(promotion).data)


@api_view(["PATCH"])
@permission_classes([IsAuthenticated])
@tenant_endpoint
def promotion_toggle(request: Request, tenant_id: uuid.UUID, promotion_id: uuid.UUID) -> Response:
    promotion = PromotionCatalogService.toggle_active(tenant_id, promotion_id)
    return Response(PromotionSerializer(promotion).data)


# ===============================================================================
# Order promotions
# ===============================================================================


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@tenant_endpoint
def order_promotions(request: Request, tenant_id: uuid.UUID, order_id: uuid.UUID) -> Response:
    """Promotions currently applied to the order, oldest first."""
    entries = PromotionService.list_order_promotions(tenant_id, order_id)
    return Response(AppliedPromotionSerializer(entries, many=True).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@tenant_endpoint
def order_applicable_promotions(request: Request, tenant_id: uuid.UUID, order_id: uuid.UUID) -> Response:
    promotions = PromotionService.get_applicable_promotions(tenant_id, order_id)
    return Response(PromotionSerializer(promotions, many=True).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@tenant_endpoint
def apply_automatic(request: Request, tenant_id: uuid.UUID, order_id: uuid.UUID) -> Response:
    """Rebuild all automatic discounts on the order."""
    result = PromotionService.apply_automatic_promotions(tenant_id, order_id)
    return Response({
        "discounts": [
            {
                "promotion_id": str(discount.promotion_id),
                "promo_name": discount.promo_name,
                "promo_type": discount.promo_type,
                "amount": str(discount.amount),
                "item_id": str(discount.item_id) if discount.item_id else None,
            }
            for discount in result.discounts
        ],
        "total_discount": str(result.total_discount),
    })


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@tenant_endpoint
def apply_coupon(request: Request, tenant_id: uuid.UUID, order_id: uuid.UUID) -> Response:
    serializer = CouponInputSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({"error": "Invalid input", "details": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    result = PromotionService.apply_coupon(tenant_id, order_id, serializer.validated_data["coupon_code"])
    return Response({
        "promo_name": result.promo_name,
        "discount_amount": str(result.discount_amount),
        "coupon_code": result.coupon_code,
    })


@api_view(["DELETE"])
@permission_classes([IsAuthenticated])
@tenant_endpoint
def remove_promotion(
    request: Request, tenant_id: uuid.UUID, order_id: uuid.UUID, promotion_id: uuid.UUID
) -> Response:
    result = PromotionService.remove_promotion(tenant_id, order_id, promotion_id)
    return Response({"removed_discount": str(result.removed_discount)})
