"""
Automatic promotion matching.

Date-range and flag filters run in the database; day-of-week, time-of-day,
usage-cap and minimum-amount filters run in process against the local clock.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.common.constants import DAYS_IN_WEEK, ZERO_AMOUNT

from .models import Promotion

if TYPE_CHECKING:
    from apps.orders.models import Order

logger = logging.getLogger(__name__)


def local_day_and_time(now: datetime) -> tuple[int, str]:
    """Return (day of week with 0 = Sunday, "HH:MM") in the configured time zone."""
    if timezone.is_naive(now):
        now = timezone.make_aware(now)
    local_now = timezone.localtime(now)
    return local_now.isoweekday() % DAYS_IN_WEEK, local_now.strftime("%H:%M")


def promotion_matches(promotion: Promotion, order: Order, day_of_week: int, time_of_day: str) -> bool:
    """In-process schedule, usage and amount checks for one candidate."""
    if promotion.days_of_week and day_of_week not in promotion.days_of_week:
        return False

    # Zero-padded HH:MM compares correctly as strings
    if promotion.start_time and promotion.end_time and not (
        promotion.start_time <= time_of_day <= promotion.end_time
    ):
        return False

    if promotion.is_exhausted:
        return False

    return not (promotion.min_order_amount > ZERO_AMOUNT and order.subtotal < promotion.min_order_amount)


class PromotionMatcher:
    """Select the automatic promotions that apply to an order right now."""

    @staticmethod
    def candidates(tenant_id: uuid.UUID, now: datetime) -> QuerySet[Promotion]:
        return (
            Promotion.objects.filter(
                tenant_id=tenant_id,
                is_active=True,
                is_automatic=True,
                start_date__lte=now,
            )
            .filter(Q(end_date__isnull=True) | Q(end_date__gte=now))
            .order_by("-priority", "created_at")
        )

    @classmethod
    def get_applicable_promotions(
        cls,
        tenant_id: uuid.UUID,
        order: Order,
        now: datetime | None = None,
    ) -> list[Promotion]:
        """
        Matching promotions in descending priority.

        Args:
            tenant_id: Restaurant owning the order.
            order: Order whose persisted subtotal is checked against minimums.
            now: Evaluation instant, defaults to the current time.
        """
        now = now or timezone.now()
        day_of_week, time_of_day = local_day_and_time(now)

        applicable = [
            promotion
            for promotion in cls.candidates(tenant_id, now)
            if promotion_matches(promotion, order, day_of_week, time_of_day)
        ]
        logger.debug(
            "Matched %d automatic promotions for order %s",
            len(applicable),
            order.id,
            extra={"order_id": str(order.id), "day_of_week": day_of_week, "time_of_day": time_of_day},
        )
        return applicable
