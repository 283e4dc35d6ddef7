"""
Discount calculation for the promotions engine.

Pure functions over DiscountLine snapshots: no database access, no clock.
All amounts are rounded to two decimals with ROUND_HALF_UP.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from apps.common.constants import PERCENT_DIVISOR, ZERO_AMOUNT
from apps.common.utils import clamp_non_negative, round_money, sum_money

from .rules import (
    BuyXGetYDiscount,
    DiscountLine,
    DiscountRule,
    EligibilityScope,
    FixedAmountDiscount,
    FlatOrderDiscount,
    PercentageDiscount,
    build_discount_rule,
)

if TYPE_CHECKING:
    from .models import Promotion


# ===============================================================================
# Data Classes for Results
# ===============================================================================


@dataclass(frozen=True)
class ItemDiscount:
    item_id: uuid.UUID
    discount: Decimal


@dataclass(frozen=True)
class DiscountResult:
    """
    Result of discount calculation.

    Attributes:
        total_discount: Aggregate discount for the promotion.
        item_discounts: Per-line breakdown; empty for pure order-level discounts.
    """

    total_discount: Decimal = ZERO_AMOUNT
    item_discounts: tuple[ItemDiscount, ...] = ()

    @property
    def has_breakdown(self) -> bool:
        return bool(self.item_discounts)

    @classmethod
    def from_items(cls, item_discounts: list[ItemDiscount]) -> DiscountResult:
        # Zero shares carry no attribution
        kept = tuple(entry for entry in item_discounts if entry.discount > ZERO_AMOUNT)
        return cls(total_discount=sum_money(entry.discount for entry in kept), item_discounts=kept)


# ===============================================================================
# Apportionment helpers
# ===============================================================================


def distribute_proportionally(
    amount: Decimal,
    weights: list[tuple[uuid.UUID, Decimal]],
) -> list[ItemDiscount]:
    """
    Split amount across weighted entries in their given order.

    Every entry but the last gets round2(amount * weight / total_weight),
    never more than what is left; the last entry takes the remainder so the
    shares always sum to exactly amount.
    """
    total_weight = sum((weight for _, weight in weights), ZERO_AMOUNT)
    if total_weight <= ZERO_AMOUNT or not weights:
        return []

    remaining = round_money(amount)
    shares: list[ItemDiscount] = []
    last_index = len(weights) - 1
    for index, (item_id, weight) in enumerate(weights):
        if index == last_index:
            share = remaining
        else:
            share = min(round_money(amount * weight / total_weight), remaining)
        shares.append(ItemDiscount(item_id=item_id, discount=share))
        remaining -= share
    return shares


def cap_discount(result: DiscountResult, cap: Decimal | None) -> DiscountResult:
    """
    Cap the aggregate discount at max_discount_amount.

    The per-item breakdown is scaled down with the same remainder-to-last
    rule, so ledger rows keep summing to the capped aggregate.
    """
    if cap is None or result.total_discount <= cap:
        return result
    cap = clamp_non_negative(round_money(cap))
    if not result.has_breakdown:
        return DiscountResult(total_discount=cap)
    scaled = distribute_proportionally(
        cap,
        [(entry.item_id, entry.discount) for entry in result.item_discounts],
    )
    return DiscountResult.from_items(scaled)


# ===============================================================================
# Discount Calculator
# ===============================================================================


class DiscountCalculator:
    """Compute the discount one promotion gives on a set of order lines."""

    @classmethod
    def calculate(cls, promotion: Promotion, lines: list[DiscountLine]) -> DiscountResult:
        """Filter lines by the promotion's scope, then run its rule."""
        eligible = EligibilityScope.for_promotion(promotion).filter(lines)
        if not eligible:
            return DiscountResult()
        return cls.calculate_rule(build_discount_rule(promotion), eligible)

    @classmethod
    def calculate_rule(cls, rule: DiscountRule, eligible: list[DiscountLine]) -> DiscountResult:
        match rule:
            case PercentageDiscount(percent=percent):
                return cls._percentage(percent, eligible)
            case FixedAmountDiscount(amount=amount, per_item=False):
                return cls._fixed_shared(amount, eligible)
            case FixedAmountDiscount(amount=amount, per_item=True):
                return cls._fixed_per_item(amount, eligible)
            case BuyXGetYDiscount():
                return cls._buy_x_get_y(rule, eligible)
            case FlatOrderDiscount(amount=amount):
                return cls._flat_order(amount, eligible)
        raise TypeError(f"Unsupported discount rule: {rule!r}")

    @staticmethod
    def _percentage(percent: Decimal, eligible: list[DiscountLine]) -> DiscountResult:
        return DiscountResult.from_items([
            ItemDiscount(item_id=line.item_id, discount=round_money(line.subtotal * percent / PERCENT_DIVISOR))
            for line in eligible
        ])

    @staticmethod
    def _fixed_shared(amount: Decimal, eligible: list[DiscountLine]) -> DiscountResult:
        eligible_subtotal = sum((line.subtotal for line in eligible), ZERO_AMOUNT)
        if eligible_subtotal <= ZERO_AMOUNT:
            return DiscountResult()
        to_distribute = min(amount, eligible_subtotal)
        return DiscountResult.from_items(
            distribute_proportionally(to_distribute, [(line.item_id, line.subtotal) for line in eligible])
        )

    @staticmethod
    def _fixed_per_item(amount: Decimal, eligible: list[DiscountLine]) -> DiscountResult:
        return DiscountResult.from_items([
            ItemDiscount(item_id=line.item_id, discount=round_money(clamp_non_negative(min(amount, line.subtotal))))
            for line in eligible
        ])

    @staticmethod
    def _buy_x_get_y(rule: BuyXGetYDiscount, eligible: list[DiscountLine]) -> DiscountResult:
        groups: dict[uuid.UUID, list[DiscountLine]] = defaultdict(list)
        for line in eligible:
            groups[line.product_id].append(line)

        item_discounts: list[ItemDiscount] = []
        for product_lines in groups.values():
            total_quantity = sum(line.quantity for line in product_lines)
            free_units = (total_quantity // rule.group_size) * rule.get_quantity
            if free_units <= 0:
                continue
            # Cheapest lines are given away first
            for line in sorted(product_lines, key=lambda entry: entry.unit_price):
                if free_units <= 0:
                    break
                units = min(free_units, line.quantity)
                item_discounts.append(ItemDiscount(item_id=line.item_id, discount=round_money(line.unit_price * units)))
                free_units -= units
        return DiscountResult.from_items(item_discounts)

    @staticmethod
    def _flat_order(amount: Decimal, eligible: list[DiscountLine]) -> DiscountResult:
        eligible_subtotal = sum((line.subtotal for line in eligible), ZERO_AMOUNT)
        return DiscountResult(total_discount=round_money(clamp_non_negative(min(amount, eligible_subtotal))))
