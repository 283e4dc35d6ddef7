"""
Money helpers shared by order totals and discount calculation.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from apps.common.constants import MONEY_QUANTUM, ZERO_AMOUNT


def round_money(amount: Decimal) -> Decimal:
    """Round to two decimal places, halves away from zero"""
    return Decimal(amount).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def clamp_non_negative(amount: Decimal) -> Decimal:
    return amount if amount > ZERO_AMOUNT else ZERO_AMOUNT


def sum_money(amounts: Iterable[Decimal]) -> Decimal:
    total = ZERO_AMOUNT
    for amount in amounts:
        total += amount
    return round_money(total)
