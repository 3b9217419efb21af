# -*- coding: utf-8 -*-
"""
Discount Application - PlanShift

Applies migration discounts to a monthly price. Only percentage and fixed
amount discounts change the monthly price; the single discount with the
largest monthly saving wins and the discounted price never drops below 0.

Example:
    >>> from decimal import Decimal
    >>> from planshift.recommendation.discounts import blended_cost
    >>> blended_cost(Decimal("100.00"), Decimal("80.00"), 3, 12)
    Decimal('1140.00')

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Optional

from planshift.determinism import Money
from planshift.recommendation.models import DiscountType, MigrationDiscount, PlanTier

logger = logging.getLogger(__name__)

PRICE_DISCOUNT_TYPES = frozenset({DiscountType.PERCENTAGE, DiscountType.FIXED_AMOUNT})


def apply_discount(base: Decimal, discount: Optional[MigrationDiscount]) -> Decimal:
    """Monthly price after ``discount``, floored at 0."""
    if discount is None or discount.discount_type not in PRICE_DISCOUNT_TYPES:
        return Money.quantize(base)
    if discount.discount_type == DiscountType.PERCENTAGE:
        reduced = base - Money.percent_of(base, discount.value)
    else:
        reduced = base - discount.value
    return Money.quantize(Money.floor_zero(reduced))


def select_discount(
    discounts: Iterable[MigrationDiscount],
    tier: PlanTier,
    base: Decimal,
) -> Optional[MigrationDiscount]:
    """Pick the applicable discount with the largest monthly saving.

    Ties keep the first discount. Returns ``None`` when nothing saves money.
    """
    best: Optional[MigrationDiscount] = None
    best_saving = Decimal("0")
    for discount in discounts:
        if discount.discount_type not in PRICE_DISCOUNT_TYPES:
            continue
        if discount.duration_months == 0 or not discount.applies_to(tier):
            continue
        saving = base - apply_discount(base, discount)
        if saving > best_saving:
            best, best_saving = discount, saving
    return best


def discounted_months(discount: Optional[MigrationDiscount], months: int) -> int:
    """Number of the first ``months`` billed at the discounted price."""
    if discount is None:
        return 0
    if discount.is_permanent:
        return months
    return min(discount.duration_months, months)


def blended_cost(
    base: Decimal, effective: Decimal, duration_months: int, months: int,
) -> Decimal:
    """Cost of ``months`` months with the first ``duration_months`` discounted.

    ``duration_months`` of ``-1`` discounts every month.
    """
    discounted = months if duration_months == -1 else min(max(0, duration_months), months)
    return Money.quantize(effective * discounted + base * (months - discounted))


__all__ = [
    "PRICE_DISCOUNT_TYPES",
    "apply_discount",
    "select_discount",
    "discounted_months",
    "blended_cost",
]
