"""Tests for discount application and selection."""

from decimal import Decimal

import pytest

from planshift.recommendation.discounts import (
    apply_discount,
    blended_cost,
    discounted_months,
    select_discount,
)
from planshift.recommendation.models import DiscountType, MigrationDiscount, PlanTier


def _discount(code, kind=DiscountType.PERCENTAGE, value="20", months=3, plans=None):
    return MigrationDiscount(
        discount_code=code,
        discount_type=kind,
        value=Decimal(value),
        duration_months=months,
        eligible_plans=plans or [],
    )


class TestApplyDiscount:

    def test_percentage(self):
        assert apply_discount(Decimal("39.96"), _discount("P20")) == Decimal("31.97")

    def test_fixed_amount_is_floored_at_zero(self):
        fixed = _discount("F", DiscountType.FIXED_AMOUNT, "75")
        assert apply_discount(Decimal("49.95"), fixed) == Decimal("0.00")

    def test_non_price_discounts_leave_price_unchanged(self):
        free_months = _discount("FM", DiscountType.FREE_MONTHS, "2")
        assert apply_discount(Decimal("39.96"), free_months) == Decimal("39.96")
        assert apply_discount(Decimal("39.96"), None) == Decimal("39.96")

    def test_percentage_over_100_is_rejected(self):
        with pytest.raises(ValueError):
            _discount("BAD", value="120")


class TestSelectDiscount:

    def test_largest_saving_wins(self):
        small = _discount("P10", value="10")
        large = _discount("F15", DiscountType.FIXED_AMOUNT, "15")
        chosen = select_discount([small, large], PlanTier.PRO_SMALL, Decimal("39.96"))
        assert chosen.discount_code == "F15"

    def test_ties_keep_first(self):
        first = _discount("A", value="10")
        second = _discount("B", value="10")
        chosen = select_discount([first, second], PlanTier.PRO_SMALL, Decimal("100"))
        assert chosen.discount_code == "A"

    def test_restricted_and_expired_discounts_are_skipped(self):
        business_only = _discount("BIZ", value="50", plans=[PlanTier.BUSINESS_SMALL])
        zero_duration = _discount("ZERO", value="30", months=0)

        assert select_discount(
            [business_only, zero_duration], PlanTier.PRO_SMALL, Decimal("39.96"),
        ) is None
        assert select_discount(
            [business_only], PlanTier.BUSINESS_SMALL, Decimal("74.95"),
        ).discount_code == "BIZ"

    def test_nothing_to_save_on_free(self):
        assert select_discount([_discount("P20")], PlanTier.FREE, Decimal("0.00")) is None


class TestBlendedCost:

    def test_discounted_months(self):
        assert discounted_months(None, 12) == 0
        assert discounted_months(_discount("P", months=3), 12) == 3
        assert discounted_months(_discount("P", months=24), 12) == 12
        assert discounted_months(_discount("P", months=-1), 60) == 60

    def test_blended_cost(self):
        assert blended_cost(Decimal("100.00"), Decimal("80.00"), 3, 12) == Decimal("1140.00")
        assert blended_cost(Decimal("39.96"), Decimal("31.97"), 3, 12) == Decimal("455.55")

    def test_permanent_discount_covers_every_month(self):
        assert blended_cost(Decimal("100.00"), Decimal("80.00"), -1, 36) == Decimal("2880.00")
