"""Tests for user classification, AppSumo windows and category offers."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from planshift.exceptions import CategoryResolutionError
from planshift.recommendation.analytics import UsageAnalyticsAggregator
from planshift.recommendation.eligibility import ELIGIBLE_PLANS
from planshift.recommendation.models import (
    AppSumoRecord,
    CustomPlanRecord,
    DiscountType,
    Level,
    MigrationDiscount,
    OrganizationRecord,
    PlanTier,
    UserCategory,
)


# ==============================================================================
# Category resolution
# ==============================================================================

class TestResolveCategory:

    def test_missing_record_raises(self, resolver, now):
        with pytest.raises(CategoryResolutionError) as exc_info:
            resolver.resolve_category(None, now, "org-missing")
        assert exc_info.value.organization_id == "org-missing"
        assert "org-missing" in exc_info.value.message

    def test_appsumo_wins_over_custom_plan(self, resolver, now, appsumo_record):
        record = appsumo_record(2).model_copy(
            update={"custom_plan": CustomPlanRecord(monthly_price=Decimal("40"))}
        )
        assert resolver.resolve_category(record, now) == UserCategory.APPSUMO

    def test_unredeemed_coupon_is_not_appsumo(self, resolver, now):
        record = OrganizationRecord(
            organization_id="org-1",
            created_at=now - timedelta(days=60),
            appsumo=AppSumoRecord(purchase_date=now, coupon_redeemed=False),
        )
        assert resolver.resolve_category(record, now) == UserCategory.FREE

    def test_custom_plan_wins_over_trial(self, resolver, now, custom_record):
        record = custom_record().model_copy(
            update={"trial_expires_at": now + timedelta(days=3)}
        )
        assert resolver.resolve_category(record, now) == UserCategory.CUSTOM_PLAN

    def test_inactive_custom_plan_is_ignored(self, resolver, now):
        record = OrganizationRecord(
            organization_id="org-1",
            created_at=now - timedelta(days=60),
            has_active_subscription=True,
            custom_plan=CustomPlanRecord(is_active=False),
        )
        assert resolver.resolve_category(record, now) == UserCategory.ACTIVE_SUBSCRIBER

    def test_unexpired_trial(self, resolver, now, trial_record):
        assert resolver.resolve_category(trial_record(5), now) == UserCategory.TRIAL

    def test_expired_trial_falls_through(self, resolver, now, trial_record):
        record = trial_record().model_copy(
            update={"trial_expires_at": now - timedelta(days=1)}
        )
        assert resolver.resolve_category(record, now) == UserCategory.FREE

    def test_new_user_within_grace_period(self, resolver, now):
        record = OrganizationRecord(organization_id="org-1", created_at=now - timedelta(days=3))
        assert resolver.resolve_category(record, now) == UserCategory.NEW_USER

    def test_free_without_any_signal(self, resolver, now, free_record):
        assert resolver.resolve_category(free_record(), now) == UserCategory.FREE
        assert resolver.resolve_category(
            OrganizationRecord(organization_id="org-1"), now,
        ) == UserCategory.FREE

    def test_naive_timestamps_read_as_utc(self, resolver, now):
        record = OrganizationRecord(
            organization_id="org-1",
            created_at=datetime(2026, 2, 20),
            trial_expires_at=datetime(2026, 3, 4),
        )

        assert record.trial_expires_at.tzinfo == timezone.utc
        assert resolver.resolve_category(record, now) == UserCategory.TRIAL
        assert resolver.resolve_category(record, now.replace(tzinfo=None)) == UserCategory.TRIAL


# ==============================================================================
# AppSumo status
# ==============================================================================

class TestAppSumoStatus:

    def test_open_window(self, resolver, now, appsumo_record):
        status = resolver.appsumo_status(appsumo_record(2).appsumo, now)

        assert status.days_since_purchase == 2
        assert status.remaining_migration_days == 3
        assert status.eligible_for_special_discount is True
        assert status.special_discount_percentage == Decimal("50")
        assert status.urgency_level == Level.HIGH
        assert status.countdown_message == (
            "Limited Time: 3 days remaining for your exclusive AppSumo 50% discount"
        )
        assert status.can_migrate_without_discount is False

    def test_final_day(self, resolver, now, appsumo_record):
        status = resolver.appsumo_status(appsumo_record(4).appsumo, now)

        assert status.remaining_migration_days == 1
        assert status.urgency_level == Level.CRITICAL
        assert status.countdown_message.startswith("FINAL DAY")

    def test_closed_window_is_clamped(self, resolver, now, appsumo_record):
        status = resolver.appsumo_status(appsumo_record(6).appsumo, now)

        assert status.remaining_migration_days == 0
        assert status.eligible_for_special_discount is False
        assert status.can_migrate_without_discount is True
        assert status.countdown_message.startswith("Discount expired")

    def test_naive_purchase_date(self, resolver, now):
        appsumo = AppSumoRecord(purchase_date=datetime(2026, 2, 27, 12, 0))
        status = resolver.appsumo_status(appsumo, now)

        assert appsumo.purchase_date.tzinfo == timezone.utc
        assert status.remaining_migration_days == 3

    def test_already_migrated(self, resolver, now, appsumo_record):
        status = resolver.appsumo_status(appsumo_record(1, already_migrated=True).appsumo, now)

        assert status.eligible_for_special_discount is False
        assert status.can_migrate_without_discount is False
        assert resolver.discounts_for(UserCategory.APPSUMO, status) == []

    @pytest.mark.parametrize("remaining,level", [
        (0, Level.CRITICAL), (1, Level.CRITICAL), (3, Level.HIGH), (5, Level.MEDIUM), (9, Level.LOW),
    ])
    def test_urgency_bands(self, resolver, remaining, level):
        assert resolver.urgency_for_remaining_days(remaining) == level

    def test_recommended_tier_by_size(self, resolver, make_facts):
        aggregator = UsageAnalyticsAggregator()
        small = aggregator.aggregate(make_facts())
        medium = aggregator.aggregate(make_facts(total_users=12))
        large = aggregator.aggregate(make_facts(total_users=40))

        assert resolver.recommended_appsumo_tier(None) == PlanTier.BUSINESS_SMALL
        assert resolver.recommended_appsumo_tier(small) == PlanTier.BUSINESS_SMALL
        assert resolver.recommended_appsumo_tier(medium) == PlanTier.BUSINESS_LARGE
        assert resolver.recommended_appsumo_tier(large) == PlanTier.ENTERPRISE


# ==============================================================================
# Discounts and eligible plans
# ==============================================================================

class TestCategoryOffers:

    def test_eligible_plan_table(self, resolver):
        assert PlanTier.FREE not in resolver.eligible_plans(UserCategory.TRIAL)
        assert resolver.eligible_plans(UserCategory.FREE)[0] == PlanTier.FREE
        assert resolver.eligible_plans(UserCategory.APPSUMO) == [
            PlanTier.BUSINESS_SMALL, PlanTier.BUSINESS_LARGE, PlanTier.ENTERPRISE,
        ]
        assert resolver.eligible_plans(UserCategory.NEW_USER) == [
            PlanTier.FREE, PlanTier.PRO_SMALL, PlanTier.BUSINESS_SMALL,
        ]
        assert set(ELIGIBLE_PLANS) == set(UserCategory)

    @pytest.mark.parametrize("category,code,value,months", [
        (UserCategory.TRIAL, "TRIAL_CONVERT_20", "20", 3),
        (UserCategory.FREE, "FREE_UPGRADE_10", "10", 1),
        (UserCategory.CUSTOM_PLAN, "LOYALTY_25", "25", 12),
    ])
    def test_category_discounts(self, resolver, category, code, value, months):
        (discount,) = resolver.discounts_for(category)

        assert discount.discount_code == code
        assert discount.discount_type == DiscountType.PERCENTAGE
        assert discount.value == Decimal(value)
        assert discount.duration_months == months

    def test_free_upgrade_discount_skips_free_tier(self, resolver):
        (discount,) = resolver.discounts_for(UserCategory.FREE)

        assert not discount.applies_to(PlanTier.FREE)
        assert discount.eligible_plans == [
            PlanTier.PRO_SMALL, PlanTier.BUSINESS_SMALL, PlanTier.PRO_LARGE,
            PlanTier.BUSINESS_LARGE, PlanTier.ENTERPRISE,
        ]

    def test_appsumo_discount_only_while_window_open(self, resolver, now, appsumo_record):
        open_status = resolver.appsumo_status(appsumo_record(2).appsumo, now)
        closed_status = resolver.appsumo_status(appsumo_record(6).appsumo, now)

        (discount,) = resolver.discounts_for(UserCategory.APPSUMO, open_status)
        assert discount.discount_code == "APPSUMO_50"
        assert discount.duration_months == 12
        assert discount.applies_to(PlanTier.BUSINESS_SMALL)
        assert not discount.applies_to(PlanTier.PRO_SMALL)
        assert resolver.discounts_for(UserCategory.APPSUMO, closed_status) == []

    def test_no_discount_for_subscribers_and_new_users(self, resolver):
        assert resolver.discounts_for(UserCategory.ACTIVE_SUBSCRIBER) == []
        assert resolver.discounts_for(UserCategory.NEW_USER) == []


# ==============================================================================
# Migration windows and full assessment
# ==============================================================================

class TestMigrationWindow:

    @pytest.mark.parametrize("days_left,level", [
        (2, Level.HIGH), (5, Level.MEDIUM), (10, Level.LOW),
    ])
    def test_trial_window(self, resolver, days_left, level, now, trial_record):
        record = trial_record(days_left)
        window = resolver.migration_window(UserCategory.TRIAL, record, now)

        assert window.remaining_days == days_left
        assert window.urgency_level == level
        assert window.end_date == record.trial_expires_at

    def test_appsumo_window(self, resolver, now, appsumo_record):
        record = appsumo_record(2)
        status = resolver.appsumo_status(record.appsumo, now)
        window = resolver.migration_window(UserCategory.APPSUMO, record, now, status)

        assert window.start_date == record.appsumo.purchase_date
        assert window.end_date == record.appsumo.purchase_date + timedelta(days=5)
        assert window.remaining_days == 3

    def test_no_window_for_free(self, resolver, now, free_record):
        assert resolver.migration_window(UserCategory.FREE, free_record(), now) is None


class TestAssess:

    def test_free_organization(self, resolver, aggregator, now, make_facts, free_record):
        eligibility = resolver.assess(free_record(), aggregator.aggregate(make_facts()), now)

        assert eligibility.user_category == UserCategory.FREE
        assert eligibility.current_plan == "Free Plan"
        assert eligibility.recommended_plan == PlanTier.PRO_SMALL
        assert [d.discount_code for d in eligibility.discounts] == ["FREE_UPGRADE_10"]
        assert eligibility.upgrade_reasons[0].reason == "Limited user capacity (3 users)"
        assert eligibility.migration_window is None
        assert eligibility.appsumo_status is None

    def test_appsumo_organization(self, resolver, aggregator, now, make_facts, appsumo_record):
        eligibility = resolver.assess(appsumo_record(1), aggregator.aggregate(make_facts()), now)

        assert eligibility.current_plan == "AppSumo Lifetime Deal"
        assert eligibility.recommended_plan == PlanTier.BUSINESS_SMALL
        assert eligibility.appsumo_status.remaining_migration_days == 4
        assert eligibility.upgrade_reasons[0].impact == "Special pricing expires in 4 days"

    def test_extra_discounts_are_appended(self, resolver, aggregator, now, make_facts, custom_record):
        extra = MigrationDiscount(
            discount_code="GRANDFATHERED_org-custom_PRO_SMALL",
            discount_type=DiscountType.FIXED_AMOUNT,
            value=Decimal("5.00"),
            duration_months=-1,
        )
        eligibility = resolver.assess(
            custom_record(), aggregator.aggregate(make_facts()), now, extra_discounts=[extra],
        )

        assert eligibility.user_category == UserCategory.CUSTOM_PLAN
        assert eligibility.current_plan == "Legacy Team Plan"
        assert [d.discount_code for d in eligibility.discounts] == [
            "LOYALTY_25", "GRANDFATHERED_org-custom_PRO_SMALL",
        ]
