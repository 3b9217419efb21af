# -*- coding: utf-8 -*-
"""
User Classification & Eligibility Resolver - PlanShift

Determines which billing situation an organization is migrating from and
what it is offered:

- Category resolution with a strict priority order
  (AppSumo > custom plan > unexpired trial > active subscription >
  new user > free)
- AppSumo migration window, urgency and countdown
- Discount catalog per category
- Fixed eligible-plan list per category
- Upgrade reasons, migration windows and preserved benefits

Example:
    >>> from datetime import datetime, timezone
    >>> from planshift.recommendation.eligibility import EligibilityResolver
    >>> from planshift.recommendation.models import OrganizationRecord
    >>> resolver = EligibilityResolver()
    >>> now = datetime(2026, 3, 1, tzinfo=timezone.utc)
    >>> resolver.resolve_category(OrganizationRecord(organization_id="org-1"), now)
    <UserCategory.FREE: 'free'>

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple

from planshift.determinism import as_utc
from planshift.exceptions import CategoryResolutionError
from planshift.recommendation.config import EngineConfig, get_config
from planshift.recommendation.models import (
    AppSumoRecord,
    AppSumoStatus,
    CustomPlanDetails,
    DiscountType,
    Level,
    MigrationDiscount,
    MigrationEligibility,
    MigrationWindow,
    OrganizationRecord,
    PlanTier,
    UpgradeReason,
    UpgradeReasonType,
    UsageMetrics,
    UserCategory,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Static tables
# ---------------------------------------------------------------------------

_PAID_TIERS = (
    PlanTier.PRO_SMALL,
    PlanTier.BUSINESS_SMALL,
    PlanTier.PRO_LARGE,
    PlanTier.BUSINESS_LARGE,
    PlanTier.ENTERPRISE,
)
_BUSINESS_TIERS = (
    PlanTier.BUSINESS_SMALL,
    PlanTier.BUSINESS_LARGE,
    PlanTier.ENTERPRISE,
)

ELIGIBLE_PLANS: Mapping[UserCategory, Tuple[PlanTier, ...]] = MappingProxyType({
    UserCategory.TRIAL: _PAID_TIERS,
    UserCategory.FREE: (PlanTier.FREE,) + _PAID_TIERS,
    UserCategory.CUSTOM_PLAN: _PAID_TIERS,
    UserCategory.APPSUMO: _BUSINESS_TIERS,
    UserCategory.NEW_USER: (
        PlanTier.FREE, PlanTier.PRO_SMALL, PlanTier.BUSINESS_SMALL,
    ),
    UserCategory.ACTIVE_SUBSCRIBER: _PAID_TIERS,
})

PRESERVED_CUSTOM_BENEFITS = ("Current pricing structure", "Custom feature set")

TRIAL_WARNING_DAYS = 7


class EligibilityResolver:
    """Resolves user category, offers and eligible tiers.

    Attributes:
        config: Engine configuration (AppSumo window, grace period).
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or get_config()

    # ------------------------------------------------------------------
    # Category
    # ------------------------------------------------------------------

    def resolve_category(
        self,
        record: Optional[OrganizationRecord],
        now: datetime,
        organization_id: Optional[str] = None,
    ) -> UserCategory:
        """Classify an organization by its billing state.

        Args:
            record: Organization billing record, ``None`` if not found.
            now: Reference time for trial expiry and account age.
            organization_id: Id used in the error when ``record`` is missing.

        Returns:
            The highest-priority matching category.

        Raises:
            CategoryResolutionError: If no organization record exists.
        """
        if record is None:
            raise CategoryResolutionError(
                f"No organization record for {organization_id or 'unknown organization'}",
                organization_id=organization_id,
            )

        now = as_utc(now)
        if record.appsumo is not None and record.appsumo.coupon_redeemed:
            category = UserCategory.APPSUMO
        elif record.custom_plan is not None and record.custom_plan.is_active:
            category = UserCategory.CUSTOM_PLAN
        elif record.trial_expires_at is not None and record.trial_expires_at > now:
            category = UserCategory.TRIAL
        elif record.has_active_subscription:
            category = UserCategory.ACTIVE_SUBSCRIBER
        elif (
            record.created_at is not None
            and now - record.created_at < timedelta(days=self.config.new_user_grace_days)
        ):
            category = UserCategory.NEW_USER
        else:
            category = UserCategory.FREE

        logger.debug(
            "Resolved category for %s: %s", record.organization_id, category.value,
        )
        return category

    # ------------------------------------------------------------------
    # AppSumo
    # ------------------------------------------------------------------

    @staticmethod
    def urgency_for_remaining_days(remaining_days: int) -> Level:
        if remaining_days <= 1:
            return Level.CRITICAL
        if remaining_days <= 3:
            return Level.HIGH
        if remaining_days <= 5:
            return Level.MEDIUM
        return Level.LOW

    def countdown_message(self, remaining_days: int) -> str:
        pct = f"{self.config.appsumo_special_discount_pct:g}%"
        if remaining_days <= 0:
            return (
                "Discount expired, but you can still migrate to any Business "
                "plan at standard pricing"
            )
        if remaining_days == 1:
            return f"FINAL DAY: Your AppSumo {pct} discount expires in 24 hours"
        if remaining_days <= 2:
            return (
                f"URGENT: Only {remaining_days} days left to claim your "
                f"{pct} AppSumo discount"
            )
        if remaining_days <= 5:
            return (
                f"Limited Time: {remaining_days} days remaining for your "
                f"exclusive AppSumo {pct} discount"
            )
        return f"AppSumo Special: {remaining_days} days remaining for {pct} off Business plans"

    @staticmethod
    def recommended_appsumo_tier(metrics: Optional[UsageMetrics]) -> PlanTier:
        """Smallest Business tier that fits the organization's size."""
        if metrics is None:
            return PlanTier.BUSINESS_SMALL
        users, projects, tasks = (
            metrics.total_users, metrics.total_projects, metrics.total_tasks,
        )
        if users <= 5 and projects <= 10 and tasks <= 100:
            return PlanTier.BUSINESS_SMALL
        if users <= 20 and projects <= 50 and tasks <= 1000:
            return PlanTier.BUSINESS_LARGE
        return PlanTier.ENTERPRISE

    def appsumo_status(
        self,
        appsumo: AppSumoRecord,
        now: datetime,
        metrics: Optional[UsageMetrics] = None,
    ) -> AppSumoStatus:
        """Migration window state of an AppSumo purchase.

        ``remaining_migration_days`` is clamped at zero once the window closes.
        """
        now = as_utc(now)
        days_since = max(0, (now - appsumo.purchase_date).days)
        remaining = max(0, self.config.appsumo_window_days - days_since)
        eligible = remaining > 0 and not appsumo.already_migrated
        return AppSumoStatus(
            is_appsumo_user=True,
            purchase_date=appsumo.purchase_date,
            days_since_purchase=days_since,
            remaining_migration_days=remaining,
            eligible_for_special_discount=eligible,
            special_discount_percentage=Decimal(
                str(self.config.appsumo_special_discount_pct)
            ),
            minimum_tier_required=PlanTier.BUSINESS_SMALL,
            already_migrated=appsumo.already_migrated,
            urgency_level=self.urgency_for_remaining_days(remaining),
            countdown_message=self.countdown_message(remaining),
            recommended_tier=self.recommended_appsumo_tier(metrics),
            can_migrate_without_discount=not eligible and not appsumo.already_migrated,
        )

    # ------------------------------------------------------------------
    # Offers
    # ------------------------------------------------------------------

    @staticmethod
    def eligible_plans(category: UserCategory) -> List[PlanTier]:
        return list(ELIGIBLE_PLANS[category])

    def discounts_for(
        self,
        category: UserCategory,
        appsumo_status: Optional[AppSumoStatus] = None,
    ) -> List[MigrationDiscount]:
        """Discount catalog entry for ``category``.

        The AppSumo discount is only offered while its window is open.
        """
        if category == UserCategory.TRIAL:
            return [MigrationDiscount(
                discount_code="TRIAL_CONVERT_20",
                discount_type=DiscountType.PERCENTAGE,
                value=Decimal("20"),
                duration_months=3,
                conditions=["First-time conversion from trial"],
                stackable=False,
                expires_with_window=True,
            )]
        if category == UserCategory.FREE:
            return [MigrationDiscount(
                discount_code="FREE_UPGRADE_10",
                discount_type=DiscountType.PERCENTAGE,
                value=Decimal("10"),
                duration_months=1,
                conditions=["Upgrade from free plan"],
                eligible_plans=list(_PAID_TIERS),
                stackable=False,
            )]
        if category == UserCategory.CUSTOM_PLAN:
            return [MigrationDiscount(
                discount_code="LOYALTY_25",
                discount_type=DiscountType.PERCENTAGE,
                value=Decimal("25"),
                duration_months=12,
                conditions=["Existing custom plan customer"],
                stackable=True,
            )]
        if (
            category == UserCategory.APPSUMO
            and appsumo_status is not None
            and appsumo_status.eligible_for_special_discount
        ):
            pct = appsumo_status.special_discount_percentage
            return [MigrationDiscount(
                discount_code=f"APPSUMO_{pct.normalize():f}",
                discount_type=DiscountType.PERCENTAGE,
                value=pct,
                duration_months=12,
                conditions=[
                    "AppSumo customer migration",
                    f"Within {self.config.appsumo_window_days}-day window",
                    "Business plan or higher",
                ],
                eligible_plans=list(_BUSINESS_TIERS),
                stackable=False,
                expires_with_window=True,
            )]
        return []

    @staticmethod
    def upgrade_reasons(
        category: UserCategory,
        appsumo_status: Optional[AppSumoStatus] = None,
    ) -> List[UpgradeReason]:
        if category == UserCategory.TRIAL:
            return [UpgradeReason(
                reason="Trial period ending soon",
                priority=Level.HIGH,
                impact="Access to your projects will be limited",
                category=UpgradeReasonType.CAPACITY,
            )]
        if category == UserCategory.FREE:
            return [UpgradeReason(
                reason="Limited user capacity (3 users)",
                priority=Level.MEDIUM,
                impact="Cannot add more team members",
                category=UpgradeReasonType.CAPACITY,
            )]
        if category == UserCategory.CUSTOM_PLAN:
            return [UpgradeReason(
                reason="Migration to standardized pricing",
                priority=Level.MEDIUM,
                impact="Access to new features and better support",
                category=UpgradeReasonType.FEATURES,
            )]
        if category == UserCategory.APPSUMO:
            remaining = appsumo_status.remaining_migration_days if appsumo_status else 0
            return [UpgradeReason(
                reason="Limited-time migration window",
                priority=Level.CRITICAL,
                impact=f"Special pricing expires in {remaining} days",
                category=UpgradeReasonType.COST_OPTIMIZATION,
            )]
        return []

    def migration_window(
        self,
        category: UserCategory,
        record: OrganizationRecord,
        now: datetime,
        appsumo_status: Optional[AppSumoStatus] = None,
    ) -> Optional[MigrationWindow]:
        """Time-bound window for AppSumo and trial organizations."""
        if category == UserCategory.APPSUMO and appsumo_status is not None:
            start = appsumo_status.purchase_date or now
            return MigrationWindow(
                start_date=start,
                end_date=start + timedelta(days=self.config.appsumo_window_days),
                urgency_level=appsumo_status.urgency_level,
                remaining_days=appsumo_status.remaining_migration_days,
            )
        if category == UserCategory.TRIAL and record.trial_expires_at is not None:
            remaining = max(0, (record.trial_expires_at - now).days)
            if remaining <= 3:
                urgency = Level.HIGH
            elif remaining <= TRIAL_WARNING_DAYS:
                urgency = Level.MEDIUM
            else:
                urgency = Level.LOW
            return MigrationWindow(
                start_date=record.created_at or now,
                end_date=record.trial_expires_at,
                urgency_level=urgency,
                remaining_days=remaining,
            )
        return None

    @staticmethod
    def current_plan_label(
        category: UserCategory, record: OrganizationRecord,
    ) -> Optional[str]:
        if category == UserCategory.CUSTOM_PLAN and record.custom_plan is not None:
            return record.custom_plan.plan_name
        if category == UserCategory.APPSUMO:
            return "AppSumo Lifetime Deal"
        if category == UserCategory.TRIAL:
            return "Trial"
        if record.current_plan_name:
            return record.current_plan_name
        if category in (UserCategory.FREE, UserCategory.NEW_USER):
            return "Free Plan"
        return None

    # ------------------------------------------------------------------
    # Assessment
    # ------------------------------------------------------------------

    def assess(
        self,
        record: OrganizationRecord,
        metrics: UsageMetrics,
        now: datetime,
        custom_plan_details: Optional[CustomPlanDetails] = None,
        extra_discounts: Sequence[MigrationDiscount] = (),
    ) -> MigrationEligibility:
        """Full eligibility of one organization.

        Args:
            record: Organization billing record.
            metrics: Aggregated usage.
            now: Reference time.
            custom_plan_details: Decoded custom plan, when one exists.
            extra_discounts: Organization-specific discounts such as
                grandfathered pricing.

        Returns:
            MigrationEligibility for the resolved category.
        """
        now = as_utc(now)
        category = self.resolve_category(record, now, record.organization_id)
        appsumo_status = None
        if category == UserCategory.APPSUMO and record.appsumo is not None:
            appsumo_status = self.appsumo_status(record.appsumo, now, metrics)

        eligible = self.eligible_plans(category)
        if appsumo_status is not None:
            recommended = appsumo_status.recommended_tier
        elif custom_plan_details is not None and custom_plan_details.equivalent_plans:
            recommended = custom_plan_details.equivalent_plans[0].plan_tier
        else:
            recommended = next(t for t in eligible if t != PlanTier.FREE)

        preserved: List[str] = []
        if custom_plan_details is not None:
            preserved = list(PRESERVED_CUSTOM_BENEFITS)

        return MigrationEligibility(
            organization_id=record.organization_id,
            user_category=category,
            current_plan=self.current_plan_label(category, record),
            eligible_plans=eligible,
            recommended_plan=recommended,
            discounts=self.discounts_for(category, appsumo_status) + list(extra_discounts),
            migration_window=self.migration_window(category, record, now, appsumo_status),
            upgrade_reasons=self.upgrade_reasons(category, appsumo_status),
            preserved_benefits=preserved,
            appsumo_status=appsumo_status,
            custom_plan_details=custom_plan_details,
        )


__all__ = [
    "EligibilityResolver",
    "ELIGIBLE_PLANS",
    "PRESERVED_CUSTOM_BENEFITS",
]
