# -*- coding: utf-8 -*-
"""
Migration Advice - PlanShift

Everything a recommendation response carries besides the ranked tiers:
urgent actions, the overall migration summary and time-limited special
offers.

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Sequence

from planshift.determinism import Money
from planshift.recommendation.catalog import PricingCatalog, default_catalog
from planshift.recommendation.config import EngineConfig, get_config
from planshift.recommendation.eligibility import TRIAL_WARNING_DAYS
from planshift.recommendation.models import (
    PlanRecommendation,
    PlanTier,
    Severity,
    SpecialOffer,
    SummaryAction,
    MigrationSummary,
    UrgentAction,
    UrgentActionType,
    UserAnalytics,
    UserCategory,
)

logger = logging.getLogger(__name__)

PLAN_MIGRATION_SCORE = 80
LARGE_DATA_GB = 50
LARGE_TEAM_USERS = 20
TRIAL_CONVERSION_PCT = Decimal("20")


class MigrationAdvisor:
    """Builds urgent actions, the migration summary and special offers."""

    def __init__(
        self,
        catalog: Optional[PricingCatalog] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self.catalog = catalog or default_catalog()
        self.config = config or get_config()

    # ------------------------------------------------------------------
    # Urgent actions
    # ------------------------------------------------------------------

    def urgent_actions(self, analytics: UserAnalytics, now: datetime) -> List[UrgentAction]:
        """Deadline, capacity and trial-expiry warnings.

        A closed AppSumo window produces no deadline action.
        """
        actions: List[UrgentAction] = []
        eligibility = analytics.migration_eligibility
        appsumo = eligibility.appsumo_status

        if appsumo is not None and 0 < appsumo.remaining_migration_days <= self.config.appsumo_window_days:
            remaining = appsumo.remaining_migration_days
            actions.append(UrgentAction(
                action_type=UrgentActionType.MIGRATION_DEADLINE,
                severity=Severity.CRITICAL if remaining <= 2 else Severity.ERROR,
                message=f"AppSumo migration window expires in {remaining} days",
                action_required=(
                    f"Choose and migrate to a Business plan to retain "
                    f"{self.config.appsumo_special_discount_pct:g}% discount"
                ),
                deadline=now + timedelta(days=remaining),
            ))

        free_cap = self.catalog.get(PlanTier.FREE).seat_cap
        users = analytics.usage_metrics.total_users
        if analytics.user_category == UserCategory.FREE and users >= free_cap:
            actions.append(UrgentAction(
                action_type=UrgentActionType.CAPACITY_LIMIT,
                severity=Severity.WARNING,
                message=f"Free plan user limit reached ({min(users, free_cap)}/{free_cap} users)",
                action_required="Upgrade to add more team members",
            ))

        window = eligibility.migration_window
        if (
            analytics.user_category == UserCategory.TRIAL
            and window is not None
            and window.remaining_days <= TRIAL_WARNING_DAYS
        ):
            actions.append(UrgentAction(
                action_type=UrgentActionType.TRIAL_EXPIRY,
                severity=Severity.WARNING,
                message=f"Trial expires in {window.remaining_days} days",
                action_required="Choose a paid plan to keep access to your projects",
                deadline=window.end_date,
            ))
        return actions

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def summary(
        self, analytics: UserAnalytics, recommendations: Sequence[PlanRecommendation],
    ) -> MigrationSummary:
        top = recommendations[0] if recommendations else None
        appsumo = analytics.migration_eligibility.appsumo_status
        window_open = appsumo is not None and appsumo.remaining_migration_days > 0

        if window_open:
            action = SummaryAction.MIGRATE_NOW
        elif top is not None and top.recommendation_score > PLAN_MIGRATION_SCORE:
            action = SummaryAction.PLAN_MIGRATION
        elif analytics.user_category == UserCategory.CUSTOM_PLAN:
            action = SummaryAction.STAY_CURRENT
        else:
            action = SummaryAction.EVALUATE_OPTIONS

        if window_open:
            timeline = (
                f"Immediate action required - "
                f"{appsumo.remaining_migration_days} days remaining"
            )
        elif analytics.user_category == UserCategory.TRIAL:
            timeline = "Within 7 days before trial expires"
        else:
            timeline = "Flexible timeline - migrate when convenient"

        return MigrationSummary(
            recommended_action=action,
            timeline=timeline,
            estimated_savings=self.estimated_savings(analytics, top),
            risk_factors=self.risk_factors(analytics),
        )

    @staticmethod
    def estimated_savings(
        analytics: UserAnalytics, top: Optional[PlanRecommendation],
    ) -> Decimal:
        """Annual saving of the top tier against a custom plan's price."""
        custom_plan = analytics.migration_eligibility.custom_plan_details
        if top is None or custom_plan is None:
            return Money.of(0)
        monthly = custom_plan.current_price - top.cost_analysis.new_monthly_cost
        return Money.quantize(Money.floor_zero(monthly) * 12)

    @staticmethod
    def risk_factors(analytics: UserAnalytics) -> List[str]:
        risks: List[str] = []
        metrics = analytics.usage_metrics
        if analytics.migration_eligibility.custom_plan_details is not None:
            risks.append("Loss of grandfathered pricing")
            risks.append("Potential feature differences")
        if metrics.storage_used_gb > LARGE_DATA_GB:
            risks.append("Large data migration required")
        if metrics.total_users > LARGE_TEAM_USERS:
            risks.append("Complex user permission migration")
        return risks

    # ------------------------------------------------------------------
    # Offers
    # ------------------------------------------------------------------

    def special_offers(self, analytics: UserAnalytics, now: datetime) -> List[SpecialOffer]:
        offers: List[SpecialOffer] = []
        eligibility = analytics.migration_eligibility
        appsumo = eligibility.appsumo_status

        if appsumo is not None and appsumo.eligible_for_special_discount:
            pct = appsumo.special_discount_percentage
            label = f"{pct.normalize():f}"
            offers.append(SpecialOffer(
                offer_id="appsumo-50off",
                title=f"AppSumo Exclusive: {label}% Off Business Plans",
                description=(
                    f"Limited time offer for AppSumo customers. Get {label}% off "
                    f"any Business plan for 12 months."
                ),
                discount_percentage=pct,
                valid_until=now + timedelta(days=appsumo.remaining_migration_days),
                conditions=[
                    "AppSumo customer",
                    f"Migration within {self.config.appsumo_window_days} days",
                ],
                featured=True,
            ))

        if analytics.user_category == UserCategory.TRIAL:
            window = eligibility.migration_window
            valid_until = (
                window.end_date if window is not None
                else now + timedelta(days=self.config.trial_offer_days)
            )
            offers.append(SpecialOffer(
                offer_id="trial-convert",
                title="Trial Conversion",
                description=(
                    f"Convert from trial to any paid plan and save "
                    f"{TRIAL_CONVERSION_PCT}% for your first 3 months."
                ),
                discount_percentage=TRIAL_CONVERSION_PCT,
                valid_until=valid_until,
                conditions=["Active trial user"],
            ))
        return offers


__all__ = [
    "MigrationAdvisor",
]
