# -*- coding: utf-8 -*-
"""
Plan Matching & Scoring Engine - PlanShift

Scores every tier eligible for an organization's category against its
usage profile and ranks the results.

Five factors, each scored 0-100, are combined with ``ScoringWeights``:

- User count fit (30%)
- Feature requirement fit (25%)
- Budget alignment (20%)
- Usage pattern fit (15%)
- Growth trajectory fit (10%)

Recommendations are sorted by descending score. Equal scores keep tier
evaluation order, so repeated runs over the same input are identical.

Example:
    >>> from planshift.recommendation.scoring import PlanScoringEngine
    >>> engine = PlanScoringEngine()
    >>> recommendations = engine.recommend(user_analytics, now)
    >>> recommendations[0].recommendation_score >= recommendations[-1].recommendation_score
    True

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import statistics
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Sequence

from planshift.determinism import Money, round_half_up
from planshift.recommendation.catalog import (
    PricingCatalog,
    ScoringWeights,
    TierSpec,
    default_catalog,
)
from planshift.recommendation.config import EngineConfig, get_config
from planshift.recommendation.discounts import apply_discount, select_discount
from planshift.recommendation.equivalency import (
    CustomPlanEquivalencyMapper,
    compare_costs,
)
from planshift.recommendation.models import (
    BOOLEAN_FEATURES,
    CustomPlanDetails,
    FeatureComparison,
    MatchFactor,
    MatchReason,
    MigrationComplexity,
    PlanRecommendation,
    PlanTier,
    RecommendationTimeline,
    UsageMetrics,
    UserAnalytics,
    UserCategory,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Factor thresholds
# ---------------------------------------------------------------------------

BASE_FEATURE_SCORE = 60
ADVANCED_THRESHOLDS = (
    ("reporting", 0.5),
    ("advanced_permissions", 0.3),
    ("client_portal", 0.2),
    ("resource_management", 0.4),
)
CORE_THRESHOLDS = (
    ("gantt_charts", 0.3),
    ("time_tracking", 0.4),
    ("custom_fields", 0.3),
)

# Utilization above these marks counts as a feature in active use.
FEATURE_IN_USE = (
    ("gantt_charts", 0.3),
    ("time_tracking", 0.4),
    ("custom_fields", 0.3),
    ("reporting", 0.5),
    ("advanced_permissions", 0.3),
    ("client_portal", 0.2),
)

BASE_USAGE_SCORE = 60
COLLABORATION_BONUS = 20
COMPLEXITY_BONUS = 15

BASE_DATA_QUALITY = 70
MIN_CONFIDENCE = 60

APPSUMO_IMMEDIATE_DAYS = 5


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class PlanScoringEngine:
    """Weighted multi-factor ranking of candidate tiers.

    Attributes:
        catalog: Pricing catalog.
        weights: Factor weights, summing to exactly 1.
        config: Engine configuration.
        mapper: Equivalency mapper used for custom-plan feature matches.
    """

    def __init__(
        self,
        catalog: Optional[PricingCatalog] = None,
        weights: Optional[ScoringWeights] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self.catalog = catalog or default_catalog()
        self.weights = weights or ScoringWeights()
        self.config = config or get_config()
        self.mapper = CustomPlanEquivalencyMapper(self.catalog, self.config)

    # ------------------------------------------------------------------
    # Factors
    # ------------------------------------------------------------------

    def score_user_count(self, spec: TierSpec, user_count: int) -> int:
        if spec.is_unlimited:
            return 100 if user_count > self.config.large_team_threshold else 70
        cap = spec.seat_cap
        if spec.is_free:
            return 100 if user_count <= cap else 0
        if user_count <= cap:
            return 100 if user_count >= cap * 0.7 else 80
        return max(0, 100 - (user_count - cap) * 10)

    @staticmethod
    def score_feature_fit(spec: TierSpec, metrics: UsageMetrics) -> int:
        utilization = metrics.feature_utilization
        score = BASE_FEATURE_SCORE
        if spec.advanced_features:
            score += sum(
                10 for name, mark in ADVANCED_THRESHOLDS
                if getattr(utilization, name) > mark
            )
        if not spec.is_free:
            score += sum(
                5 for name, mark in CORE_THRESHOLDS
                if getattr(utilization, name) > mark
            )
        return min(100, score)

    def score_budget(
        self,
        spec: TierSpec,
        category: UserCategory,
        user_count: int,
        custom_plan: Optional[CustomPlanDetails] = None,
    ) -> int:
        """Budget alignment of ``spec`` for the organization's category."""
        if category == UserCategory.FREE and spec.is_free:
            return 100
        if category == UserCategory.TRIAL:
            return 90 if spec.tier == self.catalog.paid_tiers()[0] else 70
        if custom_plan is not None:
            current = custom_plan.current_price
            new = spec.monthly_cost(max(1, user_count))
            if new <= current * Decimal("1.1"):
                return 90
            if new <= current * Decimal("1.3"):
                return 70
            return 50
        return 75

    def score_usage_patterns(self, spec: TierSpec, metrics: UsageMetrics) -> int:
        score = BASE_USAGE_SCORE
        if metrics.collaboration_index > 0.7 and spec.large_team:
            score += COLLABORATION_BONUS
        if metrics.complexity_index > 0.6 and spec.advanced_features:
            score += COMPLEXITY_BONUS
        return min(100, score)

    def score_growth(self, spec: TierSpec, metrics: UsageMetrics) -> int:
        predicted = metrics.growth_trend.predicted_6month_users
        if spec.is_unlimited:
            return 100 if predicted > self.config.large_team_threshold else 60
        cap = spec.seat_cap
        if predicted <= cap * 0.8:
            return 100
        if predicted <= cap:
            return 80
        return max(30, 100 - (predicted - cap) * 5)

    # ------------------------------------------------------------------
    # Explanations
    # ------------------------------------------------------------------

    @staticmethod
    def explain_user_count(spec: TierSpec, user_count: int, score: int) -> str:
        if score >= 90:
            limit = "unlimited" if spec.is_unlimited else str(spec.seat_cap)
            return f"Perfect fit: Your {user_count} users are well within the {limit} user limit"
        if score >= 70:
            return f"Good fit: Accommodates your {user_count} users with room for growth"
        return f"Capacity concern: {user_count} users may exceed optimal capacity for this plan"

    @staticmethod
    def explain_feature_fit(score: int) -> str:
        if score >= 90:
            return "Excellent feature alignment with your usage patterns"
        if score >= 70:
            return "Good feature coverage for your team's needs"
        return "Basic features may limit your team's productivity"

    @staticmethod
    def explain_budget(score: int) -> str:
        if score >= 90:
            return "Excellent value proposition for your organization"
        if score >= 70:
            return "Reasonable cost for the features provided"
        return "Higher cost may require budget consideration"

    @staticmethod
    def explain_usage_patterns(score: int) -> str:
        if score >= 80:
            return "Plan features align well with your team's workflow"
        return "Standard features for typical usage patterns"

    @staticmethod
    def explain_growth(score: int) -> str:
        if score >= 90:
            return "Excellent scalability for your projected growth"
        if score >= 70:
            return "Adequate capacity for expected team expansion"
        return "May need plan upgrade as team grows"

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    def match_reasons(self, spec: TierSpec, analytics: UserAnalytics) -> List[MatchReason]:
        """The five weighted factors for one tier, in fixed factor order."""
        metrics = analytics.usage_metrics
        users = metrics.total_users
        custom_plan = analytics.migration_eligibility.custom_plan_details

        user_score = self.score_user_count(spec, users)
        feature_score = self.score_feature_fit(spec, metrics)
        budget_score = self.score_budget(spec, analytics.user_category, users, custom_plan)
        usage_score = self.score_usage_patterns(spec, metrics)
        growth_score = self.score_growth(spec, metrics)

        scored = (
            (MatchFactor.USER_COUNT, user_score,
             self.explain_user_count(spec, users, user_score)),
            (MatchFactor.FEATURE_REQUIREMENTS, feature_score,
             self.explain_feature_fit(feature_score)),
            (MatchFactor.BUDGET_ALIGNMENT, budget_score,
             self.explain_budget(budget_score)),
            (MatchFactor.USAGE_PATTERNS, usage_score,
             self.explain_usage_patterns(usage_score)),
            (MatchFactor.GROWTH_TRAJECTORY, growth_score,
             self.explain_growth(growth_score)),
        )
        return [
            MatchReason(
                factor=factor,
                score=score,
                weight=float(self.weights.weight(factor)),
                explanation=explanation,
            )
            for factor, score, explanation in scored
        ]

    def weighted_score(self, reasons: Sequence[MatchReason]) -> int:
        """Half-up rounded sum of weight times factor score."""
        total = sum(
            (self.weights.weight(r.factor) * r.score for r in reasons),
            Decimal("0"),
        )
        return round_half_up(total)

    @staticmethod
    def data_quality(analytics: UserAnalytics) -> int:
        quality = BASE_DATA_QUALITY
        if analytics.usage_metrics.total_users > 0:
            quality += 10
        if analytics.usage_metrics.total_projects > 0:
            quality += 10
        if analytics.migration_eligibility.custom_plan_details is not None:
            quality += 10
        return min(100, quality)

    def confidence(self, reasons: Sequence[MatchReason], analytics: UserAnalytics) -> int:
        """``max(60, 100 - stddev(factor scores) - (100 - data quality))``."""
        spread = statistics.pstdev([r.score for r in reasons])
        penalty = 100 - self.data_quality(analytics)
        return round_half_up(max(MIN_CONFIDENCE, 100 - spread - penalty))

    # ------------------------------------------------------------------
    # Recommendation details
    # ------------------------------------------------------------------

    def compare_features(
        self, spec: TierSpec, analytics: UserAnalytics,
    ) -> FeatureComparison:
        """Feature delta between the current arrangement and ``spec``.

        Custom plans compare their stored flags. Everyone else compares the
        features the team actively uses.
        """
        new_features = [n for n in BOOLEAN_FEATURES if n in spec.features]
        custom_plan = analytics.migration_eligibility.custom_plan_details

        if custom_plan is not None:
            current = custom_plan.current_features.enabled_features()
            match = self.mapper.feature_match_percent(
                custom_plan.current_features,
                spec.tier,
                custom_plan.user_limit,
                analytics.usage_metrics.total_users,
            )
            critical_met = match >= self.config.feature_match_floor
        else:
            utilization = analytics.usage_metrics.feature_utilization
            current = [
                name for name, mark in FEATURE_IN_USE
                if getattr(utilization, name) > mark
            ]
            covered = [name for name in current if name in spec.features]
            match = 100 if not current else round_half_up(
                Decimal(len(covered)) / Decimal(len(current)) * 100
            )
            critical_met = len(covered) == len(current)

        return FeatureComparison(
            current_features=current,
            new_features=new_features,
            upgraded_features=[n for n in new_features if n not in current],
            removed_features=[n for n in current if n not in spec.features],
            feature_match_percent=match,
            critical_features_met=critical_met,
        )

    @staticmethod
    def migration_complexity(analytics: UserAnalytics) -> MigrationComplexity:
        if analytics.user_category in (
            UserCategory.FREE, UserCategory.TRIAL, UserCategory.NEW_USER,
        ):
            return MigrationComplexity.SIMPLE
        if analytics.migration_eligibility.custom_plan_details is not None:
            return MigrationComplexity.COMPLEX
        return MigrationComplexity.MODERATE

    @staticmethod
    def urgency_indicators(analytics: UserAnalytics) -> List[str]:
        indicators: List[str] = []
        appsumo = analytics.migration_eligibility.appsumo_status
        if appsumo is not None and appsumo.remaining_migration_days > 0:
            indicators.append(
                f"AppSumo migration window expires in "
                f"{appsumo.remaining_migration_days} days"
            )
        if (
            analytics.user_category == UserCategory.FREE
            and analytics.usage_metrics.total_users >= 3
        ):
            indicators.append("At user limit - upgrade needed to add team members")
        return indicators

    def timeline(self, analytics: UserAnalytics, now: datetime) -> RecommendationTimeline:
        appsumo = analytics.migration_eligibility.appsumo_status
        immediate = (
            appsumo is not None
            and 0 < appsumo.remaining_migration_days <= APPSUMO_IMMEDIATE_DAYS
        )
        return RecommendationTimeline(
            immediate_action=immediate,
            optimal_migration_date=now if immediate else None,
            migration_window=analytics.migration_eligibility.migration_window,
            urgency_indicators=self.urgency_indicators(analytics),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def score_tier(
        self, tier: PlanTier, analytics: UserAnalytics, now: datetime,
    ) -> PlanRecommendation:
        """Score one tier for the organization described by ``analytics``.

        Raises:
            UnknownPlanTierError: If ``tier`` is not in the catalog.
        """
        spec = self.catalog.get(tier)
        eligibility = analytics.migration_eligibility
        seats = max(1, analytics.usage_metrics.total_users)

        reasons = self.match_reasons(spec, analytics)
        score = self.weighted_score(reasons)

        base = spec.monthly_cost(seats)
        discounts = [d for d in eligibility.discounts if d.applies_to(spec.tier)]
        effective = apply_discount(base, select_discount(discounts, spec.tier, base))
        current = (
            eligibility.custom_plan_details.current_price
            if eligibility.custom_plan_details is not None else Money.of(0)
        )

        recommendation = PlanRecommendation(
            plan_id=spec.tier.value,
            plan_name=spec.display_name,
            plan_tier=spec.tier,
            recommendation_score=score,
            confidence_level=self.confidence(reasons, analytics),
            match_reasons=reasons,
            cost_analysis=compare_costs(current, base, effective),
            feature_comparison=self.compare_features(spec, analytics),
            migration_complexity=self.migration_complexity(analytics),
            timeline=self.timeline(analytics, now),
            discounts=discounts,
            preserved_benefits=list(eligibility.preserved_benefits),
        )
        logger.debug(
            "Scored %s for %s: %d (%s)",
            spec.tier.value,
            analytics.organization_id,
            score,
            ", ".join(f"{r.factor.value}={r.score}" for r in reasons),
        )
        return recommendation

    def recommend(
        self, analytics: UserAnalytics, now: datetime,
    ) -> List[PlanRecommendation]:
        """Score every eligible tier and rank the results.

        Args:
            analytics: Usage profile and eligibility of the organization.
            now: Reference time.

        Returns:
            Recommendations sorted by descending score; ties keep
            evaluation order.
        """
        tiers = list(analytics.migration_eligibility.eligible_plans)
        evaluate: Callable[[PlanTier], PlanRecommendation] = (
            lambda tier: self.score_tier(tier, analytics, now)
        )

        if self.config.parallel_evaluation and len(tiers) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                results = list(pool.map(evaluate, tiers))
        else:
            results = [evaluate(tier) for tier in tiers]

        results.sort(key=lambda r: r.recommendation_score, reverse=True)
        return results


__all__ = [
    "PlanScoringEngine",
]
