# -*- coding: utf-8 -*-
"""
Plan Recommendation Service - PlanShift

Single entry point over the recommendation engine. The facade wires the
usage aggregator, eligibility resolver, equivalency mapper, scoring engine,
cost-benefit analyzer, insights analyzer and migration advisor together,
stamps every result with a provenance hash and records Prometheus metrics.

The engine components are pure; this module is the only place that reads
the clock, calls collaborators or touches metrics.

Usage:
    >>> from planshift.recommendation.service import get_service
    >>> service = get_service()
    >>> response = service.generate_recommendations("org-1", record, facts, now)
    >>> response.recommendations[0].plan_tier
    <PlanTier.BUSINESS_SMALL: 'BUSINESS_SMALL'>

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import List, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel

from planshift.determinism import as_utc, content_hash
from planshift.exceptions import ConfigurationError, PlanShiftException
from planshift.recommendation import metrics
from planshift.recommendation.actions import MigrationAdvisor
from planshift.recommendation.analytics import UsageAnalyticsAggregator
from planshift.recommendation.catalog import (
    BenefitTables,
    PricingCatalog,
    ScoringWeights,
    default_catalog,
)
from planshift.recommendation.config import EngineConfig, get_config
from planshift.recommendation.cost_benefit import MigrationCostBenefitAnalyzer
from planshift.recommendation.eligibility import EligibilityResolver
from planshift.recommendation.equivalency import CustomPlanEquivalencyMapper
from planshift.recommendation.insights import UsageInsightsAnalyzer
from planshift.recommendation.models import (
    CustomPlanDetails,
    CustomPlanRecord,
    DetailedMigrationCostBenefit,
    MigrationDiscount,
    OrganizationRecord,
    PlanRecommendationResponse,
    PlanTier,
    UsageFacts,
    UserAnalytics,
    UserCategory,
)
from planshift.recommendation.providers import LegacyPlanStore, UsageDataProvider
from planshift.recommendation.scoring import PlanScoringEngine

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)


def with_provenance(result: ResultT) -> ResultT:
    """Copy of ``result`` carrying the SHA-256 of its canonical JSON dump."""
    payload = result.model_dump(mode="json", exclude={"provenance_hash"})
    return result.model_copy(update={"provenance_hash": content_hash(payload)})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ===================================================================
# PlanRecommendationService facade
# ===================================================================

_singleton_lock = threading.Lock()
_singleton_instance: Optional["PlanRecommendationService"] = None


class PlanRecommendationService:
    """Unified facade over the recommendation engine.

    Attributes:
        catalog: Pricing catalog shared by every component.
        config: Engine configuration.
        aggregator: UsageAnalyticsAggregator instance.
        eligibility: EligibilityResolver instance.
        mapper: CustomPlanEquivalencyMapper instance.
        scoring: PlanScoringEngine instance.
        analyzer: MigrationCostBenefitAnalyzer instance.
        insights: UsageInsightsAnalyzer instance.
        advisor: MigrationAdvisor instance.

    Example:
        >>> service = PlanRecommendationService()
        >>> result = service.analyze_migration(
        ...     "org-1", record, facts, "BUSINESS_SMALL", as_of=now,
        ... )
        >>> result.decision
        <RecommendationType.PROCEED: 'proceed'>
    """

    def __init__(
        self,
        catalog: Optional[PricingCatalog] = None,
        weights: Optional[ScoringWeights] = None,
        benefits: Optional[BenefitTables] = None,
        config: Optional[EngineConfig] = None,
        usage_provider: Optional[UsageDataProvider] = None,
        plan_store: Optional[LegacyPlanStore] = None,
    ) -> None:
        """Initialize the facade.

        Args:
            catalog: Pricing catalog. Uses the standard catalog if None.
            weights: Scoring weights. Uses the defaults if None.
            benefits: Benefit tables. Uses the defaults if None.
            config: Engine config. Uses global config if None.
            usage_provider: Source of usage facts for ``recommend_for``.
            plan_store: Source of organization records for ``recommend_for``.
        """
        self.catalog = catalog or default_catalog()
        self.config = config or get_config()
        self.usage_provider = usage_provider
        self.plan_store = plan_store

        self.aggregator = UsageAnalyticsAggregator()
        self.eligibility = EligibilityResolver(self.config)
        self.mapper = CustomPlanEquivalencyMapper(self.catalog, self.config)
        self.scoring = PlanScoringEngine(self.catalog, weights, self.config)
        self.analyzer = MigrationCostBenefitAnalyzer(self.catalog, benefits, self.config)
        self.insights = UsageInsightsAnalyzer()
        self.advisor = MigrationAdvisor(self.catalog, self.config)

        logger.info(
            "PlanRecommendationService created (parallel_evaluation=%s)",
            self.config.parallel_evaluation,
        )

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    def generate_recommendations(
        self,
        organization_id: str,
        record: Optional[OrganizationRecord],
        facts: UsageFacts,
        now: Optional[datetime] = None,
    ) -> PlanRecommendationResponse:
        """Rank every eligible tier for one organization.

        Args:
            organization_id: Organization identifier.
            record: Billing record; ``None`` when the organization is unknown.
            facts: Raw usage facts.
            now: Reference time. Defaults to the current UTC time.

        Returns:
            PlanRecommendationResponse with a provenance hash.

        Raises:
            CategoryResolutionError: If ``record`` is None.
        """
        now = as_utc(now) or _utcnow()
        started = time.perf_counter()
        try:
            category = self.eligibility.resolve_category(record, now, organization_id)
        except PlanShiftException as exc:
            metrics.record_error(type(exc).__name__)
            raise

        usage = self.aggregator.aggregate(facts)
        details, extra = self._custom_plan(
            organization_id, record, category, usage.total_users,
        )
        eligibility = self.eligibility.assess(record, usage, now, details, extra)
        analytics = UserAnalytics(
            organization_id=organization_id,
            user_category=category,
            usage_metrics=usage,
            migration_eligibility=eligibility,
            insights=self.insights.analyze(category, usage, facts.engagement),
        )

        recommendations = self.scoring.recommend(analytics, now)
        response = with_provenance(PlanRecommendationResponse(
            generated_at=now,
            user_analytics=analytics,
            recommendations=recommendations,
            urgent_actions=self.advisor.urgent_actions(analytics, now),
            migration_summary=self.advisor.summary(analytics, recommendations),
            special_offers=self.advisor.special_offers(analytics, now),
        ))

        elapsed = time.perf_counter() - started
        metrics.record_recommendation(
            category.value, [r.plan_tier.value for r in recommendations], elapsed,
        )
        logger.info(
            "Generated %d recommendations for %s (%s) in %.1fms; top=%s",
            len(recommendations),
            organization_id,
            category.value,
            elapsed * 1000,
            recommendations[0].plan_tier.value if recommendations else None,
        )
        return response

    def recommend_for(
        self, organization_id: str, now: Optional[datetime] = None,
    ) -> PlanRecommendationResponse:
        """``generate_recommendations`` with inputs fetched from collaborators.

        Raises:
            ConfigurationError: If no collaborators are configured.
            CategoryResolutionError: If the organization has no record.
        """
        record, facts = self._fetch(organization_id)
        return self.generate_recommendations(organization_id, record, facts, now)

    # ------------------------------------------------------------------
    # Cost-benefit analysis
    # ------------------------------------------------------------------

    def analyze_migration(
        self,
        organization_id: str,
        record: Optional[OrganizationRecord],
        facts: UsageFacts,
        target_tier: Union[PlanTier, str],
        as_of: Optional[datetime] = None,
    ) -> DetailedMigrationCostBenefit:
        """Cost-benefit analysis of moving one organization to ``target_tier``.

        Args:
            organization_id: Organization identifier.
            record: Billing record; ``None`` when the organization is unknown.
            facts: Raw usage facts.
            target_tier: Tier to analyze, as enum or name.
            as_of: Reference time. Defaults to the current UTC time.

        Returns:
            DetailedMigrationCostBenefit with a provenance hash.

        Raises:
            CategoryResolutionError: If ``record`` is None.
            UnknownPlanTierError: If ``target_tier`` is not a catalog tier.
        """
        as_of = as_utc(as_of) or _utcnow()
        started = time.perf_counter()
        try:
            tier = self.catalog.resolve_tier(target_tier)
            category = self.eligibility.resolve_category(record, as_of, organization_id)
        except PlanShiftException as exc:
            metrics.record_error(type(exc).__name__)
            raise

        usage = self.aggregator.aggregate(facts)
        appsumo_status = None
        if category == UserCategory.APPSUMO and record.appsumo is not None:
            appsumo_status = self.eligibility.appsumo_status(record.appsumo, as_of, usage)

        details = None
        discounts: List[MigrationDiscount] = self.eligibility.discounts_for(
            category, appsumo_status,
        )
        if category == UserCategory.CUSTOM_PLAN and record.custom_plan is not None:
            details = self.mapper.build_details(record.custom_plan, usage.total_users)
            grandfathered = self.mapper.grandfathered_discount(
                organization_id, record.custom_plan, tier, usage.total_users,
            )
            if grandfathered is not None:
                metrics.record_grandfathered_discount()
                discounts.append(grandfathered)

        result = with_provenance(self.analyzer.analyze(
            organization_id,
            tier,
            category,
            usage,
            custom_plan_details=details,
            appsumo_status=appsumo_status,
            discounts=discounts,
            as_of=as_of,
        ))

        elapsed = time.perf_counter() - started
        metrics.record_analysis(tier.value, result.decision.value, elapsed)
        logger.info(
            "Analyzed %s -> %s: decision=%s net_benefit=%s risk=%d",
            organization_id,
            tier.value,
            result.decision.value,
            result.net_benefit,
            result.risk_assessment.overall_risk_score,
        )
        return result

    def analyze_for(
        self,
        organization_id: str,
        target_tier: Union[PlanTier, str],
        as_of: Optional[datetime] = None,
    ) -> DetailedMigrationCostBenefit:
        """``analyze_migration`` with inputs fetched from collaborators."""
        record, facts = self._fetch(organization_id)
        return self.analyze_migration(organization_id, record, facts, target_tier, as_of)

    # ------------------------------------------------------------------
    # Custom plans
    # ------------------------------------------------------------------

    def map_custom_plan(
        self, custom_plan: CustomPlanRecord, user_count: int,
    ) -> CustomPlanDetails:
        """Decode a custom plan and find its equivalent standard tiers."""
        details = self.mapper.build_details(custom_plan, user_count)
        for equivalent in details.equivalent_plans:
            metrics.record_equivalency(equivalent.plan_tier.value)
        return details

    def _custom_plan(
        self,
        organization_id: str,
        record: OrganizationRecord,
        category: UserCategory,
        user_count: int,
    ) -> Tuple[Optional[CustomPlanDetails], List[MigrationDiscount]]:
        if category != UserCategory.CUSTOM_PLAN or record.custom_plan is None:
            return None, []

        details = self.map_custom_plan(record.custom_plan, user_count)
        discounts: List[MigrationDiscount] = []
        for equivalent in details.equivalent_plans:
            discount = self.mapper.grandfathered_discount(
                organization_id, record.custom_plan, equivalent.plan_tier, user_count,
            )
            if discount is not None:
                metrics.record_grandfathered_discount()
                discounts.append(discount)
        return details, discounts

    def _fetch(
        self, organization_id: str,
    ) -> Tuple[Optional[OrganizationRecord], UsageFacts]:
        if self.plan_store is None or self.usage_provider is None:
            metrics.record_error(ConfigurationError.__name__)
            raise ConfigurationError(
                "PlanRecommendationService has no usage provider or plan store",
                context={"organization_id": organization_id},
            )
        record = self.plan_store.get_organization_record(organization_id)
        facts = self.usage_provider.get_usage_facts(organization_id)
        return record, facts


# ===================================================================
# Thread-safe singleton access
# ===================================================================


def get_service() -> PlanRecommendationService:
    """Get or create the singleton PlanRecommendationService instance.

    Returns:
        The singleton PlanRecommendationService.
    """
    global _singleton_instance
    if _singleton_instance is None:
        with _singleton_lock:
            if _singleton_instance is None:
                _singleton_instance = PlanRecommendationService()
    return _singleton_instance


def set_service(service: PlanRecommendationService) -> None:
    """Replace the singleton, e.g. with one wired to real collaborators."""
    global _singleton_instance
    with _singleton_lock:
        _singleton_instance = service


def reset_service() -> None:
    global _singleton_instance
    with _singleton_lock:
        _singleton_instance = None


__all__ = [
    "PlanRecommendationService",
    "with_provenance",
    "get_service",
    "set_service",
    "reset_service",
]
