# -*- coding: utf-8 -*-
"""
PlanShift Recommendation Engine
===============================

Plan recommendation and migration cost-benefit engine. It supports:

- Usage analytics: feature utilization, collaboration, complexity, growth
  and peak usage periods from raw usage facts
- Eligibility: user category, eligible tiers, discounts, AppSumo windows
- Scoring: five weighted factors per eligible tier, ranked best first
- Equivalency: standard tiers matching a legacy custom plan, with
  grandfathered pricing discounts
- Cost-benefit: costs, benefits, risks, timeline, decision and scenarios
- Thread-safe configuration with PLANSHIFT_ env prefix
- 7 Prometheus metrics recorded by the service facade

Key Components:
    - analytics: UsageAnalyticsAggregator
    - eligibility: EligibilityResolver
    - scoring: PlanScoringEngine
    - equivalency: CustomPlanEquivalencyMapper
    - cost_benefit: MigrationCostBenefitAnalyzer
    - insights: UsageInsightsAnalyzer
    - actions: MigrationAdvisor
    - service: PlanRecommendationService facade

Example:
    >>> from planshift.recommendation import PlanRecommendationService
    >>> service = PlanRecommendationService()
    >>> response = service.generate_recommendations("org-1", record, facts, now)
    >>> [r.plan_tier.value for r in response.recommendations][:2]
    ['BUSINESS_SMALL', 'PRO_LARGE']
"""

from planshift.recommendation.actions import MigrationAdvisor
from planshift.recommendation.analytics import UsageAnalyticsAggregator
from planshift.recommendation.catalog import (
    BenefitTables,
    PricingCatalog,
    ScoringWeights,
    TierSpec,
    default_catalog,
)
from planshift.recommendation.config import (
    EngineConfig,
    get_config,
    reset_config,
    set_config,
)
from planshift.recommendation.cost_benefit import MigrationCostBenefitAnalyzer
from planshift.recommendation.eligibility import EligibilityResolver
from planshift.recommendation.equivalency import CustomPlanEquivalencyMapper
from planshift.recommendation.insights import UsageInsightsAnalyzer
from planshift.recommendation.providers import (
    InMemoryFactsSource,
    LegacyPlanStore,
    UsageDataProvider,
)
from planshift.recommendation.scoring import PlanScoringEngine
from planshift.recommendation.service import (
    PlanRecommendationService,
    get_service,
    reset_service,
    set_service,
)

__all__ = [
    # Configuration
    "EngineConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Static tables
    "PricingCatalog",
    "TierSpec",
    "ScoringWeights",
    "BenefitTables",
    "default_catalog",
    # Components
    "UsageAnalyticsAggregator",
    "EligibilityResolver",
    "PlanScoringEngine",
    "CustomPlanEquivalencyMapper",
    "MigrationCostBenefitAnalyzer",
    "UsageInsightsAnalyzer",
    "MigrationAdvisor",
    # Collaborators
    "UsageDataProvider",
    "LegacyPlanStore",
    "InMemoryFactsSource",
    # Facade
    "PlanRecommendationService",
    "get_service",
    "set_service",
    "reset_service",
]
