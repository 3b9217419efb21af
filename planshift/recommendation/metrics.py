# -*- coding: utf-8 -*-
"""
Prometheus Metrics - PlanShift

Seven Prometheus metrics for the recommendation service. Only the service
facade records them; the scoring and analysis components stay free of side
effects.

Metrics:
    1. planshift_recommendations_total (Counter)
    2. planshift_recommendation_duration_seconds (Histogram)
    3. planshift_tier_evaluations_total (Counter)
    4. planshift_analyses_total (Counter)
    5. planshift_equivalencies_total (Counter)
    6. planshift_grandfathered_discounts_total (Counter)
    7. planshift_engine_errors_total (Counter)

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# 1. Recommendation responses by user category
recommendations_total = Counter(
    "planshift_recommendations_total",
    "Total plan recommendation responses generated",
    labelnames=["category"],
)

# 2. Recommendation / analysis duration
recommendation_duration_seconds = Histogram(
    "planshift_recommendation_duration_seconds",
    "Duration of recommendation and analysis operations in seconds",
    labelnames=["operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

# 3. Tier evaluations
tier_evaluations_total = Counter(
    "planshift_tier_evaluations_total",
    "Total tier evaluations performed by the scoring engine",
    labelnames=["tier"],
)

# 4. Cost-benefit analyses by decision
analyses_total = Counter(
    "planshift_analyses_total",
    "Total migration cost-benefit analyses",
    labelnames=["tier", "decision"],
)

# 5. Equivalent tiers found for custom plans
equivalencies_total = Counter(
    "planshift_equivalencies_total",
    "Total equivalent tiers found for legacy custom plans",
    labelnames=["tier"],
)

# 6. Synthesized grandfathered discounts
grandfathered_discounts_total = Counter(
    "planshift_grandfathered_discounts_total",
    "Total grandfathered pricing discounts synthesized",
)

# 7. Engine errors by type
engine_errors_total = Counter(
    "planshift_engine_errors_total",
    "Total engine errors raised to callers",
    labelnames=["error_type"],
)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def record_recommendation(category: str, tiers: list, duration_seconds: float) -> None:
    """Record one recommendation response.

    Args:
        category: User category value of the organization.
        tiers: Tier values that were evaluated.
        duration_seconds: Wall time of the request.
    """
    recommendations_total.labels(category=category).inc()
    recommendation_duration_seconds.labels(operation="recommend").observe(duration_seconds)
    for tier in tiers:
        tier_evaluations_total.labels(tier=tier).inc()


def record_analysis(tier: str, decision: str, duration_seconds: float) -> None:
    """Record one cost-benefit analysis."""
    analyses_total.labels(tier=tier, decision=decision).inc()
    recommendation_duration_seconds.labels(operation="analyze").observe(duration_seconds)


def record_equivalency(tier: str) -> None:
    equivalencies_total.labels(tier=tier).inc()


def record_grandfathered_discount() -> None:
    grandfathered_discounts_total.inc()


def record_error(error_type: str) -> None:
    """Record an engine error by exception class name."""
    engine_errors_total.labels(error_type=error_type).inc()


__all__ = [
    # Metric objects
    "recommendations_total",
    "recommendation_duration_seconds",
    "tier_evaluations_total",
    "analyses_total",
    "equivalencies_total",
    "grandfathered_discounts_total",
    "engine_errors_total",
    # Helper functions
    "record_recommendation",
    "record_analysis",
    "record_equivalency",
    "record_grandfathered_discount",
    "record_error",
]
