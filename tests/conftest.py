# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

import pytest

from planshift.recommendation.analytics import UsageAnalyticsAggregator
from planshift.recommendation.catalog import default_catalog
from planshift.recommendation.config import EngineConfig, reset_config, set_config
from planshift.recommendation.eligibility import EligibilityResolver
from planshift.recommendation.equivalency import CustomPlanEquivalencyMapper
from planshift.recommendation.models import (
    AppSumoRecord,
    CustomPlanRecord,
    DailyActivity,
    EngagementFacts,
    OrganizationRecord,
    ProjectFacts,
    UsageFacts,
    UserAnalytics,
)
from planshift.recommendation.service import PlanRecommendationService, reset_service

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolated_config():
    """Every test starts from the default configuration."""
    set_config(EngineConfig())
    yield
    reset_config()
    reset_service()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def aggregator():
    return UsageAnalyticsAggregator()


@pytest.fixture
def resolver(config):
    return EligibilityResolver(config)


@pytest.fixture
def service(config):
    return PlanRecommendationService(config=config)


# ---------------------------------------------------------------------------
# Builders (exposed as factory fixtures below)
# ---------------------------------------------------------------------------


def _make_facts(**overrides: Any) -> UsageFacts:
    """Usage facts of a small, moderately active team."""
    values: Dict[str, Any] = {
        "total_users": 4,
        "active_users": 3,
        "total_projects": 5,
        "active_projects": 4,
        "storage_used_bytes": 2 * 1024 ** 3,
        "total_tasks": 80,
        "assigned_tasks": 60,
        "comment_count": 40,
        "attachment_count": 20,
        "time_logged_tasks": 20,
        "gantt_projects": 2,
        "custom_field_count": 1,
        "collaborative_projects": 3,
        "projects": [
            ProjectFacts(task_count=20, phase_count=3, member_count=3),
            ProjectFacts(task_count=60, phase_count=5, custom_field_count=4, member_count=4),
        ],
        "engagement": EngagementFacts(
            active_days_30d=12,
            total_actions_30d=240,
            unique_active_users_30d=3,
            days_in_current_state=20,
        ),
    }
    values.update(overrides)
    return UsageFacts(**values)


def _free_record(organization_id: str = "org-free") -> OrganizationRecord:
    return OrganizationRecord(
        organization_id=organization_id,
        created_at=NOW - timedelta(days=120),
    )


def _trial_record(days_left: int = 5, organization_id: str = "org-trial") -> OrganizationRecord:
    return OrganizationRecord(
        organization_id=organization_id,
        created_at=NOW - timedelta(days=9),
        trial_expires_at=NOW + timedelta(days=days_left, hours=1),
    )


def _appsumo_record(
    days_ago: int, already_migrated: bool = False, organization_id: str = "org-appsumo",
) -> OrganizationRecord:
    return OrganizationRecord(
        organization_id=organization_id,
        created_at=NOW - timedelta(days=days_ago),
        appsumo=AppSumoRecord(
            purchase_date=NOW - timedelta(days=days_ago),
            already_migrated=already_migrated,
        ),
    )


def _custom_record(
    monthly_price: str = "50",
    features: Optional[Any] = None,
    preserve_pricing: bool = True,
    user_limit: Optional[int] = None,
    organization_id: str = "org-custom",
) -> OrganizationRecord:
    return OrganizationRecord(
        organization_id=organization_id,
        created_at=NOW - timedelta(days=900),
        custom_plan=CustomPlanRecord(
            plan_name="Legacy Team Plan",
            monthly_price=Decimal(monthly_price),
            user_limit=user_limit,
            features=features,
            preserve_pricing=preserve_pricing,
        ),
    )


def _daily_series(active_users=3, total_actions=40, days=30, spikes=None):
    """Flat daily activity with optional ``{offset: (users, actions)}`` spikes."""
    spikes = spikes or {}
    start = date(2026, 1, 1)
    series = []
    for offset in range(days):
        users, actions = spikes.get(offset, (active_users, total_actions))
        series.append(DailyActivity(
            day=start + timedelta(days=offset),
            active_users=users,
            total_actions=actions,
        ))
    return series


def _build_analytics(
    record: OrganizationRecord,
    facts: Optional[UsageFacts] = None,
    config: Optional[EngineConfig] = None,
) -> UserAnalytics:
    """UserAnalytics without custom-plan equivalents or insights."""
    facts = facts or _make_facts()
    resolver = EligibilityResolver(config or EngineConfig())
    metrics = UsageAnalyticsAggregator().aggregate(facts)
    eligibility = resolver.assess(record, metrics, NOW)
    return UserAnalytics(
        organization_id=record.organization_id,
        user_category=eligibility.user_category,
        usage_metrics=metrics,
        migration_eligibility=eligibility,
    )


def _build_custom_analytics(
    record: OrganizationRecord,
    facts: Optional[UsageFacts] = None,
    config: Optional[EngineConfig] = None,
) -> UserAnalytics:
    """UserAnalytics of a custom-plan organization with its equivalent tiers."""
    config = config or EngineConfig()
    metrics = UsageAnalyticsAggregator().aggregate(facts or _make_facts())
    details = CustomPlanEquivalencyMapper(config=config).build_details(
        record.custom_plan, metrics.total_users,
    )
    eligibility = EligibilityResolver(config).assess(
        record, metrics, NOW, custom_plan_details=details,
    )
    return UserAnalytics(
        organization_id=record.organization_id,
        user_category=eligibility.user_category,
        usage_metrics=metrics,
        migration_eligibility=eligibility,
    )


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_facts():
    """Build UsageFacts; keyword arguments override the defaults."""
    return _make_facts


@pytest.fixture
def free_record():
    return _free_record


@pytest.fixture
def trial_record():
    return _trial_record


@pytest.fixture
def appsumo_record():
    return _appsumo_record


@pytest.fixture
def custom_record():
    return _custom_record


@pytest.fixture
def daily_series():
    return _daily_series


@pytest.fixture
def build_analytics():
    return _build_analytics


@pytest.fixture
def build_custom_analytics():
    return _build_custom_analytics
