"""Tests for MigrationAdvisor urgent actions, summary and special offers."""

from datetime import timedelta
from decimal import Decimal

import pytest

from planshift.recommendation.actions import MigrationAdvisor
from planshift.recommendation.models import (
    PlanTier,
    Severity,
    SummaryAction,
    UrgentActionType,
)
from planshift.recommendation.scoring import PlanScoringEngine


@pytest.fixture
def advisor(catalog, config):
    return MigrationAdvisor(catalog, config)


@pytest.fixture
def engine(catalog, config):
    return PlanScoringEngine(catalog, config=config)


# ==============================================================================
# Urgent actions
# ==============================================================================

class TestUrgentActions:

    @pytest.mark.parametrize("days_ago,remaining,severity", [
        (1, 4, Severity.ERROR),
        (3, 2, Severity.CRITICAL),
        (4, 1, Severity.CRITICAL),
    ])
    def test_appsumo_deadline(self, advisor, days_ago, remaining, severity, now, appsumo_record, build_analytics):
        (action,) = advisor.urgent_actions(build_analytics(appsumo_record(days_ago)), now)

        assert action.action_type == UrgentActionType.MIGRATION_DEADLINE
        assert action.severity == severity
        assert action.message == f"AppSumo migration window expires in {remaining} days"
        assert action.action_required == (
            "Choose and migrate to a Business plan to retain 50% discount"
        )
        assert action.deadline == now + timedelta(days=remaining)

    def test_closed_appsumo_window_has_no_deadline(self, advisor, now, appsumo_record, build_analytics):
        assert advisor.urgent_actions(build_analytics(appsumo_record(6)), now) == []

    def test_free_capacity_limit(self, advisor, now, free_record, build_analytics):
        (action,) = advisor.urgent_actions(build_analytics(free_record()), now)

        assert action.action_type == UrgentActionType.CAPACITY_LIMIT
        assert action.severity == Severity.WARNING
        assert action.message == "Free plan user limit reached (3/3 users)"
        assert action.action_required == "Upgrade to add more team members"

    def test_free_under_limit(self, advisor, now, make_facts, free_record, build_analytics):
        analytics = build_analytics(free_record(), make_facts(total_users=2, active_users=2))
        assert advisor.urgent_actions(analytics, now) == []

    def test_trial_expiry(self, advisor, now, trial_record, build_analytics):
        record = trial_record(5)
        (action,) = advisor.urgent_actions(build_analytics(record), now)

        assert action.action_type == UrgentActionType.TRIAL_EXPIRY
        assert action.message == "Trial expires in 5 days"
        assert action.deadline == record.trial_expires_at

    def test_long_trial_has_no_warning(self, advisor, now, trial_record, build_analytics):
        assert advisor.urgent_actions(build_analytics(trial_record(10)), now) == []


# ==============================================================================
# Summary
# ==============================================================================

class TestMigrationSummary:

    def test_open_appsumo_window(self, advisor, engine, now, appsumo_record, build_analytics):
        analytics = build_analytics(appsumo_record(1))
        summary = advisor.summary(analytics, engine.recommend(analytics, now))

        assert summary.recommended_action == SummaryAction.MIGRATE_NOW
        assert summary.timeline == "Immediate action required - 4 days remaining"

    def test_trial_with_strong_match(self, advisor, engine, now, trial_record, build_analytics):
        analytics = build_analytics(trial_record())
        recommendations = engine.recommend(analytics, now)
        summary = advisor.summary(analytics, recommendations)

        assert recommendations[0].recommendation_score == 83
        assert summary.recommended_action == SummaryAction.PLAN_MIGRATION
        assert summary.timeline == "Within 7 days before trial expires"
        assert summary.estimated_savings == Decimal("0.00")

    def test_custom_plan_without_recommendations(self, advisor, custom_record, build_custom_analytics):
        summary = advisor.summary(build_custom_analytics(custom_record()), [])

        assert summary.recommended_action == SummaryAction.STAY_CURRENT
        assert summary.timeline == "Flexible timeline - migrate when convenient"
        assert summary.risk_factors == [
            "Loss of grandfathered pricing", "Potential feature differences",
        ]

    def test_free_without_recommendations(self, advisor, free_record, build_analytics):
        summary = advisor.summary(build_analytics(free_record()), [])
        assert summary.recommended_action == SummaryAction.EVALUATE_OPTIONS

    def test_estimated_savings_against_custom_price(self, advisor, engine, now, free_record, custom_record, build_analytics, build_custom_analytics):
        analytics = build_custom_analytics(custom_record())
        top = engine.score_tier(PlanTier.PRO_SMALL, analytics, now)

        assert advisor.estimated_savings(analytics, top) == Decimal("120.48")
        assert advisor.estimated_savings(build_analytics(free_record()), top) == Decimal("0.00")

    def test_large_migration_risks(self, advisor, make_facts, free_record, build_analytics):
        facts = make_facts(total_users=25, storage_used_bytes=60 * 1024 ** 3)
        analytics = build_analytics(free_record(), facts)

        assert advisor.risk_factors(analytics) == [
            "Large data migration required", "Complex user permission migration",
        ]


# ==============================================================================
# Special offers
# ==============================================================================

class TestSpecialOffers:

    def test_appsumo_offer(self, advisor, now, appsumo_record, build_analytics):
        (offer,) = advisor.special_offers(build_analytics(appsumo_record(2)), now)

        assert offer.offer_id == "appsumo-50off"
        assert offer.title == "AppSumo Exclusive: 50% Off Business Plans"
        assert offer.description == (
            "Limited time offer for AppSumo customers. "
            "Get 50% off any Business plan for 12 months."
        )
        assert offer.discount_percentage == Decimal("50")
        assert offer.valid_until == now + timedelta(days=3)
        assert offer.conditions == ["AppSumo customer", "Migration within 5 days"]
        assert offer.featured is True

    def test_no_offer_after_window(self, advisor, now, appsumo_record, build_analytics):
        assert advisor.special_offers(build_analytics(appsumo_record(6)), now) == []

    def test_trial_offer(self, advisor, now, trial_record, build_analytics):
        record = trial_record(5)
        (offer,) = advisor.special_offers(build_analytics(record), now)

        assert offer.offer_id == "trial-convert"
        assert offer.discount_percentage == Decimal("20")
        assert offer.valid_until == record.trial_expires_at
        assert offer.conditions == ["Active trial user"]
        assert offer.featured is False

    def test_free_has_no_offers(self, advisor, now, free_record, build_analytics):
        assert advisor.special_offers(build_analytics(free_record()), now) == []
