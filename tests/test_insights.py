"""Tests for UsageInsightsAnalyzer progression and advice."""

import pytest

from planshift.recommendation.insights import UsageInsightsAnalyzer
from planshift.recommendation.models import EngagementFacts, UserCategory


@pytest.fixture
def insights_analyzer():
    return UsageInsightsAnalyzer()


@pytest.fixture
def metrics(aggregator, make_facts):
    return aggregator.aggregate(make_facts())


class TestProgression:

    def test_usage_score(self, insights_analyzer, make_facts):
        engagement = make_facts().engagement
        assert insights_analyzer.usage_score(engagement) == pytest.approx(0.552)

    @pytest.mark.parametrize("category,expected", [
        (UserCategory.TRIAL, 75),
        (UserCategory.FREE, 80),
        (UserCategory.CUSTOM_PLAN, 43),
        (UserCategory.APPSUMO, 90),
        (UserCategory.ACTIVE_SUBSCRIBER, 50),
    ])
    def test_likelihood_by_category(self, insights_analyzer, category, expected, make_facts):
        engagement = make_facts().engagement
        score = insights_analyzer.usage_score(engagement)
        assert insights_analyzer.progression_likelihood(category, score, engagement) == expected

    def test_next_category(self, insights_analyzer):
        assert insights_analyzer.next_category(UserCategory.TRIAL, 75) == \
            UserCategory.ACTIVE_SUBSCRIBER
        assert insights_analyzer.next_category(UserCategory.FREE, 20) is None
        assert insights_analyzer.next_category(UserCategory.ACTIVE_SUBSCRIBER, 50) is None

    def test_idle_organization(self, insights_analyzer, metrics):
        insights = insights_analyzer.analyze(UserCategory.FREE, metrics, EngagementFacts())

        assert insights.usage_score == 0
        assert insights.progression_likelihood == 0
        assert insights.next_likely_category is None
        assert insights.behavior_patterns == [
            "Low engagement - sporadic usage",
            "Individual user",
            "Minimal usage pattern",
            "Low upgrade likelihood",
        ]


class TestAdvice:

    def test_free_team_at_limit(self, insights_analyzer, metrics, make_facts):
        insights = insights_analyzer.analyze(
            UserCategory.FREE, metrics, make_facts().engagement,
        )

        assert insights.usage_score == 55
        assert insights.progression_likelihood == 80
        assert insights.days_in_current_state == 20
        assert insights.behavior_patterns == [
            "Regular usage - active 10+ days per month",
            "Small team collaboration",
            "Regular user behavior",
            "Moderate upgrade potential",
        ]
        assert insights.insights == ["Good team participation: 75% of users are active"]
        assert insights.recommendations == [
            "At user limit - upgrade to add more team members",
            "Enable client portal for better project transparency",
        ]
        assert insights.optimizations == ["Enable time tracking for better project insights"]
        assert insights.growth_opportunities == [
            "Client portal adoption could improve customer relationships",
            "Advanced reporting could provide valuable business insights",
            "High upgrade potential - prime candidate for premium features",
        ]

    def test_trial_conversion_advice(self, insights_analyzer, metrics, make_facts):
        insights = insights_analyzer.analyze(
            UserCategory.TRIAL, metrics, make_facts().engagement,
        )
        assert insights.recommendations[0] == (
            "High conversion probability - consider Pro plan for continued access"
        )

    def test_storage_and_onboarding_optimizations(self, insights_analyzer, aggregator, make_facts):
        facts = make_facts(active_users=1, storage_used_bytes=45 * 1024 ** 3)
        insights = insights_analyzer.analyze(
            UserCategory.ACTIVE_SUBSCRIBER, aggregator.aggregate(facts), facts.engagement,
        )

        assert "Low user activation: Only 25% of users are active" in insights.insights
        assert "Improve user onboarding to increase team participation" in insights.optimizations
        assert "Consider archiving old project files to optimize storage" in insights.optimizations
