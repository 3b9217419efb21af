# -*- coding: utf-8 -*-
"""
Usage Insights & Progression - PlanShift

Engagement-based view of an organization: how likely it is to move to a
paid subscription, what its usage looks like, and which improvements or
upgrades would help.

Example:
    >>> from planshift.recommendation.insights import UsageInsightsAnalyzer
    >>> insights = UsageInsightsAnalyzer().analyze(UserCategory.TRIAL, metrics, engagement)
    >>> insights.next_likely_category
    <UserCategory.ACTIVE_SUBSCRIBER: 'active_subscriber'>

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

import logging
from typing import List, Optional

from planshift.determinism import round_half_up
from planshift.recommendation.models import (
    EngagementFacts,
    UsageInsights,
    UsageMetrics,
    UserCategory,
)

logger = logging.getLogger(__name__)

PROGRESSING_CATEGORIES = frozenset({
    UserCategory.TRIAL,
    UserCategory.FREE,
    UserCategory.CUSTOM_PLAN,
    UserCategory.APPSUMO,
})
MIN_PROGRESSION_LIKELIHOOD = 30
STORAGE_ARCHIVE_GB = 40


class UsageInsightsAnalyzer:
    """Derives ``UsageInsights`` from engagement counters and usage metrics."""

    @staticmethod
    def usage_score(engagement: EngagementFacts) -> float:
        """Engagement in [0, 1]: 40% active days, 40% actions, 20% active users."""
        days = min(engagement.active_days_30d / 20, 1.0)
        actions = min(engagement.total_actions_30d / 500, 1.0)
        users = min(engagement.unique_active_users_30d / 5, 1.0)
        return days * 0.4 + actions * 0.4 + users * 0.2

    @staticmethod
    def progression_likelihood(
        category: UserCategory, usage_score: float, engagement: EngagementFacts,
    ) -> int:
        """Likelihood (0-100) of moving to a paid subscription."""
        base = usage_score * 100
        if category == UserCategory.TRIAL:
            likelihood = min(base + 20, 95)
        elif category == UserCategory.FREE:
            if engagement.unique_active_users_30d >= 3:
                base += 30
            likelihood = min(base, 80)
        elif category == UserCategory.CUSTOM_PLAN:
            likelihood = min(base * 0.6 + 10, 60)
        elif category == UserCategory.APPSUMO:
            likelihood = 90
        else:
            likelihood = min(base, 50)
        return round_half_up(likelihood)

    @staticmethod
    def next_category(category: UserCategory, likelihood: int) -> Optional[UserCategory]:
        if likelihood < MIN_PROGRESSION_LIKELIHOOD or category not in PROGRESSING_CATEGORIES:
            return None
        return UserCategory.ACTIVE_SUBSCRIBER

    @staticmethod
    def behavior_patterns(engagement: EngagementFacts, usage_score: float) -> List[str]:
        patterns: List[str] = []
        days = engagement.active_days_30d
        users = engagement.unique_active_users_30d
        actions = engagement.total_actions_30d

        if days >= 20:
            patterns.append("High engagement - active 20+ days per month")
        elif days >= 10:
            patterns.append("Regular usage - active 10+ days per month")
        elif days >= 5:
            patterns.append("Moderate usage - active 5+ days per month")
        else:
            patterns.append("Low engagement - sporadic usage")

        if users >= 5:
            patterns.append("Collaborative team - 5+ active members")
        elif users >= 3:
            patterns.append("Small team collaboration")
        elif users >= 2:
            patterns.append("Pair collaboration")
        else:
            patterns.append("Individual user")

        if actions >= 500:
            patterns.append("Power user behavior - high action volume")
        elif actions >= 200:
            patterns.append("Regular user behavior")
        elif actions >= 50:
            patterns.append("Light user behavior")
        else:
            patterns.append("Minimal usage pattern")

        if usage_score >= 0.8:
            patterns.append("Ideal candidate for premium features")
        elif usage_score >= 0.6:
            patterns.append("Good candidate for plan upgrade")
        elif usage_score >= 0.4:
            patterns.append("Moderate upgrade potential")
        else:
            patterns.append("Low upgrade likelihood")
        return patterns

    @staticmethod
    def _active_ratio(metrics: UsageMetrics) -> Optional[float]:
        if metrics.total_users == 0:
            return None
        return metrics.active_users / metrics.total_users

    def insights(self, metrics: UsageMetrics) -> List[str]:
        found: List[str] = []
        utilization = metrics.feature_utilization
        growth = metrics.growth_trend

        ratio = self._active_ratio(metrics)
        if metrics.active_users > 0 and ratio is not None:
            percent = round_half_up(ratio * 100)
            if ratio >= 0.8:
                found.append(f"High team engagement: {percent}% of users actively participate")
            elif ratio >= 0.6:
                found.append(f"Good team participation: {percent}% of users are active")
            else:
                found.append(f"Low user activation: Only {percent}% of users are active")

        if utilization.gantt_charts >= 0.7:
            found.append("Strong project planning focus - high Gantt chart usage")
        if utilization.time_tracking >= 0.6:
            found.append("Time-conscious team - actively tracking work hours")
        if utilization.custom_fields >= 0.5:
            found.append("Process customization - actively using custom fields")
        if growth.user_growth_rate >= 0.2:
            found.append("Rapid team expansion - 20%+ monthly user growth")
        if growth.project_growth_rate >= 0.3:
            found.append("High project velocity - 30%+ monthly project growth")
        if metrics.collaboration_index >= 0.8:
            found.append("Highly collaborative team - excellent communication patterns")
        if metrics.complexity_index >= 0.7:
            found.append("Complex project management - handling sophisticated workflows")
        return found

    @staticmethod
    def recommendations(
        category: UserCategory, metrics: UsageMetrics, likelihood: int,
    ) -> List[str]:
        advice: List[str] = []
        utilization = metrics.feature_utilization

        if category == UserCategory.TRIAL and likelihood >= 70:
            advice.append("High conversion probability - consider Pro plan for continued access")
        if category == UserCategory.FREE and metrics.total_users >= 3:
            advice.append("At user limit - upgrade to add more team members")
        if utilization.gantt_charts >= 0.5 and utilization.reporting < 0.3:
            advice.append("Consider Business plan for advanced project reporting")
        if utilization.client_portal < 0.2 and metrics.total_projects >= 5:
            advice.append("Enable client portal for better project transparency")
        if metrics.growth_trend.predicted_6month_users > metrics.total_users * 2:
            advice.append("Plan for scaling - consider larger plan tier for projected growth")
        if metrics.collaboration_index >= 0.7 and utilization.resource_management < 0.4:
            advice.append(
                "High collaboration detected - resource management features "
                "could improve efficiency"
            )
        return advice

    def optimizations(self, metrics: UsageMetrics) -> List[str]:
        found: List[str] = []
        utilization = metrics.feature_utilization

        if utilization.time_tracking < 0.3:
            found.append("Enable time tracking for better project insights")
        if utilization.custom_fields < 0.2:
            found.append("Utilize custom fields to capture project-specific data")
        if utilization.gantt_charts < 0.4 and metrics.complexity_index >= 0.6:
            found.append("Complex projects would benefit from Gantt chart planning")

        ratio = self._active_ratio(metrics)
        if ratio is not None and ratio < 0.6:
            found.append("Improve user onboarding to increase team participation")
        if metrics.storage_used_gb > STORAGE_ARCHIVE_GB:
            found.append("Consider archiving old project files to optimize storage")
        return found

    @staticmethod
    def growth_opportunities(metrics: UsageMetrics, likelihood: int) -> List[str]:
        found: List[str] = []
        utilization = metrics.feature_utilization

        if metrics.growth_trend.user_growth_rate >= 0.15:
            found.append("Rapid growth trajectory - prepare for team scaling")
        if metrics.growth_trend.project_growth_rate >= 0.2:
            found.append("High project velocity - consider portfolio management features")
        if utilization.client_portal < 0.2 and metrics.total_projects >= 3:
            found.append("Client portal adoption could improve customer relationships")
        if utilization.reporting < 0.4 and metrics.total_projects >= 5:
            found.append("Advanced reporting could provide valuable business insights")
        if metrics.collaboration_index >= 0.6 and metrics.total_users < 10:
            found.append("Strong collaboration foundation - ready for team expansion")
        if likelihood >= 60:
            found.append("High upgrade potential - prime candidate for premium features")
        return found

    def analyze(
        self,
        category: UserCategory,
        metrics: UsageMetrics,
        engagement: EngagementFacts,
    ) -> UsageInsights:
        """Progression analysis and advice for one organization."""
        score = self.usage_score(engagement)
        likelihood = self.progression_likelihood(category, score, engagement)
        logger.debug(
            "Usage score %.2f, progression likelihood %d for %s",
            score, likelihood, category.value,
        )
        return UsageInsights(
            usage_score=round_half_up(score * 100),
            progression_likelihood=likelihood,
            days_in_current_state=engagement.days_in_current_state,
            next_likely_category=self.next_category(category, likelihood),
            behavior_patterns=self.behavior_patterns(engagement, score),
            insights=self.insights(metrics),
            recommendations=self.recommendations(category, metrics, likelihood),
            optimizations=self.optimizations(metrics),
            growth_opportunities=self.growth_opportunities(metrics, likelihood),
        )


__all__ = [
    "UsageInsightsAnalyzer",
]
