# -*- coding: utf-8 -*-
"""
Usage Analytics Aggregator - PlanShift

Turns raw usage facts for one organization into a normalized
``UsageMetrics`` profile:

- Feature utilization ratios clamped to [0, 1], with documented defaults
  when a denominator is zero
- Team collaboration index (task assignment, comments, attachments and
  multi-member projects)
- Average project complexity
- Monthly growth rates and compounded user projections
- Peak usage days detected against a centred moving average

Aggregation never raises on missing optional data.

Example:
    >>> from planshift.recommendation.analytics import UsageAnalyticsAggregator
    >>> from planshift.recommendation.models import UsageFacts
    >>> metrics = UsageAnalyticsAggregator().aggregate(UsageFacts(total_users=4))
    >>> metrics.collaboration_index
    0.3

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

from planshift.recommendation.models import (
    DailyActivity,
    FeatureUtilization,
    GrowthTrend,
    PeakUsagePeriod,
    ProjectFacts,
    UsageFacts,
    UsageMetrics,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Defaults and constants
# ---------------------------------------------------------------------------

BYTES_PER_GB = 1024 ** 3

DEFAULT_GANTT = 0.1
DEFAULT_TIME_TRACKING = 0.1
DEFAULT_CUSTOM_FIELDS = 0.1
REPORTING_ACTIVE = 0.8
REPORTING_IDLE = 0.2
DEFAULT_INTEGRATIONS = 0.2
INTEGRATIONS_FULL_USE = 3
DEFAULT_ADVANCED_PERMISSIONS = 0.3
DEFAULT_CLIENT_PORTAL = 0.1
RESOURCE_MANAGEMENT_ACTIVE = 0.7
RESOURCE_MANAGEMENT_IDLE = 0.1

DEFAULT_COLLABORATION = 0.3
DEFAULT_COMPLEXITY = 0.4
EMPTY_PROJECT_COMPLEXITY = 0.2

MAX_GROWTH_RATE = 0.5
DEFAULT_PROJECT_GROWTH = 0.15
DEFAULT_STORAGE_GROWTH = 0.2
GROWTH_HISTORY_MONTHS = 6

PEAK_WINDOW_DAYS = 7
PEAK_USER_FACTOR = 1.3
PEAK_ACTION_FACTOR = 1.5
MAX_PEAK_PERIODS = 10


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _ratio(numerator: float, denominator: float, default: float) -> float:
    """Observed / denominator clamped to [0, 1]; ``default`` when undefined."""
    if denominator <= 0:
        return default
    return _clamp(numerator / denominator)


def project_users(current: int, rate: float, months: int) -> int:
    """Compound ``current`` at ``rate`` per month and round up."""
    return math.ceil(current * (1 + rate) ** months)


class UsageAnalyticsAggregator:
    """Computes ``UsageMetrics`` from ``UsageFacts``.

    The aggregator is stateless; one instance can serve concurrent callers.
    """

    def aggregate(self, facts: UsageFacts) -> UsageMetrics:
        """Build the normalized usage profile.

        Args:
            facts: Raw usage counts of one organization.

        Returns:
            UsageMetrics with every ratio in [0, 1].
        """
        metrics = UsageMetrics(
            total_users=facts.total_users,
            active_users=facts.active_users,
            total_projects=facts.total_projects,
            active_projects=facts.active_projects,
            storage_used_gb=facts.storage_used_bytes / BYTES_PER_GB,
            total_tasks=facts.total_tasks,
            feature_utilization=self.feature_utilization(facts),
            collaboration_index=self.collaboration_index(facts),
            complexity_index=self.complexity_index(facts.projects),
            growth_trend=self.growth_trend(facts),
            peak_usage_periods=self.peak_usage_periods(facts.daily_activity),
        )
        logger.debug(
            "Aggregated usage: users=%d projects=%d collaboration=%.2f "
            "complexity=%.2f peaks=%d",
            metrics.total_users,
            metrics.total_projects,
            metrics.collaboration_index,
            metrics.complexity_index,
            len(metrics.peak_usage_periods),
        )
        return metrics

    # ------------------------------------------------------------------
    # Feature utilization
    # ------------------------------------------------------------------

    def feature_utilization(self, facts: UsageFacts) -> FeatureUtilization:
        """Share of projects, tasks or members using each feature."""
        if facts.active_integrations is None:
            integrations = DEFAULT_INTEGRATIONS
        else:
            integrations = _clamp(facts.active_integrations / INTEGRATIONS_FULL_USE)

        if facts.custom_role_members is None:
            permissions = DEFAULT_ADVANCED_PERMISSIONS
        else:
            permissions = _ratio(
                facts.custom_role_members, facts.total_users,
                DEFAULT_ADVANCED_PERMISSIONS,
            )

        return FeatureUtilization(
            gantt_charts=_ratio(
                facts.gantt_projects, facts.total_projects, DEFAULT_GANTT,
            ),
            time_tracking=_ratio(
                facts.time_logged_tasks, facts.total_tasks, DEFAULT_TIME_TRACKING,
            ),
            custom_fields=_ratio(
                facts.custom_field_count, facts.total_projects,
                DEFAULT_CUSTOM_FIELDS,
            ),
            reporting=REPORTING_ACTIVE if facts.report_exports > 0 else REPORTING_IDLE,
            integrations=integrations,
            advanced_permissions=permissions,
            client_portal=_ratio(
                facts.client_portal_projects, facts.total_projects,
                DEFAULT_CLIENT_PORTAL,
            ),
            resource_management=(
                RESOURCE_MANAGEMENT_ACTIVE if facts.workload_views > 0
                else RESOURCE_MANAGEMENT_IDLE
            ),
        )

    # ------------------------------------------------------------------
    # Collaboration and complexity
    # ------------------------------------------------------------------

    def collaboration_index(self, facts: UsageFacts) -> float:
        """Blend of assignment, discussion, attachment and shared-project signals."""
        tasks = facts.total_tasks
        if tasks == 0:
            return DEFAULT_COLLABORATION

        assignment = facts.assigned_tasks / tasks
        discussion = min(facts.comment_count / tasks, 2.0)
        attachments = min(facts.attachment_count / tasks, 1.0)
        shared = (
            facts.collaborative_projects / facts.total_projects
            if facts.total_projects else 0.0
        )
        index = (
            assignment * 0.30
            + discussion * 0.25
            + attachments * 0.20
            + shared * 0.25
        )
        return _clamp(index)

    @staticmethod
    def project_complexity(project: ProjectFacts) -> float:
        """Complexity of one project in [0, 1]."""
        if project.task_count == 0:
            return EMPTY_PROJECT_COMPLEXITY
        return _clamp(
            min(project.task_count / 50, 1.0) * 0.30
            + min(project.phase_count / 10, 1.0) * 0.20
            + min(project.custom_field_count / 20, 1.0) * 0.20
            + min(project.dependency_count / 20, 1.0) * 0.15
            + min(project.member_count / 20, 1.0) * 0.15
        )

    def complexity_index(self, projects: Sequence[ProjectFacts]) -> float:
        """Mean project complexity, ``0.4`` without projects."""
        if not projects:
            return DEFAULT_COMPLEXITY
        total = sum(self.project_complexity(p) for p in projects)
        return _clamp(total / len(projects))

    # ------------------------------------------------------------------
    # Growth
    # ------------------------------------------------------------------

    @staticmethod
    def _monthly_rate(history: Sequence[int], current: int, default: float) -> float:
        """Mean of the trailing months over the current count, capped at 0.5."""
        if current <= 0:
            return default
        recent = list(history)[-GROWTH_HISTORY_MONTHS:]
        if not recent:
            return 0.0
        average = sum(max(0, n) for n in recent) / len(recent)
        return min(average / current, MAX_GROWTH_RATE)

    def growth_trend(self, facts: UsageFacts) -> GrowthTrend:
        """Growth rates and user projections for 3, 6 and 12 months."""
        user_rate = self._monthly_rate(facts.monthly_new_users, facts.total_users, 0.0)
        project_rate = self._monthly_rate(
            facts.monthly_new_projects, facts.total_projects, DEFAULT_PROJECT_GROWTH,
        )
        if facts.monthly_storage_added_bytes:
            storage_rate = self._monthly_rate(
                facts.monthly_storage_added_bytes, facts.storage_used_bytes,
                DEFAULT_STORAGE_GROWTH,
            )
        else:
            storage_rate = DEFAULT_STORAGE_GROWTH

        current = facts.total_users
        return GrowthTrend(
            user_growth_rate=user_rate,
            project_growth_rate=project_rate,
            storage_growth_rate=storage_rate,
            predicted_3month_users=project_users(current, user_rate, 3),
            predicted_6month_users=project_users(current, user_rate, 6),
            predicted_12month_users=project_users(current, user_rate, 12),
        )

    # ------------------------------------------------------------------
    # Peak usage
    # ------------------------------------------------------------------

    def peak_usage_periods(
        self, activity: Sequence[DailyActivity],
    ) -> List[PeakUsagePeriod]:
        """Days whose users or actions spike above the +/-7 day average.

        Returns at most 10 peaks, newest first.
        """
        days = sorted(activity, key=lambda d: d.day)
        peaks: List[PeakUsagePeriod] = []
        for i, sample in enumerate(days):
            window = days[max(0, i - PEAK_WINDOW_DAYS): i + PEAK_WINDOW_DAYS + 1]
            avg_users = sum(d.active_users for d in window) / len(window)
            avg_actions = sum(d.total_actions for d in window) / len(window)

            user_peak = sample.active_users > avg_users * PEAK_USER_FACTOR
            action_peak = sample.total_actions > avg_actions * PEAK_ACTION_FACTOR
            if not (user_peak or action_peak):
                continue
            if user_peak and action_peak:
                peak_type = "both"
            elif user_peak:
                peak_type = "users"
            else:
                peak_type = "actions"
            peaks.append(PeakUsagePeriod(
                day=sample.day,
                active_users=sample.active_users,
                total_actions=sample.total_actions,
                peak_type=peak_type,
            ))

        peaks.sort(key=lambda p: p.day, reverse=True)
        return peaks[:MAX_PEAK_PERIODS]


__all__ = [
    "UsageAnalyticsAggregator",
    "project_users",
    "BYTES_PER_GB",
]
