# -*- coding: utf-8 -*-
"""
Collaborator Interfaces - PlanShift

The engine never queries storage itself. Usage facts and legacy plan
records come from two collaborators defined here as protocols, plus an
in-memory implementation of both used by the CLI and tests.

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol

from planshift.recommendation.models import OrganizationRecord, UsageFacts

logger = logging.getLogger(__name__)


class UsageDataProvider(Protocol):
    """
    Protocol for usage fact retrieval.

    Implementations return the raw per-organization counters, samples and
    histories that ``UsageAnalyticsAggregator`` turns into ``UsageMetrics``.
    """

    def get_usage_facts(self, organization_id: str) -> UsageFacts:
        """Return usage facts; an unknown organization yields empty facts."""
        ...


class LegacyPlanStore(Protocol):
    """Protocol for organization and legacy plan record lookup."""

    def get_organization_record(self, organization_id: str) -> Optional[OrganizationRecord]:
        """Return the organization record, or ``None`` when it does not exist."""
        ...


class InMemoryFactsSource:
    """Dictionary-backed ``UsageDataProvider`` and ``LegacyPlanStore``."""

    def __init__(
        self,
        records: Optional[Dict[str, OrganizationRecord]] = None,
        facts: Optional[Dict[str, UsageFacts]] = None,
    ) -> None:
        self._records: Dict[str, OrganizationRecord] = dict(records or {})
        self._facts: Dict[str, UsageFacts] = dict(facts or {})

    def add(self, record: OrganizationRecord, facts: Optional[UsageFacts] = None) -> None:
        self._records[record.organization_id] = record
        if facts is not None:
            self._facts[record.organization_id] = facts

    def get_usage_facts(self, organization_id: str) -> UsageFacts:
        facts = self._facts.get(organization_id)
        if facts is None:
            logger.debug("No usage facts for %s; using empty facts", organization_id)
            return UsageFacts()
        return facts

    def get_organization_record(self, organization_id: str) -> Optional[OrganizationRecord]:
        return self._records.get(organization_id)


__all__ = [
    "UsageDataProvider",
    "LegacyPlanStore",
    "InMemoryFactsSource",
]
