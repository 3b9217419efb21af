# -*- coding: utf-8 -*-
"""
Pricing Catalog and Static Tables - PlanShift

Immutable configuration injected into the recommendation engine at
construction time:

- ``PricingCatalog``: one ``TierSpec`` per ``PlanTier`` (pricing model,
  seat cap, feature flags, storage, priority and support level)
- ``ScoringWeights``: weights of the five match factors, validated to sum
  to exactly 1
- ``BenefitTables``: annual feature-upgrade values and productivity hours
  per tier

Every table is a frozen dataclass; a catalog missing a tier is rejected
with ``ConfigurationError`` when constructed.

Example:
    >>> from planshift.recommendation.catalog import default_catalog
    >>> catalog = default_catalog()
    >>> catalog.monthly_cost("PRO_LARGE", 17)
    Decimal('80.98')

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Tuple, Union

from planshift.determinism import Money
from planshift.exceptions import ConfigurationError, UnknownPlanTierError
from planshift.recommendation.models import (
    MatchFactor,
    PlanTier,
    PricingModel,
    PriorityLevel,
    SupportLevel,
)

logger = logging.getLogger(__name__)

UNLIMITED = -1


# =============================================================================
# Tier specification
# =============================================================================


@dataclass(frozen=True)
class TierSpec:
    """Pricing and capabilities of one subscription tier.

    Attributes:
        tier: Tier identifier.
        display_name: Human-readable plan name.
        pricing_model: How the monthly price depends on seats.
        monthly_price: Flat price, per-seat price or base price.
        annual_price: Monthly-equivalent price on annual billing.
        seat_cap: Maximum users, ``None`` for unlimited.
        base_seats: Seats included in the base price (base_plus_overage only).
        overage_per_seat: Price of each seat above ``base_seats``.
        features: Canonical feature names included in the tier.
        storage_gb: Storage limit, ``-1`` for unlimited.
        priority: Feature priority class.
        support_level: Support channel.
        support_label: Display name of the support offering.
        support_response: Support response time.
        advanced_features: Tier carries advanced reporting, client portal,
            resource management and advanced permissions.
        large_team: Tier is built for large collaborating teams.
    """

    tier: PlanTier
    display_name: str
    pricing_model: PricingModel
    monthly_price: Decimal
    annual_price: Decimal
    seat_cap: Optional[int]
    base_seats: int = 0
    overage_per_seat: Decimal = Decimal("0")
    features: FrozenSet[str] = frozenset()
    storage_gb: int = 0
    priority: PriorityLevel = PriorityLevel.STANDARD
    support_level: SupportLevel = SupportLevel.EMAIL
    support_label: str = "Email Support"
    support_response: str = "24 hours"
    advanced_features: bool = False
    large_team: bool = False

    @property
    def is_free(self) -> bool:
        return self.tier == PlanTier.FREE

    @property
    def is_unlimited(self) -> bool:
        return self.seat_cap is None

    def monthly_cost(self, user_count: int) -> Decimal:
        """Monthly list price for ``user_count`` seats."""
        users = max(0, user_count)
        if self.pricing_model == PricingModel.FLAT:
            return Money.quantize(self.monthly_price)
        if self.pricing_model == PricingModel.PER_SEAT:
            return Money.quantize(self.monthly_price * users)
        extra_seats = max(0, users - self.base_seats)
        return Money.quantize(
            self.monthly_price + self.overage_per_seat * extra_seats
        )


_CORE_FEATURES = frozenset({
    "unlimited_projects",
    "custom_fields",
    "gantt_charts",
    "time_tracking",
    "reporting",
    "integrations",
})
_ADVANCED_FEATURES = _CORE_FEATURES | {"client_portal", "advanced_permissions"}


def _default_tiers() -> Tuple[TierSpec, ...]:
    return (
        TierSpec(
            tier=PlanTier.FREE,
            display_name="Free Plan",
            pricing_model=PricingModel.FLAT,
            monthly_price=Decimal("0"),
            annual_price=Decimal("0"),
            seat_cap=3,
            storage_gb=5,
            priority=PriorityLevel.BASIC,
            support_level=SupportLevel.COMMUNITY,
            support_label="Community",
            support_response="48+ hours",
        ),
        TierSpec(
            tier=PlanTier.PRO_SMALL,
            display_name="Pro Small",
            pricing_model=PricingModel.PER_SEAT,
            monthly_price=Decimal("9.99"),
            annual_price=Decimal("6.99"),
            seat_cap=5,
            features=_CORE_FEATURES,
            storage_gb=100,
        ),
        TierSpec(
            tier=PlanTier.BUSINESS_SMALL,
            display_name="Business Small",
            pricing_model=PricingModel.PER_SEAT,
            monthly_price=Decimal("14.99"),
            annual_price=Decimal("11.99"),
            seat_cap=5,
            features=_ADVANCED_FEATURES,
            storage_gb=500,
            priority=PriorityLevel.PREMIUM,
            support_level=SupportLevel.PRIORITY,
            support_label="Priority Support",
            support_response="12 hours",
            advanced_features=True,
        ),
        TierSpec(
            tier=PlanTier.PRO_LARGE,
            display_name="Pro Large",
            pricing_model=PricingModel.BASE_PLUS_OVERAGE,
            monthly_price=Decimal("69"),
            annual_price=Decimal("69"),
            seat_cap=50,
            base_seats=15,
            overage_per_seat=Decimal("5.99"),
            features=_CORE_FEATURES,
            storage_gb=1000,
        ),
        TierSpec(
            tier=PlanTier.BUSINESS_LARGE,
            display_name="Business Large",
            pricing_model=PricingModel.BASE_PLUS_OVERAGE,
            monthly_price=Decimal("99"),
            annual_price=Decimal("99"),
            seat_cap=100,
            base_seats=20,
            overage_per_seat=Decimal("5.99"),
            features=_ADVANCED_FEATURES,
            storage_gb=2000,
            priority=PriorityLevel.PREMIUM,
            support_level=SupportLevel.PRIORITY,
            support_label="Priority Support",
            support_response="8 hours",
            advanced_features=True,
            large_team=True,
        ),
        TierSpec(
            tier=PlanTier.ENTERPRISE,
            display_name="Enterprise",
            pricing_model=PricingModel.FLAT,
            monthly_price=Decimal("349"),
            annual_price=Decimal("349"),
            seat_cap=None,
            features=_ADVANCED_FEATURES,
            storage_gb=UNLIMITED,
            priority=PriorityLevel.ENTERPRISE,
            support_level=SupportLevel.DEDICATED,
            support_label="Dedicated Support",
            support_response="4 hours",
            advanced_features=True,
            large_team=True,
        ),
    )


# =============================================================================
# Pricing catalog
# =============================================================================


@dataclass(frozen=True)
class PricingCatalog:
    """Read-only lookup of tier specifications.

    Raises:
        ConfigurationError: If a ``PlanTier`` member has no entry.
    """

    tiers: Tuple[TierSpec, ...] = field(default_factory=_default_tiers)

    def __post_init__(self) -> None:
        by_tier = {spec.tier: spec for spec in self.tiers}
        missing = [t.value for t in PlanTier if t not in by_tier]
        if missing:
            raise ConfigurationError(
                f"Pricing catalog is missing tiers: {', '.join(missing)}",
                context={"missing_tiers": missing},
            )
        object.__setattr__(self, "_by_tier", MappingProxyType(by_tier))

    def resolve_tier(self, tier: Union[PlanTier, str]) -> PlanTier:
        """Normalize a tier name to ``PlanTier``.

        Raises:
            UnknownPlanTierError: If ``tier`` is not a catalog tier.
        """
        if isinstance(tier, PlanTier):
            return tier
        try:
            return PlanTier(str(tier).upper())
        except ValueError:
            raise UnknownPlanTierError(
                f"Unknown plan tier: {tier}",
                tier=str(tier),
                context={"valid_tiers": [t.value for t in PlanTier]},
            ) from None

    def get(self, tier: Union[PlanTier, str]) -> TierSpec:
        """Return the specification of ``tier``."""
        return self._by_tier[self.resolve_tier(tier)]  # type: ignore[attr-defined]

    def monthly_cost(self, tier: Union[PlanTier, str], user_count: int) -> Decimal:
        """Monthly list price of ``tier`` for ``user_count`` seats."""
        return self.get(tier).monthly_cost(user_count)

    def paid_tiers(self) -> Tuple[PlanTier, ...]:
        return tuple(t for t in PlanTier if t != PlanTier.FREE)


def default_catalog() -> PricingCatalog:
    """Return the standard pricing catalog."""
    return PricingCatalog()


# =============================================================================
# Scoring weights
# =============================================================================


@dataclass(frozen=True)
class ScoringWeights:
    """Weights of the five match factors.

    Raises:
        ConfigurationError: If the weights do not sum to exactly 1.
    """

    user_count: Decimal = Decimal("0.30")
    feature_requirements: Decimal = Decimal("0.25")
    budget_alignment: Decimal = Decimal("0.20")
    usage_patterns: Decimal = Decimal("0.15")
    growth_trajectory: Decimal = Decimal("0.10")

    def __post_init__(self) -> None:
        total = sum(self.as_mapping().values(), Decimal("0"))
        if total != Decimal("1"):
            raise ConfigurationError(
                f"Scoring weights must sum to 1, got {total}",
                context={"weights": {k.value: str(v) for k, v in self.as_mapping().items()}},
            )

    def as_mapping(self) -> Dict[MatchFactor, Decimal]:
        return {
            MatchFactor.USER_COUNT: self.user_count,
            MatchFactor.FEATURE_REQUIREMENTS: self.feature_requirements,
            MatchFactor.BUDGET_ALIGNMENT: self.budget_alignment,
            MatchFactor.USAGE_PATTERNS: self.usage_patterns,
            MatchFactor.GROWTH_TRAJECTORY: self.growth_trajectory,
        }

    def weight(self, factor: MatchFactor) -> Decimal:
        return self.as_mapping()[factor]


# =============================================================================
# Benefit tables
# =============================================================================


@dataclass(frozen=True)
class FeatureValue:
    """Annual value of a feature upgrade."""

    feature: str
    new_state: str
    annual_value: Decimal


@dataclass(frozen=True)
class ProductivityArea:
    """Monthly hours saved per user in one work area."""

    area: str
    hours_per_user: Decimal
    efficiency_gain_percent: int
    description: str
    tiers: FrozenSet[PlanTier]


_PRO = frozenset({PlanTier.PRO_SMALL, PlanTier.PRO_LARGE})
_BUSINESS_PLUS = frozenset({
    PlanTier.BUSINESS_SMALL, PlanTier.BUSINESS_LARGE, PlanTier.ENTERPRISE,
})


def _default_feature_values() -> Mapping[PlanTier, Tuple[FeatureValue, ...]]:
    return MappingProxyType({
        PlanTier.FREE: (),
        PlanTier.PRO_SMALL: (
            FeatureValue("Gantt Charts", "advanced", Decimal("2400")),
            FeatureValue("Time Tracking", "advanced", Decimal("1800")),
            FeatureValue("Custom Fields", "basic", Decimal("1200")),
        ),
        PlanTier.BUSINESS_SMALL: (
            FeatureValue("Advanced Reporting", "advanced", Decimal("3600")),
            FeatureValue("Client Portal", "advanced", Decimal("2400")),
            FeatureValue("Resource Management", "basic", Decimal("1800")),
            FeatureValue("Advanced Permissions", "advanced", Decimal("1200")),
        ),
        PlanTier.PRO_LARGE: (
            FeatureValue("Increased User Capacity", "advanced", Decimal("4800")),
            FeatureValue("Enhanced Storage", "advanced", Decimal("1200")),
        ),
        PlanTier.BUSINESS_LARGE: (
            FeatureValue("Enterprise Reporting", "advanced", Decimal("6000")),
            FeatureValue("Advanced Resource Management", "advanced", Decimal("4800")),
            FeatureValue("Enhanced Client Portal", "advanced", Decimal("3600")),
        ),
        PlanTier.ENTERPRISE: (
            FeatureValue("Unlimited Users", "advanced", Decimal("12000")),
            FeatureValue("SSO Integration", "advanced", Decimal("6000")),
            FeatureValue("Priority Support", "advanced", Decimal("3600")),
            FeatureValue("Custom Integrations", "advanced", Decimal("4800")),
        ),
    })


def _default_productivity_areas() -> Tuple[ProductivityArea, ...]:
    return (
        ProductivityArea(
            "Project Planning", Decimal("2"), 15,
            "Improved project planning with Gantt charts and time tracking",
            _PRO,
        ),
        ProductivityArea(
            "Reporting & Analytics", Decimal("4"), 25,
            "Advanced reporting reduces time spent on manual status updates",
            _BUSINESS_PLUS,
        ),
        ProductivityArea(
            "Client Communication", Decimal("1.5"), 20,
            "Client portal reduces communication overhead",
            _BUSINESS_PLUS,
        ),
        ProductivityArea(
            "Team Management", Decimal("3"), 30,
            "Advanced permissions and SSO reduce administrative overhead",
            frozenset({PlanTier.ENTERPRISE}),
        ),
    )


@dataclass(frozen=True)
class BenefitTables:
    """Feature-upgrade values and productivity hours per tier."""

    feature_values: Mapping[PlanTier, Tuple[FeatureValue, ...]] = field(
        default_factory=_default_feature_values,
    )
    productivity_areas: Tuple[ProductivityArea, ...] = field(
        default_factory=_default_productivity_areas,
    )

    def features_for(self, tier: PlanTier) -> Tuple[FeatureValue, ...]:
        return tuple(self.feature_values.get(tier, ()))

    def productivity_for(self, tier: PlanTier) -> Tuple[ProductivityArea, ...]:
        return tuple(a for a in self.productivity_areas if tier in a.tiers)


__all__ = [
    "UNLIMITED",
    "TierSpec",
    "PricingCatalog",
    "default_catalog",
    "ScoringWeights",
    "FeatureValue",
    "ProductivityArea",
    "BenefitTables",
]
