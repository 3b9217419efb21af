# -*- coding: utf-8 -*-
"""
Custom-Plan Equivalency Mapper - PlanShift

Maps a legacy custom-negotiated plan onto the standard tiers:

- Lenient decoding of stored feature flags (JSON text or mapping) into
  ``LegacyPlanFeatures`` with explicit defaults
- Weighted feature match over 12 dimensions summing to 100, with partial
  credit for storage, user limit, priority and support
- Cost comparison, migration complexity and a blended recommendation score
  per tier; tiers under the feature-match floor are dropped
- Grandfathered benefits and the permanent grandfathered discount that
  keeps an organization at its current price

Example:
    >>> from planshift.recommendation.equivalency import CustomPlanEquivalencyMapper
    >>> mapper = CustomPlanEquivalencyMapper()
    >>> features = mapper.decode_features('{"gantt_charts": true}')
    >>> features.storage_limit_gb
    100

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

import json
import logging
import math
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from planshift.determinism import Money, round_half_up
from planshift.recommendation.catalog import (
    UNLIMITED,
    PricingCatalog,
    TierSpec,
    default_catalog,
)
from planshift.recommendation.config import EngineConfig, get_config
from planshift.recommendation.models import (
    BOOLEAN_FEATURES,
    CostComparison,
    CustomPlanDetails,
    CustomPlanRecord,
    DiscountType,
    LegacyPlanFeatures,
    MigrationComplexity,
    MigrationDiscount,
    PlanEquivalency,
    PlanTier,
    PriorityLevel,
    SupportLevel,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Weights and ordinal scales
# ---------------------------------------------------------------------------

FEATURE_WEIGHTS: Mapping[str, int] = MappingProxyType({
    "unlimited_projects": 10,
    "storage": 10,
    "custom_fields": 10,
    "gantt_charts": 10,
    "time_tracking": 10,
    "reporting": 8,
    "integrations": 8,
    "client_portal": 8,
    "advanced_permissions": 8,
    "priority": 5,
    "user_limit": 8,
    "support_level": 5,
})

PRIORITY_RANK: Mapping[PriorityLevel, int] = MappingProxyType({
    PriorityLevel.BASIC: 1,
    PriorityLevel.STANDARD: 2,
    PriorityLevel.PREMIUM: 3,
    PriorityLevel.ENTERPRISE: 4,
})

SUPPORT_RANK: Mapping[SupportLevel, int] = MappingProxyType({
    SupportLevel.COMMUNITY: 1,
    SupportLevel.EMAIL: 2,
    SupportLevel.PRIORITY: 3,
    SupportLevel.DEDICATED: 4,
})

COMPLEXITY_SCORES: Mapping[MigrationComplexity, int] = MappingProxyType({
    MigrationComplexity.SIMPLE: 100,
    MigrationComplexity.MODERATE: 70,
    MigrationComplexity.COMPLEX: 40,
})

UNLIMITED_STORAGE_CREDIT = 0.5


# ---------------------------------------------------------------------------
# Cost comparison
# ---------------------------------------------------------------------------


def compare_costs(
    current_cost: Decimal,
    new_cost: Decimal,
    with_discount_cost: Optional[Decimal] = None,
) -> CostComparison:
    """Compare a tier's monthly cost with the current monthly cost.

    ``percentage_change`` is 0 when there is no current cost.
    ``break_even_months`` is only set when the new cost is higher.
    """
    current = Money.quantize(current_cost)
    new = Money.quantize(new_cost)
    difference = new - current
    if current > 0:
        percent = round_half_up(difference / current * 100, 2)
    else:
        percent = Decimal("0.00")

    break_even = None
    if difference > 0 and current > 0:
        break_even = math.ceil(difference / (current / 12))

    return CostComparison(
        current_monthly_cost=current,
        new_monthly_cost=new,
        cost_difference=difference,
        percentage_change=percent,
        with_discount_cost=Money.quantize(
            new if with_discount_cost is None else with_discount_cost
        ),
        break_even_months=break_even,
    )


def _ordinal_credit(current: int, new: int) -> float:
    """Full credit for same-or-better, otherwise at least half."""
    if new >= current:
        return 1.0
    return max(0.5, new / current)


def _coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
    return default


# ---------------------------------------------------------------------------
# Mapper
# ---------------------------------------------------------------------------


class CustomPlanEquivalencyMapper:
    """Finds standard tiers equivalent to a custom plan.

    Attributes:
        catalog: Pricing catalog of the standard tiers.
        config: Engine configuration (feature-match floor).
    """

    def __init__(
        self,
        catalog: Optional[PricingCatalog] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self.catalog = catalog or default_catalog()
        self.config = config or get_config()

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode_features(
        self, raw: Union[str, Mapping[str, Any], None],
    ) -> LegacyPlanFeatures:
        """Decode stored feature flags.

        Missing keys take the ``LegacyPlanFeatures`` defaults (unlimited
        projects, 100 GB storage, standard priority, email support, every
        other flag off). Undecodable payloads are logged and decoded as
        empty.

        Args:
            raw: JSON object text, mapping or ``None``.

        Returns:
            Decoded LegacyPlanFeatures.
        """
        payload: Mapping[str, Any] = {}
        if isinstance(raw, str):
            try:
                decoded = json.loads(raw) if raw.strip() else {}
            except json.JSONDecodeError as exc:
                logger.warning("Undecodable custom plan features: %s", exc)
                decoded = {}
            if isinstance(decoded, dict):
                payload = decoded
            else:
                logger.warning(
                    "Custom plan features must be a JSON object, got %s",
                    type(decoded).__name__,
                )
        elif raw is not None:
            payload = raw

        defaults = LegacyPlanFeatures()
        values: Dict[str, Any] = {
            name: _coerce_bool(payload.get(name), getattr(defaults, name))
            for name in BOOLEAN_FEATURES
        }

        storage = payload.get("storage_limit", payload.get("storage_limit_gb"))
        try:
            values["storage_limit_gb"] = (
                defaults.storage_limit_gb if storage is None else max(-1, int(storage))
            )
        except (TypeError, ValueError):
            logger.warning("Invalid storage_limit %r, using default", storage)
            values["storage_limit_gb"] = defaults.storage_limit_gb

        try:
            values["priority"] = PriorityLevel(str(payload.get("priority", "standard")).lower())
        except ValueError:
            values["priority"] = defaults.priority
        try:
            values["support_level"] = SupportLevel(
                str(payload.get("support_level", "email")).lower()
            )
        except ValueError:
            values["support_level"] = defaults.support_level

        return LegacyPlanFeatures(**values)

    # ------------------------------------------------------------------
    # Feature match
    # ------------------------------------------------------------------

    @staticmethod
    def _storage_credit(current_gb: int, new_gb: int) -> float:
        if new_gb == UNLIMITED:
            return 1.0
        if current_gb == UNLIMITED:
            return UNLIMITED_STORAGE_CREDIT
        if current_gb <= 0 or new_gb >= current_gb:
            return 1.0
        return new_gb / current_gb

    @staticmethod
    def _user_limit_credit(reference: int, seat_cap: Optional[int]) -> float:
        if seat_cap is None or reference <= 0 or seat_cap >= reference:
            return 1.0
        return seat_cap / reference

    def feature_credits(
        self,
        features: LegacyPlanFeatures,
        spec: TierSpec,
        user_limit: Optional[int] = None,
        user_count: int = 0,
    ) -> Dict[str, float]:
        """Credit in [0, 1] per weighted dimension."""
        credits: Dict[str, float] = {}
        for name in BOOLEAN_FEATURES:
            has_now = getattr(features, name)
            credits[name] = 1.0 if (not has_now or name in spec.features) else 0.0

        credits["storage"] = self._storage_credit(features.storage_limit_gb, spec.storage_gb)
        reference = user_limit if user_limit is not None else user_count
        credits["user_limit"] = self._user_limit_credit(reference, spec.seat_cap)
        credits["priority"] = _ordinal_credit(
            PRIORITY_RANK[features.priority], PRIORITY_RANK[spec.priority],
        )
        credits["support_level"] = _ordinal_credit(
            SUPPORT_RANK[features.support_level], SUPPORT_RANK[spec.support_level],
        )
        return credits

    def feature_match_percent(
        self,
        features: LegacyPlanFeatures,
        tier: Union[PlanTier, str],
        user_limit: Optional[int] = None,
        user_count: int = 0,
    ) -> int:
        """Weighted share of the custom plan's capabilities the tier keeps.

        Returns:
            Integer percentage in [0, 100].
        """
        spec = self.catalog.get(tier)
        credits = self.feature_credits(features, spec, user_limit, user_count)
        total = sum(FEATURE_WEIGHTS.values())
        matched = sum(FEATURE_WEIGHTS[name] * credit for name, credit in credits.items())
        return round_half_up(matched / total * 100)

    def feature_delta(
        self, features: LegacyPlanFeatures, tier: Union[PlanTier, str],
    ) -> Tuple[List[str], List[str]]:
        """Return ``(missing, upgraded)`` feature names for ``tier``."""
        spec = self.catalog.get(tier)
        missing = [n for n in BOOLEAN_FEATURES if getattr(features, n) and n not in spec.features]
        upgraded = [n for n in BOOLEAN_FEATURES if not getattr(features, n) and n in spec.features]
        if self._storage_credit(features.storage_limit_gb, spec.storage_gb) < 1.0:
            missing.append("storage")
        if PRIORITY_RANK[spec.priority] < PRIORITY_RANK[features.priority]:
            missing.append("priority")
        if SUPPORT_RANK[spec.support_level] < SUPPORT_RANK[features.support_level]:
            missing.append("support_level")
        return missing, upgraded

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    @staticmethod
    def migration_complexity(
        feature_match_percent: int, cost_comparison: CostComparison,
    ) -> MigrationComplexity:
        delta = abs(cost_comparison.percentage_change)
        if feature_match_percent >= 95 and delta <= 10:
            return MigrationComplexity.SIMPLE
        if feature_match_percent >= 85 and delta <= 30:
            return MigrationComplexity.MODERATE
        return MigrationComplexity.COMPLEX

    @staticmethod
    def cost_score(cost_comparison: CostComparison) -> int:
        delta = abs(cost_comparison.percentage_change)
        if delta <= 5:
            return 100
        if delta <= 15:
            return 80
        if delta <= 30:
            return 60
        if delta <= 50:
            return 40
        return 20

    @staticmethod
    def plan_fit_score(spec: TierSpec, user_count: int) -> int:
        if spec.seat_cap is None:
            return 90
        if user_count <= spec.seat_cap * 0.6:
            return 100
        if user_count <= spec.seat_cap * 0.8:
            return 90
        if user_count <= spec.seat_cap:
            return 70
        return 30

    def recommendation_score(
        self,
        feature_match_percent: int,
        cost_comparison: CostComparison,
        complexity: MigrationComplexity,
        spec: TierSpec,
        user_count: int,
    ) -> int:
        """40% feature match, 30% cost, 20% complexity, 10% plan fit."""
        score = (
            Decimal(feature_match_percent) * Decimal("0.4")
            + Decimal(self.cost_score(cost_comparison)) * Decimal("0.3")
            + Decimal(COMPLEXITY_SCORES[complexity]) * Decimal("0.2")
            + Decimal(self.plan_fit_score(spec, user_count)) * Decimal("0.1")
        )
        return round_half_up(score)

    def evaluate_tier(
        self,
        features: LegacyPlanFeatures,
        current_price: Decimal,
        tier: Union[PlanTier, str],
        user_count: int,
        user_limit: Optional[int] = None,
    ) -> PlanEquivalency:
        """Equivalency of one tier, regardless of the feature-match floor."""
        spec = self.catalog.get(tier)
        seats = max(1, user_count)
        match = self.feature_match_percent(features, spec.tier, user_limit, seats)
        costs = compare_costs(current_price, spec.monthly_cost(seats))
        complexity = self.migration_complexity(match, costs)
        missing, upgraded = self.feature_delta(features, spec.tier)
        return PlanEquivalency(
            plan_tier=spec.tier,
            plan_name=spec.display_name,
            feature_match_percent=match,
            cost_comparison=costs,
            migration_complexity=complexity,
            recommendation_score=self.recommendation_score(
                match, costs, complexity, spec, seats,
            ),
            missing_features=missing,
            upgraded_features=upgraded,
        )

    def find_equivalents(
        self,
        features: LegacyPlanFeatures,
        current_price: Decimal,
        user_count: int,
        user_limit: Optional[int] = None,
    ) -> List[PlanEquivalency]:
        """Paid tiers meeting the feature-match floor, best first.

        Ties keep catalog order.
        """
        floor = self.config.feature_match_floor
        candidates = [
            self.evaluate_tier(features, current_price, tier, user_count, user_limit)
            for tier in self.catalog.paid_tiers()
        ]
        kept = [c for c in candidates if c.feature_match_percent >= floor]
        kept.sort(key=lambda c: c.recommendation_score, reverse=True)
        logger.debug(
            "Equivalent tiers: %s",
            ", ".join(f"{c.plan_tier.value}={c.recommendation_score}" for c in kept),
        )
        return kept

    # ------------------------------------------------------------------
    # Grandfathering
    # ------------------------------------------------------------------

    @staticmethod
    def grandfathered_benefits(
        record: CustomPlanRecord, features: LegacyPlanFeatures,
    ) -> List[str]:
        benefits: List[str] = []
        if record.monthly_price > 0:
            benefits.append(
                f"Grandfathered pricing: ${Money.quantize(record.monthly_price)}/month"
            )
        if features.unlimited_projects:
            benefits.append("Unlimited projects access")
        if features.storage_limit_gb == UNLIMITED or features.storage_limit_gb > 100:
            label = "unlimited" if features.storage_limit_gb == UNLIMITED else f"{features.storage_limit_gb}GB"
            benefits.append(f"Enhanced storage: {label}")
        if record.user_limit is not None and record.user_limit > 20:
            benefits.append(f"Extended user limit: {record.user_limit} users")
        benefits.append("Legacy feature configuration")
        benefits.append("Existing plan terms and conditions")
        return benefits

    def build_details(
        self, record: CustomPlanRecord, user_count: int,
    ) -> CustomPlanDetails:
        """Decode a custom plan and attach its equivalent tiers."""
        features = self.decode_features(record.features)
        price = Money.quantize(record.monthly_price)
        return CustomPlanDetails(
            plan_name=record.plan_name,
            current_price=price,
            user_limit=record.user_limit,
            current_features=features,
            grandfathered_benefits=self.grandfathered_benefits(record, features),
            preservation_eligible=record.preserve_pricing,
            equivalent_plans=self.find_equivalents(
                features, price, user_count, record.user_limit,
            ),
        )

    @staticmethod
    def synthesize_grandfathered_discount(
        organization_id: str,
        target_tier: PlanTier,
        current_cost: Decimal,
        new_cost: Decimal,
        preserve_pricing: bool,
    ) -> Optional[MigrationDiscount]:
        """Permanent discount that keeps the organization at its current price.

        Only issued when preservation is requested and the tier costs more
        than the custom plan. The percentage is rounded to two decimals.
        """
        if not preserve_pricing or new_cost <= current_cost or new_cost <= 0:
            return None
        percent = round_half_up((new_cost - current_cost) / new_cost * 100, 2)
        return MigrationDiscount(
            discount_code=f"GRANDFATHERED_{organization_id}_{target_tier.value}",
            discount_type=DiscountType.PERCENTAGE,
            value=percent,
            duration_months=-1,
            conditions=[
                "Grandfathered custom plan pricing",
                "Permanent discount to preserve current cost",
                "Limited to current organization",
            ],
            eligible_plans=[target_tier],
            stackable=False,
        )

    def grandfathered_discount(
        self,
        organization_id: str,
        record: CustomPlanRecord,
        target_tier: Union[PlanTier, str],
        user_count: int,
    ) -> Optional[MigrationDiscount]:
        """Grandfathered discount for moving ``record`` to ``target_tier``."""
        spec = self.catalog.get(target_tier)
        discount = self.synthesize_grandfathered_discount(
            organization_id,
            spec.tier,
            Money.quantize(record.monthly_price),
            spec.monthly_cost(max(1, user_count)),
            record.preserve_pricing,
        )
        if discount is not None:
            logger.info(
                "Grandfathered discount %s: %s%% on %s",
                discount.discount_code, discount.value, spec.tier.value,
            )
        return discount


__all__ = [
    "CustomPlanEquivalencyMapper",
    "FEATURE_WEIGHTS",
    "PRIORITY_RANK",
    "SUPPORT_RANK",
    "compare_costs",
]
