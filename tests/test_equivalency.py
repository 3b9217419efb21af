"""Tests for CustomPlanEquivalencyMapper.

Covers feature decoding, weighted feature match, cost comparison, tier
ranking and grandfathered pricing.
"""

from decimal import Decimal

import pytest

from planshift.recommendation.config import EngineConfig
from planshift.recommendation.equivalency import (
    FEATURE_WEIGHTS,
    CustomPlanEquivalencyMapper,
    compare_costs,
)
from planshift.recommendation.models import (
    DiscountType,
    LegacyPlanFeatures,
    MigrationComplexity,
    PlanTier,
    PriorityLevel,
    SupportLevel,
)


@pytest.fixture
def mapper(catalog, config):
    return CustomPlanEquivalencyMapper(catalog, config)


# ==============================================================================
# Decoding
# ==============================================================================

class TestDecodeFeatures:

    def test_json_text(self, mapper):
        features = mapper.decode_features('{"gantt_charts": true, "storage_limit": 250}')

        assert features.gantt_charts is True
        assert features.unlimited_projects is True
        assert features.storage_limit_gb == 250
        assert features.priority == PriorityLevel.STANDARD
        assert features.support_level == SupportLevel.EMAIL

    def test_mapping_with_loose_values(self, mapper):
        features = mapper.decode_features({
            "reporting": "yes",
            "integrations": 1,
            "priority": "PREMIUM",
            "support_level": "carrier pigeon",
        })

        assert features.reporting is True
        assert features.integrations is True
        assert features.priority == PriorityLevel.PREMIUM
        assert features.support_level == SupportLevel.EMAIL

    @pytest.mark.parametrize("raw", [None, "", "not json", "[1, 2]"])
    def test_undecodable_payloads_use_defaults(self, mapper, raw):
        assert mapper.decode_features(raw) == LegacyPlanFeatures()

    def test_invalid_storage_is_logged(self, mapper, caplog):
        features = mapper.decode_features({"storage_limit": "lots"})

        assert features.storage_limit_gb == 100
        assert "Invalid storage_limit" in caplog.text

    def test_unlimited_storage(self, mapper):
        assert mapper.decode_features({"storage_limit": -1}).storage_limit_gb == -1


# ==============================================================================
# Feature match
# ==============================================================================

class TestFeatureMatch:

    def test_weights_sum_to_100(self):
        assert sum(FEATURE_WEIGHTS.values()) == 100

    def test_default_features_fully_covered_by_pro_small(self, mapper):
        assert mapper.feature_match_percent(LegacyPlanFeatures(), PlanTier.PRO_SMALL) == 100

    def test_missing_business_features(self, mapper):
        features = LegacyPlanFeatures(client_portal=True, advanced_permissions=True)

        assert mapper.feature_match_percent(features, PlanTier.PRO_SMALL) == 84
        assert mapper.feature_match_percent(features, PlanTier.BUSINESS_SMALL) == 100

        missing, upgraded = mapper.feature_delta(features, PlanTier.PRO_SMALL)
        assert missing == ["client_portal", "advanced_permissions"]
        assert upgraded == [
            "custom_fields", "gantt_charts", "time_tracking", "reporting", "integrations",
        ]

    def test_unlimited_legacy_storage_gets_half_credit(self, mapper):
        features = LegacyPlanFeatures(storage_limit_gb=-1)

        assert mapper.feature_match_percent(features, PlanTier.PRO_SMALL) == 95
        assert mapper.feature_match_percent(features, PlanTier.ENTERPRISE) == 100
        assert "storage" in mapper.feature_delta(features, PlanTier.PRO_SMALL)[0]

    def test_user_limit_partial_credit(self, mapper):
        features = LegacyPlanFeatures()
        assert mapper.feature_match_percent(features, PlanTier.PRO_SMALL, user_limit=10) == 96
        assert mapper.feature_match_percent(features, PlanTier.PRO_SMALL, user_count=4) == 100

    def test_ordinal_priority_credit(self, mapper):
        features = LegacyPlanFeatures(priority=PriorityLevel.PREMIUM)

        assert mapper.feature_match_percent(features, PlanTier.PRO_SMALL) == 98
        assert "priority" in mapper.feature_delta(features, PlanTier.PRO_SMALL)[0]


# ==============================================================================
# Cost comparison and ranking
# ==============================================================================

class TestCompareCosts:

    def test_cheaper_tier(self):
        costs = compare_costs(Decimal("50"), Decimal("39.96"))

        assert costs.cost_difference == Decimal("-10.04")
        assert costs.percentage_change == Decimal("-20.08")
        assert costs.break_even_months is None
        assert costs.with_discount_cost == Decimal("39.96")

    def test_more_expensive_tier(self):
        costs = compare_costs(Decimal("60"), Decimal("75"))

        assert costs.percentage_change == Decimal("25.00")
        assert costs.break_even_months == 3

    def test_no_current_cost(self):
        costs = compare_costs(Decimal("0"), Decimal("39.96"))
        assert costs.percentage_change == Decimal("0.00")
        assert costs.break_even_months is None


class TestFindEquivalents:

    def test_evaluate_tier(self, mapper):
        equivalency = mapper.evaluate_tier(
            LegacyPlanFeatures(), Decimal("50.00"), PlanTier.PRO_SMALL, 4,
        )

        assert equivalency.feature_match_percent == 100
        assert equivalency.migration_complexity == MigrationComplexity.MODERATE
        assert equivalency.recommendation_score == 81

    def test_ranked_best_first_with_stable_ties(self, mapper):
        ranked = mapper.find_equivalents(LegacyPlanFeatures(), Decimal("50.00"), 4)

        assert [(e.plan_tier, e.recommendation_score) for e in ranked] == [
            (PlanTier.PRO_SMALL, 81),
            (PlanTier.BUSINESS_SMALL, 81),
            (PlanTier.PRO_LARGE, 70),
            (PlanTier.BUSINESS_LARGE, 64),
            (PlanTier.ENTERPRISE, 63),
        ]

    def test_feature_match_floor(self, catalog):
        mapper = CustomPlanEquivalencyMapper(catalog, EngineConfig(feature_match_floor=90))
        features = LegacyPlanFeatures(client_portal=True, advanced_permissions=True)

        tiers = {e.plan_tier for e in mapper.find_equivalents(features, Decimal("50.00"), 4)}
        assert tiers == {PlanTier.BUSINESS_SMALL, PlanTier.BUSINESS_LARGE, PlanTier.ENTERPRISE}


# ==============================================================================
# Grandfathering
# ==============================================================================

class TestGrandfathering:

    def test_synthesized_discount_preserves_price(self):
        discount = CustomPlanEquivalencyMapper.synthesize_grandfathered_discount(
            "org-c", PlanTier.PRO_LARGE, Decimal("50.00"), Decimal("80.00"), True,
        )

        assert discount.discount_code == "GRANDFATHERED_org-c_PRO_LARGE"
        assert discount.discount_type == DiscountType.PERCENTAGE
        assert discount.value == Decimal("37.50")
        assert discount.duration_months == -1
        assert discount.is_permanent
        assert discount.stackable is False
        assert discount.eligible_plans == [PlanTier.PRO_LARGE]

    @pytest.mark.parametrize("current,new,preserve", [
        ("50.00", "80.00", False),
        ("80.00", "50.00", True),
        ("50.00", "50.00", True),
    ])
    def test_no_discount_when_not_needed(self, current, new, preserve):
        assert CustomPlanEquivalencyMapper.synthesize_grandfathered_discount(
            "org-c", PlanTier.PRO_LARGE, Decimal(current), Decimal(new), preserve,
        ) is None

    def test_grandfathered_discount_for_target_tier(self, mapper, custom_record):
        record = custom_record().custom_plan
        discount = mapper.grandfathered_discount("org-custom", record, "PRO_SMALL", 6)

        assert discount.value == Decimal("16.58")
        assert discount.eligible_plans == [PlanTier.PRO_SMALL]

    def test_grandfathered_benefits(self, mapper, custom_record):
        record = custom_record(features='{"storage_limit": 500}', user_limit=25).custom_plan
        details = mapper.build_details(record, 4)

        assert details.grandfathered_benefits == [
            "Grandfathered pricing: $50.00/month",
            "Unlimited projects access",
            "Enhanced storage: 500GB",
            "Extended user limit: 25 users",
            "Legacy feature configuration",
            "Existing plan terms and conditions",
        ]
        assert details.preservation_eligible is True
        assert details.current_price == Decimal("50.00")
