# -*- coding: utf-8 -*-
"""
Cost-Benefit & Risk Analyzer - PlanShift

Deep-dives one candidate tier for an organization:

- Cost: list price per the catalog pricing model, the single best
  discount, 1/3/5-year projections blending discounted and full-price
  months, one-off migration cost, payback period and cost per user
- Benefit: feature-upgrade values, productivity gains at the configured
  hourly rate, plus scalability, compliance and support improvements
- Risk: migration, business and technical risks weighted by probability
  and impact, normalized to 0-100
- Decision: proceed / modify / reject from the first-year net benefit,
  overridden by delay when the risk score is too high
- Timeline and three computed scenarios (immediate, delayed, no discount)

All money is Decimal with cent precision; every result is a frozen model.

Example:
    >>> from planshift.recommendation.cost_benefit import MigrationCostBenefitAnalyzer
    >>> analyzer = MigrationCostBenefitAnalyzer()
    >>> result = analyzer.analyze("org-1", "PRO_SMALL", UserCategory.TRIAL, metrics)
    >>> result.decision
    <RecommendationType.PROCEED: 'proceed'>

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple, Union

from planshift.determinism import Money, round_half_up
from planshift.recommendation.catalog import (
    UNLIMITED,
    BenefitTables,
    PricingCatalog,
    TierSpec,
    default_catalog,
)
from planshift.recommendation.config import EngineConfig, get_config
from planshift.recommendation.discounts import (
    apply_discount,
    blended_cost,
    discounted_months,
    select_discount,
)
from planshift.recommendation.models import (
    AppSumoStatus,
    BenefitAnalysis,
    BusinessRisk,
    ComplianceBenefit,
    CostPerUserAnalysis,
    CustomPlanDetails,
    DetailedCostAnalysis,
    DetailedMigrationCostBenefit,
    FeatureBenefit,
    Level,
    Likelihood,
    MigrationDiscount,
    MigrationPhase,
    MigrationRecommendation,
    MigrationRisk,
    MigrationScenario,
    MigrationTimeline,
    MitigationStrategy,
    PlanTier,
    ProductivityBenefit,
    RecommendationType,
    RiskAssessment,
    ScalabilityBenefit,
    SupportBenefit,
    TechnicalRisk,
    UsageMetrics,
    UserCategory,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

COMPLEXITY_MULTIPLIERS = {
    UserCategory.FREE: Decimal("0.5"),
    UserCategory.TRIAL: Decimal("0.5"),
    UserCategory.NEW_USER: Decimal("0.5"),
    UserCategory.APPSUMO: Decimal("1.2"),
    UserCategory.ACTIVE_SUBSCRIBER: Decimal("1.2"),
    UserCategory.CUSTOM_PLAN: Decimal("2.0"),
}

PROBABILITY_WEIGHTS = {Likelihood.LOW: 1, Likelihood.MEDIUM: 2, Likelihood.HIGH: 3}
IMPACT_WEIGHTS = {Level.LOW: 1, Level.MEDIUM: 2, Level.HIGH: 3, Level.CRITICAL: 4}
MAX_RISK_WEIGHT = 12
UNSCORED_RISK_WEIGHT = PROBABILITY_WEIGHTS[Likelihood.MEDIUM] * IMPACT_WEIGHTS[Level.MEDIUM]

MAX_ACCOMMODATION_MONTHS = 60
DAYS_PER_MONTH = 30
MODIFY_TOLERANCE = Decimal("0.1")
DELAYED_RISK_RELIEF = 10

CRITICAL_PATH_LENGTH = 3
TIMELINE_DEPENDENCIES = ("User approval", "Data backup", "Feature mapping")


def _timeline_score(days: int) -> int:
    if days <= 14:
        return 100
    if days <= 30:
        return 80
    if days <= 90:
        return 60
    return 40


class MigrationCostBenefitAnalyzer:
    """Cost, benefit and risk analysis of moving to one tier.

    Attributes:
        catalog: Pricing catalog.
        benefits: Feature-value and productivity tables.
        config: Engine configuration (hourly rate, migration fees, risk
            threshold, delayed scenario length).
    """

    def __init__(
        self,
        catalog: Optional[PricingCatalog] = None,
        benefits: Optional[BenefitTables] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self.catalog = catalog or default_catalog()
        self.benefits = benefits or BenefitTables()
        self.config = config or get_config()

    # ==================================================================
    # Cost
    # ==================================================================

    def migration_cost(self, category: UserCategory, seats: int) -> Decimal:
        """Base fee scaled by category complexity plus a capped per-user fee."""
        base_fee = Money.to_decimal(self.config.migration_base_fee)
        per_user = min(
            Money.to_decimal(self.config.per_user_migration_fee) * seats,
            Money.to_decimal(self.config.per_user_migration_cap),
        )
        return Money.quantize(base_fee * COMPLEXITY_MULTIPLIERS[category] + per_user)

    def cost_analysis(
        self,
        spec: TierSpec,
        category: UserCategory,
        usage_metrics: UsageMetrics,
        custom_plan_details: Optional[CustomPlanDetails],
        discounts: Sequence[MigrationDiscount],
        as_of: Optional[datetime] = None,
    ) -> DetailedCostAnalysis:
        """Financial projection of moving to ``spec``.

        Args:
            spec: Target tier.
            category: Organization category.
            usage_metrics: Aggregated usage.
            custom_plan_details: Current custom plan, if any.
            discounts: Discounts available to the organization.
            as_of: Reference time for the break-even date.

        Returns:
            DetailedCostAnalysis with every cost >= 0.
        """
        seats = max(1, usage_metrics.total_users)
        current = (
            Money.quantize(custom_plan_details.current_price)
            if custom_plan_details is not None else Money.of(0)
        )
        base = spec.monthly_cost(seats)
        discount = select_discount(discounts, spec.tier, base)
        effective = apply_discount(base, discount)

        duration = discount.duration_months if discount is not None else 0
        first_year = blended_cost(base, effective, duration, 12)
        three_year = blended_cost(base, effective, duration, 36)
        five_year = blended_cost(base, effective, duration, 60)
        migration = self.migration_cost(category, seats)
        savings = Money.quantize((base - effective) * discounted_months(discount, 12))

        monthly_savings = current - effective
        payback = None
        break_even = None
        if monthly_savings > 0:
            payback = math.ceil(migration / monthly_savings)
            if as_of is not None:
                break_even = as_of.date() + timedelta(days=payback * DAYS_PER_MONTH)

        current_per_user = Money.quantize(current / seats)
        new_per_user = Money.quantize(effective / seats)
        efficiency = min(
            1.0,
            max(0.0, (10 - float(new_per_user)) / 10)
            + min(usage_metrics.total_users / 20, 1.0) * 0.2,
        )

        return DetailedCostAnalysis(
            current_monthly_cost=current,
            base_monthly_cost=base,
            new_monthly_cost=effective,
            monthly_difference=effective - current,
            first_year_cost=first_year,
            three_year_cost=three_year,
            five_year_cost=five_year,
            migration_cost=migration,
            discount_savings=savings,
            applied_discount_code=discount.discount_code if discount else None,
            payback_period_months=payback,
            break_even_date=break_even,
            total_cost_of_ownership=five_year + migration,
            cost_per_user=CostPerUserAnalysis(
                current_cost_per_user=current_per_user,
                new_cost_per_user=new_per_user,
                savings_per_user=current_per_user - new_per_user,
                scaling_efficiency=efficiency,
            ),
        )

    # ==================================================================
    # Benefit
    # ==================================================================

    def feature_benefits(self, spec: TierSpec, category: UserCategory) -> List[FeatureBenefit]:
        current_state = "unavailable" if category == UserCategory.FREE else "limited"
        benefits = []
        for value in self.benefits.features_for(spec.tier):
            if value.annual_value > 3000:
                impact = Level.HIGH
            elif value.annual_value > 1500:
                impact = Level.MEDIUM
            else:
                impact = Level.LOW
            benefits.append(FeatureBenefit(
                feature=value.feature,
                current_state=current_state,
                new_state=value.new_state,
                impact=impact,
                estimated_value=Money.quantize(value.annual_value),
                description=f"Upgrade to {value.new_state} {value.feature.lower()} capabilities",
            ))
        return benefits

    def productivity_gains(self, spec: TierSpec, users: int) -> List[ProductivityBenefit]:
        """``users x hours/user/month x hourly rate x 12`` per work area."""
        rate = Money.to_decimal(self.config.hourly_rate)
        gains = []
        for area in self.benefits.productivity_for(spec.tier):
            hours = area.hours_per_user * users
            gains.append(ProductivityBenefit(
                area=area.area,
                hours_saved_per_month=hours,
                efficiency_gain_percent=area.efficiency_gain_percent,
                monetary_value=Money.quantize(hours * rate * 12),
                description=area.description,
            ))
        return gains

    @staticmethod
    def _storage_months(used_gb: float, limit_gb: int, rate: float) -> int:
        if limit_gb == UNLIMITED or used_gb <= 0 or rate <= 0:
            return MAX_ACCOMMODATION_MONTHS
        if used_gb >= limit_gb:
            return 0
        months = math.floor(math.log(limit_gb / used_gb) / math.log(1 + rate))
        return min(MAX_ACCOMMODATION_MONTHS, months)

    def scalability_benefits(
        self, spec: TierSpec, usage_metrics: UsageMetrics,
    ) -> List[ScalabilityBenefit]:
        benefits: List[ScalabilityBenefit] = []
        users = usage_metrics.total_users
        growth = usage_metrics.growth_trend

        if spec.is_unlimited or spec.seat_cap > users:
            if spec.is_unlimited or growth.user_growth_rate * users <= 0:
                months = MAX_ACCOMMODATION_MONTHS
            else:
                months = min(
                    MAX_ACCOMMODATION_MONTHS,
                    math.floor((spec.seat_cap - users) / (growth.user_growth_rate * users)),
                )
            benefits.append(ScalabilityBenefit(
                metric="User Capacity",
                current_limit=users,
                new_limit=UNLIMITED if spec.is_unlimited else spec.seat_cap,
                growth_accommodation_months=months,
                description=f"Accommodates {months} months of projected user growth",
            ))

        benefits.append(ScalabilityBenefit(
            metric="Storage Capacity",
            current_limit=math.ceil(usage_metrics.storage_used_gb),
            new_limit=spec.storage_gb,
            growth_accommodation_months=self._storage_months(
                usage_metrics.storage_used_gb, spec.storage_gb, growth.storage_growth_rate,
            ),
            description="Enhanced storage supports growing file attachments and data",
        ))

        if not spec.is_free:
            benefits.append(ScalabilityBenefit(
                metric="Project Capacity",
                current_limit=usage_metrics.total_projects,
                new_limit=UNLIMITED,
                growth_accommodation_months=MAX_ACCOMMODATION_MONTHS,
                description="Unlimited projects support business growth",
            ))
        return benefits

    @staticmethod
    def compliance_benefits(spec: TierSpec) -> List[ComplianceBenefit]:
        benefits: List[ComplianceBenefit] = []
        if spec.advanced_features:
            benefits.append(ComplianceBenefit(
                requirement="Advanced Permissions",
                risk_reduction_percent=60,
                description="Role-based access control improves data security",
            ))
            benefits.append(ComplianceBenefit(
                requirement="Audit Trail",
                risk_reduction_percent=40,
                description="Comprehensive activity logging for compliance",
            ))
        if spec.tier == PlanTier.ENTERPRISE:
            benefits.append(ComplianceBenefit(
                requirement="SSO Integration",
                risk_reduction_percent=80,
                description="Single sign-on reduces security risks",
            ))
            benefits.append(ComplianceBenefit(
                requirement="Data Residency",
                risk_reduction_percent=30,
                description="Enhanced data control and residency options",
            ))
        return benefits

    def support_improvements(self, spec: TierSpec) -> List[SupportBenefit]:
        free = self.catalog.get(PlanTier.FREE)
        improvements = [SupportBenefit(
            support_type="Technical Support",
            current_level=free.support_label,
            new_level=spec.support_label,
            response_time=spec.support_response,
            description=f"Upgrade to {spec.support_label} with {spec.support_response} response time",
        )]
        if spec.large_team:
            improvements.append(SupportBenefit(
                support_type="Onboarding",
                current_level="Self-service",
                new_level="Guided onboarding",
                response_time="Immediate",
                description="Dedicated onboarding specialist for faster setup",
            ))
        if spec.tier == PlanTier.ENTERPRISE:
            improvements.append(SupportBenefit(
                support_type="Account Management",
                current_level="None",
                new_level="Dedicated CSM",
                response_time="Proactive",
                description="Dedicated Customer Success Manager for ongoing optimization",
            ))
        return improvements

    def benefit_analysis(
        self, spec: TierSpec, category: UserCategory, usage_metrics: UsageMetrics,
    ) -> BenefitAnalysis:
        features = self.feature_benefits(spec, category)
        productivity = self.productivity_gains(spec, usage_metrics.total_users)
        value = sum((f.estimated_value for f in features), Decimal("0")) + sum(
            (p.monetary_value for p in productivity), Decimal("0")
        )
        return BenefitAnalysis(
            feature_upgrades=features,
            productivity_gains=productivity,
            scalability_benefits=self.scalability_benefits(spec, usage_metrics),
            compliance_benefits=self.compliance_benefits(spec),
            support_improvements=self.support_improvements(spec),
            quantified_annual_value=value,
        )

    # ==================================================================
    # Risk
    # ==================================================================

    @staticmethod
    def migration_risks(
        category: UserCategory, custom_plan_details: Optional[CustomPlanDetails],
    ) -> List[MigrationRisk]:
        risks = [MigrationRisk(
            risk="Data Migration",
            probability=Likelihood.LOW,
            impact=Level.MEDIUM,
            mitigation="Comprehensive backup and testing procedures",
        )]
        if category == UserCategory.CUSTOM_PLAN:
            risks.append(MigrationRisk(
                risk="User Resistance to Change",
                probability=Likelihood.MEDIUM,
                impact=Level.MEDIUM,
                mitigation="Gradual rollout with training and support",
            ))
        if custom_plan_details is not None:
            risks.append(MigrationRisk(
                risk="Feature Compatibility",
                probability=Likelihood.MEDIUM,
                impact=Level.LOW,
                mitigation="Feature mapping analysis and alternative workflows",
            ))
        risks.append(MigrationRisk(
            risk="Service Downtime",
            probability=Likelihood.LOW,
            impact=Level.HIGH,
            mitigation="Scheduled maintenance window and rollback plan",
        ))
        return risks

    @staticmethod
    def business_risks(spec: TierSpec) -> List[BusinessRisk]:
        risks = [
            BusinessRisk(
                risk="Budget Overrun",
                impact="Additional unexpected costs during migration",
                mitigation="Detailed cost planning with 20% contingency buffer",
            ),
            BusinessRisk(
                risk="Project Delays",
                impact="Extended migration timeline affecting business operations",
                mitigation="Phased migration approach with clear milestones",
            ),
        ]
        if spec.tier == PlanTier.ENTERPRISE:
            risks.append(BusinessRisk(
                risk="ROI Achievement",
                impact="Difficulty realizing expected return on investment",
                mitigation="Clear KPI tracking and benefit realization plan",
            ))
        return risks

    @staticmethod
    def technical_risks(spec: TierSpec) -> List[TechnicalRisk]:
        risks = [TechnicalRisk(
            risk="Third-party Integrations",
            impact="Existing integrations may need reconfiguration",
            mitigation="Integration testing and vendor coordination",
        )]
        if spec.tier == PlanTier.ENTERPRISE:
            risks.append(TechnicalRisk(
                risk="Performance Optimization",
                impact="Advanced features may require system optimization",
                mitigation="Performance testing and infrastructure scaling",
            ))
        risks.append(TechnicalRisk(
            risk="Security Configuration",
            impact="New security features require proper configuration",
            mitigation="Security review and compliance verification",
        ))
        return risks

    @staticmethod
    def mitigation_strategies() -> List[MitigationStrategy]:
        return [
            MitigationStrategy(
                risk="Data Loss",
                strategy="Complete data backup and validation",
                effort=Likelihood.MEDIUM,
                timeline="1-2 weeks before migration",
            ),
            MitigationStrategy(
                risk="User Disruption",
                strategy="Phased rollout with pilot group",
                effort=Likelihood.LOW,
                timeline="Ongoing during migration",
            ),
            MitigationStrategy(
                risk="Feature Adoption",
                strategy="Training sessions and documentation",
                effort=Likelihood.MEDIUM,
                timeline="1-4 weeks after migration",
            ),
            MitigationStrategy(
                risk="Performance Issues",
                strategy="Monitoring and optimization",
                effort=Likelihood.LOW,
                timeline="Ongoing post-migration",
            ),
        ]

    @staticmethod
    def overall_risk_score(
        migration_risks: Sequence[MigrationRisk],
        other_risk_count: int,
    ) -> int:
        """``round(100 x mean(probability x impact) / 12)``.

        Business and technical risks count as medium probability and
        medium impact.
        """
        total = sum(
            PROBABILITY_WEIGHTS[r.probability] * IMPACT_WEIGHTS[r.impact]
            for r in migration_risks
        ) + other_risk_count * UNSCORED_RISK_WEIGHT
        count = len(migration_risks) + other_risk_count
        if count == 0:
            return 0
        return round_half_up(Decimal(total) / Decimal(count) / MAX_RISK_WEIGHT * 100)

    def risk_assessment(
        self,
        spec: TierSpec,
        category: UserCategory,
        custom_plan_details: Optional[CustomPlanDetails],
    ) -> RiskAssessment:
        migration = self.migration_risks(category, custom_plan_details)
        business = self.business_risks(spec)
        technical = self.technical_risks(spec)
        return RiskAssessment(
            overall_risk_score=self.overall_risk_score(
                migration, len(business) + len(technical),
            ),
            migration_risks=migration,
            business_risks=business,
            technical_risks=technical,
            mitigation_strategies=self.mitigation_strategies(),
        )

    # ==================================================================
    # Timeline
    # ==================================================================

    @staticmethod
    def timeline(category: UserCategory, as_of: Optional[datetime] = None) -> MigrationTimeline:
        """Four-phase plan; custom plans need longer planning and execution."""
        custom = category == UserCategory.CUSTOM_PLAN
        phases = [
            MigrationPhase(
                phase="Planning & Preparation",
                duration_days=7 if custom else 3,
                tasks=["Requirements analysis", "Migration planning", "Backup creation"],
                resources=["Technical team", "Project manager"],
                dependencies=["Stakeholder approval"],
            ),
            MigrationPhase(
                phase="Migration Execution",
                duration_days=5 if custom else 2,
                tasks=["Account migration", "Data transfer", "Feature configuration"],
                resources=["Technical team", "Support team"],
                dependencies=["Planning completion", "Backup verification"],
            ),
            MigrationPhase(
                phase="Testing & Validation",
                duration_days=3,
                tasks=["Feature testing", "User acceptance testing", "Performance validation"],
                resources=["QA team", "End users"],
                dependencies=["Migration completion"],
            ),
            MigrationPhase(
                phase="Go-Live & Support",
                duration_days=7,
                tasks=["User training", "Monitoring", "Issue resolution"],
                resources=["Support team", "Training team"],
                dependencies=["Validation completion"],
            ),
        ]
        return MigrationTimeline(
            phases=phases,
            total_duration_days=sum(p.duration_days for p in phases),
            critical_path=[p.phase for p in phases[:CRITICAL_PATH_LENGTH]],
            dependencies=list(TIMELINE_DEPENDENCIES),
            recommended_start=as_of.date() if as_of is not None else None,
        )

    # ==================================================================
    # Decision
    # ==================================================================

    def decide(
        self,
        cost: DetailedCostAnalysis,
        benefit: BenefitAnalysis,
        risk: RiskAssessment,
    ) -> Tuple[RecommendationType, Decimal, List[MigrationRecommendation]]:
        """Decision, first-year net benefit and supporting recommendations."""
        net = benefit.quantified_annual_value - cost.first_year_cost
        payback = cost.payback_period_months
        recommendations: List[MigrationRecommendation] = []

        if risk.overall_risk_score > self.config.delay_risk_threshold:
            recommendations.append(MigrationRecommendation(
                recommendation_type=RecommendationType.DELAY,
                priority=Level.HIGH,
                reasoning="High risk score requires additional risk mitigation",
                action="Implement risk mitigation strategies before proceeding",
                timeline="30-60 days",
            ))

        if net > 0:
            decision = RecommendationType.PROCEED
            if payback is not None and payback <= 6:
                recommendations.append(MigrationRecommendation(
                    recommendation_type=RecommendationType.PROCEED,
                    priority=Level.CRITICAL,
                    reasoning=f"Fast payback period of {payback} months",
                    action="Prioritize immediate migration",
                    timeline="Within 14 days",
                ))
            else:
                recommendations.append(MigrationRecommendation(
                    recommendation_type=RecommendationType.PROCEED,
                    priority=Level.HIGH if payback is None or payback <= 12 else Level.MEDIUM,
                    reasoning=f"Positive ROI of ${round_half_up(net)} in first year",
                    action="Proceed with migration",
                    timeline="Within 30 days",
                ))
        elif net > -cost.first_year_cost * MODIFY_TOLERANCE:
            decision = RecommendationType.MODIFY
            recommendations.append(MigrationRecommendation(
                recommendation_type=RecommendationType.MODIFY,
                priority=Level.MEDIUM,
                reasoning="Marginal cost-benefit ratio, consider optimization",
                action="Optimize migration scope or timing",
                timeline="Within 60 days",
            ))
        else:
            decision = RecommendationType.REJECT
            recommendations.append(MigrationRecommendation(
                recommendation_type=RecommendationType.REJECT,
                priority=Level.LOW,
                reasoning=f"First-year cost exceeds quantified benefit by ${round_half_up(-net)}",
                action="Stay on the current plan and reassess later",
                timeline="Reassess in 6 months",
            ))

        if risk.overall_risk_score > self.config.delay_risk_threshold:
            decision = RecommendationType.DELAY
        return decision, net, recommendations

    # ==================================================================
    # Scenarios
    # ==================================================================

    @staticmethod
    def scenario_score(
        cost: DetailedCostAnalysis, annual_benefit: Decimal, risk_score: int, days: int,
    ) -> int:
        """50% benefit/cost ratio, 30% inverse risk, 20% timeline speed."""
        ratio = min(
            Decimal(100),
            Decimal(100) * annual_benefit / max(cost.first_year_cost, Decimal(1)),
        )
        return round_half_up(
            ratio * Decimal("0.5")
            + Decimal(100 - risk_score) * Decimal("0.3")
            + Decimal(_timeline_score(days)) * Decimal("0.2")
        )

    def scenarios(
        self,
        spec: TierSpec,
        category: UserCategory,
        usage_metrics: UsageMetrics,
        custom_plan_details: Optional[CustomPlanDetails],
        discounts: Sequence[MigrationDiscount],
        benefit: BenefitAnalysis,
        risk: RiskAssessment,
        timeline: MigrationTimeline,
        as_of: Optional[datetime] = None,
    ) -> List[MigrationScenario]:
        """Immediate, delayed and no-discount migrations of the same tier."""
        months = self.config.delayed_scenario_months
        value = benefit.quantified_annual_value
        days = timeline.total_duration_days

        def build(
            name: str,
            description: str,
            offered: Sequence[MigrationDiscount],
            annual_benefit: Decimal,
            risk_score: int,
            timeline_days: int,
        ) -> MigrationScenario:
            cost = self.cost_analysis(
                spec, category, usage_metrics, custom_plan_details, offered, as_of,
            )
            return MigrationScenario(
                name=name,
                description=description,
                cost_analysis=cost,
                annual_benefit=annual_benefit,
                risk_score=risk_score,
                timeline_days=timeline_days,
                recommendation_score=self.scenario_score(
                    cost, annual_benefit, risk_score, timeline_days,
                ),
            )

        deferred_value = Money.quantize(value * max(0, 12 - months) / 12)
        return [
            build(
                "Immediate Migration",
                "Migrate immediately with current discounts",
                discounts, value, risk.overall_risk_score, days,
            ),
            build(
                "Delayed Migration",
                f"Wait {months} months for better timing",
                [d for d in discounts if not d.expires_with_window],
                deferred_value,
                max(0, risk.overall_risk_score - DELAYED_RISK_RELIEF),
                days + months * DAYS_PER_MONTH,
            ),
            build(
                "Without Discounts",
                "Migrate at list price without promotional discounts",
                (), value, risk.overall_risk_score, days,
            ),
        ]

    # ==================================================================
    # Entry point
    # ==================================================================

    def analyze(
        self,
        organization_id: str,
        target_tier: Union[PlanTier, str],
        category: UserCategory,
        usage_metrics: UsageMetrics,
        custom_plan_details: Optional[CustomPlanDetails] = None,
        appsumo_status: Optional[AppSumoStatus] = None,
        discounts: Sequence[MigrationDiscount] = (),
        as_of: Optional[datetime] = None,
    ) -> DetailedMigrationCostBenefit:
        """Full cost-benefit analysis of moving to ``target_tier``.

        Args:
            organization_id: Organization identifier.
            target_tier: Tier to analyze.
            category: Resolved organization category.
            usage_metrics: Aggregated usage.
            custom_plan_details: Current custom plan, if any.
            appsumo_status: AppSumo state; window-bound discounts are
                dropped once its window has closed.
            discounts: Discounts available to the organization.
            as_of: Reference time for dates in the result.

        Returns:
            DetailedMigrationCostBenefit without a provenance hash.

        Raises:
            UnknownPlanTierError: If ``target_tier`` is not in the catalog.
        """
        spec = self.catalog.get(target_tier)
        offered = list(discounts)
        if appsumo_status is not None and not appsumo_status.eligible_for_special_discount:
            offered = [d for d in offered if not d.expires_with_window]

        cost = self.cost_analysis(
            spec, category, usage_metrics, custom_plan_details, offered, as_of,
        )
        benefit = self.benefit_analysis(spec, category, usage_metrics)
        risk = self.risk_assessment(spec, category, custom_plan_details)
        timeline = self.timeline(category, as_of)
        decision, net, recommendations = self.decide(cost, benefit, risk)

        logger.debug(
            "Analysis %s -> %s: net=%s risk=%d decision=%s",
            organization_id, spec.tier.value, net,
            risk.overall_risk_score, decision.value,
        )
        return DetailedMigrationCostBenefit(
            organization_id=organization_id,
            target_tier=spec.tier,
            user_category=category,
            cost_analysis=cost,
            benefit_analysis=benefit,
            risk_assessment=risk,
            timeline=timeline,
            decision=decision,
            net_benefit=net,
            recommendations=recommendations,
            scenarios=self.scenarios(
                spec, category, usage_metrics, custom_plan_details, offered,
                benefit, risk, timeline, as_of,
            ),
        )


__all__ = [
    "MigrationCostBenefitAnalyzer",
    "COMPLEXITY_MULTIPLIERS",
]
