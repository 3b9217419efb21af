# -*- coding: utf-8 -*-
"""
Recommendation Engine Data Models - PlanShift

Pydantic v2 data models for the plan recommendation engine. Raw inputs
mirror what the usage data provider and the legacy plan store return;
result models are frozen so that a computed recommendation can be shared
across threads and hashed for provenance.

Models:
    - Enums: PlanTier, UserCategory, DiscountType, MatchFactor,
             MigrationComplexity, Level, Likelihood, UpgradeReasonType,
             RecommendationType, UrgentActionType, Severity, SummaryAction,
             PricingModel, PriorityLevel, SupportLevel
    - Raw inputs: ProjectFacts, DailyActivity, EngagementFacts, UsageFacts,
                  CustomPlanRecord, AppSumoRecord, OrganizationRecord
    - Analytics: FeatureUtilization, GrowthTrend, PeakUsagePeriod,
                 UsageMetrics, UsageInsights
    - Eligibility: MigrationDiscount, MigrationWindow, UpgradeReason,
                   AppSumoStatus, MigrationEligibility
    - Legacy plans: LegacyPlanFeatures, CostComparison, PlanEquivalency,
                    CustomPlanDetails
    - Scoring: MatchReason, FeatureComparison, RecommendationTimeline,
               PlanRecommendation
    - Response: UrgentAction, MigrationSummary, SpecialOffer, UserAnalytics,
                PlanRecommendationResponse
    - Cost-benefit: CostPerUserAnalysis, DetailedCostAnalysis, FeatureBenefit,
                    ProductivityBenefit, ScalabilityBenefit, ComplianceBenefit,
                    SupportBenefit, BenefitAnalysis, MigrationRisk,
                    BusinessRisk, TechnicalRisk, MitigationStrategy,
                    RiskAssessment, MigrationPhase, MigrationTimeline,
                    MigrationRecommendation, MigrationScenario,
                    DetailedMigrationCostBenefit

Author: PlanShift Team
Status: Production Ready
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from planshift.determinism import as_utc

_RESULT_CONFIG = {"extra": "forbid", "frozen": True}


# =============================================================================
# Enumerations
# =============================================================================


class PlanTier(str, Enum):
    """Closed set of subscription tiers, in catalog order."""
    FREE = "FREE"
    PRO_SMALL = "PRO_SMALL"
    BUSINESS_SMALL = "BUSINESS_SMALL"
    PRO_LARGE = "PRO_LARGE"
    BUSINESS_LARGE = "BUSINESS_LARGE"
    ENTERPRISE = "ENTERPRISE"


class UserCategory(str, Enum):
    """Billing situation an organization is migrating from."""
    TRIAL = "trial"
    FREE = "free"
    CUSTOM_PLAN = "custom_plan"
    APPSUMO = "appsumo"
    NEW_USER = "new_user"
    ACTIVE_SUBSCRIBER = "active_subscriber"


class DiscountType(str, Enum):
    """Supported discount mechanics."""
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    FREE_MONTHS = "free_months"
    BOGO = "bogo"


class MatchFactor(str, Enum):
    """The five weighted factors of a plan recommendation score."""
    USER_COUNT = "user_count"
    FEATURE_REQUIREMENTS = "feature_requirements"
    BUDGET_ALIGNMENT = "budget_alignment"
    USAGE_PATTERNS = "usage_patterns"
    GROWTH_TRAJECTORY = "growth_trajectory"


class MigrationComplexity(str, Enum):
    """Effort class of a migration."""
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class Level(str, Enum):
    """Four-step scale for urgency, impact and priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Likelihood(str, Enum):
    """Three-step scale for probability and effort."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class UpgradeReasonType(str, Enum):
    """Why an organization should move to a standard tier."""
    CAPACITY = "capacity"
    FEATURES = "features"
    SUPPORT = "support"
    COMPLIANCE = "compliance"
    COST_OPTIMIZATION = "cost_optimization"


class RecommendationType(str, Enum):
    """Migration decision."""
    PROCEED = "proceed"
    DELAY = "delay"
    MODIFY = "modify"
    REJECT = "reject"


class UrgentActionType(str, Enum):
    """Time-critical conditions surfaced with a recommendation."""
    MIGRATION_DEADLINE = "migration_deadline"
    CAPACITY_LIMIT = "capacity_limit"
    TRIAL_EXPIRY = "trial_expiry"


class Severity(str, Enum):
    """Severity of an urgent action."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class SummaryAction(str, Enum):
    """Overall migration advice."""
    MIGRATE_NOW = "migrate_now"
    PLAN_MIGRATION = "plan_migration"
    STAY_CURRENT = "stay_current"
    EVALUATE_OPTIONS = "evaluate_options"


class PricingModel(str, Enum):
    """How a tier's monthly price depends on the seat count."""
    FLAT = "flat"
    PER_SEAT = "per_seat"
    BASE_PLUS_OVERAGE = "base_plus_overage"


class PriorityLevel(str, Enum):
    """Feature priority class, ordered basic < standard < premium < enterprise."""
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


class SupportLevel(str, Enum):
    """Support channel, ordered community < email < priority < dedicated."""
    COMMUNITY = "community"
    EMAIL = "email"
    PRIORITY = "priority"
    DEDICATED = "dedicated"


# =============================================================================
# Raw inputs
# =============================================================================


class ProjectFacts(BaseModel):
    """Structural counts for one project."""

    task_count: int = Field(0, ge=0)
    phase_count: int = Field(0, ge=0)
    custom_field_count: int = Field(0, ge=0)
    dependency_count: int = Field(0, ge=0)
    member_count: int = Field(0, ge=0)

    model_config = {"extra": "forbid"}


class DailyActivity(BaseModel):
    """Activity counters for one calendar day."""

    day: date
    active_users: int = Field(0, ge=0)
    active_projects: int = Field(0, ge=0)
    total_actions: int = Field(0, ge=0)

    model_config = {"extra": "forbid"}


class EngagementFacts(BaseModel):
    """Trailing 30-day engagement counters."""

    active_days_30d: int = Field(0, ge=0)
    total_actions_30d: int = Field(0, ge=0)
    unique_active_users_30d: int = Field(0, ge=0)
    days_in_current_state: int = Field(0, ge=0)

    model_config = {"extra": "forbid"}


class UsageFacts(BaseModel):
    """Raw usage counts for one organization, as supplied by the usage data provider.

    Every field is optional; missing data falls back to documented defaults
    during aggregation. ``active_integrations`` and ``custom_role_members``
    distinguish "unknown" (``None``) from "zero".
    """

    total_users: int = Field(0, ge=0)
    active_users: int = Field(0, ge=0)
    total_projects: int = Field(0, ge=0)
    active_projects: int = Field(0, ge=0)
    storage_used_bytes: int = Field(0, ge=0)
    total_tasks: int = Field(0, ge=0)
    assigned_tasks: int = Field(0, ge=0)
    comment_count: int = Field(0, ge=0)
    attachment_count: int = Field(0, ge=0)
    time_logged_tasks: int = Field(0, ge=0, description="Tasks with logged time")
    gantt_projects: int = Field(0, ge=0, description="Projects using phases/Gantt")
    custom_field_count: int = Field(0, ge=0)
    client_portal_projects: int = Field(0, ge=0)
    collaborative_projects: int = Field(
        0, ge=0, description="Projects with more than one member",
    )
    report_exports: int = Field(0, ge=0, description="Report exports in the window")
    workload_views: int = Field(0, ge=0, description="Workload views in the window")
    active_integrations: Optional[int] = Field(None, ge=0)
    custom_role_members: Optional[int] = Field(None, ge=0)
    projects: List[ProjectFacts] = Field(default_factory=list)
    monthly_new_users: List[int] = Field(default_factory=list)
    monthly_new_projects: List[int] = Field(default_factory=list)
    monthly_storage_added_bytes: List[int] = Field(default_factory=list)
    daily_activity: List[DailyActivity] = Field(default_factory=list)
    engagement: EngagementFacts = Field(default_factory=EngagementFacts)

    model_config = {"extra": "forbid"}


class CustomPlanRecord(BaseModel):
    """Stored custom-negotiated plan.

    ``features`` holds the stored feature payload as-is: a JSON string, a
    mapping or nothing.
    """

    plan_name: str = "Custom Plan"
    monthly_price: Decimal = Field(Decimal("0"), ge=0)
    user_limit: Optional[int] = Field(None, ge=0)
    features: Union[str, Dict[str, Any], None] = None
    is_active: bool = True
    preserve_pricing: bool = False

    model_config = {"extra": "forbid"}


class AppSumoRecord(BaseModel):
    """AppSumo coupon redemption."""

    purchase_date: datetime
    coupon_redeemed: bool = True
    already_migrated: bool = False

    model_config = {"extra": "forbid"}

    @field_validator("purchase_date")
    @classmethod
    def validate_purchase_date(cls, v: datetime) -> datetime:
        """Naive timestamps are read as UTC."""
        return as_utc(v)


class OrganizationRecord(BaseModel):
    """Billing state of one organization, as supplied by the legacy plan store."""

    organization_id: str
    created_at: Optional[datetime] = None
    trial_expires_at: Optional[datetime] = None
    has_active_subscription: bool = False
    current_plan_name: Optional[str] = None
    custom_plan: Optional[CustomPlanRecord] = None
    appsumo: Optional[AppSumoRecord] = None

    model_config = {"extra": "forbid"}

    @field_validator("created_at", "trial_expires_at")
    @classmethod
    def validate_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Naive timestamps are read as UTC."""
        return as_utc(v)


# =============================================================================
# Analytics
# =============================================================================


class FeatureUtilization(BaseModel):
    """Share of the organization actively using each feature."""

    gantt_charts: float = Field(..., ge=0.0, le=1.0)
    time_tracking: float = Field(..., ge=0.0, le=1.0)
    custom_fields: float = Field(..., ge=0.0, le=1.0)
    reporting: float = Field(..., ge=0.0, le=1.0)
    integrations: float = Field(..., ge=0.0, le=1.0)
    advanced_permissions: float = Field(..., ge=0.0, le=1.0)
    client_portal: float = Field(..., ge=0.0, le=1.0)
    resource_management: float = Field(..., ge=0.0, le=1.0)

    model_config = _RESULT_CONFIG


class GrowthTrend(BaseModel):
    """Monthly growth rates and compounded user projections."""

    user_growth_rate: float = Field(..., ge=0.0)
    project_growth_rate: float = Field(..., ge=0.0)
    storage_growth_rate: float = Field(..., ge=0.0)
    predicted_3month_users: int = Field(..., ge=0)
    predicted_6month_users: int = Field(..., ge=0)
    predicted_12month_users: int = Field(..., ge=0)

    model_config = _RESULT_CONFIG


class PeakUsagePeriod(BaseModel):
    """A day whose activity spiked above its surrounding average."""

    day: date
    active_users: int = Field(..., ge=0)
    total_actions: int = Field(..., ge=0)
    peak_type: str = Field(..., description="users, actions or both")

    model_config = _RESULT_CONFIG


class UsageMetrics(BaseModel):
    """Normalized usage profile of one organization."""

    total_users: int = Field(..., ge=0)
    active_users: int = Field(..., ge=0)
    total_projects: int = Field(..., ge=0)
    active_projects: int = Field(..., ge=0)
    storage_used_gb: float = Field(..., ge=0.0)
    total_tasks: int = Field(0, ge=0)
    feature_utilization: FeatureUtilization
    collaboration_index: float = Field(..., ge=0.0, le=1.0)
    complexity_index: float = Field(..., ge=0.0, le=1.0)
    growth_trend: GrowthTrend
    peak_usage_periods: List[PeakUsagePeriod] = Field(default_factory=list)

    model_config = _RESULT_CONFIG


class UsageInsights(BaseModel):
    """Engagement-based progression analysis and advice."""

    usage_score: int = Field(..., ge=0, le=100)
    progression_likelihood: int = Field(..., ge=0, le=100)
    days_in_current_state: int = Field(0, ge=0)
    next_likely_category: Optional[UserCategory] = None
    behavior_patterns: List[str] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    optimizations: List[str] = Field(default_factory=list)
    growth_opportunities: List[str] = Field(default_factory=list)

    model_config = _RESULT_CONFIG


# =============================================================================
# Eligibility
# =============================================================================


class MigrationDiscount(BaseModel):
    """A discount offered on migration.

    ``duration_months`` of ``-1`` marks a permanent discount. An empty
    ``eligible_plans`` list applies to every tier.
    """

    discount_code: str
    discount_type: DiscountType
    value: Decimal = Field(..., ge=0)
    duration_months: int = Field(..., ge=-1)
    conditions: List[str] = Field(default_factory=list)
    eligible_plans: List[PlanTier] = Field(default_factory=list)
    stackable: bool = False
    expires_with_window: bool = Field(
        False, description="Offer is lost once the migration window closes",
    )

    model_config = _RESULT_CONFIG

    @model_validator(mode="after")
    def validate_percentage(self) -> MigrationDiscount:
        """Percentage discounts cannot exceed 100."""
        if self.discount_type == DiscountType.PERCENTAGE and self.value > 100:
            raise ValueError("percentage discount cannot exceed 100")
        return self

    @property
    def is_permanent(self) -> bool:
        return self.duration_months == -1

    def applies_to(self, tier: PlanTier) -> bool:
        """Return True when the discount can be used on ``tier``."""
        return not self.eligible_plans or tier in self.eligible_plans


class MigrationWindow(BaseModel):
    """Period during which a time-bound migration offer applies."""

    start_date: datetime
    end_date: datetime
    urgency_level: Level
    remaining_days: int = Field(..., ge=0)

    model_config = _RESULT_CONFIG


class UpgradeReason(BaseModel):
    """A reason to move to a standard tier."""

    reason: str
    priority: Level
    impact: str
    category: UpgradeReasonType

    model_config = _RESULT_CONFIG


class AppSumoStatus(BaseModel):
    """State of an AppSumo promotional plan and its migration window."""

    is_appsumo_user: bool
    purchase_date: Optional[datetime] = None
    days_since_purchase: int = Field(0, ge=0)
    remaining_migration_days: int = Field(0, ge=0)
    eligible_for_special_discount: bool = False
    special_discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    minimum_tier_required: PlanTier = PlanTier.BUSINESS_SMALL
    already_migrated: bool = False
    urgency_level: Level = Level.LOW
    countdown_message: str = ""
    recommended_tier: PlanTier = PlanTier.BUSINESS_SMALL
    can_migrate_without_discount: bool = True

    model_config = _RESULT_CONFIG


# =============================================================================
# Legacy plans
# =============================================================================


class LegacyPlanFeatures(BaseModel):
    """Decoded feature flags of a custom plan.

    ``storage_limit_gb`` of ``-1`` means unlimited.
    """

    unlimited_projects: bool = True
    storage_limit_gb: int = Field(100, ge=-1)
    custom_fields: bool = False
    gantt_charts: bool = False
    time_tracking: bool = False
    reporting: bool = False
    integrations: bool = False
    client_portal: bool = False
    advanced_permissions: bool = False
    priority: PriorityLevel = PriorityLevel.STANDARD
    support_level: SupportLevel = SupportLevel.EMAIL

    model_config = _RESULT_CONFIG

    def enabled_features(self) -> List[str]:
        """Names of the boolean features that are switched on."""
        return [
            name for name in BOOLEAN_FEATURES if getattr(self, name)
        ]


BOOLEAN_FEATURES = (
    "unlimited_projects",
    "custom_fields",
    "gantt_charts",
    "time_tracking",
    "reporting",
    "integrations",
    "client_portal",
    "advanced_permissions",
)


class CostComparison(BaseModel):
    """Monthly cost of a tier against the organization's current cost."""

    current_monthly_cost: Decimal = Field(..., ge=0)
    new_monthly_cost: Decimal = Field(..., ge=0)
    cost_difference: Decimal
    percentage_change: Decimal
    with_discount_cost: Decimal = Field(..., ge=0)
    break_even_months: Optional[int] = Field(None, ge=0)

    model_config = _RESULT_CONFIG


class PlanEquivalency(BaseModel):
    """How well a standard tier replaces a custom plan."""

    plan_tier: PlanTier
    plan_name: str
    feature_match_percent: int = Field(..., ge=0, le=100)
    cost_comparison: CostComparison
    migration_complexity: MigrationComplexity
    recommendation_score: int = Field(..., ge=0, le=100)
    missing_features: List[str] = Field(default_factory=list)
    upgraded_features: List[str] = Field(default_factory=list)

    model_config = _RESULT_CONFIG


class CustomPlanDetails(BaseModel):
    """Decoded custom plan with its standard-tier equivalents."""

    plan_name: str
    current_price: Decimal = Field(..., ge=0)
    user_limit: Optional[int] = Field(None, ge=0)
    current_features: LegacyPlanFeatures
    grandfathered_benefits: List[str] = Field(default_factory=list)
    preservation_eligible: bool = False
    equivalent_plans: List[PlanEquivalency] = Field(default_factory=list)

    model_config = _RESULT_CONFIG


class MigrationEligibility(BaseModel):
    """Resolved category, eligible tiers and offers for one organization."""

    organization_id: str
    user_category: UserCategory
    current_plan: Optional[str] = None
    eligible_plans: List[PlanTier]
    recommended_plan: PlanTier
    discounts: List[MigrationDiscount] = Field(default_factory=list)
    migration_window: Optional[MigrationWindow] = None
    upgrade_reasons: List[UpgradeReason] = Field(default_factory=list)
    preserved_benefits: List[str] = Field(default_factory=list)
    appsumo_status: Optional[AppSumoStatus] = None
    custom_plan_details: Optional[CustomPlanDetails] = None

    model_config = _RESULT_CONFIG

    @model_validator(mode="after")
    def validate_discount_scope(self) -> MigrationEligibility:
        """Discounts may only reference eligible plans."""
        eligible = set(self.eligible_plans)
        for discount in self.discounts:
            stray = set(discount.eligible_plans) - eligible
            if stray:
                raise ValueError(
                    f"discount {discount.discount_code} references "
                    f"ineligible plans: {sorted(t.value for t in stray)}"
                )
        return self


# =============================================================================
# Scoring
# =============================================================================


class MatchReason(BaseModel):
    """One weighted factor of a recommendation score."""

    factor: MatchFactor
    score: int = Field(..., ge=0, le=100)
    weight: float = Field(..., ge=0.0, le=1.0)
    explanation: str

    model_config = _RESULT_CONFIG


class FeatureComparison(BaseModel):
    """Feature delta between the current arrangement and a tier."""

    current_features: List[str] = Field(default_factory=list)
    new_features: List[str] = Field(default_factory=list)
    upgraded_features: List[str] = Field(default_factory=list)
    removed_features: List[str] = Field(default_factory=list)
    feature_match_percent: int = Field(..., ge=0, le=100)
    critical_features_met: bool = True

    model_config = _RESULT_CONFIG


class RecommendationTimeline(BaseModel):
    """When the organization should migrate."""

    immediate_action: bool = False
    optimal_migration_date: Optional[datetime] = None
    migration_window: Optional[MigrationWindow] = None
    urgency_indicators: List[str] = Field(default_factory=list)

    model_config = _RESULT_CONFIG


class PlanRecommendation(BaseModel):
    """A scored candidate tier."""

    plan_id: str
    plan_name: str
    plan_tier: PlanTier
    recommendation_score: int = Field(..., ge=0, le=100)
    confidence_level: int = Field(..., ge=0, le=100)
    match_reasons: List[MatchReason] = Field(..., min_length=5, max_length=5)
    cost_analysis: CostComparison
    feature_comparison: FeatureComparison
    migration_complexity: MigrationComplexity
    timeline: RecommendationTimeline
    discounts: List[MigrationDiscount] = Field(default_factory=list)
    preserved_benefits: List[str] = Field(default_factory=list)

    model_config = _RESULT_CONFIG


# =============================================================================
# Recommendation response
# =============================================================================


class UrgentAction(BaseModel):
    """A condition the organization must act on soon."""

    action_type: UrgentActionType
    severity: Severity
    message: str
    action_required: str
    deadline: Optional[datetime] = None

    model_config = _RESULT_CONFIG


class MigrationSummary(BaseModel):
    """Top-level advice derived from the ranked recommendations."""

    recommended_action: SummaryAction
    timeline: str
    estimated_savings: Decimal = Field(Decimal("0.00"), ge=0)
    risk_factors: List[str] = Field(default_factory=list)

    model_config = _RESULT_CONFIG


class SpecialOffer(BaseModel):
    """Time-limited offer shown next to the recommendations."""

    offer_id: str
    title: str
    description: str
    discount_percentage: Decimal = Field(..., ge=0, le=100)
    valid_until: datetime
    conditions: List[str] = Field(default_factory=list)
    featured: bool = False

    model_config = _RESULT_CONFIG


class UserAnalytics(BaseModel):
    """Everything learned about the organization before scoring."""

    organization_id: str
    user_category: UserCategory
    usage_metrics: UsageMetrics
    migration_eligibility: MigrationEligibility
    insights: Optional[UsageInsights] = None

    model_config = _RESULT_CONFIG


class PlanRecommendationResponse(BaseModel):
    """Ranked plan recommendations with urgency, summary and offers."""

    generated_at: datetime
    user_analytics: UserAnalytics
    recommendations: List[PlanRecommendation]
    urgent_actions: List[UrgentAction] = Field(default_factory=list)
    migration_summary: MigrationSummary
    special_offers: List[SpecialOffer] = Field(default_factory=list)
    provenance_hash: str = ""

    model_config = _RESULT_CONFIG

    @field_validator("recommendations")
    @classmethod
    def validate_sorted(cls, v: List[PlanRecommendation]) -> List[PlanRecommendation]:
        """Recommendations are ordered by descending score."""
        scores = [r.recommendation_score for r in v]
        if scores != sorted(scores, reverse=True):
            raise ValueError("recommendations must be sorted by descending score")
        return v


# =============================================================================
# Cost-benefit analysis
# =============================================================================


class CostPerUserAnalysis(BaseModel):
    """Per-seat view of the migration cost."""

    current_cost_per_user: Decimal = Field(..., ge=0)
    new_cost_per_user: Decimal = Field(..., ge=0)
    savings_per_user: Decimal
    scaling_efficiency: float = Field(..., ge=0.0, le=1.0)

    model_config = _RESULT_CONFIG


class DetailedCostAnalysis(BaseModel):
    """Financial projection of a migration.

    ``payback_period_months`` is only set when the migration lowers the
    monthly cost.
    """

    current_monthly_cost: Decimal = Field(..., ge=0)
    base_monthly_cost: Decimal = Field(..., ge=0)
    new_monthly_cost: Decimal = Field(..., ge=0)
    monthly_difference: Decimal
    first_year_cost: Decimal = Field(..., ge=0)
    three_year_cost: Decimal = Field(..., ge=0)
    five_year_cost: Decimal = Field(..., ge=0)
    migration_cost: Decimal = Field(..., ge=0)
    discount_savings: Decimal = Field(..., ge=0)
    applied_discount_code: Optional[str] = None
    payback_period_months: Optional[int] = Field(None, ge=0)
    break_even_date: Optional[date] = None
    total_cost_of_ownership: Decimal = Field(..., ge=0)
    cost_per_user: CostPerUserAnalysis

    model_config = _RESULT_CONFIG


class FeatureBenefit(BaseModel):
    """Annual value of a feature unlocked by the target tier."""

    feature: str
    current_state: str = Field(..., description="unavailable or limited")
    new_state: str = Field(..., description="basic or advanced")
    impact: Level
    estimated_value: Decimal = Field(..., ge=0)
    description: str

    model_config = _RESULT_CONFIG


class ProductivityBenefit(BaseModel):
    """Time saved across the team in one work area."""

    area: str
    hours_saved_per_month: Decimal = Field(..., ge=0)
    efficiency_gain_percent: int = Field(..., ge=0, le=100)
    monetary_value: Decimal = Field(..., ge=0)
    description: str

    model_config = _RESULT_CONFIG


class ScalabilityBenefit(BaseModel):
    """Capacity headroom. A limit of ``-1`` means unlimited."""

    metric: str
    current_limit: int
    new_limit: int
    growth_accommodation_months: int = Field(..., ge=0)
    description: str

    model_config = _RESULT_CONFIG


class ComplianceBenefit(BaseModel):
    requirement: str
    current_compliance: bool = False
    new_compliance: bool = True
    risk_reduction_percent: int = Field(..., ge=0, le=100)
    description: str

    model_config = _RESULT_CONFIG


class SupportBenefit(BaseModel):
    support_type: str
    current_level: str
    new_level: str
    response_time: str
    description: str

    model_config = _RESULT_CONFIG


class BenefitAnalysis(BaseModel):
    """Quantified and qualitative benefits of a migration."""

    feature_upgrades: List[FeatureBenefit] = Field(default_factory=list)
    productivity_gains: List[ProductivityBenefit] = Field(default_factory=list)
    scalability_benefits: List[ScalabilityBenefit] = Field(default_factory=list)
    compliance_benefits: List[ComplianceBenefit] = Field(default_factory=list)
    support_improvements: List[SupportBenefit] = Field(default_factory=list)
    quantified_annual_value: Decimal = Field(..., ge=0)

    model_config = _RESULT_CONFIG

    @model_validator(mode="after")
    def validate_quantified_value(self) -> BenefitAnalysis:
        """Quantified value is the sum of feature and productivity values."""
        expected = sum(
            (b.estimated_value for b in self.feature_upgrades), Decimal("0")
        ) + sum(
            (p.monetary_value for p in self.productivity_gains), Decimal("0")
        )
        if expected != self.quantified_annual_value:
            raise ValueError(
                f"quantified_annual_value {self.quantified_annual_value} "
                f"does not match component sum {expected}"
            )
        return self


class MigrationRisk(BaseModel):
    risk: str
    probability: Likelihood
    impact: Level
    mitigation: str

    model_config = _RESULT_CONFIG


class BusinessRisk(BaseModel):
    """Business risk; scored as medium probability and medium impact."""

    risk: str
    impact: str
    mitigation: str

    model_config = _RESULT_CONFIG


class TechnicalRisk(BaseModel):
    """Technical risk; scored as medium probability and medium impact."""

    risk: str
    impact: str
    mitigation: str

    model_config = _RESULT_CONFIG


class MitigationStrategy(BaseModel):
    risk: str
    strategy: str
    effort: Likelihood
    timeline: str

    model_config = _RESULT_CONFIG


class RiskAssessment(BaseModel):
    """Weighted migration, business and technical risks."""

    overall_risk_score: int = Field(..., ge=0, le=100)
    migration_risks: List[MigrationRisk] = Field(default_factory=list)
    business_risks: List[BusinessRisk] = Field(default_factory=list)
    technical_risks: List[TechnicalRisk] = Field(default_factory=list)
    mitigation_strategies: List[MitigationStrategy] = Field(default_factory=list)

    model_config = _RESULT_CONFIG


class MigrationPhase(BaseModel):
    phase: str
    duration_days: int = Field(..., ge=0)
    tasks: List[str] = Field(default_factory=list)
    resources: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)

    model_config = _RESULT_CONFIG


class MigrationTimeline(BaseModel):
    """Phased migration plan."""

    phases: List[MigrationPhase]
    total_duration_days: int = Field(..., ge=0)
    critical_path: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    recommended_start: Optional[date] = None

    model_config = _RESULT_CONFIG


class MigrationRecommendation(BaseModel):
    recommendation_type: RecommendationType
    priority: Level
    reasoning: str
    action: str
    timeline: str

    model_config = _RESULT_CONFIG


class MigrationScenario(BaseModel):
    """Alternative way of carrying out the migration."""

    name: str
    description: str
    cost_analysis: DetailedCostAnalysis
    annual_benefit: Decimal = Field(..., ge=0)
    risk_score: int = Field(..., ge=0, le=100)
    timeline_days: int = Field(..., ge=0)
    recommendation_score: int = Field(..., ge=0, le=100)

    model_config = _RESULT_CONFIG


class DetailedMigrationCostBenefit(BaseModel):
    """Full cost, benefit and risk analysis for moving to one tier."""

    organization_id: str
    target_tier: PlanTier
    user_category: UserCategory
    cost_analysis: DetailedCostAnalysis
    benefit_analysis: BenefitAnalysis
    risk_assessment: RiskAssessment
    timeline: MigrationTimeline
    decision: RecommendationType
    net_benefit: Decimal
    recommendations: List[MigrationRecommendation]
    scenarios: List[MigrationScenario] = Field(default_factory=list)
    provenance_hash: str = ""

    model_config = _RESULT_CONFIG


__all__ = [
    # Enums
    "PlanTier",
    "UserCategory",
    "DiscountType",
    "MatchFactor",
    "MigrationComplexity",
    "Level",
    "Likelihood",
    "UpgradeReasonType",
    "RecommendationType",
    "UrgentActionType",
    "Severity",
    "SummaryAction",
    "PricingModel",
    "PriorityLevel",
    "SupportLevel",
    # Raw inputs
    "ProjectFacts",
    "DailyActivity",
    "EngagementFacts",
    "UsageFacts",
    "CustomPlanRecord",
    "AppSumoRecord",
    "OrganizationRecord",
    # Analytics
    "FeatureUtilization",
    "GrowthTrend",
    "PeakUsagePeriod",
    "UsageMetrics",
    "UsageInsights",
    # Eligibility
    "MigrationDiscount",
    "MigrationWindow",
    "UpgradeReason",
    "AppSumoStatus",
    "MigrationEligibility",
    # Legacy plans
    "BOOLEAN_FEATURES",
    "LegacyPlanFeatures",
    "CostComparison",
    "PlanEquivalency",
    "CustomPlanDetails",
    # Scoring
    "MatchReason",
    "FeatureComparison",
    "RecommendationTimeline",
    "PlanRecommendation",
    # Response
    "UrgentAction",
    "MigrationSummary",
    "SpecialOffer",
    "UserAnalytics",
    "PlanRecommendationResponse",
    # Cost-benefit
    "CostPerUserAnalysis",
    "DetailedCostAnalysis",
    "FeatureBenefit",
    "ProductivityBenefit",
    "ScalabilityBenefit",
    "ComplianceBenefit",
    "SupportBenefit",
    "BenefitAnalysis",
    "MigrationRisk",
    "BusinessRisk",
    "TechnicalRisk",
    "MitigationStrategy",
    "RiskAssessment",
    "MigrationPhase",
    "MigrationTimeline",
    "MigrationRecommendation",
    "MigrationScenario",
    "DetailedMigrationCostBenefit",
]
