# licensemap/models/summary.py

from typing import Literal
from pydantic import BaseModel, Field


# ============================================
# Classification statistics
# ============================================

class ClassificationStats(BaseModel):
    """How much of an inventory the classifier could place."""

    total: int = 0
    classified: int = 0
    unclassified: int = 0
    high_confidence: int = 0
    classification_rate: float = 0.0
    high_confidence_rate: float = 0.0
    by_group: dict[str, int] = Field(default_factory=dict)
    sample_unclassified: list[str] = Field(default_factory=list)


# ============================================
# Processing summary
# ============================================

class UsageSummary(BaseModel):
    """Top-level totals of the license-usage inventory."""

    unique_users: int = 0
    active_users: int = 0
    total_installations: int = 0
    service_groups: int = 0
    total_cost: float = 0.0
    total_ubc_cost: float = 0.0
    classifications: ClassificationStats = Field(default_factory=ClassificationStats)


class ChargeSummary(BaseModel):
    """Top-level totals of the per-seat charge data."""

    unique_users: int = 0
    service_groups: int = 0
    total_quantity: float = 0.0
    total_cost: float = 0.0


class ProcessingSummary(BaseModel):
    usage: UsageSummary = Field(default_factory=UsageSummary)
    charges: ChargeSummary = Field(default_factory=ChargeSummary)


# ============================================
# Cost summary
# ============================================

class BusinessUnitCost(BaseModel):
    name: str
    dsc_cost: float = 0.0
    ubc_cost: float = 0.0
    percentage: float = 0.0
    ubc_percentage: float = 0.0


class CostSummary(BaseModel):
    """Cost KPIs across the whole tree."""

    total_cost: float = 0.0
    total_ubc_cost: float = 0.0
    total_applications: int = 0
    total_users: int = 0
    average_cost_per_user: float = 0.0
    average_ubc_cost_per_user: float = 0.0
    average_cost_per_application: float = 0.0
    breakdown: list[BusinessUnitCost] = Field(default_factory=list)


# ============================================
# Group comparison
# ============================================

ComparisonMetric = Literal["cost", "users", "apps", "efficiency"]
SortOrder = Literal["asc", "desc"]


class GroupComparisonMetrics(BaseModel):
    """Figures of one group as compared side by side."""

    name: str
    total_cost: float = 0.0
    user_count: int = 0
    application_count: int = 0
    avg_cost_per_user: float = 0.0
    applications: list[str] = Field(default_factory=list)


class ComparisonTotals(BaseModel):
    total_cost: float = 0.0
    total_users: int = 0
    total_apps: int = 0


class RadarPoint(BaseModel):
    """Group figures scaled to 0-100 against the largest group."""

    name: str
    cost: float = 0.0
    users: float = 0.0
    apps: float = 0.0
    efficiency: float = 0.0


class EfficiencyInsights(BaseModel):
    most_efficient: list[dict] = Field(default_factory=list)
    least_efficient: list[dict] = Field(default_factory=list)
