# licensemap/models/costs.py

from typing import Optional
from pydantic import BaseModel, Field

from licensemap.models.metrics import GroupMetrics
from licensemap.models.records import ChargeRecord


# ============================================
# Per-user charge (UBC) reconciliation
# ============================================

class CostDetail(BaseModel):
    """One charge line behind a cost index entry."""

    email: Optional[str] = None
    charge: float = 0.0
    service_type: Optional[str] = None
    revenue_stream: Optional[str] = None
    business_code: Optional[str] = None


class CostIndexEntry(BaseModel):
    """Charges of one application, keyed by its normalized name."""

    key: str
    application_name: str
    total_cost: float = 0.0
    instances: int = 0
    user_count: int = 0
    details: list[CostDetail] = Field(default_factory=list)


class CostMatch(BaseModel):
    """A cost index entry matched to an inventory application name."""

    entry: CostIndexEntry
    confidence: float = Field(ge=0.0, le=1.0)
    exact: bool

    class Config:
        frozen = True


class CostReconciliationReport(BaseModel):
    """Outcome of annotating a batch of records with charges."""

    total_items: int = 0
    matched_items: int = 0
    exact_matches: int = 0
    fuzzy_matches: int = 0
    matched_cost: float = 0.0
    unmatched_applications: list[str] = Field(default_factory=list)

    @property
    def match_rate(self) -> float:
        return (self.matched_items / self.total_items * 100) if self.total_items else 0.0


# ============================================
# Per-seat service charge (DSC) structure
# ============================================

class ChargeMetrics(BaseModel):
    """Charged seats and cost for a service group."""

    total_users: int = 0
    total_quantity: float = 0.0
    total_cost: float = 0.0


class ChargeGroup(BaseModel):
    """Charge lines of one service group, split by subgroup and service."""

    metrics: ChargeMetrics = Field(default_factory=ChargeMetrics)
    subgroups: dict[str, list[ChargeRecord]] = Field(default_factory=dict)
    services: dict[str, list[ChargeRecord]] = Field(default_factory=dict)


class UsageComparison(BaseModel):
    """Inventory usage measured against charged seats."""

    user_difference: int = 0
    utilization_rate: float = 0.0
    installation_ratio: float = 0.0


class CombinedGroup(BaseModel):
    """Usage and charges of one group side by side."""

    usage: GroupMetrics = Field(default_factory=GroupMetrics)
    charges: ChargeGroup = Field(default_factory=ChargeGroup)
    comparison: UsageComparison = Field(default_factory=UsageComparison)
