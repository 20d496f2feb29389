# licensemap/models/records.py

from typing import Any, Optional, Literal
from pydantic import BaseModel, Field, model_validator

from licensemap.models.taxonomy import UNCLASSIFIED


# ============================================
# Classification
# ============================================

ClassificationMethod = Literal["exact", "fuzzy", "keyword", "vendor", "unclassified"]


class Classification(BaseModel):
    """Outcome of classifying one application name."""

    group_path: str
    confidence: float = Field(ge=0.0, le=1.0)
    method: ClassificationMethod

    class Config:
        frozen = True

    @property
    def is_classified(self) -> bool:
        return self.group_path != UNCLASSIFIED


UNCLASSIFIED_RESULT = Classification(group_path=UNCLASSIFIED, confidence=0.0, method="unclassified")


class Suggestion(BaseModel):
    """A candidate group for reviewing an unclassified application."""

    group_path: str
    confidence: float


# ============================================
# Classified inventory record
# ============================================

class ClassifiedRecord(BaseModel):
    """An inventory row annotated with its taxonomy path and cost match."""

    row: dict[str, Any] = Field(default_factory=dict)
    group_path: str = UNCLASSIFIED
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    method: ClassificationMethod = "unclassified"

    # Cost reconciliation annotations, unset when no charge matched
    ubc_cost: Optional[float] = None
    ubc_instances: Optional[int] = None
    ubc_user_count: Optional[int] = None
    ubc_match_confidence: Optional[float] = None
    ubc_matched_with: Optional[str] = None

    @model_validator(mode="after")
    def _check_confidence(self) -> "ClassifiedRecord":
        if (self.group_path == UNCLASSIFIED) != (self.confidence == 0):
            raise ValueError(
                f"confidence {self.confidence} is inconsistent with group path {self.group_path!r}"
            )
        return self

    @classmethod
    def from_classification(cls, row: dict, result: Classification) -> "ClassifiedRecord":
        return cls(
            row=dict(row),
            group_path=result.group_path,
            confidence=result.confidence,
            method=result.method,
        )

    def get(self, field: str, default: Any = None) -> Any:
        return self.row.get(field, default)

    @property
    def has_cost_match(self) -> bool:
        return self.ubc_cost is not None

    def to_dict(self) -> dict:
        """Flatten back to a plain row, as consumers of the raw inventory expect."""
        flat = dict(self.row)
        flat["groupPath"] = self.group_path
        flat["classificationConfidence"] = self.confidence
        if self.has_cost_match:
            flat["ubcCost"] = self.ubc_cost
            flat["ubcInstances"] = self.ubc_instances
            flat["ubcUserCount"] = self.ubc_user_count
            flat["ubcMatchConfidence"] = self.ubc_match_confidence
        return flat


# ============================================
# Per-user charge (UBC) record
# ============================================

class CostRecord(BaseModel):
    """A per-user application charge from the billing extract."""

    application_name: str
    charge: float = 0.0
    user_email: Optional[str] = None
    service_type: Optional[str] = None
    revenue_stream: Optional[str] = None
    business_code: Optional[str] = None


# ============================================
# Per-seat service charge (DSC) record
# ============================================

class ChargeRecord(BaseModel):
    """A per-seat service charge line."""

    service_group: str = "Unknown"
    service_subgroup: Optional[str] = None
    service: Optional[str] = None
    user_email: Optional[str] = None
    quantity: float = 0.0
    unit_price: float = 0.0
    reporting_quarter: Optional[str] = None

    @property
    def cost(self) -> float:
        return self.quantity * self.unit_price
