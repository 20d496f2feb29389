# licensemap/models/metrics.py

from typing import Any, Optional
from pydantic import BaseModel, Field

from licensemap.models.records import ClassifiedRecord


# ============================================
# Group metrics
# ============================================

class GroupMetrics(BaseModel):
    """Usage and cost totals for one taxonomy group."""

    unique_users: int = 0
    active_users: int = 0
    total_installations: int = 0
    total_cost: float = 0.0
    total_ubc_cost: float = 0.0

    def add(self, other: "GroupMetrics") -> "GroupMetrics":
        """Add another group's metrics in place (plain summation, no de-duplication)."""
        self.unique_users += other.unique_users
        self.active_users += other.active_users
        self.total_installations += other.total_installations
        self.total_cost += other.total_cost
        self.total_ubc_cost += other.total_ubc_cost
        return self

    def __add__(self, other: "GroupMetrics") -> "GroupMetrics":
        return self.model_copy().add(other)

    @classmethod
    def coerce(cls, value: Any) -> "GroupMetrics":
        """Accept GroupMetrics, a partial dict or None (zeroed defaults)."""
        if value is None:
            return cls()
        if isinstance(value, GroupMetrics):
            return value.model_copy()
        return cls.model_validate({k: v for k, v in dict(value).items() if v is not None})


# ============================================
# Application aggregate
# ============================================

class ApplicationAggregate(BaseModel):
    """Per-application usage and cost, independent of the taxonomy path."""

    name: str
    users: int = 0
    active_users: int = 0
    accesses: int = 0
    business_unit: str = ""
    total_cost: float = 0.0
    ubc_cost: float = 0.0
    items: list[ClassifiedRecord] = Field(default_factory=list)

    def merge(self, other: "ApplicationAggregate") -> "ApplicationAggregate":
        """Combine two aggregates of the same application by summation."""
        return ApplicationAggregate(
            name=self.name,
            users=self.users + other.users,
            active_users=self.active_users + other.active_users,
            accesses=self.accesses + other.accesses,
            business_unit=self.business_unit or other.business_unit,
            total_cost=self.total_cost + other.total_cost,
            ubc_cost=self.ubc_cost + other.ubc_cost,
            items=self.items + other.items,
        )


# ============================================
# Nested tree
# ============================================

class TreeNode(BaseModel):
    """A node of the nested metrics tree."""

    metrics: GroupMetrics = Field(default_factory=GroupMetrics)
    items: list[ClassifiedRecord] = Field(default_factory=list)
    applications: list[ApplicationAggregate] = Field(default_factory=list)
    children: dict[str, "TreeNode"] = Field(default_factory=dict)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def application(self, name: str) -> Optional[ApplicationAggregate]:
        for app in self.applications:
            if app.name == name:
                return app
        return None

    def child(self, *segments: str) -> Optional["TreeNode"]:
        node: Optional[TreeNode] = self
        for segment in segments:
            node = node.children.get(segment) if node else None
        return node


TreeNode.model_rebuild()
