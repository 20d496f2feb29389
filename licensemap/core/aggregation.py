# licensemap/core/aggregation.py

"""
Roll classified records up into the nested metrics tree.

1. accumulate:     partition records by group path into GroupAccumulators
2. merge_partials: combine accumulations made by different workers
3. build_tree:     write each group's metrics at its leaf node and add them to
                   every ancestor up to the business unit

Rollups are plain sums. A user counted in two groups is counted twice at the
common ancestor.
"""

from typing import Any, Iterable, Iterator, Mapping, Optional
import logging

from licensemap.config import Settings, get_settings
from licensemap.core.normalizers import field_text, is_blank, normalize_amount
from licensemap.models import (
    ApplicationAggregate,
    ClassifiedRecord,
    GroupMetrics,
    GroupPath,
    TreeNode,
    UNCLASSIFIED,
    split_path,
)

logger = logging.getLogger(__name__)


# ============================================
# Accumulators
# ============================================

class ApplicationAccumulator:
    """Running totals of one application within one group."""

    def __init__(self, name: str):
        self.name = name
        self.users: set[str] = set()
        self.active_users: set[str] = set()
        self.accesses = 0
        self.total_cost = 0.0
        self.items: list[ClassifiedRecord] = []

    def add(self, record: ClassifiedRecord, user: str, active: bool, cost: float) -> None:
        self.users.add(user)
        if active:
            self.active_users.add(user)
        self.accesses += 1
        self.total_cost += cost
        self.items.append(record)

    def merge(self, other: "ApplicationAccumulator") -> "ApplicationAccumulator":
        merged = ApplicationAccumulator(self.name)
        merged.users = self.users | other.users
        merged.active_users = self.active_users | other.active_users
        merged.accesses = self.accesses + other.accesses
        merged.total_cost = self.total_cost + other.total_cost
        merged.items = self.items + other.items
        return merged

    def to_aggregate(self, business_unit: str) -> ApplicationAggregate:
        return ApplicationAggregate(
            name=self.name,
            users=len(self.users),
            active_users=len(self.active_users),
            accesses=self.accesses,
            business_unit=business_unit,
            total_cost=self.total_cost,
            ubc_cost=sum(item.ubc_cost or 0.0 for item in self.items),
            items=list(self.items),
        )


class GroupAccumulator:
    """
    Running totals of one group path.

    Keeps the user sets rather than counts so that partial accumulations of
    the same group merge exactly. merge is associative and commutative.
    """

    def __init__(self, path: str):
        self.path = path
        self.users: set[str] = set()
        self.active_users: set[str] = set()
        self.installations = 0
        self.total_cost = 0.0
        self.total_ubc_cost = 0.0
        self.items: list[ClassifiedRecord] = []
        self.applications: dict[str, ApplicationAccumulator] = {}

    def add(self, record: ClassifiedRecord, settings: Settings) -> None:
        user = field_text(record.row, settings.user_field)
        active = not is_blank(record.get(settings.last_used_field))
        cost = normalize_amount(record.get(settings.cost_field))

        self.users.add(user)
        if active:
            self.active_users.add(user)
        self.installations += 1
        self.total_cost += cost
        self.total_ubc_cost += record.ubc_cost or 0.0
        self.items.append(record)

        app_name = field_text(record.row, settings.application_field).strip() or settings.unknown_application
        if app_name not in self.applications:
            self.applications[app_name] = ApplicationAccumulator(app_name)
        self.applications[app_name].add(record, user, active, cost)

    def merge(self, other: "GroupAccumulator") -> "GroupAccumulator":
        merged = GroupAccumulator(self.path)
        merged.users = self.users | other.users
        merged.active_users = self.active_users | other.active_users
        merged.installations = self.installations + other.installations
        merged.total_cost = self.total_cost + other.total_cost
        merged.total_ubc_cost = self.total_ubc_cost + other.total_ubc_cost
        merged.items = self.items + other.items
        merged.applications = dict(self.applications)
        for name, app in other.applications.items():
            merged.applications[name] = merged.applications[name].merge(app) if name in merged.applications else app
        return merged

    def metrics(self) -> GroupMetrics:
        return GroupMetrics(
            unique_users=len(self.users),
            active_users=len(self.active_users),
            total_installations=self.installations,
            total_cost=self.total_cost,
            total_ubc_cost=self.total_ubc_cost,
        )

    def application_aggregates(self, business_unit: str) -> list[ApplicationAggregate]:
        return [
            self.applications[name].to_aggregate(business_unit)
            for name in sorted(self.applications)
        ]


def accumulate(
    records: Iterable[ClassifiedRecord],
    settings: Optional[Settings] = None,
) -> dict[str, GroupAccumulator]:
    """Partition records by group path and total each group."""
    settings = settings or get_settings()
    groups: dict[str, GroupAccumulator] = {}
    for record in records:
        path = record.group_path or UNCLASSIFIED
        if path not in groups:
            groups[path] = GroupAccumulator(path)
        groups[path].add(record, settings)
    return groups


def merge_partials(*partials: Mapping[str, GroupAccumulator]) -> dict[str, GroupAccumulator]:
    """Combine accumulations of disjoint record batches."""
    merged: dict[str, GroupAccumulator] = {}
    for partial in partials:
        for path, group in partial.items():
            merged[path] = merged[path].merge(group) if path in merged else group
    return merged


# ============================================
# Tree construction
# ============================================

class TreeBuilder:
    """
    Node arena keyed by segment prefix.

    node_at creates a node and any missing ancestors without recursion;
    finish returns the business-unit roots.
    """

    def __init__(self):
        self.roots: dict[str, TreeNode] = {}
        self._nodes: dict[GroupPath, TreeNode] = {}
        self._applications: dict[GroupPath, dict[str, ApplicationAggregate]] = {}

    def node_at(self, segments: GroupPath) -> TreeNode:
        node = self._nodes.get(segments)
        if node is not None:
            return node

        for depth in range(1, len(segments) + 1):
            prefix = segments[:depth]
            if prefix in self._nodes:
                continue
            node = TreeNode()
            self._nodes[prefix] = node
            if depth == 1:
                self.roots[prefix[0]] = node
            else:
                self._nodes[prefix[:-1]].children[prefix[-1]] = node

        return self._nodes[segments]

    def add_group(
        self,
        segments: GroupPath,
        metrics: GroupMetrics,
        items: list[ClassifiedRecord],
        applications: list[ApplicationAggregate],
    ) -> None:
        self.node_at(segments).items.extend(items)

        # Leaf first, then every ancestor up to the business unit
        for depth in range(len(segments), 0, -1):
            prefix = segments[:depth]
            self._nodes[prefix].metrics.add(metrics)
            merged = self._applications.setdefault(prefix, {})
            for app in applications:
                merged[app.name] = merged[app.name].merge(app) if app.name in merged else app

    def finish(self) -> dict[str, TreeNode]:
        for prefix, merged in self._applications.items():
            self._nodes[prefix].applications = [merged[name] for name in sorted(merged)]
        return self.roots


def build_tree(
    groups: Mapping[str, Any],
    settings: Optional[Settings] = None,
) -> dict[str, TreeNode]:
    """
    Build the nested tree from groups keyed by path.

    Values are GroupAccumulators, or bare metrics (GroupMetrics, dict or None)
    when only the numbers are known; missing metrics count as zero.

    Metrics, children and applications do not depend on input order. Items
    keep their input order, on nodes and on application aggregates.
    """
    builder = TreeBuilder()

    for path in sorted(groups):
        segments = split_path(path) or (UNCLASSIFIED,)
        group = groups[path]

        if isinstance(group, GroupAccumulator):
            builder.add_group(
                segments,
                group.metrics(),
                group.items,
                group.application_aggregates(business_unit=segments[0]),
            )
        else:
            builder.add_group(segments, GroupMetrics.coerce(group), [], [])

    tree = builder.finish()
    logger.debug(f"Built tree with {len(tree)} business units from {len(groups)} groups")
    return tree


def aggregate(
    records: Iterable[ClassifiedRecord],
    settings: Optional[Settings] = None,
) -> dict[str, TreeNode]:
    """
    Group classified records and build the nested metrics tree.

    The tree is the same for any ordering of `records`, up to item order.
    """
    return build_tree(accumulate(records, settings), settings)


# ============================================
# Tree helpers
# ============================================

def iter_nodes(tree: Mapping[str, TreeNode]) -> Iterator[tuple[GroupPath, TreeNode]]:
    """Pre-order walk yielding (segments, node), children in name order."""
    stack = [((name,), tree[name]) for name in sorted(tree, reverse=True)]
    while stack:
        segments, node = stack.pop()
        yield segments, node
        for name in sorted(node.children, reverse=True):
            stack.append((segments + (name,), node.children[name]))


def refresh_ubc_costs(tree: Mapping[str, TreeNode]) -> None:
    """Recompute UBC totals bottom-up from the items' cost annotations."""
    subtotals: dict[GroupPath, float] = {}
    for segments, node in reversed(list(iter_nodes(tree))):
        total = sum(item.ubc_cost or 0.0 for item in node.items)
        total += sum(subtotals[segments + (name,)] for name in node.children)
        subtotals[segments] = total
        node.metrics.total_ubc_cost = total
        for app in node.applications:
            app.ubc_cost = sum(item.ubc_cost or 0.0 for item in app.items)
