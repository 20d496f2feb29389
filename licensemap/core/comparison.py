# licensemap/core/comparison.py

"""
Side-by-side comparison of groups: ranking, shares, radar scaling and
cost-efficiency insights. Empty input gives empty output.
"""

from typing import Iterable, Mapping, Sequence

from licensemap.core.aggregation import iter_nodes
from licensemap.models import (
    ApplicationAggregate,
    ComparisonMetric,
    ComparisonTotals,
    EfficiencyInsights,
    GroupComparisonMetrics,
    RadarPoint,
    SortOrder,
    TreeNode,
    join_path,
)

_SORT_KEYS = {
    "cost": lambda m: m.total_cost,
    "users": lambda m: m.user_count,
    "apps": lambda m: m.application_count,
    "efficiency": lambda m: m.avg_cost_per_user,
}


def group_comparison_metrics(name: str, applications: Sequence[ApplicationAggregate]) -> GroupComparisonMetrics:
    """
    Figures of a group assembled from application aggregates.

    Users are summed per application, so a person using two of the group's
    applications counts twice.
    """
    user_count = sum(app.users for app in applications)
    total_cost = sum(app.total_cost for app in applications)
    return GroupComparisonMetrics(
        name=name,
        total_cost=total_cost,
        user_count=user_count,
        application_count=len(applications),
        avg_cost_per_user=(total_cost / user_count) if user_count else 0.0,
        applications=[app.name for app in applications],
    )


def comparison_metrics_from_tree(tree: Mapping[str, TreeNode], level: int = 1) -> list[GroupComparisonMetrics]:
    """One row per tree node at `level` (1 = business units)."""
    rows = []
    for segments, node in iter_nodes(tree):
        if len(segments) != level:
            continue
        users = node.metrics.unique_users
        rows.append(GroupComparisonMetrics(
            name=join_path(segments),
            total_cost=node.metrics.total_cost,
            user_count=users,
            application_count=len(node.applications),
            avg_cost_per_user=(node.metrics.total_cost / users) if users else 0.0,
            applications=[app.name for app in node.applications],
        ))
    return rows


def rank_groups(
    metrics: Iterable[GroupComparisonMetrics],
    by: ComparisonMetric = "cost",
    order: SortOrder = "desc",
) -> list[GroupComparisonMetrics]:
    """Sort groups by one figure; unknown figures sort by cost."""
    key = _SORT_KEYS.get(by, _SORT_KEYS["cost"])
    return sorted(metrics, key=key, reverse=(order == "desc"))


def comparison_totals(metrics: Iterable[GroupComparisonMetrics]) -> ComparisonTotals:
    totals = ComparisonTotals()
    for m in metrics:
        totals.total_cost += m.total_cost
        totals.total_users += m.user_count
        totals.total_apps += m.application_count
    return totals


def share_of_total(metric: GroupComparisonMetrics, totals: ComparisonTotals, by: ComparisonMetric = "cost") -> float:
    """Percentage of the total a group holds. Efficiency has no share."""
    if by == "users":
        part, whole = metric.user_count, totals.total_users
    elif by == "apps":
        part, whole = metric.application_count, totals.total_apps
    elif by == "efficiency":
        return 0.0
    else:
        part, whole = metric.total_cost, totals.total_cost
    return (part / whole * 100) if whole else 0.0


def normalize_for_radar(metrics: Sequence[GroupComparisonMetrics], limit: int = 8) -> list[RadarPoint]:
    """
    Scale the first `limit` groups to 0-100 against the largest of all groups.

    Efficiency is inverted: the group with the highest cost per user scores 0.
    """
    if not metrics:
        return []

    max_cost = max(m.total_cost for m in metrics)
    max_users = max(m.user_count for m in metrics)
    max_apps = max(m.application_count for m in metrics)
    max_cost_per_user = max(m.avg_cost_per_user for m in metrics)

    return [
        RadarPoint(
            name=m.name,
            cost=(m.total_cost / max_cost * 100) if max_cost > 0 else 0.0,
            users=(m.user_count / max_users * 100) if max_users > 0 else 0.0,
            apps=(m.application_count / max_apps * 100) if max_apps > 0 else 0.0,
            efficiency=(100 - m.avg_cost_per_user / max_cost_per_user * 100) if max_cost_per_user > 0 else 0.0,
        )
        for m in metrics[:limit]
    ]


def _efficiency_row(app: ApplicationAggregate) -> dict:
    return {
        "name": app.name,
        "users": app.users,
        "total_cost": app.total_cost,
        "cost_per_user": app.total_cost / app.users,
        "business_unit": app.business_unit,
    }


def efficiency_insights(
    applications: Iterable[ApplicationAggregate],
    min_users: int = 5,
    min_cost: float = 1000,
    limit: int = 3,
) -> EfficiencyInsights:
    """
    Cheapest and dearest applications per user.

    Only applications with more than `min_users` users are considered; the
    least efficient list also requires a total cost above `min_cost`.
    Duplicate names keep their first occurrence.
    """
    seen = set()
    candidates = []
    for app in applications:
        if app.name in seen:
            continue
        seen.add(app.name)
        if app.users > max(min_users, 0):
            candidates.append(app)

    def cost_per_user(app: ApplicationAggregate) -> float:
        return app.total_cost / app.users

    most = sorted((a for a in candidates if a.total_cost > 0), key=cost_per_user)
    least = sorted((a for a in candidates if a.total_cost > min_cost), key=cost_per_user, reverse=True)

    return EfficiencyInsights(
        most_efficient=[_efficiency_row(a) for a in most[:limit]],
        least_efficient=[_efficiency_row(a) for a in least[:limit]],
    )
