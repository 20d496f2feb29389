# licensemap/core/summary.py

"""
Summary statistics over classified records, charge lines and the metrics tree.
"""

from typing import Iterable, Mapping, Optional
import logging

from licensemap.config import Settings, get_settings
from licensemap.core.aggregation import iter_nodes
from licensemap.core.normalizers import field_text, is_blank, normalize_amount
from licensemap.models import (
    BusinessUnitCost,
    ChargeRecord,
    ChargeSummary,
    ClassificationStats,
    ClassifiedRecord,
    CostSummary,
    ProcessingSummary,
    TreeNode,
    UNCLASSIFIED,
    UsageSummary,
)

logger = logging.getLogger(__name__)


def _percent(part: float, whole: float) -> float:
    return (part / whole * 100) if whole else 0.0


# ============================================
# Classification statistics
# ============================================

def classification_stats(
    records: Iterable[ClassifiedRecord],
    high_confidence_threshold: Optional[float] = None,
    settings: Optional[Settings] = None,
) -> ClassificationStats:
    """Counts and rates of classified, unclassified and high-confidence records."""
    settings = settings or get_settings()
    if high_confidence_threshold is None:
        high_confidence_threshold = settings.high_confidence_threshold

    stats = ClassificationStats()
    for record in records:
        stats.total += 1
        stats.by_group[record.group_path] = stats.by_group.get(record.group_path, 0) + 1

        if record.group_path == UNCLASSIFIED:
            stats.unclassified += 1
            if len(stats.sample_unclassified) < settings.unclassified_sample_size:
                stats.sample_unclassified.append(field_text(record.row, settings.application_field))
            continue

        stats.classified += 1
        if record.confidence >= high_confidence_threshold:
            stats.high_confidence += 1

    stats.classification_rate = _percent(stats.classified, stats.total)
    stats.high_confidence_rate = _percent(stats.high_confidence, stats.total)
    return stats


def log_classification_stats(stats: ClassificationStats) -> None:
    logger.info(
        f"Classification: {stats.total} items, "
        f"{stats.classified} classified ({stats.classification_rate:.2f}%), "
        f"{stats.unclassified} unclassified ({_percent(stats.unclassified, stats.total):.2f}%), "
        f"{stats.high_confidence} high confidence ({stats.high_confidence_rate:.2f}%)"
    )
    logger.debug(f"Group distribution: {stats.by_group}")
    if stats.sample_unclassified:
        logger.info(f"Sample unclassified applications: {stats.sample_unclassified}")


# ============================================
# Processing summary
# ============================================

def usage_summary(records: list[ClassifiedRecord], settings: Optional[Settings] = None) -> UsageSummary:
    """Inventory-wide totals, independent of the tree."""
    settings = settings or get_settings()

    users = set()
    active_users = set()
    groups = set()
    total_cost = 0.0
    total_ubc_cost = 0.0

    for record in records:
        user = field_text(record.row, settings.user_field)
        users.add(user)
        if not is_blank(record.get(settings.last_used_field)):
            active_users.add(user)
        groups.add(record.group_path or UNCLASSIFIED)
        total_cost += normalize_amount(record.get(settings.cost_field))
        total_ubc_cost += record.ubc_cost or 0.0

    return UsageSummary(
        unique_users=len(users),
        active_users=len(active_users),
        total_installations=len(records),
        service_groups=len(groups),
        total_cost=total_cost,
        total_ubc_cost=total_ubc_cost,
        classifications=classification_stats(records, settings=settings),
    )


def charge_summary(charge_records: Optional[list[ChargeRecord]]) -> ChargeSummary:
    if not charge_records:
        return ChargeSummary()

    return ChargeSummary(
        unique_users=len({r.user_email or "" for r in charge_records}),
        service_groups=len({r.service_group for r in charge_records}),
        total_quantity=sum(r.quantity for r in charge_records),
        total_cost=sum(r.cost for r in charge_records),
    )


def summarize(
    records: list[ClassifiedRecord],
    charge_records: Optional[list[ChargeRecord]] = None,
    settings: Optional[Settings] = None,
) -> ProcessingSummary:
    return ProcessingSummary(
        usage=usage_summary(records, settings),
        charges=charge_summary(charge_records),
    )


# ============================================
# Cost summary
# ============================================

def cost_summary(tree: Mapping[str, TreeNode], settings: Optional[Settings] = None) -> CostSummary:
    """
    Cost KPIs of the whole tree.

    Totals come from the business-unit rollups. Users are the distinct
    non-blank emails over all items; applications are counted per group.
    """
    settings = settings or get_settings()
    summary = CostSummary()
    users = set()

    for name, node in tree.items():
        summary.total_cost += node.metrics.total_cost
        summary.total_ubc_cost += node.metrics.total_ubc_cost
        summary.breakdown.append(BusinessUnitCost(
            name=name,
            dsc_cost=node.metrics.total_cost,
            ubc_cost=node.metrics.total_ubc_cost,
        ))

    for _, node in iter_nodes(tree):
        if not node.items:
            continue
        apps = set()
        for item in node.items:
            email = field_text(item.row, settings.user_field).strip()
            if email:
                users.add(email)
            app_name = field_text(item.row, settings.application_field).strip()
            if app_name:
                apps.add(app_name)
        summary.total_applications += len(apps)

    summary.total_users = len(users)
    if summary.total_users:
        summary.average_cost_per_user = summary.total_cost / summary.total_users
        summary.average_ubc_cost_per_user = summary.total_ubc_cost / summary.total_users
    if summary.total_applications:
        summary.average_cost_per_application = summary.total_cost / summary.total_applications

    for unit in summary.breakdown:
        unit.percentage = _percent(unit.dsc_cost, summary.total_cost)
        unit.ubc_percentage = _percent(unit.ubc_cost, summary.total_ubc_cost)
    summary.breakdown.sort(key=lambda unit: unit.dsc_cost, reverse=True)

    return summary
