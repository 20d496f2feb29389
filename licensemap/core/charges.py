# licensemap/core/charges.py

"""
Per-seat service charges (DSC) grouped by service group, and the comparison
of inventory usage against charged seats.
"""

from typing import Any, Iterable, Mapping, Optional
import logging

from licensemap.config import Settings, get_settings
from licensemap.core.aggregation import GroupAccumulator
from licensemap.core.normalizers import field_text, normalize_amount
from licensemap.models import (
    ChargeGroup,
    ChargeMetrics,
    ChargeRecord,
    CombinedGroup,
    GroupMetrics,
    UsageComparison,
)

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


def _optional_text(row: dict, field: str) -> Optional[str]:
    value = field_text(row, field).strip()
    return value or None


def parse_charge_records(rows: Iterable[dict], settings: Optional[Settings] = None) -> list[ChargeRecord]:
    """Convert raw charge rows to ChargeRecords. Unparseable numbers become 0."""
    settings = settings or get_settings()
    return [
        ChargeRecord(
            service_group=field_text(row, settings.charge_group_field).strip() or UNKNOWN,
            service_subgroup=_optional_text(row, settings.charge_subgroup_field),
            service=_optional_text(row, settings.charge_service_field),
            user_email=_optional_text(row, settings.charge_user_field),
            quantity=normalize_amount(row.get(settings.charge_quantity_field)),
            unit_price=normalize_amount(row.get(settings.charge_unit_price_field)),
            reporting_quarter=_optional_text(row, settings.charge_quarter_field),
        )
        for row in rows
    ]


def filter_quarter(records: Iterable[ChargeRecord], quarter: Optional[str]) -> list[ChargeRecord]:
    """Charge lines of one reporting quarter; every line when quarter is None."""
    if quarter is None:
        return list(records)
    quarter = quarter.strip()
    return [r for r in records if (r.reporting_quarter or "") == quarter]


def charge_metrics(records: list[ChargeRecord]) -> ChargeMetrics:
    return ChargeMetrics(
        total_users=len({r.user_email or "" for r in records}),
        total_quantity=sum(r.quantity for r in records),
        total_cost=sum(r.cost for r in records),
    )


def build_charge_structure(records: Iterable[ChargeRecord]) -> dict[str, ChargeGroup]:
    """Group charge lines by service group, then by subgroup and by service."""
    by_group: dict[str, list[ChargeRecord]] = {}
    for record in records:
        by_group.setdefault(record.service_group or UNKNOWN, []).append(record)

    structure = {}
    for name, group_records in by_group.items():
        subgroups: dict[str, list[ChargeRecord]] = {}
        services: dict[str, list[ChargeRecord]] = {}
        for record in group_records:
            subgroups.setdefault(record.service_subgroup or UNKNOWN, []).append(record)
            services.setdefault(record.service or UNKNOWN, []).append(record)

        structure[name] = ChargeGroup(
            metrics=charge_metrics(group_records),
            subgroups=subgroups,
            services=services,
        )

    logger.debug(f"Built charge structure with {len(structure)} service groups")
    return structure


def compare_usage(usage: Optional[GroupMetrics], charges: Optional[ChargeMetrics]) -> UsageComparison:
    """
    Measure inventory usage against charged seats.

    - user_difference: inventory users minus charged users
    - utilization_rate: active users per charged user, in percent
    - installation_ratio: installations per charged unit
    Zero denominators give 0.
    """
    usage = usage or GroupMetrics()
    charges = charges or ChargeMetrics()

    return UsageComparison(
        user_difference=usage.unique_users - charges.total_users,
        utilization_rate=(usage.active_users / charges.total_users * 100) if charges.total_users else 0.0,
        installation_ratio=(usage.total_installations / charges.total_quantity) if charges.total_quantity else 0.0,
    )


def _usage_metrics(value: Any) -> GroupMetrics:
    if isinstance(value, GroupAccumulator):
        return value.metrics()
    return GroupMetrics.coerce(value)


def combine_structures(
    usage_groups: Mapping[str, Any],
    charge_groups: Mapping[str, ChargeGroup],
) -> dict[str, CombinedGroup]:
    """
    Put usage and charges of each group side by side.

    Keyed by the union of group names; the missing side is zeroed.
    """
    combined = {}

    for name, charges in charge_groups.items():
        usage = _usage_metrics(usage_groups.get(name))
        combined[name] = CombinedGroup(
            usage=usage,
            charges=charges,
            comparison=compare_usage(usage, charges.metrics),
        )

    for name, group in usage_groups.items():
        if name in combined:
            continue
        usage = _usage_metrics(group)
        combined[name] = CombinedGroup(
            usage=usage,
            comparison=compare_usage(usage, None),
        )

    return combined
