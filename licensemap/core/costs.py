# licensemap/core/costs.py

"""
Per-user charge (UBC) reconciliation.

Pairs classified inventory items with billing lines by application name:
1. Exact:  same normalized name                          -> 1.0
2. Fuzzy:  one name contains the other                   -> 0.5 + 0.5 * length ratio
           otherwise overlapping words / max word count
   Accepted only above the cost match threshold (0.3).

An item without a match keeps no cost annotations; that is not an error.
"""

from typing import Iterable, Mapping, Optional
import logging

from licensemap.config import Settings, get_settings
from licensemap.core.aggregation import GroupAccumulator, iter_nodes, refresh_ubc_costs
from licensemap.core.normalizers import field_text, normalize_amount, normalize_name
from licensemap.models import (
    ClassifiedRecord,
    CostDetail,
    CostIndexEntry,
    CostMatch,
    CostReconciliationReport,
    CostRecord,
    TreeNode,
)

logger = logging.getLogger(__name__)


def _optional_text(row: dict, field: str) -> Optional[str]:
    value = field_text(row, field).strip()
    return value or None


def parse_cost_records(rows: Iterable[dict], settings: Optional[Settings] = None) -> list[CostRecord]:
    """Convert raw billing rows to CostRecords. Unparseable charges become 0."""
    settings = settings or get_settings()
    return [
        CostRecord(
            application_name=field_text(row, settings.cost_application_field).strip(),
            charge=normalize_amount(row.get(settings.cost_charge_field)),
            user_email=_optional_text(row, settings.cost_user_field),
            service_type=_optional_text(row, settings.cost_service_type_field),
            revenue_stream=_optional_text(row, settings.cost_revenue_stream_field),
            business_code=_optional_text(row, settings.cost_business_code_field),
        )
        for row in rows
    ]


def build_cost_index(cost_records: Iterable[CostRecord]) -> dict[str, CostIndexEntry]:
    """
    Total the charges of each application, keyed by normalized name.

    Records without an application name are skipped. The first spelling seen
    becomes the entry's display name.
    """
    index: dict[str, CostIndexEntry] = {}
    users: dict[str, set[str]] = {}
    skipped = 0

    for record in cost_records:
        key = normalize_name(record.application_name)
        if not key:
            skipped += 1
            continue

        if key not in index:
            index[key] = CostIndexEntry(key=key, application_name=record.application_name)
            users[key] = set()

        entry = index[key]
        entry.total_cost += record.charge
        entry.instances += 1
        if record.user_email:
            users[key].add(record.user_email)
        entry.details.append(CostDetail(
            email=record.user_email,
            charge=record.charge,
            service_type=record.service_type,
            revenue_stream=record.revenue_stream,
            business_code=record.business_code,
        ))

    for key, entry in index.items():
        entry.user_count = len(users[key])

    if skipped:
        logger.debug(f"Skipped {skipped} cost records without an application name")

    return index


def name_similarity(a: str, b: str) -> float:
    """
    Similarity of two normalized application names, 0 to 1.

    Containment scores by length ratio; otherwise the share of words that
    contain or are contained in a word of the other name.
    """
    if not a or not b:
        return 0.0

    if a in b or b in a:
        return 0.5 + 0.5 * (min(len(a), len(b)) / max(len(a), len(b)))

    a_words = a.split(' ')
    b_words = b.split(' ')
    overlapping = sum(
        1 for word in a_words
        if any(other in word or word in other for other in b_words)
    )
    return overlapping / max(len(a_words), len(b_words))


class CostReconciler:
    """Matches application names against an index of billing charges."""

    def __init__(self, cost_records: Iterable[CostRecord], settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.index = build_cost_index(cost_records)
        self._matches: dict[str, Optional[CostMatch]] = {}

    def match(self, app_name: Optional[str]) -> Optional[CostMatch]:
        """Best charge entry for an application name, or None."""
        key = normalize_name(app_name)
        if not key:
            return None

        if key in self._matches:
            return self._matches[key]

        entry = self.index.get(key)
        if entry is not None:
            result = CostMatch(entry=entry, confidence=1.0, exact=True)
        else:
            result = self._fuzzy_match(key)

        self._matches[key] = result
        return result

    def _fuzzy_match(self, key: str) -> Optional[CostMatch]:
        best_entry = None
        best_score = 0.0
        for candidate_key, entry in self.index.items():
            score = name_similarity(key, candidate_key)
            if score > self.settings.cost_match_threshold and score > best_score:
                best_score = score
                best_entry = entry

        if best_entry is None:
            return None
        # Reordered words overlap fully; only an exact key scores 1.0
        confidence = min(best_score, self.settings.cost_fuzzy_confidence_cap)
        return CostMatch(entry=best_entry, confidence=confidence, exact=False)

    # ============================================
    # Annotation
    # ============================================

    def annotate(self, records: Iterable[ClassifiedRecord]) -> CostReconciliationReport:
        """Attach the matched charges to each record in place."""
        report = CostReconciliationReport()
        unmatched: dict[str, None] = {}

        for record in records:
            report.total_items += 1
            app_name = field_text(record.row, self.settings.application_field)
            match = self.match(app_name)

            if match is None:
                if app_name.strip():
                    unmatched[app_name.strip()] = None
                continue

            record.ubc_cost = match.entry.total_cost
            record.ubc_instances = match.entry.instances
            record.ubc_user_count = match.entry.user_count
            record.ubc_match_confidence = match.confidence
            record.ubc_matched_with = match.entry.application_name

            report.matched_items += 1
            report.matched_cost += match.entry.total_cost
            if match.exact:
                report.exact_matches += 1
            else:
                report.fuzzy_matches += 1

        report.unmatched_applications = list(unmatched)

        logger.info(
            f"Cost reconciliation: {report.matched_items}/{report.total_items} items matched "
            f"({report.exact_matches} exact, {report.fuzzy_matches} fuzzy)"
        )
        return report

    def apply_to_groups(self, groups: Mapping[str, GroupAccumulator]) -> CostReconciliationReport:
        """Annotate grouped items and reset each group's UBC total from them."""
        report = self.annotate(item for group in groups.values() for item in group.items)
        for group in groups.values():
            group.total_ubc_cost = sum(item.ubc_cost or 0.0 for item in group.items)
        return report

    def apply_to_tree(self, tree: Mapping[str, TreeNode]) -> CostReconciliationReport:
        """Annotate the items of an already built tree and refresh its UBC rollups."""
        report = self.annotate(item for _, node in iter_nodes(tree) for item in node.items)
        refresh_ubc_costs(tree)
        return report
