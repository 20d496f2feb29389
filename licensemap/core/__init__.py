# licensemap/core/__init__.py

from licensemap.core.normalizers import (
    normalize_name,
    normalize_amount,
    tokenize,
    is_blank,
)
from licensemap.core.taxonomy_index import TaxonomyIndex, extract_vendor
from licensemap.core.classification import Classifier, StaleGenerationError
from licensemap.core.aggregation import (
    GroupAccumulator,
    accumulate,
    aggregate,
    build_tree,
    iter_nodes,
    merge_partials,
    refresh_ubc_costs,
)
from licensemap.core.costs import CostReconciler, build_cost_index, parse_cost_records
from licensemap.core.charges import (
    build_charge_structure,
    combine_structures,
    compare_usage,
    filter_quarter,
    parse_charge_records,
)
from licensemap.core.summary import (
    classification_stats,
    cost_summary,
    log_classification_stats,
    summarize,
)
from licensemap.core.comparison import (
    comparison_metrics_from_tree,
    comparison_totals,
    efficiency_insights,
    normalize_for_radar,
    rank_groups,
    share_of_total,
)
from licensemap.core.pipeline import process, ProcessingCancelled, ProcessingResult

__all__ = [
    "normalize_name",
    "normalize_amount",
    "tokenize",
    "is_blank",
    "TaxonomyIndex",
    "extract_vendor",
    "Classifier",
    "StaleGenerationError",
    "GroupAccumulator",
    "accumulate",
    "aggregate",
    "build_tree",
    "iter_nodes",
    "merge_partials",
    "refresh_ubc_costs",
    "CostReconciler",
    "build_cost_index",
    "parse_cost_records",
    "build_charge_structure",
    "combine_structures",
    "compare_usage",
    "filter_quarter",
    "parse_charge_records",
    "classification_stats",
    "cost_summary",
    "log_classification_stats",
    "summarize",
    "comparison_metrics_from_tree",
    "comparison_totals",
    "efficiency_insights",
    "normalize_for_radar",
    "rank_groups",
    "share_of_total",
    "process",
    "ProcessingCancelled",
    "ProcessingResult",
]
