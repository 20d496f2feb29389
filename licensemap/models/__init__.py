# licensemap/models/__init__.py

from licensemap.models.taxonomy import (
    GroupPath,
    PATH_DELIMITER,
    PATH_SEPARATOR,
    UNCLASSIFIED,
    Taxonomy,
    TaxonomyError,
    TaxonomyNode,
    join_path,
    split_path,
)
from licensemap.models.records import (
    Classification,
    ClassificationMethod,
    ClassifiedRecord,
    ChargeRecord,
    CostRecord,
    Suggestion,
    UNCLASSIFIED_RESULT,
)
from licensemap.models.metrics import (
    ApplicationAggregate,
    GroupMetrics,
    TreeNode,
)
from licensemap.models.costs import (
    ChargeGroup,
    ChargeMetrics,
    CombinedGroup,
    CostDetail,
    CostIndexEntry,
    CostMatch,
    CostReconciliationReport,
    UsageComparison,
)
from licensemap.models.summary import (
    BusinessUnitCost,
    ChargeSummary,
    ClassificationStats,
    ComparisonMetric,
    ComparisonTotals,
    CostSummary,
    EfficiencyInsights,
    GroupComparisonMetrics,
    ProcessingSummary,
    RadarPoint,
    SortOrder,
    UsageSummary,
)

__all__ = [
    # Taxonomy
    "GroupPath",
    "PATH_DELIMITER",
    "PATH_SEPARATOR",
    "UNCLASSIFIED",
    "Taxonomy",
    "TaxonomyError",
    "TaxonomyNode",
    "join_path",
    "split_path",
    # Records
    "Classification",
    "ClassificationMethod",
    "ClassifiedRecord",
    "ChargeRecord",
    "CostRecord",
    "Suggestion",
    "UNCLASSIFIED_RESULT",
    # Metrics
    "ApplicationAggregate",
    "GroupMetrics",
    "TreeNode",
    # Costs
    "ChargeGroup",
    "ChargeMetrics",
    "CombinedGroup",
    "CostDetail",
    "CostIndexEntry",
    "CostMatch",
    "CostReconciliationReport",
    "UsageComparison",
    # Summary
    "BusinessUnitCost",
    "ChargeSummary",
    "ClassificationStats",
    "ComparisonMetric",
    "ComparisonTotals",
    "CostSummary",
    "EfficiencyInsights",
    "GroupComparisonMetrics",
    "ProcessingSummary",
    "RadarPoint",
    "SortOrder",
    "UsageSummary",
]
