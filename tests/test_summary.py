# tests/test_summary.py

"""
Tests for classification statistics and summaries.
"""

import logging

import pytest

from licensemap.config import Settings
from licensemap.core.aggregation import aggregate
from licensemap.core.summary import (
    charge_summary,
    classification_stats,
    cost_summary,
    log_classification_stats,
    summarize,
    usage_summary,
)
from licensemap.models import ChargeRecord, ClassifiedRecord, UNCLASSIFIED


MS_APPS = "Infrastructure Software > MS Applications"
BROWSERS = "Infrastructure Software > Web Browsers"
CAD = "Engineering Software > CAD Tools"


# ============================================
# Test Data
# ============================================

def make_record(
    app: str,
    user: str,
    path: str = MS_APPS,
    confidence: float = 1.0,
    last_used: str = "",
    cost=None,
    ubc_cost: float = None,
) -> ClassifiedRecord:
    if path == UNCLASSIFIED:
        confidence = 0.0
    return ClassifiedRecord(
        row={
            "Application - Product": app,
            "Assigned user - Email": user,
            "Installations - Last used date": last_used,
            "License - Total cost": cost,
        },
        group_path=path,
        confidence=confidence,
        method="unclassified" if path == UNCLASSIFIED else "exact",
        ubc_cost=ubc_cost,
    )


def make_inventory() -> list[ClassifiedRecord]:
    return [
        make_record("Microsoft Word", "a@x.com", last_used="2024-01-01", cost=100, ubc_cost=10.0),
        make_record("Microsoft Excel", "b@x.com", cost=100),
        make_record("Google Chrome", "a@x.com", path=BROWSERS, confidence=0.6, last_used="2024-01-02"),
        make_record("AutoCAD", "c@x.com", path=CAD, cost=600, ubc_cost=30.0),
        make_record("Mystery App", "", path=UNCLASSIFIED),
    ]


def make_charges() -> list[ChargeRecord]:
    return [
        ChargeRecord(service_group="Workplace", user_email="a@x.com", quantity=2, unit_price=10.0),
        ChargeRecord(service_group="Workplace", user_email="b@x.com", quantity=1, unit_price=10.0),
        ChargeRecord(service_group="Engineering", user_email="a@x.com", quantity=1, unit_price=50.0),
    ]


# ============================================
# Classification Statistics Tests
# ============================================

class TestClassificationStats:
    """Test classified, unclassified and high-confidence counts."""

    def test_counts_and_rates(self):
        stats = classification_stats(make_inventory())

        assert stats.total == 5
        assert stats.classified == 4
        assert stats.unclassified == 1
        assert stats.high_confidence == 3
        assert stats.classification_rate == 80.0
        assert stats.high_confidence_rate == 60.0
        assert stats.by_group[MS_APPS] == 2
        assert stats.by_group[UNCLASSIFIED] == 1
        assert stats.sample_unclassified == ["Mystery App"]

    def test_custom_threshold(self):
        stats = classification_stats(make_inventory(), high_confidence_threshold=0.5)
        assert stats.high_confidence == 4

    def test_sample_size_from_settings(self):
        records = [make_record(f"App {i}", "x@x.com", path=UNCLASSIFIED) for i in range(5)]
        stats = classification_stats(records, settings=Settings(unclassified_sample_size=2))

        assert stats.sample_unclassified == ["App 0", "App 1"]

    def test_empty(self):
        stats = classification_stats([])

        assert stats.total == 0
        assert stats.classification_rate == 0.0
        assert stats.high_confidence_rate == 0.0

    def test_logging(self, caplog):
        caplog.set_level(logging.INFO, logger="licensemap")
        log_classification_stats(classification_stats(make_inventory()))

        assert "4 classified (80.00%)" in caplog.text
        assert "Mystery App" in caplog.text


# ============================================
# Processing Summary Tests
# ============================================

class TestProcessingSummary:
    """Test the usage-side and charge-side totals."""

    def test_usage_summary(self):
        summary = usage_summary(make_inventory())

        assert summary.unique_users == 4
        assert summary.active_users == 1
        assert summary.total_installations == 5
        assert summary.service_groups == 4
        assert summary.total_cost == 800.0
        assert summary.total_ubc_cost == 40.0
        assert summary.classifications.classified == 4

    def test_charge_summary(self):
        summary = charge_summary(make_charges())

        assert summary.unique_users == 2
        assert summary.service_groups == 2
        assert summary.total_quantity == 4
        assert summary.total_cost == 80.0

    def test_charge_summary_without_charges(self):
        assert charge_summary(None).total_cost == 0.0
        assert charge_summary([]).unique_users == 0

    def test_summarize(self):
        summary = summarize(make_inventory(), make_charges())

        assert summary.usage.total_installations == 5
        assert summary.charges.total_cost == 80.0


# ============================================
# Cost Summary Tests
# ============================================

class TestCostSummary:
    """Test cost KPIs over the tree."""

    def test_totals(self):
        summary = cost_summary(aggregate(make_inventory()))

        assert summary.total_cost == 800.0
        assert summary.total_ubc_cost == 40.0
        assert summary.total_users == 3
        assert summary.total_applications == 5
        assert summary.average_cost_per_user == pytest.approx(800 / 3)
        assert summary.average_ubc_cost_per_user == pytest.approx(40 / 3)
        assert summary.average_cost_per_application == 160.0

    def test_breakdown_sorted_by_cost(self):
        summary = cost_summary(aggregate(make_inventory()))

        assert [unit.name for unit in summary.breakdown] == [
            "Engineering Software",
            "Infrastructure Software",
            UNCLASSIFIED,
        ]
        engineering = summary.breakdown[0]
        assert engineering.dsc_cost == 600.0
        assert engineering.percentage == 75.0
        assert engineering.ubc_percentage == 75.0

    def test_empty_tree(self):
        summary = cost_summary({})

        assert summary.total_cost == 0.0
        assert summary.average_cost_per_user == 0.0
        assert summary.breakdown == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
