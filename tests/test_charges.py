# tests/test_charges.py

"""
Tests for per-seat service charges (DSC) and the usage comparison.
"""

import pytest

from licensemap.core.aggregation import accumulate
from licensemap.core.charges import (
    build_charge_structure,
    combine_structures,
    compare_usage,
    filter_quarter,
    parse_charge_records,
)
from licensemap.models import ChargeMetrics, ChargeRecord, ClassifiedRecord, GroupMetrics


# ============================================
# Test Data
# ============================================

def make_charge(
    group: str,
    email: str,
    quantity: float = 1,
    unit_price: float = 10.0,
    subgroup: str = None,
    service: str = None,
    quarter: str = "2024-Q1",
) -> ChargeRecord:
    return ChargeRecord(
        service_group=group,
        service_subgroup=subgroup,
        service=service,
        user_email=email,
        quantity=quantity,
        unit_price=unit_price,
        reporting_quarter=quarter,
    )


def make_charges() -> list[ChargeRecord]:
    return [
        make_charge("Workplace", "a@x.com", 1, 10.0, "Office", "M365 E3"),
        make_charge("Workplace", "b@x.com", 2, 10.0, "Office", "M365 E5"),
        make_charge("Workplace", "a@x.com", 1, 5.0, "Devices", "Laptop"),
        make_charge("Engineering", "c@x.com", 3, 100.0, "CAD", "AutoCAD", quarter="2024-Q2"),
    ]


# ============================================
# Parsing Tests
# ============================================

class TestParseCharges:
    """Test converting raw charge rows."""

    def test_parse_rows(self):
        records = parse_charge_records([
            {"ServiceGroup": "Workplace", "ServiceSubgroup": "Office", "Service": "M365",
             "PerUser_Email": "a@x.com", "Quantity": "2", "UnitPrice": "$10.50",
             "ReportingQuarter": "2024-Q1"},
            {"ServiceGroup": "", "Quantity": "many", "UnitPrice": None},
        ])

        assert records[0].cost == 21.0
        assert records[0].reporting_quarter == "2024-Q1"
        assert records[1].service_group == "Unknown"
        assert records[1].quantity == 0.0
        assert records[1].cost == 0.0
        assert records[1].user_email is None

    def test_filter_quarter(self):
        charges = make_charges()

        assert len(filter_quarter(charges, "2024-Q1")) == 3
        assert len(filter_quarter(charges, "2024-Q2")) == 1
        assert filter_quarter(charges, "2023-Q4") == []
        assert len(filter_quarter(charges, None)) == 4


# ============================================
# Charge Structure Tests
# ============================================

class TestChargeStructure:
    """Test grouping charges by service group."""

    def test_group_metrics(self):
        structure = build_charge_structure(make_charges())
        workplace = structure["Workplace"]

        assert workplace.metrics.total_users == 2
        assert workplace.metrics.total_quantity == 4
        assert workplace.metrics.total_cost == 35.0
        assert structure["Engineering"].metrics.total_cost == 300.0

    def test_subgroups_and_services(self):
        workplace = build_charge_structure(make_charges())["Workplace"]

        assert set(workplace.subgroups) == {"Office", "Devices"}
        assert len(workplace.subgroups["Office"]) == 2
        assert set(workplace.services) == {"M365 E3", "M365 E5", "Laptop"}

    def test_missing_subgroup_bucketed(self):
        structure = build_charge_structure([make_charge("Workplace", "a@x.com")])
        assert list(structure["Workplace"].subgroups) == ["Unknown"]

    def test_empty(self):
        assert build_charge_structure([]) == {}


# ============================================
# Usage Comparison Tests
# ============================================

class TestCompareUsage:
    """Test usage measured against charged seats."""

    def test_comparison(self):
        usage = GroupMetrics(unique_users=10, active_users=6, total_installations=12)
        charges = ChargeMetrics(total_users=8, total_quantity=8)

        comparison = compare_usage(usage, charges)

        assert comparison.user_difference == 2
        assert comparison.utilization_rate == 75.0
        assert comparison.installation_ratio == 1.5

    def test_zero_denominators(self):
        comparison = compare_usage(GroupMetrics(unique_users=3, active_users=2), ChargeMetrics())

        assert comparison.user_difference == 3
        assert comparison.utilization_rate == 0.0
        assert comparison.installation_ratio == 0.0

    def test_missing_sides(self):
        comparison = compare_usage(None, None)
        assert comparison.user_difference == 0


class TestCombineStructures:
    """Test joining usage groups with charge groups."""

    def test_union_of_groups(self):
        usage = accumulate([
            ClassifiedRecord(
                row={"Assigned user - Email": "a@x.com", "Installations - Last used date": "2024-01-01"},
                group_path="Workplace",
                confidence=1.0,
                method="exact",
            ),
            ClassifiedRecord(
                row={"Assigned user - Email": "d@x.com"},
                group_path="Security",
                confidence=1.0,
                method="exact",
            ),
        ])
        charges = build_charge_structure(filter_quarter(make_charges(), None))

        combined = combine_structures(usage, charges)

        assert set(combined) == {"Workplace", "Engineering", "Security"}

        workplace = combined["Workplace"]
        assert workplace.usage.unique_users == 1
        assert workplace.charges.metrics.total_users == 2
        assert workplace.comparison.user_difference == -1
        assert workplace.comparison.utilization_rate == 50.0

        engineering = combined["Engineering"]
        assert engineering.usage == GroupMetrics()
        assert engineering.comparison.user_difference == -1

        security = combined["Security"]
        assert security.charges.metrics == ChargeMetrics()
        assert security.comparison.user_difference == 1

    def test_bare_usage_metrics(self):
        combined = combine_structures({"Workplace": {"unique_users": 4}}, {})
        assert combined["Workplace"].comparison.user_difference == 4


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
