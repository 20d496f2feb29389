# tests/test_aggregation.py

"""
Tests for group accumulation and the nested metrics tree.
"""

import pytest

from licensemap.core.aggregation import (
    TreeBuilder,
    accumulate,
    aggregate,
    build_tree,
    iter_nodes,
    merge_partials,
    refresh_ubc_costs,
)
from licensemap.models import ClassifiedRecord, GroupMetrics, UNCLASSIFIED


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
    last_used: str = "",
    cost=None,
) -> ClassifiedRecord:
    row = {
        "Application - Product": app,
        "Assigned user - Email": user,
        "Installations - Last used date": last_used,
    }
    if cost is not None:
        row["License - Total cost"] = cost
    return ClassifiedRecord(
        row=row,
        group_path=path,
        confidence=0.0 if path == UNCLASSIFIED else 1.0,
        method="unclassified" if path == UNCLASSIFIED else "exact",
    )


def make_inventory() -> list[ClassifiedRecord]:
    return [
        make_record("Microsoft Word", "a@x.com", last_used="2024-01-01", cost="100"),
        make_record("Microsoft Word", "b@x.com", cost=50),
        make_record("Microsoft Excel", "a@x.com", last_used="2024-02-01", cost="$1,000"),
        make_record("Google Chrome", "a@x.com", path=BROWSERS, last_used="2024-01-05"),
        make_record("Microsoft Word", "c@x.com", path=BROWSERS, cost="n/a"),
        make_record("AutoCAD", "d@x.com", path=CAD, last_used="2024-03-01", cost=2500),
        make_record("Mystery App", "e@x.com", path=UNCLASSIFIED),
    ]


def tree_signature(tree) -> dict:
    """Order-insensitive view of a tree for comparisons."""
    signature = {}
    for segments, node in iter_nodes(tree):
        signature[segments] = (
            node.metrics.model_dump(),
            [
                (a.name, a.users, a.active_users, a.accesses, a.business_unit, a.total_cost, a.ubc_cost,
                 sorted(item.get("Assigned user - Email") for item in a.items))
                for a in node.applications
            ],
            sorted((item.get("Application - Product"), item.get("Assigned user - Email")) for item in node.items),
        )
    return signature


# ============================================
# Group Metrics Tests
# ============================================

class TestAccumulate:
    """Test per-group metrics."""

    def test_group_metrics(self):
        groups = accumulate(make_inventory())
        metrics = groups[MS_APPS].metrics()

        assert metrics.unique_users == 2
        assert metrics.active_users == 1
        assert metrics.total_installations == 3
        assert metrics.total_cost == 1150.0
        assert metrics.total_ubc_cost == 0.0

    def test_malformed_cost_counts_as_zero(self):
        groups = accumulate(make_inventory())
        assert groups[BROWSERS].metrics().total_cost == 0.0

    def test_unclassified_bucket(self):
        groups = accumulate(make_inventory())
        assert groups[UNCLASSIFIED].metrics().total_installations == 1

    def test_missing_application_name(self):
        groups = accumulate([make_record("", "a@x.com"), make_record(None, "b@x.com")])
        assert list(groups[MS_APPS].applications) == ["Unknown"]
        assert groups[MS_APPS].applications["Unknown"].accesses == 2

    def test_merge_partials_equals_whole(self):
        """Accumulating two halves and merging equals accumulating everything."""
        records = make_inventory()
        whole = accumulate(records)
        merged = merge_partials(accumulate(records[:3]), accumulate(records[3:]))

        assert set(merged) == set(whole)
        for path in whole:
            assert merged[path].metrics() == whole[path].metrics()
        assert tree_signature(build_tree(merged)) == tree_signature(build_tree(whole))

    def test_merge_deduplicates_users_within_group(self):
        records = [
            make_record("Microsoft Word", "a@x.com", last_used="2024-01-01"),
            make_record("Microsoft Excel", "a@x.com", last_used="2024-01-01"),
        ]
        merged = merge_partials(accumulate(records[:1]), accumulate(records[1:]))

        assert merged[MS_APPS].metrics().unique_users == 1
        assert merged[MS_APPS].metrics().active_users == 1
        assert merged[MS_APPS].metrics().total_installations == 2

    def test_merge_is_commutative(self):
        records = make_inventory()
        left = merge_partials(accumulate(records[:4]), accumulate(records[4:]))
        right = merge_partials(accumulate(records[4:]), accumulate(records[:4]))

        assert tree_signature(build_tree(left)) == tree_signature(build_tree(right))


# ============================================
# Tree Construction Tests
# ============================================

class TestBuildTree:
    """Test the nested tree and its rollups."""

    def test_rollup_is_plain_sum(self):
        """Installations 5 and 7 in two leaves give 12 at the business unit."""
        tree = build_tree({
            MS_APPS: GroupMetrics(total_installations=5, unique_users=3),
            BROWSERS: GroupMetrics(total_installations=7, unique_users=3),
        })

        unit = tree["Infrastructure Software"]
        assert unit.metrics.total_installations == 12
        assert unit.metrics.unique_users == 6
        assert unit.child("MS Applications").metrics.total_installations == 5

    def test_user_in_two_groups_counted_twice(self):
        tree = aggregate(make_inventory())
        unit = tree["Infrastructure Software"]

        # a@x.com uses MS Applications and Web Browsers
        assert unit.metrics.unique_users == 4
        assert unit.metrics.total_installations == 5

    def test_items_stay_on_leaf(self):
        tree = aggregate(make_inventory())
        unit = tree["Infrastructure Software"]

        assert unit.items == []
        assert len(unit.child("MS Applications").items) == 3
        assert len(unit.child("Web Browsers").items) == 2

    def test_applications_merged_into_business_unit(self):
        tree = aggregate(make_inventory())
        unit = tree["Infrastructure Software"]

        assert [a.name for a in unit.applications] == ["Google Chrome", "Microsoft Excel", "Microsoft Word"]
        word = unit.application("Microsoft Word")
        assert word.users == 3
        assert word.accesses == 3
        assert word.active_users == 1
        assert word.total_cost == 150.0
        assert word.business_unit == "Infrastructure Software"
        assert len(word.items) == 3

        leaf_word = unit.child("Web Browsers").application("Microsoft Word")
        assert leaf_word.users == 1

    def test_order_independent(self):
        """The same records in a different order build an identical tree."""
        records = make_inventory()
        forward = aggregate(records)
        backward = aggregate(list(reversed(records)))

        assert tree_signature(forward) == tree_signature(backward)
        assert forward.keys() == backward.keys()

    def test_items_keep_input_order(self):
        """Item lists are the one part of the tree that follows input order."""
        leaf = aggregate(make_inventory())["Infrastructure Software"].child("MS Applications")

        assert [item.get("Assigned user - Email") for item in leaf.items] == ["a@x.com", "b@x.com", "a@x.com"]
        word = leaf.application("Microsoft Word")
        assert [item.get("Assigned user - Email") for item in word.items] == ["a@x.com", "b@x.com"]

        reversed_leaf = aggregate(list(reversed(make_inventory())))["Infrastructure Software"].child("MS Applications")
        assert [item.get("Assigned user - Email") for item in reversed_leaf.items] == ["a@x.com", "b@x.com", "a@x.com"][::-1]

    def test_bare_metrics_tolerated(self):
        tree = build_tree({
            MS_APPS: None,
            BROWSERS: {"total_installations": 2, "total_cost": None},
            CAD: GroupMetrics(total_cost=10.0),
        })

        assert tree["Infrastructure Software"].metrics.total_installations == 2
        assert tree["Infrastructure Software"].child("MS Applications").metrics == GroupMetrics()
        assert tree["Engineering Software"].metrics.total_cost == 10.0

    def test_intermediate_groups(self):
        """A group and its descendant can both carry records."""
        tree = build_tree({
            "A": GroupMetrics(total_installations=1),
            "A > B > C": GroupMetrics(total_installations=2),
        })

        assert tree["A"].metrics.total_installations == 3
        assert tree["A"].child("B").metrics.total_installations == 2
        assert tree["A"].child("B", "C").is_leaf

    def test_empty(self):
        assert aggregate([]) == {}
        assert build_tree({}) == {}

    def test_node_arena_reuses_nodes(self):
        builder = TreeBuilder()
        leaf = builder.node_at(("A", "B", "C"))

        assert builder.node_at(("A", "B", "C")) is leaf
        assert builder.roots["A"].children["B"].children["C"] is leaf
        assert builder.node_at(("A", "B")) is builder.roots["A"].children["B"]

    def test_iter_nodes_pre_order(self):
        tree = aggregate(make_inventory())
        paths = [segments for segments, _ in iter_nodes(tree)]

        assert paths == [
            ("Engineering Software",),
            ("Engineering Software", "CAD Tools"),
            ("Infrastructure Software",),
            ("Infrastructure Software", "MS Applications"),
            ("Infrastructure Software", "Web Browsers"),
            (UNCLASSIFIED,),
        ]


# ============================================
# End-to-End Scenario
# ============================================

class TestScenario:
    """Two records, one classified and one not."""

    def test_metrics(self):
        records = [
            make_record("Microsoft Word", "a@x.com", last_used="2024-01-01"),
            make_record("Unknown Tool", "b@x.com", path=UNCLASSIFIED),
        ]
        tree = aggregate(records)

        unit = tree["Infrastructure Software"].metrics
        assert unit.unique_users == 1
        assert unit.active_users == 1
        assert unit.total_installations == 1

        unclassified = tree[UNCLASSIFIED].metrics
        assert unclassified.total_installations == 1
        assert unclassified.active_users == 0


# ============================================
# UBC Refresh Tests
# ============================================

class TestRefreshUbcCosts:
    """Test recomputing UBC totals from item annotations."""

    def test_refresh(self):
        tree = aggregate(make_inventory())
        for _, node in iter_nodes(tree):
            for item in node.items:
                if item.get("Application - Product") == "Microsoft Word":
                    item.ubc_cost = 40.0

        refresh_ubc_costs(tree)

        unit = tree["Infrastructure Software"]
        assert unit.metrics.total_ubc_cost == 120.0
        assert unit.child("MS Applications").metrics.total_ubc_cost == 80.0
        assert unit.child("Web Browsers").metrics.total_ubc_cost == 40.0
        assert unit.application("Microsoft Word").ubc_cost == 120.0
        assert tree["Engineering Software"].metrics.total_ubc_cost == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
