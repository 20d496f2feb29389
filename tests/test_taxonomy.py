# tests/test_taxonomy.py

"""
Tests for taxonomy definitions and the derived index.
"""

import pytest

from licensemap.core.taxonomy_index import TaxonomyIndex, extract_vendor
from licensemap.models import Taxonomy, TaxonomyError, join_path, split_path


MS_APPS = "Infrastructure Software > MS Applications"
BROWSERS = "Infrastructure Software > Web Browsers"


# ============================================
# Test Data
# ============================================

def make_taxonomy() -> dict:
    return {
        "groups": [
            {
                "name": "Infrastructure Software",
                "children": [
                    {"name": "MS Applications", "members": ["Microsoft Excel", "Microsoft Word"]},
                    {"name": "Web Browsers", "members": ["Google Chrome", "Microsoft Edge"]},
                ],
            },
            {
                "name": "Engineering Software",
                "children": [
                    {
                        "name": "CAD Tools",
                        "children": [
                            {"name": "2D", "members": ["AutoCAD LT"]},
                        ],
                    },
                ],
            },
        ]
    }


# ============================================
# Path Tests
# ============================================

class TestPaths:
    """Test display path helpers."""

    def test_join_and_split(self):
        segments = ("Infrastructure Software", "MS Applications")
        assert join_path(segments) == MS_APPS
        assert split_path(MS_APPS) == segments

    def test_split_trims_and_drops_empty_segments(self):
        assert split_path(" A >B>  > C ") == ("A", "B", "C")
        assert split_path("") == ()


# ============================================
# Taxonomy Model Tests
# ============================================

class TestTaxonomy:
    """Test taxonomy parsing and validation."""

    def test_parse_mapping_and_list(self):
        definition = make_taxonomy()
        from_mapping = Taxonomy.parse(definition)
        from_list = Taxonomy.parse(definition["groups"])

        assert from_mapping == from_list
        assert Taxonomy.parse(from_mapping) is from_mapping

    def test_walk_is_depth_first_in_order(self):
        taxonomy = Taxonomy.parse(make_taxonomy())
        paths = [join_path(segments) for segments, _ in taxonomy.walk()]

        assert paths == [
            "Infrastructure Software",
            MS_APPS,
            BROWSERS,
            "Engineering Software",
            "Engineering Software > CAD Tools",
            "Engineering Software > CAD Tools > 2D",
        ]

    def test_members_deduplicated(self):
        taxonomy = Taxonomy.parse([{"name": "A", "members": ["X", " X ", "", "Y"]}])
        assert taxonomy.groups[0].members == ["X", "Y"]

    def test_missing_children_and_members_default_empty(self):
        taxonomy = Taxonomy.parse([{"name": "A", "children": None, "members": None}])
        assert taxonomy.groups[0].children == []
        assert taxonomy.groups[0].members == []

    @pytest.mark.parametrize("definition", [
        [{"name": "A > B", "members": ["X"]}],
        [{"name": "  ", "members": ["X"]}],
        [{"members": ["X"]}],
        [{"name": "A", "members": ["X"], "children": [{"name": "B"}]}],
        [{"name": "A", "children": [{"name": "B"}, {"name": "B"}]}],
        [{"name": "A"}, {"name": "A"}],
        [{"name": "Unclassified", "members": ["X"]}],
        "not a taxonomy",
        42,
    ])
    def test_malformed_definitions_raise(self, definition):
        with pytest.raises(TaxonomyError):
            Taxonomy.parse(definition)


# ============================================
# Vendor Extraction Tests
# ============================================

class TestExtractVendor:
    """Test the vendor heuristic."""

    def test_known_prefix(self):
        assert extract_vendor("Microsoft Excel 2019") == "microsoft"
        assert extract_vendor("MS Project") == "ms"
        assert extract_vendor("Trend Micro Apex One") == "trend micro"

    def test_by_clause(self):
        assert extract_vendor("Reader by Adobe") == "adobe"

    def test_first_word(self):
        assert extract_vendor("Zoom Workplace") == "zoom"

    def test_no_vendor(self):
        assert extract_vendor("R") is None
        assert extract_vendor(None) is None
        assert extract_vendor("") is None


# ============================================
# Index Tests
# ============================================

class TestTaxonomyIndex:
    """Test building the lookup structures."""

    def test_exact_paths(self):
        index = TaxonomyIndex.build(make_taxonomy())

        assert index.exact_paths["microsoft excel"] == MS_APPS
        assert index.exact_paths["autocad lt"] == "Engineering Software > CAD Tools > 2D"
        assert index.has_path("Engineering Software > CAD Tools")
        assert index.segments(MS_APPS) == ("Infrastructure Software", "MS Applications")

    def test_leaves_only_carry_members(self):
        index = TaxonomyIndex.build(make_taxonomy())
        assert [leaf.path for leaf in index.leaves] == [
            MS_APPS,
            BROWSERS,
            "Engineering Software > CAD Tools > 2D",
        ]

    def test_overrides_win_over_derived_vendors(self):
        """'Microsoft Edge' derives microsoft -> browsers; the curated table wins."""
        index = TaxonomyIndex.build(make_taxonomy())
        assert index.vendor_map["microsoft"] == MS_APPS

    def test_derived_vendors_without_overrides(self):
        index = TaxonomyIndex.build(make_taxonomy(), vendor_overrides={}, keyword_map={})
        # Last member wins among derived vendors
        assert index.vendor_map["microsoft"] == BROWSERS
        assert index.vendor_map["google"] == BROWSERS
        assert index.keyword_map == {}

    def test_curated_entries_outside_taxonomy_dropped(self):
        index = TaxonomyIndex.build(make_taxonomy())

        assert all(index.has_path(path) for path in index.vendor_map.values())
        assert all(index.has_path(path) for path in index.keyword_map)
        assert MS_APPS in index.keyword_map
        assert "Infrastructure Software > Database" not in index.keyword_map

    def test_generation_recorded(self):
        assert TaxonomyIndex.build(make_taxonomy(), generation=3).generation == 3

    def test_malformed_raises(self):
        with pytest.raises(TaxonomyError):
            TaxonomyIndex.build([{"name": "A > B"}])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
