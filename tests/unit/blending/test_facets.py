"""
Tests for Facet Merging.

Test Strategy
-------------
- Build facet maps inline; every test states its own input
- Compare pair lists as dicts when only counts matter, as lists when the
  order is what is being tested

Organization
------------
- TestHelpers: to_counts, sort_by_count
- TestAncestorKeys: Hierarchy path expansion
- TestBooleanFacets: Boolean coercion and dropping
- TestHierarchicalFacets: Wrapping and rollup
- TestNormalFacets: Plain value mapping
- TestMergeBehavior: Skipping, sorting, pass-through and immutability
"""

import copy

from searchblend.blending.facets import (
    MAX_HIERARCHY_DEPTH,
    FacetMerger,
    ancestor_keys,
    merge_facets,
    sort_by_count,
    to_counts,
)
from searchblend.core.config import FacetFieldMapping

BOOLEAN = FacetFieldMapping(
    field="online_boolean",
    secondary="IsOnline",
    type="boolean",
    values={"yes": True, "no": False},
)
HIERARCHY = FacetFieldMapping(
    field="format",
    secondary="ContentType",
    type="hierarchical",
    values={"Book": "0/Book/", "eBook": "1/Book/eBook/", "Deep": "2/a/b/c/"},
)
LANGUAGE = FacetFieldMapping(
    field="language",
    secondary="Language",
    values={"eng": "English", "ger": "German"},
)


def counts_of(pairs):
    return {value: count for value, count in pairs}


# ============================================================================
# Test Classes
# ============================================================================


class TestHelpers:
    """Tests for module helper functions."""

    def test_to_counts_from_mapping(self):
        """Test a mapping is copied."""
        source = {"a": 1}
        counts = to_counts(source)

        assert counts == {"a": 1}
        assert counts is not source

    def test_to_counts_from_pairs_sums_duplicates(self):
        """Test pair lists are summed per value."""
        assert to_counts([["a", 1], ("b", 2), ["a", 3]]) == {"a": 4, "b": 2}

    def test_to_counts_empty(self):
        """Test None and empty input."""
        assert to_counts(None) == {}
        assert to_counts([]) == {}

    def test_sort_by_count_is_stable(self):
        """Test descending order with ties in first-seen order."""
        ordered = sort_by_count({"a": 1, "b": 3, "c": 1, "d": 3})

        assert list(ordered) == ["b", "d", "a", "c"]


class TestAncestorKeys:
    """Tests for ancestor_keys()."""

    def test_three_levels(self):
        """Test a depth-2 key has two ancestors, nearest first."""
        assert ancestor_keys("2/a/b/c/") == ["1/a/b/", "0/a/"]

    def test_top_level_has_no_ancestors(self):
        """Test a depth-0 key."""
        assert ancestor_keys("0/Book/") == []

    def test_non_numeric_level(self):
        """Test a key without a level prefix."""
        assert ancestor_keys("Book/") == []

    def test_single_segment_feeds_its_root(self):
        """Test a depth-1 key with one segment rolls up into level 0."""
        assert ancestor_keys("1/x/") == ["0/x/"]

    def test_level_larger_than_path(self):
        """Test the level prefix, not the segment count, sets the depth."""
        assert ancestor_keys("4/a/b/") == ["3/a/b/", "2/a/b/", "1/a/b/", "0/a/"]

    def test_depth_is_capped(self):
        """Test pathological depths are bounded."""
        segments = "/".join(f"s{i}" for i in range(100))
        keys = ancestor_keys(f"99/{segments}/")

        assert len(keys) == MAX_HIERARCHY_DEPTH
        assert keys[-1] == "0/s0/"


class TestBooleanFacets:
    """Tests for boolean facet fields.

    Rule #4: Focused test class - tests boolean coercion only
    """

    def test_mapped_values_become_true_false(self):
        """Test mapped values are coerced to "true"/"false" and summed."""
        merged = FacetMerger([BOOLEAN]).merge(
            {"online_boolean": {"true": 10, "false": 3}},
            {"IsOnline": {"yes": 5, "no": 2}},
        )

        assert merged["online_boolean"] == [["true", 15], ["false", 5]]

    def test_count_conservation(self):
        """Test merged total equals primary total plus secondary total."""
        primary = {"online_boolean": {"true": 10, "false": 3}}
        secondary = {"IsOnline": {"yes": 5, "no": 2}}

        merged = FacetMerger([BOOLEAN]).merge(primary, secondary)

        assert sum(count for _, count in merged["online_boolean"]) == 13 + 7

    def test_unmapped_values_are_dropped(self):
        """Test an unmapped boolean value is discarded, not guessed."""
        merged = FacetMerger([BOOLEAN]).merge(
            {}, {"IsOnline": {"yes": 5, "maybe": 4}}
        )

        assert merged["online_boolean"] == [["true", 5]]

    def test_mapping_values_use_truthiness(self):
        """Test mapped values are judged by truthiness, so any non-empty string is true."""
        mapping = FacetFieldMapping(
            "online_boolean",
            "IsOnline",
            "boolean",
            {"1": 1, "0": 0, "y": "yes", "n": "false", "e": ""},
        )

        merged = FacetMerger([mapping]).merge(
            {}, {"IsOnline": [["1", 2], ["0", 1], ["y", 4], ["n", 3], ["e", 5]]}
        )

        assert counts_of(merged["online_boolean"]) == {"true": 9, "false": 6}


class TestHierarchicalFacets:
    """Tests for hierarchical facet fields.

    Rule #4: Focused test class - tests wrapping and rollup
    """

    def test_rollup_into_every_ancestor(self):
        """Test a depth-2 value feeds its parent and grandparent."""
        merged = FacetMerger([HIERARCHY]).merge({}, {"ContentType": {"Deep": 7}})

        assert counts_of(merged["format"]) == {
            "2/a/b/c/": 7,
            "1/a/b/": 7,
            "0/a/": 7,
        }

    def test_rollup_adds_to_primary_counts(self):
        """Test rolled-up counts add to existing primary counts."""
        merged = FacetMerger([HIERARCHY]).merge(
            {"format": {"0/Book/": 4, "1/Book/eBook/": 2}},
            {"ContentType": {"eBook": 3}},
        )

        assert merged["format"] == [["0/Book/", 7], ["1/Book/eBook/", 5]]

    def test_unmapped_value_is_wrapped_at_depth_zero(self):
        """Test a raw secondary value becomes a top-level node."""
        merged = FacetMerger([HIERARCHY]).merge({}, {"ContentType": {"Journal": 2}})

        assert merged["format"] == [["0/Journal/", 2]]

    def test_mapped_plain_value_is_wrapped(self):
        """Test a mapping target without a level prefix is wrapped."""
        mapping = FacetFieldMapping("format", "ContentType", "hierarchical", {"Bk": "Book"})

        merged = FacetMerger([mapping]).merge({}, {"ContentType": {"Bk": 1}})

        assert merged["format"] == [["0/Book/", 1]]

    def test_raw_hierarchical_value_is_kept(self):
        """Test an unmapped value already shaped like a node is rolled up as-is."""
        merged = FacetMerger([HIERARCHY]).merge({}, {"ContentType": {"1/x/y/": 2}})

        assert counts_of(merged["format"]) == {"1/x/y/": 2, "0/x/": 2}

    def test_single_segment_node_feeds_root(self):
        """Test a depth-1 node with one path segment adds to its level-0 node."""
        mapping = FacetFieldMapping(
            "format", "ContentType", "hierarchical", {"Online": "1/Online/"}
        )

        merged = FacetMerger([mapping]).merge(
            {"format": {"0/Online/": 5}}, {"ContentType": {"Online": 3}}
        )

        assert counts_of(merged["format"]) == {"0/Online/": 8, "1/Online/": 3}


class TestNormalFacets:
    """Tests for plain facet fields."""

    def test_mapped_and_unmapped_values(self):
        """Test mapped values are renamed and unmapped ones kept verbatim."""
        merged = FacetMerger([LANGUAGE]).merge(
            {"language": [("English", 2), ("French", 3)]},
            {"Language": {"eng": 4, "spa": 1}},
        )

        assert merged["language"] == [["English", 6], ["French", 3], ["spa", 1]]

    def test_field_created_from_secondary_only(self):
        """Test a mapped field missing on the primary side is created."""
        merged = FacetMerger([LANGUAGE]).merge({}, {"Language": {"ger": 2}})

        assert merged == {"language": [["German", 2]]}


class TestMergeBehavior:
    """Tests for FacetMerger.merge() as a whole."""

    def test_missing_secondary_leaves_field_untouched(self):
        """Test a field without secondary data keeps its original order."""
        primary = {"format": [["0/x/", 1], ["0/y/", 9]]}

        merged = FacetMerger([HIERARCHY]).merge(primary, {})

        assert merged["format"] == [["0/x/", 1], ["0/y/", 9]]

    def test_empty_secondary_field_is_skipped(self):
        """Test an empty secondary field counts as missing."""
        primary = {"format": {"0/x/": 1, "0/y/": 9}}

        merged = FacetMerger([HIERARCHY]).merge(primary, {"ContentType": {}})

        assert merged["format"] == [["0/x/", 1], ["0/y/", 9]]

    def test_unmapped_primary_fields_pass_through(self):
        """Test fields without a mapping are converted but not re-sorted."""
        merged = FacetMerger([LANGUAGE]).merge(
            {"author": {"Zed": 1, "Abe": 5}},
            {"Language": {"eng": 1}},
        )

        assert merged["author"] == [["Zed", 1], ["Abe", 5]]

    def test_merged_fields_are_sorted(self):
        """Test every merged field is non-increasing by count."""
        merged = FacetMerger([BOOLEAN, HIERARCHY, LANGUAGE]).merge(
            {
                "format": {"0/Book/": 1, "0/Map/": 2},
                "language": {"English": 1},
                "online_boolean": {"false": 1},
            },
            {
                "ContentType": {"eBook": 5, "Journal": 3},
                "Language": {"ger": 4, "eng": 1},
                "IsOnline": {"yes": 8},
            },
        )

        for field_name in ("format", "language", "online_boolean"):
            counts = [count for _, count in merged[field_name]]
            assert counts == sorted(counts, reverse=True)

    def test_inputs_are_not_mutated(self):
        """Test both input maps are left unchanged."""
        primary = {"format": {"0/Book/": 4}, "author": [["A", 1]]}
        secondary = {"ContentType": {"eBook": 3, "Deep": 1}}
        primary_before = copy.deepcopy(primary)
        secondary_before = copy.deepcopy(secondary)

        FacetMerger([HIERARCHY]).merge(primary, secondary)

        assert primary == primary_before
        assert secondary == secondary_before

    def test_none_inputs(self):
        """Test None facet maps merge to an empty result."""
        assert FacetMerger([BOOLEAN]).merge(None, None) == {}

    def test_merge_facets_function(self):
        """Test the function form matches the class."""
        primary = {"language": {"English": 1}}
        secondary = {"Language": {"eng": 2}}

        assert merge_facets(primary, secondary, [LANGUAGE]) == FacetMerger(
            [LANGUAGE]
        ).merge(primary, secondary)
