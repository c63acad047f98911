"""Tests for implindex.merge — validation, per-key append, associativity."""

from __future__ import annotations

from itertools import permutations

import pytest

from implindex.core.errors import ErrorCategory, InvalidContributionError
from implindex.merge import entry_count, merge_contributions, merge_into, normalize_contribution

C1 = {"pkgA": ["impl X for Y"], "pkgB": ["impl B1"]}
C2 = {"pkgA": ["impl Z for W"]}
C3 = {"pkgC": ["impl C1", "impl C2"], "pkgB": ["impl B2"]}


class TestNormalizeContribution:
    def test_mapping_keeps_order(self):
        assert normalize_contribution({"b": ["1"], "a": ["2", "3"]}) == [
            ("b", ("1",)),
            ("a", ("2", "3")),
        ]

    def test_pairs_allow_repeated_keys(self):
        pairs = normalize_contribution([("a", ["1"]), ("a", ["2"])])
        assert pairs == [("a", ("1",)), ("a", ("2",))]

    def test_empty_sequence_accepted(self):
        assert normalize_contribution({"a": []}) == [("a", ())]

    def test_empty_contribution_accepted(self):
        assert normalize_contribution({}) == []

    def test_tuple_entries_accepted(self):
        assert normalize_contribution({"a": ("x", "y")}) == [("a", ("x", "y"))]

    @pytest.mark.parametrize("value", [None, 42, "pkgA", b"pkgA"])
    def test_non_contribution_rejected(self, value):
        with pytest.raises(InvalidContributionError, match="mapping"):
            normalize_contribution(value)

    def test_non_string_key_rejected(self):
        with pytest.raises(InvalidContributionError, match="keys must be strings") as exc_info:
            normalize_contribution({1: ["x"]})
        assert exc_info.value.category is ErrorCategory.VALIDATION

    def test_string_entries_rejected(self):
        # a bare string is a sequence of characters, not of entries
        with pytest.raises(InvalidContributionError, match="sequence of strings"):
            normalize_contribution({"a": "impl X"})

    def test_non_string_entry_rejected(self):
        with pytest.raises(InvalidContributionError, match="Entry 1") as exc_info:
            normalize_contribution({"a": ["ok", 3]})
        assert exc_info.value.context.key == "a"
        assert exc_info.value.context.metadata["position"] == 1

    def test_bad_pair_rejected(self):
        with pytest.raises(InvalidContributionError, match="pairs"):
            normalize_contribution([("a", ["x"], "extra")])


class TestMergeInto:
    def test_appends_and_creates(self):
        target = {"a": ["1"]}
        delta = merge_into(target, [("a", ("2",)), ("b", ("3",))])
        assert target == {"a": ["1", "2"], "b": ["3"]}
        assert delta == {"a": ["2"], "b": ["3"]}

    def test_repeated_key_concatenates_in_order(self):
        target: dict[str, list[str]] = {}
        merge_into(target, [("a", ("1",)), ("b", ()), ("a", ("2", "3"))])
        assert target == {"a": ["1", "2", "3"], "b": []}


class TestMergeContributions:
    def test_per_key_counts_sum(self):
        merged = merge_contributions(C1, C2, C3)
        assert len(merged["pkgA"]) == 2
        assert len(merged["pkgB"]) == 2
        assert len(merged["pkgC"]) == 2
        assert entry_count(merged) == 6

    @pytest.mark.parametrize("order", list(permutations([C1, C2, C3])))
    def test_counts_independent_of_order(self, order):
        merged = merge_contributions(*order)
        assert {key: len(entries) for key, entries in merged.items()} == {
            "pkgA": 2,
            "pkgB": 2,
            "pkgC": 2,
        }

    def test_arrival_order_within_key(self):
        assert merge_contributions(C2, C1)["pkgA"] == ["impl Z for W", "impl X for Y"]

    def test_associative(self):
        left = merge_contributions(merge_contributions(C1, C2), C3)
        right = merge_contributions(C1, merge_contributions(C2, C3))
        flat = merge_contributions(C1, C2, C3)
        assert left == right == flat

    def test_inputs_not_mutated(self):
        c1 = {"pkgA": ["impl X for Y"]}
        merge_contributions(c1, {"pkgA": ["impl Z for W"]})
        assert c1 == {"pkgA": ["impl X for Y"]}

    def test_no_contributions(self):
        assert merge_contributions() == {}
