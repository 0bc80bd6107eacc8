"""
Tests for the Levenshtein edit distance.

Covers:
- Empty-string base cases
- Classic textbook distances
- Symmetry
"""

import pytest

from inventory_engines.levenshtein import levenshtein_distance


class TestBaseCases:
    """Distances involving empty or identical strings."""

    def test_both_empty(self):
        """Two empty strings are distance 0."""
        assert levenshtein_distance("", "") == 0

    def test_one_empty_is_other_length(self):
        """Transforming to/from empty costs the other string's length."""
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abcd", "") == 4

    def test_identical_strings(self):
        """Equal strings are distance 0."""
        assert levenshtein_distance("abc", "abc") == 0


class TestKnownDistances:
    """Textbook examples."""

    def test_kitten_sitting(self):
        """Two substitutions plus one insertion."""
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_single_insertion(self):
        assert levenshtein_distance("widget", "widgett") == 1

    def test_single_substitution(self):
        assert levenshtein_distance("gloves", "glover") == 1

    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ("flaw", "lawn", 2),
            ("gadget", "widget", 2),
            ("gadget", "widgett", 3),
            ("saturday", "sunday", 3),
        ],
    )
    def test_table(self, a, b, expected):
        assert levenshtein_distance(a, b) == expected

    def test_case_sensitive(self):
        """Callers normalize case; the raw function does not."""
        assert levenshtein_distance("Gloves", "gloves") == 1

    def test_symmetric(self):
        assert levenshtein_distance("paper towels", "paper towel") == \
            levenshtein_distance("paper towel", "paper towels")
