"""Tests for the diff generator and change statistics."""

import pytest

from edit_gate.editing.diff import (
    analyze_edit_impact, calculate_differential_stats, diff_contents,
    generate_unified_diff,
)


class TestGenerateUnifiedDiff:
    def test_identical_inputs_give_empty_diff(self):
        result = generate_unified_diff(["a", "b"], ["a", "b"])
        assert result.text == ""
        assert result.is_empty
        assert result.total == 0

    def test_single_line_change(self):
        result = generate_unified_diff(
            ["a", "b", "c"], ["a", "B", "c"],
            from_file="a/f.txt", to_file="b/f.txt",
        )
        assert result.text == (
            "--- a/f.txt\n"
            "+++ b/f.txt\n"
            "@@ -1,3 +1,3 @@\n"
            " a\n"
            "-b\n"
            "+B\n"
            " c"
        )
        assert result.additions == 1
        assert result.deletions == 1

    def test_pure_insertion(self):
        result = generate_unified_diff(["a", "b"], ["a", "x", "b"])
        assert result.additions == 1
        assert result.deletions == 0
        assert "+x" in result.text.splitlines()

    def test_pure_deletion(self):
        result = generate_unified_diff(["a", "x", "b"], ["a", "b"])
        assert result.additions == 0
        assert result.deletions == 1
        assert "-x" in result.text.splitlines()

    def test_distant_changes_form_separate_hunks(self):
        old = [str(i) for i in range(20)]
        new = list(old)
        new[2] = "X"
        new[15] = "Y"
        result = generate_unified_diff(old, new, context=3)
        assert len(result.hunks) == 2
        assert result.hunks[0].header == "@@ -1,6 +1,6 @@"

    def test_nearby_changes_share_a_hunk(self):
        old = [str(i) for i in range(20)]
        new = list(old)
        new[5] = "X"
        new[9] = "Y"
        result = generate_unified_diff(old, new, context=3)
        assert len(result.hunks) == 1

    def test_zero_context(self):
        result = generate_unified_diff(["a", "b", "c"], ["a", "B", "c"], context=0)
        assert result.hunks[0].lines == ["-b", "+B"]
        assert result.hunks[0].header == "@@ -2 +2 @@"

    def test_difflib_algorithm_same_format(self):
        greedy = generate_unified_diff(["a", "b", "c"], ["a", "B", "c"])
        minimal = generate_unified_diff(["a", "b", "c"], ["a", "B", "c"],
                                        algorithm="difflib")
        assert greedy.text == minimal.text

    def test_unknown_algorithm(self):
        with pytest.raises(ValueError):
            generate_unified_diff(["a"], ["b"], algorithm="patience")

    def test_completely_different_inputs(self):
        result = generate_unified_diff(["a", "b"], ["c", "d", "e"])
        assert result.deletions == 2
        assert result.additions == 3

    def test_applying_hunks_reproduces_new(self):
        old = ["import os", "", "def f():", "    return 1", "", "def g():", "    pass"]
        new = ["import os", "import sys", "", "def f():", "    return 2", "",
               "def g():", "    pass", "", "def h():", "    pass"]
        result = generate_unified_diff(old, new, context=100)
        rebuilt = [line[1:] for line in result.hunks[0].lines if not line.startswith("-")]
        original = [line[1:] for line in result.hunks[0].lines if not line.startswith("+")]
        assert rebuilt == new
        assert original == old


class TestDiffContents:
    def test_labels_use_path(self):
        result = diff_contents("one\n", "two\n", path="docs/a.md")
        assert result.text.startswith("--- a/docs/a.md\n+++ b/docs/a.md\n")

    def test_new_file(self):
        result = diff_contents("", "hello\n", path="new.txt")
        assert result.additions == 1
        assert result.deletions == 0


class TestDifferentialStats:
    def test_positional_classification(self):
        stats = calculate_differential_stats(["a", "b", "c"], ["a", "B", "c", "d"])
        assert stats.lines_added == 1
        assert stats.lines_removed == 0
        assert stats.lines_modified == 1
        assert stats.lines_unchanged == 2
        assert stats.total_changes == 2
        assert stats.similarity == 50
        assert stats.size_change == 1
        assert stats.impact.level == "significant"
        assert stats.impact.description.endswith("(mostly additions)")

    def test_identical(self):
        stats = calculate_differential_stats(["a", "b"], ["a", "b"])
        assert stats.similarity == 100
        assert stats.impact.level == "minimal"
        assert stats.impact.description == "Tiny changes - safe to apply"

    def test_both_empty(self):
        stats = calculate_differential_stats([], [])
        assert stats.similarity == 100
        assert stats.total_changes == 0

    def test_character_counts(self):
        stats = calculate_differential_stats(["ab", "c"], ["abc"])
        assert stats.characters_old == 4
        assert stats.characters_new == 3
        assert stats.characters_delta == -1

    def test_to_dict_shape(self):
        data = calculate_differential_stats(["a"], ["b"]).to_dict()
        assert data["character_changes"] == {"old": 1, "new": 1, "delta": 0}
        assert data["impact"]["level"] == "major"


class TestAnalyzeEditImpact:
    def test_mostly_deletions(self):
        old = [f"line {i}" for i in range(10)]
        stats = calculate_differential_stats(old, old[:2])
        assert stats.impact.level == "major"
        assert stats.impact.description == (
            "Substantial rewrite - review carefully (mostly deletions)"
        )

    def test_mostly_modifications(self):
        stats = calculate_differential_stats(["a", "b", "c", "d"], ["A", "B", "C", "d"])
        assert stats.impact.level == "significant"
        assert stats.impact.description.endswith("(mostly modifications)")

    @pytest.mark.parametrize("changed,level", [
        (3, "minimal"),
        (10, "minor"),
        (30, "moderate"),
        (60, "significant"),
        (90, "major"),
    ])
    def test_tiers(self, changed, level):
        old = [f"line {i}" for i in range(100)]
        new = [f"changed {i}" if i < changed else line for i, line in enumerate(old)]
        stats = calculate_differential_stats(old, new)
        assert analyze_edit_impact(stats, 100, 100).level == level
