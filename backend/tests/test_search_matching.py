"""Tests for substring matching, positional scoring, and snippet extraction."""

import pytest

from app.search.matching import (
    SNIPPET_MAX_LENGTH,
    best_snippet,
    build_snippet,
    contains,
    find_match,
    score_match,
)

# ---------------------------------------------------------------------------
# 1. find_match
# ---------------------------------------------------------------------------


class TestFindMatch:
    """Case-insensitive first-occurrence lookup."""

    def test_returns_first_index(self):
        assert find_match("deploy the deploy script", "deploy") == 0

    def test_ignores_case_on_both_sides(self):
        assert find_match("Weekly METRICS digest", "metrics") == 7
        assert find_match("weekly metrics digest", "METRICS") == 7

    def test_no_match_returns_none(self):
        assert find_match("kanban board", "calendar") is None

    @pytest.mark.parametrize("haystack", [None, ""])
    def test_missing_haystack_is_no_match(self, haystack):
        assert find_match(haystack, "anything") is None

    def test_regex_metacharacters_are_literal(self):
        assert find_match("cost is $5.00 (approx)", "(approx)") == 14
        assert find_match("a.c", "a*c") is None

    def test_contains(self):
        assert contains("Mission Control", "control")
        assert not contains(None, "control")


# ---------------------------------------------------------------------------
# 2. score_match
# ---------------------------------------------------------------------------


class TestScoreMatch:
    """Field scores fall in 0.3-0.5 and favour earlier matches."""

    def test_no_match_scores_zero(self):
        assert score_match("roadmap", "budget") == 0.0

    def test_none_scores_zero(self):
        assert score_match(None, "budget") == 0.0

    def test_match_at_start_scores_half(self):
        assert score_match("budget review", "budget") == pytest.approx(0.5)

    def test_exact_equal_text_scores_half(self):
        assert score_match("Budget", "budget") == pytest.approx(0.5)

    def test_later_match_scores_lower(self):
        early = score_match("budget review for q3", "review")
        late = score_match("q3 planning and budget review", "review")
        assert 0.3 <= late < early <= 0.5

    def test_positional_formula(self):
        # index 5 in a 10-character string: 0.3 + 0.2 * (1 - 0.5)
        assert score_match("abcdefghij", "fgh") == pytest.approx(0.4)


# ---------------------------------------------------------------------------
# 3. build_snippet
# ---------------------------------------------------------------------------


class TestBuildSnippet:
    """Excerpts centred on the match with ellipsis markers."""

    def test_no_match_returns_head_without_ellipsis(self):
        text = "x" * 300
        result = build_snippet(text, "needle")
        assert result == text[:SNIPPET_MAX_LENGTH]
        assert "..." not in result

    def test_no_match_short_text_unchanged(self):
        assert build_snippet("short line", "needle") == "short line"

    def test_short_text_with_match_has_no_ellipsis(self):
        assert build_snippet("the quick brown fox", "brown") == "the quick brown fox"

    def test_small_window_contains_match_and_is_bounded(self):
        result = build_snippet("the quick brown fox jumps", "brown", max_length=10)
        assert "brown" in result
        assert len(result) <= 10 + 6

    def test_small_window_exact_output(self):
        # match at 10, start = 10 - 3 = 7, end = 17
        result = build_snippet("the quick brown fox jumps", "brown", max_length=10)
        assert result == "...ck brown f..."

    def test_match_near_start_has_no_prefix(self):
        text = "budget " + "y" * 400
        result = build_snippet(text, "budget")
        assert not result.startswith("...")
        assert result.endswith("...")

    def test_match_at_end_has_no_suffix(self):
        text = "z" * 400 + " budget"
        result = build_snippet(text, "budget")
        assert result.startswith("...")
        assert not result.endswith("...")
        assert "budget" in result

    def test_window_starts_a_third_before_match(self):
        text = "a" * 200 + "MATCH" + "b" * 200
        result = build_snippet(text, "match", max_length=30)
        # start = 200 - 10 = 190, end = 220
        assert result == "..." + text[190:220] + "..."

    def test_window_is_trimmed(self):
        text = "x" * 50 + "     needle     " + "y" * 50
        result = build_snippet(text, "needle", max_length=12)
        assert result == "...needle..."

    def test_case_insensitive_match(self):
        result = build_snippet("a" * 100 + "Deploy" + "b" * 100, "DEPLOY", max_length=30)
        assert "Deploy" in result


# ---------------------------------------------------------------------------
# 4. best_snippet
# ---------------------------------------------------------------------------


class TestBestSnippet:
    """Preference-ordered snippet selection."""

    def test_first_matching_candidate_wins(self):
        result = best_snippet(["no hit here", "hit in second", "hit in third"], "hit in")
        assert result == "hit in second"

    def test_skips_none_candidates(self):
        assert best_snippet([None, "launch plan"], "launch") == "launch plan"

    def test_falls_back_to_first_non_empty(self):
        long_text = "w" * 500
        assert best_snippet([None, "", long_text, "other"], "missing") == long_text[:SNIPPET_MAX_LENGTH]

    def test_all_empty_returns_empty_string(self):
        assert best_snippet([None, ""], "anything") == ""
