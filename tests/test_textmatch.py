"""Tests for search matching and highlighting."""

import pytest

from extractly.textmatch import Segment, contains, highlight, preview, row_matches


def test_empty_term_returns_whole_text_unmatched():
    assert highlight("Point 1", "") == [Segment("Point 1", False)]


def test_highlight_marks_all_occurrences_case_insensitively():
    segments = highlight("Search the search results", "SEARCH")
    assert segments == [
        Segment("Search", True),
        Segment(" the ", False),
        Segment("search", True),
        Segment(" results", False),
    ]


def test_highlight_match_at_end():
    assert highlight("Point 2", "2") == [Segment("Point ", False), Segment("2", True)]


def test_highlight_non_overlapping():
    segments = highlight("aaa", "aa")
    assert [s.matched for s in segments] == [True, False]
    assert "".join(s.text for s in segments) == "aaa"


@pytest.mark.parametrize("term", ["(", "[a-z]+", ".*", "a|b", "\\", "$^", "?"])
def test_regex_metacharacters_are_literal(term):
    text = f"before {term} after"
    segments = highlight(text, term)
    assert "".join(s.text for s in segments) == text
    assert [s.text for s in segments if s.matched] == [term]
    assert contains(text, term)


def test_metacharacters_do_not_match_as_patterns():
    assert not contains("abc", ".*x")
    assert highlight("abc", "a.c") == [Segment("abc", False)]


@pytest.mark.parametrize("text,term", [
    ("Point 1", "point"),
    ("Point 1", "zzz"),
    ("", "x"),
    ("ÉCOLE école", "école"),
    ("mixed CaSe text", "case"),
])
def test_concatenation_and_contains_agree(text, term):
    segments = highlight(text, term)
    assert "".join(s.text for s in segments) == text
    assert contains(text, term) == any(s.matched for s in segments)


def test_contains_empty_term_matches_everything():
    assert contains("", "")
    assert contains("anything", "")


def test_row_matches_any_search_field():
    fields = {"url": "https://example.com", "content": "Body", "summary": "Short"}
    assert row_matches(fields, ("url", "content"), "example")
    assert row_matches(fields, ("url", "content"), "BODY")
    assert not row_matches(fields, ("url", "content"), "short")
    assert row_matches(fields, ("url",), "")


def test_preview_short_text_is_unchanged():
    assert preview("short", "", 300) == [Segment("short")]


def test_preview_truncates_and_appends_ellipsis():
    segments = preview("a" * 301, "", 300)
    assert segments == [Segment("a" * 300), Segment("...")]


def test_preview_highlights_only_kept_prefix():
    text = "x" * 298 + "needle"
    segments = preview(text, "needle", 300)
    assert not any(s.matched for s in segments)
    assert "".join(s.text for s in segments) == "x" * 298 + "ne..."


def test_preview_highlights_match_inside_prefix():
    segments = preview("find the Needle here", "needle", 300)
    assert Segment("Needle", True) in segments
