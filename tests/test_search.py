"""
Song resolver tests: index, then exact, then fuzzy (edit distance <= 6).
"""

import pytest

from utils.search import MatchKind, normalize, parse_index, resolve_song


@pytest.fixture
def files(make_files):
    return make_files('one.mp3', 'two.mp3', 'three.mp3')


class TestParseIndex:
    @pytest.mark.parametrize("text,expected", [
        ("2", 2), (" 12 ", 12), ("0", 0), ("-1", -1), ("+3", 3),
        ("2abc", 2), ("12 songs", 12), ("1.5", 1), ("1 2", 1),
    ])
    def test_integers(self, text, expected):
        assert parse_index(text) == expected

    @pytest.mark.parametrize("text", ["two", "", "abc2", "+", " - 3"])
    def test_not_integers(self, text):
        assert parse_index(text) is None


class TestResolveSong:
    def test_index_is_one_based(self, files):
        result = resolve_song("2", files)
        assert result.ok
        assert result.selected.display_name == 'two'
        assert result.match_kind is MatchKind.INDEX

    def test_leading_number_is_an_index(self, files):
        result = resolve_song("2abc", files)
        assert result.selected.display_name == 'two'
        assert result.match_kind is MatchKind.INDEX

    @pytest.mark.parametrize("query", ["0", "4", "-1"])
    def test_index_out_of_range(self, files, query):
        result = resolve_song(query, files)
        assert not result.ok
        assert "between 1 and 3" in result.error

    def test_exact_match_ignores_case_and_whitespace(self, files):
        result = resolve_song("  THREE ", files)
        assert result.selected.display_name == 'three'
        assert result.match_kind is MatchKind.EXACT
        assert result.distance is None

    def test_fuzzy_match_reports_distance(self, files):
        result = resolve_song("too", files)
        assert result.selected.display_name == 'two'
        assert result.match_kind is MatchKind.FUZZY
        assert result.distance == 1

    def test_fuzzy_threshold_is_inclusive(self, make_files):
        files = make_files('abcdefghij.mp3')
        assert resolve_song("abcd", files).distance == 6
        assert not resolve_song("abc", files).ok

    def test_far_query_is_rejected(self, files):
        result = resolve_song("pepperoni overload", files)
        assert not result.ok
        assert result.selected is None
        assert "pepperoni overload" in result.error

    def test_fuzzy_tie_goes_to_first_file(self, make_files):
        files = make_files('cat.mp3', 'bat.mp3')
        assert resolve_song("hat", files).selected.display_name == 'cat'

    def test_number_never_falls_through_to_names(self, make_files):
        files = make_files('7.mp3', 'one.mp3')
        result = resolve_song("7", files)
        assert not result.ok

    def test_empty_library(self):
        assert not resolve_song("anything", []).ok

    def test_braces_in_query_are_kept(self, files):
        result = resolve_song("{not a song at all, really}", files)
        assert "{not a song at all, really}" in result.error


def test_normalize():
    assert normalize("  Hopes And Dreams ") == "hopes and dreams"
