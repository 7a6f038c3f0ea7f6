"""Unit tests for permalink, tag and paragraph helpers."""

import pytest

from blogcore.kernel.text import (
    blank_to_none,
    derive_permalink,
    encode_paragraphs,
    extract_tags,
)


class TestDerivePermalink:
    """Tests for derive_permalink."""

    def test_punctuation_and_whitespace_removed(self):
        assert derive_permalink("Hello, World!") == "helloworld"

    def test_surrounding_whitespace_dropped(self):
        assert derive_permalink("  padded title \n") == "paddedtitle"

    def test_deterministic(self):
        title = "  Mixed CASE\ttitle\n with   gaps "
        assert derive_permalink(title) == derive_permalink(title)
        assert derive_permalink(title) == "mixedcasetitlewithgaps"

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Python 3.12 Released", "python312released"),
            ("snake_case_title", "snakecasetitle"),
            ("Café au lait", "cafaulait"),
            ("!!!", ""),
        ],
    )
    def test_only_ascii_alphanumerics_survive(self, title, expected):
        assert derive_permalink(title) == expected


class TestExtractTags:
    """Tests for extract_tags."""

    def test_case_sensitive_dedup(self):
        assert extract_tags(["foo", "Foo", "bar"]) == ["foo", "Foo", "bar"]

    def test_comma_separated_string(self):
        assert extract_tags(" foo , bar,,baz , foo ") == ["foo", "bar", "baz"]

    def test_list_entries_are_split_on_commas(self):
        assert extract_tags(["a,b", "b, c", ""]) == ["a", "b", "c"]

    def test_inner_whitespace_removed(self):
        assert extract_tags("big data, machine\tlearning") == ["bigdata", "machinelearning"]

    def test_string_and_list_agree(self):
        assert extract_tags("x, y, x") == extract_tags(["x", " y", "x"])

    def test_none_and_empty(self):
        assert extract_tags(None) == []
        assert extract_tags("") == []
        assert extract_tags(" , ,") == []


class TestEncodeParagraphs:
    """Tests for encode_paragraphs."""

    def test_unix_and_windows_breaks(self):
        assert encode_paragraphs("one\ntwo\r\nthree") == "one<p>two<p>three"

    def test_no_breaks_unchanged(self):
        assert encode_paragraphs("body text") == "body text"


def test_blank_to_none():
    assert blank_to_none("") is None
    assert blank_to_none(None) is None
    assert blank_to_none("bob@example.com") == "bob@example.com"
