"""
Pure text helpers for posts: permalink derivation, tag extraction and
paragraph encoding.
"""

import re
from typing import Iterable, Optional, Union

_WHITESPACE_RUN = re.compile(r"\s+")
_WHITESPACE = re.compile(r"\s")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")
_LINE_BREAK = re.compile(r"\r?\n")

PARAGRAPH_MARKUP = "<p>"


def derive_permalink(title: str) -> str:
    """
    Derive the permalink slug for a post title.

    Whitespace runs collapse to a single "_", every character that is not an
    ASCII letter or digit is then dropped (the joiner included), and the
    result is lowercased. Deterministic: the same title always yields the
    same slug.

        >>> derive_permalink("Hello, World!")
        'helloworld'
    """
    joined = _WHITESPACE_RUN.sub("_", title)
    return _NON_ALNUM.sub("", joined).lower()


def extract_tags(raw: Union[str, Iterable[str], None]) -> list[str]:
    """
    Normalize raw tag input into an ordered, de-duplicated list.

    Accepts a single comma-separated string or an iterable of such strings.
    All whitespace is removed, entries are split on commas, empty entries are
    discarded, and exact-string duplicates are dropped keeping the first one.
    Case is preserved, so "foo" and "Foo" are distinct tags.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = [raw]

    cleaned: list[str] = []
    for chunk in raw:
        for tag in _WHITESPACE.sub("", chunk).split(","):
            if tag and tag not in cleaned:
                cleaned.append(tag)
    return cleaned


def encode_paragraphs(body: str) -> str:
    """Replace line breaks with paragraph markup."""
    return _LINE_BREAK.sub(PARAGRAPH_MARKUP, body)


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Treat an empty string as absent."""
    if value is None or value == "":
        return None
    return value
