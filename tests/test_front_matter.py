"""Unit tests for front-matter splitting and post filename parsing."""

from __future__ import annotations

import datetime as dt

import pytest

from softwart_pages.errors import FrontMatterError
from softwart_pages.front_matter import parse_front_matter, post_filename_metadata


def test_splits_metadata_and_body() -> None:
    raw = b"---\nlayout: post\ntitle: Avoid public static utils\ntags: [java, oop]\n---\nBody text.\n"
    parsed = parse_front_matter(raw)
    assert parsed.has_front_matter
    assert parsed.metadata == {
        "layout": "post",
        "title": "Avoid public static utils",
        "tags": ["java", "oop"],
    }
    assert parsed.body == "Body text.\n"


def test_empty_header_is_empty_mapping() -> None:
    parsed = parse_front_matter(b"---\n---\n<p>hi</p>\n")
    assert parsed.metadata == {}
    assert parsed.body == "<p>hi</p>\n"


def test_only_first_delimiter_pair_is_consumed() -> None:
    parsed = parse_front_matter(b"---\ntitle: A\n---\nintro\n---\nafter rule\n")
    assert parsed.metadata == {"title": "A"}
    assert parsed.body == "intro\n---\nafter rule\n"


def test_dots_close_the_header() -> None:
    parsed = parse_front_matter(b"---\ntitle: A\n...\nbody\n")
    assert parsed.metadata == {"title": "A"}


def test_bom_and_crlf_are_tolerated() -> None:
    parsed = parse_front_matter(b"\xef\xbb\xbf---\r\ntitle: A\r\n---\r\nbody\r\n")
    assert parsed.metadata == {"title": "A"}
    assert parsed.body == "body\r\n"


def test_file_without_front_matter_is_static() -> None:
    raw = b"\x89PNG\r\n\x1a\n\x00binary"
    parsed = parse_front_matter(raw)
    assert not parsed.has_front_matter
    assert parsed.metadata == {}
    assert parsed.body is raw


def test_marker_must_be_on_first_line() -> None:
    raw = b"intro\n---\ntitle: A\n---\n"
    assert not parse_front_matter(raw).has_front_matter


@pytest.mark.parametrize(
    "raw",
    [
        b"---\ntitle: A\nbody without closing\n",
        b"---\n",
        b"---\ntitle: A\n--\n",
    ],
)
def test_unclosed_front_matter_raises(raw: bytes) -> None:
    with pytest.raises(FrontMatterError, match="never closed"):
        parse_front_matter(raw, source="_posts/broken.md")


def test_error_names_the_source() -> None:
    with pytest.raises(FrontMatterError) as excinfo:
        parse_front_matter(b"---\ntitle: A\n", source="_posts/broken.md")
    assert excinfo.value.source == "_posts/broken.md"
    assert "_posts/broken.md" in str(excinfo.value)


def test_invalid_yaml_raises() -> None:
    with pytest.raises(FrontMatterError, match="not valid YAML"):
        parse_front_matter(b"---\ntitle: [oops\n---\nbody\n")


def test_non_mapping_header_raises() -> None:
    with pytest.raises(FrontMatterError, match="mapping"):
        parse_front_matter(b"---\n- a\n- b\n---\nbody\n")


def test_post_filename_metadata() -> None:
    assert post_filename_metadata("2016-11-20-avoid-public-static-methods.md") == {
        "date": dt.date(2016, 11, 20),
        "slug": "avoid-public-static-methods",
    }
    assert post_filename_metadata("2016-13-40-bad-date.md") == {}
    assert post_filename_metadata("about.md") == {}
