"""Unit tests for permalink resolution and slug generation."""

from __future__ import annotations

import datetime as dt
import typing as typ
from pathlib import Path

import pytest

from softwart_pages.errors import PermalinkError
from softwart_pages.generator.models import Document
from softwart_pages.generator.permalink import (
    output_file_for,
    resolve_permalink,
    slugify,
)


def _document(
    metadata: dict[str, typ.Any] | None = None,
    *,
    relative_path: str = "_posts/2021-01-01-hello-world.md",
    date: dt.datetime | None = None,
) -> Document:
    return Document(
        source=Path("/site") / relative_path,
        relative_path=relative_path,
        metadata=metadata or {},
        body="",
        is_post=relative_path.startswith("_posts/"),
        date=date,
    )


def test_title_token_is_slugified() -> None:
    doc = _document({"title": "Hello World"})
    assert resolve_permalink("/:title/", doc) == "/hello-world/"


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Hello World", "hello-world"),
        ("  Why public static methods hurt!  ", "why-public-static-methods-hurt"),
        ("C++ & Java: a comparison", "c-java-a-comparison"),
        ("Café à Paris", "cafe-a-paris"),
        ("already-a-slug", "already-a-slug"),
    ],
)
def test_slugify(title: str, expected: str) -> None:
    assert slugify(title) == expected


def test_date_tokens_use_document_date() -> None:
    doc = _document(
        {"title": "Hello"},
        date=dt.datetime(2021, 3, 7, 9, 5, tzinfo=dt.UTC),
    )
    assert (
        resolve_permalink("/:year/:month/:day/:title.html", doc)
        == "/2021/03/07/hello.html"
    )
    assert resolve_permalink("/:short_year/:i_month/:i_day/:title/", doc) == "/21/3/7/hello/"


def test_missing_title_raises() -> None:
    doc = _document({})
    with pytest.raises(PermalinkError) as excinfo:
        resolve_permalink("/:title/", doc)
    assert excinfo.value.token == "title"
    assert "_posts/2021-01-01-hello-world.md" in str(excinfo.value)


def test_missing_date_raises() -> None:
    doc = _document({"title": "Hello"})
    with pytest.raises(PermalinkError, match=":year"):
        resolve_permalink("/:year/:title/", doc)


def test_empty_categories_collapse() -> None:
    doc = _document(
        {"title": "Hello"}, date=dt.datetime(2020, 1, 1, tzinfo=dt.UTC)
    )
    assert (
        resolve_permalink("/:categories/:year/:title:output_ext", doc)
        == "/2020/hello.html"
    )


def test_categories_become_path_segments() -> None:
    doc = _document({"title": "Hello", "categories": "Java Design"})
    assert resolve_permalink("/:categories/:title/", doc) == "/java/design/hello/"


def test_slug_token_prefers_metadata_slug() -> None:
    doc = _document({"title": "Hello World", "slug": "custom-slug"})
    assert resolve_permalink("/:slug/", doc) == "/custom-slug/"


def test_page_path_pattern() -> None:
    doc = _document({"title": "About"}, relative_path="about.md")
    assert resolve_permalink("/:path:output_ext", doc) == "/about.html"


def test_index_pages_map_to_directory() -> None:
    doc = _document({}, relative_path="blog/index.html")
    assert resolve_permalink("/:path:output_ext", doc) == "/blog/"


def test_longest_token_wins() -> None:
    doc = _document({"title": "Hello"}, date=dt.datetime(2020, 1, 1, tzinfo=dt.UTC))
    assert resolve_permalink("/:short_year-:title", doc) == "/20-hello"


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("/", "index.html"),
        ("/hello-world/", "hello-world/index.html"),
        ("/about.html", "about.html"),
        ("/2020/01/post", "2020/01/post.html"),
        ("/feed.xml", "feed.xml"),
    ],
)
def test_output_file_for(url: str, expected: str) -> None:
    assert output_file_for(url) == expected
