"""Tests for the site assembler and its sitemap/feed generators.

The assembler is exercised with hand-built :class:`RenderedPage` objects so
collision detection, write planning, and artefact ordering can be checked
without running the full pipeline.
"""

from __future__ import annotations

import datetime as dt
import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from softwart_pages.assembler import SiteAssembler
from softwart_pages.config import build_site_config
from softwart_pages.errors import OutputCollisionError
from softwart_pages.front_matter import parse_front_matter
from softwart_pages.generator.models import Document, RenderedPage
from softwart_pages.plugins import FeedGenerator, SitemapGenerator, resolve_generators

if typ.TYPE_CHECKING:
    from softwart_pages.config import SiteConfig


def _site(**overrides: typ.Any) -> SiteConfig:
    return build_site_config(
        {
            "name": "SoftwArt Blog",
            "author": "Mateusz",
            "url": "https://blog.example.invalid",
            "gems": ["jekyll-sitemap", "jekyll-feed"],
            **overrides,
        }
    )


def _page(
    relative_path: str,
    url: str,
    *,
    title: str | None = None,
    date: dt.datetime | None = None,
    metadata: dict[str, typ.Any] | None = None,
) -> RenderedPage:
    meta = dict(metadata or {})
    if title is not None:
        meta["title"] = title
    document = Document(
        source=Path("/site") / relative_path,
        relative_path=relative_path,
        metadata=meta,
        body="",
        is_post=relative_path.startswith("_posts/"),
        date=date,
        output_path=url,
    )
    return RenderedPage(
        document=document,
        url=url,
        content=f"<html>{relative_path}</html>".encode(),
        body_html=f"<p>{title}</p>",
        excerpt_html=f"<p>{title}</p>",
    )


def _utc(year: int, month: int = 1, day: int = 1) -> dt.datetime:
    return dt.datetime(year, month, day, tzinfo=dt.UTC)


def test_writes_pages_and_artifacts(tmp_path: Path) -> None:
    pages = [
        _page("_posts/2020-01-01-a.md", "/a/", title="A", date=_utc(2020)),
        _page("about.md", "/about.html", title="About", date=_utc(2019)),
    ]
    written = SiteAssembler(_site(), tmp_path).assemble(pages)
    relative = sorted(path.relative_to(tmp_path).as_posix() for path in written)
    assert relative == ["a/index.html", "about.html", "feed.xml", "sitemap.xml"]
    content = (tmp_path / "a" / "index.html").read_bytes()
    assert content == b"<html>_posts/2020-01-01-a.md</html>"


def test_collision_names_both_sources_and_writes_nothing(tmp_path: Path) -> None:
    pages = [
        _page("_posts/2020-01-01-hello-world.md", "/hello-world/", title="Hello World"),
        _page("_posts/2021-01-01-hello-world.md", "/hello-world/", title="Hello World"),
        _page("about.md", "/about.html", title="About"),
    ]
    with pytest.raises(OutputCollisionError) as excinfo:
        SiteAssembler(_site(), tmp_path / "out").assemble(pages)
    error = excinfo.value
    assert {error.first, error.second} == {
        "_posts/2020-01-01-hello-world.md",
        "_posts/2021-01-01-hello-world.md",
    }
    assert error.output_path == "/hello-world/index.html"
    assert not (tmp_path / "out").exists()


def test_directory_and_index_urls_collide(tmp_path: Path) -> None:
    pages = [
        _page("a.md", "/docs/", title="A"),
        _page("b.html", "/docs/index.html", title="B"),
    ]
    with pytest.raises(OutputCollisionError):
        SiteAssembler(_site(gems=[]), tmp_path).plan(pages)


def test_page_colliding_with_feed_is_reported(tmp_path: Path) -> None:
    pages = [_page("feed.html", "/feed.xml", title="Feed", date=_utc(2020))]
    with pytest.raises(OutputCollisionError) as excinfo:
        SiteAssembler(_site(), tmp_path).plan(pages)
    assert excinfo.value.second == "<feed>"


def test_feed_orders_newest_first() -> None:
    pages = [
        _page("_posts/2020-01-01-old.md", "/old/", title="Old", date=_utc(2020)),
        _page("_posts/2021-01-01-new.md", "/new/", title="New", date=_utc(2021)),
    ]
    artifact = FeedGenerator(_site()).generate(pages)
    soup = BeautifulSoup(artifact.content, "html.parser")
    published = [entry.published.get_text() for entry in soup.find_all("entry")]
    assert published == ["2021-01-01T00:00:00+00:00", "2020-01-01T00:00:00+00:00"]
    assert soup.feed.updated.get_text() == "2021-01-01T00:00:00+00:00"


def test_feed_ties_break_on_source_path() -> None:
    pages = [
        _page("_posts/b.md", "/b/", title="B", date=_utc(2020)),
        _page("_posts/a.md", "/a/", title="A", date=_utc(2020)),
        _page("_posts/c.md", "/c/", title="C", date=_utc(2019)),
    ]
    artifact = FeedGenerator(_site()).generate(pages)
    soup = BeautifulSoup(artifact.content, "html.parser")
    titles = [entry.title.get_text() for entry in soup.find_all("entry")]
    assert titles == ["A", "B", "C"]


def test_feed_excludes_pages_and_respects_limit() -> None:
    pages = [
        _page(f"_posts/2020-01-0{day}-p.md", f"/p{day}/", title=f"P{day}", date=_utc(2020, 1, day))
        for day in range(1, 6)
    ]
    pages.append(_page("about.md", "/about.html", title="About", date=_utc(2030)))
    site = _site(feed={"posts_limit": 2})
    soup = BeautifulSoup(FeedGenerator(site).generate(pages).content, "html.parser")
    titles = [entry.title.get_text() for entry in soup.find_all("entry")]
    assert titles == ["P5", "P4"]


def test_feed_links_are_absolute() -> None:
    pages = [_page("_posts/a.md", "/a/", title="A", date=_utc(2020))]
    soup = BeautifulSoup(FeedGenerator(_site()).generate(pages).content, "html.parser")
    assert soup.entry.id.get_text() == "https://blog.example.invalid/a/"


def test_sitemap_lists_rendered_pages_sorted() -> None:
    pages = [
        _page("z.md", "/z.html", title="Z", date=_utc(2020)),
        _page("a.md", "/a.html", title="A", metadata={"last_modified_at": dt.date(2022, 5, 1)}),
        _page("hidden.md", "/hidden.html", title="H", date=_utc(2020), metadata={"sitemap": False}),
    ]
    artifact = SitemapGenerator(_site()).generate(pages)
    assert artifact.path == "sitemap.xml"
    soup = BeautifulSoup(artifact.content, "html.parser")
    locs = [loc.get_text() for loc in soup.find_all("loc")]
    assert locs == [
        "https://blog.example.invalid/a.html",
        "https://blog.example.invalid/z.html",
    ]
    lastmods = [tag.get_text() for tag in soup.find_all("lastmod")]
    assert lastmods == ["2022-05-01T00:00:00+00:00", "2020-01-01T00:00:00+00:00"]


def test_unknown_plugins_are_ignored() -> None:
    site = _site(gems=["jekyll-sitemap", "jekyll-seo-tag", "sitemap"])
    assert [generator.name for generator in resolve_generators(site)] == ["sitemap"]


def test_sitemap_parses_textual_last_modified() -> None:
    parsed = parse_front_matter(
        b"---\ntitle: A\nlast_modified_at: 2022-05-01 10:00:00 +0200\n---\nBody\n",
        source="a.md",
    )
    pages = [
        _page("a.md", "/a.html", metadata=parsed.metadata),
        _page("b.md", "/b.html", metadata={"last_modified_at": "2022-05-01 10:00:00"}),
    ]
    artifact = SitemapGenerator(_site(timezone="Europe/Warsaw")).generate(pages)
    soup = BeautifulSoup(artifact.content, "html.parser")
    lastmods = [tag.get_text() for tag in soup.find_all("lastmod")]
    assert lastmods == ["2022-05-01T08:00:00+00:00", "2022-05-01T08:00:00+00:00"]


def test_feed_updated_uses_textual_last_modified() -> None:
    pages = [
        _page(
            "_posts/2020-01-01-a.md",
            "/a/",
            title="A",
            date=_utc(2020),
            metadata={"last_modified_at": "2021-03-04T05:06:07Z"},
        )
    ]
    soup = BeautifulSoup(FeedGenerator(_site()).generate(pages).content, "html.parser")
    assert soup.entry.updated.get_text() == "2021-03-04T05:06:07+00:00"
