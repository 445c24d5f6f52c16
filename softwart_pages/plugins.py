"""Auxiliary generators producing site-wide artefacts (sitemap, Atom feed).

Each generator is registered under the plugin names a Jekyll config lists in
``plugins:``/``gems:`` and implements the same capability: given every
rendered page, produce one :class:`AuxiliaryArtifact`. They run only after all
pages have resolved their URLs, so they see the complete site.

Examples
--------
>>> from softwart_pages.config import build_site_config
>>> site = build_site_config({"name": "Blog", "gems": ["jekyll-feed"]})
>>> [generator.name for generator in resolve_generators(site)]
['feed']
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import logging
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ._constants import SITEMAP_FILENAME
from .config.helpers import _parse_timestamp

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import SiteConfig
    from .generator.models import RenderedPage

logger = logging.getLogger(__name__)

_EPOCH = dt.datetime.min.replace(tzinfo=dt.UTC)


@dc.dataclass(frozen=True, slots=True)
class AuxiliaryArtifact:
    """A generated file: destination-relative path and its bytes."""

    path: str
    content: bytes
    generator: str


class AuxiliaryGenerator(typ.Protocol):
    """Capability shared by every post-processing stage."""

    name: str

    def generate(self, pages: cabc.Sequence[RenderedPage]) -> AuxiliaryArtifact:
        """Produce the artefact from every rendered page."""
        ...


class _XmlTemplateGenerator:
    """Base for generators that render a bundled Jinja XML template."""

    name = ""
    template_name = ""

    def __init__(
        self, site_config: SiteConfig, *, templates_dir: Path | None = None
    ) -> None:
        self.site_config = site_config
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template(self.template_name)

    def absolute_url(self, url: str) -> str:
        """Return ``url`` prefixed with the site's ``url`` and ``baseurl``."""
        return f"{self.site_config.url}{self.site_config.baseurl}{url}"

    def last_modified(self, page: RenderedPage) -> dt.datetime:
        """Return the page's ``last_modified_at``, date, or source mtime.

        ``last_modified_at`` may be a YAML timestamp or a string; naive values
        are read in the site timezone.
        """
        document = page.document
        explicit = document.metadata.get("last_modified_at")
        if explicit is not None:
            parsed = _parse_timestamp(explicit, tzinfo=self.site_config.tzinfo)
            if parsed is not None:
                return parsed
            logger.warning(
                "Ignoring unrecognised last_modified_at %r in '%s'.",
                explicit,
                document.relative_path,
            )
        if document.date is not None:
            return document.date
        return dt.datetime.fromtimestamp(document.source.stat().st_mtime, tz=dt.UTC)

    def _render(self, path: str, **context: typ.Any) -> AuxiliaryArtifact:
        xml = self.template.render(site=self.site_config, **context)
        if not xml.endswith("\n"):
            xml += "\n"
        return AuxiliaryArtifact(path=path, content=xml.encode("utf-8"), generator=self.name)


class SitemapGenerator(_XmlTemplateGenerator):
    """List every rendered page with its last-modified timestamp."""

    name = "sitemap"
    template_name = "sitemap.xml"

    def generate(self, pages: cabc.Sequence[RenderedPage]) -> AuxiliaryArtifact:
        """Render ``sitemap.xml`` sorted by URL.

        Static assets and pages whose front matter sets ``sitemap: false`` are
        left out.
        """
        entries = [
            {"loc": self.absolute_url(page.url), "lastmod": self.last_modified(page)}
            for page in sorted(pages, key=lambda page: page.url)
            if not page.document.is_static
            and page.document.metadata.get("sitemap", True) is not False
        ]
        return self._render(SITEMAP_FILENAME, entries=entries)


class FeedGenerator(_XmlTemplateGenerator):
    """Render an Atom feed of the most recent posts."""

    name = "feed"
    template_name = "feed.xml"

    def generate(self, pages: cabc.Sequence[RenderedPage]) -> AuxiliaryArtifact:
        """Render the feed, newest post first, ties broken by source path."""
        posts = order_posts(page for page in pages if page.document.is_post)
        limited = posts[: self.site_config.feed.posts_limit]
        updated = limited[0].document.date if limited else None
        entries = [
            {
                "title": page.document.title or page.url,
                "url": self.absolute_url(page.url),
                "published": _isoformat(page.document.date),
                "updated": _isoformat(self.last_modified(page)),
                "summary": page.excerpt_html or "",
                "content": page.body_html or "",
                "author": page.document.metadata.get("author") or self.site_config.author,
            }
            for page in limited
        ]
        feed_path = self.site_config.feed.path
        return self._render(
            feed_path,
            entries=entries,
            updated=_isoformat(updated),
            feed_url=self.absolute_url(f"/{feed_path}"),
            home_url=self.absolute_url("/"),
        )


def order_posts(pages: cabc.Iterable[RenderedPage]) -> list[RenderedPage]:
    """Sort posts by date descending, then by source path ascending.

    Undated posts sort after every dated one.
    """
    by_path = sorted(pages, key=lambda page: page.document.relative_path)
    return sorted(
        by_path,
        key=lambda page: (page.document.date or _EPOCH).astimezone(dt.UTC),
        reverse=True,
    )


GENERATOR_REGISTRY: dict[str, type[_XmlTemplateGenerator]] = {
    "jekyll-sitemap": SitemapGenerator,
    "sitemap": SitemapGenerator,
    "jekyll-feed": FeedGenerator,
    "feed": FeedGenerator,
}


def resolve_generators(
    site_config: SiteConfig, *, templates_dir: Path | None = None
) -> list[AuxiliaryGenerator]:
    """Instantiate one generator per distinct plugin named in the config.

    Unknown plugin names are logged and ignored.
    """
    generators: list[AuxiliaryGenerator] = []
    seen: set[type[_XmlTemplateGenerator]] = set()
    for plugin in site_config.plugins:
        generator_cls = GENERATOR_REGISTRY.get(plugin)
        if generator_cls is None:
            logger.warning("Ignoring unsupported plugin '%s'.", plugin)
            continue
        if generator_cls in seen:
            continue
        seen.add(generator_cls)
        generators.append(generator_cls(site_config, templates_dir=templates_dir))
    return generators


def _isoformat(value: dt.datetime | None) -> str:
    return value.isoformat(timespec="seconds") if value else ""


__all__ = [
    "GENERATOR_REGISTRY",
    "AuxiliaryArtifact",
    "AuxiliaryGenerator",
    "FeedGenerator",
    "SitemapGenerator",
    "order_posts",
    "resolve_generators",
]
