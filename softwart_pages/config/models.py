"""Typed dataclasses describing the site configuration."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import logging
import types
import typing as typ
import zoneinfo

from .._constants import (
    DEFAULT_FEED_PATH,
    DEFAULT_FEED_POSTS_LIMIT,
    DEFAULT_MARKDOWN_EXT,
    DEFAULT_PERMALINK,
)

logger = logging.getLogger(__name__)


def _empty_mapping() -> typ.Mapping[str, typ.Any]:
    return types.MappingProxyType({})


@dc.dataclass(frozen=True, slots=True)
class HighlighterConfig:
    """Syntax highlighting options read from ``kramdown.syntax_highlighter_opts``."""

    css_class: str = "highlight"
    default_lang: str | None = None
    pygments_style: str = "default"


@dc.dataclass(frozen=True, slots=True)
class FeedConfig:
    """Atom feed output options."""

    path: str = DEFAULT_FEED_PATH
    posts_limit: int = DEFAULT_FEED_POSTS_LIMIT


@dc.dataclass(frozen=True, slots=True)
class FrontMatterDefault:
    """A ``defaults:`` rule applying ``values`` to documents within ``scope``."""

    path: str = ""
    type: str | None = None
    values: typ.Mapping[str, typ.Any] = dc.field(default_factory=_empty_mapping)

    def applies_to(self, relative_path: str, *, is_post: bool) -> bool:
        """Return ``True`` when the rule's scope covers the given document."""
        if self.type == "posts" and not is_post:
            return False
        if self.type == "pages" and is_post:
            return False
        prefix = self.path.strip("/")
        if not prefix:
            return True
        return relative_path == prefix or relative_path.startswith(f"{prefix}/")


@dc.dataclass(frozen=True, slots=True)
class SiteConfig:
    """Immutable site-wide settings shared read-only by every build stage."""

    name: str
    author: str | None = None
    description: str | None = None
    avatar: str | None = None
    url: str = ""
    baseurl: str = ""
    permalink: str = DEFAULT_PERMALINK
    timezone: str | None = None
    social_links: typ.Mapping[str, str] = dc.field(default_factory=_empty_mapping)
    plugins: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    include: tuple[str, ...] = ()
    markdown_ext: tuple[str, ...] = DEFAULT_MARKDOWN_EXT
    defaults: tuple[FrontMatterDefault, ...] = ()
    highlighter: HighlighterConfig = HighlighterConfig()
    feed: FeedConfig = FeedConfig()
    extra: typ.Mapping[str, typ.Any] = dc.field(default_factory=_empty_mapping)

    @property
    def tzinfo(self) -> dt.tzinfo:
        """Return the site timezone, falling back to UTC when it is unknown."""
        if not self.timezone:
            return dt.UTC
        try:
            return zoneinfo.ZoneInfo(self.timezone)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone '%s'; using UTC.", self.timezone)
            return dt.UTC

    def is_markdown(self, suffix: str) -> bool:
        """Return ``True`` when ``suffix`` (with or without a dot) is markdown."""
        return suffix.lstrip(".").lower() in self.markdown_ext

    def defaults_for(
        self, relative_path: str, *, is_post: bool
    ) -> dict[str, typ.Any]:
        """Merge every matching ``defaults`` rule, later rules winning."""
        merged: dict[str, typ.Any] = {}
        for rule in self.defaults:
            if rule.applies_to(relative_path, is_post=is_post):
                merged.update(rule.values)
        return merged

    def template_context(self) -> dict[str, typ.Any]:
        """Return the ``site`` mapping exposed to templates.

        Unrecognised config keys are merged first so the typed fields always
        win when a name clashes.
        """
        context: dict[str, typ.Any] = dict(self.extra)
        context.update(
            name=self.name,
            author=self.author,
            description=self.description,
            avatar=self.avatar,
            url=self.url,
            baseurl=self.baseurl,
            permalink=self.permalink,
            timezone=self.timezone,
            social_links=self.social_links,
            footer_links=self.social_links,
            plugins=self.plugins,
            feed={"path": self.feed.path, "posts_limit": self.feed.posts_limit},
        )
        return context


__all__ = [
    "FeedConfig",
    "FrontMatterDefault",
    "HighlighterConfig",
    "SiteConfig",
]
