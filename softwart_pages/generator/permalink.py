"""Resolve permalink patterns into root-relative output URLs.

Patterns contain ``:token`` placeholders (``/:year/:month/:title/``) that are
filled from a document's metadata, its publish date, and its source path.
Resolution is purely a function of the pattern and the document, so it can run
on any worker without coordination.

Example
-------
>>> from pathlib import Path
>>> from softwart_pages.generator.models import Document
>>> doc = Document(Path("/site/a.md"), "a.md", {"title": "Hello World"}, "")
>>> resolve_permalink("/:title/", doc)
'/hello-world/'
>>> output_file_for("/hello-world/")
'hello-world/index.html'
"""

from __future__ import annotations

import posixpath
import re
import typing as typ
import unicodedata
from pathlib import PurePosixPath

from ..errors import PermalinkError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import Document

DATE_TOKENS: dict[str, str] = {
    "year": "%Y",
    "short_year": "%y",
    "month": "%m",
    "day": "%d",
    "hour": "%H",
    "minute": "%M",
    "second": "%S",
    "y_day": "%j",
}
OTHER_TOKENS = (
    "title",
    "slug",
    "i_month",
    "i_day",
    "categories",
    "path",
    "basename",
    "output_ext",
)
TOKEN_PATTERN = re.compile(
    ":("
    + "|".join(sorted((*DATE_TOKENS, *OTHER_TOKENS), key=len, reverse=True))
    + ")"
)
_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Convert ``value`` into a lowercase, hyphen-separated ASCII slug.

    Examples
    --------
    >>> slugify("Hello World")
    'hello-world'
    >>> slugify("Don't use public static utils!")
    'don-t-use-public-static-utils'
    >>> slugify("Rasiński")
    'rasinski'
    """
    ascii_text = (
        unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    )
    return _SLUG_SEPARATORS.sub("-", ascii_text.lower()).strip("-")


def resolve_permalink(pattern: str, document: Document) -> str:
    """Substitute every token in ``pattern`` using ``document``.

    Parameters
    ----------
    pattern : str
        Permalink pattern such as ``/:title/`` or ``/:year/:month/:title.html``.
    document : Document
        Source of metadata, date, and path values.

    Returns
    -------
    str
        URL beginning with ``/``. Repeated slashes are collapsed and a trailing
        ``index.html`` is reduced to its directory.

    Raises
    ------
    PermalinkError
        If a referenced token has no value for this document.
    """

    def _replace(match: re.Match[str]) -> str:
        token = match.group(1)
        value = _token_value(token, document)
        if value is None:
            raise PermalinkError(token, pattern, source=document.relative_path)
        return value

    url = TOKEN_PATTERN.sub(_replace, pattern)
    return _normalize_url(url)


def output_file_for(url: str) -> str:
    """Map a root-relative URL onto the relative file path it is written to.

    Examples
    --------
    >>> output_file_for("/")
    'index.html'
    >>> output_file_for("/about.html")
    'about.html'
    >>> output_file_for("/2020/01/post")
    '2020/01/post.html'
    """
    parts = [part for part in url.split("/") if part not in ("", ".", "..")]
    if not parts or url.endswith("/"):
        return "/".join([*parts, "index.html"])
    if not PurePosixPath(parts[-1]).suffix:
        parts[-1] = f"{parts[-1]}.html"
    return "/".join(parts)


def _token_value(token: str, document: Document) -> str | None:
    if token in DATE_TOKENS:
        if document.date is None:
            return None
        return document.date.strftime(DATE_TOKENS[token])
    match token:
        case "i_month":
            return str(document.date.month) if document.date else None
        case "i_day":
            return str(document.date.day) if document.date else None
        case "title":
            return _slug_or_none(document.title)
        case "slug":
            slug = document.metadata.get("slug")
            return _slug_or_none(str(slug) if slug is not None else document.title)
        case "categories":
            return "/".join(slugify(item) for item in _categories(document))
        case "path":
            return str(PurePosixPath(document.relative_path).with_suffix(""))
        case "basename":
            return PurePosixPath(document.relative_path).stem
        case "output_ext":
            return document.output_ext
    return None  # pragma: no cover - TOKEN_PATTERN only matches known tokens


def _slug_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    return slugify(value) or None


def _categories(document: Document) -> cabc.Iterable[str]:
    """Return the document's categories; an absent list yields no segments."""
    value = document.metadata.get("categories", document.metadata.get("category"))
    match value:
        case None:
            return []
        case str():
            return value.split()
        case list() | tuple():
            return [str(item) for item in value if item is not None]
        case _:
            return [str(value)]


def _normalize_url(url: str) -> str:
    trailing = url.endswith("/")
    collapsed = posixpath.normpath("/" + url.lstrip("/"))
    if collapsed.endswith("/index.html"):
        return collapsed[: -len("index.html")]
    if trailing and collapsed != "/":
        collapsed += "/"
    return collapsed


__all__ = ["TOKEN_PATTERN", "output_file_for", "resolve_permalink", "slugify"]
