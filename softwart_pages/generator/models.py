"""Shared dataclasses used by the site build pipeline."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt  # noqa: TC003 - used for runtime type metadata
import typing as typ
from pathlib import Path, PurePosixPath


@dc.dataclass(slots=True)
class Document:
    """One content file travelling through the pipeline.

    Attributes
    ----------
    source : Path
        Absolute path of the file on disk.
    relative_path : str
        POSIX path relative to the site root; used in error messages and for
        deterministic ordering.
    metadata : dict[str, Any]
        Front matter merged over any matching ``defaults`` rules. Empty for
        static assets.
    body : str or bytes
        Text after the front-matter block, or the raw bytes of a static asset.
    is_static : bool
        ``True`` when the file had no front matter and is copied verbatim.
    is_post : bool
        ``True`` for files under a ``_posts`` (or ``_drafts``) directory.
    date : datetime or None
        Publish date in the site timezone, when known.
    output_ext : str
        Extension of the rendered file (``.html`` for markdown and HTML).
    output_path : str or None
        Root-relative URL assigned by the permalink resolver.
    """

    source: Path
    relative_path: str
    metadata: dict[str, typ.Any]
    body: str | bytes
    is_static: bool = False
    is_post: bool = False
    date: dt.datetime | None = None
    output_ext: str = ".html"
    output_path: str | None = None

    @property
    def title(self) -> str | None:
        """Return the ``title`` metadata as a string, if present."""
        value = self.metadata.get("title")
        return str(value) if value is not None else None

    @property
    def suffix(self) -> str:
        """Return the lowercase source file extension including the dot."""
        return PurePosixPath(self.relative_path).suffix.lower()


@dc.dataclass(frozen=True, slots=True)
class RenderedPage:
    """Final bytes for one document, owned by the assembler until written."""

    document: Document
    url: str
    content: bytes
    body_html: str | None = None
    excerpt_html: str | None = None


__all__ = ["Document", "RenderedPage"]
