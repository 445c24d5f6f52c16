r"""Split content files into YAML front matter and body text.

A document opts into processing by starting with a line containing only
``---``. Everything up to the next ``---`` (or ``...``) line is parsed as a
YAML mapping; the rest of the file is the body. Files that do not open with
the marker are static assets and pass through byte-for-byte.

Example
-------
>>> from softwart_pages.front_matter import parse_front_matter
>>> parsed = parse_front_matter(b"---\ntitle: Hello\n---\nBody\n")
>>> parsed.metadata["title"], parsed.body
('Hello', 'Body\n')
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import re
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ._constants import FRONT_MATTER_END_MARKERS, FRONT_MATTER_MARKER
from .errors import FrontMatterError

if typ.TYPE_CHECKING:
    from pathlib import Path

UTF8_BOM = b"\xef\xbb\xbf"
POST_FILENAME_PATTERN = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})-(?P<slug>.+?)(?P<ext>\.[^.]+)?$"
)


@dc.dataclass(slots=True)
class ParsedContent:
    """Result of splitting a file into metadata and body.

    Attributes
    ----------
    metadata : dict[str, Any]
        Parsed front matter; empty for static assets.
    body : str or bytes
        Decoded text after the closing delimiter, or the untouched raw bytes
        when the file has no front matter.
    has_front_matter : bool
        ``False`` for static assets.
    """

    metadata: dict[str, typ.Any]
    body: str | bytes
    has_front_matter: bool


def has_front_matter(raw: bytes) -> bool:
    """Return ``True`` when ``raw`` opens with the front-matter marker line."""
    data = raw.removeprefix(UTF8_BOM)
    first_line = data.split(b"\n", 1)[0]
    return first_line.rstrip() == FRONT_MATTER_MARKER.encode("ascii")


def parse_front_matter(raw: bytes, *, source: Path | str | None = None) -> ParsedContent:
    """Split ``raw`` file bytes into front-matter metadata and body.

    Parameters
    ----------
    raw : bytes
        Complete file contents.
    source : Path or str, optional
        Used to label errors.

    Returns
    -------
    ParsedContent
        Metadata and body. Files without an opening marker come back with
        empty metadata and ``body`` set to ``raw`` itself.

    Raises
    ------
    FrontMatterError
        If the opening marker has no closing partner, the file is not UTF-8,
        or the header is not a YAML mapping.
    """
    if not has_front_matter(raw):
        return ParsedContent(metadata={}, body=raw, has_front_matter=False)

    try:
        text = raw.removeprefix(UTF8_BOM).decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = f"Document with front matter is not valid UTF-8: {exc}"
        raise FrontMatterError(msg, source=source) from exc

    lines = text.splitlines(keepends=True)
    closing = next(
        (
            index
            for index in range(1, len(lines))
            if lines[index].rstrip() in FRONT_MATTER_END_MARKERS
        ),
        None,
    )
    if closing is None:
        msg = "Front matter opened with '---' is never closed."
        raise FrontMatterError(msg, source=source)

    header = "".join(lines[1:closing])
    body = "".join(lines[closing + 1 :])
    return ParsedContent(
        metadata=_load_header(header, source=source),
        body=body,
        has_front_matter=True,
    )


def _load_header(header: str, *, source: Path | str | None) -> dict[str, typ.Any]:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        loaded = loader.load(header)
    except YAMLError as exc:
        msg = f"Front matter is not valid YAML: {exc}"
        raise FrontMatterError(msg, source=source) from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        msg = "Front matter must be a mapping of keys to values."
        raise FrontMatterError(msg, source=source)
    return {str(key): value for key, value in loaded.items()}


def post_filename_metadata(filename: str) -> dict[str, typ.Any]:
    """Return ``date`` and ``slug`` encoded in a ``YYYY-MM-DD-slug.ext`` name.

    Examples
    --------
    >>> post_filename_metadata("2020-01-01-hello-world.md")
    {'date': datetime.date(2020, 1, 1), 'slug': 'hello-world'}
    >>> post_filename_metadata("notes.md")
    {}
    """
    match = POST_FILENAME_PATTERN.match(filename)
    if not match:
        return {}
    try:
        date = dt.date(int(match["year"]), int(match["month"]), int(match["day"]))
    except ValueError:
        return {}
    return {"date": date, "slug": match["slug"]}


__all__ = [
    "POST_FILENAME_PATTERN",
    "ParsedContent",
    "has_front_matter",
    "parse_front_matter",
    "post_filename_metadata",
]
