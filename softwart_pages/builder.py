"""High-level orchestration for a complete site build.

This module wires the pipeline stages together. :class:`SiteBuilder` scans
the source tree, then fans each file out to a thread pool that parses its
front matter, resolves its permalink, and renders its layout. Every worker
fills the result slot reserved for its file, so the collected pages keep scan
order without locking. Once all workers have settled the pages are handed to
:class:`~softwart_pages.assembler.SiteAssembler`, which writes them and
generates the sitemap and feed.

Failure handling is chosen explicitly with :class:`ErrorPolicy`. In either
mode nothing is written when any document fails.

Example
-------
>>> from pathlib import Path
>>> from softwart_pages.config import load_site_config
>>> from softwart_pages.builder import SiteBuilder
>>> site = load_site_config(Path("_config.yml"))  # doctest: +SKIP
>>> result = SiteBuilder(site, Path("."), Path("_site")).run()  # doctest: +SKIP
>>> result.written[:1]  # doctest: +SKIP
[PosixPath('_site/about.html')]
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import enum
import logging
import typing as typ
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path, PurePosixPath

from ._constants import DRAFTS_DIR, PAGE_PERMALINK, POSTS_DIR
from .assembler import SiteAssembler
from .config.helpers import _parse_timestamp
from .errors import BuildError, BuildFailedError, FrontMatterError, ScanIOError
from .front_matter import parse_front_matter, post_filename_metadata
from .generator.layouts import LayoutRenderer
from .generator.models import Document, RenderedPage
from .generator.permalink import resolve_permalink
from .scanner import ContentScanner

if typ.TYPE_CHECKING:
    from .config import SiteConfig

logger = logging.getLogger(__name__)

REQUIRED_POST_FIELDS = ("layout", "title")
HTML_SUFFIXES = frozenset({".html", ".htm"})


class ErrorPolicy(enum.Enum):
    """How the build reacts to a failing document."""

    FAIL_FAST = "fail-fast"
    """Cancel outstanding work and raise the first error."""

    CONTINUE = "continue"
    """Process every document and raise :class:`BuildFailedError` with all errors."""


@dc.dataclass(slots=True)
class BuildResult:
    """Outcome of a successful build."""

    pages: list[RenderedPage]
    written: list[Path]
    skipped: list[str] = dc.field(default_factory=list)


class SiteBuilder:
    """Run the scan → parse → resolve → render → assemble pipeline."""

    def __init__(
        self,
        site_config: SiteConfig,
        source: Path,
        destination: Path,
        *,
        policy: ErrorPolicy = ErrorPolicy.FAIL_FAST,
        include_drafts: bool = False,
        workers: int | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the builder.

        Parameters
        ----------
        site_config : SiteConfig
            Loaded configuration; shared read-only by every worker.
        source : Path
            Site source directory.
        destination : Path
            Output directory.
        policy : ErrorPolicy, optional
            Failure handling; ``FAIL_FAST`` by default.
        include_drafts : bool, optional
            Render ``_drafts`` as posts.
        workers : int, optional
            Thread pool size; ``None`` lets the executor decide.
        templates_dir : Path, optional
            Directory of fallback layouts.
        """
        self.site_config = site_config
        self.source = source
        self.destination = destination
        self.policy = policy
        self.include_drafts = include_drafts
        self.workers = workers
        self.tzinfo: dt.tzinfo = site_config.tzinfo
        self.renderer = LayoutRenderer(site_config, source, templates_dir=templates_dir)

    def run(self) -> BuildResult:
        """Build the site and write it to the destination.

        Returns
        -------
        BuildResult
            Rendered pages, written files, and the documents skipped.

        Raises
        ------
        BuildError
            The first failure under ``FAIL_FAST``; scan and collision errors
            under either policy.
        BuildFailedError
            Every document failure under ``CONTINUE``.
        """
        scanner = ContentScanner(
            self.source,
            self.site_config,
            destination=self.destination,
            include_drafts=self.include_drafts,
        )
        paths = list(scanner.scan())
        logger.info("Scanned %d file(s) under '%s'.", len(paths), self.source)

        slots = self._process_all(paths)
        pages = [page for page in slots if page is not None]
        skipped = [
            self._relative(path)
            for path, page in zip(paths, slots, strict=True)
            if page is None
        ]
        written = SiteAssembler(self.site_config, self.destination).assemble(pages)
        return BuildResult(pages=pages, written=written, skipped=skipped)

    def _process_all(self, paths: list[Path]) -> list[RenderedPage | None]:
        slots: list[RenderedPage | None] = [None] * len(paths)
        failures: list[BuildError | None] = [None] * len(paths)
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            futures = {
                pool.submit(self.process, path): index for index, path in enumerate(paths)
            }
            for future in as_completed(futures):
                index = futures[future]
                try:
                    slots[index] = future.result()
                except BuildError as exc:
                    if self.policy is ErrorPolicy.FAIL_FAST:
                        pool.shutdown(wait=False, cancel_futures=True)
                        raise
                    logger.error("%s", exc)
                    failures[index] = exc
        collected = [error for error in failures if error is not None]
        if collected:
            raise BuildFailedError(collected)
        return slots

    def process(self, path: Path) -> RenderedPage | None:
        """Parse, resolve, and render one file.

        Returns
        -------
        RenderedPage or None
            ``None`` when the document sets ``published: false`` or is a
            file without front matter under ``_posts`` or ``_drafts``.
        """
        relative = self._relative(path)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            msg = f"File '{relative}' could not be read: {exc}"
            raise ScanIOError(msg) from exc

        parsed = parse_front_matter(raw, source=relative)
        if not parsed.has_front_matter:
            if _in_post_directory(relative):
                logger.warning(
                    "Skipping '%s': files under %s or %s need front matter.",
                    relative,
                    POSTS_DIR,
                    DRAFTS_DIR,
                )
                return None
            document = Document(
                source=path,
                relative_path=relative,
                metadata={},
                body=raw,
                is_static=True,
                output_ext=PurePosixPath(relative).suffix,
            )
            document.output_path = f"/{relative}"
            return RenderedPage(document=document, url=document.output_path, content=raw)

        document = self._build_document(path, relative, parsed.metadata, parsed.body)
        if document.metadata.get("published") is False:
            logger.info("Skipping unpublished document '%s'.", relative)
            return None

        pattern = document.metadata.get("permalink") or (
            self.site_config.permalink if document.is_post else PAGE_PERMALINK
        )
        if not isinstance(pattern, str):
            msg = "'permalink' must be a string."
            raise FrontMatterError(msg, source=relative)
        document.output_path = resolve_permalink(pattern, document)

        body_html = self.renderer.convert(document)
        html = self.renderer.render(document, body_html)
        excerpt_html = self.renderer.excerpt(document) if document.is_post else None
        logger.debug("Rendered '%s' -> '%s'.", relative, document.output_path)
        return RenderedPage(
            document=document,
            url=document.output_path,
            content=html.encode("utf-8"),
            body_html=body_html,
            excerpt_html=excerpt_html,
        )

    def _build_document(
        self,
        path: Path,
        relative: str,
        front_matter: dict[str, typ.Any],
        body: str | bytes,
    ) -> Document:
        is_post = _in_post_directory(relative)

        metadata = self.site_config.defaults_for(relative, is_post=is_post)
        if is_post:
            metadata.update(post_filename_metadata(path.name))
        metadata.update(front_matter)

        if is_post:
            missing = [field for field in REQUIRED_POST_FIELDS if not metadata.get(field)]
            if missing:
                msg = f"Post is missing required front matter: {', '.join(missing)}."
                raise FrontMatterError(msg, source=relative)

        date = None
        if metadata.get("date") is not None:
            parsed_date = _parse_timestamp(metadata["date"], tzinfo=self.tzinfo)
            if parsed_date is None:
                msg = f"Unrecognised date value {metadata['date']!r}."
                raise FrontMatterError(msg, source=relative)
            date = parsed_date.astimezone(self.tzinfo)
        elif DRAFTS_DIR in PurePosixPath(relative).parts[:-1]:
            date = self._modified_at(path, relative)

        suffix = PurePosixPath(relative).suffix.lower()
        if self.site_config.is_markdown(suffix) or suffix in HTML_SUFFIXES:
            output_ext = ".html"
        else:
            output_ext = suffix
        return Document(
            source=path,
            relative_path=relative,
            metadata=metadata,
            body=body,
            is_post=is_post,
            date=date,
            output_ext=output_ext,
        )

    def _modified_at(self, path: Path, relative: str) -> dt.datetime:
        """Date an undated draft by its modification time in the site timezone."""
        try:
            mtime = path.stat().st_mtime
        except OSError as exc:
            msg = f"File '{relative}' could not be read: {exc}"
            raise ScanIOError(msg) from exc
        return dt.datetime.fromtimestamp(mtime, tz=self.tzinfo)

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.source).as_posix()


def _in_post_directory(relative: str) -> bool:
    parents = PurePosixPath(relative).parts[:-1]
    return POSTS_DIR in parents or DRAFTS_DIR in parents


__all__ = ["BuildResult", "ErrorPolicy", "SiteBuilder"]
