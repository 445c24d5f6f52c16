"""Walk the site source directory and yield candidate content files.

The scanner follows Jekyll's conventions: dotfiles, ``_``-prefixed names, and
editor backups are ignored unless listed under ``include``; ``_posts`` is
always walked and ``_drafts`` only on request. Entries in the configuration's
``exclude`` list are matched against the root-relative POSIX path, either
exactly or as a glob, and a matching directory prunes its whole subtree.

Example
-------
>>> from pathlib import Path
>>> from softwart_pages.config import load_site_config
>>> from softwart_pages.scanner import ContentScanner
>>> site = load_site_config(Path("_config.yml"))  # doctest: +SKIP
>>> paths = list(ContentScanner(Path("."), site).scan())  # doctest: +SKIP
"""

from __future__ import annotations

import errno
import fnmatch
import logging
import typing as typ
from pathlib import Path

from ._constants import CONFIG_FILENAME, DRAFTS_DIR, POSTS_DIR
from .errors import ScanCycleError, ScanIOError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import SiteConfig

logger = logging.getLogger(__name__)

IGNORED_PREFIXES = (".", "_", "#")
IGNORED_SUFFIXES = ("~",)


class ContentScanner:
    """Produce a lazy, single-pass sequence of content file paths."""

    def __init__(
        self,
        root: Path,
        site_config: SiteConfig,
        *,
        destination: Path | None = None,
        include_drafts: bool = False,
    ) -> None:
        """Initialize the scanner.

        Parameters
        ----------
        root : Path
            Site source directory.
        site_config : SiteConfig
            Provides the ``exclude`` and ``include`` lists.
        destination : Path, optional
            Build output directory; never scanned even when it lives inside
            ``root`` under a name that would otherwise be picked up.
        include_drafts : bool, optional
            Walk ``_drafts`` alongside ``_posts``.
        """
        self.root = root
        self.exclude = site_config.exclude
        self.include = site_config.include
        self.include_drafts = include_drafts
        self._destination = destination.resolve() if destination else None
        self._consumed = False

    def scan(self) -> cabc.Iterator[Path]:
        """Yield candidate files in sorted, depth-first order.

        Raises
        ------
        RuntimeError
            If the scanner has already been iterated.
        ScanIOError
            If the root, or a directory beneath it, cannot be listed.
        ScanCycleError
            If a symlinked directory resolves to one of its own ancestors, or
            a symlink chain loops back on itself.
        """
        if self._consumed:
            msg = "ContentScanner.scan() may only be consumed once per build."
            raise RuntimeError(msg)
        self._consumed = True
        if not self.root.is_dir():
            msg = f"Content root '{self.root}' is not a readable directory."
            raise ScanIOError(msg)
        yield from self._walk(self.root, (self.root.resolve(),))

    def is_excluded(self, relative_path: str) -> bool:
        """Return ``True`` when ``relative_path`` matches an ``exclude`` entry."""
        return _matches_any(relative_path, self.exclude)

    def _walk(
        self, directory: Path, ancestors: tuple[Path, ...]
    ) -> cabc.Iterator[Path]:
        try:
            entries = sorted(directory.iterdir(), key=lambda entry: entry.name)
        except OSError as exc:
            msg = f"Directory '{directory}' could not be listed: {exc}"
            raise ScanIOError(msg) from exc

        for entry in entries:
            relative = entry.relative_to(self.root).as_posix()
            if self._should_skip(entry, relative):
                continue
            if entry.is_symlink() and not self._link_target_exists(entry, relative):
                continue
            if entry.is_dir():
                try:
                    real = entry.resolve()
                except (OSError, RuntimeError) as exc:
                    raise ScanCycleError(entry, entry) from exc
                if real in ancestors:
                    raise ScanCycleError(entry, real)
                if real == self._destination:
                    continue
                yield from self._walk(entry, (*ancestors, real))
            elif entry.is_file():
                yield entry
            else:
                logger.debug("Skipping '%s': not a regular file.", relative)

    @staticmethod
    def _link_target_exists(entry: Path, relative: str) -> bool:
        """Return ``False`` for dangling links; raise on self-referencing ones."""
        try:
            entry.resolve(strict=True)
        except RuntimeError as exc:
            raise ScanCycleError(entry, entry) from exc
        except OSError as exc:
            if exc.errno == errno.ELOOP:
                raise ScanCycleError(entry, entry) from exc
            logger.warning("Skipping '%s': broken symlink.", relative)
            return False
        return True

    def _should_skip(self, entry: Path, relative: str) -> bool:
        if self.is_excluded(relative):
            logger.debug("Excluding '%s'.", relative)
            return True
        if _matches_any(relative, self.include) or _matches_any(entry.name, self.include):
            return False
        name = entry.name
        if name == POSTS_DIR:
            return False
        if name == DRAFTS_DIR:
            return not self.include_drafts
        if name == CONFIG_FILENAME:
            return True
        return name.startswith(IGNORED_PREFIXES) or name.endswith(IGNORED_SUFFIXES)


def _matches_any(relative_path: str, patterns: cabc.Iterable[str]) -> bool:
    for pattern in patterns:
        normalized = pattern.strip("/")
        if relative_path == normalized or fnmatch.fnmatchcase(relative_path, normalized):
            return True
    return False


__all__ = ["ContentScanner"]
