"""Write rendered pages and auxiliary artefacts to the destination directory.

The assembler is the pipeline's join point. It receives every rendered page,
runs the configured auxiliary generators over the complete set, and checks
that no two outputs target the same file before anything touches the disk. A
collision therefore leaves the destination untouched.
"""

from __future__ import annotations

import logging
import typing as typ

from .errors import OutputCollisionError
from .generator.permalink import output_file_for
from .plugins import resolve_generators

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .config import SiteConfig
    from .generator.models import RenderedPage
    from .plugins import AuxiliaryGenerator

logger = logging.getLogger(__name__)


class SiteAssembler:
    """Persist a complete, collision-free set of outputs."""

    def __init__(
        self,
        site_config: SiteConfig,
        destination: Path,
        *,
        generators: cabc.Sequence[AuxiliaryGenerator] | None = None,
    ) -> None:
        """Initialize the assembler.

        Parameters
        ----------
        site_config : SiteConfig
            Supplies the plugin list when ``generators`` is omitted.
        destination : Path
            Output root; created on demand.
        generators : sequence of AuxiliaryGenerator, optional
            Explicit generator list, overriding the configured plugins.
        """
        self.site_config = site_config
        self.destination = destination
        self.generators = (
            list(generators) if generators is not None else resolve_generators(site_config)
        )

    def assemble(self, pages: cabc.Sequence[RenderedPage]) -> list[Path]:
        """Write every page and generated artefact, returning written paths.

        Raises
        ------
        OutputCollisionError
            If two pages, or a page and an artefact, map to the same file. No
            file is written in that case.
        """
        planned = self.plan(pages)
        written: list[Path] = []
        for relative, content in planned.items():
            target = self.destination / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
            written.append(target)
        logger.info("Wrote %d file(s) to '%s'.", len(written), self.destination)
        return written

    def plan(self, pages: cabc.Sequence[RenderedPage]) -> dict[str, bytes]:
        """Map destination-relative file paths to content without writing.

        Raises
        ------
        OutputCollisionError
            On the first duplicated destination.
        """
        owners: dict[str, str] = {}
        planned: dict[str, bytes] = {}
        for page in sorted(pages, key=lambda page: page.document.relative_path):
            document = page.document
            relative = (
                document.relative_path
                if document.is_static
                else output_file_for(page.url)
            )
            _claim(owners, relative, document.relative_path)
            planned[relative] = page.content
        for generator in self.generators:
            artifact = generator.generate(pages)
            relative = artifact.path.lstrip("/")
            _claim(owners, relative, f"<{artifact.generator}>")
            planned[relative] = artifact.content
        return planned


def _claim(owners: dict[str, str], relative: str, owner: str) -> None:
    existing = owners.get(relative)
    if existing is not None:
        raise OutputCollisionError(f"/{relative}", existing, owner)
    owners[relative] = owner


__all__ = ["SiteAssembler"]
