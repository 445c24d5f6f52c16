"""Exception hierarchy raised by the site build pipeline.

Every failure the pipeline reports derives from :class:`BuildError` so the
CLI can map them onto a single non-zero exit code. Document-level errors carry
the offending source path; config-level errors abort the build before any
document is processed.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path


class BuildError(Exception):
    """Base class for every error raised while building a site."""


class SiteConfigError(BuildError, ValueError):
    """Raised when the site configuration cannot be used."""


class ConfigParseError(SiteConfigError):
    """Raised when the configuration file is missing or is not valid YAML."""


class ConfigValidationError(SiteConfigError):
    """Raised when a required configuration field is absent or mistyped."""


class ScanError(BuildError):
    """Raised when the content directory cannot be walked."""


class ScanIOError(ScanError):
    """Raised when the content root, or a directory below it, is unreadable."""


class ScanCycleError(ScanError):
    """Raised when a symlinked directory points back into the current walk."""

    def __init__(self, link: Path, target: Path) -> None:
        self.link = link
        self.target = target
        super().__init__(f"Symlink cycle detected: '{link}' resolves to '{target}'.")


class DocumentError(BuildError):
    """Raised when a single document cannot be processed."""

    def __init__(self, message: str, *, source: Path | str | None = None) -> None:
        self.source = source
        if source is not None:
            message = f"{source}: {message}"
        super().__init__(message)


class FrontMatterError(DocumentError):
    """Raised when the front-matter block is unterminated or malformed."""


class TemplateNotFoundError(DocumentError):
    """Raised when the layout requested by a document cannot be resolved."""

    def __init__(
        self,
        layout: str,
        *,
        template: str | None = None,
        source: Path | str | None = None,
    ) -> None:
        self.layout = layout
        self.template = template
        if template is None or template == f"{layout}.html":
            message = f"Layout '{layout}' could not be found."
        else:
            message = f"Layout '{layout}' needs missing template '{template}'."
        super().__init__(message, source=source)


class TemplateRenderError(DocumentError):
    """Raised when a layout fails to compile or render."""

    def __init__(
        self, layout: str, reason: str, *, source: Path | str | None = None
    ) -> None:
        self.layout = layout
        self.reason = reason
        super().__init__(f"Layout '{layout}' failed to render: {reason}", source=source)


class PermalinkError(DocumentError):
    """Raised when a permalink token has no corresponding metadata value."""

    def __init__(
        self, token: str, pattern: str, *, source: Path | str | None = None
    ) -> None:
        self.token = token
        self.pattern = pattern
        super().__init__(
            f"Permalink token ':{token}' in '{pattern}' has no value.", source=source
        )


class OutputCollisionError(BuildError):
    """Raised when two documents resolve to the same output file."""

    def __init__(self, output_path: str, first: Path | str, second: Path | str) -> None:
        self.output_path = output_path
        self.first = first
        self.second = second
        super().__init__(
            f"Output path '{output_path}' is produced by both '{first}' and '{second}'."
        )


class BuildFailedError(BuildError):
    """Raised in continue-on-error mode with every failure collected."""

    def __init__(self, errors: cabc.Sequence[BuildError]) -> None:
        self.errors = tuple(errors)
        lines = [f"{len(self.errors)} document(s) failed to build:"]
        lines.extend(f"  - {error}" for error in self.errors)
        super().__init__("\n".join(lines))


__all__ = [
    "BuildError",
    "BuildFailedError",
    "ConfigParseError",
    "ConfigValidationError",
    "DocumentError",
    "FrontMatterError",
    "OutputCollisionError",
    "PermalinkError",
    "ScanCycleError",
    "ScanError",
    "ScanIOError",
    "SiteConfigError",
    "TemplateNotFoundError",
    "TemplateRenderError",
]
