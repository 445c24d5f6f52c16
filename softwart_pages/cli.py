"""Cyclopts CLI entrypoint for building, previewing, and cleaning the site.

The ``pages`` console script defined here loads ``_config.yml``, renders the
site into the destination directory, and can serve the result locally. Any
:class:`~softwart_pages.errors.BuildError` is printed to stderr and turned into
exit status 1.

Examples
--------
Build the site in the current directory:

>>> from softwart_pages.cli import main
>>> main(["build"])  # doctest: +SKIP
0

Preview the site on a custom port:

>>> main(["serve", "--port", "4001"])  # doctest: +SKIP
"""

from __future__ import annotations

import functools
import http.server
import logging
import shutil
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import CONFIG_FILENAME, DEFAULT_DESTINATION
from .builder import ErrorPolicy, SiteBuilder
from .config import load_site_config
from .errors import BuildError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

app = App(name="pages", config=cyclopts.config.Env("PAGES_", command=False))  # type: ignore[unknown-argument]

SourceOption = typ.Annotated[
    Path, Parameter(help="Site source directory", env_var="PAGES_SOURCE")
]
DestinationOption = typ.Annotated[
    Path | None,
    Parameter(
        help="Output directory (defaults to <source>/_site)", env_var="PAGES_DESTINATION"
    ),
]
ConfigOption = typ.Annotated[
    Path | None,
    Parameter(
        help="Path to site config (defaults to <source>/_config.yml)",
        env_var="PAGES_CONFIG",
    ),
]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(verbose: bool) -> None:  # noqa: FBT001
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _run_build(
    *,
    source: Path,
    destination: Path | None,
    config: Path | None,
    continue_on_error: bool,
    drafts: bool,
    workers: int | None,
) -> Path:
    site_config = load_site_config(config or source / CONFIG_FILENAME)
    output_dir = destination or source / DEFAULT_DESTINATION
    builder = SiteBuilder(
        site_config,
        source,
        output_dir,
        policy=ErrorPolicy.CONTINUE if continue_on_error else ErrorPolicy.FAIL_FAST,
        include_drafts=drafts,
        workers=workers,
    )
    result = builder.run()
    for path in result.written:
        print(f"wrote {_format_path(path)}")
    for relative in result.skipped:
        print(f"skipped {relative} (unpublished)")
    return output_dir


@app.command(help="Render the site into the destination directory.")
def build(
    *,
    source: SourceOption = Path(),
    destination: DestinationOption = None,
    config: ConfigOption = None,
    continue_on_error: typ.Annotated[
        bool, Parameter(help="Report every failing document instead of stopping at the first")
    ] = False,
    drafts: typ.Annotated[bool, Parameter(help="Render posts under _drafts")] = False,
    workers: typ.Annotated[
        int | None, Parameter(help="Number of worker threads")
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Enable debug logging")] = False,
) -> None:
    """Build the site.

    Parameters
    ----------
    source : Path, optional
        Site source directory; defaults to the working directory.
    destination : Path or None, optional
        Output directory; defaults to ``<source>/_site``.
    config : Path or None, optional
        Configuration file; defaults to ``<source>/_config.yml``.
    continue_on_error : bool, optional
        Use :attr:`ErrorPolicy.CONTINUE` instead of failing fast.
    drafts : bool, optional
        Include ``_drafts``.
    workers : int or None, optional
        Thread pool size.
    verbose : bool, optional
        Log at DEBUG level.

    Returns
    -------
    None
        Writes the site and prints each generated path.
    """
    _configure_logging(verbose)
    _run_build(
        source=source,
        destination=destination,
        config=config,
        continue_on_error=continue_on_error,
        drafts=drafts,
        workers=workers,
    )


@app.command(help="Build the site and serve it over HTTP for local preview.")
def serve(
    *,
    source: SourceOption = Path(),
    destination: DestinationOption = None,
    config: ConfigOption = None,
    host: typ.Annotated[str, Parameter(help="Interface to bind")] = "127.0.0.1",
    port: typ.Annotated[int, Parameter(help="Port to listen on")] = 4000,
    drafts: typ.Annotated[bool, Parameter(help="Render posts under _drafts")] = False,
    verbose: typ.Annotated[bool, Parameter(help="Enable debug logging")] = False,
) -> None:
    """Build once, then serve the output directory until interrupted."""
    _configure_logging(verbose)
    output_dir = _run_build(
        source=source,
        destination=destination,
        config=config,
        continue_on_error=False,
        drafts=drafts,
        workers=None,
    )
    handler = functools.partial(
        http.server.SimpleHTTPRequestHandler, directory=str(output_dir)
    )
    with http.server.ThreadingHTTPServer((host, port), handler) as server:
        print(f"serving {_format_path(output_dir)} at http://{host}:{port}/")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("stopped")


@app.command(help="Remove the destination directory.")
def clean(
    *,
    source: SourceOption = Path(),
    destination: DestinationOption = None,
) -> None:
    """Delete the build output.

    Raises
    ------
    BuildError
        If the destination is the source directory or one of its ancestors.
    """
    output_dir = destination or source / DEFAULT_DESTINATION
    if not output_dir.exists():
        print(f"nothing to clean at {_format_path(output_dir)}")
        return
    resolved = output_dir.resolve()
    if resolved == source.resolve() or resolved in source.resolve().parents:
        msg = f"Refusing to remove '{output_dir}': it contains the site source."
        raise BuildError(msg)
    shutil.rmtree(output_dir)
    print(f"removed {_format_path(output_dir)}")


def main(argv: cabc.Sequence[str] | None = None) -> int:
    """Invoke the Cyclopts application behind the ``pages`` console command.

    Parameters
    ----------
    argv : sequence of str, optional
        Arguments to parse; ``None`` reads ``sys.argv``.

    Returns
    -------
    int
        ``0`` on success, ``1`` when the build fails.
    """
    try:
        app(argv, exit_on_error=False)  # type: ignore[call-arg]
    except BuildError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    sys.exit(main())
