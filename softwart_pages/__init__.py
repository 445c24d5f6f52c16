"""Static-site generator for Jekyll-style blogs.

This package turns a ``_config.yml`` plus a tree of markdown posts, HTML
pages, and static assets into a rendered site with a sitemap and Atom feed.
It exposes the CLI entry points used by the ``pages`` console script.

Exports
-------
- ``app``: Cyclopts application with ``build``, ``serve``, and ``clean``.
- ``main``: Convenience function that invokes the app and returns an exit code.

Examples
--------
>>> from softwart_pages import main
>>> main(["build"])  # doctest: +SKIP
0
>>> from softwart_pages import app
>>> app(["clean", "--source", "site"])  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
