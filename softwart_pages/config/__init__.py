"""Load and validate the Jekyll-style site configuration.

This subpackage parses the site's ``_config.yml``, normalises recognised keys
(name, author, permalink pattern, social links, plugin and exclusion lists),
and produces the frozen :class:`SiteConfig` that every downstream build stage
shares read-only. The primary entry point is :func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from softwart_pages.config import load_site_config
>>> site = load_site_config(Path("_config.yml"))  # doctest: +SKIP
>>> site.name  # doctest: +SKIP
'SoftwArt Blog'
"""

from .loader import build_site_config, load_site_config
from .models import FeedConfig, FrontMatterDefault, HighlighterConfig, SiteConfig

__all__ = [
    "FeedConfig",
    "FrontMatterDefault",
    "HighlighterConfig",
    "SiteConfig",
    "build_site_config",
    "load_site_config",
]
