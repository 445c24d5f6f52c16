"""Load a Jekyll-style ``_config.yml`` into an immutable :class:`SiteConfig`."""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .._constants import DEFAULT_MARKDOWN_EXT
from ..errors import ConfigParseError, ConfigValidationError
from .helpers import (
    _build_defaults,
    _build_feed_config,
    _build_highlighter,
    _build_social_links,
    _freeze,
    _optional_str,
    _resolve_permalink,
    _string_list,
)
from .models import SiteConfig

logger = logging.getLogger(__name__)

RECOGNIZED_KEYS = frozenset(
    {
        "name",
        "author",
        "description",
        "avatar",
        "url",
        "baseurl",
        "permalink",
        "timezone",
        "footer-links",
        "social_links",
        "plugins",
        "gems",
        "exclude",
        "include",
        "markdown_ext",
        "defaults",
        "feed",
    }
)


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML site configuration file.

    Parameters
    ----------
    path : Path
        Filesystem path to the configuration file (usually ``_config.yml`` in
        the site root).

    Returns
    -------
    SiteConfig
        Frozen configuration record. Keys the loader does not recognise are
        preserved in :attr:`SiteConfig.extra` for templates.

    Raises
    ------
    ConfigParseError
        If the file is missing, unreadable, not valid YAML, or its top level
        is not a mapping.
    ConfigValidationError
        If ``name`` is absent or a recognised key has the wrong shape.

    Examples
    --------
    >>> from pathlib import Path
    >>> from softwart_pages.config import load_site_config
    >>> config = load_site_config(Path("_config.yml"))  # doctest: +SKIP
    >>> config.permalink  # doctest: +SKIP
    '/:title/'
    """
    raw = _read_yaml(path)
    return build_site_config(raw)


def _read_yaml(path: Path) -> dict[str, typ.Any]:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle)
    except FileNotFoundError as exc:
        msg = f"Configuration file '{path}' not found."
        raise ConfigParseError(msg) from exc
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Configuration file '{path}' could not be read: {exc}"
        raise ConfigParseError(msg) from exc
    except YAMLError as exc:
        msg = f"Configuration file '{path}' is not valid YAML: {exc}"
        raise ConfigParseError(msg) from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        msg = f"Top-level YAML structure in '{path}' must be a mapping."
        raise ConfigParseError(msg)
    return dict(loaded)


def build_site_config(raw: typ.Mapping[str, typ.Any]) -> SiteConfig:
    """Validate an already-parsed mapping and build the :class:`SiteConfig`."""
    name = _optional_str(raw.get("name"))
    if not name:
        msg = "Site configuration is missing the required 'name' field."
        raise ConfigValidationError(msg)

    plugins = _string_list(raw, "plugins") + _string_list(raw, "gems")
    markdown_ext = _markdown_extensions(raw.get("markdown_ext"))
    extra = {key: value for key, value in raw.items() if key not in RECOGNIZED_KEYS}
    if extra:
        logger.debug("Passing through config keys: %s", ", ".join(sorted(extra)))

    return SiteConfig(
        name=name,
        author=_optional_str(raw.get("author")),
        description=_optional_str(raw.get("description")),
        avatar=_optional_str(raw.get("avatar")),
        url=(_optional_str(raw.get("url")) or "").rstrip("/"),
        baseurl=_normalize_baseurl(raw.get("baseurl")),
        permalink=_resolve_permalink(raw.get("permalink")),
        timezone=_optional_str(raw.get("timezone")),
        social_links=_freeze(_build_social_links(raw)),
        plugins=tuple(dict.fromkeys(plugins)),
        exclude=_string_list(raw, "exclude"),
        include=_string_list(raw, "include"),
        markdown_ext=markdown_ext,
        defaults=_build_defaults(raw),
        highlighter=_build_highlighter(raw),
        feed=_build_feed_config(raw),
        extra=_freeze(extra),
    )


def _normalize_baseurl(value: object | None) -> str:
    """Return ``baseurl`` with a leading slash and no trailing slash, or ``""``."""
    text = (_optional_str(value) or "").strip("/")
    return f"/{text}" if text else ""


def _markdown_extensions(value: object | None) -> tuple[str, ...]:
    """Parse the comma-separated ``markdown_ext`` setting."""
    if value is None:
        return DEFAULT_MARKDOWN_EXT
    if not isinstance(value, str):
        msg = "'markdown_ext' must be a comma-separated string."
        raise ConfigValidationError(msg)
    extensions = tuple(
        part.strip().lstrip(".").lower() for part in value.split(",") if part.strip()
    )
    return extensions or DEFAULT_MARKDOWN_EXT


__all__ = ["RECOGNIZED_KEYS", "build_site_config", "load_site_config"]
