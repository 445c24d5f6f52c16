"""Utility helpers shared by the site configuration loader."""

from __future__ import annotations

import datetime as dt
import types
import typing as typ

from .._constants import (
    DEFAULT_FEED_PATH,
    DEFAULT_FEED_POSTS_LIMIT,
    DEFAULT_PERMALINK,
    PERMALINK_STYLES,
)
from ..errors import ConfigValidationError
from .models import FeedConfig, FrontMatterDefault, HighlighterConfig


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _freeze(value: object) -> typ.Any:
    """Recursively convert mappings to read-only proxies and lists to tuples."""
    match value:
        case dict():
            return types.MappingProxyType(
                {str(key): _freeze(item) for key, item in value.items()}
            )
        case list() | tuple():
            return tuple(_freeze(item) for item in value)
        case _:
            return value


def _string_list(raw: typ.Mapping[str, typ.Any], key: str) -> tuple[str, ...]:
    """Return ``raw[key]`` as a tuple of non-empty strings."""
    value = raw.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        msg = f"'{key}' must be a list, got {type(value).__name__}."
        raise ConfigValidationError(msg)
    return tuple(text for item in value if (text := _optional_str(item)))


def _build_social_links(raw: typ.Mapping[str, typ.Any]) -> dict[str, str]:
    """Collect the footer/social link mapping, dropping platforms left blank."""
    value = raw.get("footer-links", raw.get("social_links"))
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = "'footer-links' must be a mapping of platform names to handles."
        raise ConfigValidationError(msg)
    links: dict[str, str] = {}
    for platform, handle in value.items():
        text = _optional_str(handle)
        if text:
            links[str(platform)] = text
    return links


def _resolve_permalink(value: object | None) -> str:
    """Expand built-in permalink styles, returning the pattern to use."""
    if value is None:
        return DEFAULT_PERMALINK
    if not isinstance(value, str) or not value.strip():
        msg = "'permalink' must be a non-empty string."
        raise ConfigValidationError(msg)
    pattern = value.strip()
    return PERMALINK_STYLES.get(pattern, pattern)


def _build_highlighter(raw: typ.Mapping[str, typ.Any]) -> HighlighterConfig:
    """Read highlighter options from the kramdown block, if present."""
    kramdown = raw.get("kramdown") or {}
    options = kramdown.get("syntax_highlighter_opts") if isinstance(kramdown, dict) else None
    if not isinstance(options, dict):
        options = {}
    base = HighlighterConfig()
    return HighlighterConfig(
        css_class=_optional_str(options.get("css_class")) or base.css_class,
        default_lang=_optional_str(options.get("default_lang")),
        pygments_style=_optional_str(raw.get("pygments_style")) or base.pygments_style,
    )


def _build_feed_config(raw: typ.Mapping[str, typ.Any]) -> FeedConfig:
    """Build the Atom feed options from the optional ``feed:`` block."""
    payload = raw.get("feed") or {}
    if not isinstance(payload, dict):
        msg = "'feed' must be a mapping."
        raise ConfigValidationError(msg)
    limit = payload.get("posts_limit", DEFAULT_FEED_POSTS_LIMIT)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        msg = "'feed.posts_limit' must be a non-negative integer."
        raise ConfigValidationError(msg)
    path = _optional_str(payload.get("path")) or DEFAULT_FEED_PATH
    return FeedConfig(path=path.lstrip("/"), posts_limit=limit)


def _build_defaults(raw: typ.Mapping[str, typ.Any]) -> tuple[FrontMatterDefault, ...]:
    """Parse the ``defaults:`` list of scope/values rules."""
    value = raw.get("defaults")
    if value is None:
        return ()
    if not isinstance(value, list):
        msg = "'defaults' must be a list of scope/values entries."
        raise ConfigValidationError(msg)
    rules: list[FrontMatterDefault] = []
    for index, entry in enumerate(value):
        if not isinstance(entry, dict) or not isinstance(entry.get("values"), dict):
            msg = f"'defaults[{index}]' must be a mapping with a 'values' mapping."
            raise ConfigValidationError(msg)
        scope = entry.get("scope") or {}
        if not isinstance(scope, dict):
            msg = f"'defaults[{index}].scope' must be a mapping."
            raise ConfigValidationError(msg)
        rules.append(
            FrontMatterDefault(
                path=_optional_str(scope.get("path")) or "",
                type=_optional_str(scope.get("type")),
                values=_freeze(entry["values"]),
            )
        )
    return tuple(rules)


def _parse_timestamp(
    value: dt.datetime | dt.date | str | None, *, tzinfo: dt.tzinfo = dt.UTC
) -> dt.datetime | None:
    """Return a timezone-aware UTC datetime parsed from ``value``, or None.

    Naive values are interpreted in ``tzinfo`` (the site timezone) before
    conversion, and bare dates are taken as midnight.
    """
    match value:
        case dt.datetime():
            parsed = value
        case dt.date():
            parsed = dt.datetime(value.year, value.month, value.day)
        case str() as text:
            sanitized = text.strip()
            if not sanitized:
                return None
            if sanitized.endswith("Z"):
                sanitized = sanitized[:-1] + "+00:00"
            try:
                parsed = dt.datetime.fromisoformat(sanitized)
            except ValueError:
                try:
                    parsed = dt.datetime.strptime(sanitized, "%Y-%m-%d %H:%M:%S %z")
                except ValueError:
                    return None
        case _:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tzinfo)
    return parsed.astimezone(dt.UTC)


__all__ = [
    "_build_defaults",
    "_build_feed_config",
    "_build_highlighter",
    "_build_social_links",
    "_freeze",
    "_optional_str",
    "_parse_timestamp",
    "_resolve_permalink",
    "_string_list",
]
