"""Markdown to HTML conversion with Pygments-highlighted code blocks.

Fenced blocks are normalised in a single pass before conversion: fences
indented inside list items are pulled back to the margin, ``lang,extras``
labels are reduced to the language, and unlabelled blocks receive the
configured default language. The pass records each block's language so the
highlighted ``<div>`` wrappers can be tagged with ``data-language`` after
conversion.
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

FENCE_PATTERN = re.compile(
    r"^[ ]{0,3}(?P<fence>`{3,}|~{3,})[ \t]*"
    r"(?P<lang>[A-Za-z0-9_+#.-]*)(?:,[^\r\n]*)?[ \t]*$"
)
DEFAULT_EXTENSIONS = ("fenced_code", "codehilite", "tables", "sane_lists", "md_in_html")


@dc.dataclass(slots=True)
class _FencedSource:
    text: str
    languages: list[str] = dc.field(default_factory=list)


def _prepare_fences(text: str, default_lang: str | None) -> _FencedSource:
    lines = text.splitlines(keepends=True)
    result = _FencedSource(text="")
    open_fence: str | None = None
    for index, line in enumerate(lines):
        body = line.rstrip("\r\n")
        match = FENCE_PATTERN.match(body)
        if match is None:
            continue
        fence, lang = match.group("fence"), match.group("lang")
        ending = line[len(body) :]
        if open_fence is None:
            lang = lang or default_lang or ""
            result.languages.append(lang or "text")
            open_fence = fence
            lines[index] = f"{fence}{lang}{ending}"
        elif not lang and fence[0] == open_fence[0] and len(fence) >= len(open_fence):
            open_fence = None
            lines[index] = f"{fence}{ending}"
    result.text = "".join(lines)
    return result


class HtmlContentRenderer:
    """Convert markdown to HTML, highlighting fenced code with Pygments."""

    def __init__(
        self,
        pygments_style: str = "default",
        *,
        css_class: str = "highlight",
        default_lang: str | None = None,
        extensions: typ.Sequence[Extension | str] = (),
    ) -> None:
        """Initialize a renderer.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting.
        css_class : str, optional
            CSS class wrapping highlighted blocks; mirrors kramdown's
            ``syntax_highlighter_opts.css_class``.
        default_lang : str, optional
            Language applied to fenced blocks that do not name one.
        extensions : sequence, optional
            Extra Python-Markdown extensions appended to the defaults.
        """
        self.pygments_style = pygments_style
        self.css_class = css_class
        self.default_lang = default_lang
        self.extensions: list[Extension | str] = [*DEFAULT_EXTENSIONS, *extensions]
        self._wrapper = re.compile(rf'<div class="{re.escape(css_class)}">')

    @property
    def stylesheet(self) -> str:
        """Return the Pygments CSS rules scoped to the highlight class."""
        formatter = HtmlFormatter(style=self.pygments_style, cssclass=self.css_class)
        return formatter.get_style_defs(f".{self.css_class}")

    def markdown(self, text: str) -> str:
        """Render markdown into HTML.

        ``markdown="1"`` HTML blocks are converted as markdown too. Python-Markdown
        instances keep per-document state, so each call builds its own.
        """
        source = _prepare_fences(text, self.default_lang)
        if not source.text.strip():
            return ""
        md = Markdown(
            extensions=self.extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": self.css_class,
                    "pygments_style": self.pygments_style,
                }
            },
        )
        return self._tag_languages(md.convert(source.text), source.languages)

    def _tag_languages(self, html: str, languages: list[str]) -> str:
        if not languages:
            return html
        remaining = iter(languages)

        def _repl(_match: re.Match[str]) -> str:
            lang = escape(next(remaining, "text"), quote=True)
            return f'<div class="{self.css_class}" data-language="{lang}">'

        return self._wrapper.sub(_repl, html, len(languages))


__all__ = ["HtmlContentRenderer"]
