"""Apply Jinja layouts to converted document bodies.

A document names its layout through the ``layout`` front-matter key. The
layout is looked up as ``<layout>.html`` in the site's ``_layouts`` directory
first and then among the layouts bundled with this package; ``_includes`` is
also on the search path so layouts can ``{% include %}`` partials. Layouts
nest through ``{% extends %}`` and also receive ``highlight_css``, the
Pygments rules for the configured highlight class.

Substituted values are rendered reproducibly: dates and datetimes always use
ISO-8601 via the environment's ``finalize`` hook, never locale formats.
"""

from __future__ import annotations

import datetime as dt
import typing as typ
from pathlib import Path

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)
from markupsafe import Markup

from .._constants import INCLUDES_DIR, LAYOUTS_DIR
from ..errors import TemplateNotFoundError, TemplateRenderError
from .permalink import slugify
from .renderer import HtmlContentRenderer

if typ.TYPE_CHECKING:
    from ..config import SiteConfig
    from .models import Document

NO_LAYOUT = frozenset({"none", "null", ""})
DEFAULT_EXCERPT_SEPARATOR = "\n\n"


def _finalize(value: object) -> object:
    """Format dates as ISO-8601 and blank out ``None`` in template output."""
    if value is None:
        return ""
    if isinstance(value, dt.datetime | dt.date):
        return value.isoformat()
    return value


class LayoutRenderer:
    """Convert document bodies and wrap them in their layouts."""

    def __init__(
        self,
        site_config: SiteConfig,
        site_root: Path,
        *,
        content_renderer: HtmlContentRenderer | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the renderer and its Jinja environment.

        Parameters
        ----------
        site_config : SiteConfig
            Site settings exposed to templates as ``site``.
        site_root : Path
            Source directory holding ``_layouts`` and ``_includes``.
        content_renderer : HtmlContentRenderer, optional
            Markdown converter; built from the highlighter config by default.
        templates_dir : Path, optional
            Directory of fallback layouts; defaults to the bundled layouts.
        """
        self.site_config = site_config
        highlighter = site_config.highlighter
        self.content_renderer = content_renderer or HtmlContentRenderer(
            highlighter.pygments_style,
            css_class=highlighter.css_class,
            default_lang=highlighter.default_lang,
        )
        default_templates = Path(__file__).resolve().parents[1] / "templates" / "layouts"
        self.templates_dir = templates_dir or default_templates
        self.env = Environment(
            loader=ChoiceLoader(
                [
                    FileSystemLoader(str(site_root / LAYOUTS_DIR)),
                    FileSystemLoader(str(site_root / INCLUDES_DIR)),
                    FileSystemLoader(str(self.templates_dir)),
                ]
            ),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            finalize=_finalize,
        )
        self.env.filters.update(
            markdownify=self.markdownify,
            slugify=slugify,
            date_to_xmlschema=_date_to_xmlschema,
            absolute_url=self.absolute_url,
            relative_url=self.relative_url,
        )
        self._site_context = site_config.template_context()
        self._highlight_css = Markup(self.content_renderer.stylesheet)

    def convert(self, document: Document) -> str:
        """Return the document body as HTML, converting markdown sources."""
        body = typ.cast("str", document.body)
        if self.site_config.is_markdown(document.suffix):
            return self.content_renderer.markdown(body)
        return body

    def excerpt(self, document: Document) -> str:
        """Return the HTML of the body text before the excerpt separator."""
        separator = str(
            document.metadata.get("excerpt_separator")
            or self.site_config.extra.get("excerpt_separator")
            or DEFAULT_EXCERPT_SEPARATOR
        )
        body = typ.cast("str", document.body).strip()
        head = body.split(separator, 1)[0]
        if self.site_config.is_markdown(document.suffix):
            return self.content_renderer.markdown(head)
        return head

    def render(self, document: Document, content: str) -> str:
        """Substitute ``content`` and metadata into the document's layout.

        Parameters
        ----------
        document : Document
            Parsed document; ``metadata["layout"]`` selects the template.
        content : str
            Converted body HTML, inserted unescaped as ``content``.

        Returns
        -------
        str
            Final HTML. Documents without a layout return ``content`` as is.

        Raises
        ------
        TemplateNotFoundError
            If the layout, or a template it extends or includes, is missing.
        TemplateRenderError
            If a template has a syntax error or fails while rendering.
        """
        layout = document.metadata.get("layout")
        if layout is None or str(layout).strip().lower() in NO_LAYOUT:
            return content
        layout_name = str(layout).strip()
        context = {
            "site": self._site_context,
            "page": self._page_context(document),
            "content": Markup(content),
            "layout": layout_name,
            "highlight_css": self._highlight_css,
        }
        try:
            template = self.env.get_template(f"{layout_name}.html")
            return template.render(**context)
        except TemplateNotFound as exc:
            raise TemplateNotFoundError(
                layout_name, template=exc.name, source=document.relative_path
            ) from exc
        except TemplateError as exc:
            raise TemplateRenderError(
                layout_name, str(exc), source=document.relative_path
            ) from exc

    def markdownify(self, text: object) -> Markup:
        """Jinja filter converting a markdown string into HTML."""
        if text is None:
            return Markup("")
        return Markup(self.content_renderer.markdown(str(text)))

    def relative_url(self, path: object) -> str:
        """Jinja filter prefixing ``path`` with the site ``baseurl``."""
        text = str(path or "")
        return f"{self.site_config.baseurl}/{text.lstrip('/')}"

    def absolute_url(self, path: object) -> str:
        """Jinja filter prefixing ``path`` with the site ``url`` and ``baseurl``."""
        return f"{self.site_config.url}{self.relative_url(path)}"

    @staticmethod
    def _page_context(document: Document) -> dict[str, typ.Any]:
        context = dict(document.metadata)
        context.update(
            url=document.output_path,
            date=document.date,
            path=document.relative_path,
            is_post=document.is_post,
        )
        return context


def _date_to_xmlschema(value: dt.date | dt.datetime | None) -> str:
    """Jinja filter rendering a date as an ISO-8601 timestamp."""
    if value is None:
        return ""
    if not isinstance(value, dt.datetime):
        value = dt.datetime(value.year, value.month, value.day, tzinfo=dt.UTC)
    return value.isoformat(timespec="seconds")


__all__ = ["LayoutRenderer"]
