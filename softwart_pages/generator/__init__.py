"""Utilities for converting, laying out, and addressing site documents."""

from .layouts import LayoutRenderer
from .models import Document, RenderedPage
from .permalink import output_file_for, resolve_permalink, slugify
from .renderer import HtmlContentRenderer

__all__ = [
    "Document",
    "HtmlContentRenderer",
    "LayoutRenderer",
    "RenderedPage",
    "output_file_for",
    "resolve_permalink",
    "slugify",
]
