"""Static HTML rendering of an essay collection."""

from .markdown_render import render_markdown
from .site_builder import BuildResult, SiteRenderer, build_site

__all__ = ["BuildResult", "SiteRenderer", "build_site", "render_markdown"]
