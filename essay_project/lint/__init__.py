"""Content-integrity checks for an essay collection."""

TOOL_VERSION = "0.1.0"

__all__ = [
    "build_report",
    "report_to_dict",
    "render_html",
    "default_registry",
]

from .report_builder import build_report, report_to_dict
from .render_html import render_html
from .rules import default_registry
