from __future__ import annotations

import logging
import os
from typing import Optional

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, StrictUndefined, Template, TemplateNotFound

FALLBACK_LAYOUT = "default"


def build_environment(root: Optional[str] = None) -> Environment:
    """Jinja2 environment searching ``<root>/_layouts`` before the built-in layouts."""

    loaders = []
    if root:
        layouts_dir = os.path.join(root, "_layouts")
        if os.path.isdir(layouts_dir):
            loaders.append(FileSystemLoader(layouts_dir))
    loaders.append(PackageLoader("essay_project.render", "templates"))
    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["isodate"] = lambda value: value.isoformat() if value else ""
    return env


def get_layout(env: Environment, layout: Optional[str], *, logger: Optional[logging.Logger] = None) -> Template:
    name = layout or FALLBACK_LAYOUT
    try:
        return env.get_template(f"{name}.html")
    except TemplateNotFound:
        if logger:
            logger.warning("Layout %r not found; using %r", name, FALLBACK_LAYOUT)
        return env.get_template(f"{FALLBACK_LAYOUT}.html")
