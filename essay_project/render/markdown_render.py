from __future__ import annotations

from typing import Callable, Optional

import markdown

from essay_project.content.links import extract_footnote_definitions, replace_post_url_tags
from essay_project.content.model import Document

MARKDOWN_EXTENSIONS: tuple[str, ...] = ("extra", "toc", "sane_lists")

UrlResolver = Callable[[str], Optional[str]]


def footnote_definitions(doc: Document) -> str:
    """Markdown footnote definitions for the document's declared front-matter footnotes.

    Declared footnote N becomes ``[^N]``; labels the body already defines inline are left alone.
    """

    if not doc.footnotes:
        return ""
    inline = {ref.label for ref in extract_footnote_definitions(doc.body)}
    lines = []
    for idx, text in enumerate(doc.footnotes, start=1):
        label = str(idx)
        if label in inline:
            continue
        lines.append(f"[^{label}]: {' '.join(text.split())}")
    return "\n".join(lines)


def prepare_source(doc: Document, *, resolve_post_url: UrlResolver | None = None) -> str:
    body = doc.body
    if resolve_post_url is not None:
        body = replace_post_url_tags(body, resolve_post_url)
    definitions = footnote_definitions(doc)
    if definitions:
        body = body.rstrip("\n") + "\n\n" + definitions + "\n"
    return body


def render_markdown(doc: Document, *, resolve_post_url: UrlResolver | None = None) -> str:
    md = markdown.Markdown(extensions=list(MARKDOWN_EXTENSIONS), output_format="html")
    return md.convert(prepare_source(doc, resolve_post_url=resolve_post_url))
