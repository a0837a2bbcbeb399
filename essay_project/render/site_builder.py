from __future__ import annotations

import logging
import os
import posixpath
import shutil
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from markupsafe import Markup

from essay_project.content.collection import iter_static_files
from essay_project.content.identity import INDEX_URL
from essay_project.content.model import Collection, Document
from essay_project.foundation.logging_utils import write_text
from essay_project.framework.config import SiteConfig

from .markdown_render import render_markdown
from .templates import build_environment, get_layout

INDEX_LAYOUT = "index"


@dataclass
class BuildResult:
    output_dir: str
    pages: List[str] = field(default_factory=list)
    static_files: List[str] = field(default_factory=list)
    skipped_drafts: List[str] = field(default_factory=list)
    skipped_static: List[str] = field(default_factory=list)
    skipped_pages: List[str] = field(default_factory=list)


def _is_within(path: str, parent: str) -> bool:
    path = os.path.abspath(path)
    parent = os.path.abspath(parent)
    return path == parent or path.startswith(parent.rstrip(os.sep) + os.sep)


def check_output_dir(output_dir: str, source_root: str) -> None:
    """Refuse output directories whose removal would delete source files."""

    output_dir = os.path.abspath(output_dir)
    source_root = os.path.abspath(source_root)
    if output_dir == os.path.abspath(os.sep) or output_dir == os.path.expanduser("~"):
        raise ValueError(f"Refusing to use {output_dir} as the output directory")
    if _is_within(source_root, output_dir):
        raise ValueError(
            f"Output directory {output_dir} contains the source root {source_root}; refusing to clean it"
        )
    if _is_within(output_dir, source_root):
        rel = os.path.relpath(output_dir, source_root).replace(os.sep, "/")
        if not rel.split("/")[0].startswith(("_", ".")):
            raise ValueError(
                f"Output directory {output_dir} is inside the source root but not underscore-prefixed "
                f"(it would be copied into itself as static content)"
            )


def url_to_output_path(output_dir: str, url: str) -> str:
    rel = posixpath.normpath(url.lstrip("/"))
    if rel in ("", ".") or rel.startswith(".."):
        raise ValueError(f"URL escapes the output directory: {url}")
    if url.endswith("/"):
        rel = posixpath.join(rel, "index.html")
    return os.path.join(output_dir, *rel.split("/"))


def page_context(doc: Document) -> Dict[str, Any]:
    return {
        "title": doc.display_title,
        "date": doc.date,
        "url": doc.url,
        "layout": doc.layout,
        "doc_id": doc.doc_id,
        "kind": doc.kind,
        "footnotes": list(doc.footnotes or []),
        "front_matter": dict(doc.front_matter),
    }


class SiteRenderer:
    def __init__(self, collection: Collection, config: SiteConfig, *, logger: Optional[logging.Logger] = None):
        self.collection = collection
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.env = build_environment(collection.root)
        self.site = {"title": config.site_title, "base_url": config.base_url}

    def resolve_post_url(self, name: str) -> Optional[str]:
        doc = self.collection.resolve_post_url(name)
        if doc is None:
            self.logger.warning("Unresolved post_url %r", name)
            return None
        return f"{self.config.base_url}{doc.url}"

    def render_document(self, doc: Document) -> str:
        body_html = render_markdown(doc, resolve_post_url=self.resolve_post_url)
        template = get_layout(self.env, doc.layout, logger=self.logger)
        return template.render(site=self.site, page=page_context(doc), content=Markup(body_html))

    def render_index(self, posts: List[Document], drafts: List[Document]) -> str:
        template = get_layout(self.env, INDEX_LAYOUT, logger=self.logger)
        return template.render(
            site=self.site,
            page={"title": None, "url": INDEX_URL, "layout": INDEX_LAYOUT, "kind": "index"},
            posts=[page_context(d) for d in posts],
            drafts=[page_context(d) for d in drafts],
            content=Markup(""),
        )


def build_site(
    collection: Collection,
    config: SiteConfig,
    *,
    logger: Optional[logging.Logger] = None,
    include_drafts: Optional[bool] = None,
) -> BuildResult:
    logger = logger or logging.getLogger(__name__)
    include_drafts = config.include_drafts if include_drafts is None else include_drafts
    output_dir = os.path.abspath(config.resolved_output_dir)
    check_output_dir(output_dir, collection.root)

    if os.path.isdir(output_dir):
        logger.debug("Cleaning output directory %s", output_dir)
        shutil.rmtree(output_dir)
    os.makedirs(output_dir, exist_ok=True)

    renderer = SiteRenderer(collection, config, logger=logger)
    result = BuildResult(output_dir=output_dir)

    posts = collection.posts
    drafts = collection.drafts if include_drafts else []
    result.skipped_drafts = [] if include_drafts else [d.rel_path for d in collection.drafts]

    written_urls: set[str] = {INDEX_URL}
    written: List[Document] = []
    for doc in [*posts, *drafts]:
        if doc.url in written_urls:
            reason = "reserved for the index page" if doc.url == INDEX_URL else "already written"
            logger.warning("Skipping %s: URL %s %s", doc.rel_path, doc.url, reason)
            result.skipped_pages.append(doc.rel_path)
            continue
        target = url_to_output_path(output_dir, doc.url)
        write_text(target, renderer.render_document(doc))
        written_urls.add(doc.url)
        written.append(doc)
        result.pages.append(doc.url)
        logger.debug("Wrote %s -> %s", doc.rel_path, target)

    index_html = renderer.render_index(
        [d for d in written if not d.is_draft],
        [d for d in written if d.is_draft],
    )
    write_text(url_to_output_path(output_dir, INDEX_URL), index_html)
    result.pages.append(INDEX_URL)

    for rel in iter_static_files(collection.root, exclude=config.static_excludes(collection.root)):
        if "/" + rel in written_urls:
            logger.warning("Static file %s collides with a generated page; skipped", rel)
            result.skipped_static.append(rel)
            continue
        destination = os.path.join(output_dir, *rel.split("/"))
        os.makedirs(os.path.dirname(destination), exist_ok=True)
        shutil.copy2(os.path.join(collection.root, *rel.split("/")), destination)
        result.static_files.append(rel)

    logger.info(
        "Built site in %s: pages=%d static=%d skipped_drafts=%d",
        output_dir,
        len(result.pages),
        len(result.static_files),
        len(result.skipped_drafts),
    )
    return result
