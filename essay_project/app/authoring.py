from __future__ import annotations

import logging
import os
from datetime import date
from typing import Any, Dict, List, Optional

from essay_project.content.collection import DEFAULT_DRAFTS_DIR, DEFAULT_POSTS_DIR
from essay_project.content.frontmatter import FrontMatterError, dump_front_matter, parse_front_matter
from essay_project.content.identity import slugify, split_dated_name
from essay_project.content.model import Collection
from essay_project.foundation.logging_utils import write_text

logger = logging.getLogger(__name__)

DEFAULT_DRAFT_LAYOUT = "post"


def list_documents(collection: Collection, *, include_drafts: bool = True) -> List[Dict[str, Any]]:
    """One row per document: posts newest first, then drafts in path order."""

    docs = list(collection.posts)
    if include_drafts:
        docs.extend(collection.drafts)
    return [
        {
            "doc_id": doc.doc_id,
            "kind": doc.kind,
            "date": doc.date.isoformat() if doc.date else "",
            "title": doc.title or "",
            "url": doc.url,
            "path": doc.rel_path,
        }
        for doc in docs
    ]


def format_rows(rows: List[Dict[str, Any]]) -> str:
    if not rows:
        return "No documents found."
    columns = ("date", "kind", "doc_id", "title")
    widths = {col: max(len(col), *(len(str(row[col])) for row in rows)) for col in columns}
    header = "  ".join(col.ljust(widths[col]) for col in columns)
    lines = [header, "  ".join("-" * widths[col] for col in columns)]
    for row in rows:
        lines.append("  ".join(str(row[col]).ljust(widths[col]) for col in columns).rstrip())
    return "\n".join(lines)


def new_draft(
    root: str,
    title: str,
    *,
    layout: str = DEFAULT_DRAFT_LAYOUT,
    drafts_dir: str = DEFAULT_DRAFTS_DIR,
    extension: str = ".md",
) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValueError("Draft title must be a non-empty string")
    title = title.strip()

    path = os.path.join(root, drafts_dir, f"{slugify(title)}{extension}")
    if os.path.exists(path):
        raise FileExistsError(f"Draft already exists: {path}")

    write_text(path, dump_front_matter({"layout": layout, "title": title}, "\n"))
    logger.info("Created draft %s", path)
    return path


def find_draft(root: str, draft: str, *, drafts_dir: str = DEFAULT_DRAFTS_DIR) -> str:
    """Resolve a draft given as a path, a file name, or a file stem."""

    if os.path.isfile(draft):
        return os.path.abspath(draft)
    base = os.path.join(root, drafts_dir)
    for candidate in (draft, f"{draft}.md", f"{draft}.markdown"):
        path = os.path.join(base, candidate)
        if os.path.isfile(path):
            return os.path.abspath(path)
    raise FileNotFoundError(f"No draft named {draft!r} in {base}")


def publish_draft(
    root: str,
    draft: str,
    *,
    on: Optional[date] = None,
    posts_dir: str = DEFAULT_POSTS_DIR,
    drafts_dir: str = DEFAULT_DRAFTS_DIR,
) -> str:
    """
    Move a draft into the posts directory as ``YYYY-MM-DD-<slug><ext>``.

    The front-matter ``date`` is set to the publication date. Raises
    FileExistsError instead of overwriting an existing post.
    """

    on = on or date.today()
    source = find_draft(root, draft, drafts_dir=drafts_dir)
    with open(source, "r", encoding="utf-8") as handle:
        text = handle.read()

    front_matter, body = parse_front_matter(text, path=source)
    if front_matter is None:
        raise FrontMatterError("draft has no front-matter block", path=source)

    stem, ext = os.path.splitext(os.path.basename(source))
    _, remainder = split_dated_name(stem)
    slug_source = front_matter.get("slug") if isinstance(front_matter.get("slug"), str) else remainder
    slug = slugify(slug_source)

    target = os.path.join(root, posts_dir, f"{on.isoformat()}-{slug}{ext}")
    if os.path.exists(target):
        raise FileExistsError(f"Post already exists: {target}")

    front_matter["date"] = on
    write_text(target, dump_front_matter(front_matter, body))
    os.remove(source)
    logger.info("Published %s -> %s", source, target)
    return target
