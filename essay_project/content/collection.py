from __future__ import annotations

import logging
import os
from typing import Any, Iterable, List, Optional, Sequence

from .frontmatter import FrontMatterError, parse_front_matter
from .identity import (
    coerce_date,
    derive_doc_id,
    normalize_permalink,
    post_url,
    slugify,
    split_dated_name,
)
from .model import Collection, Document, DocumentKind

logger = logging.getLogger(__name__)

DEFAULT_POSTS_DIR = "_posts"
DEFAULT_DRAFTS_DIR = "_drafts"
DEFAULT_EXTENSIONS = (".md", ".markdown")


def _clean_title(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value.strip()
    return None


def _clean_footnotes(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [str(item) for item in value]


def _optional_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def load_document(path: str, *, root: str, kind: DocumentKind) -> Document:
    """
    Load one essay from disk.

    Front-matter errors are recorded on the document (`parse_error`) instead of raised,
    so a single broken file does not prevent the rest of the collection from loading.
    """

    abs_path = os.path.abspath(path)
    rel_path = os.path.relpath(abs_path, os.path.abspath(root)).replace(os.sep, "/")
    with open(abs_path, "r", encoding="utf-8") as handle:
        text = handle.read()

    parse_error: Optional[str] = None
    try:
        front_matter, body = parse_front_matter(text, path=rel_path)
    except FrontMatterError as exc:
        logger.debug("Front-matter error in %s: %s", rel_path, exc)
        parse_error = str(exc)
        front_matter, body = {}, text

    has_front_matter = front_matter is not None
    meta = dict(front_matter or {})

    stem = os.path.splitext(os.path.basename(abs_path))[0]
    filename_date, remainder = split_dated_name(stem)
    meta_date = coerce_date(meta.get("date"))
    created = filename_date or meta_date

    title = _clean_title(meta.get("title"))
    explicit_slug = _optional_str(meta.get("slug"))
    if explicit_slug:
        slug = slugify(explicit_slug)
    elif remainder:
        slug = slugify(remainder)
    else:
        slug = slugify(title or "")

    if kind == "draft" and filename_date is None:
        created_for_id = None
    else:
        created_for_id = created

    permalink = _optional_str(meta.get("permalink"))
    url = normalize_permalink(permalink) if permalink else post_url(created_for_id, slug)

    return Document(
        source_path=abs_path,
        rel_path=rel_path,
        kind=kind,
        body=body,
        slug=slug,
        doc_id=derive_doc_id(created_for_id, slug),
        url=url,
        front_matter=meta,
        has_front_matter=has_front_matter or parse_error is not None,
        layout=_optional_str(meta.get("layout")),
        title=title,
        footnotes=_clean_footnotes(meta.get("footnotes")),
        date=created,
        filename_date=filename_date,
        parse_error=parse_error,
    )


def iter_source_files(directory: str, extensions: Sequence[str]) -> Iterable[str]:
    """Yield matching files below `directory` in a stable, sorted order."""

    wanted = tuple(ext.lower() for ext in extensions)
    for current, dirnames, filenames in os.walk(directory):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for name in sorted(filenames):
            if name.startswith("."):
                continue
            if os.path.splitext(name)[1].lower() in wanted:
                yield os.path.join(current, name)


def load_collection(
    root: str,
    *,
    posts_dir: str = DEFAULT_POSTS_DIR,
    drafts_dir: str = DEFAULT_DRAFTS_DIR,
    include_drafts: bool = True,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> Collection:
    if not os.path.isdir(root):
        raise FileNotFoundError(f"Source root does not exist: {root}")

    sources: list[tuple[str, DocumentKind]] = [(posts_dir, "post")]
    if include_drafts:
        sources.append((drafts_dir, "draft"))

    documents: list[Document] = []
    for subdir, kind in sources:
        directory = os.path.join(root, subdir)
        if not os.path.isdir(directory):
            logger.debug("No %s directory at %s", kind, directory)
            continue
        for path in iter_source_files(directory, extensions):
            documents.append(load_document(path, root=root, kind=kind))

    logger.info(
        "Loaded %d documents from %s (%d posts, %d drafts)",
        len(documents),
        root,
        sum(1 for d in documents if d.kind == "post"),
        sum(1 for d in documents if d.kind == "draft"),
    )
    return Collection(root=os.path.abspath(root), documents=tuple(documents))


def iter_static_files(root: str, *, exclude: Sequence[str] = ()) -> Iterable[str]:
    """
    Yield root-relative ('/'-separated) paths of files copied verbatim into the site.

    Any path component starting with '_' or '.' excludes the file, as do the
    root-relative prefixes in `exclude`.
    """

    excluded = tuple(p.replace(os.sep, "/").strip("/") for p in exclude if p)
    abs_root = os.path.abspath(root)
    for current, dirnames, filenames in os.walk(abs_root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith(("_", ".")))
        for name in sorted(filenames):
            if name.startswith(("_", ".")):
                continue
            rel = os.path.relpath(os.path.join(current, name), abs_root).replace(os.sep, "/")
            if any(rel == prefix or rel.startswith(prefix + "/") for prefix in excluded):
                continue
            yield rel
