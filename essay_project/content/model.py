from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterator, List, Literal, Optional, Tuple

DocumentKind = Literal["post", "draft"]


@dataclass(frozen=True)
class Document:
    source_path: str
    rel_path: str
    kind: DocumentKind
    body: str
    slug: str
    doc_id: str
    url: str
    front_matter: Dict[str, Any] = field(default_factory=dict)
    has_front_matter: bool = True
    layout: Optional[str] = None
    title: Optional[str] = None
    footnotes: Optional[List[str]] = None
    date: Optional[date] = None
    filename_date: Optional[date] = None
    parse_error: Optional[str] = None

    @property
    def stem(self) -> str:
        return os.path.splitext(os.path.basename(self.rel_path))[0]

    @property
    def is_draft(self) -> bool:
        return self.kind == "draft"

    @property
    def display_title(self) -> str:
        return self.title or self.slug


@dataclass(frozen=True)
class Collection:
    """Flat, ordered set of documents loaded from one source root."""

    root: str
    documents: Tuple[Document, ...] = ()

    def __iter__(self) -> Iterator[Document]:
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)

    @property
    def posts(self) -> List[Document]:
        """Published documents, newest first; undated posts sort last."""
        posts = [doc for doc in self.documents if doc.kind == "post"]
        return sorted(
            posts,
            key=lambda doc: (doc.date is not None, doc.date or date.min, doc.rel_path),
            reverse=True,
        )

    @property
    def drafts(self) -> List[Document]:
        return [doc for doc in self.documents if doc.kind == "draft"]

    def by_url(self, url: str) -> Optional[Document]:
        for doc in self.documents:
            if doc.url == url:
                return doc
        return None

    def by_stem(self, stem: str) -> Optional[Document]:
        for doc in self.documents:
            if doc.stem == stem:
                return doc
        return None

    def by_rel_path(self, rel_path: str) -> Optional[Document]:
        wanted = rel_path.replace("\\", "/").lstrip("/")
        for doc in self.documents:
            if doc.rel_path == wanted:
                return doc
        return None

    def resolve_post_url(self, name: str) -> Optional[Document]:
        """Look up a `post_url` tag argument (a source filename, with or without extension)."""
        stem = posixpath.basename(name.replace("\\", "/"))
        if stem.endswith((".md", ".markdown")):
            stem = os.path.splitext(stem)[0]
        return self.by_stem(stem)
