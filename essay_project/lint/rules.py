from __future__ import annotations

import difflib
import posixpath
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional

from essay_project.content.identity import INDEX_URL, coerce_date
from essay_project.content.links import (
    extract_footnote_definitions,
    extract_footnote_refs,
    extract_links,
    internal_path,
)
from essay_project.content.model import Collection, Document

from .report_model import Issue
from .similarity import near_duplicates


@dataclass(frozen=True)
class LintContext:
    known_layouts: frozenset[str]
    static_paths: frozenset[str] = frozenset()
    near_duplicate_threshold: float = 0.9
    base_path: str = ""
    extra_urls: frozenset[str] = field(default_factory=lambda: frozenset({"/", "/index.html"}))


RuleFunc = Callable[[Collection, LintContext], Iterable[Issue]]


@dataclass(frozen=True)
class Rule:
    name: str
    codes: tuple[str, ...]
    doc: str
    func: RuleFunc


@dataclass(frozen=True)
class RuleRegistry:
    _by_name: dict[str, Rule]

    @classmethod
    def from_rules(cls, rules: Iterable[Rule]) -> "RuleRegistry":
        entries: dict[str, Rule] = {}
        for rule in rules:
            if rule.name in entries:
                raise ValueError(f"Duplicate lint rule name: {rule.name}")
            entries[rule.name] = rule
        return cls(_by_name=entries)

    def available(self) -> tuple[str, ...]:
        return tuple(sorted(self._by_name))

    def codes(self) -> tuple[str, ...]:
        return tuple(sorted({code for rule in self._by_name.values() for code in rule.codes}))

    def get(self, name: str) -> Rule:
        rule = self._by_name.get((name or "").strip())
        if rule is None:
            raise ValueError(f"Unknown lint rule: {name}")
        return rule

    def suggest(self, name: str, *, limit: int = 3) -> tuple[str, ...]:
        key = (name or "").strip()
        if not key:
            return ()
        candidates = list(self.available()) + list(self.codes())
        return tuple(difflib.get_close_matches(key, candidates, n=limit))

    def validate_disabled(self, disabled: Iterable[str]) -> None:
        known = set(self.available()) | set(self.codes())
        for entry in disabled:
            if entry not in known:
                suggestions = self.suggest(entry)
                hint = f" (did you mean: {', '.join(suggestions)})" if suggestions else ""
                raise ValueError(f"Unknown lint rule or issue code in lint.disabled_rules: {entry}{hint}")

    def run(self, collection: Collection, context: LintContext, *, disabled: Iterable[str] = ()) -> tuple[List[Issue], List[str]]:
        disabled_set = set(disabled)
        issues: List[Issue] = []
        ran: List[str] = []
        for name in self.available():
            if name in disabled_set:
                continue
            rule = self._by_name[name]
            ran.append(name)
            for issue in rule.func(collection, context):
                if issue.code in disabled_set:
                    continue
                issues.append(issue)
        return issues, ran


def _with_front_matter(collection: Collection) -> Iterator[Document]:
    for doc in collection:
        if doc.parse_error is None and doc.has_front_matter:
            yield doc


def check_front_matter(collection: Collection, context: LintContext) -> Iterator[Issue]:
    for doc in collection:
        if doc.parse_error is not None:
            yield Issue("error", "front_matter_invalid", doc.parse_error, path=doc.rel_path, line=1)
        elif not doc.has_front_matter:
            yield Issue("error", "front_matter_missing", "Document has no front-matter block", path=doc.rel_path, line=1)


def check_title(collection: Collection, context: LintContext) -> Iterator[Issue]:
    for doc in _with_front_matter(collection):
        if "title" not in doc.front_matter:
            yield Issue("error", "title_missing", "Front-matter has no title", path=doc.rel_path)
        elif not doc.title:
            yield Issue(
                "error",
                "title_empty",
                f"Title must be a non-empty string (got {doc.front_matter.get('title')!r})",
                path=doc.rel_path,
            )


def check_layout(collection: Collection, context: LintContext) -> Iterator[Issue]:
    for doc in _with_front_matter(collection):
        if doc.layout is None:
            if "layout" in doc.front_matter:
                yield Issue("error", "layout_unknown", "Layout must be a non-empty string", path=doc.rel_path)
            else:
                yield Issue("warn", "layout_missing", "Front-matter has no layout", path=doc.rel_path)
        elif doc.layout not in context.known_layouts:
            known = ", ".join(sorted(context.known_layouts)) or "<none>"
            yield Issue(
                "error",
                "layout_unknown",
                f"Unknown layout {doc.layout!r} (known: {known})",
                path=doc.rel_path,
            )


def check_footnotes(collection: Collection, context: LintContext) -> Iterator[Issue]:
    for doc in _with_front_matter(collection):
        declared: list[str] = []
        if "footnotes" in doc.front_matter:
            raw = doc.front_matter["footnotes"]
            if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
                yield Issue(
                    "error",
                    "footnotes_invalid",
                    "footnotes must be a list of strings",
                    path=doc.rel_path,
                )
            else:
                declared = [str(idx) for idx in range(1, len(raw) + 1)]

        inline = {ref.label for ref in extract_footnote_definitions(doc.body)}
        markers = extract_footnote_refs(doc.body)
        used = {ref.label for ref in markers}

        reported: set[str] = set()
        for ref in markers:
            if ref.label in inline or ref.label in declared or ref.label in reported:
                continue
            reported.add(ref.label)
            yield Issue(
                "error",
                "footnote_undefined",
                f"Footnote marker [^{ref.label}] has no matching footnote",
                path=doc.rel_path,
                line=ref.line,
            )

        for label in declared:
            if label not in used:
                yield Issue(
                    "warn",
                    "footnote_unused",
                    f"Footnote {label} is declared but never referenced",
                    path=doc.rel_path,
                )


def check_dates(collection: Collection, context: LintContext) -> Iterator[Issue]:
    for doc in collection:
        if doc.kind == "post" and doc.date is None:
            yield Issue(
                "warn",
                "date_missing",
                "Post has no creation date (name the file YYYY-MM-DD-slug or set date)",
                path=doc.rel_path,
            )
        meta_date = doc.front_matter.get("date")
        if doc.filename_date is not None and meta_date is not None:
            declared = coerce_date(meta_date)
            if declared is not None and declared != doc.filename_date:
                yield Issue(
                    "warn",
                    "date_mismatch",
                    f"File name date {doc.filename_date.isoformat()} differs from front-matter date {declared.isoformat()}",
                    path=doc.rel_path,
                )


def check_body(collection: Collection, context: LintContext) -> Iterator[Issue]:
    for doc in collection:
        if doc.parse_error is None and not doc.body.strip():
            yield Issue("warn", "body_empty", "Document body is empty", path=doc.rel_path)


def check_uniqueness(collection: Collection, context: LintContext) -> Iterator[Issue]:
    by_id: dict[str, list[Document]] = defaultdict(list)
    by_url: dict[str, list[Document]] = defaultdict(list)
    for doc in collection:
        by_id[doc.doc_id].append(doc)
        by_url[doc.url].append(doc)

    for doc in by_url.get(INDEX_URL, []):
        yield Issue(
            "error",
            "duplicate_url",
            f"URL {INDEX_URL} is reserved for the generated index page",
            path=doc.rel_path,
        )

    for doc_id, docs in sorted(by_id.items()):
        if len(docs) < 2:
            continue
        first = docs[0]
        for other in docs[1:]:
            yield Issue(
                "error",
                "duplicate_id",
                f"Document id {doc_id!r} is also used by {first.rel_path}",
                path=other.rel_path,
            )

    for url, docs in sorted(by_url.items()):
        if url == INDEX_URL or len(docs) < 2 or len({d.doc_id for d in docs}) < 2:
            continue
        first = docs[0]
        for other in docs[1:]:
            yield Issue(
                "error",
                "duplicate_url",
                f"URL {url} is also rendered by {first.rel_path}",
                path=other.rel_path,
            )


def _normalize_url(path: str) -> str:
    normalized = posixpath.normpath(path)
    if path.endswith("/") and normalized != "/":
        normalized += "/"
    return normalized


def _url_candidates(path: str) -> list[str]:
    candidates = [path]
    if path.endswith("/"):
        candidates.append(path + "index.html")
    elif not posixpath.splitext(path)[1]:
        candidates.append(path + ".html")
        candidates.append(path + "/index.html")
    return candidates


def resolve_internal(target: str, doc: Document, collection: Collection, context: LintContext) -> Optional[str]:
    """Return what an internal link points at (a URL or source path), or None when unresolved."""

    path = internal_path(target)
    if not path:
        return doc.url

    if path.startswith("/"):
        if context.base_path and (path == context.base_path or path.startswith(context.base_path + "/")):
            path = path[len(context.base_path):] or "/"
        absolute = _normalize_url(path)
    else:
        url_dir = posixpath.dirname(doc.url)
        absolute = _normalize_url(posixpath.join(url_dir, path))
        source_relative = posixpath.normpath(posixpath.join(posixpath.dirname(doc.rel_path), path))
        if not source_relative.startswith(".."):
            linked = collection.by_rel_path(source_relative)
            if linked is not None:
                return linked.url
            if source_relative in context.static_paths:
                return "/" + source_relative

    for url in _url_candidates(absolute):
        if url in context.extra_urls:
            return url
        if collection.by_url(url) is not None:
            return url
        if url.lstrip("/") in context.static_paths:
            return url
    return None


def check_links(collection: Collection, context: LintContext) -> Iterator[Issue]:
    for doc in collection:
        if doc.parse_error is not None:
            continue
        for link in extract_links(doc.body):
            if link.source == "post_url":
                if collection.resolve_post_url(link.target) is None:
                    yield Issue(
                        "error",
                        "link_unresolved",
                        f"post_url {link.target!r} matches no document",
                        path=doc.rel_path,
                        line=link.line,
                    )
                continue
            if link.kind != "internal":
                continue
            if resolve_internal(link.target, doc, collection, context) is None:
                yield Issue(
                    "error",
                    "link_unresolved",
                    f"Internal link {link.target!r} resolves to no document or file",
                    path=doc.rel_path,
                    line=link.line,
                )


def check_near_duplicates(collection: Collection, context: LintContext) -> Iterator[Issue]:
    parsed = [doc for doc in collection if doc.parse_error is None]
    for pair in near_duplicates(parsed, threshold=context.near_duplicate_threshold):
        yield Issue(
            "warn",
            "near_duplicate",
            f"{pair.b_path} duplicates {pair.a_path} (similarity={pair.score:.3f})",
            path=pair.b_path,
        )


DEFAULT_RULES: tuple[Rule, ...] = (
    Rule("front_matter", ("front_matter_invalid", "front_matter_missing"), "Front-matter block parses", check_front_matter),
    Rule("title", ("title_missing", "title_empty"), "Every document has a non-empty title", check_title),
    Rule("layout", ("layout_missing", "layout_unknown"), "Layouts are set and known", check_layout),
    Rule(
        "footnotes",
        ("footnotes_invalid", "footnote_undefined", "footnote_unused"),
        "Footnote markers and declared footnotes match",
        check_footnotes,
    ),
    Rule("dates", ("date_missing", "date_mismatch"), "Posts carry a consistent creation date", check_dates),
    Rule("body", ("body_empty",), "Documents have body text", check_body),
    Rule("uniqueness", ("duplicate_id", "duplicate_url"), "Ids and URLs are unique", check_uniqueness),
    Rule("links", ("link_unresolved",), "Internal links resolve", check_links),
    Rule("near_duplicates", ("near_duplicate",), "No two documents are near-identical", check_near_duplicates),
)


def default_registry() -> RuleRegistry:
    return RuleRegistry.from_rules(DEFAULT_RULES)
