from __future__ import annotations

import glob
import os
from typing import Any, Dict, Iterable, List, Optional

from essay_project.content.collection import iter_static_files
from essay_project.content.model import Collection, Document
from essay_project.framework.config import SiteConfig

from . import TOOL_VERSION
from .report_model import Issue, LintReport, issue_sort_key
from .rules import LintContext, RuleRegistry, default_registry


def discover_layouts(root: str) -> List[str]:
    """Layout names provided by ``<root>/_layouts/*.html``."""
    pattern = os.path.join(root, "_layouts", "*.html")
    return sorted(os.path.splitext(os.path.basename(p))[0] for p in glob.glob(pattern))


def _base_path(base_url: str) -> str:
    if "://" in base_url:
        base_url = "/" + base_url.split("://", 1)[1].partition("/")[2]
    return base_url.rstrip("/") if base_url.strip("/") else ""


def build_context(collection: Collection, config: SiteConfig) -> LintContext:
    root = collection.root
    return LintContext(
        known_layouts=frozenset(config.known_layouts) | frozenset(discover_layouts(root)),
        static_paths=frozenset(iter_static_files(root, exclude=config.static_excludes(root))),
        near_duplicate_threshold=config.near_duplicate_threshold,
        base_path=_base_path(config.base_url),
    )


def build_report(
    collection: Collection,
    config: Optional[SiteConfig] = None,
    *,
    registry: Optional[RuleRegistry] = None,
    context: Optional[LintContext] = None,
) -> LintReport:
    config = config or SiteConfig(source_root=collection.root)
    registry = registry or default_registry()
    registry.validate_disabled(config.disabled_rules)
    context = context or build_context(collection, config)

    issues, ran = registry.run(collection, context, disabled=config.disabled_rules)
    issues.sort(key=issue_sort_key)
    return LintReport(
        collection=collection,
        issues=issues,
        tool_version=TOOL_VERSION,
        rules_run=ran,
        strict=config.lint_strict,
    )


def format_issue(issue: Issue) -> str:
    location = issue.location
    prefix = f"{location}: " if location else ""
    return f"{prefix}{issue.severity.upper()} [{issue.code}] {issue.message}"


def summary_line(report: LintReport) -> str:
    status = "ok" if report.ok else "failed"
    return (
        f"lint {status}: documents={len(report.collection)} "
        f"errors={report.error_count} warnings={report.warn_count}"
    )


def report_to_dict(report: LintReport) -> Dict[str, Any]:
    def serialize_issue(issue: Issue) -> Dict[str, Any]:
        return {
            "severity": issue.severity,
            "code": issue.code,
            "message": issue.message,
            "path": issue.path,
            "line": issue.line,
        }

    def serialize_document(doc: Document) -> Dict[str, Any]:
        return {
            "doc_id": doc.doc_id,
            "path": doc.rel_path,
            "kind": doc.kind,
            "title": doc.title,
            "layout": doc.layout,
            "date": doc.date.isoformat() if doc.date else None,
            "url": doc.url,
            "footnotes": len(doc.footnotes) if doc.footnotes is not None else None,
            "issues": [serialize_issue(i) for i in report.issues_for(doc.rel_path)],
        }

    return {
        "tool_version": report.tool_version,
        "root": report.collection.root,
        "ok": report.ok,
        "strict": report.strict,
        "error_count": report.error_count,
        "warn_count": report.warn_count,
        "rules_run": list(report.rules_run),
        "documents": [serialize_document(d) for d in report.collection],
        "issues": [serialize_issue(i) for i in report.issues],
    }


def issues_by_code(issues: Iterable[Issue]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for issue in issues:
        counts[issue.code] = counts.get(issue.code, 0) + 1
    return dict(sorted(counts.items()))
