from __future__ import annotations

import html
import re
from typing import List, Tuple

from essay_project.content.model import Document

from .report_builder import issues_by_code
from .report_model import Issue, LintReport, issue_sort_key

_ID_SAFE_RE = re.compile(r"[^a-zA-Z0-9_-]+")


def _safe_id(value: str) -> str:
    if not value:
        return "unknown"
    cleaned = _ID_SAFE_RE.sub("-", value.strip()).strip("-").lower()
    return cleaned or "unknown"


def _doc_anchor_id(doc: Document) -> str:
    return f"doc-{_safe_id(doc.rel_path)}"


def _render_issue_items(issues: List[Issue], *, show_path: bool) -> str:
    items = []
    for issue in sorted(issues, key=issue_sort_key):
        sev = issue.severity.lower()
        location = ""
        if show_path and issue.path:
            location = f" <span class='path'>({html.escape(issue.location)})</span>"
        elif issue.line is not None:
            location = f" <span class='path'>(line {issue.line})</span>"
        items.append(
            "<li>"
            f"<span class='sev sev-{html.escape(sev)}'>{html.escape(sev.upper())}</span> "
            f"<span class='code'>[{html.escape(issue.code)}]</span> "
            f"{html.escape(issue.message)}"
            + location
            + "</li>"
        )
    return f"<ul class='issues'>{''.join(items)}</ul>"


def _format_summary_table(report: LintReport) -> str:
    rows: List[Tuple[str, str]] = [
        ("Source root", html.escape(report.collection.root)),
        ("Documents", str(len(report.collection))),
        ("Posts", str(len(report.collection.posts))),
        ("Drafts", str(len(report.collection.drafts))),
        ("Errors", str(report.error_count)),
        ("Warnings", str(report.warn_count)),
        ("Rules run", html.escape(", ".join(report.rules_run) or "none")),
        ("Tool version", html.escape(report.tool_version)),
    ]
    counts = issues_by_code(report.issues)
    if counts:
        rows.append(("Issues by code", html.escape(", ".join(f"{k}={v}" for k, v in counts.items()))))
    return "".join(f"<tr><th>{k}</th><td>{v}</td></tr>" for k, v in rows)


def _render_document(doc: Document, issues: List[Issue]) -> str:
    meta_rows: List[Tuple[str, str]] = [
        ("Id", html.escape(doc.doc_id)),
        ("Kind", html.escape(doc.kind)),
        ("Layout", html.escape(doc.layout or "n/a")),
        ("Date", html.escape(doc.date.isoformat() if doc.date else "n/a")),
        ("URL", html.escape(doc.url)),
    ]
    if doc.footnotes is not None:
        meta_rows.append(("Footnotes", str(len(doc.footnotes))))
    meta = "".join(f"<tr><th>{k}</th><td>{v}</td></tr>" for k, v in meta_rows)
    issues_html = _render_issue_items(issues, show_path=False) if issues else "<p class='muted'>No issues.</p>"
    status = "bad" if any(i.severity == "error" for i in issues) else ("warn" if issues else "good")
    return (
        f"<section class='doc doc-{status}' id='{html.escape(_doc_anchor_id(doc))}'>"
        f"<h3>{html.escape(doc.display_title)} <span class='pill'>{html.escape(doc.rel_path)}</span></h3>"
        f"<table class='meta'>{meta}</table>"
        f"{issues_html}"
        "</section>"
    )


def render_html(report: LintReport) -> str:
    global_issues = [i for i in report.issues if i.path is None]
    global_html = ""
    if global_issues:
        global_html = "<h2>Collection issues</h2>" + _render_issue_items(global_issues, show_path=False)

    nav_items = []
    doc_sections = []
    for doc in report.collection:
        issues = report.issues_for(doc.rel_path)
        badge = f" <span class='pill'>{len(issues)}</span>" if issues else ""
        nav_items.append(
            f"<li><a href='#{html.escape(_doc_anchor_id(doc))}'>{html.escape(doc.rel_path)}</a>{badge}</li>"
        )
        doc_sections.append(_render_document(doc, issues))

    all_issues_html = (
        _render_issue_items(report.issues, show_path=True) if report.issues else "<p>No issues detected.</p>"
    )
    status = "OK" if report.ok else "FAILED"

    return f"""<!DOCTYPE html>
<html lang='en'>
  <head>
    <meta charset='utf-8'>
    <title>Content lint report</title>
    <style>
      :root {{
        --bg: #ffffff;
        --fg: #111827;
        --muted: #6b7280;
        --border: #e5e7eb;
        --panel: #f9fafb;
        --warn: #f59e0b;
        --error: #ef4444;
        --info: #3b82f6;
      }}
      body {{ font-family: system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif; margin: 0; color: var(--fg); background: var(--bg); }}
      header {{ padding: 1rem 1.25rem; border-bottom: 1px solid var(--border); background: var(--panel); }}
      h1 {{ margin: 0; font-size: 1.25rem; }}
      .layout {{ display: grid; grid-template-columns: 320px 1fr; gap: 1rem; padding: 1rem 1.25rem; }}
      nav {{ position: sticky; top: 1rem; align-self: start; max-height: calc(100vh - 2rem); overflow: auto; border: 1px solid var(--border); border-radius: 10px; background: var(--panel); padding: 0.75rem; }}
      main {{ min-width: 0; }}
      a {{ color: #2563eb; text-decoration: none; }}
      a:hover {{ text-decoration: underline; }}
      table.meta {{ border-collapse: collapse; width: 100%; max-width: 920px; }}
      table.meta th {{ text-align: left; color: var(--muted); padding: 0.3rem 0.4rem; width: 180px; vertical-align: top; }}
      table.meta td {{ padding: 0.3rem 0.4rem; }}
      .muted {{ color: var(--muted); }}
      .pill {{ display: inline-block; padding: 0.1rem 0.45rem; border: 1px solid var(--border); border-radius: 999px; background: #fff; font-size: 0.8rem; color: var(--muted); margin-left: 0.35rem; }}
      .sev {{ font-weight: 700; padding: 0.05rem 0.35rem; border-radius: 6px; border: 1px solid var(--border); background: #fff; }}
      .sev-error {{ border-color: rgba(239,68,68,.35); color: var(--error); }}
      .sev-warn {{ border-color: rgba(245,158,11,.35); color: var(--warn); }}
      .sev-info {{ border-color: rgba(59,130,246,.35); color: var(--info); }}
      .doc {{ border: 1px solid var(--border); border-radius: 10px; padding: 0.75rem 1rem; margin-bottom: 1rem; }}
      .doc-bad {{ border-left: 4px solid var(--error); }}
      .doc-warn {{ border-left: 4px solid var(--warn); }}
      .code {{ font-family: ui-monospace, SFMono-Regular, Menlo, Consolas, monospace; }}
    </style>
  </head>
  <body>
    <header><h1>Content lint report: {html.escape(status)}</h1></header>
    <div class='layout'>
      <nav><ul>{''.join(nav_items) or '<li>No documents</li>'}</ul></nav>
      <main>
        <h2>Summary</h2>
        <table class='meta'>{_format_summary_table(report)}</table>
        {global_html}
        <h2>All issues</h2>
        {all_issues_html}
        <h2>Documents</h2>
        {''.join(doc_sections) or '<p>No documents found.</p>'}
      </main>
    </div>
  </body>
</html>
"""
