from __future__ import annotations

import json
import os
from typing import Optional

from essay_project.content.collection import load_collection
from essay_project.content.model import Collection
from essay_project.foundation.logging_utils import write_text
from essay_project.lint.render_html import render_html
from essay_project.lint.report_builder import build_report, format_issue, report_to_dict, summary_line
from essay_project.lint.report_model import LintReport

from .session import CommandSession

REPORT_JSON_NAME = "lint_report.json"
REPORT_HTML_NAME = "lint_report.html"


def load_session_collection(session: CommandSession, *, include_drafts: bool = True) -> Collection:
    config = session.config
    return load_collection(
        config.source_root,
        posts_dir=config.posts_dir,
        drafts_dir=config.drafts_dir,
        include_drafts=include_drafts,
        extensions=config.extensions,
    )


def write_report_files(report: LintReport, report_dir: str) -> tuple[str, str]:
    os.makedirs(report_dir, exist_ok=True)
    json_path = os.path.join(report_dir, REPORT_JSON_NAME)
    html_path = os.path.join(report_dir, REPORT_HTML_NAME)
    write_text(json_path, json.dumps(report_to_dict(report), indent=2) + "\n")
    write_text(html_path, render_html(report))
    return json_path, html_path


def run_lint(
    session: CommandSession,
    *,
    report_dir: Optional[str] = None,
    collection: Optional[Collection] = None,
) -> LintReport:
    logger = session.logger
    collection = collection or load_session_collection(session)
    report = build_report(collection, session.config)

    for issue in report.issues:
        if issue.severity == "error":
            logger.error("%s", format_issue(issue))
        elif issue.severity == "warn":
            logger.warning("%s", format_issue(issue))
        else:
            logger.info("%s", format_issue(issue))

    if report_dir:
        json_path, html_path = write_report_files(report, report_dir)
        logger.info("Wrote lint report to %s", json_path)
        logger.info("Wrote lint report to %s", html_path)

    logger.info("%s", summary_line(report))
    return report
