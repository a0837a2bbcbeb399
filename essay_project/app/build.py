from __future__ import annotations

from essay_project.render.site_builder import BuildResult, build_site

from .lint import load_session_collection, run_lint
from .session import CommandSession


class LintFailedError(RuntimeError):
    def __init__(self, error_count: int):
        self.error_count = error_count
        super().__init__(
            f"Lint reported {error_count} error(s); fix them or rerun with --force "
            "(or set build.fail_on_lint_errors: false)"
        )


def run_build(session: CommandSession, *, force: bool = False) -> BuildResult:
    config = session.config
    logger = session.logger

    collection = load_session_collection(session, include_drafts=True)
    report = run_lint(session, collection=collection)
    if report.error_count and config.fail_on_lint_errors and not force:
        raise LintFailedError(report.error_count)
    if report.error_count:
        logger.warning("Building despite %d lint error(s)", report.error_count)

    return build_site(collection, config, logger=logger)
