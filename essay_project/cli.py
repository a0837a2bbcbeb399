from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from datetime import date

EXIT_OK = 0
EXIT_LINT_FAILED = 1
EXIT_USAGE = 2


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r} (expected YYYY-MM-DD)") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="essay_project", add_help=True)
    parser.add_argument("--config", dest="config_path", help="Config file (default: config/config.yaml)")
    sub = parser.add_subparsers(dest="command", required=True)

    lint = sub.add_parser("lint", help="Check front-matter, footnotes and links")
    lint.add_argument("--root", help="Source root containing _posts/ and _drafts/")
    lint.add_argument("--strict", action="store_true", default=None, help="Fail on warnings too")
    lint.add_argument("--report-dir", dest="report_dir", help="Write lint_report.json/html here")

    build = sub.add_parser("build", help="Render the site to HTML")
    build.add_argument("--root")
    build.add_argument("--output", dest="output_dir", help="Output directory (default: <root>/_site)")
    build.add_argument("--drafts", action="store_true", default=None, help="Render drafts too")
    build.add_argument("--force", action="store_true", help="Build even when lint reports errors")

    list_cmd = sub.add_parser("list", help="List posts (and drafts)")
    list_cmd.add_argument("--root")
    list_cmd.add_argument("--drafts", action="store_true", help="Include drafts")

    new = sub.add_parser("new", help="Create a draft")
    new.add_argument("title")
    new.add_argument("--root")
    new.add_argument("--layout", default="post")

    publish = sub.add_parser("publish", help="Move a draft into _posts")
    publish.add_argument("draft", help="Draft path, file name or stem")
    publish.add_argument("--root")
    publish.add_argument("--date", dest="on", type=_parse_date, help="Publication date (default: today)")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)

    from .app.session import open_session

    try:
        session = open_session(
            args.command,
            config_path=args.config_path,
            root=getattr(args, "root", None),
            output_dir=getattr(args, "output_dir", None),
            include_drafts=getattr(args, "drafts", None) if args.command == "build" else None,
            strict=getattr(args, "strict", None),
        )
    except (ValueError, OSError) as exc:
        print(f"essay_project: {exc}", file=sys.stderr)
        return EXIT_USAGE

    logger = session.logger
    config = session.config

    try:
        if args.command == "lint":
            from .app.lint import run_lint

            report = run_lint(session, report_dir=args.report_dir)
            return EXIT_OK if report.ok else EXIT_LINT_FAILED

        if args.command == "build":
            from .app.build import LintFailedError, run_build

            try:
                run_build(session, force=args.force)
            except LintFailedError as exc:
                logger.error("%s", exc)
                return EXIT_LINT_FAILED
            return EXIT_OK

        if args.command == "list":
            from .app.authoring import format_rows, list_documents
            from .app.lint import load_session_collection

            collection = load_session_collection(session, include_drafts=args.drafts)
            print(format_rows(list_documents(collection, include_drafts=args.drafts)))
            return EXIT_OK

        if args.command == "new":
            from .app.authoring import new_draft

            path = new_draft(config.source_root, args.title, layout=args.layout, drafts_dir=config.drafts_dir)
            print(path)
            return EXIT_OK

        if args.command == "publish":
            from .app.authoring import publish_draft

            path = publish_draft(
                config.source_root,
                args.draft,
                on=args.on,
                posts_dir=config.posts_dir,
                drafts_dir=config.drafts_dir,
            )
            print(path)
            return EXIT_OK
    except (ValueError, OSError) as exc:
        logger.error("%s", exc)
        return EXIT_USAGE

    raise AssertionError(f"Unhandled command: {args.command}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
