import json
from pathlib import Path

import pytest

from essay_project import cli


def _write_file(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _config(tmp_path: Path, text: str = "site:\n  title: Test essays\n") -> str:
    return str(_write_file(tmp_path / "config.yaml", text))


def _site(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    _write_file(
        root / "_posts" / "2017-01-27-dependency-injection.md",
        "---\nlayout: post\ntitle: Dependency injection\n---\nPass collaborators in from outside.\n",
    )
    return root


def test_cli_lint_ok(tmp_path, capsys):
    root = _site(tmp_path)

    rc = cli.main(["--config", _config(tmp_path), "lint", "--root", str(root)])

    assert rc == 0
    err = capsys.readouterr().err
    assert "lint ok: documents=1 errors=0 warnings=0" in err
    assert "Loaded config from explicit path=" in err


def test_cli_lint_failure_writes_reports(tmp_path, capsys):
    root = _site(tmp_path)
    _write_file(root / "_drafts" / "untitled.md", "---\nlayout: post\n---\nSee [missing](/nowhere.html).\n")
    report_dir = tmp_path / "reports"

    rc = cli.main(["--config", _config(tmp_path), "lint", "--root", str(root), "--report-dir", str(report_dir)])

    assert rc == 1
    err = capsys.readouterr().err
    assert "ERROR | _drafts/untitled.md: ERROR [title_missing] Front-matter has no title" in err

    loaded = json.loads((report_dir / "lint_report.json").read_text(encoding="utf-8"))
    assert loaded["ok"] is False
    assert loaded["error_count"] == 2
    assert (report_dir / "lint_report.html").read_text(encoding="utf-8").startswith("<!DOCTYPE html>")


def test_cli_lint_strict_fails_on_warnings(tmp_path):
    root = _site(tmp_path)
    _write_file(root / "_posts" / "2017-02-02-no-layout.md", "---\ntitle: No layout\n---\nA different essay body.\n")
    config = _config(tmp_path)

    assert cli.main(["--config", config, "lint", "--root", str(root)]) == 0
    assert cli.main(["--config", config, "lint", "--root", str(root), "--strict"]) == 1


def test_cli_build_smoke(tmp_path):
    root = _site(tmp_path)

    rc = cli.main(["--config", _config(tmp_path), "build", "--root", str(root)])

    assert rc == 0
    index = (root / "_site" / "index.html").read_text(encoding="utf-8")
    assert "Test essays" in index
    assert (root / "_site" / "2017" / "01" / "27" / "dependency-injection.html").exists()


def test_cli_build_stops_on_lint_errors_unless_forced(tmp_path, capsys):
    root = _site(tmp_path)
    _write_file(root / "_posts" / "2017-02-02-broken.md", "---\nlayout: post\ntitle: [unclosed\n---\nBody\n")
    config = _config(tmp_path)
    output = tmp_path / "public"

    assert cli.main(["--config", config, "build", "--root", str(root), "--output", str(output)]) == 1
    assert not output.exists()
    assert "Lint reported 1 error(s)" in capsys.readouterr().err

    assert cli.main(["--config", config, "build", "--root", str(root), "--output", str(output), "--force"]) == 0
    assert (output / "index.html").exists()


def test_cli_build_respects_config_fail_on_lint_errors(tmp_path):
    root = _site(tmp_path)
    _write_file(root / "_posts" / "2017-02-02-untitled.md", "---\nlayout: post\n---\nSome other text.\n")
    config = _config(tmp_path, "build:\n  fail_on_lint_errors: false\n")

    assert cli.main(["--config", config, "build", "--root", str(root)]) == 0


def test_cli_list(tmp_path, capsys):
    root = _site(tmp_path)
    _write_file(root / "_drafts" / "dynamic-scoping.md", "---\nlayout: post\ntitle: Dynamic scoping\n---\nLater.\n")
    config = _config(tmp_path)

    assert cli.main(["--config", config, "list", "--root", str(root)]) == 0
    out = capsys.readouterr().out
    assert "2017-01-27-dependency-injection" in out
    assert "Dynamic scoping" not in out

    assert cli.main(["--config", config, "list", "--root", str(root), "--drafts"]) == 0
    assert "draft-dynamic-scoping" in capsys.readouterr().out


def test_cli_new_then_publish(tmp_path, capsys):
    root = _site(tmp_path)
    config = _config(tmp_path)

    assert cli.main(["--config", config, "new", "Dependency Rejection", "--root", str(root)]) == 0
    draft = Path(capsys.readouterr().out.strip())
    assert draft == root / "_drafts" / "dependency-rejection.md"
    assert draft.exists()

    rc = cli.main(
        ["--config", config, "publish", "dependency-rejection", "--root", str(root), "--date", "2017-02-02"]
    )
    assert rc == 0
    post = Path(capsys.readouterr().out.strip())
    assert post == root / "_posts" / "2017-02-02-dependency-rejection.md"
    assert not draft.exists()


def test_cli_command_errors_exit_2(tmp_path, capsys):
    root = _site(tmp_path)
    config = _config(tmp_path)

    assert cli.main(["--config", config, "publish", "nope", "--root", str(root)]) == 2
    assert "No draft named 'nope'" in capsys.readouterr().err

    assert cli.main(["--config", config, "lint", "--root", str(tmp_path / "missing")]) == 2


def test_cli_invalid_config_exit_2(tmp_path, capsys):
    root = _site(tmp_path)
    config = _config(tmp_path, "build:\n  include_drafts: maybe\n")

    assert cli.main(["--config", config, "lint", "--root", str(root)]) == 2
    assert "Invalid boolean for build.include_drafts" in capsys.readouterr().err


def test_cli_rejects_bad_publish_date(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--config", _config(tmp_path), "publish", "x", "--date", "02/02/2017"])
    assert excinfo.value.code == 2
