import ast
from pathlib import Path


def _offending_imports(package_dir: Path, forbidden_prefixes: tuple[str, ...]) -> list[str]:
    offenders: list[str] = []
    for path in sorted(package_dir.rglob("*.py")):
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    name = alias.name
                    if name.startswith(forbidden_prefixes):
                        offenders.append(f"{path}: import {name}")
            elif isinstance(node, ast.ImportFrom):
                if node.module is None or node.level:
                    continue
                module = node.module
                if module.startswith(forbidden_prefixes):
                    offenders.append(f"{path}: from {module} import ...")
    return offenders


def _package_dir(name: str) -> Path:
    return Path(__file__).resolve().parents[1] / "essay_project" / name


def test_foundation_imports_nothing_from_the_project():
    forbidden = (
        "essay_project.framework",
        "essay_project.content",
        "essay_project.lint",
        "essay_project.render",
        "essay_project.app",
    )
    assert _offending_imports(_package_dir("foundation"), forbidden) == []


def test_content_does_not_import_lint_render_or_app():
    forbidden = ("essay_project.lint", "essay_project.render", "essay_project.app", "essay_project.framework")
    assert _offending_imports(_package_dir("content"), forbidden) == []


def test_lint_does_not_import_render_or_app():
    forbidden = ("essay_project.render", "essay_project.app")
    assert _offending_imports(_package_dir("lint"), forbidden) == []


def test_render_does_not_import_app():
    assert _offending_imports(_package_dir("render"), ("essay_project.app",)) == []


def test_render_does_not_import_lint():
    assert _offending_imports(_package_dir("render"), ("essay_project.lint",)) == []
