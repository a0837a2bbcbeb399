from pathlib import Path

from essay_project.content.collection import load_collection
from essay_project.framework.config import SiteConfig
from essay_project.lint import build_report
from essay_project.render import build_site

SITE_ROOT = Path(__file__).resolve().parents[1] / "site"


def test_bundled_essays_lint_clean():
    config = SiteConfig(source_root=str(SITE_ROOT))
    collection = load_collection(str(SITE_ROOT))

    report = build_report(collection, config)

    assert [d.doc_id for d in collection.posts] == [
        "2017-02-02-dependency-rejection",
        "2017-01-27-dependency-injection",
    ]
    assert [d.doc_id for d in collection.drafts] == ["draft-dynamic-scoping"]
    assert report.issues == []


def test_bundled_essays_build(tmp_path):
    config = SiteConfig(source_root=str(SITE_ROOT), output_dir=str(tmp_path / "out"))
    collection = load_collection(str(SITE_ROOT))

    result = build_site(collection, config)

    rejection = (tmp_path / "out" / "2017" / "02" / "02" / "dependency-rejection.html").read_text(encoding="utf-8")
    assert 'href="/2017/01/27/dependency-injection.html"' in rejection
    assert "footnote" in rejection
    assert "assets/layers.txt" in result.static_files
