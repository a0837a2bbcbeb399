from pathlib import Path

import pytest

from essay_project.content.collection import load_collection
from essay_project.framework.config import SiteConfig
from essay_project.render import build_site
from essay_project.render.site_builder import check_output_dir, url_to_output_path


def _write_file(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _site(root: Path) -> None:
    _write_file(
        root / "_posts" / "2020-01-01-first.md",
        "---\nlayout: post\ntitle: Tom & Jerry\n---\nThe **first** essay.\n",
    )
    _write_file(
        root / "_posts" / "2020-02-01-second.md",
        "---\nlayout: post\ntitle: Second\n---\nBack to [the first]({% post_url 2020-01-01-first %}).\n",
    )
    _write_file(root / "_drafts" / "idea.md", "---\nlayout: post\ntitle: Idea\n---\nNot ready.\n")
    _write_file(root / "assets" / "layers.txt", "layers")


def _build(root: Path, **overrides):
    config = SiteConfig(source_root=str(root), site_title="Essays", **overrides)
    collection = load_collection(str(root))
    return build_site(collection, config)


def test_build_writes_pages_index_and_static_files(tmp_path: Path) -> None:
    _site(tmp_path)

    result = _build(tmp_path)
    out = tmp_path / "_site"

    assert result.output_dir == str(out)
    assert result.pages == ["/2020/02/01/second.html", "/2020/01/01/first.html", "/index.html"]
    assert result.static_files == ["assets/layers.txt"]
    assert result.skipped_drafts == ["_drafts/idea.md"]

    first = (out / "2020" / "01" / "01" / "first.html").read_text(encoding="utf-8")
    assert "<title>Tom &amp; Jerry | Essays</title>" in first
    assert "<strong>first</strong>" in first
    assert '<time datetime="2020-01-01">' in first

    second = (out / "2020" / "02" / "01" / "second.html").read_text(encoding="utf-8")
    assert '<a href="/2020/01/01/first.html">the first</a>' in second

    index = (out / "index.html").read_text(encoding="utf-8")
    assert index.index("/2020/02/01/second.html") < index.index("/2020/01/01/first.html")
    assert "Idea" not in index

    assert (out / "assets" / "layers.txt").read_text(encoding="utf-8") == "layers"
    assert not (out / "drafts").exists()


def test_build_includes_drafts_on_request(tmp_path: Path) -> None:
    _site(tmp_path)

    result = _build(tmp_path, include_drafts=True)

    assert "/drafts/idea.html" in result.pages
    assert result.skipped_drafts == []
    index = (tmp_path / "_site" / "index.html").read_text(encoding="utf-8")
    assert "Drafts" in index
    assert "/drafts/idea.html" in index


def test_document_at_root_permalink_does_not_replace_the_index(tmp_path: Path, caplog) -> None:
    _site(tmp_path)
    _write_file(
        tmp_path / "_posts" / "2020-03-01-welcome.md",
        "---\nlayout: page\ntitle: Welcome\npermalink: /\n---\nWELCOME TEXT\n",
    )

    with caplog.at_level("WARNING"):
        result = _build(tmp_path)

    assert result.pages.count("/index.html") == 1
    assert result.skipped_pages == ["_posts/2020-03-01-welcome.md"]
    index = (tmp_path / "_site" / "index.html").read_text(encoding="utf-8")
    assert "WELCOME TEXT" not in index
    assert "/2020/01/01/first.html" in index
    assert "Welcome" not in index
    assert "reserved for the index page" in caplog.text


def test_source_dirs_are_never_copied_as_static_files(tmp_path: Path) -> None:
    _write_file(tmp_path / "posts" / "2020-01-01-a.md", "---\nlayout: post\ntitle: A\n---\nAlpha.\n")
    _write_file(tmp_path / "drafts" / "b.md", "---\nlayout: post\ntitle: B\n---\nBeta.\n")
    _write_file(tmp_path / "assets" / "layers.txt", "layers")
    config = SiteConfig(source_root=str(tmp_path), posts_dir="posts", drafts_dir="drafts")
    collection = load_collection(str(tmp_path), posts_dir="posts", drafts_dir="drafts")

    result = build_site(collection, config)

    assert result.pages == ["/2020/01/01/a.html", "/index.html"]
    assert result.static_files == ["assets/layers.txt"]
    assert not (tmp_path / "_site" / "posts").exists()
    assert not (tmp_path / "_site" / "drafts").exists()


def test_build_cleans_stale_output(tmp_path: Path) -> None:
    _site(tmp_path)
    _write_file(tmp_path / "_site" / "stale.html", "old")

    _build(tmp_path)

    assert not (tmp_path / "_site" / "stale.html").exists()


def test_site_layouts_override_builtin_ones(tmp_path: Path) -> None:
    _site(tmp_path)
    _write_file(tmp_path / "_layouts" / "post.html", "CUSTOM {{ page.title }}: {{ content }}")

    _build(tmp_path)

    first = (tmp_path / "_site" / "2020" / "01" / "01" / "first.html").read_text(encoding="utf-8")
    assert first.startswith("CUSTOM Tom &amp; Jerry: <p>The <strong>first</strong> essay.</p>")


def test_unknown_layout_falls_back_to_default(tmp_path: Path) -> None:
    _write_file(tmp_path / "_posts" / "2020-01-01-odd.md", "---\nlayout: fancy\ntitle: Odd\n---\nBody.\n")

    result = _build(tmp_path)

    assert "/2020/01/01/odd.html" in result.pages
    page = (tmp_path / "_site" / "2020" / "01" / "01" / "odd.html").read_text(encoding="utf-8")
    assert "<p>Body.</p>" in page


def test_output_dir_safety(tmp_path: Path) -> None:
    root = tmp_path / "site"
    root.mkdir()

    with pytest.raises(ValueError, match="contains the source root"):
        check_output_dir(str(tmp_path), str(root))
    with pytest.raises(ValueError, match="contains the source root"):
        check_output_dir(str(root), str(root))
    with pytest.raises(ValueError, match="not underscore-prefixed"):
        check_output_dir(str(root / "public"), str(root))

    check_output_dir(str(root / "_site"), str(root))
    check_output_dir(str(tmp_path / "public"), str(root))


def test_build_refuses_unsafe_output_before_writing(tmp_path: Path) -> None:
    _site(tmp_path)

    with pytest.raises(ValueError):
        _build(tmp_path, output_dir=str(tmp_path / "public"))

    assert not (tmp_path / "public").exists()


def test_url_to_output_path(tmp_path: Path) -> None:
    assert url_to_output_path(str(tmp_path), "/2020/01/01/x.html") == str(tmp_path / "2020" / "01" / "01" / "x.html")
    assert url_to_output_path(str(tmp_path), "/about/") == str(tmp_path / "about" / "index.html")
    with pytest.raises(ValueError, match="escapes"):
        url_to_output_path(str(tmp_path), "/../etc/passwd")
