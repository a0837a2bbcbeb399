from datetime import date
from pathlib import Path

import pytest

from essay_project.app.authoring import find_draft, format_rows, list_documents, new_draft, publish_draft
from essay_project.content.collection import load_collection
from essay_project.content.frontmatter import FrontMatterError, parse_front_matter


def _write_file(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_new_draft_writes_front_matter(tmp_path: Path) -> None:
    path = new_draft(str(tmp_path), "  Dynamic Scoping, Revisited ")

    assert path == str(tmp_path / "_drafts" / "dynamic-scoping-revisited.md")
    meta, body = parse_front_matter(Path(path).read_text(encoding="utf-8"))
    assert meta == {"layout": "post", "title": "Dynamic Scoping, Revisited"}
    assert body == "\n"


def test_new_draft_refuses_to_overwrite_and_empty_titles(tmp_path: Path) -> None:
    new_draft(str(tmp_path), "Idea")

    with pytest.raises(FileExistsError, match="Draft already exists"):
        new_draft(str(tmp_path), "idea")
    with pytest.raises(ValueError, match="non-empty"):
        new_draft(str(tmp_path), "   ")


def test_publish_moves_draft_into_posts(tmp_path: Path) -> None:
    draft = _write_file(
        tmp_path / "_drafts" / "dynamic-scoping.md",
        "---\nlayout: post\ntitle: Dynamic scoping\nfootnotes:\n  - A note.\n---\n\nBody[^1]\n",
    )

    target = publish_draft(str(tmp_path), "dynamic-scoping", on=date(2021, 3, 4))

    assert target == str(tmp_path / "_posts" / "2021-03-04-dynamic-scoping.md")
    assert not draft.exists()
    meta, body = parse_front_matter(Path(target).read_text(encoding="utf-8"))
    assert meta == {
        "layout": "post",
        "title": "Dynamic scoping",
        "footnotes": ["A note."],
        "date": date(2021, 3, 4),
    }
    assert body == "\nBody[^1]\n"

    post = load_collection(str(tmp_path)).by_rel_path("_posts/2021-03-04-dynamic-scoping.md")
    assert post is not None
    assert post.kind == "post"


def test_publish_refuses_collisions_and_missing_front_matter(tmp_path: Path) -> None:
    _write_file(tmp_path / "_drafts" / "a.md", "---\ntitle: A\n---\nText\n")
    _write_file(tmp_path / "_posts" / "2021-01-01-a.md", "---\ntitle: A\n---\nText\n")
    _write_file(tmp_path / "_drafts" / "bare.md", "Text without front-matter\n")

    with pytest.raises(FileExistsError, match="Post already exists"):
        publish_draft(str(tmp_path), "a.md", on=date(2021, 1, 1))
    assert (tmp_path / "_drafts" / "a.md").exists()

    with pytest.raises(FrontMatterError, match="no front-matter"):
        publish_draft(str(tmp_path), "bare", on=date(2021, 1, 1))


def test_find_draft_accepts_paths_names_and_stems(tmp_path: Path) -> None:
    draft = _write_file(tmp_path / "_drafts" / "idea.markdown", "---\ntitle: Idea\n---\n")

    assert find_draft(str(tmp_path), "idea") == str(draft)
    assert find_draft(str(tmp_path), "idea.markdown") == str(draft)
    assert find_draft(str(tmp_path), str(draft)) == str(draft)
    with pytest.raises(FileNotFoundError, match="No draft named 'other'"):
        find_draft(str(tmp_path), "other")


def test_list_documents_and_format_rows(tmp_path: Path) -> None:
    _write_file(tmp_path / "_posts" / "2017-01-27-injection.md", "---\ntitle: Injection\n---\nA\n")
    _write_file(tmp_path / "_posts" / "2017-02-02-rejection.md", "---\ntitle: Rejection\n---\nB\n")
    _write_file(tmp_path / "_drafts" / "scoping.md", "---\ntitle: Scoping\n---\nC\n")
    collection = load_collection(str(tmp_path))

    rows = list_documents(collection)
    assert [row["doc_id"] for row in rows] == [
        "2017-02-02-rejection",
        "2017-01-27-injection",
        "draft-scoping",
    ]
    assert rows[0] == {
        "doc_id": "2017-02-02-rejection",
        "kind": "post",
        "date": "2017-02-02",
        "title": "Rejection",
        "url": "/2017/02/02/rejection.html",
        "path": "_posts/2017-02-02-rejection.md",
    }
    assert len(list_documents(collection, include_drafts=False)) == 2

    text = format_rows(rows)
    lines = text.splitlines()
    assert lines[0].split() == ["date", "kind", "doc_id", "title"]
    assert lines[2].split() == ["2017-02-02", "post", "2017-02-02-rejection", "Rejection"]
    assert lines[4].split() == ["draft", "draft-scoping", "Scoping"]

    assert format_rows([]) == "No documents found."
