"""Link and footnote extraction from Markdown bodies.

Only prose is scanned: fenced code blocks, indented code blocks and inline code
spans are blanked out first, so illustrative snippets inside the essays never
produce links or footnote markers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterator, List, Literal, Optional, Tuple
from urllib.parse import unquote, urlsplit

LinkSource = Literal["inline", "reference", "post_url"]
LinkKind = Literal["external", "anchor", "mail", "internal"]

_FENCE_RE = re.compile(r"^\s{0,3}(?P<fence>`{3,}|~{3,})")
_INDENTED_CODE_RE = re.compile(r"^(?: {4}|\t)")
_CODE_SPAN_RE = re.compile(r"(?P<ticks>`+)(?P<code>.+?)(?P=ticks)")
_INLINE_LINK_RE = re.compile(r"!?\[(?P<text>[^\]\n]*)\]\(\s*<?(?P<target>[^)\s>]*)>?(?:\s+[\"'(][^)]*)?\)")
_REFERENCE_DEF_RE = re.compile(r"^\s{0,3}\[(?P<label>[^\]^][^\]]*)\]:\s*<?(?P<target>\S+?)>?(?:\s+.*)?$")
_POST_URL_RE = re.compile(r"\{%-?\s*post_url\s+(?P<name>[^\s%]+)\s*-?%\}")
_FOOTNOTE_DEF_RE = re.compile(r"^\s{0,3}\[\^(?P<label>[^\]\s]+)\]:")
_FOOTNOTE_MARKER_RE = re.compile(r"\[\^(?P<label>[^\]\s]+)\](?!:)")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


@dataclass(frozen=True)
class Link:
    target: str
    line: int
    source: LinkSource
    text: str = ""

    @property
    def kind(self) -> LinkKind:
        return "internal" if self.source == "post_url" else classify_target(self.target)


@dataclass(frozen=True)
class FootnoteRef:
    label: str
    line: int


def classify_target(target: str) -> LinkKind:
    if target.startswith("#") or not target:
        return "anchor"
    if target.lower().startswith("mailto:"):
        return "mail"
    if target.startswith("//") or _SCHEME_RE.match(target):
        return "external"
    return "internal"


def internal_path(target: str) -> str:
    """Strip query/fragment and percent-encoding from an internal link target."""
    return unquote(urlsplit(target).path)


def _mark_code_lines(lines: List[str]) -> Iterator[Tuple[str, bool]]:
    """Yield (line, in_code) for each line, tracking fenced and indented code blocks."""

    open_fence: Optional[str] = None
    previous_blank = True
    for line in lines:
        match = _FENCE_RE.match(line)
        if open_fence is not None:
            if match and match.group("fence")[0] == open_fence[0] and len(match.group("fence")) >= len(open_fence):
                open_fence = None
            yield line, True
            continue
        if match:
            open_fence = match.group("fence")
            previous_blank = False
            yield line, True
            continue
        if previous_blank and _INDENTED_CODE_RE.match(line) and line.strip():
            yield line, True
            continue
        previous_blank = not line.strip()
        yield line, False


def prose_lines(body: str) -> List[str]:
    """Return the body's lines with code blocks and code spans blanked (line numbers preserved)."""

    return [
        "" if in_code else _CODE_SPAN_RE.sub(lambda m: " " * len(m.group(0)), line)
        for line, in_code in _mark_code_lines(body.splitlines())
    ]


def extract_links(body: str) -> List[Link]:
    links: List[Link] = []
    for lineno, line in enumerate(prose_lines(body), start=1):
        if not line:
            continue
        ref = _REFERENCE_DEF_RE.match(line)
        if ref:
            links.append(Link(target=ref.group("target"), line=lineno, source="reference", text=ref.group("label")))
            continue
        for match in _INLINE_LINK_RE.finditer(line):
            links.append(Link(target=match.group("target"), line=lineno, source="inline", text=match.group("text")))
        for match in _POST_URL_RE.finditer(line):
            links.append(Link(target=match.group("name"), line=lineno, source="post_url"))
    return links


def extract_footnote_refs(body: str) -> List[FootnoteRef]:
    refs: List[FootnoteRef] = []
    for lineno, line in enumerate(prose_lines(body), start=1):
        if not line:
            continue
        for match in _FOOTNOTE_MARKER_RE.finditer(line):
            refs.append(FootnoteRef(label=match.group("label"), line=lineno))
    return refs


def extract_footnote_definitions(body: str) -> List[FootnoteRef]:
    definitions: List[FootnoteRef] = []
    for lineno, line in enumerate(prose_lines(body), start=1):
        match = _FOOTNOTE_DEF_RE.match(line)
        if match:
            definitions.append(FootnoteRef(label=match.group("label"), line=lineno))
    return definitions


def replace_post_url_tags(body: str, resolve: Callable[[str], Optional[str]]) -> str:
    """
    Replace ``{% post_url name %}`` tags using `resolve(name) -> url | None` ("#" when unresolved).

    Tags inside code blocks and code spans are left as written.
    """

    def substitute(text: str) -> str:
        return _POST_URL_RE.sub(lambda m: resolve(m.group("name")) or "#", text)

    parts: List[str] = []
    for line, in_code in _mark_code_lines(body.splitlines(keepends=True)):
        if in_code:
            parts.append(line)
            continue
        pos = 0
        for span in _CODE_SPAN_RE.finditer(line):
            parts.append(substitute(line[pos:span.start()]))
            parts.append(span.group(0))
            pos = span.end()
        parts.append(substitute(line[pos:]))
    return "".join(parts)
