"""Front-matter splitting and parsing.

A front-matter block opens with a first line of exactly ``---`` and closes with
the next line of ``---`` or ``...``. Everything after the closing line is the
body. Text without an opening delimiter has no front-matter at all.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import yaml

OPEN_DELIMITER = "---"
CLOSE_DELIMITERS = ("---", "...")


class FrontMatterError(ValueError):
    def __init__(self, message: str, *, path: str | None = None) -> None:
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


def split_front_matter(text: str, *, path: str | None = None) -> tuple[str | None, str]:
    """Return (raw_yaml, body); raw_yaml is None when the text has no front-matter block."""

    if text.startswith("\ufeff"):
        text = text[1:]
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n").rstrip() != OPEN_DELIMITER:
        return None, text

    for idx in range(1, len(lines)):
        if lines[idx].rstrip("\r\n").rstrip() in CLOSE_DELIMITERS:
            raw = "".join(lines[1:idx])
            body = "".join(lines[idx + 1 :])
            return raw, body

    raise FrontMatterError("front-matter block is not closed", path=path)


def parse_front_matter(text: str, *, path: str | None = None) -> tuple[dict[str, Any] | None, str]:
    """Return (mapping, body); mapping is None when there is no front-matter block."""

    raw, body = split_front_matter(text, path=path)
    if raw is None:
        return None, body

    try:
        payload = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"invalid YAML in front-matter: {exc}", path=path) from exc

    if payload is None:
        return {}, body
    if not isinstance(payload, Mapping):
        raise FrontMatterError(
            f"front-matter must be a YAML mapping (got {type(payload).__name__})", path=path
        )
    return {str(key): value for key, value in payload.items()}, body


def dump_front_matter(front_matter: Mapping[str, Any], body: str) -> str:
    raw = yaml.safe_dump(
        dict(front_matter),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    if body and not body.startswith("\n"):
        body = "\n" + body
    return f"{OPEN_DELIMITER}\n{raw}{OPEN_DELIMITER}\n{body}"
