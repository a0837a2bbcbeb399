from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime
from typing import Any

_DATED_STEM_RE = re.compile(r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})-(?P<rest>.+)$")
_DATE_PREFIX_RE = re.compile(r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})\b")
_SLUG_UNSAFE_RE = re.compile(r"[^a-z0-9]+")

UNTITLED_SLUG = "untitled"
DRAFT_ID_PREFIX = "draft-"
INDEX_URL = "/index.html"


def slugify(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text or "")
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii").lower()
    slug = _SLUG_UNSAFE_RE.sub("-", ascii_text).strip("-")
    return slug or UNTITLED_SLUG


def _make_date(year: str, month: str, day: str) -> date | None:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def split_dated_name(stem: str) -> tuple[date | None, str]:
    """Split ``YYYY-MM-DD-rest`` into (date, rest); other stems come back unchanged."""

    match = _DATED_STEM_RE.match(stem)
    if not match:
        return None, stem
    parsed = _make_date(match.group("year"), match.group("month"), match.group("day"))
    if parsed is None:
        return None, stem
    return parsed, match.group("rest")


def coerce_date(value: Any) -> date | None:
    """Interpret a front-matter ``date`` value; unrecognised values give None."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        match = _DATE_PREFIX_RE.match(value.strip())
        if match:
            return _make_date(match.group("year"), match.group("month"), match.group("day"))
    return None


def derive_doc_id(created: date | None, slug: str) -> str:
    if created is None:
        return f"{DRAFT_ID_PREFIX}{slug}"
    return f"{created.isoformat()}-{slug}"


def post_url(created: date | None, slug: str) -> str:
    if created is None:
        return f"/drafts/{slug}.html"
    return f"/{created:%Y}/{created:%m}/{created:%d}/{slug}.html"


def normalize_permalink(value: str) -> str:
    url = value.strip()
    if not url.startswith("/"):
        url = "/" + url
    if url.endswith("/"):
        url += "index.html"
    return url
