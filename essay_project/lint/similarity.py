from __future__ import annotations

import difflib
import re
from itertools import combinations
from typing import Iterable, List, Sequence

from essay_project.content.model import Document

from .report_model import PairSimilarity

_WORD_RE = re.compile(r"[A-Za-z][A-Za-z0-9'_-]*")
MAX_LENGTH_RATIO = 2.0


def tokens(text: str) -> list[str]:
    return [t.lower() for t in _WORD_RE.findall(text or "")]


def jaccard(a_tokens: Iterable[str], b_tokens: Iterable[str]) -> float:
    a_set = set(a_tokens)
    b_set = set(b_tokens)
    if not a_set and not b_set:
        return 1.0
    if not a_set or not b_set:
        return 0.0
    return len(a_set & b_set) / float(len(a_set | b_set))


def seq_ratio(a_tokens: Sequence[str], b_tokens: Sequence[str]) -> float:
    return difflib.SequenceMatcher(a=list(a_tokens), b=list(b_tokens), autojunk=False).ratio()


def near_duplicates(documents: Sequence[Document], *, threshold: float) -> List[PairSimilarity]:
    """
    Pairs of documents whose bodies score at or above `threshold`.

    Bodies with no words, and pairs whose token counts differ by more than a
    factor of two, are never compared. Pairs are ordered by path.
    """

    token_cache = {doc.rel_path: tokens(doc.body) for doc in documents}
    ordered = sorted((doc for doc in documents if token_cache[doc.rel_path]), key=lambda d: d.rel_path)

    pairs: List[PairSimilarity] = []
    for a, b in combinations(ordered, 2):
        a_tokens = token_cache[a.rel_path]
        b_tokens = token_cache[b.rel_path]
        longer = max(len(a_tokens), len(b_tokens))
        shorter = min(len(a_tokens), len(b_tokens))
        if longer > shorter * MAX_LENGTH_RATIO:
            continue
        # seq_ratio <= 1, so this bounds the combined score from above.
        jac = jaccard(a_tokens, b_tokens)
        if 0.65 + 0.35 * jac < threshold:
            continue
        pair = PairSimilarity(
            a_path=a.rel_path,
            b_path=b.rel_path,
            seq_ratio=seq_ratio(a_tokens, b_tokens),
            jaccard=jac,
        )
        if pair.score >= threshold:
            pairs.append(pair)
    return pairs
