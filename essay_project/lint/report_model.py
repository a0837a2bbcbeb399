from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from essay_project.content.model import Collection

SEVERITY_ORDER = {"error": 0, "warn": 1, "info": 2}


@dataclass(frozen=True)
class Issue:
    severity: str
    code: str
    message: str
    path: Optional[str] = None
    line: Optional[int] = None

    @property
    def location(self) -> str:
        if self.path is None:
            return ""
        if self.line is None:
            return self.path
        return f"{self.path}:{self.line}"


def issue_sort_key(issue: Issue) -> tuple:
    return (
        SEVERITY_ORDER.get(issue.severity.lower(), 99),
        issue.code,
        issue.path or "",
        issue.line or 0,
        issue.message,
    )


@dataclass(frozen=True)
class PairSimilarity:
    a_path: str
    b_path: str
    seq_ratio: float
    jaccard: float

    @property
    def score(self) -> float:
        return 0.65 * self.seq_ratio + 0.35 * self.jaccard


@dataclass
class LintReport:
    collection: Collection
    issues: List[Issue]
    tool_version: str
    rules_run: List[str] = field(default_factory=list)
    strict: bool = False

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warn_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "warn")

    @property
    def ok(self) -> bool:
        if self.error_count:
            return False
        if self.strict and self.warn_count:
            return False
        return True

    def issues_for(self, rel_path: str) -> List[Issue]:
        return [issue for issue in self.issues if issue.path == rel_path]
