from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

DirectiveKind = Literal["bracketed-or-bare-codeql", "noqa-bare"]

CODEQL_DIRECTIVE: DirectiveKind = "bracketed-or-bare-codeql"
NOQA_DIRECTIVE: DirectiveKind = "noqa-bare"


@dataclass(frozen=True, slots=True)
class Location:
    path: Path
    start_line: int  # 1-based
    start_col: int  # 1-based
    end_line: int  # 1-based
    end_col: int  # 1-based, inclusive


@dataclass(frozen=True, slots=True)
class Comment:
    """A single source comment; `text` excludes the comment delimiters."""

    id: str
    text: str
    location: Location


@dataclass(frozen=True, slots=True)
class CodeNode:
    kind: str
    location: Location


@dataclass(frozen=True, slots=True)
class Directive:
    annotation: str
    kind: DirectiveKind


@dataclass(frozen=True, slots=True)
class SuppressionScope:
    path: Path
    start_line: int
    start_col: int
    end_line: int
    end_col: int


@dataclass(frozen=True, slots=True)
class SuppressionRecord:
    comment: Comment
    text: str
    annotation: str
    scope: SuppressionScope
    directive_kind: DirectiveKind = CODEQL_DIRECTIVE


@dataclass(frozen=True, slots=True)
class ScanSummary:
    files_scanned: int
    comments_seen: int
    records: tuple[SuppressionRecord, ...]


def comment_id(path: Path, line: int, col: int) -> str:
    return f"{path.as_posix()}:{line}:{col}"
