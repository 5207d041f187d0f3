from __future__ import annotations

from pathlib import Path

from hushmap.engine.types import CodeNode, Comment, Location, comment_id


def make_comment(path: Path, *, line: int, col: int, text: str, end_line: int | None = None) -> Comment:
    end = end_line if end_line is not None else line
    # Inclusive end column of `#` followed by `text`.
    end_col = col + len(text)
    return Comment(
        id=comment_id(path, line, col),
        text=text,
        location=Location(path=path, start_line=line, start_col=col, end_line=end, end_col=end_col),
    )


def make_node(path: Path, *, line: int, kind: str = "Expr") -> CodeNode:
    return CodeNode(kind=kind, location=Location(path=path, start_line=line, start_col=1, end_line=line, end_col=1))


def write_source(root: Path, relpath: str, content: str) -> Path:
    path = root / relpath
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
