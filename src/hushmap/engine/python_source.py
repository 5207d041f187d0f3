from __future__ import annotations

import ast
import io
import logging
import tokenize
from pathlib import Path

from hushmap.engine.types import CodeNode, Comment, Location, comment_id

logger = logging.getLogger(__name__)


def python_comments(path: Path, source: str) -> list[Comment]:
    """
    Return the `# ...` comments of a Python source, without the leading `#`.

    Tokenization keeps `#` characters inside strings and docstrings from being
    mistaken for comments. Sources that fail to tokenize yield no comments.
    """

    out: list[Comment] = []
    try:
        for tok in tokenize.generate_tokens(io.StringIO(source).readline):
            if tok.type != tokenize.COMMENT:
                continue
            (start_row, start_col0), (end_row, end_col0) = tok.start, tok.end
            location = Location(
                path=path,
                start_line=start_row,
                start_col=start_col0 + 1,
                end_line=end_row,
                end_col=end_col0,
            )
            out.append(
                Comment(
                    id=comment_id(path, start_row, start_col0 + 1),
                    text=tok.string[1:],
                    location=location,
                )
            )
    except (tokenize.TokenError, IndentationError, SyntaxError) as exc:
        logger.debug("cannot tokenize %s: %s", path, exc)
        return []
    return out


def python_code_nodes(path: Path, source: str) -> list[CodeNode]:
    """Return every located AST node; unparsable sources yield none."""

    try:
        tree = ast.parse(source)
    except (SyntaxError, ValueError) as exc:
        logger.debug("cannot parse %s: %s", path, exc)
        return []

    nodes: list[CodeNode] = []
    for node in ast.walk(tree):
        lineno = getattr(node, "lineno", None)
        if lineno is None:
            continue
        col = int(getattr(node, "col_offset", 0) or 0)
        end_line = getattr(node, "end_lineno", None) or lineno
        end_col = getattr(node, "end_col_offset", None)
        nodes.append(
            CodeNode(
                kind=type(node).__name__,
                location=Location(
                    path=path,
                    start_line=int(lineno),
                    start_col=col + 1,
                    end_line=int(end_line),
                    end_col=int(end_col) if end_col is not None else col + 1,
                ),
            )
        )
    return nodes
