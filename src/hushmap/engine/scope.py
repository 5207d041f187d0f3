from __future__ import annotations

from hushmap.engine.index import ProgramIndex
from hushmap.engine.types import Comment, SuppressionScope


def resolve(comment: Comment, index: ProgramIndex) -> SuppressionScope | None:
    """
    Return the range a suppression comment covers, or None if it cannot apply.

    A comment qualifies only when a code node starts on the comment's first
    line. The scope starts at column 1 of that line, so code preceding the
    comment is covered, and ends where the comment ends.
    """

    loc = comment.location
    if not index.has_code_on(loc.path, loc.start_line):
        return None
    return SuppressionScope(
        path=loc.path,
        start_line=loc.start_line,
        start_col=1,
        end_line=loc.end_line,
        end_col=loc.end_col,
    )
