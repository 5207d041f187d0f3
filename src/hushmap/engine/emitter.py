from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path

from hushmap.engine.directives import MATCHERS, Matcher, classify
from hushmap.engine.index import ProgramIndex
from hushmap.engine.scope import resolve
from hushmap.engine.types import Comment, SuppressionRecord


def record_for_comment(
    comment: Comment,
    index: ProgramIndex,
    *,
    matchers: Iterable[Matcher] = MATCHERS,
) -> SuppressionRecord | None:
    directive = classify(comment.text, matchers=matchers)
    if directive is None:
        return None
    scope = resolve(comment, index)
    if scope is None:
        return None
    return SuppressionRecord(
        comment=comment,
        text=comment.text,
        annotation=directive.annotation,
        scope=scope,
        directive_kind=directive.kind,
    )


def records_for_file(
    index: ProgramIndex,
    path: Path,
    *,
    matchers: Iterable[Matcher] = MATCHERS,
) -> list[SuppressionRecord]:
    matchers = tuple(matchers)
    out: list[SuppressionRecord] = []
    for comment in index.comments_of(path):
        record = record_for_comment(comment, index, matchers=matchers)
        if record is not None:
            out.append(record)
    return out


def emit_records(
    index: ProgramIndex,
    *,
    matchers: Iterable[Matcher] = MATCHERS,
    workers: int = 1,
) -> frozenset[SuppressionRecord]:
    """
    Emit one record per comment that both classifies and resolves.

    Files are independent, so they may be processed on a thread pool; the
    result is a set and does not depend on `workers`.
    """

    matchers = tuple(matchers)
    paths = index.files()
    if workers <= 1 or len(paths) <= 1:
        return frozenset(record for path in paths for record in records_for_file(index, path, matchers=matchers))

    max_workers = min(max(1, workers), len(paths))
    per_file = partial(records_for_file, index, matchers=matchers)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return frozenset(record for records in executor.map(per_file, paths) for record in records)


def sort_records(records: Iterable[SuppressionRecord]) -> tuple[SuppressionRecord, ...]:
    return tuple(sorted(records, key=_sort_key))


def _sort_key(record: SuppressionRecord) -> tuple[str, int, int, str]:
    loc = record.comment.location
    return loc.path.as_posix(), loc.start_line, loc.start_col, record.comment.id
