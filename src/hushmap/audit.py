from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from hushmap.engine.directives import matchers_for
from hushmap.engine.emitter import emit_records, sort_records
from hushmap.engine.index import ProgramIndex
from hushmap.engine.types import ScanSummary, SuppressionRecord
from hushmap.scanner import (
    ScanTarget,
    build_program_index,
    discover_files,
    prepare_target,
    worker_count_from_env,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuditResult:
    target: ScanTarget
    files: tuple[Path, ...]
    index: ProgramIndex
    records: frozenset[SuppressionRecord]
    summary: ScanSummary


@dataclass(frozen=True, slots=True)
class AuditCallbacks:
    on_file_indexed: Callable[[Path], None] | None = None
    on_index_ready: Callable[[int], None] | None = None


def audit_path(scan_path: Path, *, callbacks: AuditCallbacks | None = None) -> AuditResult:
    target = prepare_target(scan_path)
    files = discover_files(target)
    return audit_files(target, files=files, callbacks=callbacks)


def audit_files(
    target: ScanTarget,
    *,
    files: list[Path],
    callbacks: AuditCallbacks | None = None,
) -> AuditResult:
    workers = worker_count_from_env()
    index = build_program_index(
        files,
        workers=workers,
        on_path_done=callbacks.on_file_indexed if callbacks else None,
    )
    comments_seen = index.comment_count()
    if callbacks is not None and callbacks.on_index_ready is not None:
        callbacks.on_index_ready(comments_seen)
    logger.debug("indexed %d file(s), %d comment(s)", len(files), comments_seen)

    matchers = matchers_for(target.config.conventions)
    records = emit_records(index, matchers=matchers, workers=workers)
    logger.debug("emitted %d suppression record(s)", len(records))

    summary = ScanSummary(
        files_scanned=len(files),
        comments_seen=comments_seen,
        records=sort_records(records),
    )
    return AuditResult(target=target, files=tuple(files), index=index, records=records, summary=summary)
