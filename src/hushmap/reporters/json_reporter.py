from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from hushmap import __version__
from hushmap.engine.types import (
    CODEQL_DIRECTIVE,
    NOQA_DIRECTIVE,
    Comment,
    Location,
    ScanSummary,
    SuppressionRecord,
    SuppressionScope,
    comment_id,
)
from hushmap.utils import safe_relpath

REPORT_SCHEMA_VERSION = 1


class ReportError(ValueError):
    """Raised when a JSON report cannot be parsed back into a summary."""


def render_json(summary: ScanSummary, *, project_root: Path) -> str:
    payload = {
        "schema_version": REPORT_SCHEMA_VERSION,
        "tool": {"name": "Hushmap", "version": __version__},
        "files_scanned": summary.files_scanned,
        "comments_seen": summary.comments_seen,
        "suppressions": [_record_to_dict(r, project_root=project_root) for r in summary.records],
    }
    return json.dumps(payload, indent=2, sort_keys=False)


def _record_to_dict(record: SuppressionRecord, *, project_root: Path) -> dict[str, Any]:
    loc = record.comment.location
    scope = record.scope
    rel_path = safe_relpath(loc.path, project_root)
    return {
        "comment_id": comment_id(Path(rel_path), loc.start_line, loc.start_col),
        "text": record.text,
        "annotation": record.annotation,
        "kind": record.directive_kind,
        "comment": {
            "path": rel_path,
            "start_line": loc.start_line,
            "start_col": loc.start_col,
            "end_line": loc.end_line,
            "end_col": loc.end_col,
        },
        "scope": {
            "path": safe_relpath(scope.path, project_root),
            "start_line": scope.start_line,
            "start_col": scope.start_col,
            "end_line": scope.end_line,
            "end_col": scope.end_col,
        },
    }


def parse_json_report(text: str, *, project_root: Path) -> ScanSummary:
    """
    Parse a report produced by `render_json()` back into a `ScanSummary`.

    Relative paths are resolved against `project_root`.
    """

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ReportError(f"Invalid JSON report: {exc}") from exc
    if not isinstance(data, dict):
        raise ReportError("JSON report must be an object.")

    raw_files = data.get("files_scanned")
    raw_comments = data.get("comments_seen", 0)
    if not isinstance(raw_files, int) or not isinstance(raw_comments, int):
        raise ReportError("JSON report missing required fields: files_scanned/comments_seen.")

    raw_records = data.get("suppressions", [])
    if not isinstance(raw_records, list):
        raise ReportError("JSON report `suppressions` must be a list.")

    records = tuple(_parse_record(item, project_root=project_root) for item in raw_records)
    return ScanSummary(files_scanned=raw_files, comments_seen=raw_comments, records=records)


def _parse_record(item: Any, *, project_root: Path) -> SuppressionRecord:
    if not isinstance(item, dict):
        raise ReportError("Each suppression must be an object.")

    text = item.get("text")
    annotation = item.get("annotation")
    if not isinstance(text, str) or not isinstance(annotation, str):
        raise ReportError("Suppression entries need string `text` and `annotation` fields.")

    kind = item.get("kind", CODEQL_DIRECTIVE)
    if kind not in {CODEQL_DIRECTIVE, NOQA_DIRECTIVE}:
        raise ReportError(f"Unknown suppression kind: {kind!r}.")

    comment_loc = _parse_location(item.get("comment"), project_root=project_root, field_name="comment")
    scope_loc = _parse_location(item.get("scope"), project_root=project_root, field_name="scope")

    raw_id = item.get("comment_id")
    if not isinstance(raw_id, str) or not raw_id:
        raw_id = comment_id(comment_loc.path, comment_loc.start_line, comment_loc.start_col)

    return SuppressionRecord(
        comment=Comment(id=raw_id, text=text, location=comment_loc),
        text=text,
        annotation=annotation,
        scope=SuppressionScope(
            path=scope_loc.path,
            start_line=scope_loc.start_line,
            start_col=scope_loc.start_col,
            end_line=scope_loc.end_line,
            end_col=scope_loc.end_col,
        ),
        directive_kind=kind,
    )


def _parse_location(raw: Any, *, project_root: Path, field_name: str) -> Location:
    if not isinstance(raw, dict):
        raise ReportError(f"Suppression `{field_name}` must be an object.")

    raw_path = raw.get("path")
    if not isinstance(raw_path, str) or not raw_path:
        raise ReportError(f"Suppression `{field_name}.path` must be a non-empty string.")
    candidate = Path(raw_path)
    path = candidate if candidate.is_absolute() else (project_root / candidate)

    values: dict[str, int] = {}
    for key in ("start_line", "start_col", "end_line", "end_col"):
        value = raw.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise ReportError(f"Suppression `{field_name}.{key}` must be a positive integer.")
        values[key] = value

    return Location(path=path, **values)
