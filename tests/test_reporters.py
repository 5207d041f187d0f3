from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from helpers import make_comment, make_node

from hushmap.engine.emitter import emit_records, sort_records
from hushmap.engine.index import ProgramIndex
from hushmap.engine.types import ScanSummary
from hushmap.reporters.json_reporter import ReportError, parse_json_report, render_json
from hushmap.reporters.terminal import render_terminal


def _summary(root: Path) -> ScanSummary:
    path = root / "src" / "mod.py"
    index = ProgramIndex.from_entries(
        [
            (
                path,
                [
                    make_comment(path, line=1, col=12, text=" codeql[py/unused-import]"),
                    make_comment(path, line=3, col=12, text=" noqa"),
                ],
                [make_node(path, line=1), make_node(path, line=3)],
            )
        ]
    )
    return ScanSummary(files_scanned=1, comments_seen=2, records=sort_records(emit_records(index)))


def test_render_json_uses_relative_paths(tmp_path: Path) -> None:
    payload = json.loads(render_json(_summary(tmp_path), project_root=tmp_path))

    assert payload["tool"]["name"] == "Hushmap"
    assert payload["files_scanned"] == 1
    assert payload["comments_seen"] == 2
    first, second = payload["suppressions"]
    assert first["annotation"] == "lgtm[py/unused-import]"
    assert first["kind"] == "bracketed-or-bare-codeql"
    assert first["scope"] == {"path": "src/mod.py", "start_line": 1, "start_col": 1, "end_line": 1, "end_col": 37}
    assert first["comment"]["start_col"] == 12
    assert second["annotation"] == "codeql"
    assert second["kind"] == "noqa-bare"


def test_parse_json_report_reads_rendered_report(tmp_path: Path) -> None:
    summary = _summary(tmp_path)
    parsed = parse_json_report(render_json(summary, project_root=tmp_path), project_root=tmp_path)

    assert parsed.files_scanned == 1
    assert [r.annotation for r in parsed.records] == ["lgtm[py/unused-import]", "codeql"]
    assert parsed.records[0].scope.path == tmp_path / "src" / "mod.py"
    assert parsed.records[0].scope.start_col == 1


def test_render_json_comment_id_is_relative_to_project_root(tmp_path: Path) -> None:
    payload = json.loads(render_json(_summary(tmp_path), project_root=tmp_path))

    ids = [item["comment_id"] for item in payload["suppressions"]]
    assert ids == ["src/mod.py:1:12", "src/mod.py:3:12"]
    assert all(str(tmp_path) not in i for i in ids)


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        '{"comments_seen": 1}',
        '{"files_scanned": 1, "suppressions": {}}',
        '{"files_scanned": 1, "suppressions": [{"text": " x", "annotation": "lgtm", "kind": "other"}]}',
        '{"files_scanned": 1, "suppressions": [{"text": " x", "annotation": "lgtm", "comment": {"path": "a.py"}}]}',
    ],
)
def test_parse_json_report_rejects_malformed_input(tmp_path: Path, text: str) -> None:
    with pytest.raises(ReportError):
        parse_json_report(text, project_root=tmp_path)


def test_render_terminal_lists_records_per_file(tmp_path: Path) -> None:
    buf = io.StringIO()
    console = Console(file=buf, width=120, color_system=None)

    render_terminal(_summary(tmp_path), project_root=tmp_path, console=console)

    out = buf.getvalue()
    assert "src/mod.py" in out
    assert "1:1-1:37" in out
    assert "lgtm[py/unused-import]" in out
    assert "Suppressions: 2" in out


def test_render_terminal_without_details_prints_summary_only(tmp_path: Path) -> None:
    buf = io.StringIO()
    console = Console(file=buf, width=120, color_system=None)

    render_terminal(_summary(tmp_path), project_root=tmp_path, console=console, show_details=False)

    out = buf.getvalue()
    assert "src/mod.py" not in out
    assert "Suppressions: 2" in out


def test_render_terminal_prints_comment_text_without_delimiter(tmp_path: Path) -> None:
    path = tmp_path / "web" / "app.js"
    index = ProgramIndex.from_entries(
        [(path, [make_comment(path, line=2, col=9, text=" codeql[js/xss]")], [make_node(path, line=2)])]
    )
    summary = ScanSummary(files_scanned=1, comments_seen=1, records=sort_records(emit_records(index)))
    buf = io.StringIO()
    console = Console(file=buf, width=120, color_system=None)

    render_terminal(summary, project_root=tmp_path, console=console)

    out = buf.getvalue()
    assert "     codeql[js/xss]" in out
    assert "# codeql[js/xss]" not in out
