from __future__ import annotations

from pathlib import Path

from helpers import write_source

from hushmap.audit import AuditCallbacks, audit_path


def test_audit_path_collects_sorted_records(project_root: Path) -> None:
    write_source(project_root, "b.py", "y = 2  # noqa\n")
    write_source(project_root, "a.py", "import os  # codeql[py/unused-import]\n\n# codeql\n")

    result = audit_path(project_root)

    assert result.summary.files_scanned == 2
    assert result.summary.comments_seen == 3
    assert [(r.scope.path.name, r.annotation) for r in result.summary.records] == [
        ("a.py", "lgtm[py/unused-import]"),
        ("b.py", "codeql"),
    ]
    assert frozenset(result.summary.records) == result.records


def test_audit_respects_configured_conventions(project_root: Path) -> None:
    (project_root / "pyproject.toml").write_text('[tool.hushmap]\nconventions = ["codeql"]\n', encoding="utf-8")
    write_source(project_root, "a.py", "x = 1  # noqa\ny = 2  # codeql\n")

    result = audit_path(project_root)

    assert [r.annotation for r in result.summary.records] == ["lgtm"]


def test_audit_callbacks_are_invoked(project_root: Path) -> None:
    write_source(project_root, "a.py", "x = 1  # noqa\n")
    indexed: list[Path] = []
    ready: list[int] = []

    audit_path(project_root, callbacks=AuditCallbacks(on_file_indexed=indexed.append, on_index_ready=ready.append))

    assert [p.name for p in indexed] == ["a.py"]
    assert ready == [1]
