from __future__ import annotations

from pathlib import Path

import pytest

from hushmap.scanner import HUSHMAP_WORKERS_ENV


@pytest.fixture()
def project_root(tmp_path: Path) -> Path:
    # A pyproject.toml pins project root detection to tmp_path.
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'sample'\n", encoding="utf-8")
    return tmp_path


@pytest.fixture(autouse=True)
def _single_worker(monkeypatch) -> None:
    monkeypatch.setenv(HUSHMAP_WORKERS_ENV, "1")
