from __future__ import annotations

from pathlib import Path

import pytest

from hushmap.utils import safe_relpath, strip_comment_delimiters


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("# noqa", " noqa"),
        ("// codeql[js/x]", " codeql[js/x]"),
        ("/* codeql */", " codeql "),
        ("/* unterminated", " unterminated"),
        ("-- not ours", "-- not ours"),
    ],
)
def test_strip_comment_delimiters(raw: str, expected: str) -> None:
    assert strip_comment_delimiters(raw) == expected


def test_safe_relpath_inside_and_outside_root(tmp_path: Path) -> None:
    root = tmp_path / "root"
    (root / "src").mkdir(parents=True)
    assert safe_relpath(root / "src" / "a.py", root) == "src/a.py"

    outside = tmp_path / "other" / "b.py"
    assert safe_relpath(outside, root) == outside.as_posix()
