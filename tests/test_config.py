from __future__ import annotations

from pathlib import Path

import pytest

from hushmap.config import (
    DEFAULT_CONVENTIONS,
    ConfigError,
    HushmapConfig,
    load_config,
    normalize_conventions,
    path_is_ignored,
)


def _write(tmp_path: Path, body: str) -> None:
    (tmp_path / "pyproject.toml").write_text(body, encoding="utf-8")


def test_load_config_defaults_when_no_pyproject(tmp_path: Path) -> None:
    config = load_config(tmp_path)
    assert config == HushmapConfig()
    assert config.conventions == DEFAULT_CONVENTIONS
    assert "python" in config.languages


def test_load_config_defaults_without_tool_table(tmp_path: Path) -> None:
    _write(tmp_path, "[project]\nname = 'x'\n")
    assert load_config(tmp_path) == HushmapConfig()


def test_load_config_reads_tool_table(tmp_path: Path) -> None:
    _write(
        tmp_path,
        """
[tool.hushmap]
languages = ["Python", "typescript"]
conventions = ["noqa", "codeql"]

[tool.hushmap.ignore]
paths = ["vendor/", "*_pb2.py"]
""".lstrip(),
    )

    config = load_config(tmp_path)

    assert config.languages == ("python", "typescript")
    assert config.conventions == ("codeql", "noqa")
    assert config.ignore.paths == ("vendor/", "*_pb2.py")


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ('[tool.hushmap]\nlanguages = "python"\n', "tool.hushmap.languages"),
        ('[tool.hushmap]\nlanguages = ["cobol"]\n', "cobol"),
        ('[tool.hushmap]\nconventions = ["nosemgrep"]\n', "nosemgrep"),
        ("[tool.hushmap]\nconventions = []\n", "at least one"),
        ('[tool.hushmap]\nignore = "vendor/"\n', "tool.hushmap.ignore"),
        ("[tool.hushmap\n", "Invalid TOML"),
    ],
)
def test_invalid_config_raises(tmp_path: Path, body: str, message: str) -> None:
    _write(tmp_path, body)
    with pytest.raises(ConfigError, match=message):
        load_config(tmp_path)


def test_normalize_conventions_reorders_by_precedence() -> None:
    assert normalize_conventions([" NOQA ", "codeql"], field_name="x") == ("codeql", "noqa")


def test_path_is_ignored_patterns(tmp_path: Path) -> None:
    patterns = ["vendor/", "*_pb2.py", "src/**/gen/*.py"]

    assert path_is_ignored(tmp_path / "vendor" / "lib.py", project_root=tmp_path, ignore_patterns=patterns)
    assert path_is_ignored(tmp_path / "pkg" / "api_pb2.py", project_root=tmp_path, ignore_patterns=patterns)
    assert path_is_ignored(tmp_path / "src" / "a" / "gen" / "m.py", project_root=tmp_path, ignore_patterns=patterns)
    assert not path_is_ignored(tmp_path / "src" / "app.py", project_root=tmp_path, ignore_patterns=patterns)


def test_path_outside_root_is_not_ignored(tmp_path: Path) -> None:
    root = tmp_path / "root"
    root.mkdir()
    assert not path_is_ignored(tmp_path / "elsewhere.py", project_root=root, ignore_patterns=["*.py"])
