from __future__ import annotations

import fnmatch
import tomllib
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hushmap.languages.registry import LANGUAGE_NAMES


class ConfigError(ValueError):
    """Raised when a Hushmap configuration table is invalid."""


DEFAULT_LANGUAGES: tuple[str, ...] = LANGUAGE_NAMES
# Listed in precedence order; see `hushmap.engine.directives.MATCHERS`.
DEFAULT_CONVENTIONS: tuple[str, ...] = ("codeql", "noqa")


@dataclass(frozen=True, slots=True)
class IgnoreConfig:
    paths: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class HushmapConfig:
    languages: tuple[str, ...] = DEFAULT_LANGUAGES
    conventions: tuple[str, ...] = DEFAULT_CONVENTIONS
    ignore: IgnoreConfig = field(default_factory=IgnoreConfig)


def load_config(project_dir: Path | str = ".") -> HushmapConfig:
    """
    Load Hushmap configuration from `pyproject.toml` within `project_dir`.

    If no file / no `[tool.hushmap]` table exists, returns defaults.
    """

    pyproject_path = Path(project_dir) / "pyproject.toml"
    if not pyproject_path.exists():
        return HushmapConfig()

    try:
        data = tomllib.loads(pyproject_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {pyproject_path}: {exc}") from exc

    tool_table = data.get("tool", {})
    if not isinstance(tool_table, dict):
        return HushmapConfig()

    hushmap_table = tool_table.get("hushmap", {})
    if not isinstance(hushmap_table, dict) or not hushmap_table:
        return HushmapConfig()

    return parse_hushmap_table(hushmap_table)


def parse_hushmap_table(table: dict[str, Any]) -> HushmapConfig:
    languages = _validate_str_list(table.get("languages", list(DEFAULT_LANGUAGES)), field_name="tool.hushmap.languages")
    normalized_languages = tuple(lang.lower() for lang in languages if lang)
    unknown_languages = sorted(set(normalized_languages) - set(LANGUAGE_NAMES))
    if unknown_languages:
        raise ConfigError(
            f"`tool.hushmap.languages` has unsupported language(s): {', '.join(unknown_languages)}. "
            f"Use: {', '.join(LANGUAGE_NAMES)}."
        )

    conventions = _parse_conventions(table.get("conventions", list(DEFAULT_CONVENTIONS)))
    ignore = _parse_ignore_config(table.get("ignore", {}))

    return HushmapConfig(languages=normalized_languages, conventions=conventions, ignore=ignore)


def normalize_conventions(values: Iterable[str], *, field_name: str) -> tuple[str, ...]:
    """Validate convention names and return them in precedence order."""

    wanted = {v.strip().lower() for v in values if v.strip()}
    unknown = sorted(wanted - set(DEFAULT_CONVENTIONS))
    if unknown:
        raise ConfigError(f"`{field_name}` has unknown convention(s): {', '.join(unknown)}. Use: codeql, noqa.")
    if not wanted:
        raise ConfigError(f"`{field_name}` must enable at least one convention.")
    return tuple(name for name in DEFAULT_CONVENTIONS if name in wanted)


def _parse_conventions(value: Any) -> tuple[str, ...]:
    raw = _validate_str_list(value, field_name="tool.hushmap.conventions")
    return normalize_conventions(raw, field_name="tool.hushmap.conventions")


def _parse_ignore_config(value: Any) -> IgnoreConfig:
    if value is None:
        return IgnoreConfig()
    if not isinstance(value, dict):
        raise ConfigError("`tool.hushmap.ignore` must be a table.")
    paths = _validate_str_list(value.get("paths", []), field_name="tool.hushmap.ignore.paths")
    return IgnoreConfig(paths=paths)


def _validate_str_list(value: Any, *, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or any(not isinstance(v, str) for v in value):
        raise ConfigError(f"`{field_name}` must be a list of strings.")
    return tuple(v.strip() for v in value)


def path_is_ignored(path: Path, *, project_root: Path, ignore_patterns: Iterable[str]) -> bool:
    """
    Return True if `path` matches any ignore patterns.

    Patterns are evaluated against the POSIX-style relative path from `project_root`.

    Supported patterns:
    - Directory prefixes: "vendor/" matches "vendor/..." at the root.
    - Globs without slashes: "*_pb2.py" matches basenames.
    - Globs with slashes: "src/**/generated/*.py" matches full relative paths.
    """

    try:
        relative = path.resolve().relative_to(project_root.resolve())
    except (ValueError, OSError, RuntimeError):
        # Paths outside the root are never ignored implicitly.
        return False

    rel_posix = relative.as_posix()
    basename = relative.name

    for raw_pattern in ignore_patterns:
        pattern = raw_pattern.strip().replace("\\", "/")
        if not pattern:
            continue
        if pattern.startswith("./"):
            pattern = pattern[2:]

        if pattern.endswith("/"):
            if rel_posix.startswith(pattern):
                return True
            continue

        if "/" in pattern:
            if fnmatch.fnmatch(rel_posix, pattern):
                return True
        elif fnmatch.fnmatch(basename, pattern) or fnmatch.fnmatch(rel_posix, pattern):
            return True

    return False
