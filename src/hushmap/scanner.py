from __future__ import annotations

import logging
import os
import tokenize
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from hushmap.config import HushmapConfig, load_config, path_is_ignored
from hushmap.engine import tree_sitter
from hushmap.engine.index import EMPTY_INDEX, ProgramIndex, merge
from hushmap.engine.python_source import python_code_nodes, python_comments
from hushmap.git import git_root
from hushmap.languages.registry import (
    allowed_extensions,
    detect_language,
    tree_sitter_language_for_path,
)

logger = logging.getLogger(__name__)

DEFAULT_SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".idea",
    ".vscode",
    ".venv",
    "venv",
    "node_modules",
    "dist",
    "build",
    "__pycache__",
}

_BOM = "\ufeff"

HUSHMAP_WORKERS_ENV = "HUSHMAP_WORKERS"
DEFAULT_MAX_WORKERS = 32


@dataclass(frozen=True, slots=True)
class ScanTarget:
    project_root: Path
    scan_path: Path
    config: HushmapConfig


def resolve_worker_count(
    raw_value: str | None,
    *,
    default: int | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> int:
    """
    Resolve a safe worker count from an env var-style string.

    - None/""/"auto" fall back to the default
    - Values <= 0 fall back to the default
    - Values above `max_workers` are clamped
    """

    cpu = os.cpu_count() or 1
    resolved_default = max(1, default if default is not None else (cpu * 2))
    if raw_value is None:
        return min(resolved_default, max_workers)

    normalized = raw_value.strip().lower()
    if not normalized or normalized in {"auto", "default"}:
        return min(resolved_default, max_workers)

    try:
        workers = int(normalized)
    except ValueError:
        return min(resolved_default, max_workers)

    if workers <= 0:
        return min(resolved_default, max_workers)
    return min(workers, max_workers)


def worker_count_from_env(*, default: int | None = None) -> int:
    return resolve_worker_count(os.environ.get(HUSHMAP_WORKERS_ENV), default=default)


def prepare_target(scan_path: Path) -> ScanTarget:
    """
    Resolve the project root and load its configuration.

    The root is the closest directory holding a `pyproject.toml`, else the git
    root, else the scan directory itself.
    """

    scan_path = scan_path.resolve()
    project_root = _detect_project_root(scan_path)
    config = load_config(project_root)
    return ScanTarget(project_root=project_root, scan_path=scan_path, config=config)


def discover_files(target: ScanTarget) -> list[Path]:
    scan_path = target.scan_path
    root = target.project_root
    ignore_patterns = target.config.ignore.paths
    allowed_exts = allowed_extensions(target.config.languages)

    if scan_path.is_file():
        if detect_language(scan_path) is None or scan_path.suffix.lower() not in allowed_exts:
            return []
        if path_is_ignored(scan_path, project_root=root, ignore_patterns=ignore_patterns):
            return []
        return [scan_path]

    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(scan_path, topdown=True):
        dirnames[:] = [d for d in dirnames if d not in DEFAULT_SKIP_DIRS]
        base = Path(dirpath)

        for filename in filenames:
            path = base / filename
            if path.suffix.lower() not in allowed_exts:
                continue
            if detect_language(path) is None:
                continue
            if path_is_ignored(path, project_root=root, ignore_patterns=ignore_patterns):
                continue
            files.append(path)

    return sorted(set(files))


def index_source(path: Path, text: str) -> ProgramIndex:
    """Build the index entries for one file from its source text."""

    text = text.removeprefix(_BOM)
    language = detect_language(path)
    if language is None:
        return EMPTY_INDEX

    if language == "python":
        return ProgramIndex.from_entries([(path, python_comments(path, text), python_code_nodes(path, text))])

    grammar = tree_sitter_language_for_path(path)
    if grammar is None:
        return EMPTY_INDEX
    tree = tree_sitter.parse(grammar, text)
    if tree is None:
        logger.debug("skipping %s: no %s syntax tree available", path, grammar)
        return EMPTY_INDEX
    return ProgramIndex.from_entries(
        [(path, tree_sitter.tree_comments(path, text, tree), tree_sitter.tree_code_nodes(path, tree))]
    )


def index_file(path: Path) -> ProgramIndex:
    try:
        text = _read_source(path)
    except OSError as exc:
        logger.warning("cannot read %s: %s", path, exc)
        return EMPTY_INDEX
    return index_source(path, text)


def _read_source(path: Path) -> str:
    if detect_language(path) == "python":
        # Honours a UTF-8 BOM and PEP 263 coding cookies.
        try:
            with tokenize.open(path) as fh:
                return fh.read()
        except (SyntaxError, UnicodeDecodeError) as exc:
            logger.debug("cannot decode %s with its declared encoding: %s", path, exc)
    return path.read_text(encoding="utf-8-sig", errors="replace")


def build_program_index(
    paths: list[Path],
    *,
    workers: int = 1,
    on_path_done: Callable[[Path], None] | None = None,
) -> ProgramIndex:
    """
    Index `paths`, optionally in parallel, and merge the result.

    The merged index does not depend on `workers`.
    """

    if workers <= 1 or len(paths) <= 1:
        per_file = []
        for path in paths:
            per_file.append(index_file(path))
            if on_path_done is not None:
                on_path_done(path)
        return merge(per_file)

    max_workers = min(max(1, workers), len(paths))
    per_file = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for path, index in zip(paths, executor.map(index_file, paths), strict=True):
            if on_path_done is not None:
                on_path_done(path)
            per_file.append(index)
    return merge(per_file)


def _detect_project_root(start: Path) -> Path:
    # Per-project configuration lives next to the closest pyproject.toml.
    for candidate in [start if start.is_dir() else start.parent, *(start.parents)]:
        if (candidate / "pyproject.toml").exists():
            return candidate

    root = git_root(cwd=start if start.is_dir() else start.parent)
    if root is not None:
        return root

    return start if start.is_dir() else start.parent
