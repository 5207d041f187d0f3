from __future__ import annotations

import subprocess
from pathlib import Path


class GitError(RuntimeError):
    """Raised when git is unavailable or a git command fails."""


def git_output(args: list[str], *, cwd: Path) -> str:
    """Run `git <args>` in `cwd` and return its stdout."""

    try:
        return subprocess.check_output(
            ["git", *args],
            cwd=str(cwd),
            stderr=subprocess.DEVNULL,
            text=True,
        )
    except subprocess.CalledProcessError as exc:
        raise GitError(f"git command failed: {' '.join(args)}") from exc
    except FileNotFoundError as exc:
        raise GitError("git is unavailable") from exc


def git_root(*, cwd: Path) -> Path | None:
    """
    Return the repository root for `cwd`, or None when unavailable.

    Missing git is not an error here: callers fall back to another root.
    """

    try:
        out = git_output(["rev-parse", "--show-toplevel"], cwd=cwd).strip()
    except (GitError, NotADirectoryError, PermissionError):
        return None
    if not out:
        return None
    return Path(out)
