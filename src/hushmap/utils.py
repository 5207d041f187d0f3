from __future__ import annotations

from pathlib import Path

_LINE_COMMENT_PREFIXES = ("//", "#")
_BLOCK_COMMENT_START = "/*"
_BLOCK_COMMENT_END = "*/"


def safe_relpath(path: Path, root: Path) -> str:
    """
    Return a POSIX-style path for report output, relative to `root` if possible.

    Falls back to `path.as_posix()` for paths outside the root or paths that
    cannot be resolved.
    """

    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except (ValueError, OSError):
        return path.as_posix()


def strip_comment_delimiters(raw: str) -> str:
    """
    Remove the comment delimiters from raw comment source text.

    `// x` and `# x` lose their prefix; `/* x */` loses both ends. Whitespace
    after the delimiter is kept, as in the comment text a host parser reports.
    """

    if raw.startswith(_BLOCK_COMMENT_START):
        body = raw[len(_BLOCK_COMMENT_START) :]
        if body.endswith(_BLOCK_COMMENT_END):
            body = body[: -len(_BLOCK_COMMENT_END)]
        return body
    for prefix in _LINE_COMMENT_PREFIXES:
        if raw.startswith(prefix):
            return raw[len(prefix) :]
    return raw
