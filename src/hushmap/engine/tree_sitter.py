from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol, cast

from hushmap.engine.types import CodeNode, Comment, Location, comment_id
from hushmap.utils import strip_comment_delimiters


class SyntaxTree(Protocol):
    # tree-sitter Tree exposes `root_node`; we treat nodes structurally.
    root_node: Any


class _ParserLike(Protocol):
    def set_language(self, language: object) -> None: ...

    def parse(self, source: bytes) -> object: ...

_parser_cls: type[_ParserLike] | None
_get_language_func: Callable[[str], object] | None

try:  # pragma: no cover
    from tree_sitter import Parser as _TreeSitterParser
    from tree_sitter_languages import get_language as _tree_sitter_get_language
except (ImportError, OSError):  # pragma: no cover
    _parser_cls = None
    _get_language_func = None
else:  # pragma: no cover (depends on installed grammars)
    _parser_cls = cast(type[_ParserLike], _TreeSitterParser)
    _get_language_func = cast(Callable[[str], object], _tree_sitter_get_language)

_TREE_SITTER_AVAILABLE = _parser_cls is not None and _get_language_func is not None

# Module attributes so tests can swap in doubles.
Parser: type[_ParserLike] | None = _parser_cls
get_language: Callable[[str], object] | None = _get_language_func

_MISSING_DEPS_MESSAGE = (
    "tree-sitter dependencies are not installed. Install `hushmap[treesitter]` (or add "
    "`tree-sitter` + `tree-sitter-languages`) to index non-Python sources."
)


class TreeSitterError(RuntimeError):
    """Raised when tree-sitter cannot load a language or parse source."""


@lru_cache(maxsize=32)
def _get_language(language: str) -> object:
    if not _TREE_SITTER_AVAILABLE:  # pragma: no cover
        raise TreeSitterError(_MISSING_DEPS_MESSAGE)
    try:
        assert get_language is not None
        return get_language(language)
    except (AttributeError, KeyError, ValueError, RuntimeError) as exc:  # pragma: no cover (depends on installed grammars)
        raise TreeSitterError(f"tree-sitter language not available: {language!r}") from exc


_PARSER_LOCAL = threading.local()


def _get_parser(language: str) -> _ParserLike:
    """
    Return a per-thread Parser instance for the requested language.

    tree-sitter Parser objects are not thread-safe and the index is built on a
    thread pool.
    """

    if not _TREE_SITTER_AVAILABLE:  # pragma: no cover
        raise TreeSitterError(_MISSING_DEPS_MESSAGE)

    parsers: dict[str, _ParserLike] | None = getattr(_PARSER_LOCAL, "parsers", None)
    if parsers is None:
        parsers = {}
        _PARSER_LOCAL.parsers = parsers

    parser = parsers.get(language)
    if parser is not None:
        return parser

    lang = _get_language(language)
    assert Parser is not None
    parser = Parser()
    parser.set_language(lang)
    parsers[language] = parser
    return parser


def parse(language: str, source: str) -> SyntaxTree | None:
    """
    Parse source code with tree-sitter.

    Returns a Tree or None if tree-sitter is unavailable or parsing fails.
    """

    if not _TREE_SITTER_AVAILABLE:
        return None
    try:
        parser = _get_parser(language)
        tree = parser.parse(source.encode("utf-8", errors="replace"))
        return cast(SyntaxTree, tree)
    except (TreeSitterError, ValueError, TypeError, RuntimeError):
        return None


def is_available() -> bool:
    return _TREE_SITTER_AVAILABLE


def is_comment_node(node: Any) -> bool:
    return "comment" in str(getattr(node, "type", ""))


def iter_nodes(node: Any) -> Iterator[Any]:
    """Pre-order walk that does not descend into comment nodes."""

    stack = [node]
    while stack:
        n = stack.pop()
        yield n
        if is_comment_node(n):
            continue
        stack.extend(reversed(getattr(n, "children", [])))


def tree_comments(path: Path, source: str, tree: SyntaxTree) -> list[Comment]:
    # tree-sitter points and byte ranges are byte offsets into the UTF-8 source.
    data = source.encode("utf-8", errors="replace")
    out: list[Comment] = []
    for node in iter_nodes(tree.root_node):
        if not is_comment_node(node):
            continue
        (start_row, start_col0), (end_row, end_col0) = node.start_point, node.end_point
        raw = data[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
        out.append(
            Comment(
                id=comment_id(path, start_row + 1, start_col0 + 1),
                text=strip_comment_delimiters(raw),
                location=Location(
                    path=path,
                    start_line=start_row + 1,
                    start_col=start_col0 + 1,
                    end_line=end_row + 1,
                    end_col=end_col0,
                ),
            )
        )
    return out


def tree_code_nodes(path: Path, tree: SyntaxTree) -> list[CodeNode]:
    """Every named, non-comment node below the root counts as code."""

    root = tree.root_node
    nodes: list[CodeNode] = []
    for node in iter_nodes(root):
        if node is root or is_comment_node(node) or not getattr(node, "is_named", True):
            continue
        (start_row, start_col0), (end_row, end_col0) = node.start_point, node.end_point
        nodes.append(
            CodeNode(
                kind=str(node.type),
                location=Location(
                    path=path,
                    start_line=start_row + 1,
                    start_col=start_col0 + 1,
                    end_line=end_row + 1,
                    end_col=end_col0,
                ),
            )
        )
    return nodes
