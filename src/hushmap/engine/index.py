from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from hushmap.engine.types import CodeNode, Comment


@dataclass(frozen=True, slots=True)
class ProgramIndex:
    """
    Read-only view of the comments and code-structure lines of a set of files.

    The index is built once per run by a front end (see `hushmap.scanner`) and
    is never mutated afterwards, so it can be shared freely across threads.
    Only the start line of each code node is retained: that is all the scope
    resolver needs to decide whether a comment shares its line with code.
    """

    comments: Mapping[Path, tuple[Comment, ...]] = field(default_factory=lambda: MappingProxyType({}))
    code_lines: Mapping[Path, frozenset[int]] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[tuple[Path, Iterable[Comment], Iterable[CodeNode]]],
    ) -> ProgramIndex:
        comments: dict[Path, list[Comment]] = {}
        code_lines: dict[Path, set[int]] = {}
        for path, file_comments, nodes in entries:
            comments.setdefault(path, []).extend(file_comments)
            lines = code_lines.setdefault(path, set())
            for node in nodes:
                lines.add(node.location.start_line)

        return cls(
            comments=MappingProxyType({path: tuple(items) for path, items in comments.items()}),
            code_lines=MappingProxyType({path: frozenset(lines) for path, lines in code_lines.items()}),
        )

    def files(self) -> tuple[Path, ...]:
        return tuple(sorted(set(self.comments) | set(self.code_lines)))

    def comments_of(self, path: Path) -> tuple[Comment, ...]:
        return self.comments.get(path, ())

    def lines_with_code(self, path: Path) -> frozenset[int]:
        return self.code_lines.get(path, frozenset())

    def has_code_on(self, path: Path, line: int) -> bool:
        return line in self.lines_with_code(path)

    def comment_count(self) -> int:
        return sum(len(items) for items in self.comments.values())


EMPTY_INDEX = ProgramIndex()


def merge(indexes: Iterable[ProgramIndex]) -> ProgramIndex:
    """Combine per-file indexes; entries for the same path are unioned."""

    comments: dict[Path, list[Comment]] = {}
    code_lines: dict[Path, set[int]] = {}
    for index in indexes:
        for path, items in index.comments.items():
            comments.setdefault(path, []).extend(items)
        for path, lines in index.code_lines.items():
            code_lines.setdefault(path, set()).update(lines)

    return ProgramIndex(
        comments=MappingProxyType({path: tuple(items) for path, items in comments.items()}),
        code_lines=MappingProxyType({path: frozenset(lines) for path, lines in code_lines.items()}),
    )
