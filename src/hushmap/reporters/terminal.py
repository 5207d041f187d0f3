from __future__ import annotations

from collections import defaultdict
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from hushmap import __version__
from hushmap.engine.types import NOQA_DIRECTIVE, ScanSummary, SuppressionRecord
from hushmap.utils import safe_relpath

_KIND_STYLE = {NOQA_DIRECTIVE: "yellow"}


def render_terminal(summary: ScanSummary, *, project_root: Path, console: Console, show_details: bool = True) -> None:
    header = Text()
    header.append("Hushmap ", style="bold")
    header.append(f"v{__version__}", style="dim")
    header.append(" · alert suppressions", style="dim")

    console.print(
        Panel(
            header,
            subtitle=f"Scanned {summary.files_scanned} files",
            border_style="cyan",
        )
    )

    if show_details:
        by_file: dict[str, list[SuppressionRecord]] = defaultdict(list)
        for record in summary.records:
            by_file[safe_relpath(record.scope.path, project_root)].append(record)

        for file_path in sorted(by_file):
            console.print(Text(file_path, style="bold"))
            for record in sorted(by_file[file_path], key=lambda r: (r.scope.start_line, r.comment.location.start_col)):
                _print_record(console, record)
            console.print()

    _print_summary(summary, console=console)


def _print_record(console: Console, record: SuppressionRecord) -> None:
    scope = record.scope
    line = Text()
    line.append("  ● ", style=_KIND_STYLE.get(record.directive_kind, "green"))
    line.append(f"{scope.start_line}:{scope.start_col}-{scope.end_line}:{scope.end_col}", style="dim")
    line.append("  ")
    line.append(record.annotation, style="bold")
    console.print(line)
    console.print(f"     {record.text.strip()}", style="dim", markup=False, highlight=False)


def _print_summary(summary: ScanSummary, *, console: Console) -> None:
    console.print(Text("─" * 60, style="dim"))
    console.print(
        Text(
            f"Suppressions: {len(summary.records)} (comments seen: {summary.comments_seen})",
            style="bold",
        )
    )
    console.print(Text("─" * 60, style="dim"))
