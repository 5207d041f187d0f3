from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import click
import typer
from rich.console import Console

from hushmap import __version__
from hushmap.audit import AuditCallbacks, AuditResult, audit_files
from hushmap.config import ConfigError, normalize_conventions
from hushmap.engine.directives import MATCHERS, matchers_for
from hushmap.engine.directives import classify as classify_text
from hushmap.engine.types import ScanSummary
from hushmap.logging_utils import configure_logging
from hushmap.reporters.json_reporter import ReportError, parse_json_report, render_json
from hushmap.reporters.terminal import render_terminal

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Hushmap: find alert-suppression comments and the source ranges they cover.",
)
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

_FORMATS = ("terminal", "json")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def _main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose logs (printed to stderr)."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Reduce non-essential output."),
    ] = False,
    progress: Annotated[
        bool,
        typer.Option("--progress/--no-progress", help="Show a progress bar while indexing.", show_default=True),
    ] = True,
) -> None:
    """Hushmap CLI."""

    if verbose and quiet:
        raise typer.BadParameter("Choose at most one: --verbose or --quiet.")
    configure_logging(verbose=verbose, quiet=quiet)
    ctx.obj = {"verbose": verbose, "quiet": quiet, "progress": progress}


def _cli_settings() -> dict[str, bool]:
    ctx = click.get_current_context(silent=True)
    if ctx is None or not isinstance(ctx.obj, dict):
        return {"verbose": False, "quiet": False, "progress": True}
    return {
        "verbose": bool(ctx.obj.get("verbose", False)),
        "quiet": bool(ctx.obj.get("quiet", False)),
        "progress": bool(ctx.obj.get("progress", True)),
    }


def _normalize_format(fmt: str) -> str:
    normalized = fmt.strip().lower()
    if normalized not in _FORMATS:
        raise typer.BadParameter(f"Unsupported format. Use: {', '.join(_FORMATS)}.")
    return normalized


def _emit_output(fmt: str, *, summary: ScanSummary, project_root: Path, show_details: bool = True) -> None:
    if fmt == "json":
        typer.echo(render_json(summary, project_root=project_root))
        return
    render_terminal(summary, project_root=project_root, console=console, show_details=show_details)


def _audit_with_optional_progress(
    path: Path,
    *,
    conventions: tuple[str, ...] | None,
    show_progress: bool,
) -> AuditResult:
    from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn

    from hushmap.scanner import discover_files, prepare_target

    target = prepare_target(path)
    if conventions is not None:
        target = replace(target, config=replace(target.config, conventions=conventions))

    files = discover_files(target)
    logger.debug("discovered %d candidate file(s)", len(files))

    if not show_progress:
        return audit_files(target, files=files)

    progress = Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=Console(stderr=True),
        transient=True,
    )
    index_task = progress.add_task("Index", total=len(files))

    def _on_indexed(_path: Path) -> None:
        progress.advance(index_task, 1)

    with progress:
        return audit_files(target, files=files, callbacks=AuditCallbacks(on_file_indexed=_on_indexed))


@app.command()
def scan(
    path: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=True,
            resolve_path=True,
            help="File or directory to scan (default: current directory).",
        ),
    ] = Path("."),
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json.", show_default=True),
    ] = "terminal",
    convention: Annotated[
        list[str] | None,
        typer.Option(
            "--convention",
            help="Suppression convention to recognize (repeatable): codeql, noqa. Default: use config.",
        ),
    ] = None,
) -> None:
    """
    List suppression comments and the ranges they cover.
    """

    settings = _cli_settings()
    fmt = _normalize_format(output_format)

    conventions: tuple[str, ...] | None = None
    if convention:
        try:
            conventions = normalize_conventions(convention, field_name="--convention")
        except ConfigError as exc:
            raise typer.BadParameter(str(exc)) from exc

    try:
        result = _audit_with_optional_progress(
            path,
            conventions=conventions,
            show_progress=settings["progress"] and not settings["quiet"] and fmt == "terminal",
        )
    except ConfigError as exc:
        err_console.print(f"Invalid configuration: {exc}")
        raise typer.Exit(code=2) from exc

    _emit_output(
        fmt,
        summary=result.summary,
        project_root=result.target.project_root,
        show_details=not settings["quiet"],
    )


@app.command()
def classify(
    texts: Annotated[
        list[str],
        typer.Argument(help="Comment texts, without the comment delimiter (e.g. ' codeql[py/foo]')."),
    ],
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json.", show_default=True),
    ] = "terminal",
    convention: Annotated[
        list[str] | None,
        typer.Option("--convention", help="Suppression convention to recognize (repeatable): codeql, noqa."),
    ] = None,
) -> None:
    """
    Classify raw comment texts as suppression directives.
    """

    fmt = _normalize_format(output_format)
    try:
        names = normalize_conventions(convention, field_name="--convention") if convention else None
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc
    matchers = matchers_for(names) if names is not None else MATCHERS

    rows = []
    for text in texts:
        directive = classify_text(text, matchers=matchers)
        rows.append(
            {
                "text": text,
                "annotation": directive.annotation if directive is not None else None,
                "kind": directive.kind if directive is not None else None,
            }
        )

    if fmt == "json":
        typer.echo(json.dumps(rows, indent=2))
        return

    from rich.table import Table
    from rich.text import Text

    table = Table(title="Directives", show_lines=False)
    table.add_column("Text", style="dim")
    table.add_column("Annotation", style="bold")
    table.add_column("Kind")
    for row in rows:
        table.add_row(
            Text(repr(row["text"])),
            Text(row["annotation"] or "not a suppression"),
            Text(row["kind"] or ""),
        )
    console.print(table)


@app.command()
def report(
    input_json: Annotated[
        str,
        typer.Argument(help="Input JSON report path, or '-' to read from stdin."),
    ],
    project_root: Annotated[
        Path,
        typer.Option(
            "--project-root",
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
            help="Project root used to resolve relative paths in the JSON report (default: current directory).",
        ),
    ] = Path("."),
) -> None:
    """
    Render a previously saved JSON report in the terminal.
    """

    try:
        if input_json.strip() == "-":
            raw = sys.stdin.read()
        else:
            raw = Path(input_json).read_text(encoding="utf-8", errors="replace")
        summary = parse_json_report(raw, project_root=project_root)
    except (OSError, ReportError) as exc:
        err_console.print(f"Invalid JSON report: {exc}")
        raise typer.Exit(code=2) from exc

    settings = _cli_settings()
    render_terminal(summary, project_root=project_root, console=console, show_details=not settings["quiet"])
