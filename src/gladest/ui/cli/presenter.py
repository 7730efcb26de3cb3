"""Rich-aware presenters for CLI output and diagnostics."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import typer

from gladest.api.service import BatchResult, DocumentOutcome
from gladest.core.report import format_report, summarize

from .state import CLIState


if TYPE_CHECKING:  # pragma: no cover - typing only
    from rich.console import Console


def _get_console(state: CLIState, *, stderr: bool = False) -> Console | None:
    """Return the active Rich console when it writes to a terminal."""
    console = state.err_console if stderr else state.console
    if console.is_terminal:
        return console
    return None


def _format_path(path: Path) -> str:
    """Format a path relative to the current working directory for display."""
    resolved = path.resolve()
    try:
        return str(resolved.relative_to(Path.cwd()))
    except ValueError:
        return str(resolved)


def _status(outcome: DocumentOutcome) -> tuple[str, str]:
    if not outcome.ok:
        return "io error", "red"
    if outcome.result is not None and outcome.result.errors:
        return "partial", "yellow"
    return "ok", "green"


def present_batch_summary(state: CLIState, batch: BatchResult) -> None:
    """Render one row per document with its formula counts."""
    if not batch.documents:
        return

    console = _get_console(state)
    if console is not None:
        from rich import box
        from rich.table import Table
        from rich.text import Text

        table = Table(title="Rendered Documents", box=box.SQUARE, header_style="bold cyan")
        for column in ("Document", "Output", "Formulas", "Failed", "Status"):
            table.add_column(column)
        for outcome in batch.documents:
            label, style = _status(outcome)
            result = outcome.result
            table.add_row(
                _format_path(outcome.source),
                _format_path(outcome.output) if outcome.output else "-",
                str(result.total) if result else "-",
                str(result.failed) if result else "-",
                Text(label, style=style),
            )
        console.print(table)
        return

    for outcome in batch.documents:
        label, _style = _status(outcome)
        target = _format_path(outcome.output) if outcome.output else "-"
        counts = summarize(outcome.result) if outcome.result is not None else str(outcome.error)
        typer.echo(f"{_format_path(outcome.source)} -> {target} [{label}] {counts}")


def present_formula_failures(state: CLIState, batch: BatchResult) -> None:
    """List failed formulas per document, ordered by position in the document."""
    verbose = state.verbosity >= 1
    for outcome in batch.documents:
        result = outcome.result
        if result is None or not result.errors:
            continue
        typer.echo(f"{_format_path(outcome.source)}: {summarize(result)}", err=True)
        typer.echo(format_report(result.errors, verbose=verbose), err=True)


__all__ = ["present_batch_summary", "present_formula_failures"]
