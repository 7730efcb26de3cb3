"""Rich progress bars tracking formula rendering per document."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from gladest.api.service import ProgressFactory

from .state import CLIState


if TYPE_CHECKING:  # pragma: no cover - typing only
    from rich.progress import Progress, TaskID


class DocumentProgress:
    """One progress bar row, created once the formula count is known."""

    def __init__(self, progress: Progress, label: str) -> None:
        self._progress = progress
        self._label = label
        self._task_id: TaskID | None = None

    def start(self, total: int) -> None:
        self._task_id = self._progress.add_task(self._label, total=total)

    def advance(self, count: int = 1) -> None:
        if self._task_id is not None:
            self._progress.update(self._task_id, advance=count)


@contextmanager
def batch_progress(state: CLIState) -> Iterator[ProgressFactory]:
    """Yield a factory returning a progress reporter for each document."""
    from rich.progress import (
        BarColumn,
        Progress,
        SpinnerColumn,
        TextColumn,
        TimeElapsedColumn,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[bold cyan]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=state.err_console,
        transient=state.verbosity < 1,
    ) as progress:

        def _factory(source: Path) -> DocumentProgress:
            return DocumentProgress(progress, source.name)

        yield _factory


__all__ = ["DocumentProgress", "batch_progress"]
