"""Render extracted formulas in parallel and merge them back into the document.

Every task compiles and encodes its formula without holding any lock, then
takes the buffer lock only for the single placeholder substitution. Tasks
never touch each other's placeholders, so the final document does not depend
on completion order; failures are collected as they happen and sorted by
``task_index`` before they are returned.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
import logging
import os
from threading import Lock

from gladest.fonts.sources import StyleConfig

from .buffer import DocumentBuffer
from .cache import EngineCache, FormulaEngine
from .diagnostics import DiagnosticEmitter, ensure_emitter
from .encoder import encode_page
from .exceptions import (
    ConfigurationError,
    FormulaCompileError,
    GladestError,
    PageEncodingError,
    PipelineInvariantError,
)
from .fragments import error_fragment, image_fragment
from .models import (
    ErrorReport,
    FormulaFailure,
    FormulaTask,
    OutputFormat,
    RenderFailure,
    RenderOutcome,
    RenderResult,
    RenderSuccess,
)


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


def default_worker_count() -> int:
    """Return the worker pool size matching the available parallelism."""
    return os.cpu_count() or 1


def describe_error(error: GladestError) -> str:
    """Return the complete diagnostic text for a per-formula failure."""
    if isinstance(error, FormulaCompileError):
        return error.describe()
    return str(error)


def produce_outcome(
    engine: FormulaEngine,
    task: FormulaTask,
    fmt: OutputFormat,
    ppi: float | None = None,
) -> RenderOutcome:
    """Compile and encode a single formula."""
    try:
        page = engine.compile(task.formula_text, task.mode)
    except FormulaCompileError as exc:
        return RenderFailure(exc)
    try:
        data = encode_page(page, fmt, ppi)
    except PageEncodingError as exc:
        return RenderFailure(exc)
    return RenderSuccess(
        image_bytes=data,
        width_em=page.width_em,
        height_em=page.height_em,
        mime_type=fmt.mime_type,
    )


@dataclass(slots=True)
class _Collector:
    """Failure list and counters shared by the workers."""

    failures: list[FormulaFailure] = field(default_factory=list)
    rendered: int = 0
    skipped: int = 0
    lock: Lock = field(default_factory=Lock)

    def record_failure(self, failure: FormulaFailure) -> None:
        with self.lock:
            self.failures.append(failure)

    def record_rendered(self) -> None:
        with self.lock:
            self.rendered += 1

    def record_skipped(self) -> None:
        with self.lock:
            self.skipped += 1


class _RenderRun:
    """State of one :func:`render_all` call."""

    def __init__(
        self,
        buffer: DocumentBuffer,
        engine: FormulaEngine,
        *,
        fmt: OutputFormat,
        ppi: float | None,
        emitter: DiagnosticEmitter,
        progress: ProgressCallback | None,
    ) -> None:
        self.buffer = buffer
        self.engine = engine
        self.fmt = fmt
        self.ppi = ppi
        self.emitter = emitter
        self.progress = progress
        self.collector = _Collector()

    def __call__(self, task: FormulaTask) -> None:
        outcome = produce_outcome(self.engine, task, self.fmt, self.ppi)
        self.merge(task, outcome)
        if self.progress is not None:
            self.progress(1)

    def merge(self, task: FormulaTask, outcome: RenderOutcome) -> None:
        if isinstance(outcome, RenderFailure):
            message = describe_error(outcome.error)
            self.buffer.replace(task.placeholder_id, error_fragment(task.formula_text, message))
            self.collector.record_failure(
                FormulaFailure(
                    task_index=task.task_index,
                    formula=task.formula_text,
                    error=outcome.error,
                )
            )
            self.emitter.error(
                f"Failed to render formula #{task.task_index}: {task.formula_text!r}",
                outcome.error,
            )
            self.emitter.event(
                "formula_failed",
                {"task_index": task.task_index, "message": str(outcome.error)},
            )
            return

        if outcome.is_empty:
            self.buffer.replace(task.placeholder_id, "")
            self.collector.record_skipped()
            self.emitter.warning(
                f"Formula #{task.task_index} {task.formula_text!r} has a zero-size page; "
                "nothing was embedded."
            )
            self.emitter.event("formula_skipped", {"task_index": task.task_index})
            return

        fragment = image_fragment(outcome, task.formula_text, task.mode)
        self.buffer.replace(task.placeholder_id, fragment)
        self.collector.record_rendered()


def _raise_worker_failure(task: FormulaTask, exc: BaseException) -> None:
    if isinstance(exc, PipelineInvariantError):
        raise exc
    raise PipelineInvariantError(
        f"Rendering worker crashed on formula #{task.task_index}: {exc}"
    ) from exc


def render_all(
    buffer: DocumentBuffer | str,
    tasks: Sequence[FormulaTask],
    style_config: StyleConfig,
    *,
    cache: EngineCache,
    fmt: OutputFormat = OutputFormat.PNG,
    ppi: float | None = None,
    jobs: int | None = None,
    emitter: DiagnosticEmitter | None = None,
    progress: ProgressCallback | None = None,
) -> RenderResult:
    """Render ``tasks`` concurrently and return the assembled document.

    Per-formula failures are replaced by an inline error marker and listed in
    the returned :class:`ErrorReport`. A non-positive ``ppi`` is rejected with
    :class:`ConfigurationError` before any work starts; after that only a
    broken pipeline invariant (a poisoned buffer, a crashed worker) raises.
    """
    if ppi is not None and ppi <= 0:
        raise ConfigurationError(f"Pixel density must be positive, got {ppi!r}")
    if isinstance(buffer, str):
        buffer = DocumentBuffer(buffer)
    if not tasks:
        return RenderResult(document=buffer.getvalue())

    emitter = ensure_emitter(emitter)
    engine = cache.get_or_build(style_config)
    run = _RenderRun(buffer, engine, fmt=fmt, ppi=ppi, emitter=emitter, progress=progress)

    workers = max(1, min(jobs or default_worker_count(), len(tasks)))
    logger.debug("Rendering %d formula(s) with %d worker(s)", len(tasks), workers)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="gladest-render") as pool:
        futures: dict[Future[None], FormulaTask] = {pool.submit(run, task): task for task in tasks}
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in pending:
            future.cancel()
        for future in done:
            exc = future.exception()
            if exc is not None:
                _raise_worker_failure(futures[future], exc)

    collector = run.collector
    report = ErrorReport.from_failures(collector.failures)
    result = RenderResult(
        document=buffer.getvalue(),
        errors=report,
        total=len(tasks),
        rendered=collector.rendered,
        skipped=collector.skipped,
    )
    logger.debug(
        "Rendered %d/%d formula(s), %d failed, %d empty",
        result.rendered,
        result.total,
        result.failed,
        result.skipped,
    )
    return result


__all__ = ["ProgressCallback", "default_worker_count", "describe_error", "produce_outcome", "render_all"]
