"""Rendering entry points for embedding the pipeline.

Architecture
: `render_document` scans an HTML string for formula elements and hands the
  resulting tasks to the parallel coordinator, returning the rewritten
  document together with the per-formula error report.
: `render_formula` renders a single formula straight to an HTML fragment. It
  is the building block for front-ends that already know where formulas are,
  such as Markdown plugins.
: `render_markdown` converts Markdown to HTML with the math extension and then
  behaves like `render_document`.

Engines are memoised in a process-wide :class:`EngineCache` unless the
caller passes its own.

Usage Example
:
    >>> from gladest.api.pipeline import render_document
    >>> render_document("<p>No math here.</p>").document
    '<p>No math here.</p>'
"""

from __future__ import annotations

from threading import Lock
from typing import Protocol

from gladest.adapters.markdown import markdown_to_html
from gladest.core.buffer import DocumentBuffer
from gladest.core.cache import EngineCache
from gladest.core.config import RenderSettings
from gladest.core.coordinator import describe_error, produce_outcome, render_all
from gladest.core.diagnostics import DiagnosticEmitter, ensure_emitter
from gladest.core.fragments import error_fragment, image_fragment
from gladest.core.models import FormulaMode, FormulaTask, RenderFailure, RenderResult
from gladest.core.scanner import scan


__all__ = [
    "ProgressReporter",
    "render_document",
    "render_formula",
    "render_markdown",
    "shared_cache",
]


class ProgressReporter(Protocol):
    """Receives the formula count of a document, then one tick per formula."""

    def start(self, total: int) -> None: ...

    def advance(self, count: int = 1) -> None: ...


_SHARED_CACHE: EngineCache | None = None
_SHARED_CACHE_LOCK = Lock()


def shared_cache() -> EngineCache:
    """Return the process-wide engine cache."""
    global _SHARED_CACHE
    with _SHARED_CACHE_LOCK:
        if _SHARED_CACHE is None:
            _SHARED_CACHE = EngineCache()
        return _SHARED_CACHE


def render_document(
    html: str,
    settings: RenderSettings | None = None,
    *,
    cache: EngineCache | None = None,
    emitter: DiagnosticEmitter | None = None,
    progress: ProgressReporter | None = None,
    jobs: int | None = None,
) -> RenderResult:
    """Replace every formula element of ``html`` with its rendered image."""
    settings = settings or RenderSettings()
    emitter = ensure_emitter(emitter)
    style = settings.style_config()

    scanned = scan(html, tag=settings.tag, mode_attribute=settings.mode_attribute, emitter=emitter)
    if progress is not None:
        progress.start(len(scanned.tasks))

    return render_all(
        DocumentBuffer(scanned.document),
        scanned.tasks,
        style,
        cache=cache if cache is not None else shared_cache(),
        fmt=settings.format,
        ppi=settings.ppi,
        jobs=jobs or settings.jobs,
        emitter=emitter,
        progress=progress.advance if progress is not None else None,
    )


def render_formula(
    formula: str,
    *,
    display: bool = False,
    settings: RenderSettings | None = None,
    cache: EngineCache | None = None,
) -> str:
    """Return the HTML fragment for one formula.

    Compile failures produce the inline error marker instead of raising.
    """
    settings = settings or RenderSettings()
    cache = cache if cache is not None else shared_cache()
    engine = cache.get_or_build(settings.style_config())
    mode = FormulaMode.DISPLAY if display else FormulaMode.INLINE
    task = FormulaTask(placeholder_id="", formula_text=formula, mode=mode, task_index=0)

    outcome = produce_outcome(engine, task, settings.format, settings.ppi)
    if isinstance(outcome, RenderFailure):
        return error_fragment(formula, describe_error(outcome.error))
    if outcome.is_empty:
        return ""
    return image_fragment(outcome, formula, mode)


def render_markdown(
    source: str,
    settings: RenderSettings | None = None,
    *,
    cache: EngineCache | None = None,
    emitter: DiagnosticEmitter | None = None,
    progress: ProgressReporter | None = None,
    jobs: int | None = None,
) -> RenderResult:
    """Convert Markdown to HTML and render its ``$…$`` / ``$$…$$`` formulas."""
    settings = settings or RenderSettings()
    html = markdown_to_html(source, tag=settings.tag, mode_attribute=settings.mode_attribute)
    return render_document(
        html,
        settings,
        cache=cache,
        emitter=emitter,
        progress=progress,
        jobs=jobs,
    )
