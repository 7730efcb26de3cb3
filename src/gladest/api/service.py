"""Batch rendering of documents on disk for the CLI and embedding integrations."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
import glob
import logging
from pathlib import Path

from gladest.core.cache import EngineCache
from gladest.core.config import RenderSettings
from gladest.core.diagnostics import DiagnosticEmitter, ensure_emitter
from gladest.core.exceptions import DocumentIOError
from gladest.core.models import RenderResult
from gladest.fonts.sources import expand_home

from .pipeline import ProgressReporter, render_document, render_markdown, shared_cache


__all__ = [
    "HTML_SUFFIXES",
    "MARKDOWN_SUFFIXES",
    "ProgressFactory",
    "BatchRequest",
    "BatchResult",
    "BatchService",
    "DocumentOutcome",
    "expand_inputs",
    "output_path_for",
]


logger = logging.getLogger(__name__)

HTML_SUFFIXES = frozenset({".html", ".htm", ".xhtml"})
MARKDOWN_SUFFIXES = frozenset({".md", ".markdown"})

ProgressFactory = Callable[[Path], ProgressReporter]


def expand_inputs(patterns: Iterable[str | Path]) -> list[Path]:
    """Resolve paths and glob patterns into a sorted, de-duplicated file list.

    Patterns that match nothing contribute nothing; plain paths are kept even
    when they do not exist so that the failure is reported for that document.
    """
    found: set[Path] = set()
    for pattern in patterns:
        text = str(expand_home(pattern))
        if glob.has_magic(text):
            for match in glob.glob(text, recursive=True):
                candidate = Path(match)
                if candidate.is_file():
                    found.add(candidate)
        else:
            found.add(Path(text))
    return sorted(found)


def output_path_for(source: Path, output_dir: Path | None = None, extension: str = ".html") -> Path:
    """Return where the rendered version of ``source`` is written.

    HTML inputs keep their file name and are rewritten in place unless an
    output directory is given. Other inputs get ``extension`` appended in
    place of their own suffix.
    """
    directory = output_dir if output_dir is not None else source.parent
    if source.suffix.lower() in HTML_SUFFIXES:
        return directory / source.name
    if not extension.startswith("."):
        extension = f".{extension}"
    return directory / f"{source.stem}{extension}"


@dataclass(slots=True)
class BatchRequest:
    """Documents to render and the settings shared by all of them."""

    inputs: Sequence[Path]
    settings: RenderSettings = field(default_factory=RenderSettings)
    output_dir: Path | None = None


@dataclass(slots=True)
class DocumentOutcome:
    """What happened to one input document."""

    source: Path
    output: Path | None = None
    result: RenderResult | None = None
    error: DocumentIOError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class BatchResult:
    documents: list[DocumentOutcome] = field(default_factory=list)

    @property
    def failed_documents(self) -> list[DocumentOutcome]:
        return [outcome for outcome in self.documents if not outcome.ok]

    @property
    def formula_failures(self) -> int:
        return sum(outcome.result.failed for outcome in self.documents if outcome.result is not None)

    @property
    def ok(self) -> bool:
        return not self.failed_documents


class BatchService:
    """Render a batch of documents, isolating I/O failures per document."""

    def __init__(
        self,
        *,
        cache: EngineCache | None = None,
        emitter: DiagnosticEmitter | None = None,
        progress_factory: ProgressFactory | None = None,
    ) -> None:
        self.cache = cache if cache is not None else shared_cache()
        self.emitter = ensure_emitter(emitter)
        self.progress_factory = progress_factory

    def run(self, request: BatchRequest) -> BatchResult:
        """Render every input of ``request`` in order.

        Configuration problems surface before any document is read. A
        document that cannot be read or written is recorded and the batch
        moves on to the next one.
        """
        request.settings.style_config()
        result = BatchResult()
        for source in request.inputs:
            outcome = DocumentOutcome(source=source)
            try:
                self._render_one(source, request, outcome)
            except DocumentIOError as exc:
                outcome.error = exc
                self.emitter.error(str(exc), exc)
            result.documents.append(outcome)
        return result

    def _render_one(self, source: Path, request: BatchRequest, outcome: DocumentOutcome) -> None:
        try:
            with source.open(encoding="utf-8", newline="") as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentIOError(f"Failed to read '{source}': {exc}") from exc

        settings = request.settings
        progress = self.progress_factory(source) if self.progress_factory is not None else None
        render = render_markdown if source.suffix.lower() in MARKDOWN_SUFFIXES else render_document
        rendered = render(text, settings, cache=self.cache, emitter=self.emitter, progress=progress)
        outcome.result = rendered

        target = output_path_for(source, request.output_dir, settings.extension)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(rendered.document, encoding="utf-8", newline="")
        except OSError as exc:
            raise DocumentIOError(f"Failed to write '{target}': {exc}") from exc

        outcome.output = target
        logger.debug("Rendered %s -> %s", source, target)
        self.emitter.event("document_written", {"source": str(source), "output": str(target)})
