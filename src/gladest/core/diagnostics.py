"""Diagnostic abstractions shared across the rendering pipeline."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any, Protocol, Union, runtime_checkable


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Interface used to surface warnings, errors, and structured events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter that ignores every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class LoggingEmitter:
    """Emitter that forwards diagnostics to the standard logging module."""

    def __init__(
        self, *, logger_obj: logging.Logger | None = None, debug_enabled: bool = False
    ) -> None:
        self._logger = logger_obj or logger
        self.debug_enabled = debug_enabled

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.warning(message, exc_info=exc)
        else:
            self._logger.warning(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.error(message, exc_info=exc)
        else:
            self._logger.error(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if message:
            self._logger.info(message)
            return
        self._logger.debug("diagnostic event %s: %s", name, dict(payload))


def ensure_emitter(emitter: DiagnosticEmitter | None) -> DiagnosticEmitter:
    """Return a usable emitter, defaulting to the null implementation."""
    return emitter if emitter is not None else NullEmitter()


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a human-friendly summary for selected diagnostic events."""
    data = dict(payload)

    if name == "engine_built":
        body = data.get("body_font") or "<default>"
        math = data.get("math_font") or "<default>"
        return f"Built formula engine (body: {body}, math: {math})"

    if name == "formula_skipped":
        index = data.get("task_index", "?")
        return f"Formula #{index} rendered to an empty image; left blank"

    if name == "formula_failed":
        index = data.get("task_index", "?")
        message = data.get("message") or "unknown error"
        return f"Formula #{index} failed: {message}"

    if name == "document_written":
        target = data.get("output") or "<unknown>"
        return f"Wrote {target}"

    return None


# --------------------------------------------------------------------------- formula diagnostics


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Location of a diagnostic inside the compiled source."""

    file: str | None = None
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        parts = [self.file or "<formula>"]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)


@dataclass(frozen=True, slots=True)
class TraceEntry:
    """One contributing step of a compiler trace."""

    message: str
    span: SourceSpan | None = None

    def format(self) -> str:
        if self.span is None:
            return self.message
        return f"{self.message} ({self.span})"


@dataclass(frozen=True, slots=True)
class SourceDiagnostic:
    """Diagnostic raised by the compiler against the formula source."""

    message: str
    span: SourceSpan | None = None
    trace: Sequence[TraceEntry] = field(default_factory=tuple)
    hints: Sequence[str] = field(default_factory=tuple)

    def format(self) -> str:
        lines = [f"error: {self.message}"]
        if self.span is not None:
            lines.append(f"  at {self.span}")
        lines.extend(f"  trace: {entry.format()}" for entry in self.trace)
        lines.extend(f"  hint: {hint}" for hint in self.hints)
        return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class FileDiagnostic:
    """A file needed by the compiler could not be read."""

    path: Path
    message: str

    def format(self) -> str:
        return f"error: failed to read {self.path}: {self.message}"


@dataclass(frozen=True, slots=True)
class MissingFileDiagnostic:
    """A file needed by the compiler does not exist."""

    path: Path

    @property
    def message(self) -> str:
        return f"file not found: {self.path}"

    def format(self) -> str:
        return f"error: {self.message}"


@dataclass(frozen=True, slots=True)
class HintedDiagnostic:
    """Plain message accompanied by remediation hints."""

    message: str
    hints: Sequence[str] = field(default_factory=tuple)

    def format(self) -> str:
        lines = [f"error: {self.message}"]
        lines.extend(f"  hint: {hint}" for hint in self.hints)
        return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class UnspecifiedDiagnostic:
    """Failure without any structured information."""

    message: str

    def format(self) -> str:
        return f"error: {self.message}"


FormulaDiagnostic = Union[
    SourceDiagnostic,
    FileDiagnostic,
    MissingFileDiagnostic,
    HintedDiagnostic,
    UnspecifiedDiagnostic,
]


__all__ = [
    "DiagnosticEmitter",
    "FileDiagnostic",
    "FormulaDiagnostic",
    "HintedDiagnostic",
    "LoggingEmitter",
    "MissingFileDiagnostic",
    "NullEmitter",
    "SourceDiagnostic",
    "SourceSpan",
    "TraceEntry",
    "UnspecifiedDiagnostic",
    "ensure_emitter",
    "format_event_message",
]
