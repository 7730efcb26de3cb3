"""Custom exception hierarchy for the formula rendering pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .diagnostics import FormulaDiagnostic


class GladestError(RuntimeError):
    """Base exception for formula rendering failures."""


class ConfigurationError(GladestError):
    """Raised when a style configuration is invalid, conflicting, or incomplete."""


class FontParseError(GladestError):
    """Raised when a font container or its naming table cannot be read."""


class FormulaCompileError(GladestError):
    """Raised when the compiler rejects a formula."""

    def __init__(self, diagnostic: FormulaDiagnostic) -> None:
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic

    def describe(self) -> str:
        """Return the full diagnostic, including trace and hints."""
        return self.diagnostic.format()


class PageEncodingError(GladestError):
    """Raised when a compiled page cannot be encoded into image bytes."""


class DocumentIOError(GladestError):
    """Raised when an input document cannot be read or its output written."""


class PipelineInvariantError(GladestError):
    """Raised when shared pipeline state is found in an unusable state."""


class BufferPoisonedError(PipelineInvariantError):
    """Raised when the document buffer is accessed after a failed merge."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "BufferPoisonedError",
    "ConfigurationError",
    "DocumentIOError",
    "FontParseError",
    "FormulaCompileError",
    "GladestError",
    "PageEncodingError",
    "PipelineInvariantError",
    "exception_hint",
    "exception_messages",
]
