"""Translate between formula requests and the Typst compiler.

This module holds the request/response contract of the compiler adapter:
building ``sys.inputs`` for the template, reading page geometry from the SVG
rendition, and turning compiler exceptions into structured diagnostics.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
import re
import xml.etree.ElementTree as ElementTree

from gladest.core.diagnostics import (
    FileDiagnostic,
    FormulaDiagnostic,
    HintedDiagnostic,
    MissingFileDiagnostic,
    SourceDiagnostic,
    SourceSpan,
    TraceEntry,
    UnspecifiedDiagnostic,
)
from gladest.core.exceptions import FormulaCompileError
from gladest.core.models import FormulaMode


_SPAN_PATTERN = re.compile(r"┌─\s*(?P<file>[^\s:]+):(?P<line>\d+):(?P<column>\d+)")
_HINT_PATTERN = re.compile(r"^\s*=\s*hint:\s*(?P<hint>.+)$", re.MULTILINE)
_ERROR_LINE_PATTERN = re.compile(r"^\s*error:\s*(?P<message>.+)$", re.MULTILINE)
_MISSING_FILE_PATTERN = re.compile(r"file not found \(searched at (?P<path>[^)]+)\)")
_FILE_ERROR_PATTERN = re.compile(r"failed to load file \((?P<path>[^)]+)\)")
_LENGTH_PATTERN = re.compile(r"^\s*(?P<value>[-+]?\d*\.?\d+(?:[eE][-+]?\d+)?)\s*(?:pt)?\s*$")


@dataclass(frozen=True, slots=True)
class FormulaRequest:
    """Structured input handed to the template."""

    formula: str
    inline: bool
    body_font: str
    math_font: str

    def sys_inputs(self) -> dict[str, str]:
        return {
            "formula": self.formula,
            "inline": "true" if self.inline else "false",
            "body-font": self.body_font,
            "math-font": self.math_font,
        }


def build_request(formula: str, mode: FormulaMode, *, body_font: str, math_font: str) -> FormulaRequest:
    return FormulaRequest(
        formula=formula,
        inline=mode.is_inline,
        body_font=body_font,
        math_font=math_font,
    )


def first_page(output: bytes | Iterable[bytes] | None) -> bytes:
    """Return the first page from a Typst compile result."""
    if isinstance(output, (bytes, bytearray)):
        return bytes(output)
    pages = list(output or ())
    if not pages:
        raise FormulaCompileError(UnspecifiedDiagnostic("Compiler produced no pages"))
    return bytes(pages[0])


def _parse_length(value: str | None) -> float | None:
    if not value:
        return None
    match = _LENGTH_PATTERN.match(value)
    return float(match.group("value")) if match else None


def page_geometry(svg: str) -> tuple[float, float]:
    """Return the page width and height in points from Typst's SVG output."""
    try:
        root = ElementTree.fromstring(svg)
    except ElementTree.ParseError as exc:
        raise FormulaCompileError(
            UnspecifiedDiagnostic(f"Compiler produced unreadable SVG: {exc}")
        ) from exc

    view_box = root.get("viewBox")
    if view_box:
        parts = view_box.replace(",", " ").split()
        if len(parts) == 4:
            return float(parts[2]), float(parts[3])

    width = _parse_length(root.get("width"))
    height = _parse_length(root.get("height"))
    if width is None or height is None:
        raise FormulaCompileError(UnspecifiedDiagnostic("Compiled page has no measurable size"))
    return width, height


def _strings(values: object) -> tuple[str, ...]:
    if not values:
        return ()
    if isinstance(values, str):
        return (values,)
    if isinstance(values, Iterable):
        return tuple(str(value).strip() for value in values if str(value).strip())
    return (str(values),)


def diagnostic_from_error(exc: BaseException) -> FormulaDiagnostic:
    """Build a structured diagnostic from a compiler exception.

    Newer bindings expose ``message``, ``hints`` and ``trace`` attributes;
    older ones only provide the rendered report, from which the location and
    hints are recovered.
    """
    text = str(exc).strip()
    message = str(getattr(exc, "message", "") or "").strip()
    if not message:
        error_line = _ERROR_LINE_PATTERN.search(text)
        message = error_line.group("message").strip() if error_line else (
            text.splitlines()[0].strip() if text else type(exc).__name__
        )

    hints = _strings(getattr(exc, "hints", None))
    if not hints:
        hints = tuple(match.group("hint").strip() for match in _HINT_PATTERN.finditer(text))
    trace = tuple(TraceEntry(entry) for entry in _strings(getattr(exc, "trace", None)))

    span: SourceSpan | None = None
    span_match = _SPAN_PATTERN.search(text)
    if span_match:
        span = SourceSpan(
            file=span_match.group("file"),
            line=int(span_match.group("line")),
            column=int(span_match.group("column")),
        )

    missing = _MISSING_FILE_PATTERN.search(message)
    if missing:
        return MissingFileDiagnostic(Path(missing.group("path").strip()))
    failed = _FILE_ERROR_PATTERN.search(message)
    if failed:
        return FileDiagnostic(Path(failed.group("path").strip()), message)
    if span is not None or trace:
        return SourceDiagnostic(message=message, span=span, trace=trace, hints=hints)
    if hints:
        return HintedDiagnostic(message=message, hints=hints)
    return UnspecifiedDiagnostic(message)


__all__ = [
    "FormulaRequest",
    "build_request",
    "diagnostic_from_error",
    "first_page",
    "page_geometry",
]
