"""Locate formula elements in HTML and swap them for placeholder tokens.

The scanner only uses BeautifulSoup to *find* formula elements. The output is
assembled from slices of the original source, cut at the positions reported by
the parser, so markup outside formula elements is preserved byte for byte.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
import logging
import re
import secrets

from bs4 import BeautifulSoup, Tag

from .diagnostics import DiagnosticEmitter, ensure_emitter
from .models import FormulaMode, FormulaTask


logger = logging.getLogger(__name__)

DEFAULT_FORMULA_TAG = "eq"
DEFAULT_MODE_ATTRIBUTE = "env"

# Private-use code points never produced by ordinary markup.
PLACEHOLDER_OPEN = "\ue000"
PLACEHOLDER_CLOSE = "\ue001"
_PLACEHOLDER_PATTERN = re.compile(f"{PLACEHOLDER_OPEN}gladest:[0-9a-f]+:\\d+{PLACEHOLDER_CLOSE}")
# Markup the parser never turns into elements.
_OPAQUE_SECTIONS = r"<!--.*?(?:-->|\Z)|<!\[CDATA\[.*?(?:\]\]>|\Z)"


@dataclass(slots=True)
class ScanResult:
    """Document text with placeholders inserted plus the extracted tasks."""

    document: str
    tasks: list[FormulaTask] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __iter__(self) -> Iterator[object]:
        yield self.document
        yield self.tasks


def find_placeholders(document: str) -> list[str]:
    """Return every placeholder token still present in ``document``."""
    return _PLACEHOLDER_PATTERN.findall(document)


def _new_nonce(source: str) -> str:
    while True:
        nonce = secrets.token_hex(4)
        if f"{PLACEHOLDER_OPEN}gladest:{nonce}:" not in source:
            return nonce


def placeholder_token(nonce: str, index: int) -> str:
    """Return the token standing for the formula at ``index``."""
    return f"{PLACEHOLDER_OPEN}gladest:{nonce}:{index}{PLACEHOLDER_CLOSE}"


def resolve_mode(
    value: str | None,
    *,
    task_index: int,
    emitter: DiagnosticEmitter,
) -> tuple[FormulaMode, str | None]:
    """Map a mode attribute value onto a :class:`FormulaMode`."""
    raw = (value or "").strip()
    if not raw:
        return FormulaMode.UNSPECIFIED, None
    if raw == FormulaMode.DISPLAY.value:
        return FormulaMode.DISPLAY, None
    if raw == FormulaMode.INLINE.value:
        return FormulaMode.INLINE, None
    warning = f"Formula #{task_index}: mode '{raw}' is not recognised, defaulting to inline."
    emitter.warning(warning)
    return FormulaMode.INLINE, warning


def _line_starts(source: str) -> list[int]:
    starts = [0]
    starts.extend(match.end() for match in re.finditer("\n", source))
    return starts


def _start_tag_end(source: str, start: int) -> int:
    """Return the index just past the ``>`` closing the start tag at ``start``."""
    quote: str | None = None
    index = start + 1
    length = len(source)
    while index < length:
        char = source[index]
        if quote is not None:
            if char == quote:
                quote = None
        elif char in {'"', "'"}:
            quote = char
        elif char == ">":
            return index + 1
        index += 1
    return length


def _element_end(source: str, tag_end: int, tag: str) -> int:
    """Return the index just past the closing tag matching an open element."""
    if source[tag_end - 2 : tag_end] == "/>":
        return tag_end

    pattern = re.compile(
        rf"{_OPAQUE_SECTIONS}|<(/?){re.escape(tag)}(?=[\s/>])",
        re.IGNORECASE | re.DOTALL,
    )
    depth = 1
    for match in pattern.finditer(source, tag_end):
        if match.group(1) is None:
            continue
        match_end = _start_tag_end(source, match.start())
        if match.group(1):
            depth -= 1
            if depth == 0:
                return match_end
        elif source[match_end - 2 : match_end] != "/>":
            depth += 1

    # Unclosed element: the formula extends up to the next tag.
    next_tag = source.find("<", tag_end)
    return next_tag if next_tag != -1 else len(source)


def _top_level_elements(soup: BeautifulSoup, tag: str) -> list[Tag]:
    elements: list[Tag] = []
    for element in soup.find_all(tag):
        if element.find_parent(tag) is not None:
            continue
        elements.append(element)
    return elements


def scan(
    html: str,
    *,
    tag: str = DEFAULT_FORMULA_TAG,
    mode_attribute: str = DEFAULT_MODE_ATTRIBUTE,
    emitter: DiagnosticEmitter | None = None,
) -> ScanResult:
    """Extract formula elements from ``html`` in document order.

    Each element is replaced by a unique placeholder token. Documents without
    formula elements are returned unchanged with an empty task list.
    """
    emitter = ensure_emitter(emitter)
    tag = tag.lower()
    soup = BeautifulSoup(html, "html.parser", multi_valued_attributes=None)
    elements = _top_level_elements(soup, tag)
    if not elements:
        return ScanResult(document=html)

    line_starts = _line_starts(html)
    nonce = _new_nonce(html)
    pieces: list[str] = []
    tasks: list[FormulaTask] = []
    warnings: list[str] = []
    cursor = 0

    for index, element in enumerate(elements):
        if element.sourceline is None or element.sourcepos is None:
            raise ValueError(f"Parser did not report a position for formula #{index}")
        start = line_starts[element.sourceline - 1] + element.sourcepos
        if start < cursor:
            raise ValueError(f"Formula #{index} overlaps the previous formula element")
        end = _element_end(html, _start_tag_end(html, start), tag)

        mode, warning = resolve_mode(element.get(mode_attribute), task_index=index, emitter=emitter)
        if warning:
            warnings.append(warning)

        token = placeholder_token(nonce, index)
        pieces.append(html[cursor:start])
        pieces.append(token)
        cursor = end
        tasks.append(
            FormulaTask(
                placeholder_id=token,
                formula_text=element.get_text(),
                mode=mode,
                task_index=index,
            )
        )

    pieces.append(html[cursor:])
    logger.debug("Extracted %d formula(s) from document", len(tasks))
    return ScanResult(document="".join(pieces), tasks=tasks, warnings=warnings)


__all__ = [
    "DEFAULT_FORMULA_TAG",
    "DEFAULT_MODE_ATTRIBUTE",
    "PLACEHOLDER_CLOSE",
    "PLACEHOLDER_OPEN",
    "ScanResult",
    "find_placeholders",
    "placeholder_token",
    "resolve_mode",
    "scan",
]
