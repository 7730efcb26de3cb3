"""Value objects exchanged between the scanner, the coordinator, and the reporter."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from .exceptions import GladestError


EM_TO_PT = 10.0


class FormulaMode(Enum):
    """How a formula is laid out relative to the surrounding text."""

    INLINE = "math"
    DISPLAY = "displaymath"
    UNSPECIFIED = ""

    @property
    def is_inline(self) -> bool:
        return self is not FormulaMode.DISPLAY

    @property
    def css_class(self) -> str:
        return FormulaMode.DISPLAY.value if self is FormulaMode.DISPLAY else FormulaMode.INLINE.value


class OutputFormat(str, Enum):
    """Image encodings supported for embedded formulas."""

    PNG = "png"
    SVG = "svg"

    @property
    def mime_type(self) -> str:
        return "image/png" if self is OutputFormat.PNG else "image/svg+xml"


@dataclass(frozen=True, slots=True)
class FormulaTask:
    """One formula extracted from a document, bound to its placeholder."""

    placeholder_id: str
    formula_text: str
    mode: FormulaMode
    task_index: int


@dataclass(frozen=True, slots=True)
class CompiledPage:
    """Laid-out page produced by the compiler for a single formula.

    ``svg`` is the vector rendition; ``rasterize`` renders the same page to
    PNG bytes at a given pixels-per-inch density.
    """

    width_pt: float
    height_pt: float
    svg: str = field(repr=False)
    rasterize: Callable[[float], bytes] = field(repr=False, compare=False)

    @property
    def width_em(self) -> float:
        return self.width_pt / EM_TO_PT

    @property
    def height_em(self) -> float:
        return self.height_pt / EM_TO_PT


@dataclass(frozen=True, slots=True)
class RenderSuccess:
    image_bytes: bytes = field(repr=False)
    width_em: float
    height_em: float
    mime_type: str

    @property
    def is_empty(self) -> bool:
        return not self.image_bytes


@dataclass(frozen=True, slots=True)
class RenderFailure:
    error: GladestError


RenderOutcome = Union[RenderSuccess, RenderFailure]


@dataclass(frozen=True, slots=True)
class FormulaFailure:
    """A formula that could not be rendered, tagged with its document position."""

    task_index: int
    formula: str
    error: GladestError


@dataclass(frozen=True, slots=True)
class ErrorReport:
    """Per-formula failures ordered by ``task_index``."""

    entries: tuple[FormulaFailure, ...] = ()

    @classmethod
    def from_failures(cls, failures: Iterable[FormulaFailure]) -> ErrorReport:
        return cls(tuple(sorted(failures, key=lambda failure: failure.task_index)))

    def __iter__(self) -> Iterator[FormulaFailure]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)

    @property
    def indices(self) -> list[int]:
        return [entry.task_index for entry in self.entries]


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Final document text together with the failures met while rendering it."""

    document: str
    errors: ErrorReport = field(default_factory=ErrorReport)
    total: int = 0
    rendered: int = 0
    skipped: int = 0

    @property
    def failed(self) -> int:
        return len(self.errors)


__all__ = [
    "EM_TO_PT",
    "CompiledPage",
    "ErrorReport",
    "FormulaFailure",
    "FormulaMode",
    "FormulaTask",
    "OutputFormat",
    "RenderFailure",
    "RenderOutcome",
    "RenderResult",
    "RenderSuccess",
]
