from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from io import BytesIO
import threading
import time
from typing import Any

from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen
import pytest

from gladest.core.cache import EngineCache
from gladest.core.diagnostics import SourceDiagnostic
from gladest.core.exceptions import FormulaCompileError
from gladest.core.models import CompiledPage, FormulaMode
from gladest.fonts.sources import StyleConfig


class FakeEngine:
    """Deterministic stand-in for the Typst engine."""

    def __init__(
        self,
        config: StyleConfig,
        *,
        fail_on: Iterable[str] = (),
        empty_on: Iterable[str] = (),
        crash_on: Iterable[str] = (),
        delay: float = 0.0,
    ) -> None:
        self.config = config
        self.fail_on = set(fail_on)
        self.empty_on = set(empty_on)
        self.crash_on = set(crash_on)
        self.delay = delay
        self.calls: list[tuple[str, FormulaMode]] = []
        self._lock = threading.Lock()

    def compile(self, formula: str, mode: FormulaMode) -> CompiledPage:
        with self._lock:
            self.calls.append((formula, mode))
        if self.delay:
            # Later formulas finish first so completion order differs from document order.
            time.sleep(self.delay / (1 + len(self.calls)))
        if formula in self.crash_on:
            raise RuntimeError(f"engine crashed on {formula}")
        if formula in self.fail_on:
            raise FormulaCompileError(
                SourceDiagnostic(
                    message=f"unknown variable: {formula}",
                    hints=("check the spelling",),
                )
            )
        width = 0.0 if formula in self.empty_on else 5.0 * max(len(formula), 1)
        height = 12.0
        svg = (
            '<svg xmlns="http://www.w3.org/2000/svg" '
            f'viewBox="0 0 {width} {height}"><text>{formula}</text></svg>'
        )
        payload = f"PNG:{formula}".encode()

        def rasterize(ppi: float) -> bytes:
            return payload

        return CompiledPage(width_pt=width, height_pt=height, svg=svg, rasterize=rasterize)


class RecordingEmitter:
    def __init__(self) -> None:
        self.debug_enabled = False
        self.warnings: list[str] = []
        self.errors: list[tuple[str, BaseException | None]] = []
        self.events: list[tuple[str, dict[str, Any]]] = []
        self._lock = threading.Lock()

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        with self._lock:
            self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        with self._lock:
            self.errors.append((message, exc))

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        with self._lock:
            self.events.append((name, dict(payload)))


def build_font_bytes(
    family: str,
    style: str = "Regular",
    *,
    typographic_family: str | None = None,
    typographic_subfamily: str | None = None,
) -> bytes:
    """Return a minimal TrueType font with the given naming records."""
    builder = FontBuilder(1000, isTTF=True)
    builder.setupGlyphOrder([".notdef", "A"])
    builder.setupCharacterMap({ord("A"): "A"})

    glyphs = {}
    for name in (".notdef", "A"):
        pen = TTGlyphPen(None)
        pen.moveTo((0, 0))
        pen.lineTo((0, 500))
        pen.lineTo((500, 500))
        pen.lineTo((500, 0))
        pen.closePath()
        glyphs[name] = pen.glyph()
    builder.setupGlyf(glyphs)
    builder.setupHorizontalMetrics({".notdef": (500, 0), "A": (500, 0)})
    builder.setupHorizontalHeader(ascent=800, descent=-200)

    names: dict[str, str] = {"familyName": family, "styleName": style}
    if typographic_family is not None:
        names["typographicFamily"] = typographic_family
    if typographic_subfamily is not None:
        names["typographicSubfamily"] = typographic_subfamily
    builder.setupNameTable(names)
    builder.setupOS2()
    builder.setupPost()

    buffer = BytesIO()
    builder.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_font() -> Callable[..., bytes]:
    return build_font_bytes


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def engine_factory() -> Callable[..., Callable[[StyleConfig], FakeEngine]]:
    """Return a helper producing engine builders that remember what they built."""

    def _factory(**options: Any) -> Callable[[StyleConfig], FakeEngine]:
        built: list[FakeEngine] = []

        def _build(config: StyleConfig) -> FakeEngine:
            engine = FakeEngine(config, **options)
            built.append(engine)
            return engine

        _build.built = built  # type: ignore[attr-defined]
        return _build

    return _factory


@pytest.fixture
def fake_cache(engine_factory) -> EngineCache:
    return EngineCache(engine_factory())
