from __future__ import annotations

import pytest

pytest.importorskip("typst")

from gladest.adapters.typst.engine import build_typst_engine  # noqa: E402
from gladest.api.pipeline import render_formula  # noqa: E402
from gladest.core.cache import EngineCache  # noqa: E402
from gladest.core.coordinator import render_all  # noqa: E402
from gladest.core.config import RenderSettings  # noqa: E402
from gladest.core.exceptions import FormulaCompileError  # noqa: E402
from gladest.core.models import FormulaMode, OutputFormat  # noqa: E402
from gladest.core.scanner import scan  # noqa: E402
from gladest.fonts.sources import StyleConfig  # noqa: E402


@pytest.fixture(scope="module")
def engine():
    built = build_typst_engine(StyleConfig())
    yield built
    built.close()


def test_inline_formula_compiles_to_a_tight_page(engine) -> None:
    page = engine.compile("x^2", FormulaMode.INLINE)

    assert "<svg" in page.svg
    assert 0 < page.width_pt < 50
    assert 0 < page.height_pt < 30
    assert page.rasterize(300).startswith(b"\x89PNG")


def test_display_formula_is_larger_than_inline(engine) -> None:
    inline = engine.compile("sum_(i=1)^n i", FormulaMode.INLINE)
    display = engine.compile("sum_(i=1)^n i", FormulaMode.DISPLAY)

    assert display.height_pt > inline.height_pt


def test_unclosed_delimiter_raises_compile_error(engine) -> None:
    with pytest.raises(FormulaCompileError) as excinfo:
        engine.compile("frac(1", FormulaMode.INLINE)

    assert excinfo.value.describe().startswith("error:")


def test_unknown_variable_reports_hints(engine) -> None:
    with pytest.raises(FormulaCompileError) as excinfo:
        engine.compile("nosuchvar", FormulaMode.INLINE)

    description = excinfo.value.describe()
    assert "nosuchvar" in description
    assert "  hint: " in description


def test_compilers_are_reused_across_renders(engine) -> None:
    cache = EngineCache(lambda config: engine)
    html = "".join(f'<eq env="math">x_{index}</eq>' for index in range(8))

    for _ in range(3):
        scanned = scan(html)
        render_all(scanned.document, scanned.tasks, StyleConfig(), cache=cache, fmt=OutputFormat.SVG, jobs=4)

    assert cache.builds == 1
    assert engine.compilers_created <= 4


def test_render_formula_end_to_end() -> None:
    settings = RenderSettings(format=OutputFormat.SVG)
    cache = EngineCache()

    assert render_formula("a + b", settings=settings, cache=cache).startswith('<img class="gladst math"')
    assert render_formula("frac(1", settings=settings, cache=cache).startswith('<span class="gladst-error"')
