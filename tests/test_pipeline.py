from __future__ import annotations

from gladest.api.pipeline import render_document, render_formula, render_markdown
from gladest.core.cache import EngineCache
from gladest.core.config import RenderSettings
from gladest.core.models import OutputFormat
from gladest.core.scanner import find_placeholders


class CountingProgress:
    def __init__(self) -> None:
        self.total: int | None = None
        self.advanced = 0

    def start(self, total: int) -> None:
        self.total = total

    def advance(self, count: int = 1) -> None:
        self.advanced += count


def test_render_document_replaces_formulas(fake_cache) -> None:
    html = '<p><eq env="math">a</eq> and <eq env="displaymath">b</eq></p>'
    progress = CountingProgress()

    result = render_document(html, cache=fake_cache, progress=progress)

    assert find_placeholders(result.document) == []
    assert 'class="gladst math"' in result.document
    assert 'class="gladst displaymath"' in result.document
    assert progress.total == 2
    assert progress.advanced == 2


def test_render_document_uses_configured_tag_and_format(fake_cache) -> None:
    settings = RenderSettings(tag="math", mode_attribute="kind", format=OutputFormat.SVG)

    result = render_document('<math kind="math">z</math>', settings, cache=fake_cache)

    assert "data:image/svg+xml;base64," in result.document


def test_render_document_without_formulas_skips_engine(engine_factory) -> None:
    cache = EngineCache(engine_factory())
    progress = CountingProgress()

    result = render_document("<p>none</p>", cache=cache, progress=progress)

    assert result.document == "<p>none</p>"
    assert progress.total == 0
    assert cache.builds == 0


def test_render_formula_returns_fragment_for_each_mode(fake_cache) -> None:
    inline = render_formula("x", cache=fake_cache)
    display = render_formula("x", display=True, cache=fake_cache)

    assert inline.startswith('<img class="gladst math"')
    assert display.startswith('<img class="gladst displaymath"')


def test_render_formula_never_raises_on_compile_failure(engine_factory) -> None:
    cache = EngineCache(engine_factory(fail_on={"bad"}))

    fragment = render_formula("bad", cache=cache)

    assert fragment.startswith('<span class="gladst-error"')
    assert "unknown variable: bad" in fragment


def test_render_formula_returns_empty_string_for_blank_page(engine_factory) -> None:
    cache = EngineCache(engine_factory(empty_on={"blank"}))

    assert render_formula("blank", cache=cache) == ""


def test_render_markdown_renders_dollar_formulas(fake_cache) -> None:
    result = render_markdown("Inline $x$ and\n\n$$y$$\n", cache=fake_cache)

    assert result.total == 2
    assert result.document.startswith("<p>")
    assert result.document.count("<img ") == 2


def test_caller_supplied_cache_is_used_even_when_empty(engine_factory) -> None:
    builder = engine_factory()
    cache = EngineCache(builder)
    assert len(cache) == 0

    render_document('<eq env="math">a</eq>', cache=cache)
    render_formula("b", cache=cache)

    assert cache.builds == 1
    assert len(builder.built) == 1
    assert [formula for formula, _ in builder.built[0].calls] == ["a", "b"]
