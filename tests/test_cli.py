from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from gladest.ui.cli.app import app
from gladest.ui.cli.commands.render import EXIT_DOCUMENT_FAILED, EXIT_OK, EXIT_USAGE


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def fake_engine(monkeypatch: pytest.MonkeyPatch, engine_factory):
    builder = engine_factory(fail_on={"bad"})
    monkeypatch.setattr("gladest.core.cache.default_engine_builder", builder)
    return builder


def _page(tmp_path: Path, name: str = "page.html", body: str = '<p><eq env="math">x</eq></p>\n') -> Path:
    path = tmp_path / name
    path.write_text(body, encoding="utf-8")
    return path


def test_render_rewrites_html_in_place(runner: CliRunner, tmp_path: Path) -> None:
    page = _page(tmp_path)

    result = runner.invoke(app, [str(page)])

    assert result.exit_code == EXIT_OK, result.output
    rendered = page.read_text(encoding="utf-8")
    assert '<img class="gladst math"' in rendered
    assert "data:image/png;base64," in rendered
    assert "All 1 formula(s) rendered." in result.output


def test_formula_failures_keep_exit_code_zero(runner: CliRunner, tmp_path: Path) -> None:
    page = _page(tmp_path, body='<eq env="math">bad</eq> <eq env="math">ok</eq>')

    result = runner.invoke(app, [str(page)])

    assert result.exit_code == EXIT_OK
    assert "gladst-error" in page.read_text(encoding="utf-8")
    assert "unknown variable: bad" in result.output


def test_missing_input_fails_the_batch_but_renders_others(runner: CliRunner, tmp_path: Path) -> None:
    page = _page(tmp_path)

    result = runner.invoke(app, [str(tmp_path / "missing.html"), str(page)])

    assert result.exit_code == EXIT_DOCUMENT_FAILED
    assert "gladst math" in page.read_text(encoding="utf-8")


def test_unmatched_glob_is_a_usage_error(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(app, [str(tmp_path / "*.html")])

    assert result.exit_code == EXIT_USAGE


def test_conflicting_font_flags_are_rejected(runner: CliRunner, tmp_path: Path) -> None:
    page = _page(tmp_path)
    original = page.read_text(encoding="utf-8")

    result = runner.invoke(
        app,
        [str(page), "--math-font", "Fira Math", "--math-font-file", str(tmp_path / "math.otf")],
    )

    assert result.exit_code == EXIT_USAGE
    assert page.read_text(encoding="utf-8") == original


def test_flags_override_configuration_file(runner: CliRunner, tmp_path: Path) -> None:
    page = _page(tmp_path, body='<tex kind="displaymath">y</tex>')
    config = tmp_path / "gladest.yml"
    config.write_text("format: png\ntag: tex\nmodeAttribute: kind\n", encoding="utf-8")

    result = runner.invoke(app, [str(page), "--config", str(config), "--format", "SVG"])

    assert result.exit_code == EXIT_OK, result.output
    rendered = page.read_text(encoding="utf-8")
    assert 'class="gladst displaymath"' in rendered
    assert "data:image/svg+xml;base64," in rendered


def test_invalid_configuration_is_a_usage_error(runner: CliRunner, tmp_path: Path) -> None:
    page = _page(tmp_path)
    config = tmp_path / "gladest.yml"
    config.write_text("ppi: -5\n", encoding="utf-8")

    result = runner.invoke(app, [str(page), "-c", str(config)])

    assert result.exit_code == EXIT_USAGE


def test_output_directory_receives_templates_with_extension(runner: CliRunner, tmp_path: Path) -> None:
    source = _page(tmp_path, name="chapter.htex")
    out = tmp_path / "site"

    result = runner.invoke(app, [str(source), "-o", str(out), "--extension", "xhtml"])

    assert result.exit_code == EXIT_OK, result.output
    assert (out / "chapter.xhtml").is_file()
    assert source.read_text(encoding="utf-8") == '<p><eq env="math">x</eq></p>\n'


def test_engine_is_built_once_per_run(runner: CliRunner, tmp_path: Path, fake_engine) -> None:
    first = _page(tmp_path, name="a.html")
    second = _page(tmp_path, name="b.html")

    result = runner.invoke(app, [str(first), str(second), "-j", "2"])

    assert result.exit_code == EXIT_OK
    assert len(fake_engine.built) == 1
