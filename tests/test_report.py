from __future__ import annotations

from gladest.core.diagnostics import SourceDiagnostic, SourceSpan
from gladest.core.exceptions import FormulaCompileError, PageEncodingError
from gladest.core.models import ErrorReport, FormulaFailure, RenderResult
from gladest.core.report import failure_lines, format_report, summarize


def _compile_failure(index: int, formula: str) -> FormulaFailure:
    diagnostic = SourceDiagnostic(
        message="unknown variable: foo",
        span=SourceSpan("main.typ", 14, 3),
        hints=("if you meant to display text, use quotes",),
    )
    return FormulaFailure(task_index=index, formula=formula, error=FormulaCompileError(diagnostic))


def test_summarize_counts() -> None:
    assert summarize(RenderResult(document="")) == "No formulas found."
    assert summarize(RenderResult(document="", total=3, rendered=3)) == "All 3 formula(s) rendered."

    report = ErrorReport.from_failures([_compile_failure(1, "foo")])
    result = RenderResult(document="", errors=report, total=3, rendered=2)
    assert summarize(result) == "1 of 3 formula(s) failed to render."


def test_report_orders_failures_by_index() -> None:
    report = ErrorReport.from_failures([_compile_failure(4, "d"), _compile_failure(1, "a")])

    text = format_report(report)

    assert text.splitlines() == [
        "#1 `a`: unknown variable: foo",
        "#4 `d`: unknown variable: foo",
    ]


def test_verbose_lines_include_location_hints_and_causes() -> None:
    error = PageEncodingError("could not rasterise")
    error.__cause__ = OSError("disk full")
    lines = failure_lines(FormulaFailure(task_index=0, formula="x", error=error), verbose=True)

    assert lines[0] == "#0 `x`: could not rasterise"
    assert "    caused by: disk full" in lines

    compile_lines = failure_lines(_compile_failure(2, "foo"), verbose=True)
    assert "    at main.typ:14:3" in compile_lines
    assert "    hint: if you meant to display text, use quotes" in compile_lines


def test_long_formulas_are_shortened_in_headline() -> None:
    formula = "x + " * 40
    headline = failure_lines(_compile_failure(0, formula))[0]

    assert len(headline) < len(formula)
    assert "…" in headline
