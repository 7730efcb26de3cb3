"""Human-readable summaries of per-formula rendering failures."""

from __future__ import annotations

from .coordinator import describe_error
from .exceptions import exception_messages
from .models import ErrorReport, FormulaFailure, RenderResult


def _shorten(text: str, width: int = 60) -> str:
    flat = " ".join(text.split())
    return flat if len(flat) <= width else f"{flat[: width - 1]}…"


def summarize(result: RenderResult) -> str:
    """Return a one-line count of failed versus total formulas."""
    if result.total == 0:
        return "No formulas found."
    if not result.errors:
        return f"All {result.total} formula(s) rendered."
    return f"{result.failed} of {result.total} formula(s) failed to render."


def failure_lines(failure: FormulaFailure, *, verbose: bool = False) -> list[str]:
    """Return the report lines for one failure.

    The first line always names the formula and the top-level message. In
    verbose mode every diagnostic line and every chained cause follows on its
    own indented line.
    """
    headline = f"#{failure.task_index} `{_shorten(failure.formula)}`: {failure.error}"
    if not verbose:
        return [headline]

    lines = [headline]
    detail = describe_error(failure.error)
    lines.extend(f"    {line.strip()}" for line in detail.splitlines() if line.strip())
    for cause in exception_messages(failure.error)[1:]:
        lines.append(f"    caused by: {cause}")
    return lines


def format_report(report: ErrorReport, *, verbose: bool = False) -> str:
    """Render every failure of ``report`` in ``task_index`` order."""
    lines: list[str] = []
    for failure in report:
        lines.extend(failure_lines(failure, verbose=verbose))
    return "\n".join(lines)


__all__ = ["failure_lines", "format_report", "summarize"]
