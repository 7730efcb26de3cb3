"""Formula engine backed by the Typst compiler."""

from __future__ import annotations

from .compiler import FormulaRequest, build_request, diagnostic_from_error, page_geometry


__all__ = ["FormulaRequest", "build_request", "diagnostic_from_error", "page_geometry"]
