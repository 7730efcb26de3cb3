"""Public entry points for rendering formulas in documents.

Usage Example
:
    >>> from gladest.api import RenderSettings, render_document
    >>> result = render_document("<p>plain</p>", RenderSettings())
    >>> result.total
    0
"""

from __future__ import annotations

from gladest.core.config import FontSettings, FontSpec, RenderSettings, load_settings

from .pipeline import ProgressReporter, render_document, render_formula, render_markdown, shared_cache
from .service import (
    BatchRequest,
    BatchResult,
    BatchService,
    DocumentOutcome,
    expand_inputs,
    output_path_for,
)


__all__ = [
    "BatchRequest",
    "BatchResult",
    "BatchService",
    "DocumentOutcome",
    "FontSettings",
    "FontSpec",
    "ProgressReporter",
    "RenderSettings",
    "expand_inputs",
    "load_settings",
    "output_path_for",
    "render_document",
    "render_formula",
    "render_markdown",
    "shared_cache",
]
