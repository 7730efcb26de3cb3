"""HTML fragments substituted for formula placeholders."""

from __future__ import annotations

import base64
from html import escape

from .models import FormulaMode, RenderSuccess


MARKER_CLASS = "gladst"
ERROR_CLASS = "gladst-error"


def image_fragment(outcome: RenderSuccess, formula: str, mode: FormulaMode) -> str:
    """Return the ``<img>`` tag embedding a rendered formula as a data URI."""
    payload = base64.b64encode(outcome.image_bytes).decode("ascii")
    return (
        f'<img class="{MARKER_CLASS} {mode.css_class}" '
        f'style="width: {outcome.width_em:.4f}em; height: {outcome.height_em:.4f}em; '
        f'vertical-align: middle;" '
        f'src="data:{outcome.mime_type};base64,{payload}" '
        f'alt="{escape(formula, quote=True)}"/>'
    )


def error_fragment(formula: str, message: str) -> str:
    """Return the inline marker shown in place of a formula that failed to render."""
    return (
        f'<span class="{ERROR_CLASS}" title="{escape(message, quote=True)}">'
        "Gladest Error: Failed to render formula. Check console. "
        f"Formula: {escape(formula, quote=True)}</span>"
    )


__all__ = ["ERROR_CLASS", "MARKER_CLASS", "error_fragment", "image_fragment"]
