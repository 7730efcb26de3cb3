"""Markdown front-end turning ``$…$`` and ``$$…$$`` into formula elements."""

from __future__ import annotations

from collections.abc import Iterable
import xml.etree.ElementTree as ElementTree

from markdown import Markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor
from markdown.util import AtomicString

from gladest.core.models import FormulaMode


_DISPLAY_PATTERN = r"(?<!\\)\$\$(.+?)\$\$"
_INLINE_PATTERN = r"(?<![\\$])\$(?![\s$])(.+?)(?<![\s\\])\$(?!\$)"

DEFAULT_EXTENSIONS = ("extra",)


class _MathInlineProcessor(InlineProcessor):
    """Inline processor wrapping a delimited formula in a formula element."""

    def __init__(self, pattern: str, md: Markdown, *, tag: str, mode_attribute: str, mode: FormulaMode) -> None:
        super().__init__(pattern, md)
        self.tag = tag
        self.mode_attribute = mode_attribute
        self.mode = mode

    def handleMatch(  # type: ignore[override]  # noqa: N802 - Markdown API requires camelCase
        self,
        match,  # type: ignore[override]  # noqa: ANN001
        data: str,
    ) -> tuple[ElementTree.Element | None, int | None, int | None]:
        formula = match.group(1).strip()
        if not formula:
            return None, None, None
        element = ElementTree.Element(self.tag, {self.mode_attribute: self.mode.value})
        element.text = AtomicString(formula)
        return element, match.start(0), match.end(0)


class MathExtension(Extension):
    """Register the ``$$…$$`` (display) and ``$…$`` (inline) processors."""

    def __init__(self, **kwargs: object) -> None:
        self.config = {
            "tag": ["eq", "Element name wrapping each formula"],
            "mode_attribute": ["env", "Attribute holding the formula layout"],
        }
        super().__init__(**kwargs)

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        tag = str(self.getConfig("tag"))
        mode_attribute = str(self.getConfig("mode_attribute"))
        display = _MathInlineProcessor(
            _DISPLAY_PATTERN, md, tag=tag, mode_attribute=mode_attribute, mode=FormulaMode.DISPLAY
        )
        inline = _MathInlineProcessor(
            _INLINE_PATTERN, md, tag=tag, mode_attribute=mode_attribute, mode=FormulaMode.INLINE
        )
        # Between code spans (190) and backslash escapes (180): code keeps its dollars,
        # formulas keep their backslashes.
        md.inlinePatterns.register(display, "gladest_display_math", 186)
        md.inlinePatterns.register(inline, "gladest_inline_math", 185)


def makeExtension(**kwargs: object) -> MathExtension:  # pragma: no cover - API hook  # noqa: N802
    return MathExtension(**kwargs)


def markdown_to_html(
    source: str,
    *,
    tag: str = "eq",
    mode_attribute: str = "env",
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> str:
    """Convert Markdown ``source`` to HTML with formula elements left for rendering."""
    md = Markdown(
        extensions=[*extensions, MathExtension(tag=tag, mode_attribute=mode_attribute)],
        output_format="html",
    )
    return md.convert(source)


__all__ = ["DEFAULT_EXTENSIONS", "MathExtension", "makeExtension", "markdown_to_html"]
