"""Encode compiled pages into embeddable image bytes."""

from __future__ import annotations

import logging
import math

from .models import CompiledPage, OutputFormat


logger = logging.getLogger(__name__)

DEFAULT_PPI = 1200.0
POINTS_PER_INCH = 72.0


def pixel_size(page: CompiledPage, ppi: float) -> tuple[int, int]:
    """Return the rounded pixel dimensions of ``page`` rasterised at ``ppi``."""
    scale = ppi / POINTS_PER_INCH
    return (
        math.floor(page.width_pt * scale + 0.5),
        math.floor(page.height_pt * scale + 0.5),
    )


def encode_page(page: CompiledPage, fmt: OutputFormat, ppi: float | None = None) -> bytes:
    """Return ``page`` encoded as SVG text or PNG pixels.

    PNG pages whose pixel width or height rounds to zero yield ``b""``;
    callers treat that as nothing to embed.
    """
    if fmt is OutputFormat.SVG:
        return page.svg.encode("utf-8")

    density = DEFAULT_PPI if ppi is None else float(ppi)
    if density <= 0:
        raise ValueError(f"Pixel density must be positive, got {ppi!r}")
    width, height = pixel_size(page, density)
    if width == 0 or height == 0:
        logger.debug("Page rasterises to %dx%d pixels at %s ppi", width, height, density)
        return b""
    return page.rasterize(density)


__all__ = ["DEFAULT_PPI", "POINTS_PER_INCH", "encode_page", "pixel_size"]
