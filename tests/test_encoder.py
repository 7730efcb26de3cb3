from __future__ import annotations

import pytest

from gladest.core.encoder import DEFAULT_PPI, encode_page, pixel_size
from gladest.core.models import CompiledPage, OutputFormat


def _page(width: float, height: float, calls: list[float] | None = None) -> CompiledPage:
    def rasterize(ppi: float) -> bytes:
        if calls is not None:
            calls.append(ppi)
        return b"\x89PNG"

    return CompiledPage(width_pt=width, height_pt=height, svg="<svg/>", rasterize=rasterize)


def test_svg_output_is_the_vector_rendition() -> None:
    assert encode_page(_page(10, 10), OutputFormat.SVG) == b"<svg/>"


def test_png_uses_default_density() -> None:
    calls: list[float] = []

    assert encode_page(_page(10, 10, calls), OutputFormat.PNG) == b"\x89PNG"
    assert calls == [DEFAULT_PPI]


def test_png_passes_requested_density() -> None:
    calls: list[float] = []

    encode_page(_page(10, 10, calls), OutputFormat.PNG, ppi=300)

    assert calls == [300.0]


@pytest.mark.parametrize(("width", "height"), [(0.0, 10.0), (10.0, 0.0), (0.02, 10.0)])
def test_png_of_zero_pixel_page_is_empty(width: float, height: float) -> None:
    calls: list[float] = []

    assert encode_page(_page(width, height, calls), OutputFormat.PNG) == b""
    assert calls == []


def test_pixel_size_scales_points_to_pixels() -> None:
    assert pixel_size(_page(72.0, 36.0), 100.0) == (100, 50)
    assert pixel_size(_page(7.2, 7.2), 1200.0) == (120, 120)


def test_non_positive_density_is_rejected() -> None:
    with pytest.raises(ValueError):
        encode_page(_page(10, 10), OutputFormat.PNG, ppi=0)
