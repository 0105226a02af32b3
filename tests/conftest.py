"""
Pytest configuration and fixtures for the test suite.

Images are generated in memory with Pillow so the suite needs no fixtures on
disk.
"""

from collections.abc import Callable
from io import BytesIO
from typing import Any

import pytest
from PIL import Image


def encode_image(image: Image.Image, image_format: str, **save_kwargs: Any) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format=image_format, **save_kwargs)
    return buffer.getvalue()


def gradient_image(size: tuple[int, int], mode: str = "RGB") -> Image.Image:
    """Deterministic image with enough detail to exercise the resampler."""
    width, height = size
    red = Image.linear_gradient("L").resize(size)
    green = Image.radial_gradient("L").resize(size)
    blue = red.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
    rgb = Image.merge("RGB", (red, green, blue))

    if mode == "RGB":
        return rgb
    if mode == "RGBA":
        alpha = Image.linear_gradient("L").rotate(90).resize((width, height))
        rgba = rgb.copy()
        rgba.putalpha(alpha)
        return rgba
    return rgb.convert(mode)


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    def _make(size: tuple[int, int] = (800, 600), mode: str = "RGB") -> bytes:
        return encode_image(gradient_image(size, mode), "PNG")

    return _make


@pytest.fixture
def make_jpeg() -> Callable[..., bytes]:
    def _make(
        size: tuple[int, int] = (170, 170), mode: str = "RGB", **save_kwargs: Any
    ) -> bytes:
        return encode_image(gradient_image(size, mode), "JPEG", **save_kwargs)

    return _make
