from __future__ import annotations

import numpy as np
import pytest

from bmp_studio.models.image_model import BitmapImage


def make_image(pixels: np.ndarray) -> BitmapImage:
    """Изображение с согласованными заголовками вокруг готового буфера."""
    height, width = pixels.shape[:2]
    return BitmapImage.blank(width, height, pixels=pixels.astype(np.uint8))


@pytest.fixture
def gradient_image() -> BitmapImage:
    """7x5 изображение, в котором каждый пиксель уникален."""
    height, width = 5, 7
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            pixels[y, x] = (x * 30, y * 40, (x + y * width) % 256)
    return make_image(pixels)


@pytest.fixture
def black_4x4() -> BitmapImage:
    return BitmapImage.blank(4, 4)
