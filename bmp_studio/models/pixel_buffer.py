"""Буфер пикселей: массив numpy `(height, width, 3)` uint8, строки сверху вниз, каналы RGB.

Все функции здесь — тонкие помощники поверх ndarray: выделение памяти с
типизированной ошибкой и чтение/запись с проверкой границ.
"""
from __future__ import annotations

from typing import Tuple

import numpy as np

from bmp_studio.models.errors import AllocationError

Color = Tuple[int, int, int]

CHANNELS = 3


def row_stride(width: int) -> int:
    """Длина строки на диске с выравниванием до 4 байт."""
    return (width * CHANNELS + 3) & ~3


def allocate_pixels(height: int, width: int) -> np.ndarray:
    """Выделяет чёрный буфер заданного размера.

    Raises:
        AllocationError: если память выделить не удалось или размеры отрицательны.
    """
    try:
        return np.zeros((height, width, CHANNELS), dtype=np.uint8)
    except (MemoryError, ValueError) as exc:
        raise AllocationError(f"Не удалось выделить буфер {width}x{height}") from exc


def copy_pixels(pixels: np.ndarray) -> np.ndarray:
    """Копия буфера; нехватка памяти превращается в `AllocationError`."""
    try:
        return pixels.copy()
    except MemoryError as exc:
        raise AllocationError("Не удалось скопировать буфер") from exc


def in_bounds(pixels: np.ndarray, x: int, y: int) -> bool:
    height, width = pixels.shape[:2]
    return 0 <= x < width and 0 <= y < height


def read_clipped(pixels: np.ndarray, ys: np.ndarray, xs: np.ndarray) -> np.ndarray:
    """Читает пиксели по (широковещательным) массивам индексов.

    Ячейки, попавшие за границы изображения, остаются чёрными.
    """
    ys, xs = np.broadcast_arrays(ys, xs)
    height, width = pixels.shape[:2]
    out = allocate_pixels(*ys.shape)
    valid = (ys >= 0) & (ys < height) & (xs >= 0) & (xs < width)
    out[valid] = pixels[ys[valid], xs[valid]]
    return out


def write_clipped(pixels: np.ndarray, left: int, top: int, block: np.ndarray) -> None:
    """Записывает блок с левым верхним углом в (left, top), отсекая лишнее."""
    height, width = pixels.shape[:2]
    rows, cols = block.shape[:2]
    y0, y1 = max(top, 0), min(top + rows, height)
    x0, x1 = max(left, 0), min(left + cols, width)
    if y0 >= y1 or x0 >= x1:
        return
    pixels[y0:y1, x0:x1] = block[y0 - top:y1 - top, x0 - left:x1 - left]
