from __future__ import annotations

import logging

import numpy as np

from bmp_studio.models.errors import AllocationError
from bmp_studio.models.image_model import BitmapImage
from bmp_studio.models.pixel_buffer import allocate_pixels

logger = logging.getLogger(__name__)


class ResampleService:
    # ---------- Сжатие ----------
    def compress(self, image: BitmapImage, factor: int) -> None:
        """
        Уменьшение в `factor` раз: каждая ячейка результата — среднее блока N x N
        по каждому каналу (целочисленное деление суммы на N*N).
        Неполные блоки справа и снизу отбрасываются. Заголовок обновляется вместе с буфером.
        """
        height, width = image.pixels.shape[:2]
        if factor <= 0 or factor > min(width, height):
            raise ValueError(f"Коэффициент сжатия должен быть в диапазоне 1..{min(width, height)}: {factor}")
        new_h, new_w = height // factor, width // factor
        logger.debug("Compress %dx%d by %d -> %dx%d", width, height, factor, new_w, new_h)

        block = image.pixels[: new_h * factor, : new_w * factor].astype(np.int64)
        sums = block.reshape(new_h, factor, new_w, factor, 3).sum(axis=(1, 3))
        compressed = allocate_pixels(new_h, new_w)
        compressed[...] = sums // (factor * factor)
        image.replace_pixels(compressed)

    # ---------- Размытие ----------
    def blur(self, image: BitmapImage, kernel_size: int) -> None:
        """
        Box blur с отражением на границах.
        Чётный размер ядра увеличивается на 1. Координата за краем отражается:
        -c для c < 0 и 2*extent - c - 2 для c >= extent (край не дублируется).
        Результат — среднее, округлённое до ближайшего целого (0.5 вверх).
        """
        if kernel_size < 0:
            raise ValueError(f"Размер ядра не может быть отрицательным: {kernel_size}")
        if kernel_size % 2 == 0:
            kernel_size += 1
        r = kernel_size // 2
        height, width = image.pixels.shape[:2]
        logger.debug("Blur %dx%d with kernel %d", width, height, kernel_size)

        try:
            padded = np.pad(image.pixels.astype(np.int64), ((r, r), (r, r), (0, 0)), mode="reflect")
            sums = self._box_sum(self._box_sum(padded, kernel_size, axis=0), kernel_size, axis=1)
        except MemoryError as exc:
            raise AllocationError("Не удалось выделить буферы размытия") from exc

        blurred = allocate_pixels(height, width)
        blurred[...] = np.floor(sums / (kernel_size * kernel_size) + 0.5)
        image.replace_pixels(blurred)

    # ---------- Вспомогательные функции ----------
    def _box_sum(self, arr: np.ndarray, size: int, axis: int) -> np.ndarray:
        """
        Скользящая сумма окна `size` вдоль оси через кумулятивные суммы.
        Длина по оси уменьшается на size - 1.
        """
        c = np.cumsum(arr, axis=axis)
        zero_shape = list(arr.shape)
        zero_shape[axis] = 1
        c = np.concatenate([np.zeros(zero_shape, dtype=c.dtype), c], axis=axis)
        n = c.shape[axis]
        return np.take(c, np.arange(size, n), axis=axis) - np.take(c, np.arange(0, n - size), axis=axis)
