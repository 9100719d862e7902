"""Геометрические преобразования: поворот области, диагональное отражение,
циклический сдвиг, замощение и шахматное отражение блоков.

Принципы:
- SRP: только перестановка пикселей, без декодирования и проверки пользовательского ввода.
- Операции, создающие новый буфер, подменяют его через `BitmapImage.replace_pixels`
  только после того, как он полностью построен.
"""
from __future__ import annotations

import logging

import numpy as np

from bmp_studio.models.image_model import Axis, BitmapImage, Orientation
from bmp_studio.models.pixel_buffer import allocate_pixels, copy_pixels, read_clipped, write_clipped

logger = logging.getLogger(__name__)

SUPPORTED_ANGLES = (90, 180, 270)


def _trunc_div(a: int, b: int) -> int:
    """Целочисленное деление с отбрасыванием дробной части к нулю."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


class TransformService:
    # ---------- Поворот ----------
    def rotate_region(
        self, image: BitmapImage, left_x: int, left_y: int, right_x: int, right_y: int, angle: int
    ) -> None:
        """
        Поворот области [left_x, right_x) x [left_y, right_y) на 90/180/270 градусов.
        - 180: размеры те же, результат пишется в исходный левый верхний угол;
        - 90/270: ширина и высота меняются местами, центр области сохраняется.
        Чтение за пределами изображения даёт чёрный цвет, запись отсекается.
        """
        if angle not in SUPPORTED_ANGLES:
            raise ValueError(f"Недопустимый угол поворота: {angle}")
        logger.debug("Rotate (%d, %d)-(%d, %d) by %d", left_x, left_y, right_x, right_y, angle)
        self._rotate_pixels(image.pixels, left_x, left_y, right_x, right_y, angle)

    def _rotate_pixels(
        self, pixels: np.ndarray, left_x: int, left_y: int, right_x: int, right_y: int, angle: int
    ) -> None:
        width = right_x - left_x
        height = right_y - left_y
        if width < 0 or height < 0:
            raise ValueError(f"Пустая или вывернутая область: {width}x{height}")

        if angle == 180:
            ys = left_y + np.arange(height)[:, None]
            xs = left_x + np.arange(width)[None, :]
            new_x, new_y = left_x, left_y
        else:
            # scratch[j][i]: j < width (строки), i < height (столбцы)
            j = np.arange(width)[:, None]
            i = np.arange(height)[None, :]
            if angle == 90:
                ys, xs = right_y - 1 - i, left_x + j
            else:
                ys, xs = left_y + i, right_x - 1 - j
            center_x = _trunc_div(right_x + left_x, 2)
            center_y = _trunc_div(right_y + left_y, 2)
            new_x = center_x - _trunc_div(height, 2)
            new_y = center_y - _trunc_div(width, 2)

        scratch = read_clipped(pixels, ys, xs)
        write_clipped(pixels, new_x, new_y, scratch[::-1, ::-1])

    def diagonal_mirror(self, image: BitmapImage, left_x: int, left_y: int, right_x: int, right_y: int) -> None:
        """
        Отражение квадратной области относительно главной диагонали.
        Область обрезается до квадрата со стороной min(dx, dy); затем поворот на 90
        и перечитывание строк в обратном порядке во второй буфер.
        """
        side = min(right_x - left_x, right_y - left_y)
        if side < 0:
            raise ValueError(f"Пустая или вывернутая область: сторона {side}")
        right_x, right_y = left_x + side, left_y + side
        logger.debug("Diagonal mirror (%d, %d), side %d", left_x, left_y, side)

        work = copy_pixels(image.pixels)
        self._rotate_pixels(work, left_x, left_y, right_x, right_y, 90)
        rows = right_y - 1 - np.arange(side)[:, None]
        cols = left_x + np.arange(side)[None, :]
        reflected = read_clipped(work, rows, cols)
        write_clipped(work, left_x, left_y, reflected)
        image.replace_pixels(work)

    # ---------- Сдвиг и замощение ----------
    def shift(self, image: BitmapImage, step: int, axis: Axis | str) -> None:
        """
        Циклический сдвиг: пиксель (i, j) переходит в ((i+step_y) % h, (j+step_x) % w).
        Всегда строится новый буфер.
        """
        axis = Axis(axis)
        height, width = image.pixels.shape[:2]
        step_x = step % width if axis in (Axis.X, Axis.XY) else 0
        step_y = step % height if axis in (Axis.Y, Axis.XY) else 0
        logger.debug("Shift by (%d, %d) along %s", step_x, step_y, axis.value)

        shifted = allocate_pixels(height, width)
        shifted[...] = np.roll(image.pixels, shift=(step_y, step_x), axis=(0, 1))
        image.replace_pixels(shifted)

    def paving(self, image: BitmapImage, left_x: int, left_y: int, right_x: int, right_y: int) -> None:
        """
        Замощение: плитка dx x dy из области повторяется по всему изображению,
        пиксель (x, y) = tile[y % dy][x % dx]. Ячейки плитки вне изображения — чёрные.
        """
        dx = right_x - left_x
        dy = right_y - left_y
        if dx <= 0 or dy <= 0:
            raise ValueError(f"Плитка должна иметь положительный размер, а не {dx}x{dy}")
        height, width = image.pixels.shape[:2]
        tile = read_clipped(
            image.pixels, left_y + np.arange(dy)[:, None], left_x + np.arange(dx)[None, :]
        )
        logger.debug("Paving with %dx%d tile", dx, dy)

        paved = allocate_pixels(height, width)
        paved[...] = tile[np.arange(height)[:, None] % dy, np.arange(width)[None, :] % dx]
        image.replace_pixels(paved)

    # ---------- Шахматное отражение блоков ----------
    def flip_blocks(self, pixels: np.ndarray, block_size: int, orientation: Orientation | str) -> None:
        """
        Делит изображение на блоки block_size x block_size и отражает блоки
        с нечётной суммой индексов (строка блока + столбец блока).
        - vertical: переворачивается порядок строк внутри блока;
        - horizontal: порядок столбцов.
        Неполные блоки у нижнего/правого края отражаются по своей фактической высоте/ширине.
        """
        orientation = Orientation(orientation)
        if block_size <= 0:
            raise ValueError(f"Размер блока должен быть положительным: {block_size}")
        height, width = pixels.shape[:2]
        logger.debug("Flip %s blocks of %d", orientation.value, block_size)

        for row_index, top in enumerate(range(0, height, block_size)):
            for col_index, left in enumerate(range(0, width, block_size)):
                if (row_index + col_index) % 2 == 0:
                    continue
                block = pixels[top:top + block_size, left:left + block_size]
                if orientation is Orientation.VERTICAL:
                    block[...] = block[::-1].copy()
                else:
                    block[...] = block[:, ::-1].copy()
