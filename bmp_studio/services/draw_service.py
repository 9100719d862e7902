"""Растеризация: точки, отрезки (с толщиной) и фигуры поверх буфера пикселей.

Все операции рисования молча отсекаются по границам изображения.
"""
from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from bmp_studio.models.pixel_buffer import Color, in_bounds

logger = logging.getLogger(__name__)


class DrawService:
    # ---------- Примитивы ----------
    def set_pixel(self, pixels: np.ndarray, x: int, y: int, color: Color) -> None:
        if in_bounds(pixels, x, y):
            pixels[y, x] = color

    def draw_line(self, pixels: np.ndarray, x1: int, y1: int, x2: int, y2: int, color: Color) -> None:
        """
        Целочисленный алгоритм Брезенхэма; оба конца рисуются всегда.
        Концы упорядочиваются, поэтому (a, b) и (b, a) дают одно и то же множество точек.
        """
        if (x1, y1) > (x2, y2):
            x1, y1, x2, y2 = x2, y2, x1, y1
        delta_x = abs(x2 - x1)
        delta_y = abs(y2 - y1)
        sign_x = 1 if x1 < x2 else -1
        sign_y = 1 if y1 < y2 else -1
        error = delta_x - delta_y

        self.set_pixel(pixels, x2, y2, color)
        while x1 != x2 or y1 != y2:
            self.set_pixel(pixels, x1, y1, color)
            error2 = error * 2
            if error2 > -delta_y:
                error -= delta_y
                x1 += sign_x
            if error2 < delta_x:
                error += delta_x
                y1 += sign_y

    def draw_thick_line(
        self, pixels: np.ndarray, x1: int, y1: int, x2: int, y2: int, thickness: int, color: Color
    ) -> None:
        """
        Толстый отрезок из параллельных смещённых линий.
        Смещения добавляются только при |dy| >= |dx|: у пологих отрезков толщина не видна.
        """
        self.draw_line(pixels, x1, y1, x2, y2, color)
        if thickness <= 1 or abs(y2 - y1) < abs(x2 - x1):
            return
        for i in range(1, thickness // 2 + 1):
            if x2 > x1:
                self.draw_line(pixels, x1 + i, y1, x2, y2 - i, color)
                self.draw_line(pixels, x1, y1 + i, x2 - i, y2, color)
            else:
                self.draw_line(pixels, x1, y1 + i, x2 + i, y2, color)
                self.draw_line(pixels, x1 - i, y1, x2, y2 - i, color)

    # ---------- Фигуры ----------
    def draw_square(
        self,
        pixels: np.ndarray,
        x: int,
        y: int,
        size: int,
        thickness: int,
        color: Color,
        fill: bool = False,
        fill_color: Optional[Color] = None,
    ) -> None:
        """
        Квадрат с диагоналями, левый верхний угол в (x, y).
        - заливка `fill_color` (если `fill`) рисуется первой;
        - рамка: для каждого t из [-thickness//2, thickness//2] четыре стороны, сдвинутые на t;
        - диагонали через `draw_thick_line`, поэтому их толщина отличается от толщины рамки.
        """
        logger.debug("Square at (%d, %d), size %d, thickness %d", x, y, size, thickness)
        if fill:
            self._fill_rect(pixels, x, y, x + size, y + size, fill_color if fill_color is not None else color)

        last = size - 1
        half = thickness // 2
        for t in range(-half, half + 1):
            self.draw_line(pixels, x + t, y + t, x + last - t, y + t, color)  # верх
            self.draw_line(pixels, x + t, y + last - t, x + last - t, y + last - t, color)  # низ
            self.draw_line(pixels, x + t, y + t, x + t, y + last - t, color)  # левая
            self.draw_line(pixels, x + last - t, y + t, x + last - t, y + last - t, color)  # правая

        self.draw_thick_line(pixels, x, y, x + last, y + last, thickness, color)
        self.draw_thick_line(pixels, x + last, y, x, y + last, thickness, color)

    def draw_rhombus(self, pixels: np.ndarray, center_x: int, top_y: int, size: int, color: Color) -> None:
        """
        Залитый ромб с верхней вершиной в (center_x, top_y).
        Полудиагональ a = floor(sqrt(2) * size) // 2 - 1.
        """
        a = math.isqrt(2 * size * size) // 2 - 1
        left_x = center_x - a
        right_x = center_x + a
        center_y = top_y + a
        bottom_y = top_y + 2 * a
        logger.debug("Rhombus at (%d, %d), half-diagonal %d", center_x, top_y, a)

        self.draw_line(pixels, center_x, top_y, right_x, center_y, color)
        self.draw_line(pixels, center_x, top_y, left_x, center_y, color)
        self.draw_line(pixels, right_x, center_y, center_x, bottom_y, color)
        self.draw_line(pixels, left_x, center_y, center_x, bottom_y, color)
        for row in range(top_y, bottom_y):
            inset = abs(row - top_y - a)
            self._fill_rect(pixels, left_x + inset, row, right_x - inset, row + 1, color)

    def fill_outside(
        self, pixels: np.ndarray, left_x: int, left_y: int, right_x: int, right_y: int, color: Color
    ) -> None:
        """Закрашивает всё вне прямоугольника; его границы (включительно) не трогаются."""
        height, width = pixels.shape[:2]
        ys = np.arange(height)[:, None]
        xs = np.arange(width)[None, :]
        outside = (ys < left_y) | (ys > right_y) | (xs < left_x) | (xs > right_x)
        pixels[outside] = color

    # ---------- Вспомогательные функции ----------
    def _fill_rect(self, pixels: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: Color) -> None:
        """Заливка полуоткрытого прямоугольника [x0, x1) x [y0, y1) с отсечением."""
        height, width = pixels.shape[:2]
        x0, x1 = max(x0, 0), min(x1, width)
        y0, y1 = max(y0, 0), min(y1, height)
        if x0 < x1 and y0 < y1:
            pixels[y0:y1, x0:x1] = color
