from __future__ import annotations

import logging

import numpy as np

from bmp_studio.models.image_model import Channel
from bmp_studio.models.pixel_buffer import Color

logger = logging.getLogger(__name__)


class ProcessService:
    def apply_channel(self, pixels: np.ndarray, channel: Channel | str, value: int) -> None:
        """
        RGB-фильтр: записывает `value` в выбранный канал всех пикселей.
        Остальные каналы не меняются. Неизвестное имя канала -> ValueError.
        """
        channel = Channel(channel)
        logger.debug("Channel %s := %d", channel.value, value)
        pixels[:, :, channel.position] = value

    def recolor_neighbors(self, pixels: np.ndarray, target: Color, radius: int, new_color: Color) -> None:
        """
        Перекрашивает окрестность (2r+1)x(2r+1) каждого пикселя цвета `target`.

        Один проход сверху вниз, слева направо, прямо по буферу (без снимка):
        если `new_color` совпадает с `target`, перекрашенные пиксели становятся
        новыми центрами для последующих позиций прохода.
        Пиксели цвета `target` не перекрашиваются; выход за границы пропускается.
        """
        height, width = pixels.shape[:2]
        target_arr = np.array(target, dtype=np.uint8)
        new_is_target = tuple(new_color) == tuple(target)
        hits = np.all(pixels == target_arr, axis=2)
        logger.debug("Recolor around %s, radius %d: %d seed pixels", target, radius, int(hits.sum()))

        for i in range(height):
            row = hits[i]
            if not row.any():
                continue
            for j in range(width):
                if not hits[i, j]:
                    continue
                y0, y1 = max(i - radius, 0), min(i + radius + 1, height)
                x0, x1 = max(j - radius, 0), min(j + radius + 1, width)
                window_hits = hits[y0:y1, x0:x1]
                others = ~window_hits
                pixels[y0:y1, x0:x1][others] = new_color
                if new_is_target:
                    window_hits[others] = True
