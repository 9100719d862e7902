"""Загрузка и сохранение BMP на диске, сводка по заголовкам.

Принципы:
- SRP: класс отвечает только за файловую границу и базовое извлечение свойств;
  двоичный формат целиком в `CodecService`.
- LSP/ISP: возвращает `BitmapImage` с предсказуемыми полями; интерфейс узкий и конкретный.
"""
from __future__ import annotations

import logging
from pathlib import Path

from bmp_studio.config import Settings
from bmp_studio.models.image_model import BitmapImage
from bmp_studio.services.codec_service import CodecService

logger = logging.getLogger(__name__)


class ImageService:
    def __init__(self, settings: Settings | None = None) -> None:
        self._codec = CodecService(settings)

    def load_image(self, file_path: str | Path) -> BitmapImage:
        """Загружает BMP с диска.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `BitmapImage` с заголовками и буфером пикселей.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            FormatError: если файл не является несжатым 24-битным BMP.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        image = self._codec.decode(path.read_bytes())
        logger.info("Loaded %s (%dx%d)", path, image.width, image.height)
        return image

    def save_image(self, image: BitmapImage, file_path: str | Path) -> Path:
        """Записывает изображение, создавая или перезаписывая файл."""
        path = Path(file_path)
        path.write_bytes(self._codec.encode(image))
        logger.info("Saved %s (%dx%d)", path, image.width, image.height)
        return path

    def describe(self, image: BitmapImage) -> str:
        """Текстовая сводка по заголовкам, по строке на поле."""
        fh, ih = image.file_header, image.info_header
        lines = [
            f"width: {ih.width}",
            f"height: {ih.height}",
            f"size: {ih.header_size}",
            f"file size: {fh.file_size}",
            f"pixel offset: {fh.pixel_offset}",
            f"planes: {ih.planes}",
            f"bit count: {ih.bit_count}",
            f"compression: {ih.compression}",
            f"image size: {ih.image_size}",
            f"resolution: {ih.x_pixels_per_meter}x{ih.y_pixels_per_meter}",
            f"colors used: {ih.colors_used}",
            f"colors important: {ih.colors_important}",
        ]
        return "\n".join(lines)
