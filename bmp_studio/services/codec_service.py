"""Кодек несжатого 24-битного BMP: байты <-> `BitmapImage`.

Принципы:
- SRP: только двоичная раскладка (заголовки, выравнивание строк, порядок снизу вверх).
- Без частичных результатов: при любой ошибке изображение не возвращается.
"""
from __future__ import annotations

import logging

import numpy as np

from bmp_studio.config import Settings
from bmp_studio.models.errors import AllocationError, FormatError
from bmp_studio.models.image_model import (
    BMP_SIGNATURE,
    COMPRESSION_NONE,
    HEADERS_SIZE,
    SUPPORTED_BIT_COUNT,
    BitmapImage,
    FileHeader,
    InfoHeader,
)
from bmp_studio.models.pixel_buffer import CHANNELS, allocate_pixels, row_stride

logger = logging.getLogger(__name__)


class CodecService:
    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()

    def decode(self, data: bytes) -> BitmapImage:
        """Разбирает содержимое BMP-файла.

        Строки на диске идут снизу вверх: i-я прочитанная строка становится
        логической строкой `height - 1 - i`. Порядок каналов BGR меняется на RGB.

        Raises:
            FormatError: неверная сигнатура, неподдерживаемый заголовок или обрезанные данные.
            AllocationError: не удалось выделить буфер.
        """
        if len(data) < HEADERS_SIZE:
            raise FormatError("Файл слишком короткий для заголовков BMP")

        file_header = FileHeader.unpack(data[:FileHeader.STRUCT.size])
        info_header = InfoHeader.unpack(data[FileHeader.STRUCT.size:HEADERS_SIZE])
        self._validate(file_header, info_header)

        width, height = info_header.width, info_header.height
        stride = row_stride(width)
        offset = file_header.pixel_offset
        end = offset + stride * height
        if len(data) < end:
            raise FormatError(f"Данные пикселей обрезаны: ожидалось {end} байт, получено {len(data)}")

        raw = np.frombuffer(data, dtype=np.uint8, count=stride * height, offset=offset).reshape(height, stride)
        row_bytes = width * CHANNELS
        rows = raw[:, :row_bytes].reshape(height, width, CHANNELS)
        pixels = allocate_pixels(height, width)
        try:
            # снизу вверх -> сверху вниз, BGR -> RGB
            pixels[...] = rows[::-1, :, ::-1]
            padding = raw[::-1, row_bytes:].copy()
        except MemoryError as exc:
            raise AllocationError("Не удалось скопировать строки изображения") from exc

        logger.debug("Decoded %dx%d BMP, pixel offset %d", width, height, offset)
        return BitmapImage(
            file_header=file_header,
            info_header=info_header,
            pixels=pixels,
            gap=bytes(data[HEADERS_SIZE:offset]),
            padding=padding,
        )

    def encode(self, image: BitmapImage) -> bytes:
        """Собирает байты BMP. Заголовки пишутся как есть, без проверки.

        Строки пишутся снизу вверх и дополняются до кратности 4 байтам:
        прочитанными при декодировании байтами выравнивания, если размеры
        не менялись, иначе нулями.
        """
        width, height = image.info_header.width, image.info_header.height
        stride = row_stride(width)
        try:
            rows = np.zeros((height, stride), dtype=np.uint8)
        except MemoryError as exc:
            raise AllocationError("Не удалось выделить буфер записи") from exc
        row_bytes = width * CHANNELS
        rows[:, :row_bytes] = image.pixels[::-1, :, ::-1].reshape(height, row_bytes)
        if image.padding is not None and image.padding.shape == (height, stride - row_bytes):
            rows[:, row_bytes:] = image.padding[::-1]

        logger.debug("Encoding %dx%d BMP, stride %d", width, height, stride)
        return b"".join(
            (image.file_header.pack(), image.info_header.pack(), image.gap, rows.tobytes())
        )

    def _validate(self, file_header: FileHeader, info_header: InfoHeader) -> None:
        if file_header.signature != BMP_SIGNATURE:
            raise FormatError("Это не BMP: неверная сигнатура")
        if info_header.bit_count != SUPPORTED_BIT_COUNT:
            raise FormatError(f"Поддерживается только 24 бита на пиксель, а не {info_header.bit_count}")
        if info_header.compression != COMPRESSION_NONE:
            raise FormatError("Сжатые BMP не поддерживаются")
        if info_header.width <= 0 or info_header.height <= 0:
            raise FormatError(
                f"Недопустимые размеры изображения: {info_header.width}x{info_header.height}"
            )
        if info_header.width * info_header.height > self._settings.max_pixels:
            raise FormatError("Изображение слишком большое")
        if file_header.pixel_offset < HEADERS_SIZE:
            raise FormatError(f"Смещение пикселей {file_header.pixel_offset} попадает в заголовки")
