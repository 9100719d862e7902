"""Модели данных BMP: заголовки и изображение.

Принципы:
- SRP: только структура данных и упаковка заголовков, без алгоритмов обработки.
- Единственный владелец буфера: замена пикселей идёт через `replace_pixels`,
  который синхронно обновляет заголовок.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from bmp_studio.models.pixel_buffer import allocate_pixels, row_stride

BMP_SIGNATURE = 0x4D42  # b"BM" little-endian
SUPPORTED_BIT_COUNT = 24
COMPRESSION_NONE = 0


class Channel(str, Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"

    @property
    def position(self) -> int:
        """Номер канала в буфере (порядок RGB)."""
        return ("red", "green", "blue").index(self.value)


class Axis(str, Enum):
    X = "x"
    Y = "y"
    XY = "xy"


class Orientation(str, Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


@dataclass
class FileHeader:
    """BITMAPFILEHEADER, 14 байт."""
    STRUCT = struct.Struct("<HIHHI")

    signature: int = BMP_SIGNATURE
    file_size: int = 0
    reserved1: int = 0
    reserved2: int = 0
    pixel_offset: int = 0

    @classmethod
    def unpack(cls, data: bytes) -> "FileHeader":
        return cls(*cls.STRUCT.unpack(data))

    def pack(self) -> bytes:
        return self.STRUCT.pack(
            self.signature, self.file_size, self.reserved1, self.reserved2, self.pixel_offset
        )


@dataclass
class InfoHeader:
    """BITMAPINFOHEADER, 40 байт. Ширина, высота и разрешение — знаковые."""
    STRUCT = struct.Struct("<IiiHHIIiiII")

    header_size: int = 40
    width: int = 0
    height: int = 0
    planes: int = 1
    bit_count: int = SUPPORTED_BIT_COUNT
    compression: int = COMPRESSION_NONE
    image_size: int = 0
    x_pixels_per_meter: int = 0
    y_pixels_per_meter: int = 0
    colors_used: int = 0
    colors_important: int = 0

    @classmethod
    def unpack(cls, data: bytes) -> "InfoHeader":
        return cls(*cls.STRUCT.unpack(data))

    def pack(self) -> bytes:
        return self.STRUCT.pack(
            self.header_size,
            self.width,
            self.height,
            self.planes,
            self.bit_count,
            self.compression,
            self.image_size,
            self.x_pixels_per_meter,
            self.y_pixels_per_meter,
            self.colors_used,
            self.colors_important,
        )


HEADERS_SIZE = FileHeader.STRUCT.size + InfoHeader.STRUCT.size


@dataclass
class BitmapImage:
    """Изображение BMP: заголовки + буфер пикселей.

    Fields:
        file_header: Файловый заголовок.
        info_header: Информационный заголовок.
        pixels: `uint8` массив `(height, width, 3)`, строки сверху вниз, каналы RGB.
        gap: Байты между заголовками и началом пикселей (сохраняются как есть).
        padding: Байты выравнивания строк `(height, stride - width*3)` в порядке
            логических строк; `None`, если их нужно записать нулями.
    """
    file_header: FileHeader
    info_header: InfoHeader
    pixels: np.ndarray
    gap: bytes = field(default=b"", repr=False)
    padding: np.ndarray | None = field(default=None, repr=False)

    @property
    def width(self) -> int:
        return self.info_header.width

    @property
    def height(self) -> int:
        return self.info_header.height

    def replace_pixels(self, pixels: np.ndarray) -> None:
        """Подменяет буфер новым; при изменении размеров обновляет заголовки.

        Меняются только ширина, высота и размер данных; размер файла и прочие
        поля остаются как есть. Сохранённое выравнивание строк отбрасывается.
        """
        height, width = pixels.shape[:2]
        if (width, height) != (self.width, self.height):
            self.info_header.width = width
            self.info_header.height = height
            self.info_header.image_size = height * row_stride(width)
            self.padding = None
        self.pixels = pixels

    @classmethod
    def blank(cls, width: int, height: int, pixels: np.ndarray | None = None) -> "BitmapImage":
        """Новое изображение с согласованными заголовками (по умолчанию — чёрное)."""
        if pixels is None:
            pixels = allocate_pixels(height, width)
        image_size = height * row_stride(width)
        return cls(
            file_header=FileHeader(file_size=HEADERS_SIZE + image_size, pixel_offset=HEADERS_SIZE),
            info_header=InfoHeader(width=width, height=height, image_size=image_size),
            pixels=pixels,
        )
