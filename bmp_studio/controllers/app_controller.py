"""Контроллер: точка входа для внешнего вызывающего кода (CLI и т.п.).

SOLID:
- SRP: класс проверяет параметры и выбирает сервис; алгоритмов здесь нет.
- DIP: зависит от сервисов как от ролей; конкретные реализации инкапсулированы.
Clean Code:
- Все проверки выполняются до изменения изображения, поэтому ошибка никогда
  не оставляет наполовину изменённый буфер.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from bmp_studio.config import Settings
from bmp_studio.models.image_model import Axis, BitmapImage, Channel, Orientation
from bmp_studio.models.pixel_buffer import Color
from bmp_studio.services.draw_service import DrawService
from bmp_studio.services.image_service import ImageService
from bmp_studio.services.process_service import ProcessService
from bmp_studio.services.resample_service import ResampleService
from bmp_studio.services.transform_service import SUPPORTED_ANGLES, TransformService

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    SQUARE = "squared_lines"
    RGB_FILTER = "rgbfilter"
    ROTATE = "rotate"
    BLUR = "blur"
    INFO = "info"
    COMPRESS = "compress"
    SHIFT = "shift"
    PAVING = "paving"
    DIAGONAL_MIRROR = "diag_mirror"
    RHOMBUS = "rhombus"
    FLIP_SQUARES = "flip_squares"
    RECOLOR = "circle_pixel"
    OUTSIDE_RECT = "outside_rect"


@dataclass
class OperationResult:
    """Результат одной операции.

    Fields:
        image: Изменённое (или то же самое) изображение.
        report: Текстовый отчёт, только для `info`.
    """
    image: BitmapImage
    report: Optional[str] = None


# ---- Проверка параметров ----
def _int(params: Mapping[str, Any], name: str, minimum: Optional[int] = None) -> int:
    if name not in params:
        raise ValueError(f"Не задан параметр {name}")
    value = params[name]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Параметр {name} должен быть целым числом: {value!r}")
    if minimum is not None and value < minimum:
        raise ValueError(f"Параметр {name} должен быть >= {minimum}: {value}")
    return value


def _point(params: Mapping[str, Any], name: str) -> Tuple[int, int]:
    value = params.get(name)
    if not isinstance(value, (tuple, list)) or len(value) != 2:
        raise ValueError(f"Параметр {name} должен быть парой координат X.Y: {value!r}")
    x, y = value
    return _int({name: x}, name), _int({name: y}, name)


def _color(params: Mapping[str, Any], name: str) -> Color:
    value = params.get(name)
    if not isinstance(value, (tuple, list)) or len(value) != 3:
        raise ValueError(f"Параметр {name} должен быть цветом R.G.B: {value!r}")
    r, g, b = (_int({name: c}, name) for c in value)
    if not all(0 <= c <= 255 for c in (r, g, b)):
        raise ValueError(f"Компоненты цвета {name} должны быть в диапазоне 0..255: {value!r}")
    return r, g, b


@dataclass
class AppController:
    """Связывает внешний вызов с прикладной логикой.

    Ответственности:
    - Разбор тега операции и проверка параметров.
    - Вызов нужного сервиса над изображением.
    - Полный цикл «файл -> операция -> файл» через `ImageService`.
    """
    settings: Settings = field(default_factory=Settings)

    _image_service: ImageService = field(init=False)
    _draw_service: DrawService = field(default_factory=DrawService, init=False)
    _process_service: ProcessService = field(default_factory=ProcessService, init=False)
    _transform_service: TransformService = field(default_factory=TransformService, init=False)
    _resample_service: ResampleService = field(default_factory=ResampleService, init=False)

    def __post_init__(self) -> None:
        self._image_service = ImageService(self.settings)

    def run(self, image: BitmapImage, operation: Operation | str, params: Mapping[str, Any]) -> OperationResult:
        """Применяет одну операцию к изображению.

        Raises:
            ValueError: неизвестная операция или недопустимые параметры.
            AllocationError: не удалось выделить буфер.
        """
        try:
            op = Operation(operation)
        except ValueError as exc:
            raise ValueError(f"Неизвестная операция: {operation!r}") from exc

        handlers: Dict[Operation, Callable[[BitmapImage, Mapping[str, Any]], Optional[str]]] = {
            Operation.SQUARE: self._square,
            Operation.RGB_FILTER: self._rgb_filter,
            Operation.ROTATE: self._rotate,
            Operation.BLUR: self._blur,
            Operation.INFO: self._info,
            Operation.COMPRESS: self._compress,
            Operation.SHIFT: self._shift,
            Operation.PAVING: self._paving,
            Operation.DIAGONAL_MIRROR: self._diagonal_mirror,
            Operation.RHOMBUS: self._rhombus,
            Operation.FLIP_SQUARES: self._flip_squares,
            Operation.RECOLOR: self._recolor,
            Operation.OUTSIDE_RECT: self._outside_rect,
        }
        logger.info("Applying %s to %dx%d image", op.value, image.width, image.height)
        report = handlers[op](image, params)
        return OperationResult(image=image, report=report)

    def process_file(
        self,
        input_path: str | Path,
        operation: Operation | str,
        params: Mapping[str, Any],
        output_path: str | Path | None = None,
    ) -> OperationResult:
        """Загружает файл, применяет операцию и сохраняет результат.

        Результат записывается всегда, в том числе для `info`.
        """
        image = self._image_service.load_image(input_path)
        result = self.run(image, operation, params)
        self._image_service.save_image(result.image, output_path or self.settings.default_output)
        return result

    # ---- Handlers ----
    def _square(self, image: BitmapImage, params: Mapping[str, Any]) -> None:
        x, y = _point(params, "left_up")
        size = _int(params, "side_size", minimum=0)
        thickness = _int(params, "thickness", minimum=0)
        color = _color(params, "color")
        fill = bool(params.get("fill", False))
        fill_color = _color(params, "fill_color") if fill else None
        self._draw_service.draw_square(image.pixels, x, y, size, thickness, color, fill, fill_color)

    def _rgb_filter(self, image: BitmapImage, params: Mapping[str, Any]) -> None:
        try:
            channel = Channel(params.get("component_name"))
        except ValueError as exc:
            raise ValueError(f"Неизвестный канал: {params.get('component_name')!r}") from exc
        value = _int(params, "component_value", minimum=0)
        if value > 255:
            raise ValueError(f"Значение канала должно быть в диапазоне 0..255: {value}")
        self._process_service.apply_channel(image.pixels, channel, value)

    def _rotate(self, image: BitmapImage, params: Mapping[str, Any]) -> None:
        left_x, left_y = _point(params, "left_up")
        right_x, right_y = _point(params, "right_down")
        angle = _int(params, "angle")
        if angle not in SUPPORTED_ANGLES:
            raise ValueError(f"Недопустимый угол поворота: {angle}")
        if right_x < left_x or right_y < left_y:
            raise ValueError("Правый нижний угол должен быть не левее и не выше левого верхнего")
        self._transform_service.rotate_region(image, left_x, left_y, right_x, right_y, angle)

    def _blur(self, image: BitmapImage, params: Mapping[str, Any]) -> None:
        self._resample_service.blur(image, _int(params, "size", minimum=0))

    def _info(self, image: BitmapImage, params: Mapping[str, Any]) -> str:
        return self._image_service.describe(image)

    def _compress(self, image: BitmapImage, params: Mapping[str, Any]) -> None:
        factor = _int(params, "factor", minimum=1)
        if factor > min(image.width, image.height):
            raise ValueError(f"Коэффициент сжатия больше размеров изображения: {factor}")
        self._resample_service.compress(image, factor)

    def _shift(self, image: BitmapImage, params: Mapping[str, Any]) -> None:
        step = _int(params, "step")
        try:
            axis = Axis(params.get("axis"))
        except ValueError as exc:
            raise ValueError(f"Неизвестная ось: {params.get('axis')!r}") from exc
        self._transform_service.shift(image, step, axis)

    def _paving(self, image: BitmapImage, params: Mapping[str, Any]) -> None:
        left_x, left_y = _point(params, "left_up")
        right_x, right_y = _point(params, "right_down")
        if right_x <= left_x or right_y <= left_y:
            raise ValueError("Область замощения должна быть непустой")
        self._transform_service.paving(image, left_x, left_y, right_x, right_y)

    def _diagonal_mirror(self, image: BitmapImage, params: Mapping[str, Any]) -> None:
        left_x, left_y = _point(params, "left_up")
        right_x, right_y = _point(params, "right_down")
        if right_x < left_x or right_y < left_y:
            raise ValueError("Правый нижний угол должен быть не левее и не выше левого верхнего")
        self._transform_service.diagonal_mirror(image, left_x, left_y, right_x, right_y)

    def _rhombus(self, image: BitmapImage, params: Mapping[str, Any]) -> None:
        x, y = _point(params, "upper_vertex")
        size = _int(params, "size", minimum=0)
        self._draw_service.draw_rhombus(image.pixels, x, y, size, _color(params, "color"))

    def _flip_squares(self, image: BitmapImage, params: Mapping[str, Any]) -> None:
        size = _int(params, "square_size", minimum=1)
        try:
            orientation = Orientation(params.get("orientation"))
        except ValueError as exc:
            raise ValueError(f"Неизвестная ориентация: {params.get('orientation')!r}") from exc
        self._transform_service.flip_blocks(image.pixels, size, orientation)

    def _recolor(self, image: BitmapImage, params: Mapping[str, Any]) -> None:
        target = _color(params, "color")
        radius = _int(params, "size", minimum=0)
        new_color = _color(params, "new_color")
        self._process_service.recolor_neighbors(image.pixels, target, radius, new_color)

    def _outside_rect(self, image: BitmapImage, params: Mapping[str, Any]) -> None:
        left_x, left_y = _point(params, "left_up")
        right_x, right_y = _point(params, "right_down")
        self._draw_service.fill_outside(image.pixels, left_x, left_y, right_x, right_y, _color(params, "color"))
