"""Типизированные ошибки ядра.

Неверные параметры сообщаются встроенным `ValueError`, ошибки файлов — `OSError`.
"""
from __future__ import annotations


class RasterError(Exception):
    """Базовая ошибка обработки BMP."""


class FormatError(RasterError):
    """Файл не является несжатым 24-битным BMP или повреждён."""


class AllocationError(RasterError):
    """Не удалось выделить память под буфер пикселей."""
