"""Настройки приложения и подключение логирования.

Принципы:
- SRP: только значения по умолчанию и их применение, без бизнес-логики.
- Неизменяемость (`frozen=True`): настройки передаются в сервисы явно.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    """Параметры запуска.

    Fields:
        default_output: Имя выходного файла, если вызывающая сторона его не указала.
        max_pixels: Предел width*height при декодировании (защита от подделанных заголовков).
        log_level: Уровень логирования для `configure_logging`.
    """
    default_output: str = "out.bmp"
    max_pixels: int = 100_000_000
    log_level: str = "WARNING"


def configure_logging(settings: Settings) -> None:
    """Включает базовый обработчик логов на уровне из настроек."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Неизвестный уровень логирования: {settings.log_level}")
    logging.basicConfig(level=level, format=LOG_FORMAT)
