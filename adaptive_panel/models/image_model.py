"""Модели данных для изображений.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from PIL import Image

PixelBytes = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class ImageData:
    """Неизменяемая модель декодированного файла обоев и его метаданные.

    Fields:
        path: Путь к исходному файлу.
        pil_image: Загруженное изображение PIL ("RGB" или "RGBA").
        width: Ширина, px.
        height: Высота, px.
        mode: Режим PIL.
        size_bytes: Размер файла, если доступен.
    """
    path: Path
    pil_image: Image.Image
    width: int
    height: int
    mode: str
    size_bytes: Optional[int]


@dataclass(frozen=True)
class ImageBuffer:
    """Сырой растр: строки по `rowstride` байт, пиксели по `channels` байт.

    `rowstride` может быть больше `width * channels` (выравнивание строк или
    вырезанная подобласть, разделяющая байты родителя). `offset` — позиция
    первого пикселя области внутри `pixels`.
    """
    width: int
    height: int
    rowstride: int
    channels: int
    pixels: PixelBytes
    offset: int = 0

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    def view(self) -> memoryview:
        """Байты области, начиная с первого пикселя (без копирования)."""
        return memoryview(self.pixels)[self.offset:]
