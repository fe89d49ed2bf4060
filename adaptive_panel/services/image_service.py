"""Загрузка обоев с диска и вырезание полосы под панелью.

Принципы:
- SRP: класс отвечает только за декодирование и геометрию растра.
- OCP: новые источники (стрим, URL) можно добавить отдельными методами.
- LSP/ISP: возвращает `ImageData`/`ImageBuffer` с предсказуемыми полями.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image

from adaptive_panel.models.errors import DecodeFailure, EmptySampleRegion
from adaptive_panel.models.image_model import ImageBuffer, ImageData

logger = logging.getLogger("adaptive_panel.image")

# Отступ от краёв: скругления и сглаживание не должны попадать в выборку.
PADDING = 4


class ImageService:
    def load_image(self, file_path: str | Path) -> ImageData:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `ImageData` c `PIL.Image.Image` в режиме "RGBA" (если есть альфа)
            или "RGB", размерами, режимом и размером файла.

        Raises:
            DecodeFailure: файл не существует, не читается или не распознан.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise DecodeFailure(f"Файл не найден: {path}")

        try:
            with Image.open(path) as src:
                if src.mode.startswith("I") or src.mode == "F":
                    pil_image = self._to_8bit(src).convert("RGB")
                else:
                    has_alpha = "A" in src.getbands() or "transparency" in src.info
                    pil_image = src.convert("RGBA" if has_alpha else "RGB")
        except (OSError, SyntaxError, Image.DecompressionBombError) as exc:
            # UnidentifiedImageError тоже OSError; сюда же — обрезанные файлы
            raise DecodeFailure(f"Файл не является изображением: {path} ({exc})") from exc

        width, height = pil_image.size
        try:
            size_bytes: Optional[int] = path.stat().st_size
        except OSError:
            size_bytes = None

        logger.debug("Loaded %s: %dx%d %s", path, width, height, pil_image.mode)
        return ImageData(
            path=path,
            pil_image=pil_image,
            width=width,
            height=height,
            mode=pil_image.mode,
            size_bytes=size_bytes,
        )

    def _to_8bit(self, image: Image.Image) -> Image.Image:
        """Масштабирует одноканальные 16/32-битные режимы ("I;16*", "I", "F") в "L".

        `convert` для этих режимов обрезает значения по 255 вместо
        масштабирования. Целые считаются 16-битными (старший байт);
        "F" в диапазоне [0, 1] растягивается до [0, 255].
        """
        arr = np.asarray(image, dtype=np.float64)
        if image.mode == "F" and arr.size and float(arr.max()) <= 1.0:
            arr = arr * 255.0
        else:
            arr = arr / 256.0
        return Image.fromarray(np.clip(arr, 0, 255).astype(np.uint8))

    def to_buffer(self, image_data: ImageData) -> ImageBuffer:
        """Упаковывает изображение PIL в плотный растр (`rowstride = width * channels`)."""
        channels = len(image_data.pil_image.getbands())
        if channels not in (3, 4):
            raise DecodeFailure(f"Неподдерживаемый режим изображения: {image_data.mode}")
        return ImageBuffer(
            width=image_data.width,
            height=image_data.height,
            rowstride=image_data.width * channels,
            channels=channels,
            pixels=image_data.pil_image.tobytes(),
        )

    def extract_top_strip(self, image: ImageBuffer, panel_height: int) -> ImageBuffer:
        """Вырезает полосу под панелью без `PADDING` px по краям.

        Область начинается в (PADDING, PADDING), ширина
        `max(1, W - 2*PADDING)`, высота `max(0, min(panel_height, H) - PADDING)`.
        Результат разделяет байты и `rowstride` исходного буфера.

        Raises:
            ValueError: `panel_height` < 1.
            EmptySampleRegion: область не помещается в изображение.
        """
        if panel_height < 1:
            raise ValueError(f"Высота панели должна быть >= 1, получено {panel_height}")

        width = max(1, image.width - PADDING * 2)
        height = max(0, min(panel_height, image.height) - PADDING)
        if PADDING + width > image.width or PADDING + height > image.height:
            raise EmptySampleRegion(
                f"Изображение {image.width}x{image.height} меньше отступа {PADDING}px"
            )

        return ImageBuffer(
            width=width,
            height=height,
            rowstride=image.rowstride,
            channels=image.channels,
            pixels=image.pixels,
            offset=image.offset + PADDING * image.rowstride + PADDING * image.channels,
        )
