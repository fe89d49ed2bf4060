"""Анализ яркости полосы обоев под панелью и выбор стиля панели.

Выборка — шахматная: каждая вторая строка, шаг 4 px по горизонтали,
фаза столбцов чередуется (строки 0, 4, 8... — с 0; строки 2, 6, 10... — с 2).
Яркость считается по коэффициентам 0.299/0.587/0.114 (BT.601), без замены
на BT.709, чтобы результаты совпадали с эталонными.
"""
from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import List, Optional

import numpy as np

from adaptive_panel.models.analysis_model import PanelStyle, RGB, SampleStatistics, StyleResult
from adaptive_panel.models.errors import EmptySampleRegion
from adaptive_panel.models.image_model import PixelBytes
from adaptive_panel.services.image_service import ImageService

logger = logging.getLogger("adaptive_panel.analysis")

DEFAULT_LUMINANCE_THRESHOLD = 0.575
DEFAULT_PANEL_HEIGHT = 32

STD_THRESHOLD = 45 / 255
# Односторонний 95% доверительный интервал
CONFIDENCE_Z = 1.645
CONTRAST_RANGE = 0.5

LUMA_R, LUMA_G, LUMA_B = 0.299, 0.587, 0.114


class AnalysisService:
    def __init__(self, image_service: Optional[ImageService] = None) -> None:
        self._image_service = image_service or ImageService()

    def analyze(
        self,
        wallpaper_path: str | Path,
        luminance_threshold: float = DEFAULT_LUMINANCE_THRESHOLD,
        panel_height: int = DEFAULT_PANEL_HEIGHT,
    ) -> StyleResult:
        """Анализирует обои и выбирает стиль панели.

        Никогда не бросает исключений: при ошибке декодирования или пустой
        области возвращает `StyleResult.fallback` (тёмный стиль + сообщение).
        """
        try:
            image_data = self._image_service.load_image(wallpaper_path)
            buffer = self._image_service.to_buffer(image_data)
            strip = self._image_service.extract_top_strip(buffer, panel_height)
            stats = self.analyze_pixels(
                strip.view(), strip.width, strip.height, strip.rowstride, strip.channels
            )
        except (ValueError, OSError) as exc:
            logger.error("Failed to analyze %s: %s", wallpaper_path, exc)
            return StyleResult.fallback(str(exc))

        style = self.classify(stats, luminance_threshold)
        return StyleResult(style=style, stats=stats)

    def analyze_pixels(
        self,
        pixels: PixelBytes,
        width: int,
        height: int,
        rowstride: int,
        channels: int,
    ) -> SampleStatistics:
        """Считает статистику яркости по шахматной выборке.

        Args:
            pixels: Байты растра; первый байт — первый пиксель области.
            width, height: Размер области, px.
            rowstride: Байт на строку (может превышать `width * channels`).
            channels: 3 (RGB) или 4 (RGBA; альфа игнорируется).

        Raises:
            EmptySampleRegion: выборка пуста.
            ValueError: буфер короче заявленной геометрии.
        """
        if channels not in (3, 4):
            raise ValueError(f"Ожидается 3 или 4 канала, получено {channels}")

        # Смещения сэмплов в порядке обхода: строка за строкой, слева направо
        offsets: List[np.ndarray] = []
        for y in range(0, height, 2):
            x_offset = 0 if y % 4 == 0 else 2
            xs = np.arange(x_offset, width, 4, dtype=np.int64)
            if xs.size:
                offsets.append(y * rowstride + xs * channels)

        if not offsets:
            raise EmptySampleRegion(f"Область {width}x{height} не содержит сэмплов")

        index = np.concatenate(offsets)
        data = np.frombuffer(pixels, dtype=np.uint8)
        if int(index.max()) + 2 >= data.size:
            raise ValueError(
                f"Буфер ({data.size} байт) короче области {width}x{height}, rowstride={rowstride}"
            )

        rgb = data[index[:, None] + np.arange(3)]
        norm = rgb.astype(np.float64) / 255.0
        luminosity = LUMA_R * norm[:, 0] + LUMA_G * norm[:, 1] + LUMA_B * norm[:, 2]

        count = int(luminosity.size)
        # argmin/argmax возвращают первое вхождение: при равенстве — первый сэмпл
        i_min = int(np.argmin(luminosity))
        i_max = int(np.argmax(luminosity))
        min_lum = float(luminosity[i_min])
        max_lum = float(luminosity[i_max])

        if min_lum == max_lum:
            mean = min_lum
            std = 0.0
        else:
            mean = float(np.sum(luminosity)) / count
            variance = float(np.sum(luminosity * luminosity)) / count - mean * mean
            std = math.sqrt(max(0.0, variance))
            mean = min(max(mean, min_lum), max_lum)

        return SampleStatistics(
            mean_luminance=mean,
            luminance_std=std,
            min_luminosity=min_lum,
            max_luminosity=max_lum,
            min_rgb=RGB(*(int(c) for c in rgb[i_min])),
            max_rgb=RGB(*(int(c) for c in rgb[i_max])),
            sample_count=count,
            width=width,
            height=height,
        )

    def classify(self, stats: SampleStatistics, luminance_threshold: float) -> PanelStyle:
        """Выбирает стиль по таблице (тёмный фон?) x (пёстрый фон?)."""
        mean = stats.mean_luminance
        std = stats.luminance_std

        is_dark = mean < luminance_threshold
        high_variance = std > STD_THRESHOLD
        # Истинное среднее может оказаться по другую сторону порога
        near_boundary = mean < luminance_threshold and mean + CONFIDENCE_Z * std > luminance_threshold
        # Например, светлое небо с тёмным деревом в углу под иконками
        high_contrast = stats.luminance_range > CONTRAST_RANGE
        is_busy = high_variance or near_boundary or high_contrast

        if is_dark:
            style = PanelStyle.TRANSLUCENT_DARK if is_busy else PanelStyle.DARK
        else:
            style = PanelStyle.TRANSLUCENT_LIGHT if is_busy else PanelStyle.LIGHT

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "sample=%dx%d (%d px) mean=%.3f std=%.3f darkest=%.3f %s lightest=%.3f %s",
                stats.width, stats.height, stats.sample_count, mean, std,
                stats.min_luminosity, stats.min_rgb.to_hex(),
                stats.max_luminosity, stats.max_rgb.to_hex(),
            )
            logger.debug(
                "is_dark=%s (threshold=%.3f) is_busy=%s (high_variance=%s, near_boundary=%s, "
                "high_contrast=%s, range=%.3f) -> %s",
                is_dark, luminance_threshold, is_busy, high_variance, near_boundary,
                high_contrast, stats.luminance_range, style.value,
            )
        return style


def analyze(
    wallpaper_path: str | Path,
    luminance_threshold: float = DEFAULT_LUMINANCE_THRESHOLD,
    panel_height: int = DEFAULT_PANEL_HEIGHT,
) -> StyleResult:
    """Точка входа: `AnalysisService().analyze(...)`."""
    return AnalysisService().analyze(wallpaper_path, luminance_threshold, panel_height)
