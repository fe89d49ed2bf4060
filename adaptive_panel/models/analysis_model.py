"""Модели результата анализа обоев.

Принципы:
- SRP: только значения; расчёты живут в `AnalysisService`.
- Неизменяемость: статистика и результат создаются один раз на вызов.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

FALLBACK_MEAN_LUMINANCE = 0.5


class PanelStyle(str, Enum):
    """Стиль панели. `MAXIMIZED` назначает только контроллер."""
    DARK = "dark"
    LIGHT = "light"
    TRANSLUCENT_DARK = "translucent-dark"
    TRANSLUCENT_LIGHT = "translucent-light"
    MAXIMIZED = "maximized"


class PanelMode(str, Enum):
    """Режим панели из настроек: автоматический или фиксированный стиль."""
    AUTOMATIC = "automatic"
    DARK = "dark"
    LIGHT = "light"
    TRANSLUCENT_DARK = "translucent-dark"
    TRANSLUCENT_LIGHT = "translucent-light"

    def as_style(self) -> Optional[PanelStyle]:
        if self is PanelMode.AUTOMATIC:
            return None
        return PanelStyle(self.value)


@dataclass(frozen=True)
class RGB:
    r: int
    g: int
    b: int

    def to_hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    def to_dict(self) -> Dict[str, int]:
        return {"r": self.r, "g": self.g, "b": self.b}


@dataclass(frozen=True)
class SampleStatistics:
    """Статистика яркости по шахматной выборке.

    Fields:
        mean_luminance: Средняя яркость, [0, 1].
        luminance_std: Стандартное отклонение яркости, >= 0.
        min_luminosity / max_luminosity: Крайние значения яркости, [0, 1].
        min_rgb / max_rgb: Цвет самого тёмного / светлого сэмпла (первый при равенстве).
        sample_count: Число сэмплов, > 0.
        width / height: Размер анализируемой области, px.
    """
    mean_luminance: float
    luminance_std: float
    min_luminosity: float
    max_luminosity: float
    min_rgb: RGB
    max_rgb: RGB
    sample_count: int
    width: int
    height: int

    @property
    def luminance_range(self) -> float:
        return self.max_luminosity - self.min_luminosity


@dataclass(frozen=True)
class StyleResult:
    """Итог одного вызова `analyze`: стиль и статистика либо причина отказа."""
    style: PanelStyle
    stats: Optional[SampleStatistics] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def mean_luminance(self) -> float:
        if self.stats is None:
            return FALLBACK_MEAN_LUMINANCE
        return self.stats.mean_luminance

    @classmethod
    def fallback(cls, message: str) -> "StyleResult":
        """Безопасный результат при невозможности анализа: тёмный стиль."""
        return cls(style=PanelStyle.DARK, error=message)

    def to_dict(self) -> Dict[str, Any]:
        """Плоское представление для внешних потребителей (JSON, хост)."""
        if self.stats is None:
            return {
                "style": self.style.value,
                "meanLuminance": FALLBACK_MEAN_LUMINANCE,
                "error": self.error,
            }
        s = self.stats
        return {
            "style": self.style.value,
            "meanLuminance": s.mean_luminance,
            "luminanceStd": s.luminance_std,
            "minLuminosity": s.min_luminosity,
            "maxLuminosity": s.max_luminosity,
            "minRGB": s.min_rgb.to_dict(),
            "maxRGB": s.max_rgb.to_dict(),
            "sampleCount": s.sample_count,
            "width": s.width,
            "height": s.height,
        }
