"""Контроллер панели: оркестрация событий хоста и анализа обоев.

SOLID:
- SRP: класс решает, какой стиль применить; анализ изображений — в сервисах.
- DIP: хост панели и источник обоев — протоколы; конкретный оконный менеджер
  подключается снаружи.
Clean Code:
- Состояние неизменяемо: каждый обработчик возвращает новое `ControllerState`.
- Задержки и слияние частых событий — политика хоста, не контроллера.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Protocol
from urllib.parse import unquote

from adaptive_panel.config import PanelSettings
from adaptive_panel.models.analysis_model import PanelMode, PanelStyle, StyleResult
from adaptive_panel.services.analysis_service import DEFAULT_LUMINANCE_THRESHOLD, AnalysisService

logger = logging.getLogger("adaptive_panel.controller")

FILE_URI_PREFIX = "file://"


class PanelHost(Protocol):
    """Панель хоста, к которой применяется стиль."""

    def apply_style(self, style: PanelStyle) -> None: ...

    def clear_style(self) -> None: ...

    def panel_height(self) -> Optional[int]: ...


class WallpaperSource(Protocol):
    """Источник URI текущих обоев (отдельные обои для тёмной схемы)."""

    def wallpaper_uri(self, dark: bool) -> Optional[str]: ...


class ControllerPhase(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    APPLIED = "applied"


@dataclass(frozen=True)
class ControllerState:
    running: bool = False
    phase: ControllerPhase = ControllerPhase.IDLE
    current_style: Optional[PanelStyle] = None
    maximized: bool = False
    dark_mode: bool = False
    panel_mode: PanelMode = PanelMode.AUTOMATIC
    luminance_threshold: float = DEFAULT_LUMINANCE_THRESHOLD
    last_result: Optional[StyleResult] = None


def resolve_wallpaper_path(uri: Optional[str]) -> Optional[str]:
    """Превращает URI обоев в путь: снимает `file://` и декодирует %XX."""
    if not uri:
        return None
    if uri.startswith(FILE_URI_PREFIX):
        uri = uri[len(FILE_URI_PREFIX):]
    path = unquote(uri)
    return path or None


@dataclass
class PanelController:
    """Связывает события хоста со стилем панели.

    Ответственности:
    - Жизненный цикл: `start()` / `stop()`.
    - Обработка событий (смена обоев, настроек, цветовой схемы, развёрнутого окна).
    - Выбор стиля: ручной режим > развёрнутое окно > анализ обоев.
    """
    host: PanelHost
    wallpapers: WallpaperSource
    settings: PanelSettings = field(default_factory=PanelSettings)

    _analysis_service: AnalysisService = field(default_factory=AnalysisService)
    _state: ControllerState = field(default_factory=ControllerState)

    @property
    def state(self) -> ControllerState:
        return self._state

    def start(self) -> ControllerState:
        logger.debug("Starting panel controller")
        self._state = ControllerState(
            running=True,
            dark_mode=self._state.dark_mode,
            maximized=self._state.maximized,
            panel_mode=self.settings.panel_mode,
            luminance_threshold=self.settings.luminance_threshold,
        )
        return self._refresh()

    def stop(self) -> ControllerState:
        logger.debug("Stopping panel controller")
        self.host.clear_style()
        self._state = replace(
            self._state,
            running=False,
            phase=ControllerPhase.IDLE,
            current_style=None,
        )
        return self._state

    # ---- Handlers ----
    def on_wallpaper_changed(self) -> ControllerState:
        logger.debug("Wallpaper changed")
        return self._refresh()

    def on_settings_changed(
        self,
        mode: Optional[PanelMode] = None,
        threshold: Optional[float] = None,
    ) -> ControllerState:
        if not self._state.running:
            return self._state
        updates = {}
        if mode is not None:
            updates["panel_mode"] = PanelMode(mode)
        if threshold is not None:
            updates["luminance_threshold"] = float(threshold)
        logger.debug("Settings changed: %s", updates)
        self._state = replace(self._state, **updates)
        return self._refresh()

    def on_color_scheme_changed(self, dark: bool) -> ControllerState:
        if not self._state.running:
            return self._state
        logger.debug("Color scheme changed: dark=%s", dark)
        self._state = replace(self._state, dark_mode=dark)
        return self._refresh()

    def on_maximized_changed(self, maximized: bool) -> ControllerState:
        if not self._state.running or self._state.maximized == maximized:
            return self._state
        logger.debug("Maximized state changed: %s", maximized)
        self._state = replace(self._state, maximized=maximized)
        return self._refresh()

    def on_unlocked(self) -> ControllerState:
        """После разблокировки экрана стиль применяется заново."""
        return self._refresh(force=True)

    def on_overview_hidden(self) -> ControllerState:
        """Обзор скрыт: хост мог сбросить классы панели, стиль применяется заново."""
        logger.debug("Overview hidden")
        return self._refresh(force=True)

    # ---- Helpers ----
    def _refresh(self, force: bool = False) -> ControllerState:
        state = self._state
        if not state.running:
            return state

        manual = state.panel_mode.as_style()
        if manual is not None:
            return self._apply(manual, force=force)
        if state.maximized:
            return self._apply(PanelStyle.MAXIMIZED, force=force)

        path = resolve_wallpaper_path(self.wallpapers.wallpaper_uri(state.dark_mode))
        if path is None:
            return self._apply(PanelStyle.LIGHT, force=force)

        self._state = replace(state, phase=ControllerPhase.ANALYZING)
        panel_height = self.host.panel_height() or self.settings.panel_height
        result = self._analysis_service.analyze(path, state.luminance_threshold, panel_height)
        self._state = replace(self._state, last_result=result)
        return self._apply(result.style, force=force)

    def _apply(self, style: PanelStyle, force: bool = False) -> ControllerState:
        if force or self._state.current_style != style:
            logger.debug("Applying style: %s", style.value)
            self.host.apply_style(style)
        self._state = replace(self._state, phase=ControllerPhase.APPLIED, current_style=style)
        return self._state
