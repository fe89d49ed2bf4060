"""Ошибки анализа обоев.

Все исключения наследуют `ValueError`: вызывающий код, которому не важна
причина, может ловить только его.
"""
from __future__ import annotations


class AnalysisError(ValueError):
    """Базовая ошибка анализа: результат по ней подменяется стилем `dark`."""


class DecodeFailure(AnalysisError):
    """Файл отсутствует, не читается или не является поддерживаемым растром."""


class EmptySampleRegion(AnalysisError):
    """Вырезанная область не дала ни одного сэмпла."""
