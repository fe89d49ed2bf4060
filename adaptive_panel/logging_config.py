"""Настройка логирования для CLI и хостов панели."""
from __future__ import annotations

import logging
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(name)s %(levelname)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> int:
    """Настраивает корневой логгер и возвращает выбранный уровень.

    Неизвестное имя уровня трактуется как INFO. Отладочный вывод Pillow
    (разбор чанков PNG и т. п.) не опускается ниже INFO, чтобы не забивать
    трассировку анализа.
    """
    lvl = getattr(logging, (level or "INFO").upper(), logging.INFO)
    if not isinstance(lvl, int):
        lvl = logging.INFO
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    logging.getLogger("adaptive_panel").setLevel(lvl)
    logging.getLogger("PIL").setLevel(max(lvl, logging.INFO))
    return lvl
