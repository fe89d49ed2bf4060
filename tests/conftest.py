from pathlib import Path
from typing import Callable, Tuple

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def make_wallpaper(tmp_path: Path) -> Callable[..., Path]:
    """Writes a PNG built from an (H, W, 3|4) uint8 array or a solid color."""

    def _make(
        name: str = "wallpaper.png",
        size: Tuple[int, int] = (200, 100),
        color: Tuple[int, ...] = (0, 0, 0),
        pixels: np.ndarray | None = None,
    ) -> Path:
        if pixels is None:
            width, height = size
            pixels = np.empty((height, width, len(color)), dtype=np.uint8)
            pixels[:, :] = color
        path = tmp_path / name
        Image.fromarray(pixels.astype(np.uint8)).save(path)
        return path

    return _make


def checkerboard(width: int, height: int, block: int) -> np.ndarray:
    ys, xs = np.mgrid[0:height, 0:width]
    white = ((xs // block + ys // block) % 2).astype(bool)
    out = np.zeros((height, width, 3), dtype=np.uint8)
    out[white] = 255
    return out


def horizontal_gradient(width: int, height: int) -> np.ndarray:
    row = np.linspace(0, 255, width).astype(np.uint8)
    out = np.empty((height, width, 3), dtype=np.uint8)
    out[:, :, :] = row[None, :, None]
    return out
