import logging

import numpy as np
import pytest
from PIL import Image

from adaptive_panel.models.analysis_model import PanelStyle, RGB, SampleStatistics
from adaptive_panel.models.errors import EmptySampleRegion
from adaptive_panel.services.analysis_service import (
    STD_THRESHOLD,
    AnalysisService,
    analyze,
)
from conftest import checkerboard, horizontal_gradient

WIDTH, HEIGHT, CHANNELS, ROWSTRIDE = 8, 4, 3, 32


def _padded_buffer(fill=0, padding=255):
    """8x4 RGB raster with 8 padding bytes at the end of every row."""
    data = bytearray([padding] * ROWSTRIDE * HEIGHT)
    for y in range(HEIGHT):
        for i in range(WIDTH * CHANNELS):
            data[y * ROWSTRIDE + i] = fill
    return data


def _set(data, x, y, rgb):
    start = y * ROWSTRIDE + x * CHANNELS
    data[start:start + 3] = bytes(rgb)


def _stats(mean, std, lo=None, hi=None):
    lo = mean if lo is None else lo
    hi = mean if hi is None else hi
    return SampleStatistics(
        mean_luminance=mean,
        luminance_std=std,
        min_luminosity=lo,
        max_luminosity=hi,
        min_rgb=RGB(0, 0, 0),
        max_rgb=RGB(255, 255, 255),
        sample_count=10,
        width=10,
        height=10,
    )


# ------------------------------------------------------------------
# analyze_pixels
# ------------------------------------------------------------------

def test_sampling_ignores_row_padding_and_unsampled_pixels():
    data = _padded_buffer(fill=0, padding=255)
    _set(data, 1, 0, (255, 255, 255))
    _set(data, 3, 2, (255, 255, 255))
    _set(data, 0, 1, (255, 255, 255))
    stats = AnalysisService().analyze_pixels(bytes(data), WIDTH, HEIGHT, ROWSTRIDE, CHANNELS)
    # rows 0 and 2; columns 0,4 on row 0 and 2,6 on row 2
    assert stats.sample_count == 4
    assert stats.mean_luminance == 0.0
    assert stats.luminance_std == 0.0


def test_sampling_tracks_extreme_colors():
    data = _padded_buffer(fill=0)
    _set(data, 0, 0, (0, 255, 0))
    _set(data, 4, 0, (255, 0, 0))
    _set(data, 2, 2, (0, 0, 255))
    _set(data, 6, 2, (0, 255, 0))
    stats = AnalysisService().analyze_pixels(bytes(data), WIDTH, HEIGHT, ROWSTRIDE, CHANNELS)
    assert stats.min_rgb == RGB(0, 0, 255)
    assert stats.max_rgb == RGB(0, 255, 0)
    assert stats.min_luminosity == pytest.approx(0.114)
    assert stats.max_luminosity == pytest.approx(0.587)
    assert stats.mean_luminance == pytest.approx((0.587 * 2 + 0.299 + 0.114) / 4)


def test_sampling_ignores_alpha():
    width, height, channels = 4, 1, 4
    pixels = bytes([10, 20, 30, 0] * width)
    stats = AnalysisService().analyze_pixels(pixels, width, height, width * channels, channels)
    assert stats.sample_count == 1
    assert stats.min_rgb == RGB(10, 20, 30)


def test_sample_count_for_panel_strip():
    width, height = 12, 28
    pixels = bytes(width * height * 3)
    stats = AnalysisService().analyze_pixels(pixels, width, height, width * 3, 3)
    assert stats.sample_count == 14 * 3
    assert (stats.width, stats.height) == (width, height)


def test_empty_region_is_an_error():
    with pytest.raises(EmptySampleRegion):
        AnalysisService().analyze_pixels(b"", 10, 0, 30, 3)


def test_short_buffer_is_an_error():
    with pytest.raises(ValueError):
        AnalysisService().analyze_pixels(bytes(10), WIDTH, HEIGHT, ROWSTRIDE, CHANNELS)


def test_unsupported_channel_count():
    with pytest.raises(ValueError):
        AnalysisService().analyze_pixels(bytes(64), WIDTH, HEIGHT, 16, 2)


# ------------------------------------------------------------------
# classify
# ------------------------------------------------------------------

@pytest.mark.parametrize(
    "stats,expected",
    [
        (_stats(0.3, 0.0), PanelStyle.DARK),
        (_stats(0.3, 0.2, 0.0, 0.45), PanelStyle.TRANSLUCENT_DARK),
        (_stats(0.8, 0.01, 0.75, 0.85), PanelStyle.LIGHT),
        (_stats(0.8, 0.1, 0.4, 1.0), PanelStyle.TRANSLUCENT_LIGHT),
        (_stats(0.7, 0.2, 0.6, 0.9), PanelStyle.TRANSLUCENT_LIGHT),
    ],
)
def test_classify_table(stats, expected):
    assert AnalysisService().classify(stats, 0.575) is expected


def test_classify_near_boundary_is_busy():
    # 0.5 + 1.645 * 0.05 = 0.582 > 0.575
    stats = _stats(0.5, 0.05, 0.4, 0.6)
    assert stats.luminance_std < STD_THRESHOLD
    assert AnalysisService().classify(stats, 0.575) is PanelStyle.TRANSLUCENT_DARK


def test_classify_mean_at_threshold_is_light():
    assert AnalysisService().classify(_stats(0.575, 0.0), 0.575) is PanelStyle.LIGHT


def test_classify_logs_trace(caplog):
    with caplog.at_level(logging.DEBUG, logger="adaptive_panel.analysis"):
        AnalysisService().classify(_stats(0.3, 0.0), 0.575)
    assert "is_dark=True" in caplog.text
    assert "#FFFFFF" in caplog.text


# ------------------------------------------------------------------
# analyze (file level)
# ------------------------------------------------------------------

def test_all_black_is_dark(make_wallpaper):
    result = analyze(make_wallpaper(color=(0, 0, 0)))
    assert result.ok
    assert result.style is PanelStyle.DARK
    assert result.stats.mean_luminance == 0.0
    assert result.stats.luminance_std == 0.0


def test_all_white_is_light(make_wallpaper):
    result = analyze(make_wallpaper(color=(255, 255, 255)))
    assert result.style is PanelStyle.LIGHT
    assert result.stats.mean_luminance == pytest.approx(1.0)
    assert result.stats.luminance_std == 0.0


def test_checkerboard_is_translucent(make_wallpaper):
    result = analyze(make_wallpaper(pixels=checkerboard(200, 100, 16)))
    stats = result.stats
    assert stats.mean_luminance == pytest.approx(0.5, abs=0.1)
    assert stats.luminance_std > STD_THRESHOLD
    expected = PanelStyle.TRANSLUCENT_DARK if stats.mean_luminance < 0.575 else PanelStyle.TRANSLUCENT_LIGHT
    assert result.style is expected


def test_panel_shorter_than_padding_falls_back(make_wallpaper):
    result = analyze(make_wallpaper(size=(200, 100)), panel_height=2)
    assert result.style is PanelStyle.DARK
    assert result.error
    assert result.to_dict() == {"style": "dark", "meanLuminance": 0.5, "error": result.error}


def test_uniform_gray_just_below_threshold_is_dark(make_wallpaper):
    result = analyze(make_wallpaper(color=(146, 146, 146)))
    assert result.stats.mean_luminance < 0.575
    assert result.stats.luminance_std == 0.0
    assert result.style is PanelStyle.DARK


def test_rgba_wallpaper(make_wallpaper):
    result = analyze(make_wallpaper(color=(255, 255, 255, 0)))
    assert result.style is PanelStyle.LIGHT


def test_missing_file_falls_back(tmp_path):
    result = analyze(tmp_path / "missing.jpg")
    assert result.style is PanelStyle.DARK
    assert result.mean_luminance == 0.5
    assert "missing.jpg" in result.error


def test_garbage_file_falls_back(tmp_path):
    path = tmp_path / "wall.jpg"
    path.write_bytes(b"\xff\xd8\xff\x00garbage")
    result = analyze(path)
    assert result.style is PanelStyle.DARK
    assert result.error


def test_tiny_image_falls_back(make_wallpaper):
    result = analyze(make_wallpaper(size=(3, 3)))
    assert result.style is PanelStyle.DARK
    assert result.error


def test_analyze_is_idempotent(make_wallpaper):
    path = make_wallpaper(pixels=horizontal_gradient(300, 60))
    assert analyze(path, 0.5, 24).to_dict() == analyze(path, 0.5, 24).to_dict()


def test_statistics_invariants(make_wallpaper):
    for pixels in (horizontal_gradient(300, 60), checkerboard(300, 60, 8)):
        stats = analyze(make_wallpaper(pixels=pixels)).stats
        assert 0.0 <= stats.min_luminosity <= stats.mean_luminance <= stats.max_luminosity <= 1.0
        assert stats.luminance_std >= 0.0


def test_threshold_monotonicity(make_wallpaper):
    path = make_wallpaper(pixels=horizontal_gradient(300, 60))
    dark_family = {PanelStyle.DARK, PanelStyle.TRANSLUCENT_DARK}
    darkness = [analyze(path, t / 20).style in dark_family for t in range(20, -1, -1)]
    # once a lower threshold gives a light result, lower ones stay light
    assert darkness == sorted(darkness, reverse=True)


def test_never_emits_maximized(make_wallpaper):
    for pixels in (horizontal_gradient(120, 40), checkerboard(120, 40, 4)):
        for threshold in (0.0, 0.3, 0.575, 1.0):
            assert analyze(make_wallpaper(pixels=pixels), threshold).style is not PanelStyle.MAXIMIZED


def test_success_dict_shape(make_wallpaper):
    data = analyze(make_wallpaper(color=(0, 0, 0))).to_dict()
    assert data["style"] == "dark"
    assert data["minRGB"] == {"r": 0, "g": 0, "b": 0}
    assert data["sampleCount"] > 0
    assert (data["width"], data["height"]) == (192, 28)
    assert "error" not in data


def test_dark_16bit_wallpaper_is_dark(tmp_path):
    path = tmp_path / "deep.png"
    Image.fromarray(np.full((100, 200), 16384, dtype=np.uint16)).save(path)
    result = analyze(path)
    assert result.stats.mean_luminance < 0.3
    assert result.stats.min_rgb == RGB(64, 64, 64)
    assert result.style is PanelStyle.DARK
