"""Точка входа: анализ обоев из командной строки.

Usage:
    adaptive-panel WALLPAPER [--threshold F] [--panel-height N] [--json] [--log-level LEVEL]
"""
from __future__ import annotations

import argparse
import json
import sys

from adaptive_panel.config import PanelSettings
from adaptive_panel.logging_config import configure_logging
from adaptive_panel.services.analysis_service import AnalysisService


def main(argv: list[str] | None = None) -> int:
    """Анализирует файл обоев и печатает стиль панели (или JSON с `--json`)."""
    settings = PanelSettings()
    parser = argparse.ArgumentParser(
        prog="adaptive-panel",
        description="Choose a panel style from the top strip of a wallpaper.",
    )
    parser.add_argument("wallpaper", help="Path to the wallpaper image")
    parser.add_argument(
        "--threshold",
        type=float,
        default=settings.luminance_threshold,
        help=f"Luminance threshold 0..1 (default: {settings.luminance_threshold})",
    )
    parser.add_argument(
        "--panel-height",
        type=int,
        default=settings.panel_height,
        help=f"Panel height in px (default: {settings.panel_height})",
    )
    parser.add_argument("--json", action="store_true", help="Print the full analysis as JSON")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")

    args = parser.parse_args(argv)
    if not 0.0 <= args.threshold <= 1.0:
        parser.error("--threshold must be within 0..1")
    if args.panel_height < 1:
        parser.error("--panel-height must be >= 1")

    configure_logging(args.log_level)
    result = AnalysisService().analyze(args.wallpaper, args.threshold, args.panel_height)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(result.style.value)
        if result.error:
            print(f"error: {result.error}", file=sys.stderr)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
