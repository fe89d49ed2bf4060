"""
Adaptive Panel configuration
Settings with environment variable support (prefix ADAPTIVE_PANEL_)
"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from adaptive_panel.models.analysis_model import PanelMode
from adaptive_panel.services.analysis_service import (
    DEFAULT_LUMINANCE_THRESHOLD,
    DEFAULT_PANEL_HEIGHT,
)


class PanelSettings(BaseSettings):
    """Panel analysis and mode configuration"""
    luminance_threshold: float = Field(DEFAULT_LUMINANCE_THRESHOLD, ge=0.0, le=1.0)
    panel_height: int = Field(DEFAULT_PANEL_HEIGHT, ge=1)
    panel_mode: PanelMode = PanelMode.AUTOMATIC
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="ADAPTIVE_PANEL_")
