"""Configuration package."""

from finflow.config.settings import (
    AppSettings,
    LayoutSettings,
    ProjectionSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "LayoutSettings",
    "ProjectionSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
