"""
Configuration Management for FinFlow

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All tunable constants of the engine live here.
Layout geometry, projection caps and budget thresholds are read once,
validated, and injected into the components that need them.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LayoutSettings(BaseSettings):
    """Geometry of the layered money-flow layout."""

    model_config = SettingsConfigDict(
        env_prefix="FINFLOW_LAYOUT_",
        extra="ignore"
    )

    node_width: float = Field(
        default=150.0,
        gt=0,
        description="Width of every node box"
    )
    node_height: float = Field(
        default=120.0,
        gt=0,
        description="Height of every node box"
    )
    rank_spacing: float = Field(
        default=120.0,
        ge=0,
        description="Gap between two consecutive ranks along the main axis"
    )
    node_spacing: float = Field(
        default=80.0,
        ge=0,
        description="Gap between two nodes of the same rank along the cross axis"
    )
    margin_x: float = Field(
        default=50.0,
        ge=0,
        description="Left margin of the drawing"
    )
    margin_y: float = Field(
        default=50.0,
        ge=0,
        description="Top margin of the drawing"
    )
    default_orientation: Literal["vertical", "horizontal"] = Field(
        default="horizontal",
        description="Orientation used when the caller does not pass one"
    )
    # None means "bounded by the node count"
    max_relaxation_passes: Optional[int] = Field(
        default=None,
        ge=1,
        description="Upper bound of cycle-breaking passes during ranking"
    )


class ProjectionSettings(BaseSettings):
    """Numeric projection and budget classification configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINFLOW_PROJECTION_",
        extra="ignore"
    )

    horizon_cap_months: int = Field(
        default=1200,
        ge=1,
        description="Hard cap of the goal-horizon search (100 years)"
    )
    default_compounds_per_year: int = Field(
        default=12,
        ge=0,
        description="Compounding frequency used when a goal does not specify one"
    )
    default_projection_months: int = Field(
        default=120,
        ge=0,
        description="Projection horizon for goals without a target date"
    )
    budget_warning_threshold: float = Field(
        default=70.0,
        ge=0,
        description="Spent percentage up to which a budget is 'under'"
    )
    budget_over_threshold: float = Field(
        default=95.0,
        ge=0,
        description="Spent percentage up to which a budget is 'warning'"
    )

    @model_validator(mode='after')
    def validate_thresholds(self) -> 'ProjectionSettings':
        """Budget tiers must be ordered."""
        if self.budget_warning_threshold >= self.budget_over_threshold:
            raise ValueError(
                "budget_warning_threshold must be below budget_over_threshold"
            )
        return self


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level of local log output"
    )
    log_format: Literal["json", "console"] = Field(
        default="json",
        description="Renderer used for local log output"
    )

    default_currency: str = Field(
        default="EUR",
        min_length=3,
        max_length=3,
        description="Currency code assumed for records without one"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only standard logging levels are accepted."""
        normalized = v.strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return normalized

    @field_validator('default_currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.strip().upper()


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def layout(self) -> LayoutSettings:
        return LayoutSettings()

    @property
    def projection(self) -> ProjectionSettings:
        return ProjectionSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("layout", "projection", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
