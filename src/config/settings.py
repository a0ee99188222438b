# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for engine tunables and logging setup.
Every field can be set through the environment (upper-case field name)
or passed as a keyword override to load_settings().
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Community detection ===
    community_resolution: float = 1.0
    community_min_size: int = 3
    community_min_gain: float = 0.0001
    louvain_max_iterations: int = 100
    louvain_max_levels: int = 1

    # === Flow dedup ===
    flow_min_overlap_ratio: float = 0.5

    # === Process groups ===
    cross_process_skip_empty_groups: bool = False

    # === Module tree ===
    root_module_path: str = "project"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("community_resolution")
    @classmethod
    def validate_resolution(cls, v: float) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError("community_resolution must be > 0")
        return v

    @field_validator("community_min_size", "louvain_max_iterations", "louvain_max_levels")
    @classmethod
    def validate_positive_int(cls, v: int, info) -> int:  # noqa: N805
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1")
        return v

    @field_validator("community_min_gain")
    @classmethod
    def validate_min_gain(cls, v: float) -> float:  # noqa: N805
        if v < 0:
            raise ValueError("community_min_gain must be >= 0")
        return v

    @field_validator("flow_min_overlap_ratio")
    @classmethod
    def validate_overlap_ratio(cls, v: float) -> float:  # noqa: N805
        if not 0 < v <= 1:
            raise ValueError("flow_min_overlap_ratio must be in (0, 1]")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.log_file is not None and self.log_retention < 1:
            errors.append("LOG_FILE requires LOG_RETENTION >= 1")

        # No single move can gain more than the whole modularity range.
        if self.community_min_gain >= 1.0:
            errors.append("COMMUNITY_MIN_GAIN must be < 1.0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
