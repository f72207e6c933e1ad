"""
Configuration settings for the quiz hub.

Uses Pydantic Settings for environment variable management with .env file support.
Grading and adaptive options are plain value objects: callers pass them
explicitly to every grading/selection call, nothing in the core reads
the cached settings on its own.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel, to_snake
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Raised when a configuration file cannot be read."""
    pass


class GradingConfig(BaseModel):
    """Text-answer grading behavior."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enable_fuzzy_matching: bool = Field(
        default=True,
        description="Accept near-miss text answers and normalize before comparing",
    )
    fuzzy_match_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Similarity at or above this is accepted as fully correct",
    )
    enable_partial_credit: bool = Field(
        default=False,
        description="Award partial credit for answers below the fuzzy threshold",
    )
    partial_credit_threshold: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Similarity at or above this (below fuzzy) earns partial credit",
    )
    partial_credit_value: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Score for a partial match when the answer sets no override",
    )


class AdaptiveConfig(BaseModel):
    """Adaptive difficulty behavior."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enabled: bool = True
    default_target_accuracy: float = Field(default=0.7, ge=0.0, le=1.0)
    adjustment_speed: float = Field(
        default=0.5,
        gt=0.0,
        description="K factor applied to skill updates after a completed session",
    )
    min_questions_for_adaptation: int = Field(
        default=5,
        ge=0,
        description="Attempts needed in a category before it steers selection",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUIZHUB_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Content
    # ========================================
    app_name: str = Field(default="Local Quiz Hub")
    quiz_folder: Path = Field(
        default=Path("./quizzes"),
        description="Directory scanned for question bank JSON files",
    )
    randomize_order_by_default: bool = Field(
        default=True,
        description="Shuffle session questions unless the caller says otherwise",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_file: str | None = Field(
        default=None,
        description="Optional log file path (rotated by loguru)",
    )

    # ========================================
    # Grading / Adaptive
    # ========================================
    grading: GradingConfig = Field(default_factory=GradingConfig)
    adaptive: AdaptiveConfig = Field(default_factory=AdaptiveConfig)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_settings(path: str | Path) -> Settings:
    """
    Load settings from a JSON config file.

    Missing keys fall back to defaults, nested groups are merged key by
    key and unknown keys are ignored.

    Args:
        path: Path to the JSON config file

    Returns:
        Settings instance

    Raises:
        ConfigError: If the file is not valid JSON or fails validation
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Config file not found: {path}, using defaults")
        return Settings()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    try:
        return Settings(**{to_snake(key): value for key, value in data.items()})
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
