# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for Impulse.
Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> settings.training.tick_interval_ms
    100
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrainingSettings(BaseSettings):
    """Tuning knobs for the trial engine and the adaptive layer.

    Attributes:
        tick_interval_ms: Granularity of the external clock driving engines.
        history_window: Sliding window of past sessions used for difficulty
            recommendations.
        min_history: Minimum number of matching past sessions before the
            difficulty adapter leaves its cold-start fallback.
        composer_recent_sessions: Sessions per game type used to derive a
            workout difficulty.
        focus_game_count: Number of weak-area games in a workout.
        max_workout_games: Hard cap on games per workout.
        default_workout_minutes: Workout length when nothing else is known.
        generation_max_retries: Resample attempts per draw before stimulus
            generation gives up.
        history_query_limit: Page size for history reads from the store.
        games_config_path: Optional YAML file overriding the bundled game
            catalogue.
    """

    model_config = SettingsConfigDict(
        env_prefix="TRAINING_",
        extra="ignore",
    )

    tick_interval_ms: int = Field(default=100, gt=0)
    history_window: int = Field(default=10, ge=1)
    min_history: int = Field(default=3, ge=1)
    composer_recent_sessions: int = Field(default=5, ge=1)
    focus_game_count: int = Field(default=3, ge=1)
    max_workout_games: int = Field(default=4, ge=1)
    default_workout_minutes: int = Field(default=15, gt=0)
    generation_max_retries: int = Field(default=100, ge=1)
    history_query_limit: int = Field(default=50, ge=1)
    games_config_path: Path | None = None


class StorageSettings(BaseSettings):
    """Record store configuration.

    Attributes:
        url: SQLAlchemy database URL.
        echo: Log every SQL statement (development only).
    """

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore",
    )

    url: str = "sqlite:///impulse.db"
    echo: bool = False


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        training: Engine and adaptation settings.
        storage: Record store settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    training: TrainingSettings = Field(default_factory=TrainingSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with debug enabled.
        """
        if self.environment == "production" and self.debug:
            raise ValueError(
                "Debug mode must be disabled in production. Set DEBUG=false."
            )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
