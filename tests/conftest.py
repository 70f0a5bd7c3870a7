# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across the test suite:
- Game definitions and catalogues
- Deterministic random sources
- Performance record factories
- In-memory stores
"""

import random
from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from src.core.config.settings import TrainingSettings, clear_settings_cache
from src.domains.training.definitions import (
    GameCatalogue,
    load_game_catalogue,
    reset_game_catalogue,
)
from src.domains.training.engines.registry import reset_engine_registry
from src.domains.training.models import (
    GameDefinition,
    GameType,
    PerformanceRecord,
)
from src.infrastructure.storage.memory import (
    InMemoryPerformanceStore,
    InMemoryPreferenceStore,
)

BASE_TIME = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (SQLite)"
    )
    config.addinivalue_line("markers", "slow: mark test as slow running")


# =============================================================================
# Global State
# =============================================================================


@pytest.fixture(autouse=True)
def reset_global_state() -> Generator[None, None, None]:
    """Drop cached settings, catalogue and registry around every test."""
    clear_settings_cache()
    reset_game_catalogue()
    reset_engine_registry()
    yield
    clear_settings_cache()
    reset_game_catalogue()
    reset_engine_registry()


# =============================================================================
# Definitions
# =============================================================================


@pytest.fixture
def catalogue() -> GameCatalogue:
    """Provide the bundled game catalogue."""
    return load_game_catalogue()


@pytest.fixture
def simple_definition() -> GameDefinition:
    """Provide a small streaming definition with round numbers."""
    return GameDefinition(
        game_type=GameType.SPEED,
        display_name="Test Game",
        trial_count=3,
        base_time_ms=1000,
        time_step_ms=0,
        min_time_ms=1000,
        base_points=100,
        speed_bonus_factor=0.1,
        penalty=0,
        feedback_ms=0,
        batch_generation=False,
    )


@pytest.fixture
def rng() -> random.Random:
    """Provide a seeded random source."""
    return random.Random(1234)


@pytest.fixture
def training_settings() -> TrainingSettings:
    """Provide default training settings."""
    return TrainingSettings()


# =============================================================================
# Records
# =============================================================================


RecordFactory = Callable[..., PerformanceRecord]


@pytest.fixture
def make_record() -> RecordFactory:
    """Provide a factory for performance records.

    Records get increasing timestamps in call order unless ``created_at``
    is given explicitly.
    """
    counter = {"n": 0}

    def factory(**overrides: Any) -> PerformanceRecord:
        counter["n"] += 1
        data: dict[str, Any] = {
            "user_id": "user-1",
            "game_type": GameType.MEMORY,
            "difficulty_level": 3,
            "score": 500,
            "accuracy": 75,
            "time_spent_seconds": 60,
            "reaction_time_ms": 900,
            "mistakes_count": 1,
            "created_at": BASE_TIME + timedelta(minutes=counter["n"]),
        }
        data.update(overrides)
        return PerformanceRecord(**data)

    return factory


# =============================================================================
# Stores
# =============================================================================


@pytest.fixture
def performance_store() -> InMemoryPerformanceStore:
    """Provide an empty in-memory performance store."""
    return InMemoryPerformanceStore()


@pytest.fixture
def preference_store() -> InMemoryPreferenceStore:
    """Provide an empty in-memory preference store."""
    return InMemoryPreferenceStore()


@pytest.fixture
def sample_user_id() -> str:
    """Provide a sample user ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440001"
