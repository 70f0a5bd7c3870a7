# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Training domain for timed cognitive exercises.

This domain provides:
- Trial engines for five skill categories (memory, attention,
  flexibility, problem solving, speed)
- Session control over single games and multi-game workouts
- Adaptive difficulty and workout composition from performance history
- Progress statistics, daily challenges and reminder timing

Usage:
    from src.domains.training.service import TrainingService
    from src.domains.training.engines import get_engine_registry

    registry = get_engine_registry()
    engine = registry.create(GameType.MEMORY, difficulty_level=3)

    service = TrainingService(performance_store, preference_store)
    controller = service.start_game(user_id, GameType.MEMORY)
"""

from src.domains.training.models import (
    DailyChallenge,
    DifficultyRecommendation,
    DifficultyTier,
    GameDefinition,
    GamePhase,
    GameStats,
    GameType,
    PerformanceRecord,
    PreferredDifficulty,
    RecordedResult,
    ReminderFrequency,
    SessionResult,
    Trial,
    TrialOutcome,
    TrendLabel,
    UserPreferences,
    WorkoutPlan,
)
from src.domains.training.exceptions import (
    DefinitionNotFoundError,
    EngineNotRegisteredError,
    SessionStateError,
    StimulusGenerationError,
    TrainingError,
)

__all__ = [
    # Enums
    "GameType",
    "DifficultyTier",
    "GamePhase",
    "TrendLabel",
    "PreferredDifficulty",
    "ReminderFrequency",
    # Models
    "GameDefinition",
    "Trial",
    "TrialOutcome",
    "SessionResult",
    "PerformanceRecord",
    "UserPreferences",
    "DifficultyRecommendation",
    "WorkoutPlan",
    "RecordedResult",
    "GameStats",
    "DailyChallenge",
    # Errors
    "TrainingError",
    "StimulusGenerationError",
    "DefinitionNotFoundError",
    "EngineNotRegisteredError",
    "SessionStateError",
]
