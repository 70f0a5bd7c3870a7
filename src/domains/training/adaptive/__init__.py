# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Adaptive training components.

This package provides the history-driven parts of the training domain:
- DifficultyAdapter: Recommends the next difficulty level for a game
- WorkoutComposer: Builds a workout around the player's weakest games
- Trend helpers: Least-squares slope and trend labels
- Reminder timing: Next reminder at the player's most active hour

All components are stateless; every input is passed explicitly.
"""

from src.domains.training.adaptive.difficulty import DifficultyAdapter
from src.domains.training.adaptive.reminders import (
    optimal_reminder_time,
    peak_activity_hour,
)
from src.domains.training.adaptive.trend import (
    linear_slope,
    mean,
    recent_window,
    trend_label,
    valid_records,
)
from src.domains.training.adaptive.workout import (
    GamePerformance,
    WorkoutComposer,
    analyze_game_performance,
    coerce_preferences,
)

__all__ = [
    "DifficultyAdapter",
    "WorkoutComposer",
    "GamePerformance",
    "analyze_game_performance",
    "coerce_preferences",
    "linear_slope",
    "mean",
    "recent_window",
    "trend_label",
    "valid_records",
    "optimal_reminder_time",
    "peak_activity_hour",
]
