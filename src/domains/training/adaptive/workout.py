# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Personalized workout composition.

The WorkoutComposer builds a short multi-game plan that emphasises the
player's weakest skills:

1. Average accuracy per game type is folded incrementally over history.
   Unplayed types count as a neutral 50%.
2. All game types are ranked by that average (ties keep GameType order)
   and the lowest three form the focus set.
3. Each focus game gets a difficulty derived from its last five sessions:
   the latest level +1 above 85% average accuracy, -1 below 60%, else
   unchanged; unplayed games start at level 1.
4. One favorite game not already selected may be appended, at the level
   matching the declared difficulty preference.

Empty history and malformed preferences are valid input and fall back to
defaults.
"""

import logging
from collections import defaultdict
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from src.domains.training.adaptive.trend import mean, valid_records
from src.domains.training.models import (
    MIN_DIFFICULTY,
    GameType,
    PerformanceRecord,
    UserPreferences,
    WorkoutPlan,
    clamp_difficulty,
)

logger = logging.getLogger(__name__)

NEUTRAL_ACCURACY = 50.0
WEAK_AREA_ACCURACY = 70.0
RAISE_ACCURACY = 85.0
LOWER_ACCURACY = 60.0


class GamePerformance:
    """Running averages of one game type's history."""

    def __init__(self) -> None:
        self.games_played = 0
        self.avg_accuracy = 0.0
        self.avg_score = 0.0

    def add(self, accuracy: float, score: float) -> None:
        n = self.games_played
        self.avg_accuracy = (self.avg_accuracy * n + accuracy) / (n + 1)
        self.avg_score = (self.avg_score * n + score) / (n + 1)
        self.games_played = n + 1

    def __repr__(self) -> str:
        return (
            f"GamePerformance(played={self.games_played}, "
            f"accuracy={self.avg_accuracy:.1f}, score={self.avg_score:.1f})"
        )


def analyze_game_performance(
    records: Iterable[PerformanceRecord],
) -> dict[GameType, GamePerformance]:
    """Fold records into per-game running averages."""
    stats: dict[GameType, GamePerformance] = defaultdict(GamePerformance)
    for record in records:
        stats[record.game_type].add(record.accuracy, record.score)
    return dict(stats)


def coerce_preferences(raw: Any) -> UserPreferences:
    """Turn stored preference data into UserPreferences, never failing."""
    if isinstance(raw, UserPreferences):
        return raw
    if isinstance(raw, Mapping):
        try:
            return UserPreferences.model_validate(raw)
        except ValidationError:
            logger.warning("Malformed preferences, using defaults")
            return UserPreferences(favorite_game_types=raw.get("favorite_game_types"))
    return UserPreferences()


class WorkoutComposer:
    """Builds workouts focused on the player's weakest games.

    Configuration parameters:
        recent_sessions: Sessions per game used for its difficulty (default: 5)
        focus_count: Number of weakest games selected (default: 3)
        max_games: Cap on games per workout (default: 4)
        default_duration: Minutes used when neither caller nor
            preferences give one (default: 15)
    """

    def __init__(
        self,
        recent_sessions: int = 5,
        focus_count: int = 3,
        max_games: int = 4,
        default_duration: int = 15,
    ) -> None:
        self.recent_sessions = recent_sessions
        self.focus_count = focus_count
        self.max_games = max_games
        self.default_duration = default_duration

    @classmethod
    def from_settings(cls, settings: Any) -> "WorkoutComposer":
        """Build a composer from TrainingSettings."""
        return cls(
            recent_sessions=settings.composer_recent_sessions,
            focus_count=settings.focus_game_count,
            max_games=settings.max_workout_games,
            default_duration=settings.default_workout_minutes,
        )

    def compose(
        self,
        preferences: UserPreferences | Mapping[str, Any] | None,
        history: Iterable[PerformanceRecord | Mapping[str, Any]],
        target_duration_minutes: int | None = None,
    ) -> WorkoutPlan:
        """Compose a workout.

        Args:
            preferences: User preferences; None or malformed data falls
                back to defaults.
            history: Past sessions of any game type; malformed entries
                are skipped.
            target_duration_minutes: Total duration; defaults to the
                preferred workout duration.

        Returns:
            Plan with at most ``max_games`` games.
        """
        prefs = coerce_preferences(preferences)
        records = sorted(valid_records(history), key=lambda r: r.created_at)
        performance = analyze_game_performance(records)

        ranked = sorted(
            GameType,
            key=lambda game_type: (
                performance[game_type].avg_accuracy
                if game_type in performance
                else NEUTRAL_ACCURACY
            ),
        )
        focus = ranked[: min(self.focus_count, self.max_games)]

        selected = list(focus)
        levels = {game_type: self._focus_difficulty(game_type, records) for game_type in focus}

        favorites_added: list[GameType] = []
        for favorite in prefs.favorite_game_types:
            if len(selected) >= self.max_games or favorites_added:
                break
            if favorite not in selected:
                selected.append(favorite)
                levels[favorite] = float(prefs.preferred_difficulty.level)
                favorites_added.append(favorite)

        duration = (
            target_duration_minutes
            or prefs.workout_duration_minutes
            or self.default_duration
        )
        plan = WorkoutPlan(
            game_types=selected,
            difficulty_levels=levels,
            duration_minutes=duration,
            reasoning=self._reasoning(performance, favorites_added),
            focus_game_types=focus,
            favorite_game_types=favorites_added,
        )
        logger.debug(
            "Composed workout: %s (%d min)",
            [g.value for g in plan.game_types],
            plan.duration_minutes,
        )
        return plan

    def _focus_difficulty(
        self, game_type: GameType, records: list[PerformanceRecord]
    ) -> float:
        recent = [r for r in records if r.game_type == game_type][-self.recent_sessions :]
        if not recent:
            return MIN_DIFFICULTY

        average = mean([r.accuracy for r in recent])
        level = recent[-1].difficulty_level
        if average > RAISE_ACCURACY:
            return clamp_difficulty(level + 1)
        if average < LOWER_ACCURACY:
            return clamp_difficulty(level - 1)
        return level

    def _reasoning(
        self,
        performance: dict[GameType, GamePerformance],
        favorites_added: list[GameType],
    ) -> str:
        weak_areas = [
            _display_name(game_type)
            for game_type in GameType
            if game_type in performance
            and performance[game_type].avg_accuracy < WEAK_AREA_ACCURACY
        ]

        parts = ["This workout is tailored for you based on:"]
        if weak_areas:
            parts.append(f"Focusing on improving {', '.join(weak_areas)} skills.")
        if favorites_added:
            parts.append("Including your favorite activities.")
        parts.append(
            "The difficulty levels are adjusted to challenge you optimally "
            "while ensuring progress."
        )
        return " ".join(parts)


def _display_name(game_type: GameType) -> str:
    return game_type.value.replace("_", " ")
