# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Training service.

This module provides the TrainingService which connects the trial
engines and adaptive components to the stores:
- Recording completed sessions and recommending the next difficulty
- Composing workouts from history and preferences
- Starting single games and workouts as SessionControllers
- Progress statistics, the daily challenge and reminder timing

Storage failures never reach the caller: reads degrade to "no history"
or default preferences, and a failed append is logged and dropped.

Example:
    service = TrainingService(SqlPerformanceStore(), SqlPreferenceStore())
    controller = service.start_game("user-1", GameType.MEMORY)
    controller.start()
"""

import random
from datetime import date, datetime
from functools import partial

from src.core.config.settings import TrainingSettings, get_settings
from src.domains.training.adaptive.difficulty import DifficultyAdapter
from src.domains.training.adaptive.reminders import optimal_reminder_time
from src.domains.training.adaptive.trend import trend_label
from src.domains.training.adaptive.workout import WorkoutComposer
from src.domains.training.clock import AsyncioClock, ManualClock
from src.domains.training.engines.registry import EngineRegistry, get_engine_registry
from src.domains.training.models import (
    MIN_DIFFICULTY,
    DailyChallenge,
    DifficultyRecommendation,
    GameStats,
    GameType,
    PerformanceRecord,
    RecordedResult,
    SessionResult,
    UserPreferences,
    WorkoutPlan,
)
from src.domains.training.progress import daily_challenge, game_stats
from src.domains.training.session import SessionController
from src.infrastructure.storage.base import PerformanceStore, PreferenceStore, StorageError
from src.utils.datetime import ms_to_seconds, utc_now, utc_today
from src.utils.logging import get_logger, log_context

logger = get_logger(__name__)

REASON_ADAPTIVE_DISABLED = "adaptive difficulty disabled"


class TrainingService:
    """Facade over engines, adaptive components and stores.

    Attributes:
        settings: Training configuration.
        adapter: Difficulty adapter built from the settings.
        composer: Workout composer built from the settings.
    """

    def __init__(
        self,
        performance_store: PerformanceStore,
        preference_store: PreferenceStore,
        settings: TrainingSettings | None = None,
        registry: EngineRegistry | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            performance_store: Session history store.
            preference_store: User preference store.
            settings: Training settings (global settings if None).
            registry: Engine registry (default registry if None).
        """
        self._performance = performance_store
        self._preferences = preference_store
        self.settings = settings or get_settings().training
        self._registry = registry
        self.adapter = DifficultyAdapter.from_settings(self.settings)
        self.composer = WorkoutComposer.from_settings(self.settings)

    @property
    def registry(self) -> EngineRegistry:
        if self._registry is None:
            self._registry = get_engine_registry()
        return self._registry

    # ------------------------------------------------------------------
    # Preferences and history
    # ------------------------------------------------------------------

    def get_preferences(self, user_id: str) -> UserPreferences:
        """Stored preferences, or the defaults when none can be read."""
        try:
            preferences = self._preferences.get(user_id)
        except StorageError as e:
            logger.warning("preferences_read_failed", user_id=user_id, error=str(e))
            return UserPreferences()
        return preferences or UserPreferences()

    def save_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        """Store preferences.

        Raises:
            StorageError: If the write fails.
        """
        self._preferences.put(user_id, preferences)
        logger.info(
            "preferences_saved",
            user_id=user_id,
            favorites=[g.value for g in preferences.favorite_game_types],
        )

    def get_history(
        self,
        user_id: str,
        game_type: GameType | None = None,
        limit: int | None = None,
    ) -> list[PerformanceRecord]:
        """Recent records, newest first; empty if the store fails."""
        try:
            return self._performance.query(
                user_id,
                game_type=game_type,
                limit=limit or self.settings.history_query_limit,
                newest_first=True,
            )
        except StorageError as e:
            logger.warning(
                "history_read_failed",
                user_id=user_id,
                game_type=game_type.value if game_type else None,
                error=str(e),
            )
            return []

    # ------------------------------------------------------------------
    # Recording and recommendations
    # ------------------------------------------------------------------

    def record_result(self, user_id: str, result: SessionResult) -> RecordedResult:
        """Persist a completed session and recommend the next difficulty.

        The recommendation is computed against the history as it was
        before this session.

        Args:
            user_id: Player who completed the session.
            result: Result emitted by the trial engine.

        Returns:
            The record, the recommendation, and whether the record was stored.
        """
        with log_context(user_id=user_id, game_type=result.game_type.value):
            return self._record(user_id, result)

    def _record(self, user_id: str, result: SessionResult) -> RecordedResult:
        history = self.get_history(user_id, result.game_type)
        chronological = sorted(history, key=lambda r: r.created_at)
        accuracies = [r.accuracy for r in chronological][-self.settings.history_window :]
        trend = trend_label(
            [*accuracies, result.accuracy], min_points=self.settings.min_history + 1
        )

        record = PerformanceRecord(
            user_id=user_id,
            game_type=result.game_type,
            difficulty_level=result.difficulty_level,
            score=result.score,
            accuracy=result.accuracy,
            time_spent_seconds=ms_to_seconds(result.time_spent_ms),
            reaction_time_ms=result.mean_reaction_time_ms,
            mistakes_count=result.mistakes,
            trend=trend,
            created_at=result.completed_at or utc_now(),
        )

        preferences = self.get_preferences(user_id)
        if preferences.adaptive_difficulty_enabled:
            recommendation = self.adapter.recommend(record, history)
        else:
            recommendation = _keep_level(record.difficulty_level)

        persisted = True
        try:
            self._performance.append(record)
        except StorageError as e:
            persisted = False
            logger.warning("record_append_failed", error=str(e))

        logger.info(
            "session_recorded",
            score=record.score,
            accuracy=record.accuracy,
            trend=record.trend.value,
            next_difficulty=recommendation.new_difficulty,
            reason=recommendation.reason,
            persisted=persisted,
        )
        return RecordedResult(
            record=record, recommendation=recommendation, persisted=persisted
        )

    def next_difficulty(self, user_id: str, game_type: GameType) -> float:
        """Level for the next session of a game.

        The recommendation following the latest recorded session, its
        level when adaptation is disabled, or 1 for an unplayed game.
        """
        history = self.get_history(user_id, game_type, limit=self.settings.history_window + 1)
        if not history:
            return MIN_DIFFICULTY

        latest, earlier = history[0], history[1:]
        if not self.get_preferences(user_id).adaptive_difficulty_enabled:
            return latest.difficulty_level
        return self.adapter.recommend(latest, earlier).new_difficulty

    def compose_workout(
        self, user_id: str, target_duration_minutes: int | None = None
    ) -> WorkoutPlan:
        """Compose a workout from the user's history and preferences."""
        plan = self.composer.compose(
            self.get_preferences(user_id),
            self.get_history(user_id),
            target_duration_minutes,
        )
        logger.info(
            "workout_composed",
            user_id=user_id,
            games=[g.value for g in plan.game_types],
            duration_minutes=plan.duration_minutes,
        )
        return plan

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def start_game(
        self,
        user_id: str,
        game_type: GameType,
        difficulty_level: float | None = None,
        rng: random.Random | None = None,
    ) -> SessionController:
        """Prepare a single-game session whose result is recorded for the user."""
        if difficulty_level is None:
            difficulty_level = self.next_difficulty(user_id, game_type)
        logger.info(
            "game_prepared",
            user_id=user_id,
            game_type=game_type.value,
            difficulty_level=difficulty_level,
        )
        return SessionController.for_game(
            game_type,
            difficulty_level,
            registry=self.registry,
            recorder=partial(self.record_result, user_id),
            rng=rng,
        )

    def start_workout(
        self,
        user_id: str,
        plan: WorkoutPlan | None = None,
        rng: random.Random | None = None,
    ) -> SessionController:
        """Prepare a workout session; composes a plan when none is given."""
        plan = plan or self.compose_workout(user_id)
        return SessionController.for_workout(
            plan,
            registry=self.registry,
            recorder=partial(self.record_result, user_id),
            rng=rng,
        )

    def create_clock(self, realtime: bool = True) -> AsyncioClock | ManualClock:
        """Clock ticking at the configured interval.

        Args:
            realtime: Asyncio-driven clock if True, manual clock otherwise.
        """
        interval = self.settings.tick_interval_ms
        if realtime:
            return AsyncioClock(interval_ms=interval)
        return ManualClock(interval_ms=interval)

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def game_stats(self, user_id: str, game_type: GameType) -> GameStats:
        """Progress summary of one game."""
        return game_stats(self.get_history(user_id, game_type), game_type)

    def daily_challenge(self, user_id: str, day: date | None = None) -> DailyChallenge:
        """Today's (or ``day``'s) challenge for the user."""
        return daily_challenge(user_id, day or utc_today(), self.get_history(user_id))

    def next_reminder(self, user_id: str, now: datetime | None = None) -> datetime | None:
        """When to remind the user to train next; None if they opted out."""
        frequency = self.get_preferences(user_id).reminder_frequency
        return optimal_reminder_time(self.get_history(user_id), frequency, now)


def _keep_level(level: float) -> DifficultyRecommendation:
    return DifficultyRecommendation(
        new_difficulty=level,
        reason=REASON_ADAPTIVE_DISABLED,
        confidence=1.0,
        previous_difficulty=level,
        adjustment=0.0,
    )
