# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Data models for the training domain.

This module defines Pydantic models and enums for:
- Game types, difficulty tiers and engine phases
- Static game definitions
- Trials, trial outcomes and session results
- Persisted performance records and user preferences
- Adaptive outputs (difficulty recommendations, workout plans)

Records and definitions are frozen: once built they are never mutated.
"""

import json
import math
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.utils.datetime import ensure_utc, utc_now

MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0


def clamp_difficulty(level: float) -> float:
    """Clamp a difficulty level into [MIN_DIFFICULTY, MAX_DIFFICULTY]; NaN maps to the floor."""
    level = float(level)
    if math.isnan(level):
        return MIN_DIFFICULTY
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, level))


def clamp_accuracy(accuracy: float) -> float:
    """Clamp an accuracy percentage into [0, 100]; NaN maps to 0."""
    accuracy = float(accuracy)
    if math.isnan(accuracy):
        return 0.0
    return max(0.0, min(100.0, accuracy))


class GameType(str, Enum):
    """The five trained skill categories.

    Hyphenated spellings ("problem-solving") are accepted on input.
    """

    MEMORY = "memory"
    ATTENTION = "attention"
    FLEXIBILITY = "flexibility"
    PROBLEM_SOLVING = "problem_solving"
    SPEED = "speed"

    @classmethod
    def _missing_(cls, value: object) -> "GameType | None":
        if isinstance(value, str):
            normalized = value.strip().lower().replace("-", "_")
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class DifficultyTier(str, Enum):
    """Named difficulty tiers selecting a game's modifier set."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"
    MASTER = "master"


_TIER_ORDER = list(DifficultyTier)


def tier_for_level(level: float) -> DifficultyTier:
    """Map a numeric difficulty level onto a tier.

    Levels 1-2 are easy, 3-4 medium, 5-6 hard, 7-8 expert and 9-10 master.
    """
    index = int((clamp_difficulty(level) - 1) // 2)
    return _TIER_ORDER[min(index, len(_TIER_ORDER) - 1)]


class GamePhase(str, Enum):
    """Trial engine phases.

    FEEDBACK is only entered by games with a non-zero feedback duration.
    """

    INSTRUCTION = "instruction"
    PLAYING = "playing"
    FEEDBACK = "feedback"
    COMPLETED = "completed"


class TrendLabel(str, Enum):
    """Direction of a player's accuracy over recent sessions."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"
    NEW = "new"


class PreferredDifficulty(str, Enum):
    """Difficulty preference declared by the user."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def level(self) -> int:
        """Starting difficulty level for this preference."""
        return {"easy": 1, "medium": 2, "hard": 3}[self.value]


class ReminderFrequency(str, Enum):
    """How often the user wants a training reminder."""

    DAILY = "daily"
    EVERY_OTHER_DAY = "every_other_day"
    WEEKLY = "weekly"
    NEVER = "never"


def parse_game_types(value: Any) -> list[GameType]:
    """Parse a list of game types from untrusted storage data.

    Accepts a list/tuple or a JSON-encoded list. Unknown entries are
    dropped, duplicates removed, and anything unparseable yields an
    empty list.

    Args:
        value: Raw value as read from a store or request.

    Returns:
        Ordered list of distinct game types.
    """
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value) if value.strip() else []
        except json.JSONDecodeError:
            return []
    if not isinstance(value, (list, tuple)):
        return []

    parsed: list[GameType] = []
    for item in value:
        if isinstance(item, GameType):
            game_type = item
        else:
            try:
                game_type = GameType(item)
            except ValueError:
                continue
        if game_type not in parsed:
            parsed.append(game_type)
    return parsed


class GameDefinition(BaseModel):
    """Static description of one game.

    Attributes:
        game_type: Skill category of the game.
        display_name: Name shown to the player.
        trial_count: Number of trials (or rounds) per session.
        base_time_ms: Per-trial time budget at level 0.
        time_step_ms: Budget removed per difficulty level.
        min_time_ms: Floor of the per-trial budget.
        base_points: Points for any correct answer.
        speed_bonus_factor: Points per remaining millisecond on a correct answer.
        penalty: Points for a wrong answer or timeout (zero or negative).
        feedback_ms: Duration of the feedback sub-state between trials.
        batch_generation: Generate all trials at start instead of one at a time.
        tiers: Per-tier named multipliers (time, complexity, switch, ...).
    """

    model_config = ConfigDict(frozen=True)

    game_type: GameType
    display_name: str
    trial_count: int = Field(gt=0)
    base_time_ms: int = Field(gt=0)
    time_step_ms: int = Field(default=0, ge=0)
    min_time_ms: int = Field(gt=0)
    base_points: float = Field(ge=0)
    speed_bonus_factor: float = Field(default=0.0, ge=0)
    penalty: float = Field(default=0.0, le=0)
    feedback_ms: int = Field(default=0, ge=0)
    batch_generation: bool = False
    tiers: dict[DifficultyTier, dict[str, float]] = Field(default_factory=dict)

    def modifier(self, tier: DifficultyTier, key: str, default: float = 1.0) -> float:
        """Look up a named multiplier for a tier."""
        return self.tiers.get(tier, {}).get(key, default)

    def time_limit_ms(self, level: float, tier: DifficultyTier) -> int:
        """Per-trial time limit for a level and tier."""
        budget = max(self.base_time_ms - self.time_step_ms * level, self.min_time_ms)
        return max(1, math.floor(budget * self.modifier(tier, "time")))


class Trial(BaseModel):
    """One stimulus-response unit.

    Attributes:
        index: Position of the trial within the session.
        stimulus: Game-specific stimulus payload.
        options: Valid responses offered to the player.
        correct_answer: The response that counts as correct.
        time_limit_ms: Response window once the stimulus is presented.
        onset_ms: Presentation delay before the response window opens.
        created_at: Wall-clock creation time.
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    stimulus: dict[str, Any] = Field(default_factory=dict)
    options: list[Any] = Field(default_factory=list)
    correct_answer: Any
    time_limit_ms: int = Field(gt=0)
    onset_ms: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)


class TrialOutcome(BaseModel):
    """Scored result of a single trial."""

    model_config = ConfigDict(frozen=True)

    trial_index: int
    response: Any = None
    is_correct: bool
    timed_out: bool = False
    reaction_time_ms: float = Field(ge=0)
    points: int


class SessionResult(BaseModel):
    """Aggregate of one completed engine run.

    Reaction time is averaged over answered trials; timeouts do not count.
    """

    model_config = ConfigDict(frozen=True)

    game_type: GameType
    difficulty_level: float
    tier: DifficultyTier
    score: int = Field(ge=0)
    accuracy: float = Field(ge=0.0, le=100.0)
    time_spent_ms: float = Field(ge=0)
    mean_reaction_time_ms: float = Field(default=0.0, ge=0)
    mistakes: int = Field(default=0, ge=0)
    correct_count: int = Field(default=0, ge=0)
    total_count: int = Field(default=0, ge=0)
    started_at: datetime | None = None
    completed_at: datetime | None = None


class PerformanceRecord(BaseModel):
    """Persisted summary of one completed session.

    Difficulty level and accuracy are clamped on construction so that no
    record can carry an out-of-range value. NaN and infinite measurements
    are rejected rather than clamped.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    game_type: GameType
    difficulty_level: float = Field(allow_inf_nan=False)
    score: float = Field(allow_inf_nan=False)
    accuracy: float = Field(allow_inf_nan=False)
    time_spent_seconds: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    reaction_time_ms: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    mistakes_count: int = Field(default=0, ge=0)
    trend: TrendLabel = TrendLabel.NEW
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("difficulty_level")
    @classmethod
    def _clamp_difficulty(cls, value: float) -> float:
        return clamp_difficulty(value)

    @field_validator("accuracy")
    @classmethod
    def _clamp_accuracy(cls, value: float) -> float:
        return clamp_accuracy(value)

    @field_validator("created_at")
    @classmethod
    def _aware_created_at(cls, value: datetime) -> datetime:
        # Naive timestamps from storage are UTC
        return ensure_utc(value)


class UserPreferences(BaseModel):
    """Training preferences of one user.

    The defaults are the documented fallback used whenever a user has no
    stored preferences: medium difficulty, 15-minute workouts and no
    favorites.
    """

    preferred_difficulty: PreferredDifficulty = PreferredDifficulty.MEDIUM
    favorite_game_types: list[GameType] = Field(default_factory=list)
    workout_duration_minutes: int = Field(default=15, gt=0)
    reminder_frequency: ReminderFrequency = ReminderFrequency.DAILY
    adaptive_difficulty_enabled: bool = True

    @field_validator("favorite_game_types", mode="before")
    @classmethod
    def _parse_favorites(cls, value: Any) -> list[GameType]:
        return parse_game_types(value)


class DifficultyRecommendation(BaseModel):
    """Recommended difficulty for the next session of a game."""

    new_difficulty: float = Field(ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    reason: str
    confidence: float = Field(ge=0.0, le=1.0)
    previous_difficulty: float | None = None
    adjustment: float = 0.0


class WorkoutPlan(BaseModel):
    """A composed multi-game session.

    Attributes:
        game_types: Games in play order.
        difficulty_levels: Target difficulty per game.
        duration_minutes: Total target duration.
        reasoning: Display text explaining the selection.
        focus_game_types: Games chosen as weak areas.
        favorite_game_types: Games added from the user's favorites.
    """

    game_types: list[GameType]
    difficulty_levels: dict[GameType, float]
    duration_minutes: int = Field(gt=0)
    reasoning: str
    focus_game_types: list[GameType] = Field(default_factory=list)
    favorite_game_types: list[GameType] = Field(default_factory=list)

    @property
    def minutes_per_game(self) -> float:
        """Even share of the duration per game."""
        if not self.game_types:
            return 0.0
        return self.duration_minutes / len(self.game_types)


class RecordedResult(BaseModel):
    """A persisted session together with the follow-up recommendation."""

    record: PerformanceRecord
    recommendation: DifficultyRecommendation
    persisted: bool = True


class GameStats(BaseModel):
    """Progress summary of one game for one user."""

    game_type: GameType
    average_score: int = 0
    best_score: float = 0.0
    games_played: int = 0
    current_level: float = MIN_DIFFICULTY


class DailyChallenge(BaseModel):
    """The game and level offered to a user as today's challenge."""

    user_id: str
    day: date
    game_type: GameType
    level: int = Field(ge=1, le=5)
    completed: bool = False
