# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Adaptive difficulty recommendation.

The DifficultyAdapter decides whether a player should face a higher, equal
or lower difficulty in their next session of a game. It looks at the
just-completed session and a sliding window of earlier sessions of the
same game type.

Decision table (first match wins):
1. accuracy > 85, window reaction time < 1000 ms, improving -> +1
2. accuracy > 80 and within 10 points of the window average -> +0.5
3. accuracy < 60 or more than 15 points below the average  -> -1
4. accuracy < 70                                            -> -0.5
5. otherwise                                                -> 0

With fewer than ``min_history`` earlier sessions the current level is
kept ("insufficient data", confidence 0.5). Every other branch reports
a fixed confidence of 0.8; signal strength is not modelled.

The adapter holds no state between calls and never raises for bad input.
"""

import logging
from typing import Any, Iterable, Mapping

from src.domains.training.adaptive.trend import (
    IMPROVING_SLOPE,
    coerce_record,
    linear_slope,
    mean,
    recent_window,
)
from src.domains.training.models import (
    MIN_DIFFICULTY,
    DifficultyRecommendation,
    PerformanceRecord,
    clamp_difficulty,
)

logger = logging.getLogger(__name__)

REASON_EXCELLENT = "excellent performance"
REASON_GOOD = "good performance, slight increase"
REASON_DECLINING = "performance declining"
REASON_LOW_ACCURACY = "low accuracy"
REASON_STABLE = "stable"
REASON_INSUFFICIENT = "insufficient data"

FALLBACK_CONFIDENCE = 0.5
DECISION_CONFIDENCE = 0.8


class DifficultyAdapter:
    """Rule-based next-difficulty recommender.

    Configuration parameters:
        window: Number of most recent same-game sessions considered (default: 10)
        min_history: Sessions required before adapting (default: 3)
        excellent_accuracy: Accuracy above which rule 1 may fire (default: 85)
        fast_reaction_ms: Window reaction time below which rule 1 may fire (default: 1000)
        good_accuracy: Accuracy above which rule 2 may fire (default: 80)
        stable_band: Max distance from the window average for rule 2 (default: 10)
        poor_accuracy: Accuracy below which rule 3 fires (default: 60)
        decline_margin: Drop below the window average for rule 3 (default: 15)
        low_accuracy: Accuracy below which rule 4 fires (default: 70)
    """

    def __init__(
        self,
        window: int = 10,
        min_history: int = 3,
        parameters: Mapping[str, float] | None = None,
    ) -> None:
        self.window = window
        self.min_history = min_history
        self._parameters = dict(parameters or {})

    @classmethod
    def from_settings(cls, settings: Any) -> "DifficultyAdapter":
        """Build an adapter from TrainingSettings."""
        return cls(window=settings.history_window, min_history=settings.min_history)

    def get_param(self, key: str, default: float) -> float:
        return self._parameters.get(key, default)

    def recommend(
        self,
        current: PerformanceRecord | Mapping[str, Any],
        history: Iterable[PerformanceRecord | Mapping[str, Any]],
    ) -> DifficultyRecommendation:
        """Recommend the difficulty for the next session.

        Args:
            current: The just-completed session.
            history: Earlier sessions, any game type and any order.
                Malformed entries are skipped.

        Returns:
            Recommendation with a level clamped to [1, 10].
        """
        record = coerce_record(current)
        if record is None:
            level = _raw_difficulty(current)
            logger.warning("Malformed current record, keeping level %.1f", level)
            return self._fallback(level)

        window = recent_window(history, record.game_type, self.window)
        if len(window) < self.min_history:
            logger.debug(
                "Cold start for %s: %d of %d sessions",
                record.game_type.value,
                len(window),
                self.min_history,
            )
            return self._fallback(record.difficulty_level)

        accuracies = [r.accuracy for r in window]
        avg_accuracy = mean(accuracies)
        avg_reaction = mean([r.reaction_time_ms for r in window])
        slope = linear_slope(accuracies)

        is_improving = slope > IMPROVING_SLOPE
        is_stable = abs(record.accuracy - avg_accuracy) < self.get_param("stable_band", 10)
        is_declining = record.accuracy < avg_accuracy - self.get_param("decline_margin", 15)

        if (
            record.accuracy > self.get_param("excellent_accuracy", 85)
            and avg_reaction < self.get_param("fast_reaction_ms", 1000)
            and is_improving
        ):
            delta, reason = 1.0, REASON_EXCELLENT
        elif record.accuracy > self.get_param("good_accuracy", 80) and is_stable:
            delta, reason = 0.5, REASON_GOOD
        elif record.accuracy < self.get_param("poor_accuracy", 60) or is_declining:
            delta, reason = -1.0, REASON_DECLINING
        elif record.accuracy < self.get_param("low_accuracy", 70):
            delta, reason = -0.5, REASON_LOW_ACCURACY
        else:
            delta, reason = 0.0, REASON_STABLE

        new_level = clamp_difficulty(record.difficulty_level + delta)
        logger.debug(
            "%s: accuracy=%.1f avg=%.1f rt=%.0f slope=%.3f -> %s (%.1f -> %.1f)",
            record.game_type.value,
            record.accuracy,
            avg_accuracy,
            avg_reaction,
            slope,
            reason,
            record.difficulty_level,
            new_level,
        )
        return DifficultyRecommendation(
            new_difficulty=new_level,
            reason=reason,
            confidence=DECISION_CONFIDENCE,
            previous_difficulty=record.difficulty_level,
            adjustment=new_level - record.difficulty_level,
        )

    def _fallback(self, level: float) -> DifficultyRecommendation:
        return DifficultyRecommendation(
            new_difficulty=level,
            reason=REASON_INSUFFICIENT,
            confidence=FALLBACK_CONFIDENCE,
            previous_difficulty=level,
            adjustment=0.0,
        )


def _raw_difficulty(current: Any) -> float:
    """Best-effort difficulty level of a record that failed validation."""
    if isinstance(current, Mapping):
        value = current.get("difficulty_level")
    else:
        value = getattr(current, "difficulty_level", None)
    try:
        return clamp_difficulty(float(value))
    except (TypeError, ValueError):
        return MIN_DIFFICULTY
