# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Statistics helpers shared by the adaptive components.

All functions are pure and operate on plain sequences of numbers or
performance records. Records are never mutated.
"""

from typing import Any, Iterable, Sequence

from pydantic import ValidationError

from src.domains.training.models import GameType, PerformanceRecord, TrendLabel

IMPROVING_SLOPE = 0.1


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def linear_slope(values: Sequence[float]) -> float:
    """Least-squares slope of ``values`` against their indices.

    Returns 0.0 for fewer than two values (the denominator would be zero).
    """
    n = len(values)
    if n < 2:
        return 0.0

    sum_x = n * (n - 1) / 2
    sum_y = sum(values)
    sum_xy = sum(i * y for i, y in enumerate(values))
    sum_xx = sum(i * i for i in range(n))

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def trend_label(accuracies: Sequence[float], min_points: int = 3) -> TrendLabel:
    """Classify a chronological accuracy series.

    Args:
        accuracies: Accuracies ordered oldest to newest.
        min_points: Series shorter than this are labelled NEW.
    """
    if len(accuracies) < min_points:
        return TrendLabel.NEW
    slope = linear_slope(accuracies)
    if slope > IMPROVING_SLOPE:
        return TrendLabel.IMPROVING
    if slope < -IMPROVING_SLOPE:
        return TrendLabel.DECLINING
    return TrendLabel.STABLE


def coerce_record(raw: Any) -> PerformanceRecord | None:
    """Validate one history entry, returning None if it is malformed."""
    if isinstance(raw, PerformanceRecord):
        return raw
    try:
        return PerformanceRecord.model_validate(raw)
    except ValidationError:
        return None


def valid_records(history: Iterable[Any]) -> list[PerformanceRecord]:
    """Drop malformed entries from a history."""
    records = []
    for raw in history:
        record = coerce_record(raw)
        if record is not None:
            records.append(record)
    return records


def recent_window(
    history: Iterable[Any],
    game_type: GameType,
    size: int,
) -> list[PerformanceRecord]:
    """Most recent ``size`` valid records of a game type, oldest first."""
    matching = [r for r in valid_records(history) if r.game_type == game_type]
    matching.sort(key=lambda record: record.created_at)
    return matching[-size:] if size > 0 else []
