# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Progress summaries and the daily challenge.

Both functions are pure: they read performance records and never write.
"""

import math
import random
from datetime import date
from typing import Iterable

from src.domains.training.adaptive.trend import valid_records
from src.domains.training.models import (
    MIN_DIFFICULTY,
    DailyChallenge,
    GameStats,
    GameType,
    PerformanceRecord,
)

CHALLENGE_MAX_LEVEL = 5


def game_stats(records: Iterable[PerformanceRecord], game_type: GameType) -> GameStats:
    """Summarize one game's history.

    The average score is rounded half up and the current level is the
    highest level played. An unplayed game reports zeros at level 1.
    """
    played = [r for r in valid_records(records) if r.game_type == game_type]
    if not played:
        return GameStats(game_type=game_type)

    average = sum(r.score for r in played) / len(played)
    return GameStats(
        game_type=game_type,
        average_score=math.floor(average + 0.5),
        best_score=max(r.score for r in played),
        games_played=len(played),
        current_level=max(MIN_DIFFICULTY, max(r.difficulty_level for r in played)),
    )


def daily_challenge(
    user_id: str,
    day: date,
    records: Iterable[PerformanceRecord] = (),
) -> DailyChallenge:
    """Today's challenge for a user.

    The game and level (1-5) are drawn from a generator seeded with the
    user and the day, so every call on the same day agrees. The challenge
    counts as completed once a session of that game was recorded that day.
    """
    rng = random.Random(f"{user_id}:{day.isoformat()}")
    game_type = rng.choice(list(GameType))
    level = rng.randint(1, CHALLENGE_MAX_LEVEL)

    completed = any(
        r.game_type == game_type and r.created_at.date() == day
        for r in valid_records(records)
    )
    return DailyChallenge(
        user_id=user_id,
        day=day,
        game_type=game_type,
        level=level,
        completed=completed,
    )
