# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for workout composition."""

import pytest

from src.domains.training.adaptive import WorkoutComposer
from src.domains.training.adaptive.workout import (
    analyze_game_performance,
    coerce_preferences,
)
from src.domains.training.models import (
    GameType,
    PreferredDifficulty,
    UserPreferences,
)

CLOSING = (
    "The difficulty levels are adjusted to challenge you optimally "
    "while ensuring progress."
)


@pytest.fixture
def composer() -> WorkoutComposer:
    """Provide a composer with default parameters."""
    return WorkoutComposer()


@pytest.mark.unit
class TestPerformanceAnalysis:
    """Tests for per-game running averages."""

    def test_running_averages(self, make_record) -> None:
        """Test averages per game type."""
        records = [
            make_record(accuracy=60, score=100),
            make_record(accuracy=80, score=300),
            make_record(game_type=GameType.SPEED, accuracy=90, score=50),
        ]

        stats = analyze_game_performance(records)

        assert stats[GameType.MEMORY].avg_accuracy == pytest.approx(70)
        assert stats[GameType.MEMORY].avg_score == pytest.approx(200)
        assert stats[GameType.MEMORY].games_played == 2
        assert stats[GameType.SPEED].games_played == 1
        assert GameType.ATTENTION not in stats


@pytest.mark.unit
class TestPreferences:
    """Tests for preference coercion."""

    def test_none_gives_defaults(self) -> None:
        """Test missing preferences fall back to defaults."""
        prefs = coerce_preferences(None)

        assert prefs == UserPreferences()
        assert prefs.workout_duration_minutes == 15

    def test_malformed_mapping_keeps_favorites(self) -> None:
        """Test invalid fields fall back while favorites survive."""
        prefs = coerce_preferences(
            {
                "preferred_difficulty": "extreme",
                "favorite_game_types": '["speed", "bogus"]',
            }
        )

        assert prefs.preferred_difficulty == PreferredDifficulty.MEDIUM
        assert prefs.favorite_game_types == [GameType.SPEED]

    def test_unparseable_favorites(self) -> None:
        """Test broken favorite lists become empty."""
        prefs = coerce_preferences({"favorite_game_types": "{not json"})

        assert prefs.favorite_game_types == []


@pytest.mark.unit
class TestCompose:
    """Tests for WorkoutComposer.compose."""

    def test_empty_history(self, composer: WorkoutComposer) -> None:
        """Test a new user gets the first three games at level 1."""
        plan = composer.compose(None, [])

        assert plan.game_types == [
            GameType.MEMORY,
            GameType.ATTENTION,
            GameType.FLEXIBILITY,
        ]
        assert set(plan.difficulty_levels.values()) == {1.0}
        assert plan.duration_minutes == 15
        assert plan.favorite_game_types == []
        assert plan.reasoning == (
            f"This workout is tailored for you based on: {CLOSING}"
        )

    def test_strong_favorite_is_appended(
        self, composer: WorkoutComposer, make_record
    ) -> None:
        """Test a strong game is not a focus but can join as a favorite."""
        history = []
        for game_type in (GameType.ATTENTION, GameType.MEMORY, GameType.FLEXIBILITY):
            history += [make_record(game_type=game_type, accuracy=50) for _ in range(3)]
        history += [make_record(game_type=GameType.SPEED, accuracy=95) for _ in range(3)]
        prefs = UserPreferences(
            favorite_game_types=[GameType.SPEED],
            preferred_difficulty=PreferredDifficulty.HARD,
        )

        plan = composer.compose(prefs, history)

        assert GameType.SPEED not in plan.focus_game_types
        assert plan.focus_game_types == [
            GameType.MEMORY,
            GameType.ATTENTION,
            GameType.FLEXIBILITY,
        ]
        assert plan.game_types[-1] == GameType.SPEED
        assert plan.favorite_game_types == [GameType.SPEED]
        assert plan.difficulty_levels[GameType.MEMORY] == 2
        assert plan.difficulty_levels[GameType.SPEED] == 3
        assert (
            plan.difficulty_levels[GameType.SPEED]
            > plan.difficulty_levels[GameType.MEMORY]
        )
        assert plan.reasoning == (
            "This workout is tailored for you based on: "
            "Focusing on improving memory, attention, flexibility skills. "
            f"Including your favorite activities. {CLOSING}"
        )

    def test_weakest_games_are_focused(
        self, composer: WorkoutComposer, make_record
    ) -> None:
        """Test the lowest-accuracy games form the focus set."""
        history = [
            make_record(game_type=GameType.SPEED, accuracy=20),
            make_record(game_type=GameType.PROBLEM_SOLVING, accuracy=30),
            make_record(game_type=GameType.MEMORY, accuracy=90),
            make_record(game_type=GameType.ATTENTION, accuracy=95),
        ]

        plan = composer.compose(None, history)

        assert plan.focus_game_types == [
            GameType.SPEED,
            GameType.PROBLEM_SOLVING,
            GameType.FLEXIBILITY,
        ]
        assert "problem solving, speed skills" in plan.reasoning

    def test_unplayed_games_rank_at_neutral_accuracy(
        self, composer: WorkoutComposer, make_record
    ) -> None:
        """Test unplayed games at 50 outrank played games above 50."""
        history = [
            make_record(game_type=GameType.MEMORY, accuracy=60),
            make_record(game_type=GameType.ATTENTION, accuracy=65),
            make_record(game_type=GameType.FLEXIBILITY, accuracy=70),
        ]

        plan = composer.compose(None, history)

        assert plan.focus_game_types == [
            GameType.PROBLEM_SOLVING,
            GameType.SPEED,
            GameType.MEMORY,
        ]
        assert GameType.ATTENTION not in plan.game_types
        assert GameType.FLEXIBILITY not in plan.game_types

    def test_difficulty_from_recent_sessions(self, make_record) -> None:
        """Test focus difficulty follows the last five sessions."""
        composer = WorkoutComposer(focus_count=5, max_games=5)
        history = [make_record(accuracy=10, difficulty_level=2)]
        history += [make_record(accuracy=90, difficulty_level=4) for _ in range(5)]
        history += [
            make_record(game_type=GameType.SPEED, accuracy=40, difficulty_level=3)
        ]
        history += [
            make_record(game_type=GameType.ATTENTION, accuracy=70, difficulty_level=6)
        ]

        plan = composer.compose(None, history)

        assert plan.difficulty_levels[GameType.MEMORY] == 5
        assert plan.difficulty_levels[GameType.SPEED] == 2
        assert plan.difficulty_levels[GameType.ATTENTION] == 6
        assert plan.difficulty_levels[GameType.FLEXIBILITY] == 1

    def test_favorite_already_selected(
        self, composer: WorkoutComposer
    ) -> None:
        """Test a favorite in the focus set is not added twice."""
        prefs = UserPreferences(favorite_game_types=[GameType.MEMORY])

        plan = composer.compose(prefs, [])

        assert plan.game_types.count(GameType.MEMORY) == 1
        assert plan.favorite_game_types == []
        assert "favorite" not in plan.reasoning

    def test_only_one_favorite(self, composer: WorkoutComposer) -> None:
        """Test at most one favorite is appended."""
        prefs = UserPreferences(
            favorite_game_types=[GameType.SPEED, GameType.PROBLEM_SOLVING]
        )

        plan = composer.compose(prefs, [])

        assert len(plan.game_types) == 4
        assert plan.favorite_game_types == [GameType.SPEED]
        assert plan.difficulty_levels[GameType.SPEED] == 2

    def test_game_cap(self) -> None:
        """Test no favorite is added when the cap is reached."""
        composer = WorkoutComposer(max_games=3)
        prefs = UserPreferences(favorite_game_types=[GameType.SPEED])

        plan = composer.compose(prefs, [])

        assert len(plan.game_types) == 3
        assert GameType.SPEED not in plan.game_types

    def test_duration_precedence(self, composer: WorkoutComposer) -> None:
        """Test explicit duration beats preference beats default."""
        prefs = UserPreferences(workout_duration_minutes=20)

        assert composer.compose(prefs, []).duration_minutes == 20
        assert composer.compose(prefs, [], 30).duration_minutes == 30
        assert composer.compose(None, []).duration_minutes == 15

    def test_malformed_inputs(self, composer: WorkoutComposer, make_record) -> None:
        """Test garbage preferences and history never raise."""
        history = [make_record(accuracy=40), {"junk": 1}, None]
        prefs = {"favorite_game_types": ["speed"], "workout_duration_minutes": -5}

        plan = composer.compose(prefs, history)

        assert plan.game_types[0] == GameType.MEMORY
        assert GameType.SPEED in plan.game_types
        assert plan.duration_minutes == 15

    def test_history_as_mappings(self, composer: WorkoutComposer, make_record) -> None:
        """Test raw mappings are accepted as history."""
        history = [
            make_record(game_type=GameType.SPEED, accuracy=10).model_dump(mode="json")
        ]

        plan = composer.compose(None, history)

        assert plan.game_types[0] == GameType.SPEED

    def test_minutes_per_game(self, composer: WorkoutComposer) -> None:
        """Test the even per-game share."""
        plan = composer.compose(None, [], 12)

        assert plan.minutes_per_game == 4
