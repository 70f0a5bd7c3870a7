# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the five game engines."""

import random

import pytest

from src.domains.training.definitions import GameCatalogue
from src.domains.training.engines import (
    AttentionEngine,
    FlexibilityEngine,
    MemoryEngine,
    ProblemSolvingEngine,
    SpeedEngine,
    TrialEngine,
)
from src.domains.training.engines.sampling import sample_unique, unique_cells
from src.domains.training.exceptions import StimulusGenerationError
from src.domains.training.models import DifficultyTier, GamePhase, GameType


def play_perfectly(engine: TrialEngine) -> None:
    """Answer every trial correctly, waiting out onsets and feedback."""
    engine.start()
    while not engine.is_complete:
        if engine.phase is GamePhase.FEEDBACK:
            engine.tick(engine.feedback_remaining_ms)
            continue
        if engine.onset_remaining_ms > 0:
            engine.tick(engine.onset_remaining_ms)
        engine.submit_response(engine.current_trial.correct_answer)


@pytest.mark.unit
class TestSampling:
    """Tests for bounded resampling."""

    def test_sample_unique_returns_distinct_values(self) -> None:
        """Test values are distinct and respect the exclusion set."""
        rng = random.Random(7)
        values = sample_unique(lambda: rng.randint(1, 6), 4, exclude={3})

        assert len(values) == 4
        assert len(set(values)) == 4
        assert 3 not in values

    def test_sample_unique_gives_up(self) -> None:
        """Test an impossible draw raises instead of looping."""
        with pytest.raises(StimulusGenerationError) as exc_info:
            sample_unique(lambda: 1, 2, max_retries=5)

        assert exc_info.value.details["requested"] == 2
        assert exc_info.value.details["drawn"] == 1
        assert exc_info.value.details["max_retries"] == 5

    def test_unique_cells_cannot_exceed_grid(self) -> None:
        """Test asking for more cells than exist fails."""
        with pytest.raises(StimulusGenerationError) as exc_info:
            unique_cells(random.Random(1), cell_count=4, count=5, max_retries=20)

        assert exc_info.value.details == {"requested": 5, "available": 4}

    def test_oversized_request_fails_before_drawing(self) -> None:
        """Test an impossible grid request consumes no random draws."""
        rng = random.Random(1)
        state = rng.getstate()

        with pytest.raises(StimulusGenerationError):
            unique_cells(rng, cell_count=9, count=10)

        assert rng.getstate() == state


@pytest.mark.unit
class TestMemoryEngine:
    """Tests for the memory pattern engine."""

    def test_level_one_parameters(self, catalogue: GameCatalogue, rng) -> None:
        """Test grid size, sequence length and display time at level 1."""
        engine = MemoryEngine(catalogue.get(GameType.MEMORY), 1, rng=rng)
        engine.start()
        trial = engine.current_trial

        assert engine.grid_size == 3
        assert trial.stimulus["grid_size"] == 3
        assert len(trial.stimulus["sequence"]) == 4
        assert trial.stimulus["display_ms"] == 1000 + 800 * 4 + 500
        assert trial.onset_ms == trial.stimulus["display_ms"]
        assert trial.time_limit_ms == 13800

    def test_level_ten_is_capped(self, catalogue: GameCatalogue, rng) -> None:
        """Test grid and sequence caps at the highest level."""
        engine = MemoryEngine(catalogue.get(GameType.MEMORY), 10, rng=rng)

        assert engine.grid_size == 6
        assert engine.sequence_length == 12

    def test_sequence_cells_are_distinct_and_on_grid(
        self, catalogue: GameCatalogue, rng
    ) -> None:
        """Test every sequence uses distinct cells inside the grid."""
        engine = MemoryEngine(catalogue.get(GameType.MEMORY), 6, rng=rng)
        for trial in engine.generate_batch():
            sequence = trial.stimulus["sequence"]
            cells = trial.stimulus["grid_size"] ** 2
            assert len(set(sequence)) == len(sequence)
            assert all(0 <= cell < cells for cell in sequence)
            assert trial.correct_answer == tuple(sequence)

    def test_display_period_ignores_responses(
        self, catalogue: GameCatalogue, rng
    ) -> None:
        """Test responses during the display are ignored."""
        engine = MemoryEngine(catalogue.get(GameType.MEMORY), 1, rng=rng)
        engine.start()
        answer = list(engine.current_trial.correct_answer)

        assert engine.submit_response(answer) is None

        engine.tick(engine.onset_remaining_ms)
        outcome = engine.submit_response(answer)
        assert outcome.is_correct is True

    def test_wrong_order_is_incorrect(self, catalogue: GameCatalogue, rng) -> None:
        """Test the sequence must be reproduced in order."""
        engine = MemoryEngine(catalogue.get(GameType.MEMORY), 1, rng=rng)
        engine.start()
        engine.tick(engine.onset_remaining_ms)
        reversed_answer = list(reversed(engine.current_trial.correct_answer))

        assert engine.submit_response(reversed_answer).is_correct is False

    def test_unsatisfiable_sequence_fails_to_start(
        self, catalogue: GameCatalogue, rng
    ) -> None:
        """Test a sequence longer than the grid cannot be generated."""
        engine = MemoryEngine(
            catalogue.get(GameType.MEMORY),
            1,
            tier=DifficultyTier.MASTER,
            rng=rng,
            max_retries=20,
        )

        with pytest.raises(StimulusGenerationError):
            engine.start()
        assert engine.phase == GamePhase.INSTRUCTION

    def test_perfect_session(self, catalogue: GameCatalogue, rng) -> None:
        """Test a perfect memory session."""
        engine = MemoryEngine(catalogue.get(GameType.MEMORY), 3, rng=rng)
        play_perfectly(engine)

        assert engine.result.accuracy == 100.0
        assert engine.result.total_count == 5


@pytest.mark.unit
class TestAttentionEngine:
    """Tests for the focus engine."""

    def test_item_counts(self, catalogue: GameCatalogue, rng) -> None:
        """Test target and distractor counts at level 1."""
        engine = AttentionEngine(catalogue.get(GameType.ATTENTION), 1, rng=rng)
        engine.start()
        items = engine.current_trial.stimulus["items"]

        targets = [item for item in items if item["color"] == "blue"]
        assert len(targets) == 3
        assert len(items) == 10
        assert engine.current_trial.correct_answer == frozenset(
            item["id"] for item in targets
        )

    def test_ids_do_not_reveal_targets(self, catalogue: GameCatalogue, rng) -> None:
        """Test target ids vary between rounds and follow the display order."""
        engine = AttentionEngine(catalogue.get(GameType.ATTENTION), 1, rng=rng)
        trials = [engine.generate_trial(i) for i in range(8)]

        for trial in trials:
            assert [item["id"] for item in trial.stimulus["items"]] == list(range(10))
        assert {trial.correct_answer for trial in trials} != {frozenset({0, 1, 2})}

    def test_counts_are_capped(self, catalogue: GameCatalogue, rng) -> None:
        """Test the caps at the highest level."""
        engine = AttentionEngine(catalogue.get(GameType.ATTENTION), 10, rng=rng)

        assert engine.target_count == 6
        assert engine.distractor_count == 20

    def test_items_do_not_overlap(self, catalogue: GameCatalogue, rng) -> None:
        """Test no two items share a cell."""
        engine = AttentionEngine(catalogue.get(GameType.ATTENTION), 10, rng=rng)
        trial = engine.generate_trial(0)
        cells = {(item["row"], item["col"]) for item in trial.stimulus["items"]}

        assert len(cells) == len(trial.stimulus["items"])
        assert all(0 <= r < 7 and 0 <= c < 7 for r, c in cells)

    def test_target_set_in_any_order_is_correct(
        self, catalogue: GameCatalogue, rng
    ) -> None:
        """Test the answer is compared as a set."""
        engine = AttentionEngine(catalogue.get(GameType.ATTENTION), 1, rng=rng)
        engine.start()
        targets = sorted(engine.current_trial.correct_answer)

        outcome = engine.submit_response(list(reversed(targets)))

        assert outcome.is_correct is True
        assert outcome.points > 50

    def test_partial_selection_scores_penalty(
        self, catalogue: GameCatalogue, rng
    ) -> None:
        """Test a partial selection is wrong and penalized."""
        engine = AttentionEngine(catalogue.get(GameType.ATTENTION), 1, rng=rng)
        engine.start()
        targets = sorted(engine.current_trial.correct_answer)

        outcome = engine.submit_response(targets[:2])

        assert outcome.is_correct is False
        assert outcome.points == -25
        assert engine.score == 0


@pytest.mark.unit
class TestFlexibilityEngine:
    """Tests for the task-switching engine."""

    def test_first_task_is_color(self, catalogue: GameCatalogue, rng) -> None:
        """Test the first trial always asks for the color."""
        engine = FlexibilityEngine(catalogue.get(GameType.FLEXIBILITY), 10, rng=rng)
        engine.start()
        trial = engine.current_trial

        assert trial.stimulus["task"] == "color"
        assert trial.correct_answer == trial.stimulus["color"]
        assert trial.correct_answer in trial.options

    def test_switch_probability(self, catalogue: GameCatalogue) -> None:
        """Test switch probability grows with level and tier."""
        definition = catalogue.get(GameType.FLEXIBILITY)

        easy = FlexibilityEngine(definition, 1)
        master = FlexibilityEngine(definition, 10)

        assert easy.switch_probability == pytest.approx(0.32)
        assert master.switch_probability == 1.0

    def test_always_switching_at_top_level(
        self, catalogue: GameCatalogue, rng
    ) -> None:
        """Test every trial after the first switches task at level 10."""
        engine = FlexibilityEngine(catalogue.get(GameType.FLEXIBILITY), 10, rng=rng)
        tasks = []
        engine.start()
        while not engine.is_complete:
            if engine.phase is GamePhase.FEEDBACK:
                engine.tick(engine.feedback_remaining_ms)
                continue
            trial = engine.current_trial
            tasks.append(trial.stimulus["task"])
            engine.submit_response(trial.correct_answer)

        assert len(tasks) == 15
        assert engine.task_switches == 14
        assert all(a != b for a, b in zip(tasks, tasks[1:]))

    def test_number_answer_is_string(self, catalogue: GameCatalogue) -> None:
        """Test numeric answers are compared as strings."""
        engine = FlexibilityEngine(
            catalogue.get(GameType.FLEXIBILITY), 10, rng=random.Random(3)
        )
        engine.start()
        engine.current_task = "number"
        trial = engine.generate_trial(5)

        if trial.stimulus["task"] == "number":
            assert trial.correct_answer == str(trial.stimulus["number"])
        assert isinstance(trial.correct_answer, str)
        assert trial.correct_answer in trial.options


@pytest.mark.unit
class TestProblemSolvingEngine:
    """Tests for the logic puzzle engine."""

    def test_batch_of_distinct_options(self, catalogue: GameCatalogue, rng) -> None:
        """Test every problem offers four distinct options with the answer."""
        engine = ProblemSolvingEngine(
            catalogue.get(GameType.PROBLEM_SOLVING), 3, rng=rng
        )
        trials = engine.generate_batch()

        assert len(trials) == 6
        for trial in trials:
            assert len(trial.options) == 4
            assert len(set(trial.options)) == 4
            assert trial.correct_answer in trial.options
            assert trial.stimulus["kind"] in ("math", "logic", "pattern")

    def test_complexity_rises_through_session(
        self, catalogue: GameCatalogue, rng
    ) -> None:
        """Test complexity follows (level + i * 0.5) * tier multiplier."""
        engine = ProblemSolvingEngine(
            catalogue.get(GameType.PROBLEM_SOLVING), 3, rng=rng
        )

        assert engine.complexity(0) == pytest.approx(3.0)
        assert engine.complexity(4) == pytest.approx(5.0)

    def test_math_answers_are_right(self, catalogue: GameCatalogue) -> None:
        """Test generated arithmetic problems carry the right answer."""
        engine = ProblemSolvingEngine(
            catalogue.get(GameType.PROBLEM_SOLVING), 2, rng=random.Random(11)
        )
        math_trials = [
            trial
            for trial in (engine.generate_trial(i) for i in range(60))
            if trial.stimulus["kind"] == "math"
        ]

        assert math_trials
        for trial in math_trials:
            expression = trial.stimulus["question"].removesuffix(" = ?")
            expected = eval(expression.replace("×", "*"))  # noqa: S307
            assert trial.correct_answer == str(expected)

    def test_numeric_response_is_accepted(
        self, catalogue: GameCatalogue, rng
    ) -> None:
        """Test an int response matches a string answer."""
        engine = ProblemSolvingEngine(
            catalogue.get(GameType.PROBLEM_SOLVING), 3, rng=rng
        )
        trial = engine.generate_trial(0)

        assert engine.normalize_response(trial, 36) == "36"


@pytest.mark.unit
class TestSpeedEngine:
    """Tests for the speed engine."""

    @pytest.fixture
    def trials(self, catalogue: GameCatalogue) -> list:
        engine = SpeedEngine(
            catalogue.get(GameType.SPEED), 5, rng=random.Random(99)
        )
        return [engine.generate_trial(i) for i in range(200)]

    def test_all_kinds_appear(self, trials: list) -> None:
        """Test the generator mixes every task kind."""
        kinds = {trial.stimulus["kind"] for trial in trials}

        assert kinds == {"reaction", "comparison", "arithmetic", "matching"}

    def test_reaction_foreperiod(self, trials: list) -> None:
        """Test reaction trials wait 1-4 seconds before opening."""
        for trial in trials:
            if trial.stimulus["kind"] == "reaction":
                assert 1000 <= trial.onset_ms <= 4000
                assert trial.options == ["click"]
            else:
                assert trial.onset_ms == 0

    def test_comparison_answer(self, trials: list) -> None:
        """Test comparison trials answer whether first > second."""
        for trial in trials:
            if trial.stimulus["kind"] == "comparison":
                first, second = trial.stimulus["first"], trial.stimulus["second"]
                assert trial.correct_answer == ("yes" if first > second else "no")

    def test_choice_options_are_distinct(self, trials: list) -> None:
        """Test arithmetic and matching options are distinct."""
        for trial in trials:
            if trial.stimulus["kind"] in ("arithmetic", "matching"):
                assert len(trial.options) == 4
                assert len(set(trial.options)) == 4
                assert trial.correct_answer in trial.options

    def test_time_limit_shrinks_with_level(self, catalogue: GameCatalogue) -> None:
        """Test higher levels leave less time per trial."""
        definition = catalogue.get(GameType.SPEED)
        low = SpeedEngine(definition, 1, rng=random.Random(1)).generate_trial(0)
        high = SpeedEngine(definition, 9, rng=random.Random(1)).generate_trial(0)

        assert high.time_limit_ms < low.time_limit_ms


@pytest.mark.unit
class TestPerfectSessions:
    """Every engine completes with full accuracy when played perfectly."""

    @pytest.mark.parametrize("game_type", list(GameType))
    @pytest.mark.parametrize("level", [1, 5, 10])
    def test_perfect_play(self, game_type: GameType, level: int) -> None:
        """Test perfect play yields 100% accuracy and a positive score."""
        from src.domains.training.engines import get_engine_registry

        engine = get_engine_registry().create(
            game_type, difficulty_level=level, rng=random.Random(level)
        )
        play_perfectly(engine)

        result = engine.result
        assert result.accuracy == 100.0
        assert result.mistakes == 0
        assert result.score > 0
        assert result.total_count == engine.definition.trial_count
