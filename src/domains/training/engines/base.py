# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Abstract base class for trial engines.

This module defines the TrialEngine ABC that every game instantiates. The
base class owns everything that is common to all games:
- The phase state machine (instruction, playing, feedback, completed)
- Per-trial timers driven by an external clock through ``tick``
- Pause and resume with exact restoration of remaining time
- Response scoring and aggregation into a SessionResult

Each game implementation (memory, attention, ...) only provides stimulus
generation and, where needed, response normalization.

Time model:
    The engine keeps a virtual clock in milliseconds that only moves when
    ``tick`` is called and the engine is not paused. Reaction times are
    measured on this clock, so a paused engine accrues no time and a tick
    that exhausts a trial produces exactly the same outcome as an explicit
    ``submit_response(None)`` at expiry.

Event ordering:
    ``start``, ``submit_response``, ``tick``, ``pause`` and ``resume`` are
    serialized through a FIFO queue. A call made from inside a callback
    (for example ``on_complete``) is processed after the current event,
    never interleaved with it.
"""

import logging
import math
import random
from abc import ABC, abstractmethod
from collections import deque
from datetime import datetime
from typing import Any, Callable

from src.domains.training.engines.sampling import DEFAULT_MAX_RETRIES
from src.domains.training.exceptions import SessionStateError
from src.domains.training.models import (
    DifficultyTier,
    GameDefinition,
    GamePhase,
    GameType,
    SessionResult,
    Trial,
    TrialOutcome,
    clamp_accuracy,
    clamp_difficulty,
    tier_for_level,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[SessionResult], None]

_ACTIVE_PHASES = (GamePhase.PLAYING, GamePhase.FEEDBACK)


class TrialEngine(ABC):
    """Abstract base class for all trial engines.

    Subclasses implement ``generate_trial``. Games with batch generation
    get all trials generated in ``start``; streaming games get one trial
    generated each time the previous one is resolved.

    Attributes:
        definition: Static definition of the game being played.
        difficulty_level: Clamped numeric difficulty (1-10).
        tier: Difficulty tier selecting the definition's modifiers.
        rng: Random source used by all generators.

    Example:
        engine = registry.create(GameType.SPEED, difficulty_level=3)
        engine.start()
        clock.on_tick(engine.tick)
        engine.submit_response(engine.current_trial.correct_answer)
    """

    game_type: GameType

    def __init__(
        self,
        definition: GameDefinition,
        difficulty_level: float = 1,
        tier: DifficultyTier | None = None,
        rng: random.Random | None = None,
        on_complete: CompletionCallback | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        self.definition = definition
        self.difficulty_level = clamp_difficulty(difficulty_level)
        self.tier = tier or tier_for_level(self.difficulty_level)
        self.rng = rng or random.Random()
        self.max_retries = max_retries
        self._on_complete = on_complete

        self._phase = GamePhase.INSTRUCTION
        self._paused = False
        self._now_ms = 0.0

        self._pending: deque[Trial] = deque()
        self._trial: Trial | None = None
        self._trials_presented = 0
        self._presented_at_ms = 0.0
        self._onset_remaining_ms = 0.0
        self._remaining_ms = 0.0
        self._feedback_remaining_ms = 0.0
        self._last_outcome: TrialOutcome | None = None

        self._score = 0
        self._correct = 0
        self._resolved = 0
        self._answered = 0
        self._reaction_total_ms = 0.0
        self._started_at: datetime | None = None
        self._result: SessionResult | None = None

        self._events: deque[tuple[Callable[..., Any], tuple[Any, ...]]] = deque()
        self._dispatching = False

    # ------------------------------------------------------------------
    # Generation hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def generate_trial(self, index: int) -> Trial:
        """Generate the trial at ``index``.

        Args:
            index: Zero-based position of the trial in the session.

        Returns:
            A new Trial.

        Raises:
            StimulusGenerationError: If resampling is exhausted.
        """
        pass

    def generate_batch(self) -> list[Trial]:
        """Generate every trial of the session up front."""
        return [self.generate_trial(i) for i in range(self.definition.trial_count)]

    def normalize_response(self, trial: Trial, response: Any) -> Any:
        """Convert a raw response into the form of ``trial.correct_answer``."""
        return response

    def is_correct(self, trial: Trial, response: Any) -> bool:
        return response == trial.correct_answer

    def score_points(self, trial: Trial, is_correct: bool, elapsed_ms: float) -> int:
        """Points for one resolved trial.

        A correct answer earns the base points plus a bonus proportional to
        the time left; anything else earns the (non-positive) penalty.
        """
        if not is_correct:
            return int(self.definition.penalty)
        remaining = max(trial.time_limit_ms - elapsed_ms, 0.0)
        return math.floor(
            self.definition.base_points + remaining * self.definition.speed_bonus_factor
        )

    def make_trial(
        self,
        index: int,
        stimulus: dict[str, Any],
        options: list[Any],
        correct_answer: Any,
        onset_ms: int = 0,
    ) -> Trial:
        """Build a Trial with the time limit for this level and tier."""
        return Trial(
            index=index,
            stimulus=stimulus,
            options=options,
            correct_answer=correct_answer,
            time_limit_ms=self.definition.time_limit_ms(self.difficulty_level, self.tier),
            onset_ms=onset_ms,
        )

    # ------------------------------------------------------------------
    # Public commands
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Leave the instruction phase and present the first trial.

        Returns:
            True if the engine started, False if it was already running.

        Raises:
            StimulusGenerationError: If the first trial (or batch) cannot
                be generated. The engine stays in the instruction phase.
        """
        return bool(self._dispatch(self._handle_start))

    def submit_response(self, response: Any) -> TrialOutcome | None:
        """Answer the current trial; ``None`` is an explicit timeout.

        Ignored outside the playing phase, while paused, and during the
        onset of a trial.

        Returns:
            The outcome, or None if the response was ignored or queued.
        """
        return self._dispatch(self._handle_response, response)

    def tick(self, delta_ms: float) -> None:
        """Advance the engine clock by ``delta_ms`` milliseconds."""
        self._dispatch(self._handle_tick, delta_ms)

    def pause(self) -> bool:
        """Freeze all timers. Idempotent; returns True if state changed."""
        return bool(self._dispatch(self._handle_pause))

    def resume(self) -> bool:
        """Unfreeze timers. Idempotent; returns True if state changed."""
        return bool(self._dispatch(self._handle_resume))

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def is_complete(self) -> bool:
        return self._phase is GamePhase.COMPLETED

    @property
    def current_trial(self) -> Trial | None:
        """Trial currently being presented, if any."""
        return self._trial

    @property
    def accepting_responses(self) -> bool:
        """True when a response would be scored right now."""
        return (
            self._phase is GamePhase.PLAYING
            and not self._paused
            and self._trial is not None
            and self._onset_remaining_ms <= 0
        )

    @property
    def onset_remaining_ms(self) -> float:
        return self._onset_remaining_ms if self._trial is not None else 0.0

    @property
    def time_remaining_ms(self) -> float:
        """Remaining response time of the current trial."""
        return self._remaining_ms if self._trial is not None else 0.0

    @property
    def feedback_remaining_ms(self) -> float:
        if self._phase is not GamePhase.FEEDBACK:
            return 0.0
        return self._feedback_remaining_ms

    @property
    def elapsed_ms(self) -> float:
        """Active (unpaused) time since the engine was created."""
        return self._now_ms

    @property
    def score(self) -> int:
        return self._score

    @property
    def correct_count(self) -> int:
        return self._correct

    @property
    def trials_completed(self) -> int:
        return self._resolved

    @property
    def last_outcome(self) -> TrialOutcome | None:
        """Outcome of the most recently resolved trial, kept for feedback."""
        return self._last_outcome

    @property
    def result(self) -> SessionResult | None:
        """Session result, available once the engine has completed."""
        return self._result

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def _dispatch(self, handler: Callable[..., Any], *args: Any) -> Any:
        if self._dispatching:
            self._events.append((handler, args))
            return None

        self._dispatching = True
        try:
            result = handler(*args)
            while self._events:
                queued, queued_args = self._events.popleft()
                queued(*queued_args)
            return result
        finally:
            self._dispatching = False
            self._events.clear()

    def _handle_start(self) -> bool:
        if self._phase is not GamePhase.INSTRUCTION:
            logger.debug("Ignoring start in phase %s", self._phase.value)
            return False

        if self.definition.batch_generation:
            self._pending = deque(self.generate_batch())
            first = None
        else:
            first = self.generate_trial(0)

        self._phase = GamePhase.PLAYING
        self._started_at = utc_now()
        logger.info(
            "Started %s at level %.1f (%s)",
            self.definition.game_type.value,
            self.difficulty_level,
            self.tier.value,
        )
        self._present_next(first)
        return True

    def _handle_response(self, response: Any) -> TrialOutcome | None:
        if not self.accepting_responses:
            logger.debug("Ignoring response in phase %s", self._phase.value)
            return None
        return self._resolve(response, self._now_ms - self._presented_at_ms)

    def _handle_tick(self, delta_ms: float) -> None:
        if self._paused or self._phase not in _ACTIVE_PHASES or delta_ms <= 0:
            return

        remaining = float(delta_ms)
        while remaining > 0 and not self._paused and self._phase in _ACTIVE_PHASES:
            if self._phase is GamePhase.FEEDBACK:
                step = min(remaining, self._feedback_remaining_ms)
                self._now_ms += step
                remaining -= step
                self._feedback_remaining_ms -= step
                if self._feedback_remaining_ms <= 0:
                    self._present_next()
            elif self._onset_remaining_ms > 0:
                step = min(remaining, self._onset_remaining_ms)
                self._now_ms += step
                remaining -= step
                self._onset_remaining_ms -= step
            else:
                step = min(remaining, self._remaining_ms)
                self._now_ms += step
                remaining -= step
                self._remaining_ms -= step
                if self._remaining_ms <= 0:
                    self._resolve(None, self._now_ms - self._presented_at_ms)

    def _handle_pause(self) -> bool:
        if self._paused or self._phase not in _ACTIVE_PHASES:
            return False
        self._paused = True
        logger.debug("Paused with %.0fms remaining", self.time_remaining_ms)
        return True

    def _handle_resume(self) -> bool:
        if not self._paused:
            return False
        self._paused = False
        logger.debug("Resumed with %.0fms remaining", self.time_remaining_ms)
        return True

    # ------------------------------------------------------------------
    # Trial lifecycle
    # ------------------------------------------------------------------

    def _present_next(self, trial: Trial | None = None) -> None:
        if self._trials_presented >= self.definition.trial_count:
            self._complete()
            return

        if trial is None:
            if self._pending:
                trial = self._pending.popleft()
            else:
                trial = self.generate_trial(self._trials_presented)

        self._trials_presented += 1
        self._trial = trial
        self._onset_remaining_ms = float(trial.onset_ms)
        self._remaining_ms = float(trial.time_limit_ms)
        self._presented_at_ms = self._now_ms + trial.onset_ms
        self._phase = GamePhase.PLAYING

    def _resolve(self, response: Any, elapsed_ms: float) -> TrialOutcome:
        trial = self._trial
        if trial is None:
            raise SessionStateError("No trial is being presented")

        timed_out = response is None
        normalized = None if timed_out else self.normalize_response(trial, response)
        correct = not timed_out and self.is_correct(trial, normalized)
        outcome = TrialOutcome(
            trial_index=trial.index,
            response=normalized,
            is_correct=correct,
            timed_out=timed_out,
            reaction_time_ms=max(elapsed_ms, 0.0),
            points=self.score_points(trial, correct, elapsed_ms),
        )

        self._score = max(0, self._score + outcome.points)
        self._resolved += 1
        if correct:
            self._correct += 1
        if not timed_out:
            self._answered += 1
            self._reaction_total_ms += outcome.reaction_time_ms

        self._trial = None
        self._last_outcome = outcome
        self.on_trial_resolved(trial, outcome)

        if self.definition.feedback_ms > 0:
            self._phase = GamePhase.FEEDBACK
            self._feedback_remaining_ms = float(self.definition.feedback_ms)
        else:
            self._present_next()
        return outcome

    def on_trial_resolved(self, trial: Trial, outcome: TrialOutcome) -> None:
        """Hook called after every scored trial."""
        pass

    def _complete(self) -> None:
        self._phase = GamePhase.COMPLETED
        self._trial = None
        self._pending.clear()

        total = self._resolved
        accuracy = clamp_accuracy(self._correct / total * 100) if total else 0.0
        mean_reaction = self._reaction_total_ms / self._answered if self._answered else 0.0

        self._result = SessionResult(
            game_type=self.definition.game_type,
            difficulty_level=self.difficulty_level,
            tier=self.tier,
            score=self._score,
            accuracy=accuracy,
            time_spent_ms=self._now_ms,
            mean_reaction_time_ms=mean_reaction,
            mistakes=total - self._correct,
            correct_count=self._correct,
            total_count=total,
            started_at=self._started_at,
            completed_at=utc_now(),
        )
        logger.info(
            "Completed %s: score=%d accuracy=%.1f%% time=%.0fms",
            self.definition.game_type.value,
            self._result.score,
            self._result.accuracy,
            self._result.time_spent_ms,
        )
        if self._on_complete is not None:
            self._on_complete(self._result)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(level={self.difficulty_level}, "
            f"phase={self._phase.value}, trial={self._trials_presented}/"
            f"{self.definition.trial_count})"
        )
