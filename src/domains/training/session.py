# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Session controller for single games and workouts.

A SessionController plays a queue of ``(game_type, difficulty_level)``
entries, one trial engine at a time:

    setup -> playing <-> paused -> setup (next game) ... -> completed
                                                  \\-> abandoned

``start`` starts the engine of the current entry. When an engine
completes, its SessionResult is handed to the recorder (normally
TrainingService.record_result) and the controller returns to setup for
the next entry, or to completed after the last one. ``abandon`` drops the
current engine without recording anything.

Example:
    controller = SessionController.for_game(GameType.MEMORY, 3, recorder=record)
    controller.attach(clock)
    controller.start()
    controller.submit_response(answer)
"""

import logging
import random
from enum import Enum
from typing import Any, Callable, Sequence

from src.domains.training.clock import Clock, Unsubscribe
from src.domains.training.engines.base import TrialEngine
from src.domains.training.engines.registry import EngineRegistry, get_engine_registry
from src.domains.training.exceptions import SessionStateError
from src.domains.training.models import (
    GameType,
    SessionResult,
    TrialOutcome,
    WorkoutPlan,
    clamp_difficulty,
)

logger = logging.getLogger(__name__)

Recorder = Callable[[SessionResult], Any]
GameEntry = tuple[GameType, float]


class ControllerState(str, Enum):
    """Lifecycle states of a session controller."""

    SETUP = "setup"
    PLAYING = "playing"
    PAUSED = "paused"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


_FINAL_STATES = (ControllerState.COMPLETED, ControllerState.ABANDONED)


class SessionController:
    """Drives one or more trial engines as a user-facing session.

    Attributes:
        results: SessionResults of the games completed so far.
        recorded: Values returned by the recorder, one per result (None when
            the recorder raised).
    """

    def __init__(
        self,
        games: Sequence[GameEntry],
        registry: EngineRegistry | None = None,
        recorder: Recorder | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if not games:
            raise SessionStateError("A session needs at least one game")

        self._games: list[GameEntry] = [
            (GameType(game_type), clamp_difficulty(level)) for game_type, level in games
        ]
        self._registry = registry or get_engine_registry()
        self._recorder = recorder
        self._rng = rng

        self._position = 0
        self._engine: TrialEngine | None = None
        self._state = ControllerState.SETUP
        self._unsubscribe: Unsubscribe | None = None

        self.results: list[SessionResult] = []
        self.recorded: list[Any] = []

    @classmethod
    def for_game(
        cls, game_type: GameType, difficulty_level: float = 1, **kwargs: Any
    ) -> "SessionController":
        """Controller for a single game."""
        return cls([(game_type, difficulty_level)], **kwargs)

    @classmethod
    def for_workout(cls, plan: WorkoutPlan, **kwargs: Any) -> "SessionController":
        """Controller playing every game of a workout plan in order."""
        games = [(g, plan.difficulty_levels.get(g, 1.0)) for g in plan.game_types]
        return cls(games, **kwargs)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def engine(self) -> TrialEngine | None:
        """Engine of the current game; built on first access in setup."""
        if self._engine is None and self._state is ControllerState.SETUP:
            self._engine = self._build_engine()
        return self._engine

    @property
    def current_game(self) -> GameEntry | None:
        if self._position >= len(self._games) or self._state in _FINAL_STATES:
            return None
        return self._games[self._position]

    @property
    def games(self) -> list[GameEntry]:
        return list(self._games)

    @property
    def remaining_games(self) -> int:
        if self._state in _FINAL_STATES:
            return 0
        return len(self._games) - self._position

    @property
    def is_finished(self) -> bool:
        return self._state in _FINAL_STATES

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Start the current game.

        Returns:
            True if a game was started, False if one is already running.

        Raises:
            SessionStateError: If the session is completed or abandoned.
            StimulusGenerationError: If the engine cannot generate trials.
        """
        if self._state in _FINAL_STATES:
            raise SessionStateError(f"Cannot start a session that is {self._state.value}")
        if self._state is not ControllerState.SETUP:
            return False

        engine = self.engine
        if engine is None:
            raise SessionStateError("No engine for the current game")
        self._state = ControllerState.PLAYING
        try:
            engine.start()
        except Exception:
            self._state = ControllerState.SETUP
            raise
        return True

    def submit_response(self, response: Any) -> TrialOutcome | None:
        """Forward a response to the running engine; ignored otherwise."""
        if self._state is not ControllerState.PLAYING or self._engine is None:
            return None
        return self._engine.submit_response(response)

    def tick(self, delta_ms: float) -> None:
        """Forward a clock tick to the running engine; ignored otherwise."""
        if self._state is ControllerState.PLAYING and self._engine is not None:
            self._engine.tick(delta_ms)

    def pause(self) -> bool:
        """Pause the running game. Idempotent."""
        if self._state is not ControllerState.PLAYING or self._engine is None:
            return False
        self._engine.pause()
        self._state = ControllerState.PAUSED
        return True

    def resume(self) -> bool:
        """Resume a paused game. Idempotent."""
        if self._state is not ControllerState.PAUSED or self._engine is None:
            return False
        self._engine.resume()
        self._state = ControllerState.PLAYING
        return True

    def abandon(self) -> None:
        """Stop the session without recording the current game."""
        if self._state in _FINAL_STATES:
            return
        self.detach()
        self._engine = None
        self._state = ControllerState.ABANDONED
        logger.info("Session abandoned after %d of %d games", len(self.results), len(self._games))

    def attach(self, clock: Clock) -> None:
        """Subscribe to a clock; replaces any previous subscription."""
        self.detach()
        self._unsubscribe = clock.on_tick(self.tick)

    def detach(self) -> None:
        """Unsubscribe from the current clock, if any."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build_engine(self) -> TrialEngine:
        game_type, level = self._games[self._position]
        return self._registry.create(
            game_type,
            difficulty_level=level,
            rng=self._rng,
            on_complete=self._handle_complete,
        )

    def _handle_complete(self, result: SessionResult) -> None:
        self.results.append(result)
        if self._recorder is not None:
            try:
                self.recorded.append(self._recorder(result))
            except Exception as e:
                # A lost record must not stall the session
                logger.warning(
                    "Recording %s result failed: %s", result.game_type.value, str(e)
                )
                self.recorded.append(None)

        self._position += 1
        self._engine = None
        if self._position >= len(self._games):
            self._state = ControllerState.COMPLETED
            self.detach()
            logger.info("Session completed: %d games", len(self.results))
        else:
            self._state = ControllerState.SETUP
            logger.debug(
                "Game %d of %d done, next: %s",
                self._position,
                len(self._games),
                self._games[self._position][0].value,
            )

    def __repr__(self) -> str:
        return (
            f"SessionController(state={self._state.value}, "
            f"game={self._position + 1}/{len(self._games)})"
        )
