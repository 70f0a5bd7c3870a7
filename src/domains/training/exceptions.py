# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Custom exceptions for the training domain.

This module defines the exception hierarchy for training operations:
- TrainingError: Base exception for all training-related errors
- StimulusGenerationError: Bounded resampling exhausted
- DefinitionNotFoundError: No game definition for a game type
- EngineNotRegisteredError: No engine registered for a game type
- SessionStateError: Structural misuse of a session controller

Phase violations on a running engine (answering before start, ticking a
finished game) are deliberately not represented here: the engine ignores
them.
"""

from typing import Any

from src.domains.training.models import GameType


class TrainingError(Exception):
    """Base exception for training errors.

    Attributes:
        message: Error description.
        game_type: Type of game that raised the error.
        details: Additional error details.
    """

    def __init__(
        self,
        message: str,
        game_type: GameType | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.game_type = game_type
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class StimulusGenerationError(TrainingError):
    """Raised when a generator cannot produce a valid stimulus.

    Typically the parameters ask for more distinct values than the
    population holds (e.g. a 13-cell sequence on a 3x3 grid).
    """

    pass


class DefinitionNotFoundError(TrainingError):
    """Raised when the game catalogue has no entry for a game type."""

    pass


class EngineNotRegisteredError(TrainingError):
    """Raised when attempting to get an unregistered engine.

    Attributes:
        available: List of registered game types.
    """

    def __init__(self, game_type: GameType, available: list[GameType]) -> None:
        self.available = available
        available_str = ", ".join(t.value for t in available)
        super().__init__(
            f"Engine for '{game_type.value}' not registered. "
            f"Available: {available_str or 'none'}",
            game_type=game_type,
        )


class SessionStateError(TrainingError):
    """Raised when a session controller is driven outside its lifecycle."""

    pass
