# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Trial engine registry.

This module provides:
- EngineRegistry: Central registry of engine classes by game type
- get_engine_registry: Factory function for the default registry

Engines hold per-session state, so the registry stores engine classes and
builds a fresh engine for every session with ``create``.

Usage:
    from src.domains.training.engines import get_engine_registry

    registry = get_engine_registry()
    engine = registry.create(GameType.MEMORY, difficulty_level=4)
    engine.start()
"""

import logging
import random
from typing import Iterator

from src.domains.training.definitions import GameCatalogue, get_game_catalogue
from src.domains.training.engines.base import CompletionCallback, TrialEngine
from src.domains.training.engines.sampling import DEFAULT_MAX_RETRIES
from src.domains.training.exceptions import EngineNotRegisteredError
from src.domains.training.models import DifficultyTier, GameType

logger = logging.getLogger(__name__)

EngineClass = type[TrialEngine]


class EngineRegistry:
    """Registry of trial engine classes.

    Attributes:
        _engines: Dictionary mapping game types to engine classes.

    Example:
        registry = EngineRegistry()
        registry.register(MemoryEngine)

        engine = registry.create(GameType.MEMORY, difficulty_level=3)
    """

    def __init__(
        self,
        catalogue: GameCatalogue | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        """Initialize an empty engine registry.

        Args:
            catalogue: Definitions used by ``create``. Defaults to the
                package catalogue, loaded on first use.
            max_retries: Resampling cap passed to every created engine.
        """
        self._engines: dict[GameType, EngineClass] = {}
        self._catalogue = catalogue
        self.max_retries = max_retries

    @property
    def catalogue(self) -> GameCatalogue:
        if self._catalogue is None:
            self._catalogue = get_game_catalogue()
        return self._catalogue

    def register(self, engine_class: EngineClass) -> None:
        """Register an engine class.

        Raises:
            ValueError: If an engine for this game type already exists.
        """
        game_type = engine_class.game_type

        if game_type in self._engines:
            raise ValueError(
                f"Engine for '{game_type.value}' is already registered. "
                f"Use replace() to override."
            )

        self._engines[game_type] = engine_class
        logger.info(
            "Registered trial engine: %s (%s)", engine_class.__name__, game_type.value
        )

    def replace(self, engine_class: EngineClass) -> None:
        """Register or replace the engine class for its game type."""
        game_type = engine_class.game_type
        if game_type in self._engines:
            logger.info(
                "Replacing trial engine for %s: %s",
                game_type.value,
                engine_class.__name__,
            )
        self._engines[game_type] = engine_class

    def unregister(self, game_type: GameType) -> None:
        """Remove an engine class from the registry.

        Raises:
            KeyError: If no engine is registered for this game type.
        """
        if game_type not in self._engines:
            raise KeyError(f"No engine registered for '{game_type.value}'")

        del self._engines[game_type]
        logger.info("Unregistered trial engine for: %s", game_type.value)

    def get(self, game_type: GameType) -> EngineClass:
        """Get the engine class for a game type.

        Raises:
            EngineNotRegisteredError: If no engine is registered.
        """
        if game_type not in self._engines:
            raise EngineNotRegisteredError(
                game_type=game_type,
                available=list(self._engines.keys()),
            )
        return self._engines[game_type]

    def has(self, game_type: GameType) -> bool:
        return game_type in self._engines

    def list_types(self) -> list[GameType]:
        """List all registered game types."""
        return list(self._engines.keys())

    def create(
        self,
        game_type: GameType,
        difficulty_level: float = 1,
        tier: DifficultyTier | None = None,
        rng: random.Random | None = None,
        on_complete: CompletionCallback | None = None,
    ) -> TrialEngine:
        """Build a new engine for one session.

        Args:
            game_type: Game to play.
            difficulty_level: Numeric difficulty, clamped to 1-10.
            tier: Modifier tier; derived from the level when omitted.
            rng: Random source; a fresh one when omitted.
            on_complete: Called once with the SessionResult.

        Returns:
            An engine in the instruction phase.

        Raises:
            EngineNotRegisteredError: If no engine is registered.
            DefinitionNotFoundError: If the catalogue lacks the game.
        """
        engine_class = self.get(game_type)
        definition = self.catalogue.get(game_type)
        return engine_class(
            definition,
            difficulty_level=difficulty_level,
            tier=tier,
            rng=rng,
            on_complete=on_complete,
            max_retries=self.max_retries,
        )

    def clear(self) -> None:
        """Remove all engines from the registry."""
        self._engines.clear()
        logger.info("Engine registry cleared")

    def __len__(self) -> int:
        return len(self._engines)

    def __contains__(self, game_type: GameType) -> bool:
        return game_type in self._engines

    def __iter__(self) -> Iterator[GameType]:
        return iter(self._engines)

    def __repr__(self) -> str:
        types = ", ".join(t.value for t in self._engines.keys())
        return f"EngineRegistry([{types}])"


# Global default registry instance (lazy-loaded)
_default_registry: EngineRegistry | None = None


def get_engine_registry() -> EngineRegistry:
    """Get or create the global default engine registry.

    Returns:
        Registry with all five game engines registered.
    """
    global _default_registry

    if _default_registry is None:
        _default_registry = _create_default_registry()

    return _default_registry


def _create_default_registry() -> EngineRegistry:
    from src.core.config.settings import get_settings
    from src.domains.training.engines.attention import AttentionEngine
    from src.domains.training.engines.flexibility import FlexibilityEngine
    from src.domains.training.engines.memory import MemoryEngine
    from src.domains.training.engines.problem_solving import ProblemSolvingEngine
    from src.domains.training.engines.speed import SpeedEngine

    settings = get_settings()
    registry = EngineRegistry(max_retries=settings.training.generation_max_retries)
    for engine_class in (
        MemoryEngine,
        AttentionEngine,
        FlexibilityEngine,
        ProblemSolvingEngine,
        SpeedEngine,
    ):
        registry.register(engine_class)

    logger.info("Created default EngineRegistry with %d engines", len(registry))
    return registry


def reset_engine_registry() -> None:
    """Reset the global default engine registry.

    Useful for testing or reconfiguration.
    """
    global _default_registry
    _default_registry = None
    logger.info("Engine registry reset")
