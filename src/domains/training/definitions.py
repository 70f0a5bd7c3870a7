# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Game definition catalogue.

Definitions are loaded once from the bundled ``games.yaml``. An override
file (``TRAINING_GAMES_CONFIG_PATH``) is deep-merged over the bundled
catalogue, so a deployment can retune one field of one game.

Usage:
    from src.domains.training.definitions import get_game_catalogue

    catalogue = get_game_catalogue()
    memory = catalogue.get(GameType.MEMORY)
"""

import logging
from pathlib import Path
from typing import Any, Iterator

from pydantic import ValidationError

from src.core.config.yaml_loader import YAMLLoadError, load_yaml_with_override
from src.domains.training.exceptions import DefinitionNotFoundError
from src.domains.training.models import GameDefinition, GameType

logger = logging.getLogger(__name__)

DEFAULT_CATALOGUE_PATH = Path(__file__).with_name("games.yaml")


class GameCatalogue:
    """Immutable lookup of game definitions by game type."""

    def __init__(self, definitions: list[GameDefinition]) -> None:
        self._definitions: dict[GameType, GameDefinition] = {
            definition.game_type: definition for definition in definitions
        }

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "GameCatalogue":
        """Build a catalogue from the parsed YAML structure.

        Args:
            data: Mapping with a top-level ``games`` key.

        Raises:
            YAMLLoadError: If the structure is not a valid catalogue.
        """
        games = data.get("games")
        if not isinstance(games, dict):
            raise YAMLLoadError(DEFAULT_CATALOGUE_PATH, "Missing 'games' mapping")

        definitions = []
        for key, body in games.items():
            try:
                definitions.append(GameDefinition(game_type=key, **(body or {})))
            except (TypeError, ValidationError) as e:
                raise YAMLLoadError(
                    DEFAULT_CATALOGUE_PATH, f"Invalid definition for '{key}': {e}"
                ) from e
        return cls(definitions)

    def get(self, game_type: GameType) -> GameDefinition:
        """Get the definition for a game type.

        Raises:
            DefinitionNotFoundError: If the catalogue has no such game.
        """
        try:
            return self._definitions[game_type]
        except KeyError:
            raise DefinitionNotFoundError(
                f"No game definition for '{game_type.value}'", game_type=game_type
            ) from None

    def list_types(self) -> list[GameType]:
        """List the game types present in the catalogue."""
        return list(self._definitions)

    def __contains__(self, game_type: GameType) -> bool:
        return game_type in self._definitions

    def __iter__(self) -> Iterator[GameDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)


def load_game_catalogue(override_path: Path | None = None) -> GameCatalogue:
    """Load the bundled catalogue, optionally merged with an override file.

    Args:
        override_path: YAML file whose values take precedence.

    Returns:
        Loaded catalogue.

    Raises:
        YAMLLoadError: If a file is missing or a definition is invalid.
    """
    data = load_yaml_with_override(DEFAULT_CATALOGUE_PATH, override_path)
    catalogue = GameCatalogue.from_mapping(data)
    logger.info(
        "Loaded game catalogue with %d games%s",
        len(catalogue),
        f" (override: {override_path})" if override_path else "",
    )
    return catalogue


_default_catalogue: GameCatalogue | None = None


def get_game_catalogue() -> GameCatalogue:
    """Get or load the default catalogue using the configured override."""
    global _default_catalogue

    if _default_catalogue is None:
        from src.core.config.settings import get_settings

        _default_catalogue = load_game_catalogue(
            get_settings().training.games_config_path
        )
    return _default_catalogue


def reset_game_catalogue() -> None:
    """Drop the cached default catalogue."""
    global _default_catalogue
    _default_catalogue = None
