# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for game definitions and the catalogue."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from src.core.config.yaml_loader import YAMLLoadError
from src.domains.training.definitions import (
    GameCatalogue,
    get_game_catalogue,
    load_game_catalogue,
)
from src.domains.training.exceptions import DefinitionNotFoundError
from src.domains.training.models import (
    DifficultyTier,
    GameDefinition,
    GameType,
    tier_for_level,
)


@pytest.mark.unit
class TestGameDefinition:
    """Tests for GameDefinition."""

    def test_time_limit_shrinks_to_floor(self, catalogue: GameCatalogue) -> None:
        """Test the per-trial budget shrinks with level down to the floor."""
        speed = catalogue.get(GameType.SPEED)

        assert speed.time_limit_ms(1, DifficultyTier.MEDIUM) == 1850
        assert speed.time_limit_ms(10, DifficultyTier.MEDIUM) == 800

    def test_tier_multiplier(self, catalogue: GameCatalogue) -> None:
        """Test tiers scale the time budget."""
        speed = catalogue.get(GameType.SPEED)

        assert speed.time_limit_ms(10, DifficultyTier.MASTER) == 400

    def test_modifier_default(self, simple_definition: GameDefinition) -> None:
        """Test missing modifiers fall back to the default."""
        assert simple_definition.modifier(DifficultyTier.HARD, "time") == 1.0
        assert simple_definition.modifier(DifficultyTier.HARD, "switch", 0.0) == 0.0

    def test_positive_penalty_rejected(self, simple_definition: GameDefinition) -> None:
        """Test penalties cannot be rewards."""
        data = simple_definition.model_dump()
        data["penalty"] = 10

        with pytest.raises(ValidationError):
            GameDefinition(**data)

    def test_hyphenated_game_type(self) -> None:
        """Test the hyphenated spelling is accepted."""
        assert GameType("problem-solving") == GameType.PROBLEM_SOLVING

    @pytest.mark.parametrize(
        ("level", "tier"),
        [
            (1, DifficultyTier.EASY),
            (2, DifficultyTier.EASY),
            (3, DifficultyTier.MEDIUM),
            (6, DifficultyTier.HARD),
            (8, DifficultyTier.EXPERT),
            (10, DifficultyTier.MASTER),
            (0, DifficultyTier.EASY),
            (15, DifficultyTier.MASTER),
        ],
    )
    def test_tier_for_level(self, level: int, tier: DifficultyTier) -> None:
        """Test levels map onto tiers."""
        assert tier_for_level(level) == tier


@pytest.mark.unit
class TestGameCatalogue:
    """Tests for the catalogue loader."""

    def test_bundled_catalogue_has_every_game(self, catalogue: GameCatalogue) -> None:
        """Test every game type has a definition with all five tiers."""
        assert set(catalogue.list_types()) == set(GameType)
        for definition in catalogue:
            assert set(definition.tiers) == set(DifficultyTier)

    def test_batch_games(self, catalogue: GameCatalogue) -> None:
        """Test which games generate their trials up front."""
        batch = {d.game_type for d in catalogue if d.batch_generation}

        assert batch == {GameType.MEMORY, GameType.PROBLEM_SOLVING}

    def test_missing_definition(self) -> None:
        """Test looking up an absent game."""
        catalogue = GameCatalogue([])

        assert GameType.MEMORY not in catalogue
        with pytest.raises(DefinitionNotFoundError):
            catalogue.get(GameType.MEMORY)

    def test_override_file(self, tmp_path: Path) -> None:
        """Test an override file retunes one field."""
        override = tmp_path / "games.yaml"
        override.write_text("games:\n  memory:\n    trial_count: 8\n")

        catalogue = load_game_catalogue(override)

        assert catalogue.get(GameType.MEMORY).trial_count == 8
        assert catalogue.get(GameType.MEMORY).base_points == 100

    def test_invalid_override(self, tmp_path: Path) -> None:
        """Test an invalid override is reported as a load error."""
        override = tmp_path / "games.yaml"
        override.write_text("games:\n  memory:\n    trial_count: -1\n")

        with pytest.raises(YAMLLoadError, match="memory"):
            load_game_catalogue(override)

    def test_missing_games_mapping(self) -> None:
        """Test a structure without games is rejected."""
        with pytest.raises(YAMLLoadError):
            GameCatalogue.from_mapping({"other": 1})

    def test_default_catalogue_uses_settings(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test the configured override path is applied."""
        override = tmp_path / "games.yaml"
        override.write_text("games:\n  speed:\n    trial_count: 3\n")
        monkeypatch.setenv("TRAINING_GAMES_CONFIG_PATH", str(override))

        catalogue = get_game_catalogue()

        assert catalogue.get(GameType.SPEED).trial_count == 3
        assert get_game_catalogue() is catalogue
