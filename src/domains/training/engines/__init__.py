# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Trial engines module.

This module provides trial engine implementations:
- TrialEngine: Abstract base class with phases, timers and scoring
- MemoryEngine: Sequence recall on a grid (batch)
- AttentionEngine: Find the targets among distractors (stream)
- FlexibilityEngine: Task switching over stimulus attributes (stream)
- ProblemSolvingEngine: Math, logic and pattern problems (batch)
- SpeedEngine: Reaction, comparison, arithmetic and matching (stream)
- EngineRegistry: Registry of engine classes

Usage:
    from src.domains.training.engines import get_engine_registry, GameType

    registry = get_engine_registry()
    engine = registry.create(GameType.SPEED, difficulty_level=2)
"""

from src.domains.training.models import GameType
from src.domains.training.engines.base import CompletionCallback, TrialEngine
from src.domains.training.engines.sampling import sample_unique, unique_cells
from src.domains.training.engines.memory import MemoryEngine
from src.domains.training.engines.attention import AttentionEngine
from src.domains.training.engines.flexibility import FlexibilityEngine
from src.domains.training.engines.problem_solving import ProblemSolvingEngine
from src.domains.training.engines.speed import SpeedEngine
from src.domains.training.engines.registry import (
    EngineRegistry,
    get_engine_registry,
    reset_engine_registry,
)

__all__ = [
    "GameType",
    # Base
    "TrialEngine",
    "CompletionCallback",
    "sample_unique",
    "unique_cells",
    # Implementations
    "MemoryEngine",
    "AttentionEngine",
    "FlexibilityEngine",
    "ProblemSolvingEngine",
    "SpeedEngine",
    # Registry
    "EngineRegistry",
    "get_engine_registry",
    "reset_engine_registry",
]
