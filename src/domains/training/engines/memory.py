# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Memory pattern engine.

Each round lights up a sequence of distinct cells on a square grid; the
player reproduces the sequence in order. The whole session is generated
up front, and every round opens with a display period (the trial onset)
during which responses are ignored.

Grid size grows with level (3x3 up to 6x6) and the sequence length grows
with level plus a tier bonus, capped at 12 cells.
"""

from typing import Any

from src.domains.training.engines.base import TrialEngine
from src.domains.training.engines.sampling import unique_cells
from src.domains.training.models import GameType, Trial

MAX_GRID_SIZE = 6
MAX_SEQUENCE_LENGTH = 12

# Display timing: lead-in, per-cell flash + gap, and the hand-over pause
LEAD_IN_MS = 1000
CELL_DISPLAY_MS = 800
HAND_OVER_MS = 500


class MemoryEngine(TrialEngine):
    """Sequence-recall game on a square grid."""

    game_type = GameType.MEMORY

    @property
    def grid_size(self) -> int:
        return min(3 + int(self.difficulty_level) // 2, MAX_GRID_SIZE)

    @property
    def sequence_length(self) -> int:
        bonus = int(self.definition.modifier(self.tier, "sequence_bonus", 0))
        return min(3 + int(self.difficulty_level) + bonus, MAX_SEQUENCE_LENGTH)

    def generate_trial(self, index: int) -> Trial:
        cell_count = self.grid_size * self.grid_size
        sequence = unique_cells(
            self.rng, cell_count, self.sequence_length, self.max_retries
        )
        display_ms = LEAD_IN_MS + CELL_DISPLAY_MS * len(sequence) + HAND_OVER_MS
        return self.make_trial(
            index,
            stimulus={
                "grid_size": self.grid_size,
                "sequence": sequence,
                "display_ms": display_ms,
            },
            options=list(range(cell_count)),
            correct_answer=tuple(sequence),
            onset_ms=display_ms,
        )

    def normalize_response(self, trial: Trial, response: Any) -> Any:
        try:
            return tuple(int(cell) for cell in response)
        except (TypeError, ValueError):
            return response
