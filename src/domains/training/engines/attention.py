# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Focus (selective attention) engine.

Each round scatters targets among distractors on a 7x7 field. The player
answers with the set of item ids they believe are targets; only the exact
target set is correct, and a wrong answer scores the negative penalty.
Rounds are generated one at a time.
"""

from typing import Any

from src.domains.training.engines.base import TrialEngine
from src.domains.training.engines.sampling import unique_cells
from src.domains.training.models import GameType, Trial

FIELD_SIZE = 7
MAX_TARGETS = 6
MAX_DISTRACTORS = 20

TARGET_COLOR = "blue"
DISTRACTOR_COLORS = ("red", "green", "yellow", "purple")


class AttentionEngine(TrialEngine):
    """Find-the-targets game with size-varied distractors."""

    game_type = GameType.ATTENTION

    @property
    def target_count(self) -> int:
        return min(2 + int(self.difficulty_level), MAX_TARGETS)

    @property
    def distractor_count(self) -> int:
        return min(5 + 2 * int(self.difficulty_level), MAX_DISTRACTORS)

    def generate_trial(self, index: int) -> Trial:
        total = self.target_count + self.distractor_count
        cells = unique_cells(self.rng, FIELD_SIZE * FIELD_SIZE, total, self.max_retries)
        variation = self.definition.modifier(self.tier, "size_variation")

        items = []
        for position, cell in enumerate(cells):
            is_target = position < self.target_count
            if is_target:
                color = TARGET_COLOR
                size = 20 + self.rng.random() * 10 * variation
            else:
                color = self.rng.choice(DISTRACTOR_COLORS)
                size = 15 + self.rng.random() * 15 * variation
            items.append(
                {
                    "row": cell // FIELD_SIZE,
                    "col": cell % FIELD_SIZE,
                    "color": color,
                    "size": round(size, 1),
                }
            )
        self.rng.shuffle(items)

        # Ids follow the shuffled order so they carry no hint of the targets
        targets = []
        for item_id, item in enumerate(items):
            item["id"] = item_id
            if item["color"] == TARGET_COLOR:
                targets.append(item_id)

        return self.make_trial(
            index,
            stimulus={
                "field_size": FIELD_SIZE,
                "target_color": TARGET_COLOR,
                "items": items,
            },
            options=sorted(item["id"] for item in items),
            correct_answer=frozenset(targets),
        )

    def normalize_response(self, trial: Trial, response: Any) -> Any:
        if isinstance(response, (str, bytes)):
            return response
        try:
            return frozenset(int(item_id) for item_id in response)
        except (TypeError, ValueError):
            return response
