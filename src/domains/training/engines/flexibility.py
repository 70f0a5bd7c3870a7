# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mental flexibility (task switching) engine.

Every trial shows one item with a color, shape, number and size, and asks
about one of those attributes. The first trial always asks for the color;
after that the task switches to a different attribute with a probability
that grows with level and tier.
"""

from typing import Any

from src.domains.training.engines.base import TrialEngine
from src.domains.training.models import GameType, Trial

COLORS = ("red", "blue", "green", "yellow", "purple")
SHAPES = ("circle", "square", "triangle", "diamond", "star")
NUMBERS = tuple(str(n) for n in range(1, 10))
SIZES = ("small", "medium", "large")

TASKS = ("color", "shape", "number", "size")
FIRST_TASK = "color"

_TASK_VALUES = {
    "color": COLORS,
    "shape": SHAPES,
    "number": NUMBERS,
    "size": SIZES,
}


class FlexibilityEngine(TrialEngine):
    """Task-switching game over four stimulus attributes.

    Attributes:
        task_switches: Number of trials whose task differed from the
            previous trial's.
    """

    game_type = GameType.FLEXIBILITY

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.current_task = FIRST_TASK
        self.task_switches = 0

    @property
    def switch_probability(self) -> float:
        base = min(0.3 + 0.1 * int(self.difficulty_level), 0.8)
        return min(base * self.definition.modifier(self.tier, "switch"), 1.0)

    def _next_task(self, index: int) -> str:
        if index == 0:
            return FIRST_TASK
        if self.rng.random() < self.switch_probability:
            self.task_switches += 1
            return self.rng.choice([t for t in TASKS if t != self.current_task])
        return self.current_task

    def generate_trial(self, index: int) -> Trial:
        task = self._next_task(index)
        self.current_task = task

        stimulus = {
            "task": task,
            "color": self.rng.choice(COLORS),
            "shape": self.rng.choice(SHAPES),
            "number": self.rng.randint(1, 9),
            "size": self.rng.choice(SIZES),
        }
        options = list(_TASK_VALUES[task])
        self.rng.shuffle(options)

        return self.make_trial(
            index,
            stimulus=stimulus,
            options=options,
            correct_answer=str(stimulus[task]),
        )

    def normalize_response(self, trial: Trial, response: Any) -> Any:
        return str(response)
