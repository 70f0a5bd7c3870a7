# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Speed training engine.

A stream of short trials, each of a randomly chosen kind:
- reaction: respond as soon as the stimulus appears after a random
  1-4 second foreperiod (the trial onset)
- comparison: is the first number larger than the second?
- arithmetic: pick the result of a small addition or subtraction
- matching: pick the shape/color pair that matches the target
"""

import math
from typing import Any

from src.domains.training.engines.base import TrialEngine
from src.domains.training.engines.sampling import sample_unique
from src.domains.training.models import GameType, Trial

TASK_KINDS = ("reaction", "comparison", "arithmetic", "matching")

COLORS = ("red", "blue", "green", "yellow", "purple")
SHAPES = ("○", "□", "△", "◇", "★")

REACTION_RESPONSE = "click"
FOREPERIOD_MIN_MS = 1000
FOREPERIOD_MAX_MS = 4000


class SpeedEngine(TrialEngine):
    """Mixed reaction-time game generated one trial at a time."""

    game_type = GameType.SPEED

    @property
    def complexity(self) -> float:
        return self.definition.modifier(self.tier, "complexity", 0.0)

    def generate_trial(self, index: int) -> Trial:
        kind = self.rng.choice(TASK_KINDS)
        if kind == "reaction":
            return self._reaction_trial(index)
        if kind == "comparison":
            return self._comparison_trial(index)
        if kind == "arithmetic":
            return self._arithmetic_trial(index)
        return self._matching_trial(index)

    def _reaction_trial(self, index: int) -> Trial:
        foreperiod = self.rng.randint(FOREPERIOD_MIN_MS, FOREPERIOD_MAX_MS)
        return self.make_trial(
            index,
            stimulus={
                "kind": "reaction",
                "color": self.rng.choice(COLORS),
                "instruction": "Respond when the circle appears!",
            },
            options=[REACTION_RESPONSE],
            correct_answer=REACTION_RESPONSE,
            onset_ms=foreperiod,
        )

    def _comparison_trial(self, index: int) -> Trial:
        first = self.rng.randint(1, 50)
        second = self.rng.randint(1, 50)
        return self.make_trial(
            index,
            stimulus={
                "kind": "comparison",
                "first": first,
                "second": second,
                "question": f"{first} > {second}?",
            },
            options=["yes", "no"],
            correct_answer="yes" if first > second else "no",
        )

    def _arithmetic_trial(self, index: int) -> Trial:
        limit = math.floor(10 + self.complexity * 5)
        first = self.rng.randint(1, limit)
        second = self.rng.randint(1, limit)
        if self.rng.random() < 0.5:
            question, answer = f"{first} + {second} = ?", first + second
        else:
            larger, smaller = max(first, second), min(first, second)
            question, answer = f"{larger} - {smaller} = ?", larger - smaller

        def draw_wrong() -> int:
            form = self.rng.randrange(3)
            if form == 0:
                return answer + self.rng.randint(1, 5)
            if form == 1:
                return answer - self.rng.randint(1, 5)
            return answer + self.rng.randint(5, 14)

        wrong = sample_unique(draw_wrong, 3, self.max_retries, exclude={answer})
        options = [str(value) for value in [answer, *wrong]]
        self.rng.shuffle(options)

        return self.make_trial(
            index,
            stimulus={"kind": "arithmetic", "question": question},
            options=options,
            correct_answer=str(answer),
        )

    def _matching_trial(self, index: int) -> Trial:
        shape = self.rng.randrange(len(SHAPES))
        color = self.rng.randrange(len(COLORS))

        def pair(shape_offset: int, color_offset: int) -> str:
            return (
                f"{SHAPES[(shape + shape_offset) % len(SHAPES)]} "
                f"{COLORS[(color + color_offset) % len(COLORS)]}"
            )

        target = pair(0, 0)
        options = [target, pair(1, 0), pair(0, 1), pair(2, 2)]
        self.rng.shuffle(options)

        return self.make_trial(
            index,
            stimulus={
                "kind": "matching",
                "shape": SHAPES[shape],
                "color": COLORS[color],
            },
            options=options,
            correct_answer=target,
        )

    def normalize_response(self, trial: Trial, response: Any) -> Any:
        return str(response)
