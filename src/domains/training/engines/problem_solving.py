# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Logic puzzle engine.

A session is a batch of multiple-choice problems drawn from three kinds:
- math: generated arithmetic whose size grows with complexity
- logic: verbal reasoning questions from a fixed bank
- pattern: sequence completion questions from a fixed bank

Complexity rises through the session: problem ``i`` has complexity
``(level + i * 0.5) * tier.complexity``.
"""

import math
from typing import Any

from src.domains.training.engines.base import TrialEngine
from src.domains.training.engines.sampling import sample_unique
from src.domains.training.models import GameType, Trial

PROBLEM_KINDS = ("math", "logic", "pattern")
WRONG_OPTION_COUNT = 3

LOGIC_BANK: tuple[dict[str, Any], ...] = (
    {
        "question": "If all roses are flowers and some flowers are red, then:",
        "options": [
            "All roses are red",
            "Some roses might be red",
            "No roses are red",
            "All flowers are roses",
        ],
        "answer": "Some roses might be red",
        "explanation": (
            "We can't conclude that all roses are red, but some roses might "
            "be red since some flowers are red."
        ),
    },
    {
        "question": "What comes next in the sequence: 2, 6, 18, 54, ?",
        "options": ["108", "162", "216", "270"],
        "answer": "162",
        "explanation": "Each number is multiplied by 3: 54 x 3 = 162.",
    },
    {
        "question": (
            "If it takes 5 machines 5 minutes to make 5 widgets, how long does "
            "it take 100 machines to make 100 widgets?"
        ),
        "options": ["5 minutes", "20 minutes", "100 minutes", "500 minutes"],
        "answer": "5 minutes",
        "explanation": (
            "Each machine makes 1 widget in 5 minutes, so 100 machines make "
            "100 widgets in 5 minutes."
        ),
    },
)

PATTERN_BANK: tuple[dict[str, Any], ...] = (
    {
        "question": "Which shape completes the pattern? ○ △ ○ △ ○ ?",
        "options": ["○", "△", "□", "◇"],
        "answer": "△",
        "explanation": "The pattern alternates between circle and triangle.",
    },
    {
        "question": "What number comes next: 1, 4, 9, 16, 25, ?",
        "options": ["30", "36", "42", "49"],
        "answer": "36",
        "explanation": "These are perfect squares: 6 x 6 = 36.",
    },
    {
        "question": "Complete the pattern: A1, C3, E5, G7, ?",
        "options": ["H8", "I9", "I8", "J9"],
        "answer": "I9",
        "explanation": "Letters skip one (A, C, E, G, I) and numbers rise by 2.",
    },
)


class ProblemSolvingEngine(TrialEngine):
    """Multiple-choice reasoning game generated as one batch."""

    game_type = GameType.PROBLEM_SOLVING

    def complexity(self, index: int) -> float:
        multiplier = self.definition.modifier(self.tier, "complexity")
        return (self.difficulty_level + index * 0.5) * multiplier

    def generate_trial(self, index: int) -> Trial:
        complexity = self.complexity(index)
        kind = self.rng.choice(PROBLEM_KINDS)
        if kind == "math":
            problem = self._math_problem(complexity)
        elif kind == "logic":
            problem = dict(self.rng.choice(LOGIC_BANK))
        else:
            problem = dict(self.rng.choice(PATTERN_BANK))

        return self.make_trial(
            index,
            stimulus={
                "kind": kind,
                "question": problem["question"],
                "explanation": problem["explanation"],
                "complexity": round(complexity, 2),
            },
            options=list(problem["options"]),
            correct_answer=problem["answer"],
        )

    def _math_problem(self, complexity: float) -> dict[str, Any]:
        max_number = math.floor(10 + complexity * 5)
        a = self.rng.randint(1, max_number)
        b = self.rng.randint(1, max_number)

        if complexity < 1:
            if self.rng.random() < 0.5:
                question, answer = f"{a} + {b} = ?", a + b
            else:
                larger, smaller = max(a, b), min(a, b)
                question, answer = f"{larger} - {smaller} = ?", larger - smaller
        else:
            c = self.rng.randint(1, max_number)
            question, answer = f"({a} + {b}) × {c} = ?", (a + b) * c

        def draw_wrong() -> int:
            form = self.rng.randrange(3)
            if form == 0:
                return answer + self.rng.randint(1, 10)
            if form == 1:
                return answer - self.rng.randint(1, 10)
            return math.floor(answer * 1.5)

        wrong = sample_unique(
            draw_wrong, WRONG_OPTION_COUNT, self.max_retries, exclude={answer}
        )
        options = [str(value) for value in [answer, *wrong]]
        self.rng.shuffle(options)

        return {
            "question": question,
            "options": options,
            "answer": str(answer),
            "explanation": f"The correct answer is {answer}.",
        }

    def normalize_response(self, trial: Trial, response: Any) -> Any:
        return str(response)
