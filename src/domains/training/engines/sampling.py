# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Distinct-value sampling by bounded resampling.

Generators that need distinct values (grid cells, answer options) draw
candidates one at a time and redraw on collision. Every draw gets at most
``max_retries`` attempts; when they are exhausted a
StimulusGenerationError is raised instead of looping forever on
parameters that cannot be satisfied.
"""

import logging
import random
from typing import Callable, Hashable, TypeVar

from src.domains.training.exceptions import StimulusGenerationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)

DEFAULT_MAX_RETRIES = 100


def sample_unique(
    draw: Callable[[], T],
    count: int,
    max_retries: int = DEFAULT_MAX_RETRIES,
    exclude: set[T] | None = None,
) -> list[T]:
    """Draw ``count`` distinct values.

    Args:
        draw: Produces one random candidate per call.
        count: Number of distinct values wanted.
        max_retries: Attempts allowed per value.
        exclude: Values that must not be returned.

    Returns:
        Distinct values in draw order.

    Raises:
        StimulusGenerationError: If a value could not be drawn within
            ``max_retries`` attempts.
    """
    seen: set[T] = set(exclude or ())
    values: list[T] = []

    for position in range(count):
        for _ in range(max_retries):
            candidate = draw()
            if candidate not in seen:
                break
        else:
            logger.warning(
                "Resampling exhausted after %d attempts at position %d of %d",
                max_retries,
                position,
                count,
            )
            raise StimulusGenerationError(
                "Could not draw enough distinct values",
                details={
                    "requested": count,
                    "drawn": len(values),
                    "max_retries": max_retries,
                },
            )
        seen.add(candidate)
        values.append(candidate)

    return values


def unique_cells(
    rng: random.Random,
    cell_count: int,
    count: int,
    max_retries: int = DEFAULT_MAX_RETRIES,
) -> list[int]:
    """Draw ``count`` distinct cell indices from a grid of ``cell_count`` cells.

    Raises:
        StimulusGenerationError: If the grid has fewer than ``count`` cells,
            before anything is drawn, or if resampling is exhausted.
    """
    if count > cell_count:
        raise StimulusGenerationError(
            "More distinct cells requested than the grid holds",
            details={"requested": count, "available": cell_count},
        )
    return sample_unique(lambda: rng.randrange(cell_count), count, max_retries)
