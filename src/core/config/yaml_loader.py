# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""YAML loading for the game catalogue.

The bundled catalogue is read first; an optional override file is
deep-merged over it so a deployment can retune a single field of a single
game without copying the whole file.

Example:
    >>> from pathlib import Path
    >>> from src.core.config.yaml_loader import load_yaml_with_override
    >>> config = load_yaml_with_override(Path("games.yaml"), Path("local.yaml"))
"""

from pathlib import Path
from typing import Any

import yaml


class YAMLLoadError(Exception):
    """Raised when a YAML file is missing, unreadable or malformed.

    Attributes:
        path: File that failed to load.
        reason: Human-readable cause.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load YAML file '{path}': {reason}")


def load_yaml(path: Path) -> dict[str, Any]:
    """Parse a YAML file whose root is a mapping.

    A file with no documents (empty or comments only) yields ``{}``.

    Raises:
        YAMLLoadError: If the path is not a regular file, cannot be read,
            is not valid YAML, or its root is not a mapping.
    """
    if not path.is_file():
        raise YAMLLoadError(path, "File does not exist")

    try:
        with path.open(encoding="utf-8") as f:
            parsed = yaml.safe_load(f)
    except OSError as e:
        raise YAMLLoadError(path, f"Cannot read file: {e}") from e
    except yaml.YAMLError as e:
        raise YAMLLoadError(path, f"Invalid YAML syntax: {e}") from e

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise YAMLLoadError(
            path, f"YAML root must be a mapping, got {type(parsed).__name__}"
        )
    return parsed


def load_yaml_with_override(base: Path, override: Path | None = None) -> dict[str, Any]:
    """Load ``base`` and deep-merge ``override`` over it when given.

    Raises:
        YAMLLoadError: If either file cannot be loaded.
    """
    config = load_yaml(base)
    if override is None:
        return config
    return deep_merge(config, load_yaml(override))


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``.

    Mappings present on both sides merge recursively; any other override
    value (scalar, list, or a mapping replacing a scalar) wins outright.
    Neither argument is modified.

    Example:
        >>> base = {"memory": {"trial_count": 5, "penalty": 0}}
        >>> deep_merge(base, {"memory": {"trial_count": 8}})
        {'memory': {'trial_count': 8, 'penalty': 0}}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = deep_merge(current, value)
        merged[key] = value
    return merged
