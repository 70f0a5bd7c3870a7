# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Store contracts for performance history and user preferences.

The training domain depends only on these two interfaces:
- PerformanceStore: append-only log of completed sessions
- PreferenceStore: one UserPreferences object per user

Implementations raise StorageError for any backend failure. Callers in
the domain treat read failures as "no data" and write failures as
non-fatal.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.domains.training.models import GameType, PerformanceRecord, UserPreferences


class StorageError(Exception):
    """Base exception for store operations.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying backend error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class PerformanceStore(ABC):
    """Append-only log of performance records."""

    @abstractmethod
    def append(self, record: PerformanceRecord) -> None:
        """Persist one record.

        Raises:
            StorageError: If the write fails.
        """
        ...

    @abstractmethod
    def query(
        self,
        user_id: str,
        game_type: GameType | None = None,
        limit: int = 50,
        newest_first: bool = True,
    ) -> list[PerformanceRecord]:
        """Read a user's records.

        Args:
            user_id: Owner of the records.
            game_type: Restrict to one game type.
            limit: Maximum number of records; the most recent are kept.
            newest_first: Order of the returned records.

        Raises:
            StorageError: If the read fails.
        """
        ...


class PreferenceStore(ABC):
    """Per-user preference storage."""

    @abstractmethod
    def get(self, user_id: str) -> UserPreferences | None:
        """Stored preferences, or None if the user has none.

        Raises:
            StorageError: If the read fails.
        """
        ...

    @abstractmethod
    def put(self, user_id: str, preferences: UserPreferences) -> None:
        """Create or replace a user's preferences.

        Raises:
            StorageError: If the write fails.
        """
        ...
