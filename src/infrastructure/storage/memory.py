# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-memory store implementations.

Used by tests and by hosts that do not need durable history. Records are
kept in insertion order; queries sort by creation time.
"""

import logging
from collections import defaultdict

from src.domains.training.models import GameType, PerformanceRecord, UserPreferences
from src.infrastructure.storage.base import PerformanceStore, PreferenceStore

logger = logging.getLogger(__name__)


class InMemoryPerformanceStore(PerformanceStore):
    """Performance log held in a per-user list."""

    def __init__(self) -> None:
        self._records: dict[str, list[PerformanceRecord]] = defaultdict(list)

    def append(self, record: PerformanceRecord) -> None:
        self._records[record.user_id].append(record)
        logger.debug(
            "Appended %s record for user %s", record.game_type.value, record.user_id
        )

    def query(
        self,
        user_id: str,
        game_type: GameType | None = None,
        limit: int = 50,
        newest_first: bool = True,
    ) -> list[PerformanceRecord]:
        records = [
            r
            for r in self._records.get(user_id, [])
            if game_type is None or r.game_type == game_type
        ]
        # Stable sort keeps insertion order for equal timestamps
        records.sort(key=lambda r: r.created_at)
        records = records[-limit:] if limit > 0 else []
        if newest_first:
            records.reverse()
        return records

    def __len__(self) -> int:
        return sum(len(records) for records in self._records.values())


class InMemoryPreferenceStore(PreferenceStore):
    """Preferences held in a dict keyed by user."""

    def __init__(self) -> None:
        self._preferences: dict[str, UserPreferences] = {}

    def get(self, user_id: str) -> UserPreferences | None:
        return self._preferences.get(user_id)

    def put(self, user_id: str, preferences: UserPreferences) -> None:
        self._preferences[user_id] = preferences.model_copy(deep=True)
