# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy-backed stores.

Every backend failure surfaces as StorageError. Rows that no longer
validate as domain models (hand-edited data, old schema values) are
skipped with a warning rather than failing the whole query.
"""

import json
import logging

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from src.domains.training.models import GameType, PerformanceRecord, UserPreferences
from src.infrastructure.storage.base import PerformanceStore, PreferenceStore
from src.infrastructure.storage.connection import get_sessionmaker, session_scope
from src.infrastructure.storage.models import PerformanceRow, PreferenceRow

logger = logging.getLogger(__name__)


class SqlPerformanceStore(PerformanceStore):
    """Performance log in the ``performance_records`` table."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory

    @property
    def session_factory(self) -> sessionmaker[Session]:
        return self._session_factory or get_sessionmaker()

    def append(self, record: PerformanceRecord) -> None:
        row = PerformanceRow(
            user_id=record.user_id,
            game_type=record.game_type.value,
            difficulty_level=record.difficulty_level,
            score=record.score,
            accuracy=record.accuracy,
            time_spent_seconds=record.time_spent_seconds,
            reaction_time_ms=record.reaction_time_ms,
            mistakes_count=record.mistakes_count,
            trend=record.trend.value,
            created_at=record.created_at,
        )
        with session_scope(self.session_factory) as session:
            session.add(row)
        logger.debug(
            "Stored %s record for user %s", record.game_type.value, record.user_id
        )

    def query(
        self,
        user_id: str,
        game_type: GameType | None = None,
        limit: int = 50,
        newest_first: bool = True,
    ) -> list[PerformanceRecord]:
        if limit <= 0:
            return []

        stmt = select(PerformanceRow).where(PerformanceRow.user_id == user_id)
        if game_type is not None:
            stmt = stmt.where(PerformanceRow.game_type == game_type.value)
        stmt = stmt.order_by(
            PerformanceRow.created_at.desc(), PerformanceRow.id.desc()
        ).limit(limit)

        with session_scope(self.session_factory) as session:
            rows = session.scalars(stmt).all()

        records = []
        for row in rows:
            try:
                records.append(
                    PerformanceRecord(
                        user_id=row.user_id,
                        game_type=row.game_type,
                        difficulty_level=row.difficulty_level,
                        score=row.score,
                        accuracy=row.accuracy,
                        time_spent_seconds=row.time_spent_seconds,
                        reaction_time_ms=row.reaction_time_ms,
                        mistakes_count=row.mistakes_count,
                        trend=row.trend,
                        created_at=row.created_at,
                    )
                )
            except ValidationError as e:
                logger.warning("Skipping malformed performance row %s: %s", row.id, e)

        if not newest_first:
            records.reverse()
        return records


class SqlPreferenceStore(PreferenceStore):
    """Preferences in the ``user_preferences`` table."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory

    @property
    def session_factory(self) -> sessionmaker[Session]:
        return self._session_factory or get_sessionmaker()

    def get(self, user_id: str) -> UserPreferences | None:
        with session_scope(self.session_factory) as session:
            row = session.get(PreferenceRow, user_id)
            if row is None:
                return None
            data = {
                "preferred_difficulty": row.preferred_difficulty,
                "favorite_game_types": row.favorite_game_types,
                "workout_duration_minutes": row.workout_duration_minutes,
                "reminder_frequency": row.reminder_frequency,
                "adaptive_difficulty_enabled": row.adaptive_difficulty_enabled,
            }

        try:
            return UserPreferences.model_validate(data)
        except ValidationError as e:
            logger.warning("Malformed preferences for user %s: %s", user_id, e)
            return UserPreferences(favorite_game_types=data["favorite_game_types"])

    def put(self, user_id: str, preferences: UserPreferences) -> None:
        favorites = json.dumps([g.value for g in preferences.favorite_game_types])
        with session_scope(self.session_factory) as session:
            row = session.get(PreferenceRow, user_id)
            if row is None:
                row = PreferenceRow(user_id=user_id)
                session.add(row)
            row.preferred_difficulty = preferences.preferred_difficulty.value
            row.favorite_game_types = favorites
            row.workout_duration_minutes = preferences.workout_duration_minutes
            row.reminder_frequency = preferences.reminder_frequency.value
            row.adaptive_difficulty_enabled = preferences.adaptive_difficulty_enabled
