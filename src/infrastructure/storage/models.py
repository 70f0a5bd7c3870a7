# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy table mappings for the SQL stores.

Tables:
- performance_records: one row per completed session (append-only)
- user_preferences: one row per user

List-valued preferences are stored as JSON text; decoding is tolerant
(see UserPreferences), so a corrupt value reads back as an empty list.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.utils.datetime import utc_now


class Base(DeclarativeBase):
    """Declarative base for store tables."""

    pass


class PerformanceRow(Base):
    """Persisted PerformanceRecord."""

    __tablename__ = "performance_records"
    __table_args__ = (
        Index("ix_performance_user_game_created", "user_id", "game_type", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    game_type: Mapped[str] = mapped_column(String(30), nullable=False)
    difficulty_level: Mapped[float] = mapped_column(Float, nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    accuracy: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    time_spent_seconds: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    reaction_time_ms: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    mistakes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    trend: Mapped[str] = mapped_column(String(20), nullable=False, default="new")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )


class PreferenceRow(Base):
    """Persisted UserPreferences."""

    __tablename__ = "user_preferences"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    preferred_difficulty: Mapped[str] = mapped_column(
        String(20), nullable=False, default="medium"
    )
    favorite_game_types: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    workout_duration_minutes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=15
    )
    reminder_frequency: Mapped[str] = mapped_column(
        String(20), nullable=False, default="daily"
    )
    adaptive_difficulty_enabled: Mapped[bool] = mapped_column(nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )
