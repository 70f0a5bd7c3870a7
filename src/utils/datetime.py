# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for Impulse.

All wall-clock timestamps in the project are timezone-aware UTC. Trial
timing inside the engines does not use wall-clock time at all; it runs on
the virtual millisecond clock advanced by ticks.

Usage:
------
    from src.utils.datetime import utc_now

    # Pydantic model defaults
    created_at: datetime = Field(default_factory=utc_now)
"""

from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Get the current UTC calendar date."""
    return utc_now().date()


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def days_before(reference: datetime, days: int) -> datetime:
    """Get the datetime `days` days before a reference point.

    Args:
        reference: Point in time to count back from.
        days: Number of days.

    Returns:
        Timezone-aware UTC datetime.
    """
    return ensure_utc(reference) - timedelta(days=days)  # type: ignore[operator]


def ms_to_seconds(milliseconds: float) -> float:
    """Convert milliseconds to seconds, rounded to millisecond precision."""
    return round(milliseconds / 1000.0, 3)
