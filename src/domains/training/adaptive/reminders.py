# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Training reminder timing.

The next reminder is scheduled at the hour the user trains most often,
1, 2 or 7 days ahead depending on their reminder frequency.
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable

from src.domains.training.models import PerformanceRecord, ReminderFrequency
from src.utils.datetime import days_before, ensure_utc, utc_now

DEFAULT_REMINDER_HOUR = 9
ACTIVITY_WINDOW_DAYS = 30

_DAYS_AHEAD = {
    ReminderFrequency.DAILY: 1,
    ReminderFrequency.EVERY_OTHER_DAY: 2,
    ReminderFrequency.WEEKLY: 7,
}


def peak_activity_hour(
    records: Iterable[PerformanceRecord],
    now: datetime | None = None,
) -> int:
    """Most frequent UTC hour of sessions in the last 30 days.

    Ties go to the earliest hour; no recent sessions gives 9.
    """
    now = ensure_utc(now) or utc_now()
    since = days_before(now, ACTIVITY_WINDOW_DAYS)
    hours = Counter(r.created_at.hour for r in records if since <= r.created_at <= now)
    if not hours:
        return DEFAULT_REMINDER_HOUR
    top = max(hours.values())
    return min(hour for hour, count in hours.items() if count == top)


def optimal_reminder_time(
    records: Iterable[PerformanceRecord],
    frequency: ReminderFrequency,
    now: datetime | None = None,
) -> datetime | None:
    """When to send the next reminder, or None for ``never``."""
    if frequency is ReminderFrequency.NEVER:
        return None

    now = ensure_utc(now) or utc_now()
    hour = peak_activity_hour(records, now)
    target = now + timedelta(days=_DAYS_AHEAD[frequency])
    return target.replace(hour=hour, minute=0, second=0, microsecond=0)
