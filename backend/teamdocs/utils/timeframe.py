"""Calendar helpers for due-date windows and day buckets."""
from __future__ import annotations

import math
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Optional

from teamdocs.db.base import ensure_aware, utcnow

_SECONDS_PER_DAY = 24 * 60 * 60


def today_bounds(now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> tuple[datetime, datetime]:
    """[midnight today, midnight tomorrow) in ``tz``, returned as UTC datetimes."""
    local_now = ensure_aware(now or utcnow()).astimezone(tz)
    start_local = datetime.combine(local_now.date(), time.min, tzinfo=tz)
    end_local = datetime.combine(local_now.date() + timedelta(days=1), time.min, tzinfo=tz)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def days_ago(days: int, now: Optional[datetime] = None) -> datetime:
    return ensure_aware(now or utcnow()) - timedelta(days=days)


def day_key(value: datetime, tz: tzinfo = timezone.utc) -> str:
    return ensure_aware(value).astimezone(tz).strftime("%Y-%m-%d")


def days_remaining(due_date: datetime, now: Optional[datetime] = None) -> int:
    delta = ensure_aware(due_date) - ensure_aware(now or utcnow())
    return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)


def elapsed_days(start: datetime, end: datetime) -> float:
    return (ensure_aware(end) - ensure_aware(start)).total_seconds() / _SECONDS_PER_DAY
