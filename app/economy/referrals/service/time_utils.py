from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.economy.referrals.constants import WEEK_LENGTH


def week_bounds_utc(now_utc: datetime) -> tuple[datetime, datetime]:
    """Monday 00:00 UTC at or before ``now_utc`` and the following Monday."""
    if now_utc.tzinfo is None:
        raise ValueError("now_utc must be timezone-aware")
    utc_now = now_utc.astimezone(timezone.utc)
    day_start = utc_now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_start = day_start - timedelta(days=utc_now.weekday())
    return week_start, week_start + WEEK_LENGTH
