from __future__ import annotations

from collections.abc import Iterable

from app.economy.points.constants import (
    BONUS_SOURCE_PREFIX,
    INVITE_SOURCES,
    SOCIAL_SOURCE_PREFIX,
    SOURCE_CSW_LINK,
    SOURCE_TASK,
    SOURCE_WAITLIST_SIGNUP,
)
from app.economy.points.types import PointsBreakdown


def category_for_source(source: str) -> str | None:
    """Maps a ledger source onto its breakdown bucket; None means "total only"."""
    if source in INVITE_SOURCES:
        return "invite"
    if source == SOURCE_WAITLIST_SIGNUP:
        return "signup"
    if source == SOURCE_TASK:
        return "tasks"
    if source == SOURCE_CSW_LINK:
        return "csw"
    if source.startswith(SOCIAL_SOURCE_PREFIX):
        return "social"
    if source.startswith(BONUS_SOURCE_PREFIX):
        return "bonus"
    return None


def build_points_breakdown(source_totals: Iterable[tuple[str, int]]) -> PointsBreakdown:
    buckets = {
        "total": 0,
        "invite": 0,
        "signup": 0,
        "tasks": 0,
        "csw": 0,
        "social": 0,
        "bonus": 0,
    }
    for source, amount in source_totals:
        buckets["total"] += int(amount)
        category = category_for_source(source)
        if category is not None:
            buckets[category] += int(amount)
    return PointsBreakdown(**buckets)
