from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True, slots=True)
class AwardResult:
    granted: bool
    entry_id: int | None = None


@dataclass(frozen=True, slots=True)
class PointsBreakdown:
    total: int = 0
    invite: int = 0
    signup: int = 0
    tasks: int = 0
    csw: int = 0
    social: int = 0
    bonus: int = 0


@dataclass(frozen=True, slots=True)
class LedgerEntryView:
    source: str
    source_id: str
    amount: int
    created_at: datetime


@dataclass(frozen=True, slots=True)
class LedgerListing:
    signup_id: int
    total_points: int
    entries: list[LedgerEntryView]


class PointsLeaderboardType(str, Enum):
    TOTAL = "total"
    INVITE = "invite"


@dataclass(frozen=True, slots=True)
class PointsLeaderboardRow:
    rank: int
    signup_id: int
    display: str
    referral_code: str | None
    points_total: int
    points_invite: int


@dataclass(frozen=True, slots=True)
class PointsLeaderboardPage:
    page: int
    limit: int
    points_type: PointsLeaderboardType
    total_pages: int
    has_more: bool
    rows: list[PointsLeaderboardRow]
