from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from app.economy.points.types import PointsBreakdown


class LeaderboardPeriod(str, Enum):
    WEEKLY = "weekly"
    ALL_TIME = "all_time"


class RankingPopulation(str, Enum):
    # any signup holding a referral code
    REFERRERS = "referrers"
    # referral code + creator persona + creator coin
    CREATORS = "creators"


@dataclass(frozen=True, slots=True)
class ClickResult:
    recorded: bool


@dataclass(frozen=True, slots=True)
class QualificationResult:
    qualified: bool
    conversion_id: int | None = None
    referrer_signup_id: int | None = None
    points_granted: bool = False


@dataclass(frozen=True, slots=True)
class ProfileCompletionResult:
    profile_completed: bool
    qualified_referral: bool


@dataclass(frozen=True, slots=True)
class ReferrerScore:
    signup_id: int
    referral_code: str
    primary_wallet: str | None
    conversions: int
    unique_clicks: int


@dataclass(frozen=True, slots=True)
class RankedReferrer:
    rank: int
    signup_id: int
    referral_code: str
    primary_wallet: str | None
    conversions: int
    unique_clicks: int


@dataclass(frozen=True, slots=True)
class Leaderboard:
    period: LeaderboardPeriod
    week_start_utc: datetime | None
    week_end_utc: datetime | None
    top: list[RankedReferrer]
    me: RankedReferrer | None = None


@dataclass(frozen=True, slots=True)
class RankStanding:
    rank: int | None
    ahead: int | None
    percentile: int | None


@dataclass(frozen=True, slots=True)
class ReferralCounts:
    qualified_count: int
    pending_count: int
    pending_count_capped: int
    pending_cap: int


@dataclass(frozen=True, slots=True)
class SignupPosition:
    signup_id: int
    email: str
    referral_code: str | None
    profile_completed_at: datetime | None
    points: PointsBreakdown
    weekly: RankStanding
    all_time: RankStanding
    total_count: int
    referrals: ReferralCounts


@dataclass(frozen=True, slots=True)
class ReferralsMe:
    signup_id: int
    referral_code: str | None
    referral_link: str | None
    weekly_conversions: int
    all_time_conversions: int
    weekly_rank: int | None
    all_time_rank: int | None
