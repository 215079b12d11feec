from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.signups import Signup
from app.db.repo.referral_conversions_repo import ReferralConversionsRepo
from app.db.repo.signups_repo import SignupsRepo
from app.economy.points.service import PointsService
from app.economy.referrals.constants import LOOKUP_EMAIL_RE, LOOKUP_WALLET_RE, PENDING_CAP

from .models import (
    LeaderboardPeriod,
    RankingPopulation,
    RankStanding,
    ReferralCounts,
    ReferralsMe,
    SignupPosition,
)
from .ranking import find_rank, rank_population
from .time_utils import week_bounds_utc


def compute_percentile(rank: int | None, total_count: int) -> int | None:
    if rank is None or rank <= 0 or total_count <= 0:
        return None
    raw = (Decimal(rank) * 100 / Decimal(total_count)).quantize(
        Decimal(1),
        rounding=ROUND_HALF_UP,
    )
    return max(1, min(100, int(raw)))


def build_rank_standing(rank: int | None, total_count: int) -> RankStanding:
    if rank is None:
        return RankStanding(rank=None, ahead=None, percentile=None)
    return RankStanding(
        rank=rank,
        ahead=rank - 1,
        percentile=compute_percentile(rank, total_count),
    )


def build_referral_counts(*, qualified_count: int, pending_count: int) -> ReferralCounts:
    return ReferralCounts(
        qualified_count=qualified_count,
        pending_count=pending_count,
        pending_count_capped=min(pending_count, PENDING_CAP),
        pending_cap=PENDING_CAP,
    )


def normalize_lookup_email(raw_email: str | None) -> str | None:
    candidate = (raw_email or "").strip().lower()
    if not LOOKUP_EMAIL_RE.match(candidate):
        return None
    return candidate


def normalize_lookup_wallet(raw_wallet: str | None) -> str | None:
    candidate = (raw_wallet or "").strip().lower()
    if not LOOKUP_WALLET_RE.match(candidate):
        return None
    return candidate


async def find_signup(
    session: AsyncSession,
    *,
    email: str | None,
    wallet: str | None,
) -> Signup | None:
    """Email wins over wallet when both are given; inputs must be pre-normalised."""
    if email is not None:
        signup = await SignupsRepo.get_by_email(session, email)
        if signup is not None:
            return signup
    if wallet is not None:
        return await SignupsRepo.get_by_wallet(session, wallet)
    return None


async def get_position(
    session: AsyncSession,
    *,
    signup_id: int,
    now_utc: datetime,
) -> SignupPosition | None:
    signup = await SignupsRepo.get_by_id(session, signup_id)
    if signup is None:
        return None

    points = await PointsService.summarize(session, signup_id=signup_id)
    weekly_ranked = await rank_population(
        session,
        period=LeaderboardPeriod.WEEKLY,
        population=RankingPopulation.REFERRERS,
        now_utc=now_utc,
    )
    all_time_ranked = await rank_population(
        session,
        period=LeaderboardPeriod.ALL_TIME,
        population=RankingPopulation.REFERRERS,
        now_utc=now_utc,
    )
    total_count = len(all_time_ranked)
    qualified_count, pending_count = (
        await ReferralConversionsRepo.count_qualified_and_pending_for_referrer(
            session,
            referrer_signup_id=signup_id,
        )
    )
    return SignupPosition(
        signup_id=signup.id,
        email=signup.email,
        referral_code=signup.referral_code,
        profile_completed_at=signup.profile_completed_at,
        points=points,
        weekly=build_rank_standing(
            find_rank(weekly_ranked, signup_id=signup_id),
            len(weekly_ranked),
        ),
        all_time=build_rank_standing(
            find_rank(all_time_ranked, signup_id=signup_id),
            total_count,
        ),
        total_count=total_count,
        referrals=build_referral_counts(
            qualified_count=qualified_count,
            pending_count=pending_count,
        ),
    )


def build_referral_link(public_base_url: str, referral_code: str | None) -> str | None:
    if not referral_code:
        return None
    return f"{public_base_url.rstrip('/')}/?ref={referral_code}#waitlist"


async def get_referrals_me(
    session: AsyncSession,
    *,
    signup_id: int,
    public_base_url: str,
    now_utc: datetime,
) -> ReferralsMe | None:
    signup = await SignupsRepo.get_by_id(session, signup_id)
    if signup is None:
        return None

    week_start_utc, week_end_utc = week_bounds_utc(now_utc)
    weekly_conversions = await ReferralConversionsRepo.count_valid_for_referrer(
        session,
        referrer_signup_id=signup_id,
        from_utc=week_start_utc,
        to_utc=week_end_utc,
    )
    all_time_conversions = await ReferralConversionsRepo.count_valid_for_referrer(
        session,
        referrer_signup_id=signup_id,
    )
    weekly_ranked = await rank_population(
        session,
        period=LeaderboardPeriod.WEEKLY,
        population=RankingPopulation.CREATORS,
        now_utc=now_utc,
    )
    all_time_ranked = await rank_population(
        session,
        period=LeaderboardPeriod.ALL_TIME,
        population=RankingPopulation.CREATORS,
        now_utc=now_utc,
    )
    return ReferralsMe(
        signup_id=signup.id,
        referral_code=signup.referral_code,
        referral_link=build_referral_link(public_base_url, signup.referral_code),
        weekly_conversions=weekly_conversions,
        all_time_conversions=all_time_conversions,
        weekly_rank=find_rank(weekly_ranked, signup_id=signup_id),
        all_time_rank=find_rank(all_time_ranked, signup_id=signup_id),
    )
