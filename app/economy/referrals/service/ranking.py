from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.referral_clicks_repo import ReferralClicksRepo
from app.db.repo.referral_conversions_repo import ReferralConversionsRepo
from app.db.repo.signups_repo import SignupsRepo

from .models import (
    Leaderboard,
    LeaderboardPeriod,
    RankedReferrer,
    RankingPopulation,
    ReferrerScore,
)
from .time_utils import week_bounds_utc


def _rank_sort_key(score: ReferrerScore) -> tuple[int, int, int]:
    return (-score.conversions, -score.unique_clicks, score.signup_id)


def assign_dense_ranks(scores: Iterable[ReferrerScore]) -> list[RankedReferrer]:
    """Sorts by conversions, then unique clicks (both desc), then signup id.

    Rank goes up by one whenever the sort key changes. The signup id is part of
    the key, so two distinct referrers never share a rank.
    """
    ranked: list[RankedReferrer] = []
    rank = 0
    previous_key: tuple[int, int, int] | None = None
    for score in sorted(scores, key=_rank_sort_key):
        key = _rank_sort_key(score)
        if key != previous_key:
            rank += 1
            previous_key = key
        ranked.append(
            RankedReferrer(
                rank=rank,
                signup_id=score.signup_id,
                referral_code=score.referral_code,
                primary_wallet=score.primary_wallet,
                conversions=score.conversions,
                unique_clicks=score.unique_clicks,
            )
        )
    return ranked


def _period_bounds(
    period: LeaderboardPeriod,
    *,
    now_utc: datetime,
) -> tuple[datetime | None, datetime | None]:
    if period == LeaderboardPeriod.WEEKLY:
        return week_bounds_utc(now_utc)
    return None, None


async def rank_population(
    session: AsyncSession,
    *,
    period: LeaderboardPeriod,
    population: RankingPopulation,
    now_utc: datetime,
) -> list[RankedReferrer]:
    from_utc, to_utc = _period_bounds(period, now_utc=now_utc)
    members = await SignupsRepo.list_ranking_population(
        session,
        creators_only=population == RankingPopulation.CREATORS,
    )
    if not members:
        return []

    conversions_by_referrer = await ReferralConversionsRepo.count_valid_by_referrer(
        session,
        from_utc=from_utc,
        to_utc=to_utc,
    )
    clicks_by_referrer = await ReferralClicksRepo.count_unique_human_by_referrer(
        session,
        from_utc=from_utc,
        to_utc=to_utc,
    )
    return assign_dense_ranks(
        ReferrerScore(
            signup_id=signup_id,
            referral_code=referral_code,
            primary_wallet=primary_wallet,
            conversions=conversions_by_referrer.get(signup_id, 0),
            unique_clicks=clicks_by_referrer.get(signup_id, 0),
        )
        for signup_id, referral_code, primary_wallet in members
    )


async def get_leaderboard(
    session: AsyncSession,
    *,
    period: LeaderboardPeriod,
    limit: int,
    population: RankingPopulation,
    now_utc: datetime,
    viewer_signup_id: int | None = None,
) -> Leaderboard:
    week_start_utc, week_end_utc = _period_bounds(period, now_utc=now_utc)
    ranked = await rank_population(
        session,
        period=period,
        population=population,
        now_utc=now_utc,
    )
    me = None
    if viewer_signup_id is not None:
        me = find_entry(ranked, signup_id=viewer_signup_id)
    return Leaderboard(
        period=period,
        week_start_utc=week_start_utc,
        week_end_utc=week_end_utc,
        top=ranked[: max(0, limit)],
        me=me,
    )


def find_entry(ranked: Iterable[RankedReferrer], *, signup_id: int) -> RankedReferrer | None:
    for entry in ranked:
        if entry.signup_id == signup_id:
            return entry
    return None


def find_rank(ranked: Iterable[RankedReferrer], *, signup_id: int) -> int | None:
    entry = find_entry(ranked, signup_id=signup_id)
    return entry.rank if entry is not None else None


async def rank_for(
    session: AsyncSession,
    *,
    signup_id: int,
    period: LeaderboardPeriod,
    population: RankingPopulation,
    now_utc: datetime,
) -> int | None:
    ranked = await rank_population(
        session,
        period=period,
        population=population,
        now_utc=now_utc,
    )
    return find_rank(ranked, signup_id=signup_id)
