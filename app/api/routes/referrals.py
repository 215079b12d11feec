from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Header, Query, Request
from pydantic import BaseModel, Field

from app.core.config import get_settings
from app.db.session import SessionLocal
from app.economy.referrals.constants import LEADERBOARD_DEFAULT_LIMIT, LEADERBOARD_MAX_LIMIT
from app.economy.referrals.service import (
    LeaderboardPeriod,
    RankedReferrer,
    RankingPopulation,
    ReferralService,
)
from app.services.internal_auth import extract_client_ip

router = APIRouter(tags=["referrals"])


class ReferralClickRequest(BaseModel):
    referral_code: str = Field(min_length=1, max_length=64)
    session_id: str | None = Field(default=None, max_length=256)
    landing_url: str | None = Field(default=None, max_length=4096)


class ReferralClickResponse(BaseModel):
    recorded: bool


class LeaderboardEntryResponse(BaseModel):
    rank: int = Field(ge=1)
    signup_id: int = Field(gt=0)
    referral_code: str
    conversions: int = Field(ge=0)
    unique_clicks: int = Field(ge=0)
    primary_wallet: str | None = None


class LeaderboardResponse(BaseModel):
    period: LeaderboardPeriod
    week_start_utc: datetime | None = None
    week_end_utc: datetime | None = None
    top: list[LeaderboardEntryResponse]
    me: LeaderboardEntryResponse | None = None


class ReferralRankResponse(BaseModel):
    signup_id: int = Field(gt=0)
    period: LeaderboardPeriod
    rank: int | None = None


class ReferralsMeResponse(BaseModel):
    signup_id: int = Field(gt=0)
    referral_code: str | None = None
    referral_link: str | None = None
    weekly_conversions: int = Field(ge=0)
    all_time_conversions: int = Field(ge=0)
    weekly_rank: int | None = None
    all_time_rank: int | None = None


def _clamp_leaderboard_limit(limit: int) -> int:
    return max(1, min(LEADERBOARD_MAX_LIMIT, limit))


def _as_entry(entry: RankedReferrer) -> LeaderboardEntryResponse:
    return LeaderboardEntryResponse(
        rank=entry.rank,
        signup_id=entry.signup_id,
        referral_code=entry.referral_code,
        conversions=entry.conversions,
        unique_clicks=entry.unique_clicks,
        primary_wallet=entry.primary_wallet,
    )


@router.post("/referrals/click", response_model=ReferralClickResponse)
async def record_referral_click(
    payload: ReferralClickRequest,
    request: Request,
) -> ReferralClickResponse:
    settings = get_settings()
    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        result = await ReferralService.record_click(
            session,
            referral_code=payload.referral_code,
            session_id=payload.session_id,
            landing_url=payload.landing_url,
            raw_ip=extract_client_ip(request, trusted_proxies=settings.trusted_proxies),
            raw_user_agent=request.headers.get("User-Agent"),
            hash_secret=settings.referral_hash_secret,
            now_utc=now_utc,
        )
    return ReferralClickResponse(recorded=result.recorded)


@router.get("/referrals/leaderboard", response_model=LeaderboardResponse)
async def get_referrals_leaderboard(
    period: LeaderboardPeriod = Query(default=LeaderboardPeriod.WEEKLY),
    limit: int = Query(default=LEADERBOARD_DEFAULT_LIMIT),
    verified_wallet: str | None = Header(default=None, alias="X-Verified-Wallet"),
) -> LeaderboardResponse:
    now_utc = datetime.now(timezone.utc)
    wallet = ReferralService.normalize_lookup_wallet(verified_wallet)
    async with SessionLocal.begin() as session:
        viewer_signup_id = None
        if wallet is not None:
            viewer = await ReferralService.find_signup(session, email=None, wallet=wallet)
            viewer_signup_id = viewer.id if viewer is not None else None

        leaderboard = await ReferralService.get_leaderboard(
            session,
            period=period,
            limit=_clamp_leaderboard_limit(limit),
            population=RankingPopulation.REFERRERS,
            now_utc=now_utc,
            viewer_signup_id=viewer_signup_id,
        )

    return LeaderboardResponse(
        period=leaderboard.period,
        week_start_utc=leaderboard.week_start_utc,
        week_end_utc=leaderboard.week_end_utc,
        top=[_as_entry(entry) for entry in leaderboard.top],
        me=_as_entry(leaderboard.me) if leaderboard.me is not None else None,
    )


@router.get("/referrals/rank", response_model=ReferralRankResponse)
async def get_referral_rank(
    signup_id: int = Query(gt=0),
    period: LeaderboardPeriod = Query(default=LeaderboardPeriod.WEEKLY),
) -> ReferralRankResponse:
    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        rank = await ReferralService.rank_for(
            session,
            signup_id=signup_id,
            period=period,
            population=RankingPopulation.REFERRERS,
            now_utc=now_utc,
        )
    return ReferralRankResponse(signup_id=signup_id, period=period, rank=rank)


@router.get("/referrals/me", response_model=ReferralsMeResponse | None)
async def get_my_referrals(
    signup_id: int = Query(gt=0),
) -> ReferralsMeResponse | None:
    settings = get_settings()
    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        summary = await ReferralService.get_referrals_me(
            session,
            signup_id=signup_id,
            public_base_url=settings.public_base_url,
            now_utc=now_utc,
        )
    if summary is None:
        return None

    return ReferralsMeResponse(
        signup_id=summary.signup_id,
        referral_code=summary.referral_code,
        referral_link=summary.referral_link,
        weekly_conversions=summary.weekly_conversions,
        all_time_conversions=summary.all_time_conversions,
        weekly_rank=summary.weekly_rank,
        all_time_rank=summary.all_time_rank,
    )
