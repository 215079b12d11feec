from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from app.db.session import SessionLocal
from app.economy.points.leaderboard import clamp_limit, clamp_page, parse_points_type
from app.economy.points.service import PointsService
from app.economy.points.types import PointsBreakdown, PointsLeaderboardPage
from app.economy.referrals.service import RankStanding, ReferralService, SignupPosition

router = APIRouter(tags=["waitlist"])


class PointsBreakdownResponse(BaseModel):
    total: int = Field(ge=0)
    invite: int = Field(ge=0)
    signup: int = Field(ge=0)
    tasks: int = Field(ge=0)
    csw: int = Field(ge=0)
    social: int = Field(ge=0)
    bonus: int = Field(ge=0)


class RankStandingResponse(BaseModel):
    rank: int | None = None
    ahead: int | None = None
    percentile: int | None = Field(default=None, ge=1, le=100)


class ReferralCountsResponse(BaseModel):
    qualified_count: int = Field(ge=0)
    pending_count: int = Field(ge=0)
    pending_count_capped: int = Field(ge=0)
    pending_cap: int = Field(ge=0)


class WaitlistPositionResponse(BaseModel):
    signup_id: int = Field(gt=0)
    email: str
    referral_code: str | None = None
    profile_completed_at: datetime | None = None
    points: PointsBreakdownResponse
    weekly: RankStandingResponse
    all_time: RankStandingResponse
    total_count: int = Field(ge=0)
    referrals: ReferralCountsResponse


class LedgerEntryResponse(BaseModel):
    source: str
    source_id: str
    amount: int = Field(gt=0)
    created_at: datetime


class WaitlistLedgerResponse(BaseModel):
    signup_id: int = Field(gt=0)
    total_points: int = Field(ge=0)
    entries: list[LedgerEntryResponse]


class PointsLeaderboardRowResponse(BaseModel):
    rank: int = Field(ge=1)
    signup_id: int = Field(gt=0)
    display: str
    referral_code: str | None = None
    points_total: int = Field(ge=0)
    points_invite: int = Field(ge=0)


class PointsLeaderboardResponse(BaseModel):
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    points_type: str
    total_pages: int = Field(ge=1)
    has_more: bool
    leaderboard: list[PointsLeaderboardRowResponse]


def _as_points_response(breakdown: PointsBreakdown) -> PointsBreakdownResponse:
    return PointsBreakdownResponse(
        total=breakdown.total,
        invite=breakdown.invite,
        signup=breakdown.signup,
        tasks=breakdown.tasks,
        csw=breakdown.csw,
        social=breakdown.social,
        bonus=breakdown.bonus,
    )


def _as_standing_response(standing: RankStanding) -> RankStandingResponse:
    return RankStandingResponse(
        rank=standing.rank,
        ahead=standing.ahead,
        percentile=standing.percentile,
    )


def _as_leaderboard_response(result: PointsLeaderboardPage) -> PointsLeaderboardResponse:
    return PointsLeaderboardResponse(
        page=result.page,
        limit=result.limit,
        points_type=result.points_type.value,
        total_pages=result.total_pages,
        has_more=result.has_more,
        leaderboard=[
            PointsLeaderboardRowResponse(
                rank=row.rank,
                signup_id=row.signup_id,
                display=row.display,
                referral_code=row.referral_code,
                points_total=row.points_total,
                points_invite=row.points_invite,
            )
            for row in result.rows
        ],
    )


def _as_position_response(position: SignupPosition) -> WaitlistPositionResponse:
    return WaitlistPositionResponse(
        signup_id=position.signup_id,
        email=position.email,
        referral_code=position.referral_code,
        profile_completed_at=position.profile_completed_at,
        points=_as_points_response(position.points),
        weekly=_as_standing_response(position.weekly),
        all_time=_as_standing_response(position.all_time),
        total_count=position.total_count,
        referrals=ReferralCountsResponse(
            qualified_count=position.referrals.qualified_count,
            pending_count=position.referrals.pending_count,
            pending_count_capped=position.referrals.pending_count_capped,
            pending_cap=position.referrals.pending_cap,
        ),
    )


@router.get("/waitlist/points", response_model=PointsBreakdownResponse)
async def get_waitlist_points(
    signup_id: int = Query(gt=0),
) -> PointsBreakdownResponse:
    async with SessionLocal.begin() as session:
        breakdown = await PointsService.summarize(session, signup_id=signup_id)
    return _as_points_response(breakdown)


@router.get("/waitlist/position", response_model=WaitlistPositionResponse | None)
async def get_waitlist_position(
    email: str | None = Query(default=None, max_length=320),
    wallet: str | None = Query(default=None, max_length=64),
) -> WaitlistPositionResponse | None:
    normalized_email = ReferralService.normalize_lookup_email(email)
    normalized_wallet = ReferralService.normalize_lookup_wallet(wallet)
    if normalized_email is None and normalized_wallet is None:
        raise HTTPException(status_code=400, detail={"code": "E_INVALID_LOOKUP"})

    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        signup = await ReferralService.find_signup(
            session,
            email=normalized_email,
            wallet=normalized_wallet,
        )
        if signup is None:
            return None
        position = await ReferralService.get_position(
            session,
            signup_id=signup.id,
            now_utc=now_utc,
        )

    if position is None:
        return None
    return _as_position_response(position)


@router.get("/waitlist/ledger", response_model=WaitlistLedgerResponse)
async def get_waitlist_ledger(
    signup_id: int = Query(gt=0),
) -> WaitlistLedgerResponse:
    async with SessionLocal.begin() as session:
        listing = await PointsService.list_entries(session, signup_id=signup_id)
    return WaitlistLedgerResponse(
        signup_id=listing.signup_id,
        total_points=listing.total_points,
        entries=[
            LedgerEntryResponse(
                source=entry.source,
                source_id=entry.source_id,
                amount=entry.amount,
                created_at=entry.created_at,
            )
            for entry in listing.entries
        ],
    )


@router.get("/waitlist/leaderboard", response_model=PointsLeaderboardResponse)
async def get_waitlist_leaderboard(
    page: int = Query(default=1),
    limit: int = Query(default=10),
    points_type: str | None = Query(default=None, alias="pointsType", max_length=16),
) -> PointsLeaderboardResponse:
    async with SessionLocal.begin() as session:
        result = await PointsService.get_leaderboard(
            session,
            page=clamp_page(page),
            limit=clamp_limit(limit),
            points_type=parse_points_type(points_type),
        )
    return _as_leaderboard_response(result)
