from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from app.core.config import get_settings
from app.db.session import SessionLocal
from app.economy.referrals.service import ReferralService
from app.services.internal_auth import (
    extract_client_ip,
    is_client_ip_allowed,
    is_internal_request_authenticated,
)

router = APIRouter(tags=["internal", "referrals"])
logger = structlog.get_logger(__name__)


class ReferralQualifyRequest(BaseModel):
    invitee_signup_id: int = Field(gt=0)


class ReferralQualifyResponse(BaseModel):
    qualified: bool


class ProfileCompleteRequest(BaseModel):
    signup_id: int = Field(gt=0)


class ProfileCompleteResponse(BaseModel):
    profile_completed: bool
    qualified_referral: bool


def _assert_internal_access(request: Request) -> None:
    settings = get_settings()
    client_ip = extract_client_ip(
        request,
        trusted_proxies=settings.trusted_proxies,
    )

    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("internal_referrals_auth_failed", reason="ip_not_allowed", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})

    if not is_internal_request_authenticated(
        request,
        expected_token=settings.internal_api_token,
    ):
        logger.warning("internal_referrals_auth_failed", reason="invalid_credentials", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})


@router.post("/internal/referrals/qualify", response_model=ReferralQualifyResponse)
async def qualify_referral(
    payload: ReferralQualifyRequest,
    request: Request,
) -> ReferralQualifyResponse:
    _assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        result = await ReferralService.qualify_on_profile_completion(
            session,
            invitee_signup_id=payload.invitee_signup_id,
            now_utc=now_utc,
        )
    return ReferralQualifyResponse(qualified=result.qualified)


@router.post("/internal/waitlist/profile-complete", response_model=ProfileCompleteResponse)
async def complete_waitlist_profile(
    payload: ProfileCompleteRequest,
    request: Request,
) -> ProfileCompleteResponse:
    _assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        result = await ReferralService.complete_profile(
            session,
            signup_id=payload.signup_id,
            now_utc=now_utc,
        )
    return ProfileCompleteResponse(
        profile_completed=result.profile_completed,
        qualified_referral=result.qualified_referral,
    )
