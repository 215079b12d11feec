from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from app.core.config import get_settings
from app.db.session import SessionLocal
from app.economy.points.errors import PointsError
from app.economy.points.service import PointsService
from app.services.internal_auth import (
    extract_client_ip,
    is_client_ip_allowed,
    is_internal_request_authenticated,
)

router = APIRouter(tags=["internal", "points"])
logger = structlog.get_logger(__name__)


class PointsAwardRequest(BaseModel):
    signup_id: int = Field(gt=0)
    source: str = Field(max_length=48)
    source_id: str = Field(max_length=256)
    amount: int


class PointsTaskClaimRequest(BaseModel):
    signup_id: int = Field(gt=0)
    task_key: str = Field(min_length=1, max_length=64)


class PointsAwardResponse(BaseModel):
    granted: bool


def _assert_internal_access(request: Request) -> None:
    settings = get_settings()
    client_ip = extract_client_ip(
        request,
        trusted_proxies=settings.trusted_proxies,
    )

    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("internal_points_auth_failed", reason="ip_not_allowed", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})

    if not is_internal_request_authenticated(
        request,
        expected_token=settings.internal_api_token,
    ):
        logger.warning("internal_points_auth_failed", reason="invalid_credentials", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})


@router.post("/internal/points/award", response_model=PointsAwardResponse)
async def award_points(
    payload: PointsAwardRequest,
    request: Request,
) -> PointsAwardResponse:
    _assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            result = await PointsService.award(
                session,
                signup_id=payload.signup_id,
                source=payload.source,
                source_id=payload.source_id,
                amount=payload.amount,
                now_utc=now_utc,
            )
    except PointsError as exc:
        raise HTTPException(status_code=422, detail={"code": exc.code}) from exc

    return PointsAwardResponse(granted=result.granted)


@router.post("/internal/points/tasks/claim", response_model=PointsAwardResponse)
async def claim_points_task(
    payload: PointsTaskClaimRequest,
    request: Request,
) -> PointsAwardResponse:
    _assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            result = await PointsService.claim_task(
                session,
                signup_id=payload.signup_id,
                task_key=payload.task_key,
                now_utc=now_utc,
            )
    except PointsError as exc:
        raise HTTPException(status_code=422, detail={"code": exc.code}) from exc

    return PointsAwardResponse(granted=result.granted)
