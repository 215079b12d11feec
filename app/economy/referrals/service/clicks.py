from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.referral_codes import normalize_referral_code
from app.db.models.referral_clicks import ReferralClick
from app.db.repo.referral_clicks_repo import ReferralClicksRepo
from app.db.repo.signups_repo import SignupsRepo
from app.economy.referrals.attribution import hash_for_attribution, is_bot_user_agent
from app.economy.referrals.constants import (
    CLICK_DEDUPE_WINDOW,
    CLICK_LANDING_URL_MAX_LENGTH,
    CLICK_SESSION_ID_MAX_LENGTH,
)

from .models import ClickResult

logger = structlog.get_logger(__name__)


def _clean_optional(value: str | None, *, max_length: int) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    return cleaned[:max_length]


async def record_click(
    session: AsyncSession,
    *,
    referral_code: str | None,
    session_id: str | None,
    landing_url: str | None,
    raw_ip: str | None,
    raw_user_agent: str | None,
    hash_secret: str,
    now_utc: datetime,
) -> ClickResult:
    normalized_code = normalize_referral_code(referral_code)
    if not normalized_code:
        return ClickResult(recorded=False)

    referrer = await SignupsRepo.get_by_referral_code(session, normalized_code)
    if referrer is None:
        logger.info("referral_click_unknown_code", referral_code=normalized_code)
        return ClickResult(recorded=False)

    cleaned_session_id = _clean_optional(session_id, max_length=CLICK_SESSION_ID_MAX_LENGTH)
    if cleaned_session_id is not None:
        latest_created_at = await ReferralClicksRepo.get_latest_created_at_for_session(
            session,
            referral_code=normalized_code,
            session_id=cleaned_session_id,
        )
        if latest_created_at is not None and now_utc - latest_created_at < CLICK_DEDUPE_WINDOW:
            logger.info(
                "referral_click_deduped",
                referral_code=normalized_code,
                referrer_signup_id=referrer.id,
            )
            return ClickResult(recorded=False)

    is_bot_suspected = is_bot_user_agent(raw_user_agent)
    click = await ReferralClicksRepo.create(
        session,
        click=ReferralClick(
            referral_code=normalized_code,
            referrer_signup_id=referrer.id,
            ip_hash=hash_for_attribution(raw_ip, secret=hash_secret),
            ua_hash=hash_for_attribution(raw_user_agent, secret=hash_secret),
            session_id=cleaned_session_id,
            landing_url=_clean_optional(landing_url, max_length=CLICK_LANDING_URL_MAX_LENGTH),
            is_bot_suspected=is_bot_suspected,
            created_at=now_utc,
        ),
    )
    logger.info(
        "referral_click_recorded",
        click_id=click.id,
        referral_code=normalized_code,
        referrer_signup_id=referrer.id,
        is_bot_suspected=is_bot_suspected,
    )
    return ClickResult(recorded=True)
