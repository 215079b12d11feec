from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.referral_conversions_repo import STATUS_QUALIFIED, ReferralConversionsRepo
from app.db.repo.signups_repo import SignupsRepo
from app.economy.points.constants import QUALIFIED_REFERRAL_POINTS, SOURCE_REFERRAL_QUALIFIED
from app.economy.points.service import PointsService
from app.economy.referrals.attribution import conversion_source_id

from .models import ProfileCompletionResult, QualificationResult

logger = structlog.get_logger(__name__)


async def qualify_on_profile_completion(
    session: AsyncSession,
    *,
    invitee_signup_id: int,
    now_utc: datetime,
) -> QualificationResult:
    """Moves the invitee's conversion to ``qualified`` and pays the referrer once.

    Every failed precondition returns ``qualified=False`` without writing.
    """
    profile_completed_at = await SignupsRepo.get_profile_completed_at(session, invitee_signup_id)
    if profile_completed_at is None:
        return QualificationResult(qualified=False)

    conversion = await ReferralConversionsRepo.get_by_invitee_signup_id(
        session,
        invitee_signup_id=invitee_signup_id,
    )
    if conversion is None:
        return QualificationResult(qualified=False)
    if not conversion.is_valid:
        return QualificationResult(qualified=False, conversion_id=conversion.id)
    if conversion.status == STATUS_QUALIFIED or conversion.qualified_at is not None:
        return QualificationResult(qualified=False, conversion_id=conversion.id)

    claimed = await ReferralConversionsRepo.try_mark_qualified(
        session,
        conversion_id=conversion.id,
        now_utc=now_utc,
    )
    if not claimed:
        logger.info(
            "referral_conversion_qualify_skipped",
            conversion_id=conversion.id,
            invitee_signup_id=invitee_signup_id,
        )
        return QualificationResult(qualified=False, conversion_id=conversion.id)

    award = await PointsService.award(
        session,
        signup_id=conversion.referrer_signup_id,
        source=SOURCE_REFERRAL_QUALIFIED,
        source_id=conversion_source_id(conversion.id),
        amount=QUALIFIED_REFERRAL_POINTS,
        now_utc=now_utc,
    )
    logger.info(
        "referral_conversion_qualified",
        conversion_id=conversion.id,
        referrer_signup_id=conversion.referrer_signup_id,
        invitee_signup_id=invitee_signup_id,
        points_granted=award.granted,
    )
    return QualificationResult(
        qualified=True,
        conversion_id=conversion.id,
        referrer_signup_id=conversion.referrer_signup_id,
        points_granted=award.granted,
    )


async def complete_profile(
    session: AsyncSession,
    *,
    signup_id: int,
    now_utc: datetime,
) -> ProfileCompletionResult:
    completed_at = await SignupsRepo.mark_profile_completed(
        session,
        signup_id=signup_id,
        now_utc=now_utc,
    )
    if completed_at is None:
        return ProfileCompletionResult(profile_completed=False, qualified_referral=False)

    qualification = await qualify_on_profile_completion(
        session,
        invitee_signup_id=signup_id,
        now_utc=now_utc,
    )
    return ProfileCompletionResult(
        profile_completed=True,
        qualified_referral=qualification.qualified,
    )
