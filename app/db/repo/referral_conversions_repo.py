from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, func, not_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.referral_conversions import ReferralConversion

STATUS_PENDING = "pending"
STATUS_QUALIFIED = "qualified"


def _qualified_clause():
    return or_(
        ReferralConversion.status == STATUS_QUALIFIED,
        ReferralConversion.qualified_at.is_not(None),
    )


def _created_between(from_utc: datetime | None, to_utc: datetime | None) -> list:
    filters = []
    if from_utc is not None:
        filters.append(ReferralConversion.created_at >= from_utc)
    if to_utc is not None:
        filters.append(ReferralConversion.created_at < to_utc)
    return filters


class ReferralConversionsRepo:
    @staticmethod
    async def get_by_invitee_signup_id(
        session: AsyncSession,
        *,
        invitee_signup_id: int,
    ) -> ReferralConversion | None:
        stmt = select(ReferralConversion).where(
            ReferralConversion.invitee_signup_id == invitee_signup_id
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def try_mark_qualified(
        session: AsyncSession,
        *,
        conversion_id: int,
        now_utc: datetime,
    ) -> bool:
        """Flips pending -> qualified only if nobody else has done it yet.

        Concurrent callers serialise on the row lock; whoever commits second
        re-evaluates the WHERE clause against the committed row and updates nothing.
        """
        stmt = (
            update(ReferralConversion)
            .where(
                ReferralConversion.id == conversion_id,
                ReferralConversion.is_valid.is_(True),
                ReferralConversion.status != STATUS_QUALIFIED,
                ReferralConversion.qualified_at.is_(None),
            )
            .values(status=STATUS_QUALIFIED, qualified_at=now_utc)
            .returning(ReferralConversion.id)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def count_valid_by_referrer(
        session: AsyncSession,
        *,
        from_utc: datetime | None = None,
        to_utc: datetime | None = None,
    ) -> dict[int, int]:
        stmt = (
            select(ReferralConversion.referrer_signup_id, func.count(ReferralConversion.id))
            .where(
                ReferralConversion.is_valid.is_(True),
                *_created_between(from_utc, to_utc),
            )
            .group_by(ReferralConversion.referrer_signup_id)
        )
        result = await session.execute(stmt)
        return {int(referrer_id): int(total or 0) for referrer_id, total in result.all()}

    @staticmethod
    async def count_valid_for_referrer(
        session: AsyncSession,
        *,
        referrer_signup_id: int,
        from_utc: datetime | None = None,
        to_utc: datetime | None = None,
    ) -> int:
        stmt = select(func.count(ReferralConversion.id)).where(
            ReferralConversion.referrer_signup_id == referrer_signup_id,
            ReferralConversion.is_valid.is_(True),
            *_created_between(from_utc, to_utc),
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_qualified_and_pending_for_referrer(
        session: AsyncSession,
        *,
        referrer_signup_id: int,
    ) -> tuple[int, int]:
        qualified = _qualified_clause()
        stmt = select(
            func.count(ReferralConversion.id).filter(qualified),
            func.count(ReferralConversion.id).filter(not_(qualified)),
        ).where(
            and_(
                ReferralConversion.referrer_signup_id == referrer_signup_id,
                ReferralConversion.is_valid.is_(True),
            )
        )
        result = await session.execute(stmt)
        qualified_count, pending_count = result.one()
        return int(qualified_count or 0), int(pending_count or 0)

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        conversion: ReferralConversion,
    ) -> ReferralConversion:
        session.add(conversion)
        await session.flush()
        return conversion
