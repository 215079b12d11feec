from __future__ import annotations

from datetime import datetime

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.referral_clicks import ReferralClick


class ReferralClicksRepo:
    @staticmethod
    async def get_latest_created_at_for_session(
        session: AsyncSession,
        *,
        referral_code: str,
        session_id: str,
    ) -> datetime | None:
        stmt = (
            select(ReferralClick.created_at)
            .where(
                ReferralClick.referral_code == referral_code,
                ReferralClick.session_id == session_id,
            )
            .order_by(ReferralClick.created_at.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, click: ReferralClick) -> ReferralClick:
        session.add(click)
        await session.flush()
        return click

    @staticmethod
    async def count_unique_human_by_referrer(
        session: AsyncSession,
        *,
        from_utc: datetime | None = None,
        to_utc: datetime | None = None,
    ) -> dict[int, int]:
        visitor_key = func.coalesce(
            ReferralClick.session_id,
            ReferralClick.ip_hash,
            ReferralClick.ua_hash,
        )
        stmt = select(
            ReferralClick.referrer_signup_id,
            func.count(distinct(visitor_key)),
        ).where(ReferralClick.is_bot_suspected.is_(False))
        if from_utc is not None:
            stmt = stmt.where(ReferralClick.created_at >= from_utc)
        if to_utc is not None:
            stmt = stmt.where(ReferralClick.created_at < to_utc)
        stmt = stmt.group_by(ReferralClick.referrer_signup_id)

        result = await session.execute(stmt)
        return {int(referrer_id): int(total or 0) for referrer_id, total in result.all()}
