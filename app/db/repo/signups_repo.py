from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.signups import Signup

CREATOR_PERSONA = "creator"


def _population_filters(*, creators_only: bool) -> list:
    filters = [Signup.referral_code.is_not(None)]
    if creators_only:
        filters.extend(
            [
                Signup.persona == CREATOR_PERSONA,
                Signup.has_creator_coin.is_(True),
            ]
        )
    return filters


class SignupsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, signup_id: int) -> Signup | None:
        return await session.get(Signup, signup_id)

    @staticmethod
    async def get_by_referral_code(session: AsyncSession, referral_code: str) -> Signup | None:
        stmt = select(Signup).where(Signup.referral_code == referral_code)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(session: AsyncSession, email: str) -> Signup | None:
        stmt = select(Signup).where(Signup.email == email)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_wallet(session: AsyncSession, wallet: str) -> Signup | None:
        normalized = wallet.strip().lower()
        stmt = (
            select(Signup)
            .where(
                or_(
                    func.lower(Signup.primary_wallet) == normalized,
                    func.lower(Signup.embedded_wallet) == normalized,
                )
            )
            .order_by(Signup.id.asc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_profile_completed_at(session: AsyncSession, signup_id: int) -> datetime | None:
        stmt = select(Signup.profile_completed_at).where(Signup.id == signup_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def mark_profile_completed(
        session: AsyncSession,
        *,
        signup_id: int,
        now_utc: datetime,
    ) -> datetime | None:
        stmt = (
            update(Signup)
            .where(Signup.id == signup_id)
            .values(profile_completed_at=func.coalesce(Signup.profile_completed_at, now_utc))
            .returning(Signup.profile_completed_at)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_ranking_population(
        session: AsyncSession,
        *,
        creators_only: bool,
    ) -> list[tuple[int, str, str | None]]:
        stmt = (
            select(Signup.id, Signup.referral_code, Signup.primary_wallet)
            .where(*_population_filters(creators_only=creators_only))
            .order_by(Signup.id.asc())
        )
        result = await session.execute(stmt)
        return [
            (int(signup_id), str(referral_code), primary_wallet)
            for signup_id, referral_code, primary_wallet in result.all()
        ]

    @staticmethod
    async def list_profile_complete_wallets(
        session: AsyncSession,
        *,
        limit: int,
    ) -> list[tuple[int, str | None, str | None]]:
        """Earliest profile-complete signups as (id, wallet key, referral code).

        The wallet key is the primary wallet, else the embedded one; blanks count as missing.
        """
        wallet_key = func.coalesce(
            func.nullif(Signup.primary_wallet, ""),
            func.nullif(Signup.embedded_wallet, ""),
        )
        stmt = (
            select(Signup.id, wallet_key, Signup.referral_code)
            .where(Signup.profile_completed_at.is_not(None))
            .order_by(Signup.id.asc())
            .limit(max(1, int(limit)))
        )
        result = await session.execute(stmt)
        return [
            (int(signup_id), wallet, referral_code)
            for signup_id, wallet, referral_code in result.all()
        ]

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        email: str,
        referral_code: str | None,
        primary_wallet: str | None = None,
        embedded_wallet: str | None = None,
        persona: str | None = None,
        has_creator_coin: bool = False,
        profile_completed_at: datetime | None = None,
    ) -> Signup:
        signup = Signup(
            email=email.strip().lower(),
            referral_code=referral_code,
            primary_wallet=primary_wallet.lower() if primary_wallet else None,
            embedded_wallet=embedded_wallet.lower() if embedded_wallet else None,
            persona=persona,
            has_creator_coin=has_creator_coin,
            profile_completed_at=profile_completed_at,
        )
        session.add(signup)
        await session.flush()
        return signup
