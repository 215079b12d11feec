from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, func, literal, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.points_ledger import PointsLedgerEntry
from app.db.models.signups import Signup


class PointsLedgerRepo:
    @staticmethod
    async def try_insert(
        session: AsyncSession,
        *,
        signup_id: int,
        source: str,
        source_id: str,
        amount: int,
        created_at: datetime,
    ) -> int | None:
        """Inserts the grant unless its (signup_id, source, source_id) key exists.

        The row is selected from ``waitlist_signups``, so an unknown signup
        inserts nothing instead of violating the foreign key. Returns the new
        row id, or None when nothing was written.
        """
        grant = select(
            Signup.id,
            literal(source, type_=String(48)),
            literal(source_id, type_=Text()),
            literal(amount, type_=Integer()),
            literal(created_at, type_=DateTime(timezone=True)),
        ).where(Signup.id == signup_id)
        stmt = (
            postgresql_insert(PointsLedgerEntry)
            .from_select(
                [
                    PointsLedgerEntry.signup_id,
                    PointsLedgerEntry.source,
                    PointsLedgerEntry.source_id,
                    PointsLedgerEntry.amount,
                    PointsLedgerEntry.created_at,
                ],
                grant,
            )
            .on_conflict_do_nothing(
                index_elements=[
                    PointsLedgerEntry.signup_id,
                    PointsLedgerEntry.source,
                    PointsLedgerEntry.source_id,
                ]
            )
            .returning(PointsLedgerEntry.id)
        )
        result = await session.execute(stmt)
        inserted_id = result.scalar_one_or_none()
        return int(inserted_id) if inserted_id is not None else None

    @staticmethod
    async def sum_by_source(
        session: AsyncSession,
        *,
        signup_id: int,
    ) -> list[tuple[str, int]]:
        stmt = (
            select(
                PointsLedgerEntry.source,
                func.coalesce(func.sum(PointsLedgerEntry.amount), 0),
            )
            .where(PointsLedgerEntry.signup_id == signup_id)
            .group_by(PointsLedgerEntry.source)
        )
        result = await session.execute(stmt)
        return [(str(source), int(total or 0)) for source, total in result.all()]

    @staticmethod
    async def list_for_signup(
        session: AsyncSession,
        *,
        signup_id: int,
        limit: int = 200,
    ) -> list[PointsLedgerEntry]:
        stmt = (
            select(PointsLedgerEntry)
            .where(PointsLedgerEntry.signup_id == signup_id)
            .order_by(PointsLedgerEntry.created_at.desc(), PointsLedgerEntry.id.desc())
            .limit(max(1, int(limit)))
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def sum_by_signup_and_source(
        session: AsyncSession,
        *,
        signup_ids: list[int],
    ) -> list[tuple[int, str, int]]:
        if not signup_ids:
            return []
        stmt = (
            select(
                PointsLedgerEntry.signup_id,
                PointsLedgerEntry.source,
                func.coalesce(func.sum(PointsLedgerEntry.amount), 0),
            )
            .where(PointsLedgerEntry.signup_id.in_(signup_ids))
            .group_by(PointsLedgerEntry.signup_id, PointsLedgerEntry.source)
        )
        result = await session.execute(stmt)
        return [
            (int(signup_id), str(source), int(total or 0))
            for signup_id, source, total in result.all()
        ]
