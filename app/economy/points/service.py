from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.points_ledger_repo import PointsLedgerRepo
from app.economy.points.breakdown import build_points_breakdown
from app.economy.points.constants import LEDGER_LIST_LIMIT
from app.economy.points.errors import PointsAwardInvalidError, UnknownTaskError
from app.economy.points.leaderboard import get_points_leaderboard
from app.economy.points.tasks import resolve_task_reward
from app.economy.points.types import (
    AwardResult,
    LedgerEntryView,
    LedgerListing,
    PointsBreakdown,
    PointsLeaderboardPage,
    PointsLeaderboardType,
)

logger = structlog.get_logger(__name__)


class PointsService:
    @staticmethod
    def _validate_award(*, source: str, source_id: str, amount: int) -> None:
        if not source or not source.strip():
            raise PointsAwardInvalidError("source must be non-empty")
        if not source_id or not source_id.strip():
            raise PointsAwardInvalidError("source_id must be non-empty")
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise PointsAwardInvalidError("amount must be a positive integer")

    @staticmethod
    async def award(
        session: AsyncSession,
        *,
        signup_id: int,
        source: str,
        source_id: str,
        amount: int,
        now_utc: datetime,
    ) -> AwardResult:
        """Grants points once per (signup_id, source, source_id).

        A repeated key or an unknown signup is reported as ``granted=False`` and
        writes nothing; the unique constraint on the ledger decides, so concurrent
        callers are safe.
        """
        PointsService._validate_award(source=source, source_id=source_id, amount=amount)

        entry_id = await PointsLedgerRepo.try_insert(
            session,
            signup_id=signup_id,
            source=source.strip(),
            source_id=source_id.strip(),
            amount=amount,
            created_at=now_utc,
        )
        if entry_id is None:
            logger.info(
                "points_award_not_granted",
                signup_id=signup_id,
                source=source,
                source_id=source_id,
            )
            return AwardResult(granted=False)

        logger.info(
            "points_awarded",
            signup_id=signup_id,
            source=source,
            source_id=source_id,
            amount=amount,
            entry_id=entry_id,
        )
        return AwardResult(granted=True, entry_id=entry_id)

    @staticmethod
    async def summarize(session: AsyncSession, *, signup_id: int) -> PointsBreakdown:
        source_totals = await PointsLedgerRepo.sum_by_source(session, signup_id=signup_id)
        return build_points_breakdown(source_totals)

    @staticmethod
    async def list_entries(
        session: AsyncSession,
        *,
        signup_id: int,
        limit: int = LEDGER_LIST_LIMIT,
    ) -> LedgerListing:
        breakdown = await PointsService.summarize(session, signup_id=signup_id)
        entries = await PointsLedgerRepo.list_for_signup(session, signup_id=signup_id, limit=limit)
        return LedgerListing(
            signup_id=signup_id,
            total_points=breakdown.total,
            entries=[
                LedgerEntryView(
                    source=entry.source,
                    source_id=entry.source_id,
                    amount=int(entry.amount),
                    created_at=entry.created_at,
                )
                for entry in entries
            ],
        )

    @staticmethod
    async def claim_task(
        session: AsyncSession,
        *,
        signup_id: int,
        task_key: str,
        now_utc: datetime,
    ) -> AwardResult:
        reward = resolve_task_reward(task_key)
        if reward is None:
            raise UnknownTaskError(task_key)
        return await PointsService.award(
            session,
            signup_id=signup_id,
            source=reward.source,
            source_id=task_key.strip(),
            amount=reward.points,
            now_utc=now_utc,
        )

    @staticmethod
    async def get_leaderboard(
        session: AsyncSession,
        *,
        page: int,
        limit: int,
        points_type: PointsLeaderboardType,
    ) -> PointsLeaderboardPage:
        return await get_points_leaderboard(
            session,
            page=page,
            limit=limit,
            points_type=points_type,
        )
