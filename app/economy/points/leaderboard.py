from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repo.points_ledger_repo import PointsLedgerRepo
from app.db.repo.signups_repo import SignupsRepo
from app.economy.points.breakdown import category_for_source
from app.economy.points.constants import (
    POINTS_LEADERBOARD_DEFAULT_LIMIT,
    POINTS_LEADERBOARD_MAX_LIMIT,
    POINTS_LEADERBOARD_POPULATION_CAP,
)
from app.economy.points.types import (
    PointsLeaderboardPage,
    PointsLeaderboardRow,
    PointsLeaderboardType,
)


@dataclass(slots=True)
class WalletRollup:
    signup_id: int
    wallet: str
    referral_code: str | None = None
    member_ids: list[int] = field(default_factory=list)
    points_total: int = 0
    points_invite: int = 0


def parse_points_type(raw_value: str | None) -> PointsLeaderboardType:
    if (raw_value or "").strip().lower() == PointsLeaderboardType.TOTAL.value:
        return PointsLeaderboardType.TOTAL
    return PointsLeaderboardType.INVITE


def clamp_page(page: int | None) -> int:
    return max(1, int(page or 1))


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return POINTS_LEADERBOARD_DEFAULT_LIMIT
    return max(1, min(POINTS_LEADERBOARD_MAX_LIMIT, int(limit)))


def shorten_wallet(wallet: str | None) -> str | None:
    if not wallet:
        return None
    if not wallet.startswith("0x") or len(wallet) < 12:
        return wallet
    return f"{wallet[:6]}…{wallet[-4:]}"


def display_name(*, referral_code: str | None, wallet: str | None, signup_id: int) -> str:
    return referral_code or shorten_wallet(wallet) or f"user#{signup_id}"


def roll_up_by_wallet(
    members: Iterable[tuple[int, str | None, str | None]],
) -> list[WalletRollup]:
    """Groups signups sharing a wallet; the lowest signup id represents the group.

    Signups without any wallet are left out. The group keeps the greatest
    referral code among its members.
    """
    rollups: dict[str, WalletRollup] = {}
    for signup_id, wallet, referral_code in sorted(members, key=lambda member: member[0]):
        if not wallet:
            continue
        rollup = rollups.get(wallet)
        if rollup is None:
            rollup = WalletRollup(signup_id=signup_id, wallet=wallet)
            rollups[wallet] = rollup
        rollup.member_ids.append(signup_id)
        if referral_code and (rollup.referral_code is None or referral_code > rollup.referral_code):
            rollup.referral_code = referral_code
    return list(rollups.values())


def apply_ledger_totals(
    rollups: Iterable[WalletRollup],
    signup_source_totals: Iterable[tuple[int, str, int]],
) -> None:
    owner_by_signup = {
        member_id: rollup for rollup in rollups for member_id in rollup.member_ids
    }
    for signup_id, source, amount in signup_source_totals:
        rollup = owner_by_signup.get(signup_id)
        if rollup is None:
            continue
        rollup.points_total += int(amount)
        if category_for_source(source) == "invite":
            rollup.points_invite += int(amount)


def _sort_key(rollup: WalletRollup, points_type: PointsLeaderboardType) -> tuple[int, int, int]:
    if points_type == PointsLeaderboardType.TOTAL:
        return (-rollup.points_total, -rollup.points_invite, rollup.signup_id)
    return (-rollup.points_invite, -rollup.points_total, rollup.signup_id)


def rank_rollups(
    rollups: Iterable[WalletRollup],
    *,
    points_type: PointsLeaderboardType,
) -> list[PointsLeaderboardRow]:
    ranked: list[PointsLeaderboardRow] = []
    rank = 0
    previous_key: tuple[int, int, int] | None = None
    for rollup in sorted(rollups, key=lambda item: _sort_key(item, points_type)):
        key = _sort_key(rollup, points_type)
        if key != previous_key:
            rank += 1
            previous_key = key
        ranked.append(
            PointsLeaderboardRow(
                rank=rank,
                signup_id=rollup.signup_id,
                display=display_name(
                    referral_code=rollup.referral_code,
                    wallet=rollup.wallet,
                    signup_id=rollup.signup_id,
                ),
                referral_code=rollup.referral_code,
                points_total=rollup.points_total,
                points_invite=rollup.points_invite,
            )
        )
    return ranked


async def get_points_leaderboard(
    session: AsyncSession,
    *,
    page: int,
    limit: int,
    points_type: PointsLeaderboardType,
) -> PointsLeaderboardPage:
    page = clamp_page(page)
    limit = clamp_limit(limit)
    members = await SignupsRepo.list_profile_complete_wallets(
        session,
        limit=POINTS_LEADERBOARD_POPULATION_CAP,
    )
    rollups = roll_up_by_wallet(members)
    totals = await PointsLedgerRepo.sum_by_signup_and_source(
        session,
        signup_ids=[member_id for rollup in rollups for member_id in rollup.member_ids],
    )
    apply_ledger_totals(rollups, totals)
    ranked = rank_rollups(rollups, points_type=points_type)

    total_pages = max(1, math.ceil(len(ranked) / limit))
    offset = (page - 1) * limit
    return PointsLeaderboardPage(
        page=page,
        limit=limit,
        points_type=points_type,
        total_pages=total_pages,
        has_more=page < total_pages,
        rows=ranked[offset : offset + limit],
    )
