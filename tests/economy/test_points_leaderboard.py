from __future__ import annotations

import pytest

from app.economy.points.leaderboard import (
    WalletRollup,
    apply_ledger_totals,
    clamp_limit,
    clamp_page,
    display_name,
    parse_points_type,
    rank_rollups,
    roll_up_by_wallet,
    shorten_wallet,
)
from app.economy.points.types import PointsLeaderboardType

WALLET_A = "0x" + "aa" * 20
WALLET_B = "0x" + "bb" * 20


@pytest.mark.parametrize(
    ("raw_value", "expected"),
    [
        ("total", PointsLeaderboardType.TOTAL),
        (" TOTAL ", PointsLeaderboardType.TOTAL),
        ("invite", PointsLeaderboardType.INVITE),
        ("bogus", PointsLeaderboardType.INVITE),
        (None, PointsLeaderboardType.INVITE),
    ],
)
def test_parse_points_type_defaults_to_invite(raw_value, expected) -> None:
    assert parse_points_type(raw_value) == expected


def test_clamps_page_and_limit() -> None:
    assert clamp_page(0) == 1
    assert clamp_page(-4) == 1
    assert clamp_page(3) == 3
    assert clamp_limit(None) == 10
    assert clamp_limit(0) == 1
    assert clamp_limit(500) == 100


def test_display_name_prefers_code_then_short_wallet() -> None:
    assert display_name(referral_code="ABC", wallet=WALLET_A, signup_id=4) == "ABC"
    assert display_name(referral_code=None, wallet=WALLET_A, signup_id=4) == "0xaaaa…aaaa"
    assert display_name(referral_code=None, wallet=None, signup_id=4) == "user#4"
    assert shorten_wallet("0x1234") == "0x1234"
    assert shorten_wallet("not-a-wallet-address") == "not-a-wallet-address"


def test_roll_up_by_wallet_uses_lowest_id_and_skips_walletless() -> None:
    rollups = roll_up_by_wallet(
        [
            (7, WALLET_A, "ZED"),
            (3, WALLET_A, None),
            (4, None, "NOWALLET"),
            (5, WALLET_B, "BEE"),
            (9, WALLET_A, "ALPHA"),
        ]
    )

    assert [(rollup.signup_id, rollup.member_ids) for rollup in rollups] == [
        (3, [3, 7, 9]),
        (5, [5]),
    ]
    assert rollups[0].referral_code == "ZED"


def test_apply_ledger_totals_sums_members_and_invite_sources() -> None:
    rollups = roll_up_by_wallet([(1, WALLET_A, None), (2, WALLET_A, None), (3, WALLET_B, None)])

    apply_ledger_totals(
        rollups,
        [
            (1, "waitlist_signup", 100),
            (2, "referral_qualified", 50),
            (2, "referral_csw_link", 10),
            (3, "task", 20),
            (99, "waitlist_signup", 100),
        ],
    )

    assert (rollups[0].points_total, rollups[0].points_invite) == (160, 60)
    assert (rollups[1].points_total, rollups[1].points_invite) == (20, 0)


def _rollup(signup_id: int, total: int, invite: int) -> WalletRollup:
    return WalletRollup(
        signup_id=signup_id,
        wallet=f"0x{signup_id:040x}",
        member_ids=[signup_id],
        points_total=total,
        points_invite=invite,
    )


def test_rank_rollups_orders_by_requested_points_type() -> None:
    rollups = [_rollup(1, 300, 0), _rollup(2, 120, 100), _rollup(3, 150, 100)]

    by_invite = rank_rollups(rollups, points_type=PointsLeaderboardType.INVITE)
    by_total = rank_rollups(rollups, points_type=PointsLeaderboardType.TOTAL)

    assert [(row.signup_id, row.rank) for row in by_invite] == [(3, 1), (2, 2), (1, 3)]
    assert [(row.signup_id, row.rank) for row in by_total] == [(1, 1), (3, 2), (2, 3)]


def test_rank_rollups_breaks_full_ties_by_signup_id() -> None:
    ranked = rank_rollups(
        [_rollup(8, 50, 10), _rollup(4, 50, 10)],
        points_type=PointsLeaderboardType.TOTAL,
    )

    assert [row.signup_id for row in ranked] == [4, 8]
    assert [row.rank for row in ranked] == [1, 2]
