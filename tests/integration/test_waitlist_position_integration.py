from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from app.db.session import SessionLocal
from app.economy.referrals.constants import PENDING_CAP
from app.economy.referrals.service import ReferralService
from tests.integration.waitlist_fixtures import (
    UTC,
    _count_clicks,
    _count_ledger_rows,
    _create_conversion,
    _create_signup,
    _get_conversion,
)

WALLET = "0x" + "1f" * 20


@pytest.mark.asyncio
async def test_click_signup_profile_completion_end_to_end() -> None:
    now_utc = datetime(2026, 3, 5, 8, 0, tzinfo=UTC)
    referrer_id = await _create_signup("scenario-referrer", referral_code="ABC123")

    for offset_ms in (0, 700, 2000):
        async with SessionLocal.begin() as session:
            await ReferralService.record_click(
                session,
                referral_code="ABC123",
                session_id="s1",
                landing_url=None,
                raw_ip="203.0.113.50",
                raw_user_agent="Mozilla/5.0",
                hash_secret="integration-pepper",
                now_utc=now_utc + timedelta(milliseconds=offset_ms),
            )
    assert await _count_clicks(referral_code="ABC123") == 1

    invitee_id = await _create_signup("scenario-invitee")
    conversion_id = await _create_conversion(
        referrer_signup_id=referrer_id,
        invitee_signup_id=invitee_id,
        referral_code="ABC123",
        created_at=now_utc + timedelta(minutes=1),
    )
    assert (await _get_conversion(conversion_id)).status == "pending"

    for minutes in (10, 20):
        async with SessionLocal.begin() as session:
            await ReferralService.complete_profile(
                session,
                signup_id=invitee_id,
                now_utc=now_utc + timedelta(minutes=minutes),
            )

    conversion = await _get_conversion(conversion_id)
    assert conversion.status == "qualified"
    assert conversion.qualified_at == now_utc + timedelta(minutes=10)
    assert await _count_ledger_rows(signup_id=referrer_id, source="referral_qualified") == 1

    async with SessionLocal.begin() as session:
        breakdown = await ReferralService.get_position(
            session,
            signup_id=referrer_id,
            now_utc=now_utc + timedelta(minutes=30),
        )
    assert breakdown is not None
    assert breakdown.points.total == 100
    assert breakdown.referrals.qualified_count == 1
    assert breakdown.referrals.pending_count == 0


@pytest.mark.asyncio
async def test_position_reports_standings_and_capped_pending() -> None:
    now_utc = datetime(2026, 3, 5, 8, 0, tzinfo=UTC)
    leader_id = await _create_signup("position-leader", referral_code="LEADER1", primary_wallet=WALLET)
    other_id = await _create_signup("position-other", referral_code="OTHER1")
    await _create_signup("position-no-code")

    pending_total = PENDING_CAP + 2
    for index in range(pending_total):
        invitee_id = await _create_signup(f"position-invitee-{index}")
        await _create_conversion(
            referrer_signup_id=leader_id,
            invitee_signup_id=invitee_id,
            referral_code="LEADER1",
            created_at=now_utc - timedelta(days=30),
        )
    invalid_invitee = await _create_signup("position-invalid-invitee")
    await _create_conversion(
        referrer_signup_id=leader_id,
        invitee_signup_id=invalid_invitee,
        referral_code="LEADER1",
        created_at=now_utc - timedelta(days=30),
        is_valid=False,
    )

    async with SessionLocal.begin() as session:
        signup = await ReferralService.find_signup(session, email=None, wallet=WALLET)
        assert signup is not None
        position = await ReferralService.get_position(session, signup_id=signup.id, now_utc=now_utc)
        other = await ReferralService.get_position(session, signup_id=other_id, now_utc=now_utc)

    assert position is not None
    assert position.signup_id == leader_id
    assert position.total_count == 2
    assert (position.all_time.rank, position.all_time.ahead, position.all_time.percentile) == (1, 0, 50)
    assert position.weekly.rank == 1
    assert position.referrals.qualified_count == 0
    assert position.referrals.pending_count == pending_total
    assert position.referrals.pending_count_capped == PENDING_CAP
    assert position.referrals.pending_cap == PENDING_CAP

    assert other is not None
    assert (other.all_time.rank, other.all_time.ahead, other.all_time.percentile) == (2, 1, 100)


@pytest.mark.asyncio
async def test_position_for_signup_without_code_has_no_rank() -> None:
    now_utc = datetime(2026, 3, 5, 8, 0, tzinfo=UTC)
    await _create_signup("nocode-referrer", referral_code="SOMEONE1")
    signup_id = await _create_signup("nocode-member")

    async with SessionLocal.begin() as session:
        signup = await ReferralService.find_signup(
            session,
            email="nocode-member@example.com",
            wallet=None,
        )
        assert signup is not None and signup.id == signup_id
        position = await ReferralService.get_position(session, signup_id=signup_id, now_utc=now_utc)
        missing = await ReferralService.get_position(session, signup_id=999_999, now_utc=now_utc)

    assert position is not None
    assert position.weekly.rank is None
    assert position.all_time.percentile is None
    assert position.total_count == 1
    assert missing is None


@pytest.mark.asyncio
async def test_referrals_me_ranks_among_creators() -> None:
    now_utc = datetime(2026, 3, 5, 8, 0, tzinfo=UTC)
    creator_id = await _create_signup(
        "me-creator",
        referral_code="MYCODE1",
        persona="creator",
        has_creator_coin=True,
    )
    await _create_signup("me-plain", referral_code="PLAIN1")
    invitee_old = await _create_signup("me-invitee-old")
    invitee_new = await _create_signup("me-invitee-new")
    await _create_conversion(
        referrer_signup_id=creator_id,
        invitee_signup_id=invitee_old,
        referral_code="MYCODE1",
        created_at=now_utc - timedelta(days=20),
    )
    await _create_conversion(
        referrer_signup_id=creator_id,
        invitee_signup_id=invitee_new,
        referral_code="MYCODE1",
        created_at=now_utc - timedelta(hours=2),
    )

    async with SessionLocal.begin() as session:
        summary = await ReferralService.get_referrals_me(
            session,
            signup_id=creator_id,
            public_base_url="https://4626.fun",
            now_utc=now_utc,
        )
        plain = await ReferralService.get_referrals_me(
            session,
            signup_id=creator_id + 1,
            public_base_url="https://4626.fun",
            now_utc=now_utc,
        )

    assert summary is not None
    assert summary.referral_link == "https://4626.fun/?ref=MYCODE1#waitlist"
    assert summary.weekly_conversions == 1
    assert summary.all_time_conversions == 2
    assert summary.weekly_rank == 1
    assert summary.all_time_rank == 1

    assert plain is not None
    assert plain.all_time_rank is None
