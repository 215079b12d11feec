from __future__ import annotations

from fastapi.testclient import TestClient

from app.api.routes import internal_points, internal_referrals
from app.economy.points.errors import PointsAwardInvalidError, UnknownTaskError
from app.economy.points.service import PointsService
from app.economy.points.types import AwardResult
from app.economy.referrals.service import (
    ProfileCompletionResult,
    QualificationResult,
    ReferralService,
)
from app.main import app
from tests.api.fake_session import FakeSessionLocal


def _allow_internal(monkeypatch) -> None:
    for module in (internal_points, internal_referrals):
        monkeypatch.setattr(module, "_assert_internal_access", lambda request: None)
        monkeypatch.setattr(module, "SessionLocal", FakeSessionLocal())


def test_award_points_returns_granted_flag(monkeypatch) -> None:
    _allow_internal(monkeypatch)
    calls: list[dict] = []

    async def _award(session, **kwargs) -> AwardResult:
        calls.append(kwargs)
        return AwardResult(granted=len(calls) == 1, entry_id=1 if len(calls) == 1 else None)

    monkeypatch.setattr(PointsService, "award", _award)

    client = TestClient(app)
    payload = {"signup_id": 5, "source": "csw_link", "source_id": "wallet:0xabc", "amount": 40}
    first = client.post("/internal/points/award", json=payload)
    second = client.post("/internal/points/award", json=payload)

    assert first.status_code == 200
    assert first.json() == {"granted": True}
    assert second.json() == {"granted": False}
    assert calls[0]["signup_id"] == 5
    assert calls[0]["amount"] == 40


def test_award_points_maps_invalid_award_to_422(monkeypatch) -> None:
    _allow_internal(monkeypatch)

    async def _award(session, **kwargs) -> AwardResult:
        raise PointsAwardInvalidError("amount must be a positive integer")

    monkeypatch.setattr(PointsService, "award", _award)

    client = TestClient(app)
    response = client.post(
        "/internal/points/award",
        json={"signup_id": 5, "source": "task", "source_id": "shareX", "amount": 0},
    )

    assert response.status_code == 422
    assert response.json() == {"detail": {"code": "E_POINTS_AWARD_INVALID"}}


def test_claim_task_maps_unknown_task_to_422(monkeypatch) -> None:
    _allow_internal(monkeypatch)

    async def _claim_task(session, **kwargs) -> AwardResult:
        raise UnknownTaskError(kwargs["task_key"])

    monkeypatch.setattr(PointsService, "claim_task", _claim_task)

    client = TestClient(app)
    response = client.post(
        "/internal/points/tasks/claim",
        json={"signup_id": 5, "task_key": "mysteryTask"},
    )

    assert response.status_code == 422
    assert response.json() == {"detail": {"code": "E_TASK_UNKNOWN"}}


def test_qualify_referral_returns_flag(monkeypatch) -> None:
    _allow_internal(monkeypatch)
    seen: dict = {}

    async def _qualify(session, *, invitee_signup_id: int, now_utc) -> QualificationResult:
        seen["invitee_signup_id"] = invitee_signup_id
        return QualificationResult(qualified=True, conversion_id=9, referrer_signup_id=1)

    monkeypatch.setattr(ReferralService, "qualify_on_profile_completion", _qualify)

    client = TestClient(app)
    response = client.post("/internal/referrals/qualify", json={"invitee_signup_id": 2})

    assert response.status_code == 200
    assert response.json() == {"qualified": True}
    assert seen == {"invitee_signup_id": 2}


def test_profile_complete_returns_both_flags(monkeypatch) -> None:
    _allow_internal(monkeypatch)

    async def _complete(session, *, signup_id: int, now_utc) -> ProfileCompletionResult:
        return ProfileCompletionResult(profile_completed=True, qualified_referral=False)

    monkeypatch.setattr(ReferralService, "complete_profile", _complete)

    client = TestClient(app)
    response = client.post("/internal/waitlist/profile-complete", json={"signup_id": 2})

    assert response.status_code == 200
    assert response.json() == {"profile_completed": True, "qualified_referral": False}


def test_qualify_referral_rejects_non_positive_id(monkeypatch) -> None:
    _allow_internal(monkeypatch)

    client = TestClient(app)
    response = client.post("/internal/referrals/qualify", json={"invitee_signup_id": 0})

    assert response.status_code == 422
