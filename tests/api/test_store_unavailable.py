from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.api.routes import waitlist
from app.economy.points.service import PointsService
from app.main import app
from tests.api.fake_session import FakeSessionLocal


def test_store_outage_maps_to_503_with_retry_after(monkeypatch) -> None:
    monkeypatch.setattr(waitlist, "SessionLocal", FakeSessionLocal())

    async def _summarize(session, *, signup_id: int):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(PointsService, "summarize", _summarize)

    client = TestClient(app)
    response = client.get("/waitlist/points", params={"signup_id": 1})

    assert response.status_code == 503
    assert response.json() == {"detail": {"code": "E_STORE_UNAVAILABLE"}}
    assert response.headers["Retry-After"] == "5"
