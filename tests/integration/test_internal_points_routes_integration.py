from __future__ import annotations

import httpx
import pytest

from app.core.config import get_settings
from app.main import app
from app.services.internal_auth import INTERNAL_TOKEN_HEADER
from tests.integration.waitlist_fixtures import _count_ledger_rows, _create_signup


def _client() -> httpx.AsyncClient:
    # ASGITransport reports the peer as 127.0.0.1, which the default allowlist admits.
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://waitlist.test",
        headers={INTERNAL_TOKEN_HEADER: get_settings().internal_api_token},
    )


@pytest.mark.asyncio
async def test_award_route_reports_unknown_signup_as_not_granted() -> None:
    async with _client() as client:
        response = await client.post(
            "/internal/points/award",
            json={"signup_id": 999999, "source": "task", "source_id": "shareX", "amount": 10},
        )

    assert response.status_code == 200
    assert response.json() == {"granted": False}
    assert await _count_ledger_rows(signup_id=999999) == 0


@pytest.mark.asyncio
async def test_task_claim_route_reports_unknown_signup_as_not_granted() -> None:
    async with _client() as client:
        response = await client.post(
            "/internal/points/tasks/claim",
            json={"signup_id": 999999, "task_key": "shareX"},
        )

    assert response.status_code == 200
    assert response.json() == {"granted": False}


@pytest.mark.asyncio
async def test_award_route_grants_known_signup_once() -> None:
    signup_id = await _create_signup("route-award")
    payload = {"signup_id": signup_id, "source": "task", "source_id": "saveApp", "amount": 6}

    async with _client() as client:
        first = await client.post("/internal/points/award", json=payload)
        repeat = await client.post("/internal/points/award", json=payload)

    assert (first.json(), repeat.json()) == ({"granted": True}, {"granted": False})
    assert await _count_ledger_rows(signup_id=signup_id, source="task") == 1
