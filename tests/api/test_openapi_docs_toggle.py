from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app import main as app_main

DOC_PATHS = ("/docs", "/redoc", "/openapi.json")


def _settings(*, enable_openapi_docs: bool) -> SimpleNamespace:
    return SimpleNamespace(
        app_env="test",
        log_level="INFO",
        enable_openapi_docs=enable_openapi_docs,
    )


@pytest.mark.parametrize(("enabled", "expected_status"), [(True, 200), (False, 404)])
def test_openapi_docs_follow_setting(monkeypatch, enabled: bool, expected_status: int) -> None:
    monkeypatch.setattr(app_main, "get_settings", lambda: _settings(enable_openapi_docs=enabled))
    client = TestClient(app_main.create_app())

    assert [client.get(path).status_code for path in DOC_PATHS] == [expected_status] * 3


def test_openapi_schema_lists_waitlist_routes(monkeypatch) -> None:
    monkeypatch.setattr(app_main, "get_settings", lambda: _settings(enable_openapi_docs=True))
    client = TestClient(app_main.create_app())

    paths = client.get("/openapi.json").json()["paths"]

    assert {
        "/referrals/click",
        "/referrals/leaderboard",
        "/waitlist/position",
        "/internal/points/award",
        "/internal/referrals/qualify",
    } <= set(paths)
