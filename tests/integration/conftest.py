from __future__ import annotations

import pytest
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

from app.core.integration_db_safety import assert_safe_integration_db
from app.db.session import engine

# Children first; RESTART IDENTITY keeps signup ids predictable per test.
WAITLIST_TABLES = (
    "referral_clicks",
    "referral_conversions",
    "waitlist_points_ledger",
    "waitlist_signups",
)


@pytest.fixture(scope="session", autouse=True)
def refuse_unsafe_database() -> None:
    assert_safe_integration_db(engine.url.render_as_string(hide_password=False))


@pytest.fixture(autouse=True)
async def clean_waitlist_tables() -> None:
    # asyncpg connections are bound to the loop that opened them.
    await engine.dispose()
    try:
        conn = await engine.connect()
    except (OSError, DBAPIError) as exc:  # pragma: no cover - needs Postgres
        pytest.skip(f"waitlist integration database unavailable: {type(exc).__name__}")
    await conn.close()

    async with engine.begin() as conn:
        await conn.execute(
            text(f"TRUNCATE TABLE {', '.join(WAITLIST_TABLES)} RESTART IDENTITY CASCADE")
        )

    yield

    await engine.dispose()
