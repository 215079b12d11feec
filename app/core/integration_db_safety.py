from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

LOCAL_DB_HOSTS = frozenset({"localhost", "127.0.0.1", "::1", "postgres", "waitlist_postgres"})
TEST_DB_MARKER = "test"


@dataclass(frozen=True, slots=True)
class IntegrationDbSafetyResult:
    database_name: str
    host: str
    problems: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_safe(self) -> bool:
        return not self.problems

    @property
    def reason(self) -> str:
        return "; ".join(self.problems) if self.problems else "ok"


def assess_integration_db_safety(database_url: str) -> IntegrationDbSafetyResult:
    """Integration tests TRUNCATE every table, so the target must be a local test database."""
    try:
        parsed = make_url(database_url)
    except ArgumentError:
        return IntegrationDbSafetyResult(
            database_name="",
            host="",
            problems=("database URL cannot be parsed",),
        )

    database_name = (parsed.database or "").strip()
    host = (parsed.host or "").strip().lower()
    problems: list[str] = []
    if parsed.get_backend_name() != "postgresql":
        problems.append("backend must be postgresql")
    if not database_name:
        problems.append("database name is empty")
    elif TEST_DB_MARKER not in database_name.lower():
        problems.append(f"database name must contain '{TEST_DB_MARKER}'")
    if host not in LOCAL_DB_HOSTS:
        problems.append(f"host '{host}' is not a local test host")

    return IntegrationDbSafetyResult(
        database_name=database_name,
        host=host,
        problems=tuple(problems),
    )


def assert_safe_integration_db(database_url: str) -> None:
    result = assess_integration_db_safety(database_url)
    if result.is_safe:
        return
    raise RuntimeError(
        "Refusing to TRUNCATE waitlist tables for integration tests: "
        f"{result.reason} (database='{result.database_name}', host='{result.host}'). "
        "Point DATABASE_URL at a local database such as 'waitlist_growth_test'."
    )
