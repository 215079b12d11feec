from __future__ import annotations

import argparse
import asyncio
import re
from pathlib import Path
from typing import TextIO

import asyncpg
from alembic import command
from alembic.config import Config
from sqlalchemy.engine import make_url

from app.core.config import get_settings
from app.core.integration_db_safety import assert_safe_integration_db

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
ALEMBIC_INI_PATH = Path(__file__).resolve().parents[1] / "alembic.ini"


async def _create_database_if_missing(database_url: str) -> bool:
    parsed = make_url(database_url)
    db_name = (parsed.database or "").strip()
    if IDENTIFIER_RE.fullmatch(db_name) is None:
        raise RuntimeError(f"Unsupported database name '{db_name}'; use [A-Za-z0-9_] only.")
    if parsed.username is None:
        raise RuntimeError("DATABASE_URL username is required.")

    conn = await asyncpg.connect(
        host=parsed.host or "localhost",
        port=int(parsed.port or 5432),
        user=parsed.username,
        password=parsed.password,
        database="postgres",
    )
    try:
        exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", db_name)
        if exists:
            return False
        await conn.execute(f'CREATE DATABASE "{db_name}"')
        return True
    finally:
        await conn.close()


def build_alembic_config(*, output_buffer: TextIO | None = None) -> Config:
    config = Config(str(ALEMBIC_INI_PATH), output_buffer=output_buffer)
    config.set_main_option("script_location", str(ALEMBIC_INI_PATH.parent / "alembic"))
    return config


def _upgrade_schema() -> None:
    command.upgrade(build_alembic_config(), "head")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Create the local integration-test database and migrate it to head.",
    )
    parser.add_argument("--skip-migrations", action="store_true")
    args = parser.parse_args(argv)

    database_url = get_settings().database_url
    assert_safe_integration_db(database_url)

    created = asyncio.run(_create_database_if_missing(database_url))
    db_name = make_url(database_url).database
    print(f"ensure_test_db: {'created' if created else 'exists'} db={db_name}")  # noqa: T201

    if not args.skip_migrations:
        _upgrade_schema()
        print(f"ensure_test_db: migrated db={db_name} to head")  # noqa: T201
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
