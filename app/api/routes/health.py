from __future__ import annotations

import time
from typing import Any

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.db.session import SessionLocal

router = APIRouter(tags=["health"])
logger = structlog.get_logger(__name__)

DATABASE_UNAVAILABLE = "database_unavailable"


async def _check_database() -> dict[str, Any]:
    started = time.perf_counter()
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        # driver errors may carry the DSN
        logger.warning("health_database_check_failed", error_type=type(exc).__name__)
        return {"status": "failed", "error": DATABASE_UNAVAILABLE}
    return {"status": "ok", "latency_ms": round((time.perf_counter() - started) * 1000, 2)}


async def _probe(*, passing: str, failing: str) -> JSONResponse:
    checks = {"database": await _check_database()}
    passed = all(check["status"] == "ok" for check in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if passed else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": passing if passed else failing, "checks": checks},
    )


@router.get("/health")
async def health() -> JSONResponse:
    return await _probe(passing="ok", failing="degraded")


@router.get("/ready")
async def ready() -> JSONResponse:
    return await _probe(passing="ready", failing="not_ready")


@router.get("/live")
async def live() -> dict[str, str]:
    return {"status": "live"}
