import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from app.api.routes.health import router as health_router
from app.api.routes.internal_points import router as internal_points_router
from app.api.routes.internal_referrals import router as internal_referrals_router
from app.api.routes.referrals import router as referrals_router
from app.api.routes.waitlist import router as waitlist_router
from app.core.config import get_settings
from app.core.logging import configure_logging

STORE_UNAVAILABLE_RETRY_AFTER_SECONDS = 5

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, app_env=settings.app_env)

    app = FastAPI(
        title="Waitlist Growth API",
        version="0.1.0",
        docs_url="/docs" if settings.enable_openapi_docs else None,
        redoc_url="/redoc" if settings.enable_openapi_docs else None,
        openapi_url="/openapi.json" if settings.enable_openapi_docs else None,
    )

    @app.exception_handler(OperationalError)
    @app.exception_handler(InterfaceError)
    async def store_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "store_unavailable",
            path=request.url.path,
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=503,
            content={"detail": {"code": "E_STORE_UNAVAILABLE"}},
            headers={"Retry-After": str(STORE_UNAVAILABLE_RETRY_AFTER_SECONDS)},
        )

    app.include_router(health_router)
    app.include_router(referrals_router)
    app.include_router(waitlist_router)
    app.include_router(internal_points_router)
    app.include_router(internal_referrals_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
