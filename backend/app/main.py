from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import (
    admin,
    ai,
    audit,
    auth,
    clients,
    emergency,
    entries,
    health,
    public,
    reports,
    safety_link,
    shifts,
)
from app.core.config import settings
from app.core.errors import ServiceError
from app.core.logging_setup import logger
from app.db.session import init_db


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncGenerator[None, None]:
    init_db()
    yield


def _normalize_origin(value: str | None) -> str | None:
    if not value:
        return None
    cleaned = value.strip().rstrip("/")
    return cleaned or None


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.kind)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "error": "internal_error"},
    )


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.project_name,
        debug=settings.debug,
        lifespan=lifespan,
    )

    public_front_base = settings.resolved_public_app_url()
    raw_origins = settings.allowed_origins + ([public_front_base] if public_front_base else [])
    origins: list[str] = []
    for item in raw_origins:
        normalized = _normalize_origin(item)
        if normalized and normalized not in origins:
            origins.append(normalized)

    logger.info("CORS origins: %s", origins)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Page-Count"],
    )

    application.add_exception_handler(ServiceError, service_error_handler)
    application.add_exception_handler(Exception, unhandled_error_handler)

    application.include_router(health.router, prefix="/health")
    application.include_router(auth.router, prefix=settings.api_v1_str)
    application.include_router(clients.router, prefix=settings.api_v1_str)
    application.include_router(shifts.router, prefix=settings.api_v1_str)
    application.include_router(entries.router, prefix=settings.api_v1_str)
    application.include_router(ai.router, prefix=settings.api_v1_str)
    application.include_router(reports.router, prefix=settings.api_v1_str)
    application.include_router(safety_link.router, prefix=settings.api_v1_str)
    application.include_router(emergency.router, prefix=settings.api_v1_str)
    application.include_router(admin.router, prefix=settings.api_v1_str)
    application.include_router(audit.router, prefix=settings.api_v1_str)
    application.include_router(public.router, prefix="")

    @application.get("/")
    def root() -> dict[str, str]:
        return {"service": settings.project_name}

    logger.info("%s initialised", settings.project_name)
    return application


app = create_app()
