"""Builds the FastAPI application every service runs on."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.exc import IntegrityError

from .config import get_settings
from .database import Base, engine
from .logging_middleware import add_audit_middleware
from .rate_limit import apply_rate_limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if get_settings().run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": "Conflicting record"})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_service_app(title: str, service_name: str) -> FastAPI:
    settings = get_settings()
    fastapi_app = FastAPI(title=title, version="0.3.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    add_audit_middleware(fastapi_app, service_name)
    fastapi_app.add_exception_handler(IntegrityError, integrity_error_handler)
    fastapi_app.add_exception_handler(Exception, unhandled_error_handler)
    if settings.metrics_enabled:
        Instrumentator().instrument(fastapi_app).expose(fastapi_app)

    @fastapi_app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "service": service_name}

    return fastapi_app
