"""Application entry point and FastAPI app factory."""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Any

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .config.settings import settings
from .controllers import admin, auth, donations, food_items, reports, schools, users
from .database import dispose_engine, init_models
from .errors import FeedNetError, PartialDeletion
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware
from .services import NeedResetScheduler

logger = logging.getLogger("app.main")


def _logging_config() -> dict[str, Any]:
    """Root logs go to stdout and the app log; donation flows also to an audit log."""

    line = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    for path_value in (settings.log_file, settings.donation_log_file):
        Path(path_value).parent.mkdir(parents=True, exist_ok=True)

    audit_loggers = (
        "app.services.need_tracker",
        "app.services.donation_recorder",
        "app.services.scheduler",
    )
    quiet_loggers = ("httpx", "httpcore", "aiosqlite", "sqlalchemy.engine")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "line": {"format": line},
            "bare": {"format": "%(message)s"},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "line",
            },
            "requests": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "bare",
            },
            "app_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": settings.log_file,
                "maxBytes": 1_000_000,
                "backupCount": 5,
                "encoding": "utf-8",
                "formatter": "line",
            },
            "donation_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": settings.donation_log_file,
                "maxBytes": 500_000,
                "backupCount": 5,
                "encoding": "utf-8",
                "formatter": "line",
            },
        },
        "root": {
            "handlers": ["stdout", "app_file"],
            "level": "DEBUG" if settings.debug else "INFO",
        },
        "loggers": {
            # Coloured one-line request summaries, kept out of the app log.
            "app.middleware.structured": {
                "handlers": ["requests"],
                "level": "INFO",
                "propagate": False,
            },
            **{
                name: {"handlers": ["donation_file"], "level": "INFO"}
                for name in audit_loggers
            },
            **{name: {"level": "WARNING"} for name in quiet_loggers},
        },
    }


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    logging.config.dictConfig(_logging_config())

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="FeedNet food donation tracking API",
    )

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(schools.router)
    app.include_router(food_items.router)
    app.include_router(donations.router)
    app.include_router(reports.router)
    app.include_router(admin.router)

    scheduler = NeedResetScheduler()

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Root endpoint."""

        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "status": "operational",
        }

    @app.get("/health", include_in_schema=False)
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""

        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(PartialDeletion)
    async def partial_deletion_handler(request: Request, exc: PartialDeletion):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "result": exc.result.to_dict()},
        )

    @app.exception_handler(FeedNetError)
    async def domain_exception_handler(request: Request, exc: FeedNetError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    @app.on_event("startup")
    async def startup_event() -> None:
        await init_models()
        if settings.need_tracker.reset_enabled:
            await scheduler.start()

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        await scheduler.stop()
        await dispose_engine()

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
