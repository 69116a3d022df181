"""FastAPI application factory for the contact API.

This module wires settings, logging, storage and the contact service into a
FastAPI application. Collaborators are built per application and kept on
``app.state``.
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from contactme.api import responses
from contactme.api.contact import get_client_ip, masked_ip, router as contact_router
from contactme.api.rate_limit import SubmissionRateLimiter
from contactme.api.service import ContactService, ContactValidationError
from contactme.api.storage import StorageBackend, create_storage
from contactme.config.settings import Settings, SettingsLoader
from contactme.logging_config import configure_logging
from contactme.version import __version__

logger = logging.getLogger(__name__)

_STARTED_AT = time.monotonic()


def _format_request_errors(exc: RequestValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return messages


def create_app(settings: Settings | None = None, storage: StorageBackend | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Service settings (loaded from the working directory when None)
        storage: Storage backend (built from settings when None)

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or SettingsLoader().load()
    configure_logging(settings.logging)
    storage = storage or create_storage(settings.storage)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting contactme API server")
        logger.info("Version: %s (%s)", __version__, settings.server.environment)

        yield

        close = getattr(storage, "close", None)
        if callable(close):
            close()
        logger.info("Shutting down contactme API server")

    app = FastAPI(
        title="contactme API",
        description="""
        Contact form submission API

        ## Features

        - **Contact Form**: Submit contact messages; input is sanitized and validated
        - **Spam Check**: Every submission is scored for spam (informational)
        - **Administration**: List, read, update status, delete and count contacts
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.contact_service = ContactService(storage)
    if settings.rate_limit.enabled:
        app.state.rate_limiter = SubmissionRateLimiter(
            max_requests=settings.rate_limit.max_requests,
            window_seconds=settings.rate_limit.window_seconds,
        )
    else:
        app.state.rate_limiter = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %d %.1fms - %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            masked_ip(get_client_ip(request)),
        )
        return response

    app.include_router(contact_router)

    @app.exception_handler(ContactValidationError)
    async def contact_validation_handler(request: Request, exc: ContactValidationError) -> JSONResponse:
        data = {"spamCheck": exc.spam_check.to_dict()} if exc.spam_check else None
        return responses.validation_error(exc.errors, data=data)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return responses.validation_error(_format_request_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            message = f"Route {request.url.path} not found"
        else:
            message = str(exc.detail)
        response = responses.error(message, status_code=exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unexpected error handling %s %s", request.method, request.url.path, exc_info=exc)
        message = "Internal server error" if settings.server.is_production else str(exc)
        return responses.error(message)

    @app.get("/", summary="API Root", tags=["root"])
    async def root() -> JSONResponse:
        return responses.success(
            {
                "name": "contactme API",
                "version": __version__,
                "environment": settings.server.environment,
                "endpoints": {
                    "health": "/health",
                    "database": "/health/db",
                    "contact": "/api/v1/contact",
                    "docs": "/docs",
                },
            },
            "API is running successfully",
        )

    @app.get("/health", summary="Health Check", tags=["health"])
    async def health_check() -> JSONResponse:
        return responses.success(
            {
                "status": "OK",
                "version": __version__,
                "uptime": round(time.monotonic() - _STARTED_AT, 3),
                "pid": os.getpid(),
            },
            "Server is healthy",
        )

    @app.get("/health/db", summary="Storage Health Check", tags=["health"])
    async def storage_health_check() -> JSONResponse:
        health = await storage.health()
        if health.get("status") == "healthy":
            return responses.success(health, "Database is healthy")
        return responses.error(
            "Database is unhealthy",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            data=health,
        )

    return app


def main() -> None:
    """Main entry point for running the API server via CLI.

    This function is used by the contactme-api command.
    """
    import uvicorn

    settings = SettingsLoader(Path.cwd()).load()
    uvicorn.run(
        "contactme.api.app:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
