# src/plantspace/main.py
"""Main entry point for the PlantSpace application."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from plantspace.api.v1 import (
    auth_router,
    comments_router,
    messages_router,
    moderation_router,
    onboarding_router,
    posts_router,
    relay_router,
    users_router,
    verification_router,
)
from plantspace.core.errors import InternalError, PlantSpaceError
from plantspace.core.log_config import configure_logging
from plantspace.core.settings import settings
from plantspace.db.session import create_tables
from plantspace.db.time import utcnow
from plantspace.services.relay import RelayHub

configure_logging()
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Social network API for farmers and plant enthusiasts",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(auth_router, prefix="/api")
app.include_router(posts_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(messages_router, prefix="/api")
app.include_router(comments_router, prefix="/api")
app.include_router(moderation_router, prefix="/api")
app.include_router(verification_router, prefix="/api")
app.include_router(onboarding_router, prefix="/api")
app.include_router(relay_router, prefix="/api")


@app.exception_handler(PlantSpaceError)
async def plantspace_error_handler(request: Request, exc: PlantSpaceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_payload(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body and query validation failures as 400 with every message listed."""
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        errors.append(f"{location}: {message}" if location else message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "code": "VALIDATION_ERROR", "errors": errors},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.on_event("startup")
async def on_startup() -> None:
    create_tables()
    hub = RelayHub()
    await hub.start()
    app.state.relay = hub
    logger.info("%s %s started (%s)", settings.app_name, settings.app_version, settings.environment)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    hub: RelayHub | None = getattr(app.state, "relay", None)
    if hub:
        await hub.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "OK", "timestamp": utcnow().isoformat()}


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Social network API for farmers and plant enthusiasts",
        "docs": "/docs",
        "relay": "/api/relay",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("plantspace.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
