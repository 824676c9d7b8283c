"""
FastAPI application for TubeBrief.

This module:
- Initializes FastAPI with lifespan management
- Configures CORS for the web app and the companion client
- Sets up Logfire observability
- Translates errors into {"error": message} bodies
- Provides health check endpoints
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from tubebrief import __version__
from tubebrief.api.routes import brief_router, briefs_router, shared_router, tags_router
from tubebrief.config import get_settings
from tubebrief.database import check_db_connection, close_db, get_db_info
from tubebrief.observability import initialize_logfire
from tubebrief.services.exceptions import BriefServiceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    settings = get_settings()
    logger.info(
        f"Starting TubeBrief API (environment={settings.environment}, "
        f"jobs={settings.jobs.backend})"
    )

    db_info = get_db_info()
    if await check_db_connection():
        logger.info(f"Database connection successful: {db_info['url']}")
    else:
        logger.error(f"Database connection failed: {db_info['url']}")

    if not settings.allowed_email_set:
        logger.warning("ALLOWED_EMAILS is empty - nobody can generate briefs")

    yield

    logger.info("Shutting down TubeBrief API")
    await close_db()


def _error_response(status_code: int, message: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="TubeBrief API",
        description="AI-generated briefs for YouTube videos",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(BriefServiceError)
    async def brief_service_error_handler(request: Request, exc: BriefServiceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _error_response(400, message)

    @app.get("/health", tags=["Health"])
    async def health_check() -> Dict[str, str]:
        """Health check endpoint for load balancers and monitoring."""
        db_connected = await check_db_connection()
        return {
            "status": "healthy" if db_connected else "degraded",
            "service": "tubebrief-api",
            "version": __version__,
            "database": "connected" if db_connected else "disconnected",
            "environment": settings.environment,
        }

    @app.get("/", tags=["Root"])
    async def root() -> Dict[str, str]:
        """Root endpoint - API information."""
        return {
            "name": "TubeBrief API",
            "version": __version__,
            "description": "AI-generated briefs for YouTube videos",
            "docs": "/docs",
            "health": "/health",
        }

    app.include_router(briefs_router)
    app.include_router(brief_router)
    app.include_router(tags_router)
    app.include_router(shared_router)

    initialize_logfire(settings, app)
    return app
