"""FastAPI application factory.

The api layer:
- Validates inputs, reads/writes config documents
- Calls the workflow source and the projection/templating/aggregation layers
- Maps service errors to HTTP responses
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Generator

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from skyvern_manager.config import Settings, load_settings
from skyvern_manager.db.repo import DbSession
from skyvern_manager.db.session import get_session
from skyvern_manager.errors import ConfigValidationError, InternalError, UpstreamError
from skyvern_manager.providers.base import WorkflowSource
from skyvern_manager.providers.skyvern import SkyvernClient

logger = logging.getLogger(__name__)


def get_settings() -> Settings:
    """Dependency to get service settings from the environment."""
    return load_settings()


def get_db_session(
    settings: Settings = Depends(get_settings),
) -> Generator[DbSession, None, None]:
    """Dependency to get database session.

    Yields:
        Database session that is automatically closed after request.
    """
    session = get_session(settings.db_path)
    try:
        yield session
    finally:
        session.close()


async def get_workflow_source(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[WorkflowSource, None]:
    """Dependency to get a Skyvern API client, closed after the request.

    Raises:
        InternalError: If no API key is configured.
    """
    if not settings.skyvern_api_key:
        raise InternalError("SKYVERN_API_KEY not configured")
    async with SkyvernClient(settings, newest_first=True) as client:
        yield client


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConfigValidationError)
    async def config_validation_error(request: Request, exc: ConfigValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(UpstreamError)
    async def upstream_error(request: Request, exc: UpstreamError):
        logger.error(f"Skyvern API error: {exc} (status={exc.status_code})")
        return JSONResponse(
            status_code=502,
            content={
                "error": "Skyvern API error",
                "status": exc.status_code,
                "detail": exc.detail,
            },
        )

    @app.exception_handler(InternalError)
    async def internal_error(request: Request, exc: InternalError):
        return JSONResponse(status_code=500, content={"error": str(exc)})


def create_app() -> FastAPI:
    """Create FastAPI application.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="Skyvern Manager API",
        description="Workflow docs and run analytics for Skyvern",
        version="0.1.0",
    )

    # Add CORS middleware for UI access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",  # Next.js dev server
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # Include routes
    from skyvern_manager.api.routes import (
        config,
        export,
        run_analytics,
        workflow_runs,
        workflows,
    )

    app.include_router(config.router, prefix="/api")
    app.include_router(workflows.router, prefix="/api")
    app.include_router(export.router, prefix="/api")
    app.include_router(workflow_runs.router, prefix="/api")
    app.include_router(run_analytics.router, prefix="/api")

    # Health check endpoint
    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


# Default app instance
app = create_app()
