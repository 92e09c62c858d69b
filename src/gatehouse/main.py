# src/gatehouse/main.py
"""Main entry point for the Gatehouse application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gatehouse.api.v1 import api_v1
from gatehouse.core.settings import Settings, settings
from gatehouse.services.maintenance import MaintenanceWorker
from gatehouse.services.registry import build_services

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    worker = MaintenanceWorker(app.state.services)
    await worker.start()
    app.state.maintenance_worker = worker
    logger.info("Maintenance worker started")
    try:
        yield
    finally:
        await worker.stop()
        logger.info("Maintenance worker stopped")


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build an application with its own rate-limit, CSRF and session state."""
    app_settings = app_settings or settings

    app = FastAPI(
        title="Gatehouse API",
        description="Request gating for the blog and contact API",
        version=app_settings.app_version,
        debug=app_settings.debug,
        lifespan=lifespan,
    )
    app.state.services = build_services(app_settings)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=app_settings.cors_allow_credentials,
        allow_methods=app_settings.cors_allow_methods,
        allow_headers=app_settings.cors_allow_headers,
    )

    app.include_router(api_v1, prefix="/api/v1")

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with basic information about the API."""
        return {
            "name": app_settings.app_name,
            "version": app_settings.app_version,
            "docs": "/docs",
            "redoc": "/redoc",
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
    uvicorn.run("gatehouse.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
