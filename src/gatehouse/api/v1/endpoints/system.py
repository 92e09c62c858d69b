# src/gatehouse/api/v1/endpoints/system.py
"""Liveness and public configuration endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from gatehouse.api.v1.dependencies import ServicesDep

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check(services: ServicesDep) -> dict[str, object]:
    """Health check endpoint to verify the service is running."""
    settings = services.settings
    return {
        "status": "ok",
        "name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@router.get("/system/config")
async def get_public_config(services: ServicesDep) -> dict[str, object]:
    """Return a sanitized snapshot of the gating configuration.

    Excludes secrets and connection strings.
    """
    return {
        "providers": services.session_provider.providers(),
        "rate_limits": {
            name: {"window_ms": limiter.window_ms, "max_requests": limiter.max_requests}
            for name, limiter in services.rate_limiters.items()
        },
        "csrf_token_ttl_seconds": services.csrf_tokens.ttl_seconds,
        "session_max_age_seconds": services.session_provider.max_age_seconds,
    }
