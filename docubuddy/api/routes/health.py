"""
Health Check Endpoints - Application health and status monitoring.
"""

import logging
import sqlite3

from fastapi import APIRouter, Depends
from datetime import datetime

from docubuddy.core.config import get_settings, Settings
from docubuddy.core.dependencies import get_store
from docubuddy.models.responses import HealthResponse
from docubuddy.services.store import Store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check if the API is running and healthy"
)
async def health_check(
    settings: Settings = Depends(get_settings)
) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        HealthResponse with status and version info
    """
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
        timestamp=datetime.utcnow()
    )


@router.get(
    "/ready",
    summary="Readiness Check",
    description="Check if the API is ready to accept requests"
)
async def readiness_check(
    settings: Settings = Depends(get_settings),
    store: Store = Depends(get_store)
) -> dict:
    """
    Readiness check for Kubernetes/container orchestration.

    Verifies that the database answers and an LLM key is configured.
    """
    checks = {
        "api": True,
        "config_loaded": settings is not None,
    }

    try:
        store.list_repositories(limit=1)
        checks["database"] = True
    except sqlite3.Error as e:
        logger.error(f"Database check failed: {e}")
        checks["database"] = False

    # Generation endpoints need an OpenAI API key
    checks["llm_configured"] = bool(settings.openai_api_key)

    all_ready = all(checks.values())

    return {
        "ready": all_ready,
        "checks": checks,
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get(
    "/live",
    summary="Liveness Check",
    description="Simple liveness probe"
)
async def liveness_check() -> dict:
    """
    Liveness check for Kubernetes.

    Just returns OK if the server is running.
    """
    return {"status": "alive"}
