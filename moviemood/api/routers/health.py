"""
Health check router for observability.
"""
from fastapi import APIRouter

from moviemood.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health Check")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/ready", summary="Readiness Check")
async def readiness_check() -> dict:
    """
    Readiness check for Kubernetes.
    Reports collaborator configuration without calling them.
    """
    settings = get_settings()

    return {
        "status": "ready" if settings.GEMINI_API_KEY else "degraded",
        "generation": {
            "configured": bool(settings.GEMINI_API_KEY),
            "model": settings.GEMINI_MODEL,
        },
        "identity_provider": settings.IDENTITY_PROVIDER,
        "history_backend": settings.HISTORY_BACKEND,
        "feature_flags": {
            "personalization_enabled": settings.PERSONALIZATION_ENABLED,
        },
    }
