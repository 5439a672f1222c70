"""API package - FastAPI routes and dependencies."""
from .dependencies import get_recommendation_service, get_search_history_service
from .routers import health_router, recommendations_router

__all__ = [
    "get_recommendation_service",
    "get_search_history_service",
    "health_router",
    "recommendations_router",
]
