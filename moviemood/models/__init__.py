"""Models package - domain entities and interfaces."""
from .interfaces import (
    IdentityVerifier,
    SearchHistoryRepository,
    TextGenerator,
)
from .schemas import (
    ANONYMOUS,
    AnonymousUser,
    AuthenticatedUser,
    Identity,
    MoodQuery,
    MovieRecord,
    RecommendationRequest,
    SearchHistoryEntry,
    SearchHistoryItem,
)

__all__ = [
    # Interfaces
    "IdentityVerifier",
    "SearchHistoryRepository",
    "TextGenerator",
    # Schemas
    "ANONYMOUS",
    "AnonymousUser",
    "AuthenticatedUser",
    "Identity",
    "MoodQuery",
    "MovieRecord",
    "RecommendationRequest",
    "SearchHistoryEntry",
    "SearchHistoryItem",
]
