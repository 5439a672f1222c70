"""
Dependency injection container.
Creates and wires all application components.
Uses FastAPI's dependency injection system.
"""
import logging
from functools import lru_cache
from typing import Optional

import firebase_admin
from fastapi import Depends, Header
from firebase_admin import credentials

from moviemood.config import get_settings
from moviemood.core.exceptions import AuthenticationError, UpstreamServiceError
from moviemood.models.interfaces import (
    IdentityVerifier,
    SearchHistoryRepository,
    TextGenerator,
)
from moviemood.models.schemas import (
    AuthenticatedUser,
    Identity,
    MoodQuery,
    RecommendationRequest,
)
from moviemood.repositories.firestore import FirestoreSearchHistoryRepository
from moviemood.repositories.memory import InMemorySearchHistoryRepository
from moviemood.services.generation import GeminiTextGenerator
from moviemood.services.history import SearchHistoryService
from moviemood.services.identity import (
    DisabledIdentityVerifier,
    FirebaseIdentityVerifier,
    extract_bearer_token,
    resolve_identity,
)
from moviemood.services.normalizer import ResponseNormalizer
from moviemood.services.recommendations import RecommendationService, build_mood_query
from moviemood.services.requester import RecommendationRequester

logger = logging.getLogger(__name__)


# =============================================================================
# Singleton Instances (Application Lifetime)
# =============================================================================


@lru_cache()
def get_firebase_app() -> firebase_admin.App:
    """Get singleton Firebase app (credentials file or application default)."""
    settings = get_settings()
    try:
        return firebase_admin.get_app(settings.APP_NAME)
    except ValueError:
        pass  # Not initialized yet

    credential = None
    if settings.FIREBASE_CREDENTIALS_PATH:
        credential = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
    options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
    return firebase_admin.initialize_app(credential, options, name=settings.APP_NAME)


@lru_cache()
def get_text_generator() -> TextGenerator:
    """Get singleton Gemini client."""
    settings = get_settings()
    if not settings.GEMINI_API_KEY:
        logger.error("Gemini API key not configured. Set GEMINI_API_KEY.")
        raise UpstreamServiceError(reason="Gemini API key not configured")
    return GeminiTextGenerator.from_api_key(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        timeout_ms=settings.GEMINI_TIMEOUT_MS,
    )


@lru_cache()
def get_identity_verifier() -> IdentityVerifier:
    """Get singleton identity verifier for the configured provider."""
    settings = get_settings()
    if settings.IDENTITY_PROVIDER == "firebase":
        return FirebaseIdentityVerifier(app=get_firebase_app())
    if settings.IDENTITY_PROVIDER != "none":
        logger.warning(f"Unknown identity provider '{settings.IDENTITY_PROVIDER}', disabling auth")
    return DisabledIdentityVerifier()


@lru_cache()
def get_history_repository() -> SearchHistoryRepository:
    """Get singleton search history repository for the configured backend."""
    settings = get_settings()
    if settings.HISTORY_BACKEND == "firestore":
        return FirestoreSearchHistoryRepository.from_app(
            app=get_firebase_app(),
            collection=settings.FIRESTORE_COLLECTION,
        )
    if settings.HISTORY_BACKEND != "memory":
        logger.warning(f"Unknown history backend '{settings.HISTORY_BACKEND}', using memory")
    return InMemorySearchHistoryRepository()


@lru_cache()
def get_response_normalizer() -> ResponseNormalizer:
    """Get singleton response normalizer."""
    return ResponseNormalizer()


# =============================================================================
# Request-Scoped Dependencies (Per-Request Lifetime)
# =============================================================================


def get_search_history_service(
    repository: SearchHistoryRepository = Depends(get_history_repository),
) -> SearchHistoryService:
    """Get search history service over the configured store."""
    return SearchHistoryService(repository=repository, limit=get_settings().HISTORY_LIMIT)


def get_recommendation_service(
    generator: TextGenerator = Depends(get_text_generator),
    normalizer: ResponseNormalizer = Depends(get_response_normalizer),
    history: SearchHistoryService = Depends(get_search_history_service),
) -> RecommendationService:
    """
    Get recommendation service with all dependencies wired.
    This is the main entry point for the recommend endpoint.
    """
    settings = get_settings()
    requester = RecommendationRequester(
        generator=generator,
        min_count=settings.MIN_RECOMMENDATIONS,
        max_count=settings.MAX_RECOMMENDATIONS,
    )
    return RecommendationService(
        requester=requester,
        normalizer=normalizer,
        history=history,
        personalization_enabled=settings.PERSONALIZATION_ENABLED,
        mood_max_length=settings.MOOD_MAX_LENGTH,
    )


async def get_identity(
    authorization: Optional[str] = Header(default=None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Identity:
    """Resolve caller identity; never fails."""
    return await resolve_identity(authorization, verifier)


async def get_mood_query(
    payload: Optional[RecommendationRequest] = None,
    identity: Identity = Depends(get_identity),
) -> MoodQuery:
    """
    Validate the recommend request body.
    Resolved before the recommendation service so a bad mood is a 400
    even when the generation client is not configured.
    """
    payload = payload or RecommendationRequest()
    settings = get_settings()
    return build_mood_query(
        payload.mood,
        payload.personalized,
        identity,
        personalization_enabled=settings.PERSONALIZATION_ENABLED,
        mood_max_length=settings.MOOD_MAX_LENGTH,
    )


async def require_authenticated_user(
    authorization: Optional[str] = Header(default=None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> AuthenticatedUser:
    """Require a verified identity token."""
    if not authorization:
        raise AuthenticationError()
    token = extract_bearer_token(authorization)
    if token is None:
        raise AuthenticationError()
    return await verifier.verify(token)


# =============================================================================
# Cleanup Functions
# =============================================================================


def clear_caches() -> None:
    """Clear all cached singleton instances (for testing)."""
    get_firebase_app.cache_clear()
    get_text_generator.cache_clear()
    get_identity_verifier.cache_clear()
    get_history_repository.cache_clear()
    get_response_normalizer.cache_clear()
