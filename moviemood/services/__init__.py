"""Services package - business logic layer."""
from .generation import GeminiTextGenerator
from .history import SearchHistoryService
from .identity import (
    DisabledIdentityVerifier,
    FirebaseIdentityVerifier,
    extract_bearer_token,
    resolve_identity,
)
from .normalizer import ResponseNormalizer, normalize, strip_code_fences
from .recommendations import RecommendationService, build_mood_query
from .requester import RecommendationRequester, build_prompt

__all__ = [
    "DisabledIdentityVerifier",
    "FirebaseIdentityVerifier",
    "GeminiTextGenerator",
    "RecommendationRequester",
    "RecommendationService",
    "build_mood_query",
    "ResponseNormalizer",
    "SearchHistoryService",
    "build_prompt",
    "extract_bearer_token",
    "normalize",
    "resolve_identity",
    "strip_code_fences",
]
