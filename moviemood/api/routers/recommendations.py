"""
Recommendations API router.
Implements POST /recommend and GET /history.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends

from moviemood.api.dependencies import (
    get_mood_query,
    get_recommendation_service,
    get_search_history_service,
    require_authenticated_user,
)
from moviemood.models.schemas import (
    AuthenticatedUser,
    MoodQuery,
    MovieRecord,
    SearchHistoryItem,
)
from moviemood.services.history import SearchHistoryService
from moviemood.services.recommendations import RecommendationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recommendations"])


@router.post(
    "/recommend",
    response_model=List[MovieRecord],
    summary="Recommend Movies For A Mood",
    description="""
    Ask the language model for 3-5 movies matching the caller's mood.

    - The reply is validated and normalized before it is returned
    - Signed-in callers get personalized framing and their search is saved
    - Invalid or missing tokens fall back to anonymous recommendations
    """,
    responses={
        200: {"description": "Normalized movie list"},
        400: {"description": "Empty or too long mood"},
        502: {"description": "Model reply could not be used"},
        503: {"description": "AI service temporarily unavailable"},
    },
)
async def recommend(
    query: MoodQuery = Depends(get_mood_query),
    service: RecommendationService = Depends(get_recommendation_service),
) -> List[MovieRecord]:
    """Recommend movies endpoint."""
    return await service.recommend(query)


@router.get(
    "/history",
    response_model=List[SearchHistoryItem],
    summary="Get Search History",
    description="Return the caller's 10 most recent searches, newest first.",
    responses={
        200: {"description": "Recent searches"},
        401: {"description": "Authentication required"},
        500: {"description": "Failed to fetch history"},
    },
)
async def history(
    user: AuthenticatedUser = Depends(require_authenticated_user),
    history_service: SearchHistoryService = Depends(get_search_history_service),
) -> List[SearchHistoryItem]:
    """Search history endpoint."""
    entries = await history_service.recent(user)
    logger.info(f"History served: entries={len(entries)}", extra={"user_id": user.uid})
    return [SearchHistoryItem.from_entry(entry) for entry in entries]
