"""
Recommendation service - main business logic orchestrator.
Coordinates mood validation, the requester, the normalizer and history.
History writes are best-effort: a failed write never fails the request.
"""
import logging
import time
from typing import List, Optional

from moviemood.core.exceptions import (
    MalformedResponseError,
    NormalizationError,
    UpstreamServiceError,
    ValidationError,
)
from moviemood.core.telemetry import record_outcome
from moviemood.models.schemas import AuthenticatedUser, Identity, MoodQuery, MovieRecord
from moviemood.services.history import SearchHistoryService
from moviemood.services.normalizer import ResponseNormalizer
from moviemood.services.requester import RecommendationRequester

logger = logging.getLogger(__name__)


def build_mood_query(
        mood: Optional[str],
        personalized: Optional[bool],
        identity: Identity,
        personalization_enabled: bool = True,
        mood_max_length: int = 500,
) -> MoodQuery:
    """
    Validate raw request input into a MoodQuery.

    Without an explicit flag, signed-in callers get personalized framing.

    Raises:
        ValidationError: Mood empty or too long
    """
    cleaned = (mood or "").strip()
    if not cleaned:
        raise ValidationError("Empty mood")
    if len(cleaned) > mood_max_length:
        raise ValidationError(
            "Mood too long",
            details={"max_length": mood_max_length},
        )

    user_id = identity.uid if isinstance(identity, AuthenticatedUser) else None
    effective = personalized if personalized is not None else user_id is not None

    return MoodQuery(
        mood=cleaned,
        personalized=effective and personalization_enabled,
        user_id=user_id,
    )


class RecommendationService:
    """
    Orchestrates one recommendation request.

    Responsibilities:
    - Validate the mood at the boundary
    - Ask the model and normalize its reply
    - Record history for signed-in users
    """

    def __init__(
            self,
            requester: RecommendationRequester,
            normalizer: ResponseNormalizer,
            history: SearchHistoryService,
            personalization_enabled: bool = True,
            mood_max_length: int = 500,
    ) -> None:
        """
        Initialize recommendation service with dependencies.

        Args:
            requester: Asks the generation service
            normalizer: Validates model replies
            history: Search history policy
            personalization_enabled: Global personalization switch
            mood_max_length: Longest accepted mood after trimming
        """
        self._requester = requester
        self._normalizer = normalizer
        self._history = history
        self._personalization_enabled = personalization_enabled
        self._mood_max_length = mood_max_length

    def build_query(
            self,
            mood: Optional[str],
            personalized: Optional[bool],
            identity: Identity,
    ) -> MoodQuery:
        """Validate raw request input with this service's limits."""
        return build_mood_query(
            mood,
            personalized,
            identity,
            personalization_enabled=self._personalization_enabled,
            mood_max_length=self._mood_max_length,
        )

    async def recommend(self, query: MoodQuery) -> List[MovieRecord]:
        """
        Get normalized recommendations for a validated query.

        Raises:
            UpstreamServiceError: Generation call failed
            NormalizationError: Reply could not be normalized
        """
        start_time = time.time()
        try:
            raw = await self._requester.request_recommendations(query.mood, query.personalized)
        except UpstreamServiceError as e:
            record_outcome(e.error_code)
            raise

        try:
            movies = self._normalizer.normalize(raw)
        except MalformedResponseError as e:
            record_outcome(e.error_code)
            logger.error(f"JSON parse error: {e.reason}")
            logger.error(f"Response text: {e.cleaned_text}")
            raise
        except NormalizationError as e:
            record_outcome(e.error_code)
            logger.error(f"Model reply rejected: {type(e).__name__}")
            raise

        record_outcome("success")

        if query.user_id is not None:
            await self._history.record(query.user_id, query.mood, movies)

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Recommendations served: movies={len(movies)}, "
            f"authenticated={query.user_id is not None}, elapsed_ms={elapsed_ms:.2f}"
        )
        return movies
