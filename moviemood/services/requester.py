"""
Recommendation requester.
Builds the instruction for a mood and asks the text-generation service.
The reply is returned untouched; cleaning it is the normalizer's job.
"""
import logging
import time

from moviemood.core.exceptions import UpstreamServiceError
from moviemood.models.interfaces import TextGenerator

logger = logging.getLogger(__name__)

PERSONALIZED_CLAUSE = (
    " The user is a returning viewer who appreciates thoughtful recommendations."
)


def build_prompt(
    mood: str,
    personalized: bool = False,
    min_count: int = 3,
    max_count: int = 5,
) -> str:
    """Build the recommendation instruction for a mood."""
    prompt = (
        f'Suggest {min_count}-{max_count} movies for someone who feels "{mood}". '
        "For each movie, provide:\n"
        "- title: The movie title\n"
        "- year: Release year\n"
        "- genre: Primary genre (e.g., Drama, Comedy, Action, etc.)\n"
        '- rating: IMDb rating if known (e.g., "8.1") or null if unknown\n'
        "- reason: A detailed explanation (2-3 sentences) of why this movie matches "
        "their mood and what makes it perfect for this emotional state.\n"
        "\n"
        "Return as JSON array with exactly these fields: title, year, genre, rating, reason.\n"
        "Focus on well-known, critically acclaimed movies that genuinely match "
        "the emotional state."
    )
    if personalized:
        prompt += PERSONALIZED_CLAUSE
    return prompt


class RecommendationRequester:
    """
    Asks the generation service for movie recommendations.

    One outbound call per request, no retries.
    """

    def __init__(
        self,
        generator: TextGenerator,
        min_count: int = 3,
        max_count: int = 5,
    ) -> None:
        """
        Initialize requester.

        Args:
            generator: Text-generation client
            min_count: Lower bound of movies to ask for
            max_count: Upper bound of movies to ask for
        """
        if min_count < 1 or max_count < min_count:
            raise ValueError(f"Invalid recommendation range: {min_count}-{max_count}")
        self._generator = generator
        self._min_count = min_count
        self._max_count = max_count

    async def request_recommendations(self, mood: str, personalized: bool = False) -> str:
        """
        Ask the generation service for recommendations.

        Args:
            mood: Validated, non-empty mood text
            personalized: Add returning-viewer framing

        Returns:
            Raw reply text

        Raises:
            UpstreamServiceError: If the generation call fails for any reason
        """
        prompt = build_prompt(mood, personalized, self._min_count, self._max_count)
        start_time = time.time()

        try:
            reply = await self._generator.generate(prompt)
        except UpstreamServiceError:
            raise
        except Exception as e:
            logger.error(f"Generation call failed: {type(e).__name__}: {e}")
            raise UpstreamServiceError(reason=str(e)) from e

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Generation reply received: chars={len(reply)}, "
            f"personalized={personalized}, elapsed_ms={elapsed_ms:.2f}"
        )
        return reply
