"""
Response normalizer.
Turns the model's free-text reply into a validated, ordered list of
MovieRecord, or raises one of the NormalizationError kinds.
"""
import json
import logging
import re
from typing import Any, List, Optional

from moviemood.core.exceptions import (
    EmptyResultError,
    MalformedResponseError,
    UnexpectedShapeError,
)
from moviemood.core.telemetry import DROPPED_MOVIE_RECORDS
from moviemood.models.schemas import MovieRecord

logger = logging.getLogger(__name__)

# Triple backticks plus an optional attached language hint (```json, ```JSON5).
_FENCE_RE = re.compile(r"```(?:[A-Za-z][\w+.-]*)?")

DEFAULT_GENRE = "Drama"
REQUIRED_FIELDS = ("title", "year", "reason")


def strip_code_fences(raw: str) -> str:
    """Remove markdown fence markers anywhere in the text, then trim."""
    return _FENCE_RE.sub("", raw).strip()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def coerce_text(value: Any) -> str:
    """Render a JSON value as trimmed text."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def present_text(value: Any) -> Optional[str]:
    """
    Return the coerced text of a field, or None when the field counts as
    absent: missing, null, false, zero, an empty array or object, or blank
    after trimming.
    """
    if value is None or value is False:
        return None
    if isinstance(value, (list, dict)) and not value:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0:
        return None
    text = coerce_text(value)
    return text or None


class ResponseNormalizer:
    """
    Stateless normalizer for model replies.

    Usage:
        movies = ResponseNormalizer().normalize(raw_reply)
    """

    def __init__(self, default_genre: str = DEFAULT_GENRE) -> None:
        self._default_genre = default_genre

    def normalize(self, raw: str) -> List[MovieRecord]:
        """
        Normalize a raw model reply.

        Args:
            raw: Reply text exactly as returned by the generation service

        Returns:
            Non-empty list of MovieRecord in the model's emission order

        Raises:
            MalformedResponseError: Cleaned text is not valid JSON
            UnexpectedShapeError: JSON value is not an array
            EmptyResultError: No element passed validation
        """
        cleaned = strip_code_fences(raw or "")

        try:
            parsed = json.loads(cleaned, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as e:
            raise MalformedResponseError(cleaned_text=cleaned, reason=str(e)) from e

        if not isinstance(parsed, list):
            raise UnexpectedShapeError(actual_type=type(parsed).__name__)

        movies: List[MovieRecord] = []
        for index, element in enumerate(parsed):
            movie = self._to_record(element)
            if movie is None:
                DROPPED_MOVIE_RECORDS.inc()
                logger.warning(f"Movie {index} missing required fields, dropped")
                continue
            movies.append(movie)

        if not movies:
            raise EmptyResultError(dropped_count=len(parsed))

        return movies

    def _to_record(self, element: Any) -> Optional[MovieRecord]:
        """Build a MovieRecord from one array element, None if invalid."""
        if not isinstance(element, dict):
            return None

        required = {name: present_text(element.get(name)) for name in REQUIRED_FIELDS}
        if not all(required.values()):
            return None

        rating = present_text(element.get("rating"))
        if rating == "null":
            rating = None

        return MovieRecord(
            title=required["title"],
            year=required["year"],
            genre=present_text(element.get("genre")) or self._default_genre,
            rating=rating,
            reason=required["reason"],
        )


def normalize(raw: str) -> List[MovieRecord]:
    """Normalize with default settings."""
    return ResponseNormalizer().normalize(raw)
