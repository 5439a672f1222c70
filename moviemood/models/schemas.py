"""
Domain models using Pydantic.
All data structures for the recommendation system.
"""
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field


# =============================================================================
# Domain Models (Internal)
# =============================================================================


class MoodQuery(BaseModel):
    """Validated recommendation request."""

    mood: str = Field(..., min_length=1, description="Trimmed, non-empty mood text")
    personalized: bool = Field(default=False, description="Add returning-viewer framing")
    user_id: Optional[str] = Field(default=None, description="Authenticated user id")


class MovieRecord(BaseModel):
    """
    A single normalized recommendation.
    Required fields are guaranteed non-empty after normalization.
    """

    title: str = Field(..., min_length=1, description="Movie title")
    year: str = Field(..., min_length=1, description="Release year as text")
    genre: str = Field(default="Drama", description="Primary genre")
    rating: Optional[str] = Field(default=None, description="IMDb rating, null if unknown")
    reason: str = Field(..., min_length=1, description="Why the movie fits the mood")


class SearchHistoryEntry(BaseModel):
    """A persisted recommendation request. Never mutated after creation."""

    id: str = Field(..., description="Entry identifier")
    user_id: str = Field(..., description="Owner uid")
    mood: str
    movies: List[MovieRecord] = Field(default_factory=list)
    timestamp: datetime


class AuthenticatedUser(BaseModel):
    """Caller whose identity token was verified."""

    uid: str
    name: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return True


class AnonymousUser(BaseModel):
    """Caller without a (valid) identity token."""

    @property
    def is_authenticated(self) -> bool:
        return False


Identity = Union[AuthenticatedUser, AnonymousUser]

ANONYMOUS = AnonymousUser()


# =============================================================================
# API Models (External)
# =============================================================================


class RecommendationRequest(BaseModel):
    """Body of POST /recommend."""

    mood: Optional[str] = Field(default=None, description="How the user feels")
    personalized: Optional[bool] = Field(
        default=None,
        description="Override personalization; defaults to whether the caller is signed in",
    )


class SearchHistoryItem(BaseModel):
    """Single item in GET /history response."""

    id: str
    mood: str
    movies: List[MovieRecord]
    timestamp: datetime

    @classmethod
    def from_entry(cls, entry: SearchHistoryEntry) -> "SearchHistoryItem":
        return cls(
            id=entry.id,
            mood=entry.mood,
            movies=entry.movies,
            timestamp=entry.timestamp,
        )
