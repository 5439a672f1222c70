"""
Collaborator interfaces (abstractions).
Using Protocol for structural subtyping (duck typing with type hints).
These define the contracts that adapters for external services must follow.
"""
from typing import List, Protocol, runtime_checkable

from moviemood.models.schemas import AuthenticatedUser, MovieRecord, SearchHistoryEntry


@runtime_checkable
class TextGenerator(Protocol):
    """
    Interface for the hosted text-generation service.
    Production: Gemini via google-genai.
    Testing: canned-reply fake.
    """

    async def generate(self, prompt: str) -> str:
        """
        Send a prompt and return the reply text.

        Args:
            prompt: Instruction text

        Returns:
            Reply text as produced by the service SDK

        Raises:
            Any SDK or transport error; callers wrap these.
        """
        ...


@runtime_checkable
class IdentityVerifier(Protocol):
    """
    Interface for identity-token verification.
    Production: Firebase Auth ID tokens.
    """

    async def verify(self, token: str) -> AuthenticatedUser:
        """
        Verify a bearer token.

        Args:
            token: Raw identity token

        Returns:
            The authenticated user

        Raises:
            InvalidTokenError: If the token is rejected for any reason
        """
        ...


@runtime_checkable
class SearchHistoryRepository(Protocol):
    """
    Interface for search history persistence.
    Production: Firestore.
    Testing: In-memory implementation.
    """

    async def append(
        self,
        user_id: str,
        mood: str,
        movies: List[MovieRecord],
    ) -> SearchHistoryEntry:
        """
        Store one search.

        Raises:
            PersistenceError: If the store rejects the write
        """
        ...

    async def query_recent(self, user_id: str, limit: int = 10) -> List[SearchHistoryEntry]:
        """
        Fetch a user's most recent searches, newest first.

        Raises:
            PersistenceError: If the store cannot be read
        """
        ...
