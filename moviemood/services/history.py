"""
Search history service.
Best-effort writes, capped newest-first reads.
"""
import logging
from typing import List

from moviemood.core.exceptions import PersistenceError
from moviemood.core.telemetry import HISTORY_WRITE_FAILURES
from moviemood.models.interfaces import SearchHistoryRepository
from moviemood.models.schemas import AuthenticatedUser, MovieRecord, SearchHistoryEntry

logger = logging.getLogger(__name__)


class SearchHistoryService:
    """Wraps a SearchHistoryRepository with the application's history policy."""

    def __init__(self, repository: SearchHistoryRepository, limit: int = 10) -> None:
        self._repository = repository
        self._limit = limit

    async def record(self, user_id: str, mood: str, movies: List[MovieRecord]) -> bool:
        """
        Append a history entry.

        Returns:
            True if stored. Any store failure is logged and swallowed.
        """
        try:
            await self._repository.append(user_id, mood, movies)
        except PersistenceError as e:
            HISTORY_WRITE_FAILURES.inc()
            logger.error(
                f"Error storing search: operation={e.operation}, reason={e.reason}",
                extra={"user_id": user_id},
            )
            return False
        except Exception as e:
            HISTORY_WRITE_FAILURES.inc()
            logger.error(
                f"Error storing search: operation=write, reason={type(e).__name__}: {e}",
                extra={"user_id": user_id},
            )
            return False
        return True

    async def recent(self, user: AuthenticatedUser) -> List[SearchHistoryEntry]:
        """
        Get a user's recent searches, newest first.

        Raises:
            PersistenceError: Store could not be read
        """
        try:
            entries = await self._repository.query_recent(user.uid, limit=self._limit)
        except PersistenceError as e:
            logger.error(
                f"Error fetching history: reason={e.reason}",
                extra={"user_id": user.uid},
            )
            raise
        return entries[: self._limit]
