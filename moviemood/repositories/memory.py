"""
In-memory repository implementations.
Used for local development and testing.
Production would replace these with the Firestore implementation.
"""
import uuid
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List

from moviemood.models.schemas import MovieRecord, SearchHistoryEntry


class InMemorySearchHistoryRepository:
    """
    In-memory implementation of SearchHistoryRepository.
    Thread-safe; entries live for the process lifetime.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, List[SearchHistoryEntry]] = {}
        self._lock = Lock()

    async def append(
        self,
        user_id: str,
        mood: str,
        movies: List[MovieRecord],
    ) -> SearchHistoryEntry:
        """Store one search."""
        entry = SearchHistoryEntry(
            id=uuid.uuid4().hex,
            user_id=user_id,
            mood=mood,
            movies=[movie.model_copy() for movie in movies],
            timestamp=datetime.now(timezone.utc),
        )
        with self._lock:
            self._entries.setdefault(user_id, []).append(entry)
        return entry

    async def query_recent(self, user_id: str, limit: int = 10) -> List[SearchHistoryEntry]:
        """Fetch a user's most recent searches, newest first."""
        if limit <= 0:
            return []
        with self._lock:
            entries = list(self._entries.get(user_id, []))
        # Equal timestamps: later insert comes first after reversal
        entries.sort(key=lambda e: e.timestamp)
        return entries[::-1][:limit]

    def size(self) -> int:
        """Return total number of stored entries."""
        with self._lock:
            return sum(len(v) for v in self._entries.values())

    def clear(self) -> None:
        """Clear all entries."""
        with self._lock:
            self._entries.clear()
