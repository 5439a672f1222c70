"""
Firestore repository implementation.
Stores searches in a collection using the Firebase Admin async client.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import firebase_admin
from firebase_admin import firestore_async
from google.cloud import firestore

from moviemood.core.exceptions import PersistenceError
from moviemood.models.schemas import MovieRecord, SearchHistoryEntry

logger = logging.getLogger(__name__)


class FirestoreSearchHistoryRepository:
    """
    Firestore implementation of SearchHistoryRepository.

    Document layout: {userId, mood, movies, timestamp}, timestamp set by the
    server on write.
    """

    def __init__(self, client: Any, collection: str = "searches") -> None:
        self._client = client
        self._collection = collection

    @classmethod
    def from_app(
        cls,
        app: Optional[firebase_admin.App] = None,
        collection: str = "searches",
    ) -> "FirestoreSearchHistoryRepository":
        """Build a repository on the async Firestore client of a Firebase app."""
        return cls(client=firestore_async.client(app), collection=collection)

    async def append(
        self,
        user_id: str,
        mood: str,
        movies: List[MovieRecord],
    ) -> SearchHistoryEntry:
        """Store one search."""
        document = {
            "userId": user_id,
            "mood": mood,
            "movies": [movie.model_dump() for movie in movies],
            "timestamp": firestore.SERVER_TIMESTAMP,
        }
        try:
            _, doc_ref = await self._client.collection(self._collection).add(document)
        except Exception as e:
            raise PersistenceError(operation="write", reason=str(e)) from e

        return SearchHistoryEntry(
            id=doc_ref.id,
            user_id=user_id,
            mood=mood,
            movies=movies,
            # Server value is not echoed back by add(); local time approximates it
            timestamp=datetime.now(timezone.utc),
        )

    async def query_recent(self, user_id: str, limit: int = 10) -> List[SearchHistoryEntry]:
        """Fetch a user's most recent searches, newest first."""
        if limit <= 0:
            return []
        query = (
            self._client.collection(self._collection)
            .where(filter=firestore.FieldFilter("userId", "==", user_id))
            .order_by("timestamp", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        try:
            return [
                self._to_entry(doc.id, doc.to_dict() or {}, user_id)
                async for doc in query.stream()
            ]
        except Exception as e:
            raise PersistenceError(operation="read", reason=str(e)) from e

    @staticmethod
    def _to_entry(doc_id: str, data: Dict[str, Any], user_id: str) -> SearchHistoryEntry:
        timestamp = data.get("timestamp")
        if not isinstance(timestamp, datetime):
            timestamp = datetime.now(timezone.utc)
        return SearchHistoryEntry(
            id=doc_id,
            user_id=data.get("userId", user_id),
            mood=data.get("mood", ""),
            movies=[MovieRecord.model_validate(m) for m in data.get("movies") or []],
            timestamp=timestamp,
        )
