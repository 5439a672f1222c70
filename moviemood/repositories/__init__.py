"""Repository implementations package."""
from .firestore import FirestoreSearchHistoryRepository
from .memory import InMemorySearchHistoryRepository

__all__ = [
    "FirestoreSearchHistoryRepository",
    "InMemorySearchHistoryRepository",
]
