"""
Pytest configuration and fixtures.
"""
import json
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from moviemood.api.dependencies import (
    get_history_repository,
    get_identity_verifier,
    get_text_generator,
)
from moviemood.core.exceptions import InvalidTokenError, PersistenceError
from moviemood.main import app
from moviemood.models.schemas import AuthenticatedUser, MovieRecord, SearchHistoryEntry
from moviemood.repositories.memory import InMemorySearchHistoryRepository

SAMPLE_MOVIES = [
    {
        "title": "Up",
        "year": "2009",
        "genre": "Animation",
        "rating": "8.3",
        "reason": "Uplifting and warm. It turns grief into adventure.",
    },
    {
        "title": "Amélie",
        "year": 2001,
        "genre": "Comedy",
        "rating": None,
        "reason": "Whimsical and kind.",
    },
    {
        "title": "The Intouchables",
        "year": "2011",
        "rating": "null",
        "reason": "A friendship that lifts both people up.",
    },
]

VALID_REPLY = "```json\n" + json.dumps(SAMPLE_MOVIES, ensure_ascii=False) + "\n```"

VALID_TOKEN = "token-alice"


class FakeTextGenerator:
    """TextGenerator returning a canned reply and recording prompts."""

    def __init__(self, reply: str = VALID_REPLY, error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeIdentityVerifier:
    """IdentityVerifier accepting a fixed token table."""

    def __init__(self, users: Optional[Dict[str, AuthenticatedUser]] = None) -> None:
        self._users = users or {}

    async def verify(self, token: str) -> AuthenticatedUser:
        user = self._users.get(token)
        if user is None:
            raise InvalidTokenError(reason="unknown token")
        return user


class FailingHistoryRepository:
    """SearchHistoryRepository whose every call fails."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.append_calls = 0
        self.error = error

    async def append(
        self,
        user_id: str,
        mood: str,
        movies: List[MovieRecord],
    ) -> SearchHistoryEntry:
        self.append_calls += 1
        if self.error is not None:
            raise self.error
        raise PersistenceError(operation="write", reason="store offline")

    async def query_recent(self, user_id: str, limit: int = 10) -> List[SearchHistoryEntry]:
        raise PersistenceError(operation="read", reason="store offline")


@pytest.fixture
def fake_generator():
    """Fixture for a TextGenerator with a valid fenced reply."""
    return FakeTextGenerator()


@pytest.fixture
def alice():
    """Fixture for a signed-in user."""
    return AuthenticatedUser(uid="uid_alice", name="Alice")


@pytest.fixture
def fake_verifier(alice):
    """Fixture for an IdentityVerifier that knows one token."""
    return FakeIdentityVerifier({VALID_TOKEN: alice})


@pytest.fixture
def history_repo():
    """Fixture for an empty in-memory history store."""
    return InMemorySearchHistoryRepository()


@pytest.fixture
def failing_history_repo():
    """Fixture for a history store that always fails."""
    return FailingHistoryRepository()


@pytest.fixture
def auth_headers():
    """Authorization header for the known user."""
    return {"Authorization": f"Bearer {VALID_TOKEN}"}


@pytest.fixture
def test_client(fake_generator, fake_verifier, history_repo):
    """
    TestClient fixture with dependency overrides.
    Uses fakes for the model, identity provider and history store.
    """
    app.dependency_overrides[get_text_generator] = lambda: fake_generator
    app.dependency_overrides[get_identity_verifier] = lambda: fake_verifier
    app.dependency_overrides[get_history_repository] = lambda: history_repo

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_movie():
    """Fixture for a normalized movie."""
    return MovieRecord(
        title="Up",
        year="2009",
        genre="Animation",
        rating="8.3",
        reason="Uplifting.",
    )
