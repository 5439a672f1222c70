import logging

import pytest

from moviemood.core.exceptions import (
    EmptyResultError,
    MalformedResponseError,
    PersistenceError,
    UpstreamServiceError,
    ValidationError,
)
from moviemood.models.schemas import ANONYMOUS
from moviemood.services.history import SearchHistoryService
from moviemood.services.normalizer import ResponseNormalizer
from moviemood.services.recommendations import RecommendationService, build_mood_query
from moviemood.services.requester import PERSONALIZED_CLAUSE, RecommendationRequester

from conftest import FailingHistoryRepository, FakeTextGenerator


def _service(generator, repo, **kwargs) -> RecommendationService:
    return RecommendationService(
        requester=RecommendationRequester(generator),
        normalizer=ResponseNormalizer(),
        history=SearchHistoryService(repo, limit=10),
        **kwargs,
    )


class TestBuildQuery:
    def test_trims_mood(self, fake_generator, history_repo):
        service = _service(fake_generator, history_repo)
        query = service.build_query("  happy  ", None, ANONYMOUS)

        assert query.mood == "happy"
        assert query.personalized is False
        assert query.user_id is None

    @pytest.mark.parametrize("mood", [None, "", "   \n\t"])
    def test_empty_mood_rejected(self, fake_generator, history_repo, mood):
        service = _service(fake_generator, history_repo)
        with pytest.raises(ValidationError) as exc_info:
            service.build_query(mood, None, ANONYMOUS)
        assert exc_info.value.message == "Empty mood"
        assert exc_info.value.status_code == 400

    def test_too_long_mood_rejected(self, fake_generator, history_repo):
        service = _service(fake_generator, history_repo, mood_max_length=5)
        with pytest.raises(ValidationError) as exc_info:
            service.build_query("melancholic", None, ANONYMOUS)
        assert exc_info.value.details == {"max_length": 5}

    def test_authenticated_defaults_to_personalized(self, fake_generator, history_repo, alice):
        query = _service(fake_generator, history_repo).build_query("calm", None, alice)

        assert query.personalized is True
        assert query.user_id == "uid_alice"

    def test_explicit_flag_wins(self, fake_generator, history_repo, alice):
        service = _service(fake_generator, history_repo)

        assert service.build_query("calm", False, alice).personalized is False
        assert service.build_query("calm", True, ANONYMOUS).personalized is True

    def test_global_switch_disables_personalization(self, fake_generator, history_repo, alice):
        service = _service(fake_generator, history_repo, personalization_enabled=False)
        assert service.build_query("calm", True, alice).personalized is False

    def test_builder_needs_no_generator(self, alice):
        query = build_mood_query(" calm ", None, alice, mood_max_length=10)

        assert query.mood == "calm"
        assert query.personalized is True
        with pytest.raises(ValidationError):
            build_mood_query("", None, alice)


class TestRecommend:
    @pytest.mark.asyncio
    async def test_anonymous_not_persisted(self, fake_generator, history_repo):
        service = _service(fake_generator, history_repo)
        query = service.build_query("happy", None, ANONYMOUS)

        movies = await service.recommend(query)

        assert [m.title for m in movies] == ["Up", "Amélie", "The Intouchables"]
        assert history_repo.size() == 0
        assert PERSONALIZED_CLAUSE not in fake_generator.prompts[0]

    @pytest.mark.asyncio
    async def test_authenticated_persisted(self, fake_generator, history_repo, alice):
        service = _service(fake_generator, history_repo)
        query = service.build_query(" happy ", None, alice)

        movies = await service.recommend(query)

        entries = await history_repo.query_recent("uid_alice")
        assert len(entries) == 1
        assert entries[0].mood == "happy"
        assert entries[0].movies == movies
        assert PERSONALIZED_CLAUSE in fake_generator.prompts[0]

    @pytest.mark.asyncio
    async def test_persistence_failure_is_swallowed(
        self, fake_generator, failing_history_repo, alice, caplog
    ):
        service = _service(fake_generator, failing_history_repo)
        query = service.build_query("happy", None, alice)

        with caplog.at_level(logging.ERROR):
            movies = await service.recommend(query)

        assert len(movies) == 3
        assert failing_history_repo.append_calls == 1
        assert "Error storing search" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_store_error_is_swallowed(self, fake_generator, alice, caplog):
        repo = FailingHistoryRepository(error=ConnectionError("store unreachable"))
        service = _service(fake_generator, repo)
        query = service.build_query("happy", None, alice)

        with caplog.at_level(logging.ERROR):
            movies = await service.recommend(query)

        assert [m.title for m in movies] == ["Up", "Amélie", "The Intouchables"]
        assert repo.append_calls == 1
        assert "ConnectionError: store unreachable" in caplog.text

    @pytest.mark.asyncio
    async def test_malformed_reply_logged_not_persisted(self, history_repo, alice, caplog):
        generator = FakeTextGenerator(reply="Sorry, I cannot help with that.")
        service = _service(generator, history_repo)
        query = service.build_query("happy", None, alice)

        with caplog.at_level(logging.ERROR):
            with pytest.raises(MalformedResponseError) as exc_info:
                await service.recommend(query)

        assert "Sorry, I cannot help" in caplog.text
        assert "Sorry" not in str(exc_info.value.to_dict())
        assert history_repo.size() == 0

    @pytest.mark.asyncio
    async def test_empty_result_propagates(self, history_repo):
        service = _service(FakeTextGenerator(reply='[{"title": "x"}]'), history_repo)
        with pytest.raises(EmptyResultError):
            await service.recommend(service.build_query("happy", None, ANONYMOUS))

    @pytest.mark.asyncio
    async def test_upstream_failure_propagates(self, history_repo, alice):
        generator = FakeTextGenerator(error=ConnectionError("quota exceeded"))
        service = _service(generator, history_repo)

        with pytest.raises(UpstreamServiceError):
            await service.recommend(service.build_query("happy", None, alice))
        assert history_repo.size() == 0


class TestSearchHistoryService:
    @pytest.mark.asyncio
    async def test_record_and_recent(self, history_repo, alice, sample_movie):
        history = SearchHistoryService(history_repo, limit=2)
        for mood in ["one", "two", "three"]:
            assert await history.record(alice.uid, mood, [sample_movie]) is True

        entries = await history.recent(alice)

        assert [e.mood for e in entries] == ["three", "two"]

    @pytest.mark.asyncio
    async def test_record_failure_returns_false(self, failing_history_repo, alice, sample_movie):
        history = SearchHistoryService(failing_history_repo)
        assert await history.record(alice.uid, "mood", [sample_movie]) is False

    @pytest.mark.asyncio
    async def test_read_failure_raises(self, failing_history_repo, alice):
        history = SearchHistoryService(failing_history_repo)
        with pytest.raises(PersistenceError) as exc_info:
            await history.recent(alice)
        assert exc_info.value.message == "Failed to fetch history"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [ConnectionError("store unreachable"), TimeoutError("deadline"), RuntimeError("refresh failed")],
    )
    async def test_record_any_store_error_returns_false(self, alice, sample_movie, error):
        history = SearchHistoryService(FailingHistoryRepository(error=error))
        assert await history.record(alice.uid, "mood", [sample_movie]) is False
