"""
Unit tests for the podcasts service.

Tests cover:
- Podcast listing, creation, lookup, update and deletion
- Rating range rejection
- Episode operations resolved through the parent podcast
- Not-found short-circuits before any write
- Generic internal error on unexpected failures
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from podcast_api.models.common import INTERNAL_SERVER_ERROR
from podcast_api.models.podcasts import (
    Podcast, Episode,
    CreatePodcastInput, UpdatePodcastPayload, UpdatePodcastInput,
    CreateEpisodeInput, UpdateEpisodeInput, EpisodesSearchInput
)
from podcast_api.services.podcasts_service import PodcastsService


# ============================================================================
# FIXTURES
# ============================================================================


def make_repo(model):
    repo = AsyncMock()
    repo.create = MagicMock(side_effect=lambda **fields: model(**fields))
    return repo


@pytest.fixture
def podcasts_repo():
    return make_repo(Podcast)


@pytest.fixture
def episodes_repo():
    return make_repo(Episode)


@pytest.fixture
def service(podcasts_repo, episodes_repo):
    return PodcastsService(podcasts_repo, episodes_repo)


@pytest.fixture
def podcast():
    podcast = Podcast(id=1, title="Morning Coffee", category="talk", rating=3.0)
    podcast.episodes.append(Episode(id=10, title="Pilot", category="talk"))
    podcast.episodes.append(Episode(id=11, title="Second Cup", category="talk"))
    return podcast


@pytest.fixture
def empty_podcast():
    return Podcast(id=2, title="Silence", category="ambient", rating=0)


# ============================================================================
# PODCASTS
# ============================================================================


class TestGetAllPodcasts:
    """Test podcast listing."""

    @pytest.mark.asyncio
    async def test_returns_all_podcasts(self, service, podcasts_repo, podcast, empty_podcast):
        podcasts_repo.find.return_value = [podcast, empty_podcast]

        result = await service.get_all_podcasts()

        assert result.ok is True
        assert result.podcasts == [podcast, empty_podcast]

    @pytest.mark.asyncio
    async def test_returns_empty_list(self, service, podcasts_repo):
        podcasts_repo.find.return_value = []

        result = await service.get_all_podcasts()

        assert result.ok is True
        assert result.podcasts == []

    @pytest.mark.asyncio
    async def test_storage_failure(self, service, podcasts_repo):
        podcasts_repo.find.side_effect = RuntimeError("db down")

        result = await service.get_all_podcasts()

        assert result.ok is False
        assert result.error == INTERNAL_SERVER_ERROR


class TestCreatePodcast:
    """Test podcast creation."""

    @pytest.mark.asyncio
    async def test_create_returns_new_id(self, service, podcasts_repo):
        async def assign_id(entity):
            entity.id = 7
            return entity

        podcasts_repo.save.side_effect = assign_id

        result = await service.create_podcast(CreatePodcastInput(title="New Show", category="news"))

        assert result.ok is True
        assert result.id == 7
        podcasts_repo.create.assert_called_once_with(title="New Show", category="news")

    @pytest.mark.asyncio
    async def test_create_storage_failure(self, service, podcasts_repo):
        podcasts_repo.save.side_effect = RuntimeError("db down")

        result = await service.create_podcast(CreatePodcastInput(title="New Show", category="news"))

        assert result.ok is False
        assert result.error == INTERNAL_SERVER_ERROR
        assert result.id is None


class TestGetPodcast:
    """Test podcast lookup."""

    @pytest.mark.asyncio
    async def test_get_loads_episodes(self, service, podcasts_repo, podcast):
        podcasts_repo.find_one.return_value = podcast

        result = await service.get_podcast(1)

        assert result.ok is True
        assert result.podcast is podcast
        podcasts_repo.find_one.assert_awaited_once_with({"id": 1}, relations=["episodes"])

    @pytest.mark.asyncio
    async def test_get_missing(self, service, podcasts_repo):
        podcasts_repo.find_one.return_value = None

        result = await service.get_podcast(99)

        assert result.ok is False
        assert result.error == "Podcast with id 99 not found"

    @pytest.mark.asyncio
    async def test_get_storage_failure(self, service, podcasts_repo):
        podcasts_repo.find_one.side_effect = RuntimeError("db down")

        result = await service.get_podcast(1)

        assert result.ok is False
        assert result.error == INTERNAL_SERVER_ERROR


class TestDeletePodcast:
    """Test podcast deletion."""

    @pytest.mark.asyncio
    async def test_delete_existing(self, service, podcasts_repo, podcast):
        podcasts_repo.find_one.return_value = podcast

        result = await service.delete_podcast(1)

        assert result.ok is True
        podcasts_repo.delete.assert_awaited_once_with({"id": 1})

    @pytest.mark.asyncio
    async def test_delete_missing_does_not_delete(self, service, podcasts_repo):
        podcasts_repo.find_one.return_value = None

        result = await service.delete_podcast(99)

        assert result.ok is False
        assert result.error == "Podcast with id 99 not found"
        podcasts_repo.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_storage_failure(self, service, podcasts_repo, podcast):
        podcasts_repo.find_one.return_value = podcast
        podcasts_repo.delete.side_effect = RuntimeError("db down")

        result = await service.delete_podcast(1)

        assert result.ok is False
        assert result.error == INTERNAL_SERVER_ERROR

    @pytest.mark.asyncio
    async def test_second_delete_reports_not_found(self, service, podcasts_repo, podcast):
        podcasts_repo.find_one.side_effect = [podcast, None]

        first = await service.delete_podcast(1)
        second = await service.delete_podcast(1)

        assert first.ok is True
        assert second.ok is False
        assert second.error == "Podcast with id 1 not found"
        podcasts_repo.delete.assert_awaited_once_with({"id": 1})


class TestUpdatePodcast:
    """Test podcast updates."""

    @pytest.mark.asyncio
    async def test_update_merges_given_fields(self, service, podcasts_repo, podcast):
        podcasts_repo.find_one.return_value = podcast

        result = await service.update_podcast(
            UpdatePodcastInput(id=1, payload=UpdatePodcastPayload(title="Evening Tea", rating=4.5))
        )

        assert result.ok is True
        assert podcast.title == "Evening Tea"
        assert podcast.rating == 4.5
        assert podcast.category == "talk"
        podcasts_repo.save.assert_awaited_once_with(podcast)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [1, 5])
    async def test_update_accepts_rating_bounds(self, service, podcasts_repo, podcast, rating):
        podcasts_repo.find_one.return_value = podcast

        result = await service.update_podcast(
            UpdatePodcastInput(id=1, payload=UpdatePodcastPayload(rating=rating))
        )

        assert result.ok is True
        assert podcast.rating == rating

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0, 0.5, 5.1, 10, -1])
    async def test_update_rejects_rating_out_of_range(self, service, podcasts_repo, podcast, rating):
        podcasts_repo.find_one.return_value = podcast

        result = await service.update_podcast(
            UpdatePodcastInput(id=1, payload=UpdatePodcastPayload(title="Changed", rating=rating))
        )

        assert result.ok is False
        assert result.error == "Rating must be between 1 and 5."
        assert podcast.title == "Morning Coffee"
        assert podcast.rating == 3.0
        podcasts_repo.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_missing_podcast(self, service, podcasts_repo):
        podcasts_repo.find_one.return_value = None

        result = await service.update_podcast(
            UpdatePodcastInput(id=99, payload=UpdatePodcastPayload(title="x"))
        )

        assert result.ok is False
        assert result.error == "Podcast with id 99 not found"
        podcasts_repo.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_storage_failure(self, service, podcasts_repo, podcast):
        podcasts_repo.find_one.return_value = podcast
        podcasts_repo.save.side_effect = RuntimeError("db down")

        result = await service.update_podcast(
            UpdatePodcastInput(id=1, payload=UpdatePodcastPayload(title="x"))
        )

        assert result.ok is False
        assert result.error == INTERNAL_SERVER_ERROR


# ============================================================================
# EPISODES
# ============================================================================


class TestGetEpisodes:
    """Test episode listing."""

    @pytest.mark.asyncio
    async def test_lists_podcast_episodes(self, service, podcasts_repo, podcast):
        podcasts_repo.find_one.return_value = podcast

        result = await service.get_episodes(1)

        assert result.ok is True
        assert [episode.id for episode in result.episodes] == [10, 11]

    @pytest.mark.asyncio
    async def test_podcast_without_episodes(self, service, podcasts_repo, empty_podcast):
        podcasts_repo.find_one.return_value = empty_podcast

        result = await service.get_episodes(2)

        assert result.ok is True
        assert result.episodes == []

    @pytest.mark.asyncio
    async def test_missing_podcast(self, service, podcasts_repo):
        podcasts_repo.find_one.return_value = None

        result = await service.get_episodes(99)

        assert result.ok is False
        assert result.error == "Podcast with id 99 not found"


class TestGetEpisode:
    """Test episode lookup."""

    @pytest.mark.asyncio
    async def test_finds_episode_in_podcast(self, service, podcasts_repo, podcast):
        podcasts_repo.find_one.return_value = podcast

        result = await service.get_episode(EpisodesSearchInput(podcast_id=1, episode_id=11))

        assert result.ok is True
        assert result.episode.title == "Second Cup"

    @pytest.mark.asyncio
    async def test_episode_not_in_podcast(self, service, podcasts_repo, podcast):
        podcasts_repo.find_one.return_value = podcast

        result = await service.get_episode(EpisodesSearchInput(podcast_id=1, episode_id=99))

        assert result.ok is False
        assert result.error == "Episode with id 99 not found in podcast with id 1"

    @pytest.mark.asyncio
    async def test_podcast_without_episodes_reports_episode_not_found(
        self, service, podcasts_repo, empty_podcast
    ):
        podcasts_repo.find_one.return_value = empty_podcast

        result = await service.get_episode(EpisodesSearchInput(podcast_id=2, episode_id=1))

        assert result.ok is False
        assert result.error == "Episode with id 1 not found in podcast with id 2"

    @pytest.mark.asyncio
    async def test_missing_podcast(self, service, podcasts_repo):
        podcasts_repo.find_one.return_value = None

        result = await service.get_episode(EpisodesSearchInput(podcast_id=99, episode_id=1))

        assert result.ok is False
        assert result.error == "Podcast with id 99 not found"


class TestCreateEpisode:
    """Test episode creation."""

    @pytest.mark.asyncio
    async def test_create_attaches_to_podcast(self, service, podcasts_repo, episodes_repo, podcast):
        podcasts_repo.find_one.return_value = podcast

        async def assign_id(entity):
            entity.id = 12
            return entity

        episodes_repo.save.side_effect = assign_id

        result = await service.create_episode(
            CreateEpisodeInput(podcast_id=1, title="Third Cup", category="talk")
        )

        assert result.ok is True
        assert result.id == 12
        saved = episodes_repo.save.await_args.args[0]
        assert saved.podcast is podcast
        assert saved.title == "Third Cup"

    @pytest.mark.asyncio
    async def test_create_for_missing_podcast(self, service, podcasts_repo, episodes_repo):
        podcasts_repo.find_one.return_value = None

        result = await service.create_episode(
            CreateEpisodeInput(podcast_id=99, title="Orphan", category="talk")
        )

        assert result.ok is False
        assert result.error == "Podcast with id 99 not found"
        episodes_repo.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_storage_failure(self, service, podcasts_repo, episodes_repo, podcast):
        podcasts_repo.find_one.return_value = podcast
        episodes_repo.save.side_effect = RuntimeError("db down")

        result = await service.create_episode(
            CreateEpisodeInput(podcast_id=1, title="Third Cup", category="talk")
        )

        assert result.ok is False
        assert result.error == INTERNAL_SERVER_ERROR


class TestDeleteEpisode:
    """Test episode deletion."""

    @pytest.mark.asyncio
    async def test_delete_existing(self, service, podcasts_repo, episodes_repo, podcast):
        podcasts_repo.find_one.return_value = podcast

        result = await service.delete_episode(EpisodesSearchInput(podcast_id=1, episode_id=10))

        assert result.ok is True
        episodes_repo.delete.assert_awaited_once_with({"id": 10})

    @pytest.mark.asyncio
    async def test_delete_episode_of_other_podcast(self, service, podcasts_repo, episodes_repo, podcast):
        podcasts_repo.find_one.return_value = podcast

        result = await service.delete_episode(EpisodesSearchInput(podcast_id=1, episode_id=50))

        assert result.ok is False
        assert result.error == "Episode with id 50 not found in podcast with id 1"
        episodes_repo.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_for_missing_podcast(self, service, podcasts_repo, episodes_repo):
        podcasts_repo.find_one.return_value = None

        result = await service.delete_episode(EpisodesSearchInput(podcast_id=99, episode_id=10))

        assert result.ok is False
        assert result.error == "Podcast with id 99 not found"
        episodes_repo.delete.assert_not_awaited()


class TestUpdateEpisode:
    """Test episode updates."""

    @pytest.mark.asyncio
    async def test_update_changes_given_fields(self, service, podcasts_repo, episodes_repo, podcast):
        podcasts_repo.find_one.return_value = podcast

        result = await service.update_episode(
            UpdateEpisodeInput(podcast_id=1, episode_id=10, title="Pilot (Remastered)")
        )

        assert result.ok is True
        episode = podcast.episodes[0]
        assert episode.title == "Pilot (Remastered)"
        assert episode.category == "talk"
        episodes_repo.save.assert_awaited_once_with(episode)

    @pytest.mark.asyncio
    async def test_update_missing_episode(self, service, podcasts_repo, episodes_repo, podcast):
        podcasts_repo.find_one.return_value = podcast

        result = await service.update_episode(
            UpdateEpisodeInput(podcast_id=1, episode_id=99, title="x")
        )

        assert result.ok is False
        assert result.error == "Episode with id 99 not found in podcast with id 1"
        episodes_repo.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_storage_failure(self, service, podcasts_repo, episodes_repo, podcast):
        podcasts_repo.find_one.return_value = podcast
        episodes_repo.save.side_effect = RuntimeError("db down")

        result = await service.update_episode(
            UpdateEpisodeInput(podcast_id=1, episode_id=10, category="news")
        )

        assert result.ok is False
        assert result.error == INTERNAL_SERVER_ERROR
