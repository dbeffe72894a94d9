"""
Catalog service for podcasts and their episodes.

Episodes are always resolved through their parent podcast: every episode
operation loads the podcast with its episodes first and looks the
episode up in that collection. Existence checks run before any write.
Unexpected errors are logged and reported as a generic internal error.
"""

import structlog

from podcast_api.models.common import CoreOutput, INTERNAL_SERVER_ERROR
from podcast_api.models.podcasts import (
    Podcast, Episode,
    CreatePodcastInput, UpdatePodcastInput,
    CreateEpisodeInput, UpdateEpisodeInput, EpisodesSearchInput,
    PodcastsOutput, PodcastOutput, CreatePodcastOutput,
    EpisodesOutput, EpisodeOutput, CreateEpisodeOutput
)
from podcast_api.repositories.base import Repository

logger = structlog.get_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def podcast_not_found(podcast_id: int) -> str:
    return f"Podcast with id {podcast_id} not found"


def episode_not_found(podcast_id: int, episode_id: int) -> str:
    return f"Episode with id {episode_id} not found in podcast with id {podcast_id}"


class PodcastsService:
    """Service for podcast and episode operations."""

    def __init__(self, podcasts: Repository[Podcast], episodes: Repository[Episode]):
        """
        Initialize podcasts service.

        Args:
            podcasts: Podcast repository
            episodes: Episode repository
        """
        self.podcasts = podcasts
        self.episodes = episodes

    # ========================================================================
    # PODCASTS
    # ========================================================================

    async def get_all_podcasts(self) -> PodcastsOutput:
        try:
            podcasts = await self.podcasts.find()
            return PodcastsOutput(ok=True, podcasts=podcasts)

        except Exception as e:
            logger.error("podcasts_list_failed", error=str(e))
            return PodcastsOutput(ok=False, error=INTERNAL_SERVER_ERROR)

    async def create_podcast(self, data: CreatePodcastInput) -> CreatePodcastOutput:
        try:
            podcast = self.podcasts.create(title=data.title, category=data.category)
            podcast = await self.podcasts.save(podcast)

            logger.info("podcast_created", podcast_id=podcast.id, title=data.title)
            return CreatePodcastOutput(ok=True, id=podcast.id)

        except Exception as e:
            logger.error("podcast_create_failed", error=str(e), title=data.title)
            return CreatePodcastOutput(ok=False, error=INTERNAL_SERVER_ERROR)

    async def get_podcast(self, podcast_id: int) -> PodcastOutput:
        """
        Load a podcast together with its episodes.

        Args:
            podcast_id: Podcast ID

        Returns:
            Result envelope with the podcast on success
        """
        try:
            podcast = await self.podcasts.find_one({"id": podcast_id}, relations=["episodes"])
            if not podcast:
                logger.debug("podcast_not_found", podcast_id=podcast_id)
                return PodcastOutput(ok=False, error=podcast_not_found(podcast_id))

            return PodcastOutput(ok=True, podcast=podcast)

        except Exception as e:
            logger.error("podcast_get_failed", error=str(e), podcast_id=podcast_id)
            return PodcastOutput(ok=False, error=INTERNAL_SERVER_ERROR)

    async def delete_podcast(self, podcast_id: int) -> CoreOutput:
        try:
            found = await self.get_podcast(podcast_id)
            if not found.ok:
                return CoreOutput(ok=False, error=found.error)

            await self.podcasts.delete({"id": podcast_id})

            logger.info("podcast_deleted", podcast_id=podcast_id)
            return CoreOutput(ok=True)

        except Exception as e:
            logger.error("podcast_delete_failed", error=str(e), podcast_id=podcast_id)
            return CoreOutput(ok=False, error=INTERNAL_SERVER_ERROR)

    async def update_podcast(self, data: UpdatePodcastInput) -> CoreOutput:
        """
        Merge the payload into a podcast and save it.

        A rating outside [1, 5] is rejected before anything is saved.

        Args:
            data: Podcast id and the fields to change

        Returns:
            Result envelope
        """
        try:
            found = await self.get_podcast(data.id)
            if not found.ok:
                return CoreOutput(ok=False, error=found.error)

            changes = data.payload.model_dump(exclude_none=True)
            rating = changes.get("rating")
            if rating is not None and not MIN_RATING <= rating <= MAX_RATING:
                logger.warning("podcast_rating_out_of_range", podcast_id=data.id, rating=rating)
                return CoreOutput(ok=False, error="Rating must be between 1 and 5.")

            podcast = found.podcast
            for field, value in changes.items():
                setattr(podcast, field, value)
            await self.podcasts.save(podcast)

            logger.info("podcast_updated", podcast_id=data.id, fields=sorted(changes))
            return CoreOutput(ok=True)

        except Exception as e:
            logger.error("podcast_update_failed", error=str(e), podcast_id=data.id)
            return CoreOutput(ok=False, error=INTERNAL_SERVER_ERROR)

    # ========================================================================
    # EPISODES
    # ========================================================================

    async def get_episodes(self, podcast_id: int) -> EpisodesOutput:
        try:
            found = await self.get_podcast(podcast_id)
            if not found.ok:
                return EpisodesOutput(ok=False, error=found.error)

            return EpisodesOutput(ok=True, episodes=found.podcast.episodes)

        except Exception as e:
            logger.error("episodes_list_failed", error=str(e), podcast_id=podcast_id)
            return EpisodesOutput(ok=False, error=INTERNAL_SERVER_ERROR)

    async def get_episode(self, data: EpisodesSearchInput) -> EpisodeOutput:
        """
        Find an episode inside its parent podcast.

        A podcast without episodes takes the same not-found path as a
        podcast whose episodes do not include the id.

        Args:
            data: Podcast id and episode id

        Returns:
            Result envelope with the episode on success
        """
        try:
            found = await self.get_podcast(data.podcast_id)
            if not found.ok:
                return EpisodeOutput(ok=False, error=found.error)

            episode = next(
                (episode for episode in found.podcast.episodes if episode.id == data.episode_id),
                None
            )
            if not episode:
                logger.debug(
                    "episode_not_found",
                    podcast_id=data.podcast_id,
                    episode_id=data.episode_id
                )
                return EpisodeOutput(
                    ok=False,
                    error=episode_not_found(data.podcast_id, data.episode_id)
                )

            return EpisodeOutput(ok=True, episode=episode)

        except Exception as e:
            logger.error(
                "episode_get_failed",
                error=str(e),
                podcast_id=data.podcast_id,
                episode_id=data.episode_id
            )
            return EpisodeOutput(ok=False, error=INTERNAL_SERVER_ERROR)

    async def create_episode(self, data: CreateEpisodeInput) -> CreateEpisodeOutput:
        try:
            found = await self.get_podcast(data.podcast_id)
            if not found.ok:
                return CreateEpisodeOutput(ok=False, error=found.error)

            episode = self.episodes.create(title=data.title, category=data.category)
            episode.podcast = found.podcast
            episode = await self.episodes.save(episode)

            logger.info("episode_created", podcast_id=data.podcast_id, episode_id=episode.id)
            return CreateEpisodeOutput(ok=True, id=episode.id)

        except Exception as e:
            logger.error("episode_create_failed", error=str(e), podcast_id=data.podcast_id)
            return CreateEpisodeOutput(ok=False, error=INTERNAL_SERVER_ERROR)

    async def delete_episode(self, data: EpisodesSearchInput) -> CoreOutput:
        try:
            found = await self.get_episode(data)
            if not found.ok:
                return CoreOutput(ok=False, error=found.error)

            await self.episodes.delete({"id": data.episode_id})

            logger.info("episode_deleted", podcast_id=data.podcast_id, episode_id=data.episode_id)
            return CoreOutput(ok=True)

        except Exception as e:
            logger.error(
                "episode_delete_failed",
                error=str(e),
                podcast_id=data.podcast_id,
                episode_id=data.episode_id
            )
            return CoreOutput(ok=False, error=INTERNAL_SERVER_ERROR)

    async def update_episode(self, data: UpdateEpisodeInput) -> CoreOutput:
        try:
            found = await self.get_episode(
                EpisodesSearchInput(podcast_id=data.podcast_id, episode_id=data.episode_id)
            )
            if not found.ok:
                return CoreOutput(ok=False, error=found.error)

            changes = data.model_dump(include={"title", "category"}, exclude_none=True)
            episode = found.episode
            for field, value in changes.items():
                setattr(episode, field, value)
            await self.episodes.save(episode)

            logger.info(
                "episode_updated",
                podcast_id=data.podcast_id,
                episode_id=data.episode_id,
                fields=sorted(changes)
            )
            return CoreOutput(ok=True)

        except Exception as e:
            logger.error(
                "episode_update_failed",
                error=str(e),
                podcast_id=data.podcast_id,
                episode_id=data.episode_id
            )
            return CoreOutput(ok=False, error=INTERNAL_SERVER_ERROR)
