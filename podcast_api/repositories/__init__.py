"""Data access layer.

``Repository`` wraps an ``AsyncSession`` for one entity type; the
factories below bind it to the users, podcasts and episodes tables.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from podcast_api.models.podcasts import Episode, Podcast
from podcast_api.models.users import User
from podcast_api.repositories.base import EntityNotFoundError, Repository


def user_repository(session: AsyncSession) -> Repository[User]:
    return Repository(session, User)


def podcast_repository(session: AsyncSession) -> Repository[Podcast]:
    return Repository(session, Podcast)


def episode_repository(session: AsyncSession) -> Repository[Episode]:
    return Repository(session, Episode)


__all__ = [
    "EntityNotFoundError",
    "Repository",
    "user_repository",
    "podcast_repository",
    "episode_repository",
]
