"""Data models for the FastAPI service.

This package contains the SQLAlchemy entities, the Pydantic request and
response schemas, and the result envelopes returned by the services.
"""

from podcast_api.models.common import Base, CoreOutput, CoreResponse, INTERNAL_SERVER_ERROR
from podcast_api.models.users import User, UserRole
from podcast_api.models.podcasts import Episode, Podcast

__all__ = [
    "Base",
    "CoreOutput",
    "CoreResponse",
    "INTERNAL_SERVER_ERROR",
    "User",
    "UserRole",
    "Podcast",
    "Episode",
]
