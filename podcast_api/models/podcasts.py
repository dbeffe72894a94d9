"""
Podcast catalog models.

Provides both SQLAlchemy ORM models and Pydantic schemas for:
- Podcasts (aggregate root) and their owned Episodes
- Catalog operation inputs
- Service result envelopes and their response schemas
"""

from typing import List, Optional

from sqlalchemy import Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from pydantic import BaseModel, ConfigDict, Field

from podcast_api.models.common import Base, CoreOutput


# ============================================================================
# SQLAlchemy Models
# ============================================================================


class Podcast(Base):
    """
    Podcast model.

    Owns its episodes: deleting a podcast removes them through the
    ``ON DELETE CASCADE`` foreign key.
    """
    __tablename__ = "podcasts"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )
    category: Mapped[str] = mapped_column(
        String(100),
        nullable=False
    )
    rating: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0
    )

    episodes: Mapped[List["Episode"]] = relationship(
        "Episode",
        back_populates="podcast",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Episode.id",
        lazy="selectin"
    )

    __table_args__ = (
        Index("idx_podcasts_category", "category"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Podcast(id={self.id}, title='{self.title}')>"


class Episode(Base):
    """Episode model. Only reachable through its parent podcast."""
    __tablename__ = "episodes"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )
    category: Mapped[str] = mapped_column(
        String(100),
        nullable=False
    )
    podcast_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("podcasts.id", ondelete="CASCADE"),
        nullable=False
    )

    podcast: Mapped[Podcast] = relationship(
        "Podcast",
        back_populates="episodes"
    )

    __table_args__ = (
        Index("idx_episodes_podcast_id", "podcast_id"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Episode(id={self.id}, podcast_id={self.podcast_id}, title='{self.title}')>"


# ============================================================================
# Pydantic Request Models
# ============================================================================


class CreatePodcastInput(BaseModel):
    """Create podcast request schema."""
    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Podcast title"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category label"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "Morning Coffee",
                "category": "talk"
            }
        }
    }


class UpdatePodcastPayload(BaseModel):
    """
    Partial podcast update.

    The rating range is checked by the catalog service so that an
    out-of-range value comes back as a business rejection.
    """
    title: Optional[str] = Field(
        None,
        min_length=1,
        max_length=255,
        description="New title"
    )
    category: Optional[str] = Field(
        None,
        min_length=1,
        max_length=100,
        description="New category label"
    )
    rating: Optional[float] = Field(
        None,
        description="New rating (1-5)"
    )


class UpdatePodcastInput(BaseModel):
    id: int
    payload: UpdatePodcastPayload


class EpisodeFields(BaseModel):
    """Create episode request body."""
    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Episode title"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category label"
    )


class EpisodeUpdateFields(BaseModel):
    """Update episode request body; absent fields are left untouched."""
    title: Optional[str] = Field(
        None,
        min_length=1,
        max_length=255,
        description="New title"
    )
    category: Optional[str] = Field(
        None,
        min_length=1,
        max_length=100,
        description="New category label"
    )


class EpisodesSearchInput(BaseModel):
    podcast_id: int
    episode_id: int


class CreateEpisodeInput(EpisodeFields):
    podcast_id: int


class UpdateEpisodeInput(EpisodeUpdateFields):
    podcast_id: int
    episode_id: int


# ============================================================================
# Service Results
# ============================================================================


class PodcastsOutput(CoreOutput):
    podcasts: Optional[List[Podcast]] = None


class CreatePodcastOutput(CoreOutput):
    id: Optional[int] = None


class PodcastOutput(CoreOutput):
    podcast: Optional[Podcast] = None


class EpisodesOutput(CoreOutput):
    episodes: Optional[List[Episode]] = None


class EpisodeOutput(CoreOutput):
    episode: Optional[Episode] = None


class CreateEpisodeOutput(CoreOutput):
    id: Optional[int] = None


# ============================================================================
# Pydantic Response Models
# ============================================================================


class EpisodeRead(BaseModel):
    id: int
    title: str
    category: str

    model_config = ConfigDict(from_attributes=True)


class PodcastRead(BaseModel):
    id: int
    title: str
    category: str
    rating: float
    episodes: List[EpisodeRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class PodcastsResponse(BaseModel):
    ok: bool
    error: Optional[str] = None
    podcasts: Optional[List[PodcastRead]] = None

    model_config = ConfigDict(from_attributes=True)


class PodcastResponse(BaseModel):
    ok: bool
    error: Optional[str] = None
    podcast: Optional[PodcastRead] = None

    model_config = ConfigDict(from_attributes=True)


class EpisodesResponse(BaseModel):
    ok: bool
    error: Optional[str] = None
    episodes: Optional[List[EpisodeRead]] = None

    model_config = ConfigDict(from_attributes=True)


class EpisodeResponse(BaseModel):
    ok: bool
    error: Optional[str] = None
    episode: Optional[EpisodeRead] = None

    model_config = ConfigDict(from_attributes=True)


class CreatedResponse(BaseModel):
    """Envelope carrying the id of a created podcast or episode."""
    ok: bool
    error: Optional[str] = None
    id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
