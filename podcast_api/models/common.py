"""
Shared model building blocks.

Provides:
- The SQLAlchemy declarative base with timestamp columns
- The uniform result envelope returned by every service operation
- The response schema the envelope is serialised into
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from pydantic import BaseModel, ConfigDict, Field


INTERNAL_SERVER_ERROR = "Internal server error occurred."


# ============================================================================
# SQLAlchemy Base
# ============================================================================


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Every table carries timezone-aware creation and update timestamps.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=lambda: datetime.now(timezone.utc)
    )


# ============================================================================
# Result Envelope
# ============================================================================


class CoreOutput(BaseModel):
    """
    Result of a service operation.

    ``ok`` tells success from failure. On failure ``error`` carries a
    human-readable message; on success subclasses populate their payload
    field (entity, id or list). Payloads may be ORM entities, hence
    ``arbitrary_types_allowed``.
    """

    ok: bool
    error: Optional[str] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)


class CoreResponse(BaseModel):
    """Envelope response schema without payload."""

    ok: bool = Field(
        ...,
        description="Whether the operation succeeded"
    )
    error: Optional[str] = Field(
        None,
        description="Failure message when ok is false"
    )

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "ok": False,
                "error": "Podcast with id 1 not found"
            }
        }
    )
