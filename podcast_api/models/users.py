"""
User account models.

Provides both the SQLAlchemy ORM model and the Pydantic schemas for:
- User entities (database and API)
- Account creation, login and profile edit inputs
- Service result envelopes for account operations
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Enum as SAEnum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from podcast_api.models.common import Base, CoreOutput

if TYPE_CHECKING:
    from podcast_api.services.password_hasher import PasswordHasher


# ============================================================================
# Role Enum
# ============================================================================


class UserRole(str, Enum):
    """
    Account kinds.

    - LISTENER: General user, reads the catalog
    - HOST: Content host, manages podcasts and episodes
    - ADMIN: Full access
    """
    LISTENER = "listener"
    HOST = "host"
    ADMIN = "admin"


# ============================================================================
# SQLAlchemy Models
# ============================================================================


class User(Base):
    """
    User account model.

    The password column only ever holds a bcrypt hash; the account
    service hashes a new password before handing the entity to the
    repository.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False
    )
    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )
    role: Mapped[UserRole] = mapped_column(
        SAEnum(
            UserRole,
            name="user_role",
            values_callable=lambda roles: [role.value for role in roles]
        ),
        nullable=False,
        default=UserRole.LISTENER
    )

    __table_args__ = (
        Index("idx_users_email", "email"),
    )

    def check_password(self, password: str, hasher: "PasswordHasher") -> bool:
        """
        Check a plain text password against the stored hash.

        Args:
            password: Plain text password
            hasher: Hasher that produced the stored hash

        Returns:
            True if the password matches, False otherwise
        """
        return hasher.verify(password, self.password)

    def __repr__(self) -> str:
        """String representation."""
        role = self.role.value if self.role else None
        return f"<User(id={self.id}, email='{self.email}', role='{role}')>"


# ============================================================================
# Pydantic Request Models
# ============================================================================


class CreateAccountInput(BaseModel):
    """Account registration request schema."""
    email: EmailStr = Field(
        ...,
        description="Email address"
    )
    password: str = Field(
        ...,
        min_length=4,
        max_length=72,
        description="Password"
    )
    role: UserRole = Field(
        default=UserRole.LISTENER,
        description="Account kind"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "host@example.com",
                "password": "SecurePassword123!",
                "role": "host"
            }
        }
    }


class LoginInput(BaseModel):
    """Login request schema."""
    email: EmailStr = Field(
        ...,
        description="Email address"
    )
    password: str = Field(
        ...,
        min_length=1,
        description="Password"
    )


class EditProfileInput(BaseModel):
    """Profile edit request schema; absent fields are left untouched."""
    email: Optional[EmailStr] = Field(
        None,
        description="New email address"
    )
    password: Optional[str] = Field(
        None,
        min_length=4,
        max_length=72,
        description="New password"
    )


# ============================================================================
# Service Results
# ============================================================================


class CreateAccountOutput(CoreOutput):
    pass


class LoginOutput(CoreOutput):
    token: Optional[str] = None


class UserProfileOutput(CoreOutput):
    user: Optional[User] = None


class EditProfileOutput(CoreOutput):
    pass


# ============================================================================
# Pydantic Response Models
# ============================================================================


class UserRead(BaseModel):
    """Public user information. Never includes the password hash."""
    id: int = Field(
        ...,
        description="User ID"
    )
    email: str = Field(
        ...,
        description="Email address"
    )
    role: UserRole = Field(
        ...,
        description="Account kind"
    )

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    ok: bool
    error: Optional[str] = None
    token: Optional[str] = Field(
        None,
        description="Identity token for the Authorization header"
    )

    model_config = ConfigDict(from_attributes=True)


class UserProfileResponse(BaseModel):
    ok: bool
    error: Optional[str] = None
    user: Optional[UserRead] = None

    model_config = ConfigDict(from_attributes=True)
