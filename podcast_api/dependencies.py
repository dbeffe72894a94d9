"""
FastAPI dependency injection for database, services and authentication.

Provides injectable dependencies for:
- Database engine and request-scoped sessions (SQLAlchemy + asyncpg)
- Service instances (token, password hashing, users, podcasts)
- User authentication (bearer token validation)
- Authorization (role checking)

All dependencies use FastAPI's dependency injection system and can be
replaced through ``app.dependency_overrides`` in tests.
"""

import structlog
from typing import AsyncGenerator, Optional
from functools import lru_cache
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from podcast_api.config import get_settings
from podcast_api.models.users import User, UserRole
from podcast_api.repositories import episode_repository, podcast_repository, user_repository
from podcast_api.services.jwt_service import JwtOptions, JwtService
from podcast_api.services.password_hasher import PasswordHasher
from podcast_api.services.podcasts_service import PodcastsService
from podcast_api.services.users_service import UsersService

logger = structlog.get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


# ============================================================================
# DATABASE ENGINE AND SESSIONS
# ============================================================================

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


async def init_db_engine() -> AsyncEngine:
    """
    Initialize the database engine and session factory.

    Should be called during application startup.

    Returns:
        Async SQLAlchemy engine
    """
    global _engine, _session_factory

    if _engine is not None:
        return _engine

    settings = get_settings()

    try:
        _engine = create_async_engine(
            settings.database_url_async,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=settings.database_pool_timeout,
            pool_recycle=settings.database_pool_recycle,
            pool_pre_ping=settings.database_pool_pre_ping,
            echo=settings.database_echo
        )
        # Entities stay readable after commit without another round trip.
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False)

        logger.info(
            "database_engine_initialized",
            pool_size=settings.database_pool_size,
            database=settings.database_url_async.split("@")[-1]
        )

        return _engine

    except Exception as e:
        logger.error("database_engine_init_failed", error=str(e))
        raise


async def close_db_engine():
    """
    Dispose the database engine.

    Should be called during application shutdown.
    """
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        logger.info("database_engine_disposed")
        _engine = None
        _session_factory = None


def get_db_engine() -> AsyncEngine:
    """
    Get the database engine.

    Raises:
        RuntimeError: If the engine is not initialized
    """
    if _engine is None:
        logger.error("database_engine_not_initialized")
        raise RuntimeError(
            "Database engine not initialized. Call init_db_engine() during startup."
        )
    return _engine


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session for the current request.

    The session is closed when the request finishes.

    Yields:
        Async database session
    """
    if _session_factory is None:
        logger.error("database_engine_not_initialized")
        raise RuntimeError(
            "Database engine not initialized. Call init_db_engine() during startup."
        )

    async with _session_factory() as session:
        yield session


# ============================================================================
# SERVICE DEPENDENCIES
# ============================================================================


@lru_cache()
def get_jwt_service() -> JwtService:
    """
    Get token service instance (cached).

    The private key comes from settings; a missing key fails here,
    at first use during startup, rather than per request.
    """
    return JwtService(JwtOptions(private_key=get_settings().jwt_private_key))


@lru_cache()
def get_password_hasher() -> PasswordHasher:
    """Get password hasher instance (cached)."""
    return PasswordHasher(rounds=get_settings().password_bcrypt_rounds)


def get_users_service(
    session: AsyncSession = Depends(get_session),
    jwt_service: JwtService = Depends(get_jwt_service),
    password_hasher: PasswordHasher = Depends(get_password_hasher)
) -> UsersService:
    """
    Get users service bound to the request's session.

    Args:
        session: Database session
        jwt_service: Token service
        password_hasher: Password hasher

    Returns:
        Users service
    """
    return UsersService(user_repository(session), jwt_service, password_hasher)


def get_podcasts_service(
    session: AsyncSession = Depends(get_session)
) -> PodcastsService:
    """
    Get podcasts service bound to the request's session.

    Args:
        session: Database session

    Returns:
        Podcasts service
    """
    return PodcastsService(podcast_repository(session), episode_repository(session))


# ============================================================================
# AUTHENTICATION DEPENDENCIES
# ============================================================================


async def get_token_from_header(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """
    Extract JWT token from Authorization header.

    Args:
        credentials: HTTP bearer credentials

    Returns:
        JWT token string

    Raises:
        HTTPException: If token is missing or invalid format
    """
    if not credentials:
        logger.warning("auth_missing_credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication credentials",
            headers={"WWW-Authenticate": "Bearer"}
        )

    if credentials.scheme.lower() != "bearer":
        logger.warning("auth_invalid_scheme", scheme=credentials.scheme)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication scheme. Expected Bearer token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_token_from_header),
    jwt_service: JwtService = Depends(get_jwt_service),
    users_service: UsersService = Depends(get_users_service)
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        token: JWT token
        jwt_service: Token service
        users_service: Users service

    Returns:
        Current authenticated user

    Raises:
        HTTPException: If token is invalid or user not found
    """
    payload = jwt_service.verify(token)

    if not payload or "id" not in payload:
        logger.warning("auth_invalid_token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    output = await users_service.find_by_id(payload["id"])

    if not output.ok:
        logger.warning("auth_user_not_found", user_id=payload["id"])
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    logger.debug("user_authenticated", user_id=output.user.id, role=output.user.role.value)
    return output.user


# ============================================================================
# AUTHORIZATION DEPENDENCIES (ROLE-BASED)
# ============================================================================


async def require_host(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Require host role (or admin).

    Args:
        current_user: Current authenticated user

    Returns:
        Host or admin user

    Raises:
        HTTPException: If user is neither host nor admin
    """
    if current_user.role not in (UserRole.HOST, UserRole.ADMIN):
        logger.warning(
            "access_denied_host_required",
            user_id=current_user.id,
            role=current_user.role.value
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Host or admin role required"
        )

    return current_user
