"""
Password hashing and verification (passlib + bcrypt).
"""

import structlog
from passlib.context import CryptContext

logger = structlog.get_logger(__name__)


class PasswordHasher:
    """Hashes passwords before they are persisted and checks them at login."""

    def __init__(self, rounds: int = 12):
        """
        Initialize password hasher.

        Args:
            rounds: BCrypt cost factor
        """
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds
        )

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password
        """
        try:
            hashed = self.pwd_context.hash(password)
            logger.debug("password_hashed")
            return hashed
        except Exception as e:
            logger.error("password_hash_failed", error=str(e))
            raise

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password
            hashed_password: Hashed password

        Returns:
            True if password matches, False otherwise

        Raises:
            ValueError: If the stored value is not a recognised hash
        """
        try:
            verified = self.pwd_context.verify(plain_password, hashed_password)
            logger.debug("password_verified", verified=verified)
            return verified
        except Exception as e:
            logger.error("password_verify_failed", error=str(e))
            raise
