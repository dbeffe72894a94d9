"""
Identity token signing and verification.

Tokens are HS256 JWTs (python-jose) carrying the numeric user id in the
``id`` claim, signed with the configured private key.
"""

import structlog
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"


class JwtOptions(BaseModel):
    """Token service options, fixed for the lifetime of the service."""

    private_key: str = Field(
        ...,
        min_length=1,
        description="Secret used to sign and verify tokens"
    )


class JwtService:
    """Signs identity tokens for user ids and verifies them."""

    def __init__(self, options: JwtOptions):
        """
        Initialize token service.

        Args:
            options: Token options carrying the private key
        """
        self.options = options

    def sign(self, subject_id: int) -> str:
        """
        Create a signed token for a user.

        Args:
            subject_id: Numeric user id

        Returns:
            JWT token string
        """
        payload = {
            "id": subject_id,
            "iat": int(datetime.now(timezone.utc).timestamp())
        }
        token = jwt.encode(payload, self.options.private_key, algorithm=ALGORITHM)

        logger.debug("token_signed", user_id=subject_id)
        return token

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Decode and validate a token produced by ``sign``.

        Args:
            token: JWT token string

        Returns:
            Token payload or None if the token is malformed or the
            signature does not match
        """
        try:
            payload = jwt.decode(token, self.options.private_key, algorithms=[ALGORITHM])

            logger.debug("token_verified", user_id=payload.get("id"))
            return payload

        except JWTError as e:
            logger.warning("token_verify_failed", error=str(e))
            return None
        except Exception as e:
            logger.error("token_verify_error", error=str(e))
            return None
