"""
Bearer token utilities.

Tokens are issued by the authentication service; this backend only
verifies them to learn who is asking. Tokens are HS256 JWTs whose ``sub``
claim is the user id.
"""

from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from kural.core.config import settings
from kural.core.logging_config import get_logger

logger = get_logger(__name__)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """
    Decode and verify a JWT access token.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload or None if invalid or expired
    """
    try:
        return jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
    except ExpiredSignatureError:
        logger.debug("Bearer token expired")
        return None
    except JWTError:
        return None
