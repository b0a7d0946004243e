"""JWT utilities for authentication.

Access and refresh tokens are signed with separate secrets and carry the user
id in an ``id`` claim.
"""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from src.config.settings import settings


def create_access_token(user_id: int | str, expires_delta: timedelta | None = None) -> str:
    """Create a short-lived JWT access token.

    Args:
        user_id: Id of the user the token is issued to
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token string

    """
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    payload = {"id": str(user_id), "iat": now, "exp": expire}
    return jwt.encode(payload, settings.access_token_secret, algorithm=settings.jwt_algorithm)


def create_refresh_token(user_id: int | str) -> str:
    """Create a JWT refresh token.

    Refresh tokens do not expire unless ``refresh_token_expire_days`` is set;
    they are revoked by removing them from the user's token list. The ``jti``
    keeps tokens issued within the same second distinct.

    Args:
        user_id: Id of the user the token is issued to

    Returns:
        Encoded JWT token string

    """
    now = datetime.now(UTC)
    payload: dict[str, Any] = {"id": str(user_id), "iat": now, "jti": uuid.uuid4().hex}
    if settings.refresh_token_expire_days is not None:
        payload["exp"] = now + timedelta(days=settings.refresh_token_expire_days)

    return jwt.encode(payload, settings.refresh_token_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify an access token.

    Raises:
        InvalidTokenError: If token is invalid or expired

    """
    return jwt.decode(token, settings.access_token_secret, algorithms=[settings.jwt_algorithm])


def decode_refresh_token(token: str) -> dict[str, Any]:
    """Decode and verify a refresh token.

    Raises:
        InvalidTokenError: If token is invalid or expired

    """
    return jwt.decode(token, settings.refresh_token_secret, algorithms=[settings.jwt_algorithm])
