"""Authentication dependencies for FastAPI."""

import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt.exceptions import InvalidTokenError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session
from src.features.user.exceptions import UserNotFound
from src.features.user.models import User
from src.features.user.service import UserService

from .exceptions import InvalidTokenException, MissingTokenException
from .jwt_utils import decode_access_token
from .schemas import AuthIdentity

logger = logging.getLogger(__name__)

# Parses "Bearer <token>" case-insensitively; yields None instead of raising
bearer_scheme = HTTPBearer(auto_error=False)


def identity_from_access_token(token: str) -> AuthIdentity:
    """Verify an access token and return the identity in its claims.

    Raises:
        InvalidTokenException: If signature, expiry or claims are invalid

    """
    try:
        payload = decode_access_token(token)
    except InvalidTokenError as err:
        raise InvalidTokenException(detail=str(err)) from err

    try:
        return AuthIdentity.model_validate(payload)
    except ValidationError as err:
        raise InvalidTokenException(detail="Invalid token payload") from err


async def authorize(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthIdentity:
    """Require a valid access token.

    Returns:
        The caller's identity, also stored on ``request.state.user``

    Raises:
        MissingTokenException: If no bearer token is present (401)
        InvalidTokenException: If the token does not verify (403)

    """
    if credentials is None:
        raise MissingTokenException()

    identity = identity_from_access_token(credentials.credentials)
    request.state.user = identity
    return identity


async def optional_authorize(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthIdentity | None:
    """Attach the caller's identity when a valid access token is present.

    Never rejects the request: missing, malformed and invalid tokens all
    yield None.
    """
    request.state.user = None
    if credentials is None:
        return None

    try:
        identity = identity_from_access_token(credentials.credentials)
    except InvalidTokenException as exc:
        logger.debug(f"Ignoring invalid optional token: {exc.detail}")
        return None

    request.state.user = identity
    return identity


async def get_current_user(
    identity: AuthIdentity = Depends(authorize),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    """Load the user behind a verified access token.

    Raises:
        UserNotFound: If the account no longer exists

    """
    user = await UserService.get_user(session, identity.id)
    if user is None:
        raise UserNotFound()
    return user
