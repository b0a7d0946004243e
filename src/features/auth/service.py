"""Authentication service layer: login, token rotation and logout."""

import logging

from jwt.exceptions import InvalidTokenError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.features.user.exceptions import UserNotFound
from src.features.user.models import User
from src.features.user.service import UserService

from .exceptions import (
    InvalidCredentialsException,
    InvalidTokenException,
    RefreshTokenReuseException,
    TokenOwnerNotFoundException,
)
from .google import GoogleOAuthClient
from .jwt_utils import create_access_token, create_refresh_token, decode_refresh_token
from .schemas import AuthIdentity, LoginResponse, TokenPairResponse
from .token_store import RefreshTokenStore

logger = logging.getLogger(__name__)


class AuthService:
    """Service for JWT authentication and refresh-token lifecycle."""

    @staticmethod
    async def login(session: AsyncSession, username: str, password: str) -> LoginResponse:
        """Authenticate with username and password and open a new session.

        Raises:
            UserNotFound: If no user has that username
            InvalidCredentialsException: If the password does not match

        """
        user = await UserService.get_user_by_username(session, username)
        if user is None:
            raise UserNotFound()

        if not user.verify_password(password):
            logger.warning(f"Failed login attempt for user: {username}", extra={"user_id": user.id})
            raise InvalidCredentialsException()

        tokens = await AuthService.create_tokens(session, user)
        logger.info(f"User logged in: {user.username}", extra={"user_id": user.id})
        return tokens

    @staticmethod
    async def google_login(session: AsyncSession, code: str, google_client: GoogleOAuthClient) -> LoginResponse:
        """Sign in with a Google authorization code.

        Creates the account on first sign-in and backfills a missing picture on
        later ones, then opens a session exactly like a password login.

        Raises:
            GoogleLoginException: If Google rejects the code or the ID token

        """
        identity = await google_client.exchange_code(code)

        user = await UserService.get_user_by_email(session, identity.email)
        if user is None:
            user = await UserService.create_oauth_user(
                session, email=identity.email, name=identity.name, picture=identity.picture
            )
        elif identity.picture and not user.picture:
            user.picture = identity.picture

        tokens = await AuthService.create_tokens(session, user)
        logger.info(f"User logged in with Google: {user.username}", extra={"user_id": user.id})
        return tokens

    @staticmethod
    async def create_tokens(session: AsyncSession, user: User) -> LoginResponse:
        """Issue an access/refresh token pair and append the refresh token to the user's list."""
        access_token = create_access_token(user.id)
        refresh_token = create_refresh_token(user.id)
        await RefreshTokenStore.add(session, user.id, refresh_token)

        return LoginResponse(id=user.id, access_token=access_token, refresh_token=refresh_token)

    @staticmethod
    async def refresh_tokens(session: AsyncSession, refresh_token: str) -> TokenPairResponse:
        """Rotate a refresh token: retire the presented one and issue a new pair.

        Raises:
            InvalidTokenException: If the token does not verify
            TokenOwnerNotFoundException: If the token's user does not exist
            RefreshTokenReuseException: If the token is no longer current;
                all of the user's tokens are revoked first

        """
        user = await AuthService._resolve_token_owner(session, refresh_token)
        await AuthService._retire_token(session, user, refresh_token)

        tokens = await AuthService.create_tokens(session, user)
        logger.info(f"Refresh token rotated for user: {user.username}", extra={"user_id": user.id})
        return TokenPairResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)

    @staticmethod
    async def logout(session: AsyncSession, refresh_token: str) -> None:
        """Revoke one refresh token, ending that session only.

        Raises:
            InvalidTokenException: If the token does not verify
            TokenOwnerNotFoundException: If the token's user does not exist
            RefreshTokenReuseException: If the token is no longer current;
                all of the user's tokens are revoked first

        """
        user = await AuthService._resolve_token_owner(session, refresh_token)
        await AuthService._retire_token(session, user, refresh_token)
        logger.info(f"User logged out: {user.username}", extra={"user_id": user.id})

    @staticmethod
    async def _resolve_token_owner(session: AsyncSession, refresh_token: str) -> User:
        try:
            payload = decode_refresh_token(refresh_token)
        except InvalidTokenError as err:
            raise InvalidTokenException(detail=str(err)) from err

        try:
            identity = AuthIdentity.model_validate(payload)
        except ValidationError as err:
            raise InvalidTokenException(detail="Invalid token payload") from err

        user = await UserService.get_user(session, identity.id)
        if user is None:
            raise TokenOwnerNotFoundException()
        return user

    @staticmethod
    async def _retire_token(session: AsyncSession, user: User, refresh_token: str) -> None:
        if await RefreshTokenStore.remove(session, user.id, refresh_token):
            return

        # A validly signed token missing from the list was already used or revoked:
        # treat it as stolen and end every session of the user.
        # Committed here so the revocation survives the rollback of the failing request
        revoked = await RefreshTokenStore.clear(session, user.id)
        await session.commit()
        logger.warning(
            f"Refresh token reuse detected for user {user.username}; revoked {revoked} token(s)",
            extra={"user_id": user.id},
        )
        raise RefreshTokenReuseException()
