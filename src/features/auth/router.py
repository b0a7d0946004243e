"""Authentication router (login, Google sign-in and refresh-token endpoints)."""

import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session

from .dependencies import bearer_scheme
from .exceptions import MissingTokenException
from .google import GoogleOAuthClient, get_google_client
from .schemas import GoogleLoginRequest, LoginResponse, TokenPairResponse, UserLoginRequest
from .service import AuthService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/user", tags=["Authentication"])


def _bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str:
    if credentials is None:
        raise MissingTokenException()
    return credentials.credentials


@router.post("/login", response_model=LoginResponse)
async def login(data: UserLoginRequest, session: AsyncSession = Depends(get_db_session)):
    """Login with username and password.

    - **username**: Username
    - **password**: Password

    Returns the user's id with a new accessToken and refreshToken.
    """
    tokens = await AuthService.login(session, data.username, data.password)
    await session.commit()
    return tokens


@router.post("/google/login", response_model=LoginResponse)
async def google_login(
    data: GoogleLoginRequest,
    session: AsyncSession = Depends(get_db_session),
    google_client: GoogleOAuthClient = Depends(get_google_client),
):
    """Login with a Google authorization code, creating the account on first use."""
    tokens = await AuthService.google_login(session, data.code, google_client)
    await session.commit()
    return tokens


@router.post("/refreshToken", response_model=TokenPairResponse)
async def refresh_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
):
    """Exchange the refresh token in the ``Authorization: Bearer`` header for a new pair.

    The presented token is retired. Presenting a token that is no longer
    current revokes every session of its user.
    """
    tokens = await AuthService.refresh_tokens(session, _bearer_token(credentials))
    await session.commit()
    return tokens


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
):
    """Revoke the refresh token in the ``Authorization: Bearer`` header."""
    await AuthService.logout(session, _bearer_token(credentials))
    await session.commit()
    return Response(status_code=status.HTTP_200_OK)
