"""User management router (API endpoints)."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session
from src.features.auth.dependencies import authorize, get_current_user, optional_authorize
from src.features.auth.schemas import AuthIdentity

from .exceptions import UserNotFound
from .models import User
from .schemas import PublicUserResponse, UserRegisterRequest, UserResponse, UserUpdateRequest
from .service import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/user", tags=["User Management"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(data: UserRegisterRequest, session: AsyncSession = Depends(get_db_session)):
    """Register a new user.

    - **username**: Unique username
    - **password**: Password
    - **email**: Email address
    - **name**: Display name
    """
    await UserService.register_user(session, data)
    await session.commit()
    return {"Message": "New user created"}


@router.get("", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return UserResponse.model_validate(current_user)


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    identity: AuthIdentity | None = Depends(optional_authorize),
    session: AsyncSession = Depends(get_db_session),
):
    """Get a user's profile; the owner sees the full record, everyone else the public fields."""
    user = await UserService.get_user(session, user_id)
    if not user:
        raise UserNotFound()

    if identity is not None and identity.id == user.id:
        return UserResponse.model_validate(user)
    return PublicUserResponse.model_validate(user)


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    data: UserUpdateRequest,
    identity: AuthIdentity = Depends(authorize),
    session: AsyncSession = Depends(get_db_session),
):
    """Update your own profile (name, email, picture)."""
    await UserService.update_user(session, user_id, identity.id, data)
    await session.commit()
    return {"Message": "User updated successfully"}
