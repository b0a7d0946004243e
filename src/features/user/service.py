"""User service layer."""

import logging
import secrets

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import CannotModifyOtherUser, UsernameAlreadyExists, UserNotFound
from .models import OAUTH_PASSWORD_SENTINEL, User
from .schemas import UserRegisterRequest, UserUpdateRequest

logger = logging.getLogger(__name__)


class UserService:
    """Service for user operations."""

    @staticmethod
    async def register_user(session: AsyncSession, data: UserRegisterRequest) -> User:
        """Register a new user.

        Args:
            session: Database session
            data: User registration data

        Returns:
            Created User object

        Raises:
            UsernameAlreadyExists: If username already exists

        """
        if await UserService.get_user_by_username(session, data.username):
            raise UsernameAlreadyExists()

        user = User(
            username=data.username,
            email=data.email,
            name=data.name,
            hashed_password=User.hash_password(data.password),
        )

        # The unique constraint catches a concurrent registration of the same name
        session.add(user)
        try:
            await session.flush()
        except IntegrityError as err:
            await session.rollback()
            raise UsernameAlreadyExists() from err

        logger.info(f"New user registered: {user.username}", extra={"user_id": user.id})
        return user

    @staticmethod
    async def create_oauth_user(
        session: AsyncSession, email: str, name: str | None = None, picture: str | None = None
    ) -> User:
        """Create an account for a first-time Google sign-in.

        The username is the e-mail local part, suffixed with random hex when
        that name is already taken. No local password can match the account.
        """
        local_part = email.split("@")[0]
        username = local_part
        while await UserService.get_user_by_username(session, username):
            username = f"{local_part}-{secrets.token_hex(3)}"

        user = User(
            username=username,
            email=email,
            name=name or local_part,
            picture=picture,
            hashed_password=OAUTH_PASSWORD_SENTINEL,
        )
        session.add(user)
        await session.flush()

        logger.info(f"New user created from Google sign-in: {user.username}")
        return user

    @staticmethod
    async def get_user(session: AsyncSession, user_id: int) -> User | None:
        """Get user by ID."""
        return await session.get(User, user_id)

    @staticmethod
    async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
        """Get user by username."""
        stmt = select(User).where(User.username == username)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
        """Get the oldest user registered with an e-mail address."""
        stmt = select(User).where(User.email == email).order_by(User.id).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def update_user(session: AsyncSession, user_id: int, caller_id: int, data: UserUpdateRequest) -> User:
        """Update the caller's own profile fields (name, email, picture).

        Raises:
            UserNotFound: If the target user does not exist
            CannotModifyOtherUser: If the caller targets someone else's profile

        """
        user = await UserService.get_user(session, user_id)
        if user is None:
            raise UserNotFound()
        if user.id != caller_id:
            raise CannotModifyOtherUser()

        for key, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(user, key, value)

        await session.flush()
        logger.info(f"User updated: {user.username}", extra={"user_id": user.id})
        return user
