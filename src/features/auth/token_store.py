"""Persistence of each user's list of valid refresh tokens.

Every mutation is one SQL statement, so two requests presenting the same token
cannot both remove it.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import RefreshToken


class RefreshTokenStore:
    """Atomic operations on the refresh-token list."""

    @staticmethod
    async def add(session: AsyncSession, user_id: int, token: str) -> None:
        """Append a token to the user's list."""
        session.add(RefreshToken(user_id=user_id, token=token))
        await session.flush()

    @staticmethod
    async def remove(session: AsyncSession, user_id: int, token: str) -> bool:
        """Remove a token if it is present.

        Returns:
            True if the token was in the user's list, False otherwise

        """
        stmt = delete(RefreshToken).where(RefreshToken.user_id == user_id, RefreshToken.token == token)
        result = await session.execute(stmt)
        return result.rowcount > 0  # type: ignore[attr-defined]

    @staticmethod
    async def clear(session: AsyncSession, user_id: int) -> int:
        """Remove every token of a user, ending all of their sessions.

        Returns:
            Number of tokens removed

        """
        stmt = delete(RefreshToken).where(RefreshToken.user_id == user_id)
        result = await session.execute(stmt)
        return result.rowcount  # type: ignore[attr-defined]

    @staticmethod
    async def list_tokens(session: AsyncSession, user_id: int) -> list[str]:
        """Get the user's valid tokens, oldest first."""
        stmt = select(RefreshToken.token).where(RefreshToken.user_id == user_id).order_by(RefreshToken.id)
        result = await session.execute(stmt)
        return list(result.scalars().all())
