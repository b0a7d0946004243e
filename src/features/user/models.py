"""User domain models."""

from pwdlib import PasswordHash
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base import Base, TimestampMixin

# Stored instead of a hash for accounts created through Google sign-in
OAUTH_PASSWORD_SENTINEL = "Google"

pwd_hasher = PasswordHash.recommended()


class User(Base, TimestampMixin):
    """User model for authentication and profiles.

    The user's currently valid refresh tokens live in the ``refresh_tokens``
    table (see ``src.features.auth.models.RefreshToken``).
    """

    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Identity
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    picture: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Authentication
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    @property
    def is_oauth_account(self) -> bool:
        """Accounts created by Google sign-in have no local password."""
        return self.hashed_password == OAUTH_PASSWORD_SENTINEL

    def verify_password(self, plain_password: str) -> bool:
        """Verify a password against the hash using Argon2.

        Salt is automatically extracted from the hash by pwdlib.
        """
        if self.is_oauth_account:
            return False
        return pwd_hasher.verify(plain_password, self.hashed_password)

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using Argon2.

        Salt is automatically generated and embedded in the returned hash.
        """
        return pwd_hasher.hash(password)
