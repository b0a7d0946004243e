"""User schemas (DTOs)."""

from datetime import datetime

from pydantic import EmailStr, Field

from src.shared.schemas import CamelModel


# Request schemas
class UserRegisterRequest(CamelModel):
    """User registration request."""

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)


class UserUpdateRequest(CamelModel):
    """Profile update request; omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    picture: str | None = Field(None, max_length=500)


# Response schemas
class PublicUserResponse(CamelModel):
    """Profile fields visible to everyone."""

    id: int
    username: str
    name: str
    email: str
    picture: str | None = None


class UserResponse(PublicUserResponse):
    """Profile returned to the account owner."""

    created_at: datetime
    updated_at: datetime
