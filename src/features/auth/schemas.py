"""Authentication schemas (DTOs)."""

from pydantic import BaseModel, ConfigDict, Field

from src.shared.schemas import CamelModel


class AuthIdentity(BaseModel):
    """Identity decoded from a verified token's claims."""

    model_config = ConfigDict(extra="ignore")

    id: int


# Request schemas
class UserLoginRequest(CamelModel):
    """Login request."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class GoogleLoginRequest(CamelModel):
    """Google sign-in request carrying the authorization code from the browser."""

    code: str = Field(..., min_length=1)


# Response schemas
class TokenPairResponse(CamelModel):
    """Freshly issued access and refresh tokens."""

    access_token: str
    refresh_token: str


class LoginResponse(TokenPairResponse):
    """Login response: token pair plus the user's id."""

    id: int
