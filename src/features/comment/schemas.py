"""Comment schemas (DTOs)."""

from datetime import datetime

from pydantic import Field

from src.features.user.schemas import PublicUserResponse
from src.shared.schemas import CamelModel


# Request schemas
class CommentCreateRequest(CamelModel):
    """New comment on a post."""

    post_id: int
    content: str = Field(..., min_length=1)


class CommentUpdateRequest(CamelModel):
    """Comment edit."""

    content: str = Field(..., min_length=1)


# Response schemas
class CommentResponse(CamelModel):
    """Comment with its author's public profile."""

    id: int
    post_id: int
    user_id: int
    content: str
    user: PublicUserResponse
    created_at: datetime
    updated_at: datetime


class CommentDeletedResponse(CamelModel):
    """Id of a deleted comment."""

    id: int
