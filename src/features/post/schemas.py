"""Post schemas (DTOs)."""

from datetime import datetime

from pydantic import Field

from src.shared.pagination.pagination import OffsetParams
from src.shared.schemas import CamelModel


# Request schemas
class PostCreateRequest(CamelModel):
    """New post."""

    message: str = Field(..., min_length=1)
    image_url: str | None = Field(None, max_length=500)


class PostUpdateRequest(CamelModel):
    """Post edit; omitted fields are left unchanged."""

    message: str | None = Field(None, min_length=1)
    image_url: str | None = Field(None, max_length=500)


# Response schemas
class PostResponse(CamelModel):
    """Post with the ids of the users who like it."""

    id: int
    user_id: int
    message: str
    image_url: str | None = None
    likes: list[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


# Query schemas
class PostListParams(OffsetParams):
    """Query string of the post listing."""

    sender: int | None = Field(None, description="Only posts of this user id")
