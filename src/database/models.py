"""Import every model module so Base.metadata knows all tables."""

from src.features.auth.models import RefreshToken
from src.features.comment.models import Comment
from src.features.post.models import Post, PostLike
from src.features.user.models import User

__all__ = ["Comment", "Post", "PostLike", "RefreshToken", "User"]
