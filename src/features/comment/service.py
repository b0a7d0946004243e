"""Comment service layer."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.features.post.exceptions import PostNotFound
from src.features.post.models import Post

from .exceptions import CommentNotFound
from .models import Comment
from .schemas import CommentCreateRequest, CommentUpdateRequest

logger = logging.getLogger(__name__)


class CommentService:
    """Service for comment operations."""

    @staticmethod
    async def create_comment(session: AsyncSession, user_id: int, data: CommentCreateRequest) -> Comment:
        """Comment on a post as ``user_id``.

        Raises:
            PostNotFound: If the post does not exist

        """
        if await session.get(Post, data.post_id) is None:
            raise PostNotFound(data.post_id)

        comment = Comment(post_id=data.post_id, user_id=user_id, content=data.content)
        session.add(comment)
        await session.flush()
        await session.refresh(comment, attribute_names=["user"])

        logger.info(f"Comment {comment.id} added to post {data.post_id} by user {user_id}")
        return comment

    @staticmethod
    async def list_comments(session: AsyncSession, post_id: int | None = None) -> list[Comment]:
        """List comments oldest first, optionally only those of one post."""
        stmt = select(Comment)
        if post_id is not None:
            stmt = stmt.where(Comment.post_id == post_id)
        stmt = stmt.order_by(Comment.created_at, Comment.id)

        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_comment(session: AsyncSession, comment_id: int) -> Comment:
        """Get comment by ID.

        Raises:
            CommentNotFound: If the comment does not exist

        """
        comment = await session.get(Comment, comment_id)
        if comment is None:
            raise CommentNotFound(comment_id)
        return comment

    @staticmethod
    async def update_comment(
        session: AsyncSession, comment_id: int, user_id: int, data: CommentUpdateRequest
    ) -> Comment:
        """Edit one of the caller's own comments.

        Raises:
            CommentNotFound: If the comment does not exist or belongs to someone else

        """
        comment = await CommentService._load_owned(session, comment_id, user_id)
        comment.content = data.content
        await session.flush()

        logger.info(f"Comment {comment_id} updated by user {user_id}")
        return comment

    @staticmethod
    async def delete_comment(session: AsyncSession, comment_id: int, user_id: int) -> int:
        """Delete one of the caller's own comments.

        Raises:
            CommentNotFound: If the comment does not exist or belongs to someone else

        """
        comment = await CommentService._load_owned(session, comment_id, user_id)
        await session.delete(comment)
        await session.flush()

        logger.info(f"Comment {comment_id} deleted by user {user_id}")
        return comment_id

    @staticmethod
    async def _load_owned(session: AsyncSession, comment_id: int, user_id: int) -> Comment:
        comment = await session.get(Comment, comment_id)
        if comment is None or comment.user_id != user_id:
            raise CommentNotFound(comment_id)
        return comment
