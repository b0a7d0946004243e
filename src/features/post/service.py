"""Post service layer."""

import logging
from collections import defaultdict

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.features.comment.models import Comment
from src.shared.pagination.pagination import OffsetParams

from .exceptions import PostNotFound
from .models import Post, PostLike
from .schemas import PostCreateRequest, PostResponse, PostUpdateRequest

logger = logging.getLogger(__name__)


class PostService:
    """Service for post operations.

    Every public method returns ``PostResponse`` objects so likes are always
    reported alongside the post.
    """

    @staticmethod
    async def create_post(session: AsyncSession, user_id: int, data: PostCreateRequest) -> PostResponse:
        """Publish a new post as ``user_id``."""
        post = Post(user_id=user_id, message=data.message, image_url=data.image_url)
        session.add(post)
        await session.flush()

        logger.info(f"Post {post.id} created by user {user_id}")
        return PostService._to_response(post, [])

    @staticmethod
    async def list_posts(
        session: AsyncSession, pagination: OffsetParams, sender: int | None = None
    ) -> list[PostResponse]:
        """List posts newest first, optionally only those of one author."""
        stmt = select(Post)
        if sender is not None:
            stmt = stmt.where(Post.user_id == sender)
        stmt = stmt.order_by(Post.created_at.desc(), Post.id.desc()).offset(pagination.start).limit(pagination.limit)

        result = await session.execute(stmt)
        posts = list(result.scalars().all())

        likes = await PostService._likes_by_post(session, [post.id for post in posts])
        return [PostService._to_response(post, likes[post.id]) for post in posts]

    @staticmethod
    async def get_post(session: AsyncSession, post_id: int) -> PostResponse:
        """Get a post by ID.

        Raises:
            PostNotFound: If the post does not exist

        """
        post = await PostService._load(session, post_id)
        return await PostService._with_likes(session, post)

    @staticmethod
    async def update_post(
        session: AsyncSession, post_id: int, user_id: int, data: PostUpdateRequest
    ) -> PostResponse:
        """Edit one of the caller's own posts.

        Raises:
            PostNotFound: If the post does not exist or belongs to someone else

        """
        post = await PostService._load_owned(session, post_id, user_id)

        for key, value in data.model_dump(exclude_unset=True).items():
            if value is not None or key == "image_url":
                setattr(post, key, value)

        await session.flush()
        logger.info(f"Post {post_id} updated by user {user_id}")
        return await PostService._with_likes(session, post)

    @staticmethod
    async def delete_post(session: AsyncSession, post_id: int, user_id: int) -> PostResponse:
        """Delete one of the caller's own posts and return it as it was.

        Raises:
            PostNotFound: If the post does not exist or belongs to someone else

        """
        post = await PostService._load_owned(session, post_id, user_id)
        response = await PostService._with_likes(session, post)

        # Dependent rows are removed explicitly; SQLite does not enforce ON DELETE CASCADE by default
        await session.execute(delete(Comment).where(Comment.post_id == post_id))
        await session.execute(delete(PostLike).where(PostLike.post_id == post_id))
        await session.delete(post)
        await session.flush()

        logger.info(f"Post {post_id} deleted by user {user_id}")
        return response

    @staticmethod
    async def toggle_like(session: AsyncSession, post_id: int, user_id: int) -> PostResponse:
        """Like the post, or remove the like if the caller already likes it.

        Raises:
            PostNotFound: If the post does not exist

        """
        await PostService._load(session, post_id)

        stmt = delete(PostLike).where(PostLike.post_id == post_id, PostLike.user_id == user_id)
        result = await session.execute(stmt)
        if result.rowcount == 0:  # type: ignore[attr-defined]
            session.add(PostLike(post_id=post_id, user_id=user_id))
            try:
                await session.flush()
            except IntegrityError:
                # A concurrent request liked it first
                await session.rollback()

        post = await PostService._load(session, post_id)
        return await PostService._with_likes(session, post)

    @staticmethod
    async def _load(session: AsyncSession, post_id: int) -> Post:
        post = await session.get(Post, post_id, populate_existing=True)
        if post is None:
            raise PostNotFound(post_id)
        return post

    @staticmethod
    async def _load_owned(session: AsyncSession, post_id: int, user_id: int) -> Post:
        # Someone else's post is reported exactly like a missing one
        post = await session.get(Post, post_id)
        if post is None or post.user_id != user_id:
            raise PostNotFound(post_id)
        return post

    @staticmethod
    async def _likes_by_post(session: AsyncSession, post_ids: list[int]) -> dict[int, list[int]]:
        likes: dict[int, list[int]] = defaultdict(list)
        if not post_ids:
            return likes

        stmt = (
            select(PostLike.post_id, PostLike.user_id)
            .where(PostLike.post_id.in_(post_ids))
            .order_by(PostLike.id)
        )
        result = await session.execute(stmt)
        for post_id, liker_id in result.all():
            likes[post_id].append(liker_id)
        return likes

    @staticmethod
    async def _with_likes(session: AsyncSession, post: Post) -> PostResponse:
        likes = await PostService._likes_by_post(session, [post.id])
        return PostService._to_response(post, likes[post.id])

    @staticmethod
    def _to_response(post: Post, likes: list[int]) -> PostResponse:
        return PostResponse(
            id=post.id,
            user_id=post.user_id,
            message=post.message,
            image_url=post.image_url,
            likes=likes,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )
