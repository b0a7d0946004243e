"""Post router (API endpoints)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session
from src.features.auth.dependencies import authorize
from src.features.auth.schemas import AuthIdentity

from .schemas import PostCreateRequest, PostListParams, PostResponse, PostUpdateRequest
from .service import PostService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/post", tags=["Posts"])


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreateRequest,
    identity: AuthIdentity = Depends(authorize),
    session: AsyncSession = Depends(get_db_session),
):
    """Publish a post as the authenticated user."""
    post = await PostService.create_post(session, identity.id, data)
    await session.commit()
    return post


@router.get("", response_model=list[PostResponse])
async def list_posts(
    params: Annotated[PostListParams, Query()],
    session: AsyncSession = Depends(get_db_session),
):
    """List posts, newest first.

    - `sender`: Filter by author id
    - `start`: Number of posts to skip (default: 0)
    - `limit`: Page size (default: 10, max: 100)
    """
    return await PostService.list_posts(session, params, params.sender)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get post by ID."""
    return await PostService.get_post(session, post_id)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    data: PostUpdateRequest,
    identity: AuthIdentity = Depends(authorize),
    session: AsyncSession = Depends(get_db_session),
):
    """Edit one of your own posts."""
    post = await PostService.update_post(session, post_id, identity.id, data)
    await session.commit()
    return post


@router.delete("/{post_id}", response_model=PostResponse)
async def delete_post(
    post_id: int,
    identity: AuthIdentity = Depends(authorize),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete one of your own posts; returns the deleted post."""
    post = await PostService.delete_post(session, post_id, identity.id)
    await session.commit()
    return post


@router.post("/{post_id}/like", response_model=PostResponse)
async def toggle_like(
    post_id: int,
    identity: AuthIdentity = Depends(authorize),
    session: AsyncSession = Depends(get_db_session),
):
    """Like a post, or unlike it if you already do."""
    post = await PostService.toggle_like(session, post_id, identity.id)
    await session.commit()
    return post
