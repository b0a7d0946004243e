"""Comment router (API endpoints)."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session
from src.features.auth.dependencies import authorize
from src.features.auth.schemas import AuthIdentity

from .schemas import CommentCreateRequest, CommentDeletedResponse, CommentResponse, CommentUpdateRequest
from .service import CommentService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/comment", tags=["Comments"])


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    data: CommentCreateRequest,
    identity: AuthIdentity = Depends(authorize),
    session: AsyncSession = Depends(get_db_session),
):
    """Comment on a post as the authenticated user."""
    comment = await CommentService.create_comment(session, identity.id, data)
    await session.commit()
    return CommentResponse.model_validate(comment)


@router.get("", response_model=list[CommentResponse])
async def list_comments(
    post_id: int | None = Query(None, description="Only comments on this post"),
    session: AsyncSession = Depends(get_db_session),
):
    """List comments, oldest first."""
    comments = await CommentService.list_comments(session, post_id)
    return [CommentResponse.model_validate(c) for c in comments]


@router.get("/{comment_id}", response_model=CommentResponse)
async def get_comment(comment_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get comment by ID."""
    comment = await CommentService.get_comment(session, comment_id)
    return CommentResponse.model_validate(comment)


@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int,
    data: CommentUpdateRequest,
    identity: AuthIdentity = Depends(authorize),
    session: AsyncSession = Depends(get_db_session),
):
    """Edit one of your own comments."""
    comment = await CommentService.update_comment(session, comment_id, identity.id, data)
    await session.commit()
    return CommentResponse.model_validate(comment)


@router.delete("/{comment_id}", response_model=CommentDeletedResponse)
async def delete_comment(
    comment_id: int,
    identity: AuthIdentity = Depends(authorize),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete one of your own comments."""
    deleted_id = await CommentService.delete_comment(session, comment_id, identity.id)
    await session.commit()
    return CommentDeletedResponse(id=deleted_id)
