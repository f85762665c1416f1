"""
Comment API endpoints for project discussions.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.auth import get_viewer_session
from portal.core.config import settings
from portal.core.database import get_db
from portal.core.exceptions import (
    NotFoundError, PermissionDeniedError, ValidationError, InternalError
)
from portal.core.session import ViewerSession
from portal.schemas.comment import (
    CommentCreate, CommentUpdate, CommentResponse, CommentResolve,
    CommentStatusUpdate, MentionCandidate
)
from portal.services.comment import CommentService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/projects/{project_id}/comments", response_model=List[CommentResponse])
async def get_project_comments(
    project_id: int,
    sort: str = Query(settings.DEFAULT_COMMENT_SORT, description="Root order: newest, oldest or priority"),
    status_filter: Optional[str] = Query(None, alias="status", description="Only roots with this status"),
    viewer: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the comment threads of a project.

    - **project_id**: ID of the project
    - **sort**: Ordering of root comments (replies keep chronological order)
    - **status**: open, in_progress, resolved or all
    """
    try:
        service = CommentService(db)
        return await service.list_project_comments(
            project_id, viewer, sort=sort, status=status_filter
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except InternalError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)


@router.get("/projects/{project_id}/available-users", response_model=List[MentionCandidate])
async def get_available_users(
    project_id: int,
    viewer: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db)
):
    """Get the users the caller may mention in this project's comments."""
    try:
        service = CommentService(db)
        return await service.get_mention_candidates(project_id, viewer)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)


@router.post("/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment_data: CommentCreate,
    viewer: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new comment.

    - **project_id**: Project to comment on (required)
    - **content**: Comment content; `@name` mentions and `#tags` are extracted
    - **parent_id**: Parent comment ID for threaded replies (optional)
    """
    try:
        service = CommentService(db)
        comment = await service.create_comment(comment_data, viewer)
        return CommentResponse.model_validate(comment)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except InternalError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)


@router.get("/comments/{comment_id}", response_model=CommentResponse)
async def get_comment(
    comment_id: int,
    viewer: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db)
):
    """Get a specific comment by ID."""
    try:
        service = CommentService(db)
        comment = await service.get_comment(comment_id, viewer)
        return CommentResponse.model_validate(comment)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)


@router.get("/comments/{comment_id}/replies", response_model=List[CommentResponse])
async def get_comment_replies(
    comment_id: int,
    viewer: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db)
):
    """Get the direct replies to a comment in chronological order."""
    try:
        service = CommentService(db)
        replies = await service.get_replies(comment_id, viewer)
        return [CommentResponse.model_validate(reply) for reply in replies]
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)


@router.put("/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int,
    comment_data: CommentUpdate,
    viewer: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db)
):
    """
    Update an existing comment.

    Only the comment author or an admin can update a comment.
    """
    try:
        service = CommentService(db)
        comment = await service.update_comment(comment_id, comment_data, viewer)
        return CommentResponse.model_validate(comment)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except InternalError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)


@router.patch("/comments/{comment_id}/status", response_model=CommentResponse)
async def change_comment_status(
    comment_id: int,
    status_data: CommentStatusUpdate,
    viewer: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db)
):
    """
    Move a comment to another status.

    Allowed: open → in_progress, open → resolved, in_progress → resolved.
    """
    try:
        service = CommentService(db)
        comment = await service.change_status(comment_id, status_data.status, viewer)
        return CommentResponse.model_validate(comment)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except InternalError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)


@router.patch("/comments/{comment_id}/resolve", response_model=CommentResponse)
async def resolve_comment(
    comment_id: int,
    resolve_data: Optional[CommentResolve] = None,
    viewer: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db)
):
    """Resolve a comment. `resolved_by` defaults to the caller."""
    try:
        service = CommentService(db)
        resolved_by = resolve_data.resolved_by if resolve_data else None
        comment = await service.resolve_comment(comment_id, viewer, resolved_by=resolved_by)
        return CommentResponse.model_validate(comment)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except InternalError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: int,
    viewer: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a comment and its direct replies.

    Only the comment author or an admin can delete a comment.
    """
    try:
        service = CommentService(db)
        await service.delete_comment(comment_id, viewer)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    except InternalError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
