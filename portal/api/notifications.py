"""
Notification API endpoints.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.auth import get_viewer_session
from portal.core.database import get_db
from portal.core.exceptions import NotFoundError, PermissionDeniedError, InternalError
from portal.core.session import ViewerSession
from portal.schemas.notification import NotificationResponse
from portal.services.notification import NotificationService

router = APIRouter()


@router.get("/notifications", response_model=List[NotificationResponse])
async def list_notifications(
    unread_only: bool = Query(False, description="Only unread notifications"),
    limit: int = Query(50, ge=1, le=200, description="Maximum number of notifications"),
    viewer: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db)
):
    """List the caller's notifications, newest first."""
    try:
        service = NotificationService(db)
        return await service.list_notifications(viewer, unread_only=unread_only, limit=limit)
    except InternalError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)


@router.patch("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    viewer: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db)
):
    """Mark one of the caller's notifications as read."""
    try:
        service = NotificationService(db)
        return await service.mark_read(notification_id, viewer)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    except InternalError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
