"""
Notification service for in-app user notifications.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import NotFoundError, PermissionDeniedError, InternalError
from portal.core.session import ViewerSession
from portal.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for managing notifications."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    def add_notification(
        self,
        user_id: int,
        type: str,
        title: str,
        message: str,
        organization_id: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
        action_url: Optional[str] = None
    ) -> Notification:
        """
        Stage a notification in the current session.
        
        The caller owns the transaction and commits it together with the
        change that triggered the notification.
        """
        notification = Notification(
            user_id=user_id,
            organization_id=organization_id,
            type=type,
            title=title,
            message=message,
            data=data or {},
            action_url=action_url,
            is_read=False
        )
        self.db.add(notification)
        return notification
    
    async def list_notifications(
        self,
        viewer: ViewerSession,
        unread_only: bool = False,
        limit: int = 50
    ) -> List[Notification]:
        """List the viewer's notifications, newest first."""
        try:
            stmt = select(Notification).where(Notification.user_id == viewer.user_id)
            if unread_only:
                stmt = stmt.where(Notification.is_read.is_(False))
            stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
            
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Error listing notifications for user {viewer.user_id}: {e}")
            raise InternalError("Failed to list notifications")
    
    async def mark_read(self, notification_id: int, viewer: ViewerSession) -> Notification:
        """
        Mark one of the viewer's notifications as read.
        
        Raises:
            NotFoundError: If the notification does not exist
            PermissionDeniedError: If it belongs to another user
            InternalError: If the update fails
        """
        try:
            result = await self.db.execute(
                select(Notification).where(Notification.id == notification_id)
            )
            notification = result.scalar_one_or_none()
            if notification is None:
                raise NotFoundError(f"Notification with ID {notification_id} not found")
            if notification.user_id != viewer.user_id:
                raise PermissionDeniedError("Cannot modify another user's notification")
            
            if not notification.is_read:
                notification.is_read = True
                notification.read_at = datetime.now(timezone.utc)
                await self.db.commit()
            
            return notification
            
        except (NotFoundError, PermissionDeniedError):
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error marking notification {notification_id} read: {e}")
            raise InternalError("Failed to update notification")
