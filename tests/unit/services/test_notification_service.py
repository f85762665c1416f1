"""
Unit tests for notification service.
"""
import pytest

from portal.core.exceptions import NotFoundError, PermissionDeniedError
from portal.services.notification import NotificationService
from tests.conftest import session_for


@pytest.mark.unit
class TestNotificationService:
    """Test cases for NotificationService."""
    
    @pytest.fixture
    def notification_service(self, test_db):
        return NotificationService(test_db)
    
    async def _add(self, service, db, user, title="Ping"):
        notification = service.add_notification(
            user_id=user.id, type="mention", title=title, message="You were mentioned"
        )
        await db.commit()
        return notification
    
    async def test_list_only_viewer_notifications(self, notification_service, test_db, agency):
        await self._add(notification_service, test_db, agency["admin"], "first")
        await self._add(notification_service, test_db, agency["admin"], "second")
        await self._add(notification_service, test_db, agency["client"], "other")
        
        notifications = await notification_service.list_notifications(session_for(agency["admin"]))
        
        assert sorted(n.title for n in notifications) == ["first", "second"]
    
    async def test_mark_read(self, notification_service, test_db, agency):
        notification = await self._add(notification_service, test_db, agency["admin"])
        viewer = session_for(agency["admin"])
        
        updated = await notification_service.mark_read(notification.id, viewer)
        
        assert updated.is_read is True
        assert updated.read_at is not None
        assert await notification_service.list_notifications(viewer, unread_only=True) == []
    
    async def test_mark_read_of_other_user_denied(self, notification_service, test_db, agency):
        notification = await self._add(notification_service, test_db, agency["admin"])
        
        with pytest.raises(PermissionDeniedError):
            await notification_service.mark_read(notification.id, session_for(agency["client"]))
    
    async def test_mark_read_missing(self, notification_service, agency):
        with pytest.raises(NotFoundError):
            await notification_service.mark_read(12345, session_for(agency["admin"]))
