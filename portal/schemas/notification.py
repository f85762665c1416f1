"""
Notification schemas.
"""
from typing import Any, Dict, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    """Schema for notification response."""
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    user_id: int
    organization_id: Optional[int] = None
    type: str
    title: str
    message: str
    data: Dict[str, Any] = {}
    action_url: Optional[str] = None
    is_read: bool = False
    created_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
