"""
Comment schemas for API requests and responses.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from portal.core.roles import Role
from portal.models.comment import CommentStatus, CommentPriority


class CommentCreate(BaseModel):
    """Schema for creating a new comment."""
    project_id: int = Field(..., description="Project the comment belongs to")
    parent_id: Optional[int] = Field(None, description="Parent comment ID for threaded replies")
    content: str = Field(..., min_length=1, max_length=10000, description="Comment content")
    mentions: List[int] = Field(default_factory=list, description="Explicitly mentioned user IDs")
    attachments: List[str] = Field(default_factory=list, description="Attached file URLs")
    priority: CommentPriority = CommentPriority.NORMAL
    tags: List[str] = Field(default_factory=list, description="Explicit tags, merged with #tags from content")


class CommentUpdate(BaseModel):
    """Schema for updating a comment."""
    content: Optional[str] = Field(None, min_length=1, max_length=10000, description="Updated comment content")
    priority: Optional[CommentPriority] = None
    tags: Optional[List[str]] = None
    attachments: Optional[List[str]] = None


class CommentStatusUpdate(BaseModel):
    """Schema for moving a comment to another status."""
    status: CommentStatus


class CommentResolve(BaseModel):
    """Schema for resolving a comment."""
    resolved_by: Optional[int] = Field(None, description="Resolving user; defaults to the caller")


class CommentResponse(BaseModel):
    """Comment as returned by the API; ``replies`` is filled only for threads."""
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    project_id: int
    parent_id: Optional[int] = None
    author_id: int
    author_type: str
    content: str
    mentions: List[int] = []
    attachments: List[str] = []
    tags: List[str] = []
    status: CommentStatus = CommentStatus.OPEN
    priority: CommentPriority = CommentPriority.NORMAL
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[int] = None
    replies: List['CommentResponse'] = []


class MentionCandidate(BaseModel):
    """A user the caller may mention in a project comment."""
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    name: str
    avatar: Optional[str] = None
    role: Role


# Enable forward references for recursive model
CommentResponse.model_rebuild()
