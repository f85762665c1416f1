"""
Project comment model for threaded project discussions.
"""
import enum
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional
from sqlalchemy import String, Text, DateTime, ForeignKey, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from portal.core.database import Base


class CommentStatus(str, enum.Enum):
    """Comment workflow status."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class CommentPriority(str, enum.Enum):
    """Comment priority."""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


# Resolved is terminal
STATUS_TRANSITIONS: Dict[CommentStatus, FrozenSet[CommentStatus]] = {
    CommentStatus.OPEN: frozenset({CommentStatus.IN_PROGRESS, CommentStatus.RESOLVED}),
    CommentStatus.IN_PROGRESS: frozenset({CommentStatus.RESOLVED}),
    CommentStatus.RESOLVED: frozenset(),
}


def can_transition(current: CommentStatus, target: CommentStatus) -> bool:
    return CommentStatus(target) in STATUS_TRANSITIONS[CommentStatus(current)]


class ProjectComment(Base):
    """
    A comment on a project.
    
    Threads are stored flat: ``parent_id`` is a plain key into this table and
    reply trees are assembled in memory when comments are listed.
    """
    
    __tablename__ = "project_comments"
    
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    
    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    parent_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True
    )
    author_type: Mapped[str] = mapped_column(String(20), nullable=False)
    
    content: Mapped[str] = mapped_column(Text, nullable=False)
    mentions: Mapped[List[int]] = mapped_column(JSON, default=list)
    attachments: Mapped[List[str]] = mapped_column(JSON, default=list)
    tags: Mapped[List[str]] = mapped_column(JSON, default=list)
    # Tags chosen by the author, as opposed to #words found in the content
    explicit_tags: Mapped[List[str]] = mapped_column(JSON, default=list)

    status: Mapped[str] = mapped_column(String(20), default=CommentStatus.OPEN.value)
    priority: Mapped[str] = mapped_column(String(20), default=CommentPriority.NORMAL.value)
    
    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), 
        server_default=func.now(),
        index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), 
        server_default=func.now(),
        onupdate=func.now()
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    
    def __repr__(self) -> str:
        return f"<ProjectComment(id={self.id}, project_id={self.project_id}, parent_id={self.parent_id})>"
