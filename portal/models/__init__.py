"""
Database models package.
"""
from .user import User, Project, ProjectTeamMember
from .comment import ProjectComment, CommentStatus, CommentPriority, STATUS_TRANSITIONS, can_transition
from .notification import Notification

__all__ = [
    # Organization models
    "User",
    "Project",
    "ProjectTeamMember",
    
    # Interaction models
    "ProjectComment",
    "CommentStatus",
    "CommentPriority",
    "STATUS_TRANSITIONS",
    "can_transition",
    "Notification",
]
