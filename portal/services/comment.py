"""
Comment service for project discussions.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import (
    NotFoundError, PermissionDeniedError, ValidationError, InternalError
)
from portal.core.roles import Role, can_mention
from portal.core.session import ViewerSession
from portal.models.comment import ProjectComment, CommentStatus, can_transition
from portal.models.user import User, Project, ProjectTeamMember
from portal.schemas.comment import (
    CommentCreate, CommentUpdate, CommentResponse, MentionCandidate
)
from portal.services.comment_tree import (
    SORT_ORDERS, build_tree, extract_mentions, filter_roots_by_status, merge_tags, sort_roots
)
from portal.services.notification import NotificationService

logger = logging.getLogger(__name__)


class CommentService:
    """Service for managing project comment operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    async def list_project_comments(
        self,
        project_id: int,
        viewer: ViewerSession,
        sort: str = "newest",
        status: Optional[str] = None
    ) -> List[CommentResponse]:
        """
        List a project's comments as reply threads.

        Args:
            project_id: Project ID
            viewer: Session of the requesting user
            sort: Root ordering, one of newest, oldest or priority
            status: Keep only root comments with this status

        Returns:
            Root comments with nested replies

        Raises:
            NotFoundError: If project not found
            PermissionDeniedError: If the viewer cannot access the project
            ValidationError: If sort or status is unknown
            InternalError: If listing fails
        """
        if sort not in SORT_ORDERS:
            raise ValidationError(f"Unknown sort order '{sort}'")
        if status not in (None, "all") and status not in {s.value for s in CommentStatus}:
            raise ValidationError(f"Unknown comment status '{status}'")

        try:
            await self._get_project_with_access_check(project_id, viewer)

            stmt = (
                select(ProjectComment)
                .where(ProjectComment.project_id == project_id)
                .order_by(ProjectComment.created_at, ProjectComment.id)
            )
            result = await self.db.execute(stmt)
            flat = [CommentResponse.model_validate(c) for c in result.scalars().all()]

            roots = filter_roots_by_status(build_tree(flat), status)
            return sort_roots(roots, sort)

        except (NotFoundError, PermissionDeniedError):
            raise
        except Exception as e:
            logger.error(f"Error listing comments for project {project_id}: {e}")
            raise InternalError("Failed to list comments")

    async def get_comment(self, comment_id: int, viewer: ViewerSession) -> ProjectComment:
        """
        Get a comment by ID.

        Raises:
            NotFoundError: If comment not found
            PermissionDeniedError: If the viewer cannot access its project
        """
        comment = await self._get_comment(comment_id)
        await self._get_project_with_access_check(comment.project_id, viewer)
        return comment

    async def get_replies(self, parent_id: int, viewer: ViewerSession) -> List[ProjectComment]:
        """Get the direct replies to a comment, oldest first."""
        parent = await self.get_comment(parent_id, viewer)

        stmt = (
            select(ProjectComment)
            .where(ProjectComment.parent_id == parent.id)
            .order_by(ProjectComment.created_at, ProjectComment.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_mention_candidates(
        self,
        project_id: int,
        viewer: ViewerSession
    ) -> List[MentionCandidate]:
        """
        List the users the viewer may mention on a project.

        Admins may mention the project's client and its team members; team
        members and clients may mention the organization's admins. The viewer
        is never a candidate.

        Raises:
            NotFoundError: If project not found
            PermissionDeniedError: If the viewer cannot access the project
        """
        project = await self._get_project_with_access_check(project_id, viewer)
        return await self._mention_candidates(project, viewer)

    async def _mention_candidates(
        self,
        project: Project,
        viewer: ViewerSession
    ) -> List[MentionCandidate]:
        if viewer.role == Role.ADMIN:
            users: List[User] = []
            if project.client_id is not None:
                client = await self.db.get(User, project.client_id)
                if client is not None:
                    users.append(client)
            stmt = (
                select(User)
                .join(ProjectTeamMember, ProjectTeamMember.user_id == User.id)
                .where(ProjectTeamMember.project_id == project.id)
                .order_by(ProjectTeamMember.id)
            )
            result = await self.db.execute(stmt)
            users.extend(result.scalars().all())
        else:
            stmt = (
                select(User)
                .where(
                    User.organization_id == project.organization_id,
                    User.role == Role.ADMIN
                )
                .order_by(User.id)
            )
            result = await self.db.execute(stmt)
            users = list(result.scalars().all())

        candidates: List[MentionCandidate] = []
        seen = {viewer.user_id}
        for user in users:
            if user.id in seen or not can_mention(viewer.role, user.role):
                continue
            seen.add(user.id)
            candidates.append(MentionCandidate.model_validate(user))
        return candidates

    async def create_comment(
        self,
        comment_data: CommentCreate,
        viewer: ViewerSession
    ) -> ProjectComment:
        """
        Create a new comment on a project.

        ``@name`` tokens naming a mention candidate become mentions, and each
        mentioned user gets a notification. Explicit mention IDs are kept only
        if they are candidates too. ``#word`` tokens are merged into the tags.

        Raises:
            NotFoundError: If project or parent comment not found
            PermissionDeniedError: If the viewer cannot access the project
            ValidationError: If the parent is on another project
            InternalError: If creation fails
        """
        try:
            project = await self._get_project_with_access_check(comment_data.project_id, viewer)

            if comment_data.parent_id is not None:
                parent = await self._get_comment(comment_data.parent_id)
                if parent.project_id != project.id:
                    raise ValidationError("Parent comment must be on the same project")

            candidates = await self._mention_candidates(project, viewer)
            mentions = self._resolve_mentions(comment_data.content, comment_data.mentions, candidates)
            explicit_tags = merge_tags(comment_data.tags, "")

            comment = ProjectComment(
                project_id=project.id,
                parent_id=comment_data.parent_id,
                author_id=viewer.user_id,
                author_type=viewer.role.value,
                content=comment_data.content,
                mentions=mentions,
                attachments=list(comment_data.attachments),
                tags=merge_tags(explicit_tags, comment_data.content),
                explicit_tags=explicit_tags,
                status=CommentStatus.OPEN.value,
                priority=comment_data.priority.value,
            )
            self.db.add(comment)
            await self.db.flush()

            self._notify_mentions(comment, mentions, project, viewer)

            await self.db.commit()
            await self.db.refresh(comment)

            logger.info(
                f"Created comment {comment.id} on project {project.id} by user {viewer.user_id} "
                f"({len(mentions)} mentions)"
            )
            return comment

        except (NotFoundError, PermissionDeniedError, ValidationError):
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error creating comment: {e}")
            raise InternalError("Failed to create comment")

    async def update_comment(
        self,
        comment_id: int,
        comment_data: CommentUpdate,
        viewer: ViewerSession
    ) -> ProjectComment:
        """
        Update an existing comment.

        Changing the content re-extracts mentions and tags. Mentions are
        resolved against the comment author's candidates, whoever makes the
        edit, and users mentioned for the first time are notified in the
        author's name. ``#words`` removed from the content drop out of the
        tags; explicitly chosen tags stay until new ``tags`` are sent.

        Raises:
            NotFoundError: If comment or its author not found
            PermissionDeniedError: If the viewer is neither author nor admin
            InternalError: If update fails
        """
        try:
            comment = await self._get_comment(comment_id)
            project = await self._get_project_with_access_check(comment.project_id, viewer)
            self._check_author_or_admin(comment, viewer, "update")

            if comment_data.content is not None and comment_data.content != comment.content:
                author = await self._get_author_session(comment)
                comment.content = comment_data.content
                candidates = await self._mention_candidates(project, author)
                mentions = self._resolve_mentions(comment.content, [], candidates)
                new_mentions = [m for m in mentions if m not in (comment.mentions or [])]
                comment.mentions = mentions
                self._notify_mentions(comment, new_mentions, project, author)

            if comment_data.tags is not None:
                comment.explicit_tags = merge_tags(comment_data.tags, "")
            if comment_data.content is not None or comment_data.tags is not None:
                comment.tags = merge_tags(comment.explicit_tags or [], comment.content)

            if comment_data.priority is not None:
                comment.priority = comment_data.priority.value
            if comment_data.attachments is not None:
                comment.attachments = list(comment_data.attachments)

            await self.db.commit()
            await self.db.refresh(comment)

            logger.info(f"Updated comment {comment_id} by user {viewer.user_id}")
            return comment

        except (NotFoundError, PermissionDeniedError, ValidationError):
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error updating comment {comment_id}: {e}")
            raise InternalError("Failed to update comment")

    async def delete_comment(self, comment_id: int, viewer: ViewerSession) -> None:
        """
        Delete a comment together with its direct replies.

        Deeper descendants stay in place and show up as orphan roots on the
        next listing.

        Raises:
            NotFoundError: If comment not found
            PermissionDeniedError: If the viewer is neither author nor admin
            InternalError: If deletion fails
        """
        try:
            comment = await self._get_comment(comment_id)
            await self._get_project_with_access_check(comment.project_id, viewer)
            self._check_author_or_admin(comment, viewer, "delete")

            result = await self.db.execute(
                select(ProjectComment).where(ProjectComment.parent_id == comment.id)
            )
            for reply in result.scalars().all():
                await self.db.delete(reply)
            await self.db.delete(comment)

            await self.db.commit()

            logger.info(f"Deleted comment {comment_id} by user {viewer.user_id}")

        except (NotFoundError, PermissionDeniedError):
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error deleting comment {comment_id}: {e}")
            raise InternalError("Failed to delete comment")

    async def resolve_comment(
        self,
        comment_id: int,
        viewer: ViewerSession,
        resolved_by: Optional[int] = None
    ) -> ProjectComment:
        """Resolve a comment, recording who resolved it and when."""
        return await self.change_status(
            comment_id, CommentStatus.RESOLVED, viewer, resolved_by=resolved_by
        )

    async def change_status(
        self,
        comment_id: int,
        new_status: CommentStatus,
        viewer: ViewerSession,
        resolved_by: Optional[int] = None
    ) -> ProjectComment:
        """
        Move a comment to another status.

        Raises:
            NotFoundError: If comment not found
            PermissionDeniedError: If the viewer cannot access its project
            ValidationError: If the transition is not allowed, or
                ``resolved_by`` is not a user in the viewer's organization
            InternalError: If the update fails
        """
        try:
            comment = await self._get_comment(comment_id)
            await self._get_project_with_access_check(comment.project_id, viewer)

            new_status = CommentStatus(new_status)
            if not can_transition(comment.status, new_status):
                raise ValidationError(
                    f"Cannot change comment status from {comment.status} to {new_status.value}"
                )

            if new_status == CommentStatus.RESOLVED:
                if resolved_by is not None and resolved_by != viewer.user_id:
                    resolver = await self.db.get(User, resolved_by)
                    if resolver is None or resolver.organization_id != viewer.organization_id:
                        raise ValidationError("Resolver must be a user in the same organization")
                comment.resolved_by = resolved_by if resolved_by is not None else viewer.user_id
                comment.resolved_at = datetime.now(timezone.utc)
            comment.status = new_status.value

            await self.db.commit()
            await self.db.refresh(comment)

            logger.info(f"Comment {comment_id} moved to {new_status.value} by user {viewer.user_id}")
            return comment

        except (NotFoundError, PermissionDeniedError, ValidationError):
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error changing status of comment {comment_id}: {e}")
            raise InternalError("Failed to update comment status")

    async def _get_comment(self, comment_id: int) -> ProjectComment:
        """Get comment by ID."""
        comment = await self.db.get(ProjectComment, comment_id)
        if not comment:
            raise NotFoundError(f"Comment with ID {comment_id} not found")
        return comment

    async def _get_author_session(self, comment: ProjectComment) -> ViewerSession:
        """Build a session for the comment's author."""
        author = await self.db.get(User, comment.author_id)
        if not author:
            raise NotFoundError(f"Author with ID {comment.author_id} not found")
        return ViewerSession.from_user(author)

    async def _get_project_with_access_check(self, project_id: int, viewer: ViewerSession) -> Project:
        """Get project and check the viewer may take part in its discussion."""
        project = await self.db.get(Project, project_id)
        if not project:
            raise NotFoundError(f"Project with ID {project_id} not found")

        if project.organization_id != viewer.organization_id:
            raise PermissionDeniedError("Project belongs to another organization")

        if viewer.role == Role.CLIENT and project.client_id != viewer.user_id:
            raise PermissionDeniedError("Clients can only access their own projects")

        if viewer.role == Role.TEAM_MEMBER:
            result = await self.db.execute(
                select(ProjectTeamMember.id).where(
                    ProjectTeamMember.project_id == project.id,
                    ProjectTeamMember.user_id == viewer.user_id
                )
            )
            if result.scalar_one_or_none() is None:
                raise PermissionDeniedError("Not assigned to this project")

        return project

    @staticmethod
    def _check_author_or_admin(comment: ProjectComment, viewer: ViewerSession, action: str) -> None:
        if comment.author_id != viewer.user_id and not viewer.is_admin:
            raise PermissionDeniedError(f"Only comment author or admin can {action} comment")

    @staticmethod
    def _resolve_mentions(
        content: str,
        explicit: List[int],
        candidates: List[MentionCandidate]
    ) -> List[int]:
        allowed = {candidate.id for candidate in candidates}
        mentioned = extract_mentions(content, candidates) | (set(explicit) & allowed)
        return sorted(mentioned)

    def _notify_mentions(
        self,
        comment: ProjectComment,
        user_ids: List[int],
        project: Project,
        viewer: ViewerSession
    ) -> None:
        for user_id in user_ids:
            self.notifications.add_notification(
                user_id=user_id,
                organization_id=project.organization_id,
                type="mention",
                title="You were mentioned in a comment",
                message=f"{viewer.name} mentioned you in {project.title}",
                data={"comment_id": comment.id, "project_id": project.id},
                action_url=f"/projects/{project.id}#comment-{comment.id}",
            )
