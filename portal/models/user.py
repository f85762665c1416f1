"""
User and project models for organizations, their teams and clients.
"""
from datetime import datetime
from typing import Optional, List
from sqlalchemy import String, DateTime, Enum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from portal.core.database import Base
from portal.core.roles import Role


class User(Base):
    """A portal user: organization admin, team member or client."""
    
    __tablename__ = "users"
    
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    
    role: Mapped[Role] = mapped_column(
        Enum(Role, values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=Role.CLIENT
    )
    organization_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), 
        server_default=func.now()
    )
    
    project_assignments: Mapped[List["ProjectTeamMember"]] = relationship(
        "ProjectTeamMember",
        back_populates="user"
    )
    
    def __repr__(self) -> str:
        return f"<User(id={self.id}, name='{self.name}', role='{self.role}')>"


class Project(Base):
    """Client project owned by an organization."""
    
    __tablename__ = "projects"
    
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    organization_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    client_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=True
    )
    
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), 
        server_default=func.now()
    )
    
    client: Mapped[Optional["User"]] = relationship("User", foreign_keys=[client_id])
    team_members: Mapped[List["ProjectTeamMember"]] = relationship(
        "ProjectTeamMember",
        back_populates="project",
        cascade="all, delete-orphan"
    )
    
    def __repr__(self) -> str:
        return f"<Project(id={self.id}, title='{self.title}')>"


class ProjectTeamMember(Base):
    """Assignment of a team member to a project."""
    
    __tablename__ = "project_team_members"
    __table_args__ = (UniqueConstraint("project_id", "user_id"),)
    
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    
    project: Mapped["Project"] = relationship("Project", back_populates="team_members")
    user: Mapped["User"] = relationship("User", back_populates="project_assignments")
