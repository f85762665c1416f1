"""
Pytest configuration and shared fixtures.
"""
import pytest
from datetime import datetime, timezone
from typing import AsyncGenerator, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from portal.main import app
from portal.core.auth import create_token
from portal.core.database import Base, get_db
from portal.core.roles import Role
from portal.core.session import ViewerSession
from portal.models import User, Project, ProjectTeamMember, ProjectComment
from portal.schemas.comment import CommentResponse


# Test database URL (in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ORGANIZATION_ID = 1


@pytest.fixture
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    yield engine
    
    await engine.dispose()


@pytest.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    
    async with async_session() as session:
        yield session


# Factory helpers for creating test data
class UserFactory:
    """Factory for creating test users."""
    
    _counter = 0
    
    @classmethod
    def create_user(
        cls,
        name: Optional[str] = None,
        role: Role = Role.CLIENT,
        organization_id: int = ORGANIZATION_ID,
        **kwargs
    ) -> User:
        """Create a user instance (not persisted)."""
        cls._counter += 1
        name = name or f"user{cls._counter}"
        return User(
            name=name,
            email=f"{name.lower()}_{cls._counter}@example.com",
            role=role,
            organization_id=organization_id,
            **kwargs
        )
    
    @classmethod
    async def create_and_save_user(cls, db: AsyncSession, **kwargs) -> User:
        """Create and save a user to the database."""
        user = cls.create_user(**kwargs)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user


class CommentFactory:
    """Factory for creating test comments."""
    
    @staticmethod
    def create_response(
        id: int,
        parent_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
        **kwargs
    ) -> CommentResponse:
        """Create a flat comment as the API would return it."""
        values = {
            "project_id": 1,
            "author_id": 1,
            "author_type": Role.ADMIN.value,
            "content": f"comment {id}",
        }
        values.update(kwargs)
        return CommentResponse(
            id=id,
            parent_id=parent_id,
            created_at=created_at or datetime(2024, 1, 1, tzinfo=timezone.utc),
            **values
        )
    
    @staticmethod
    async def create_and_save_comment(
        db: AsyncSession,
        project: Project,
        author: User,
        content: str = "A comment",
        **kwargs
    ) -> ProjectComment:
        """Create and save a comment row directly, bypassing the service."""
        comment = ProjectComment(
            project_id=project.id,
            author_id=author.id,
            author_type=author.role.value,
            content=content,
            **kwargs
        )
        db.add(comment)
        await db.commit()
        await db.refresh(comment)
        return comment


@pytest.fixture
async def agency(test_db: AsyncSession) -> Dict[str, object]:
    """
    An organization with two admins, a team member, a client and one project.
    
    The team member is assigned to the project and the client owns it. A
    second organization's admin is included for cross-tenant checks.
    """
    admin = await UserFactory.create_and_save_user(test_db, name="Alice", role=Role.ADMIN)
    second_admin = await UserFactory.create_and_save_user(test_db, name="Bob", role=Role.ADMIN)
    member = await UserFactory.create_and_save_user(test_db, name="Tom", role=Role.TEAM_MEMBER)
    idle_member = await UserFactory.create_and_save_user(test_db, name="Ivy", role=Role.TEAM_MEMBER)
    client = await UserFactory.create_and_save_user(test_db, name="Carol", role=Role.CLIENT)
    outsider = await UserFactory.create_and_save_user(
        test_db, name="Olga", role=Role.ADMIN, organization_id=ORGANIZATION_ID + 1
    )
    
    project = Project(title="Website Redesign", organization_id=ORGANIZATION_ID, client_id=client.id)
    test_db.add(project)
    await test_db.commit()
    await test_db.refresh(project)
    
    test_db.add(ProjectTeamMember(project_id=project.id, user_id=member.id))
    await test_db.commit()
    
    return {
        "admin": admin,
        "second_admin": second_admin,
        "member": member,
        "idle_member": idle_member,
        "client": client,
        "outsider": outsider,
        "project": project,
    }


def session_for(user: User) -> ViewerSession:
    """Build the viewer session the auth dependency would produce for ``user``."""
    return ViewerSession.from_user(user)


def auth_headers(user: User) -> Dict[str, str]:
    """Bearer headers for ``user``."""
    return {"Authorization": f"Bearer {create_token(user.id)}"}


@pytest.fixture
async def test_client(test_db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override."""
    
    async def override_get_db():
        yield test_db
    
    app.dependency_overrides[get_db] = override_get_db
    
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    
    app.dependency_overrides.clear()
