#!/usr/bin/env python3
"""
Initialize development database with a sample agency, project and threads.
"""
import asyncio
from sqlalchemy import select

from portal.core.auth import create_token
from portal.core.database import AsyncSessionLocal, init_db, close_db
from portal.core.roles import Role
from portal.models import User, Project, ProjectTeamMember, ProjectComment


async def seed_dev_database():
    """Create tables and load sample data unless users already exist."""
    try:
        await init_db()
        
        async with AsyncSessionLocal() as session:
            existing = await session.execute(select(User.id).limit(1))
            if existing.scalar_one_or_none() is not None:
                print("Database already contains users, skipping seed")
                return
            
            admin = User(name="Alice", email="alice@agency.test", role=Role.ADMIN, organization_id=1)
            member = User(name="Tom", email="tom@agency.test", role=Role.TEAM_MEMBER, organization_id=1)
            client = User(name="Carol", email="carol@client.test", role=Role.CLIENT, organization_id=1)
            session.add_all([admin, member, client])
            await session.flush()
            
            project = Project(title="Website Redesign", organization_id=1, client_id=client.id)
            session.add(project)
            await session.flush()
            session.add(ProjectTeamMember(project_id=project.id, user_id=member.id))
            
            kickoff = ProjectComment(
                project_id=project.id, author_id=admin.id, author_type="admin",
                content="Kickoff: first homepage mockups are up @Carol #design",
                mentions=[client.id], tags=["design"], explicit_tags=["design"]
            )
            session.add(kickoff)
            await session.flush()
            session.add_all([
                ProjectComment(
                    project_id=project.id, parent_id=kickoff.id, author_id=client.id,
                    author_type="client", content="Love the hero section, can we try a darker palette?",
                    priority="high"
                ),
                ProjectComment(
                    project_id=project.id, parent_id=kickoff.id, author_id=member.id,
                    author_type="team_member", content="Darker variant coming tomorrow #design",
                    tags=["design"], status="in_progress"
                ),
            ])
            await session.commit()
            
            print(f"Seeded project {project.id} with sample comment threads")
            for user in (admin, member, client):
                print(f"  {user.role.value:12} {user.name:6} token: {create_token(user.id)}")
        
    except Exception as e:
        print(f"Error seeding database: {e}")
        raise
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(seed_dev_database())
