"""Shared test fixtures for all test groups.

Database-backed tests run against TEST_DATABASE_URL when set (e.g. a local
PostgreSQL), otherwise against a throwaway SQLite file per test.
"""

import os
import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from stagegate.core.auth import Actor
from stagegate.db.base import Base, build_engine
from stagegate.db.models.approval import Approval
from stagegate.db.models.project import Project
from stagegate.db.models.project_document import ProjectDocument
from stagegate.db.seed import seed_workflow_stages
from stagegate.services.stage_registry import StageRegistry


@pytest.fixture
def db_url(tmp_path) -> str:
    return os.getenv("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'stagegate_test.db'}")


@pytest.fixture
async def engine(db_url: str) -> AsyncEngine:
    """Create the test engine with a fresh schema."""
    import stagegate.db.models  # noqa: F401

    engine = build_engine(db_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def stages(session_factory) -> dict:
    """Seeded default workflow stages keyed by slug."""
    await seed_workflow_stages(session_factory)
    registry = StageRegistry(session_factory)
    return {s.slug: s for s in await registry.get_workflow_stages()}


@pytest.fixture
def make_project(session_factory):
    """Factory inserting a Project; keyword arguments override the defaults."""

    async def _make(**overrides) -> Project:
        data = {
            "title": "Hydraulic manifold block",
            "description": "Machined aluminium manifold for a customer hydraulic power unit, 200 units",
            "customer_id": "cust-001",
            "priority_level": "high",
            "estimated_value": Decimal("15000.00"),
            "status": "active",
        }
        data.update(overrides)
        project = Project(**data)
        async with session_factory() as session:
            session.add(project)
            await session.commit()
        return project

    return _make


@pytest.fixture
def add_document(session_factory):
    """Factory attaching a ProjectDocument to a project."""

    async def _add(project_id: uuid.UUID, category: str, file_name: str | None = None, **overrides) -> ProjectDocument:
        document = ProjectDocument(
            project_id=project_id,
            category=category,
            file_name=file_name or f"{category}.pdf",
            file_size=overrides.pop("file_size", 200_000),
            **overrides,
        )
        async with session_factory() as session:
            session.add(document)
            await session.commit()
        return document

    return _add


@pytest.fixture
def add_approval(session_factory):
    """Factory inserting an Approval row."""

    async def _add(project_id, stage_id, role: str, status: str = "pending", **overrides) -> Approval:
        approval = Approval(
            project_id=project_id,
            stage_id=stage_id,
            approver_role=role,
            status=status,
            due_date=overrides.pop("due_date", datetime.now(UTC) + timedelta(days=3)),
            **overrides,
        )
        async with session_factory() as session:
            session.add(approval)
            await session.commit()
        return approval

    return _add


@pytest.fixture
def sales_user() -> Actor:
    return Actor(user_id="user-sales", roles=frozenset({"sales"}))


@pytest.fixture
def manager_user() -> Actor:
    return Actor(user_id="user-manager", roles=frozenset({"manager"}))


@pytest.fixture
def director_user() -> Actor:
    """Holds bypass and non-sequential move capabilities."""
    return Actor(user_id="user-director", roles=frozenset({"management"}))
