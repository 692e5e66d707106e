"""Shared fixtures for the rights engine test suite.

Unit tests run against the in-memory grant store. Integration tests get a
fresh in-memory SQLite database per test, seeded with the same scenario:

  alice (1) owns project 100 with bucket 200, task 300 and saved filter 400;
  bob (2) is a member of team "editors" (10); carol (3) belongs to nothing.
"""

import os

# Use test settings before any app imports.
os.environ["ENV"] = "test"

import jwt
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from taskrights.config import get_settings
from taskrights.core.resources import bucket, project, saved_filter, task
from taskrights.core.services.capability_gate import CapabilityGate
from taskrights.core.services.grant_store import MemoryGrantStore
from taskrights.core.services.permission_service import PermissionEvaluator
from taskrights.database.database import get_db, init_db
from taskrights.database.models.resource import Bucket, Project, SavedFilter, Task
from taskrights.database.models.user import Team, TeamMember, User
from taskrights.main import app

ALICE, BOB, CAROL = 1, 2, 3
EDITORS = 10
P1, B1, T1, F1 = 100, 200, 300, 400


@pytest.fixture
def store() -> MemoryGrantStore:
    store = MemoryGrantStore()
    store.add_user(ALICE, "alice")
    store.add_user(BOB, "bob")
    store.add_user(CAROL, "carol")
    store.add_team(EDITORS, "editors", members=[BOB])

    store.add_resource(project(P1), owner_id=ALICE)
    store.add_resource(bucket(B1), owner_id=ALICE, parent=project(P1))
    store.add_resource(task(T1), owner_id=ALICE, parent=project(P1))
    store.add_resource(saved_filter(F1), owner_id=ALICE)
    return store


@pytest.fixture
def evaluator(store) -> PermissionEvaluator:
    return PermissionEvaluator(store)


@pytest.fixture
def gate(evaluator) -> CapabilityGate:
    return CapabilityGate(evaluator)


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(db_engine):
    """Per-test session over a seeded database."""
    session_factory = sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        session.add_all([
            User(id=ALICE, username="alice"),
            User(id=BOB, username="bob"),
            User(id=CAROL, username="carol"),
            Team(id=EDITORS, name="editors", created_by_id=ALICE),
        ])
        await session.flush()
        session.add_all([
            TeamMember(team_id=EDITORS, user_id=BOB),
            Project(id=P1, title="Groceries", owner_id=ALICE),
        ])
        await session.flush()
        session.add_all([
            Bucket(id=B1, title="Backlog", project_id=P1, created_by_id=ALICE),
            Task(id=T1, title="Buy milk", project_id=P1, created_by_id=ALICE),
            SavedFilter(id=F1, title="Due today", owner_id=ALICE),
        ])
        await session.commit()
        yield session


@pytest_asyncio.fixture
async def client(db):
    """HTTP client with the DB dependency overridden to use the test session."""

    async def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


def make_token(subject, **claims) -> str:
    settings = get_settings()
    payload = {"type": "user", "sub": str(subject)}
    payload.update(claims)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def auth_headers(subject, **claims) -> dict:
    return {"Authorization": f"Bearer {make_token(subject, **claims)}"}
