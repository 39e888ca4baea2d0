"""Service test fixtures — async DB + FastAPI test client + member factory.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test engine
    - make_member inserts profile, roles and a bearer token in one commit

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
    - Members authenticate with real tokens through the normal dependency chain,
      so identity resolution is covered by every route test
"""

from dataclasses import dataclass
from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from mutual_aid.db.base import Base
from mutual_aid.infrastructure.database import get_db, DatabaseSessionManager
import mutual_aid.infrastructure.database as db_module
from mutual_aid.main import app
from mutual_aid.models.access_token import AccessToken
from mutual_aid.models.profile import Profile
from mutual_aid.models.user_role import UserRole
from mutual_aid.services.identity_resolver import hash_token


@dataclass
class Member:
    id: UUID
    token: str

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_member(test_db):
    """Factory: insert a profile with roles and an active bearer token."""
    async def _make(
        name: str = "Member", status: str = "approved", roles: tuple[str, ...] = (),
    ) -> Member:
        profile = Profile(full_name=name, email=f"{uuid4().hex[:8]}@example.org", status=status)
        test_db.add(profile)
        await test_db.flush()
        for role in roles:
            test_db.add(UserRole(user_id=profile.id, role=role))
        token = f"tok-{uuid4().hex}"
        test_db.add(AccessToken(user_id=profile.id, token_hash=hash_token(token)))
        await test_db.commit()
        return Member(id=profile.id, token=token)

    return _make


@pytest.fixture
async def member(make_member):
    return await make_member("Alice")


@pytest.fixture
async def other_member(make_member):
    return await make_member("Bob")


@pytest.fixture
async def admin(make_member):
    return await make_member("Admin", roles=("admin", "user"))
