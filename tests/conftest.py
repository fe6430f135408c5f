"""Shared test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sprinter.db.base import Base
from sprinter.db.engine import create_db_engine
# Import all models to register with Base.metadata
import sprinter.db.models  # noqa: F401
from sprinter.api.middleware.auth import create_access_token
from sprinter.models.enums import SystemRole
from sprinter.services.users import create_user


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_db_engine("sqlite+aiosqlite:///")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def file_session_factory(tmp_path):
    """Session factory over a file-backed database, one connection per session."""
    engine = create_db_engine(f"sqlite+aiosqlite:///{tmp_path / 'sprinter.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create a test database session."""
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(db_engine):
    """Create a test application instance with in-memory DB."""
    from sprinter.main import create_app

    _app = create_app()
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    _app.state.db_engine = db_engine
    _app.state.db_session_factory = session_factory
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(db_session):
    """Factory that inserts and commits a user; returns its user_id."""

    async def _make(username: str, system_role: SystemRole = SystemRole.USER) -> str:
        user = await create_user(
            db_session,
            username,
            f"{username}@example.com",
            username.title(),
            system_role=system_role,
        )
        await db_session.commit()
        return user.user_id

    return _make


@pytest.fixture
def auth_headers():
    """Build a Bearer header for a user id."""

    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers
