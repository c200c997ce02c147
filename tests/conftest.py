"""
Test infrastructure for the Blogging API.

Strategy
--------
- SQLite in-memory via aiosqlite replaces PostgreSQL, so the suite needs
  no running database.
- StaticPool makes every session share the one in-memory connection;
  a second connection would see an empty database.
- The repository under test opens its own sessions, exactly as in
  production, but from the test session factory.
- ``get_post_service`` is overridden so HTTP requests hit the test
  database and a fixed clock.
- Tables are created before and dropped after every test.
"""
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from blogging.database import Base
from blogging.dependencies import get_post_service
from blogging.main import app
from blogging.middleware import install_query_counter
from blogging.models import PostRecord, PostTagRecord
from blogging.repository import PostRepository
from blogging.services.post_service import PostService

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)

FIXED_NOW = datetime(2024, 9, 29, 17, 47, 25, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


# ---------------------------------------------------------------------------
# Dependency override
# ---------------------------------------------------------------------------

def override_get_post_service() -> PostService:
    return PostService(PostRepository(async_session_test), clock=fixed_clock)


app.dependency_overrides[get_post_service] = override_get_post_service


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def repository() -> PostRepository:
    return PostRepository(async_session_test)


@pytest.fixture
def service(repository: PostRepository) -> PostService:
    return PostService(repository, clock=fixed_clock)


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def drop_table(table) -> None:
    """Drop a single table so the next statement against it fails."""
    async with engine_test.begin() as conn:
        await conn.run_sync(table.drop)


async def count_posts() -> int:
    async with async_session_test() as session:
        q = select(func.count()).select_from(PostRecord)
        return (await session.execute(q)).scalar_one()


async def tag_rows(post_id: int | None = None) -> list[tuple[int, str]]:
    """(post_id, tag_name) rows of post_tags in insertion order."""
    q = select(PostTagRecord.post_id, PostTagRecord.tag_name).order_by(PostTagRecord.id)
    if post_id is not None:
        q = q.where(PostTagRecord.post_id == post_id)
    async with async_session_test() as session:
        return [tuple(row) for row in (await session.execute(q)).all()]
