import asyncio
import pytest
from typing import AsyncGenerator
from datetime import datetime, timezone
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fittrack.db.base import Base
from fittrack.db.kv_store import SqlKeyValueStore
from fittrack.db.session import get_db
from fittrack.main import app
from fittrack.models import KeyValueEntry  # noqa: F401 - register kv_entries on Base.metadata
from fittrack.services.session_lifecycle import SessionManager


@pytest.fixture(scope="function")
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
def session_maker(db_engine):
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def store(db_session):
    return SqlKeyValueStore(db_session)


class MemoryStore:
    """In-memory key-value store that yields to the event loop on every call.

    Keys in failing_reads raise OperationalError on get, like a locked database.
    """

    def __init__(self):
        self.data: dict[str, str] = {}
        self.failing_reads: set[str] = set()

    async def get(self, key):
        await asyncio.sleep(0)
        if key in self.failing_reads:
            raise OperationalError("SELECT", {}, Exception("database is locked"))
        return self.data.get(key)

    async def set(self, key, value):
        await asyncio.sleep(0)
        self.data[key] = value

    async def remove(self, key):
        await asyncio.sleep(0)
        self.data.pop(key, None)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def manager():
    return SessionManager()


@pytest.fixture
def now():
    return datetime(2025, 3, 10, 18, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
async def client(db_session, manager) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    # ASGITransport does not run the lifespan
    app.state.session_manager = manager
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
