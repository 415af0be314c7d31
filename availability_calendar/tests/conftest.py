import pytest_asyncio
import uuid
import os
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only-min-32-chars")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SKIP_CONFIG_VALIDATION", "true")

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["COOKIE_SECURE"] = "false"

import sys
from pathlib import Path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from availability_calendar.main import app
from availability_calendar.database import get_db
from availability_calendar.models import Base, User

TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"


@pytest_asyncio.fixture
async def async_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False}
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()

    db_file = Path("./test.db")
    if db_file.exists():
        db_file.unlink()


@pytest_asyncio.fixture
async def async_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    async_session_maker = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def async_client(async_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        yield async_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        timeout=30.0
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


def _get_unique_user_data(base_name: str = "testuser"):
    unique_id = str(uuid.uuid4())[:8]
    return {
        "display_name": f"{base_name}_{unique_id}",
        "email": f"{base_name}_{unique_id}@example.com",
        "password": "TestPass123!",
        "first_name": "Test",
        "last_name": "User"
    }


@pytest_asyncio.fixture
async def test_user_data():
    return _get_unique_user_data("testuser")


@pytest_asyncio.fixture
async def second_user_data():
    return _get_unique_user_data("seconduser")


@pytest_asyncio.fixture
async def make_user(async_session: AsyncSession):
    async def _make_user(display_name: str | None = None) -> User:
        data = _get_unique_user_data(display_name or "calendaruser")
        user = User(
            display_name=display_name or data["display_name"],
            email=data["email"],
            password_hash="not-a-real-hash",
        )
        async_session.add(user)
        await async_session.commit()
        await async_session.refresh(user)
        return user

    return _make_user
