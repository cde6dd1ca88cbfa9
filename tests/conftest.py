# tests/conftest.py
import os
import sys

# Добавляем корень репозитория в PYTHONPATH, чтобы 'import teamcal...' работал
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Тестовое окружение: in-memory SQLite, фиксированный секрет сессии
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SESSION_SECRET_KEY", "test-secret")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

from typing import AsyncIterator, Dict

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from teamcal.core.auth.rate_limit import RateLimitResult, get_rate_limiter
from teamcal.core.users.models import Role, User
from teamcal.db.base import async_session_context, create_db_and_tables, drop_db_and_tables
from teamcal.db.seed import seed_users
from teamcal.main import app

TEST_USERS = (
    ("admin@example.com", "Admin", Role.ADMIN),
    ("alice@example.com", "Alice", Role.USER),
    ("bob@example.com", "Bob", Role.USER),
)


class FakeLimiter:
    """Лимитер без Redis: пропускает ``limit`` запросов, дальше 429."""

    def __init__(self, limit: int = 1000) -> None:
        self.limit = limit
        self.calls = 0

    async def hit(self, key: str) -> RateLimitResult:
        self.calls += 1
        if self.calls > self.limit:
            return RateLimitResult(allowed=False, remaining=0)
        return RateLimitResult(allowed=True, remaining=self.limit - self.calls)


@pytest_asyncio.fixture(scope="function", autouse=True)
async def setup_db():
    await create_db_and_tables()
    yield
    await drop_db_and_tables()


@pytest_asyncio.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    async with async_session_context() as session:
        yield session


@pytest_asyncio.fixture
async def users() -> Dict[str, User]:
    """admin / alice / bob, закоммиченные в БД."""
    async with async_session_context() as session:
        seeded = await seed_users(session, TEST_USERS)
    return {u.email.split("@")[0]: u for u in seeded}


@pytest.fixture
def limiter() -> FakeLimiter:
    return FakeLimiter()


@pytest_asyncio.fixture
async def client(limiter: FakeLimiter) -> AsyncIterator[httpx.AsyncClient]:
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def login(client: httpx.AsyncClient, email: str) -> httpx.Response:
    response = await client.post("/auth/login", json={"email": email})
    assert response.status_code == 200, response.text
    return response
